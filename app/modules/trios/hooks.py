import logging
from typing import List

from app.modules.trios.schemas import PersistedGroup
from app.modules.trios.service import TrioService

logger = logging.getLogger(__name__)

CLEANUP_HOOK = "cleanup_expired_content"
NOTIFY_HOOK = "notify_group_members"


def run_cleanup(service: TrioService) -> bool:
    try:
        service.cleanup_expired_content()
    except Exception as e:
        # trios are already persisted; cleanup is retried on the next run
        logger.error(f"Error cleaning up expired content: {str(e)}")
        return False
    logger.info("Successfully cleaned up expired content")
    return True


def run_notifications(service: TrioService, groups: List[PersistedGroup]) -> bool:
    """Notify each group independently; one failing group does not stop the rest."""
    ok = True
    for group in groups:
        try:
            service.notify_group_members(group)
            logger.info(
                f"Notified trio {group.id} ({group.member_count} members) for {group.date.isoformat()}"
            )
        except Exception as e:
            logger.error(f"Error notifying members of trio {group.id}: {str(e)}")
            ok = False
    return ok


def run_post_formation_hooks(service: TrioService, groups: List[PersistedGroup]) -> List[str]:
    """Cleanup, then notifications. Returns the names of hooks that failed."""
    failures = []
    if not run_cleanup(service):
        failures.append(CLEANUP_HOOK)
    if not run_notifications(service, groups):
        failures.append(NOTIFY_HOOK)
    return failures
