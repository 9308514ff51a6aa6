import asyncio
import logging
from app.config import settings
from app.database.supabase_client import SupabaseClient
from app.modules.trios.formation import GroupFormationJob
from app.modules.trios.service import TrioService

logger = logging.getLogger(__name__)


async def form_todays_trios():
    """One scheduler tick. Idempotent per date, so ticking more often than daily is harmless."""
    try:
        service = TrioService(SupabaseClient.get_service_client())
        result = await asyncio.to_thread(GroupFormationJob(service).run)
        logger.info(f"Scheduled trio formation for {result.date.isoformat()}: {result.message}")
    except Exception as e:
        logger.error(f"Error in scheduled trio formation: {str(e)}")


async def formation_scheduler_loop():
    """Background task that periodically tries to form today's trios"""
    while True:
        try:
            await form_todays_trios()
        except Exception as e:
            logger.error(f"Error in trio scheduler loop: {str(e)}")

        await asyncio.sleep(settings.formation_interval_seconds)
