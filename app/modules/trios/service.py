from supabase import Client
from postgrest.exceptions import APIError
from app.modules.trios.models import TRIOS_TABLE, PROFILES_TABLE, FORMATION_BATCHES_TABLE
from app.modules.trios.schemas import Candidate, FormedGroup, PersistedGroup
from pydantic import TypeAdapter
from typing import List, Optional
from datetime import date, datetime, timezone
import logging

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"

_DATETIME = TypeAdapter(datetime)


class TrioStorageError(Exception):
    """A read or write against Supabase failed; fatal for the formation run."""

    def __init__(self, stage: str, cause: Exception):
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage} failed: {_describe(cause)}")


def _describe(error: Exception) -> str:
    if isinstance(error, APIError):
        return error.message or str(error)
    return str(error)


class TrioService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def trios_exist_for_date(self, target_date: date) -> bool:
        """True if at least one trio row exists for the date"""
        try:
            result = self.supabase.table(TRIOS_TABLE)\
                .select("id")\
                .eq("date", target_date.isoformat())\
                .limit(1)\
                .execute()
        except Exception as e:
            raise TrioStorageError("checking existing trios", e)
        return bool(result.data)

    def list_candidates(self) -> List[Candidate]:
        """Load every profile as a candidate"""
        try:
            result = self.supabase.table(PROFILES_TABLE)\
                .select("user_id, birthday")\
                .execute()
        except Exception as e:
            raise TrioStorageError("fetching profiles", e)
        return [Candidate(**profile) for profile in (result.data or [])]

    def claim_formation_date(self, target_date: date) -> bool:
        """Insert the per-date batch row. False if another run already claimed the date."""
        try:
            self.supabase.table(FORMATION_BATCHES_TABLE).insert({
                "date": target_date.isoformat()
            }).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                logger.info(f"Formation batch for {target_date} already claimed")
                return False
            raise TrioStorageError("claiming formation date", e)
        except Exception as e:
            raise TrioStorageError("claiming formation date", e)
        return True

    def get_formation_claim_time(self, target_date: date) -> Optional[datetime]:
        """When the date was claimed, or None if it is unclaimed"""
        try:
            result = self.supabase.table(FORMATION_BATCHES_TABLE)\
                .select("created_at")\
                .eq("date", target_date.isoformat())\
                .limit(1)\
                .execute()
        except Exception as e:
            raise TrioStorageError("reading formation claim", e)
        if not result.data:
            return None
        claimed_at = _DATETIME.validate_python(result.data[0]["created_at"])
        if claimed_at.tzinfo is None:
            claimed_at = claimed_at.replace(tzinfo=timezone.utc)
        return claimed_at

    def take_over_stale_claim(self, target_date: date, claimed_at: datetime) -> bool:
        """Delete the claim seen at `claimed_at` (left by a failed run), then claim the date again.
        Only that exact claim is deleted, so a concurrent takeover keeps its fresh claim."""
        try:
            self.supabase.table(FORMATION_BATCHES_TABLE)\
                .delete()\
                .eq("date", target_date.isoformat())\
                .eq("created_at", claimed_at.isoformat())\
                .execute()
        except Exception as e:
            raise TrioStorageError("releasing stale formation claim", e)
        logger.warning(f"Released stale formation claim for {target_date} from {claimed_at.isoformat()}")
        return self.claim_formation_date(target_date)

    def release_formation_date(self, target_date: date) -> None:
        """Drop the batch claim so a later run can retry the date. A claim that can't be dropped goes stale and is taken over later."""
        try:
            self.supabase.table(FORMATION_BATCHES_TABLE)\
                .delete()\
                .eq("date", target_date.isoformat())\
                .execute()
        except Exception as e:
            logger.error(f"Failed to release formation claim for {target_date}: {_describe(e)}")

    def insert_groups(self, groups: List[FormedGroup]) -> List[PersistedGroup]:
        """Insert all groups with a single batched insert so the date never holds a partial set"""
        rows = [group.to_row() for group in groups]
        try:
            result = self.supabase.table(TRIOS_TABLE).insert(rows).execute()
        except Exception as e:
            raise TrioStorageError("inserting trios", e)
        if not result.data or len(result.data) != len(rows):
            raise TrioStorageError(
                "inserting trios",
                RuntimeError(f"expected {len(rows)} rows back, got {len(result.data or [])}")
            )
        return [PersistedGroup.from_row(row) for row in result.data]

    def cleanup_expired_content(self) -> None:
        """Delete posts and replies whose 24h window has passed"""
        self.supabase.rpc("cleanup_expired_content", {}).execute()

    def notify_group_members(self, group: PersistedGroup) -> None:
        """Emit a group_formed notification to every member of the group"""
        self.supabase.rpc("create_group_notifications", {"p_trio_id": group.id}).execute()
