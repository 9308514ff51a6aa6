"""
Daily trio formation pipeline.

guard -> eligibility -> partition -> persist -> hooks. Storage failures in the
first four stages raise TrioStorageError; hook failures are logged and only
reported back in the result.
"""

import logging
import random
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from app.config import settings
from app.modules.trios.eligibility import filter_eligible
from app.modules.trios.hooks import run_post_formation_hooks
from app.modules.trios.models import GROUP_SIZE
from app.modules.trios.partitioner import RemainderPolicy, get_remainder_policy, partition
from app.modules.trios.schemas import FormationOutcome, FormationResult, FormedGroup
from app.modules.trios.service import TrioService

logger = logging.getLogger(__name__)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class GroupFormationJob:
    def __init__(
        self,
        service: TrioService,
        minimum_age: Optional[int] = None,
        policy: Optional[RemainderPolicy] = None,
        use_batch_lock: Optional[bool] = None,
        rng: Optional[random.Random] = None,
        claim_stale_seconds: Optional[int] = None
    ):
        self.service = service
        self.minimum_age = settings.minimum_age if minimum_age is None else minimum_age
        self.policy = policy or get_remainder_policy(settings.remainder_policy)
        self.use_batch_lock = (
            settings.formation_batch_lock_enabled if use_batch_lock is None else use_batch_lock
        )
        self.rng = rng
        self.claim_stale_after = timedelta(seconds=(
            settings.formation_claim_stale_seconds if claim_stale_seconds is None else claim_stale_seconds
        ))

    def _claim(self, today: date) -> Optional[FormationOutcome]:
        """Claim the date for this run. Returns the outcome to stop with, or None to go on inserting."""
        if self.service.claim_formation_date(today):
            return None
        if self.service.trios_exist_for_date(today):
            logger.info("Trios were formed by a concurrent run, skipping")
            return FormationOutcome.ALREADY_FORMED
        claimed_at = self.service.get_formation_claim_time(today)
        if claimed_at is None:
            # claim vanished between our insert and read; one more try
            return None if self.service.claim_formation_date(today) else FormationOutcome.IN_PROGRESS
        if datetime.now(timezone.utc) - claimed_at < self.claim_stale_after:
            logger.info(f"Formation for {today.isoformat()} claimed at {claimed_at.isoformat()} is still in progress")
            return FormationOutcome.IN_PROGRESS
        if self.service.take_over_stale_claim(today, claimed_at):
            return None
        return FormationOutcome.IN_PROGRESS

    def run(self, target_date: Optional[date] = None) -> FormationResult:
        today = target_date or utc_today()
        logger.info(f"Starting trio randomization for {today.isoformat()}")

        if self.service.trios_exist_for_date(today):
            logger.info("Trios already exist for today, skipping")
            return FormationResult(outcome=FormationOutcome.ALREADY_FORMED, date=today)

        candidates = self.service.list_candidates()
        if len(candidates) < GROUP_SIZE:
            logger.info(f"Not enough users to form trios ({len(candidates)})")
            return FormationResult(outcome=FormationOutcome.NOT_ENOUGH_USERS, date=today)
        logger.info(f"Found {len(candidates)} profiles")

        eligible = filter_eligible(candidates, today, self.minimum_age)
        logger.info(f"Found {len(eligible)} eligible profiles (age {self.minimum_age}+)")
        if len(eligible) < GROUP_SIZE:
            logger.info("Not enough eligible users to form trios")
            return FormationResult(outcome=FormationOutcome.NOT_ENOUGH_ELIGIBLE_USERS, date=today)

        member_groups = partition([c.user_id for c in eligible], self.policy, self.rng)
        groups = [FormedGroup(member_ids=members, date=today) for members in member_groups]

        if self.use_batch_lock:
            stop = self._claim(today)
            if stop is not None:
                return FormationResult(outcome=stop, date=today)

        logger.info(f"Creating {len(groups)} trios")
        try:
            persisted = self.service.insert_groups(groups)
        except Exception:
            if self.use_batch_lock:
                self.service.release_formation_date(today)
            raise
        logger.info(f"Successfully created {len(persisted)} trios for {today.isoformat()}")

        hook_failures = run_post_formation_hooks(self.service, persisted)
        return FormationResult(
            outcome=FormationOutcome.COMPLETED,
            date=today,
            groups=persisted,
            hook_failures=hook_failures,
        )
