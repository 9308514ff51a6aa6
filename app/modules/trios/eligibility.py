from datetime import date
from typing import List
import logging

from app.modules.trios.schemas import Candidate

logger = logging.getLogger(__name__)


def calculate_age(birthday: date, today: date) -> int:
    """Whole years between birthday and today; one less if this year's birthday hasn't happened yet."""
    age = today.year - birthday.year
    if (today.month, today.day) < (birthday.month, birthday.day):
        age -= 1
    return age


def is_eligible(candidate: Candidate, today: date, minimum_age: int) -> bool:
    if candidate.birthday is None:
        logger.warning(f"Skipping candidate {candidate.user_id}: missing or invalid birthday")
        return False
    return calculate_age(candidate.birthday, today) >= minimum_age


def filter_eligible(
    candidates: List[Candidate],
    today: date,
    minimum_age: int
) -> List[Candidate]:
    """Keep candidates old enough on `today`. Repeated user_ids keep their first occurrence."""
    seen = set()
    eligible = []
    for candidate in candidates:
        if candidate.user_id in seen:
            continue
        seen.add(candidate.user_id)
        if is_eligible(candidate, today, minimum_age):
            eligible.append(candidate)
    return eligible
