"""
Shuffle and partition eligible candidates into daily groups.

Groups are sliced in threes from a uniformly shuffled list; what happens to
the 0-2 leftover members is decided by a remainder policy so the shuffle and
slicing never change when the business rule does.
"""

import random
from typing import Callable, Dict, List, Optional, Sequence, TypeVar

from app.modules.trios.models import GROUP_SIZE

T = TypeVar("T")

# each policy must implement:
# def policy(groups: List[List[T]], leftovers: List[T]) -> List[List[T]]
# groups: complete groups of GROUP_SIZE in shuffle order, leftovers: len < GROUP_SIZE
RemainderPolicy = Callable[[List[List[T]], List[T]], List[List[T]]]


def absorb_into_last_group(groups: List[List[T]], leftovers: List[T]) -> List[List[T]]:
    """Append every leftover to the last group (sizes 3, 4 or 5)."""
    if leftovers:
        groups[-1].extend(leftovers)
    return groups


def spread_from_last_group(groups: List[List[T]], leftovers: List[T]) -> List[List[T]]:
    """Hand leftovers out one per group, last group first, wrapping when there is a single group."""
    for i, member in enumerate(leftovers):
        groups[-1 - (i % len(groups))].append(member)
    return groups


REMAINDER_POLICIES: Dict[str, RemainderPolicy] = {
    "absorb_last": absorb_into_last_group,
    "spread": spread_from_last_group,
}


def get_remainder_policy(name: str) -> RemainderPolicy:
    try:
        return REMAINDER_POLICIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown remainder policy '{name}', expected one of {sorted(REMAINDER_POLICIES)}"
        )


def shuffle_candidates(items: Sequence[T], rng: Optional[random.Random] = None) -> List[T]:
    """Return a uniformly shuffled copy (Fisher-Yates via random.shuffle)."""
    shuffled = list(items)
    (rng or random.SystemRandom()).shuffle(shuffled)
    return shuffled


def partition(
    items: Sequence[T],
    policy: RemainderPolicy = absorb_into_last_group,
    rng: Optional[random.Random] = None
) -> List[List[T]]:
    """
    Shuffle `items` and split them into groups of GROUP_SIZE, leaving the
    remainder to `policy`. Every item lands in exactly one group.

    Raises ValueError for fewer than GROUP_SIZE items.
    """
    if len(items) < GROUP_SIZE:
        raise ValueError(f"Need at least {GROUP_SIZE} members to form a group, got {len(items)}")

    shuffled = shuffle_candidates(items, rng)
    complete_groups = len(shuffled) // GROUP_SIZE
    groups = [
        shuffled[i * GROUP_SIZE:(i + 1) * GROUP_SIZE]
        for i in range(complete_groups)
    ]
    leftovers = shuffled[complete_groups * GROUP_SIZE:]
    return policy(groups, leftovers)
