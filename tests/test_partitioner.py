# tests/test_partitioner.py
import itertools
import random
from collections import Counter

import pytest

from app.modules.trios.partitioner import (
    absorb_into_last_group,
    get_remainder_policy,
    partition,
    spread_from_last_group,
)

# -------------------------------
# Coverage and sizes
# -------------------------------

@pytest.mark.parametrize("n", range(3, 40))
def test_partition_covers_everyone_once(n):
    members = [f"u{i}" for i in range(n)]
    groups = partition(members, rng=random.Random(n))

    flat = [m for g in groups for m in g]
    assert sorted(flat) == sorted(members)
    assert len(set(flat)) == n
    assert all(3 <= len(g) <= 5 for g in groups)
    assert sum(len(g) for g in groups) == n


@pytest.mark.parametrize("n, expected_sizes", [
    (3, [3]),
    (4, [4]),
    (5, [5]),
    (6, [3, 3]),
    (7, [3, 4]),
    (8, [3, 5]),
    (9, [3, 3, 3]),
    (10, [3, 3, 4]),
])
def test_partition_last_group_absorbs_remainder(n, expected_sizes):
    groups = partition(list(range(n)), rng=random.Random(0))
    assert [len(g) for g in groups] == expected_sizes


def test_partition_rejects_fewer_than_three():
    with pytest.raises(ValueError):
        partition(["a", "b"])


def test_partition_does_not_mutate_input():
    members = ["a", "b", "c", "d", "e", "f", "g"]
    partition(members, rng=random.Random(3))
    assert members == ["a", "b", "c", "d", "e", "f", "g"]


def test_partition_uses_system_random_by_default():
    groups = partition(list(range(12)))
    assert sorted(m for g in groups for m in g) == list(range(12))


# -------------------------------
# Remainder policies
# -------------------------------

def test_spread_policy_keeps_groups_at_most_four_when_possible():
    groups = partition(list(range(11)), policy=spread_from_last_group, rng=random.Random(1))
    assert sorted(len(g) for g in groups) == [3, 4, 4]


def test_spread_policy_single_group_takes_all_leftovers():
    groups = partition(list(range(5)), policy=spread_from_last_group, rng=random.Random(1))
    assert [len(g) for g in groups] == [5]


def test_absorb_policy_without_leftovers_is_noop():
    groups = [["a", "b", "c"], ["d", "e", "f"]]
    assert absorb_into_last_group(groups, []) == [["a", "b", "c"], ["d", "e", "f"]]


def test_get_remainder_policy():
    assert get_remainder_policy("absorb_last") is absorb_into_last_group
    assert get_remainder_policy("spread") is spread_from_last_group
    with pytest.raises(ValueError):
        get_remainder_policy("smallest_last")


# -------------------------------
# Fairness
# -------------------------------

def test_co_membership_is_uniform():
    # 6 members -> two trios; any given pair shares a trio with probability 2/5
    members = list(range(6))
    rng = random.Random(2024)
    runs = 6000
    together = Counter()
    for _ in range(runs):
        for group in partition(members, rng=rng):
            for pair in itertools.combinations(sorted(group), 2):
                together[pair] += 1

    for pair in itertools.combinations(members, 2):
        assert abs(together[pair] / runs - 0.4) < 0.05, pair


def test_every_member_reaches_every_position():
    members = list(range(7))
    rng = random.Random(7)
    first_slot = Counter(partition(members, rng=rng)[0][0] for _ in range(7000))
    for m in members:
        assert abs(first_slot[m] / 7000 - 1 / 7) < 0.03
