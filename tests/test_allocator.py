import math
import random
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from group_allocator.engine import (
    AllocationFailure,
    AllocationSuccess,
    Allocator,
    InvalidConfiguration,
    allocate,
    rank_students,
    ranking_key,
)
from group_allocator.errors import AllocationFailureError, InvalidConfigurationError
from group_allocator.models.config import AllocationConfig
from group_allocator.models.student import Student

GENDERS = ["Female", "Male", "Non-binary"]
ETHNICITIES = ["Asian", "Black or African American", "Hispanic", "White"]
YEARS = ["Freshman", "Sophomore", "Junior", "Senior"]
SKILLS = ["excel", "writing", "speaking"]


def _student(student_id, gender="F", ethnicity="A", year="Y1", **skills):
    return Student(
        student_id=student_id,
        gender=gender,
        ethnicity=ethnicity,
        academic_year=year,
        status="No",
        skills=skills,
    )


def _random_roster(size, seed):
    rng = random.Random(seed)
    return [
        Student(
            student_id=f"s{i:03d}",
            gender=rng.choice(GENDERS),
            ethnicity=rng.choice(ETHNICITIES),
            academic_year=rng.choice(YEARS),
            status=rng.choice(["Yes", "No"]),
            skills={skill: rng.randint(0, 5) for skill in SKILLS},
        )
        for i in range(size)
    ]


PRIORITIES = {"excel": 5.0, "writing": 2.0, "speaking": 1.0}


def test_ranking_key_uses_prioritised_key_skills():
    student = _student("a", excel=3, writing=4, speaking=5)
    assert ranking_key(student, {"excel": 2.0, "writing": 1.0}) == (4, 10.0)
    assert ranking_key(student, {"excel": 1.0}) == (0, 3.0)


def test_rank_students_is_stable_for_equal_keys():
    roster = [
        _student("first", excel=2),
        _student("strong", excel=5),
        _student("second", excel=2),
        _student("middle", excel=4),
    ]
    ranked = rank_students(roster, {"excel": 1.0})
    assert [s.student_id for s in ranked] == ["strong", "middle", "first", "second"]


def test_build_groups_target_sizes():
    groups = Allocator.build_groups(10, 4)
    assert [g.target_size for g in groups] == [4, 3, 3]
    assert [g.index for g in groups] == [0, 1, 2]

    groups = Allocator.build_groups(13, 3)
    assert [g.target_size for g in groups] == [3, 3, 3, 2, 2]
    assert sum(g.target_size for g in groups) == 13


def test_exact_divisibility():
    roster = _random_roster(8, seed=1)
    result = allocate(roster, AllocationConfig(group_size=4, skill_priorities=PRIORITIES))
    assert isinstance(result, AllocationSuccess)
    assert [g.size for g in result.groups] == [4, 4]
    assert [g.name for g in result.groups] == ["Group 1", "Group 2"]
    assert [g.number for g in result.groups] == [1, 2]


def test_remainder_goes_to_first_groups():
    roster = _random_roster(10, seed=2)
    result = allocate(roster, AllocationConfig(group_size=4, skill_priorities=PRIORITIES))
    assert result.ok
    assert [g.size for g in result.groups] == [4, 3, 3]


def test_key_skill_holders_are_spread():
    roster = [_student("expert1", excel=5), _student("expert2", excel=5)]
    roster += [_student(f"novice{i}", excel=1) for i in range(6)]
    result = allocate(roster, AllocationConfig(group_size=4, skill_priorities={"excel": 5}))
    assert result.ok
    assert len(result.groups) == 2
    placement = {
        sid: group.name for group in result.groups for sid in group.student_ids
    }
    assert placement["expert1"] != placement["expert2"]


def test_greedy_walkthrough_with_single_skill():
    roster = [_student(f"s{i:02d}", excel=i % 6) for i in range(12)]
    result = allocate(roster, AllocationConfig(group_size=3, skill_priorities={"excel": 1}))
    assert [list(g.student_ids) for g in result.groups] == [
        ["s05", "s02", "s01"],
        ["s11", "s08", "s07"],
        ["s04", "s03", "s00"],
        ["s10", "s09", "s06"],
    ]


def _mean_deviation(partition, levels):
    averages = [sum(levels[sid] for sid in members) / len(members) for members in partition]
    return sum(abs(3.5 - avg) for avg in averages) / len(averages)


def test_skill_averages_cluster_better_than_random_baseline():
    roster = [_student(f"s{i:02d}", excel=i % 6) for i in range(12)]
    levels = {s.student_id: s.skills["excel"] for s in roster}
    result = allocate(roster, AllocationConfig(group_size=3, skill_priorities={"excel": 1}))
    greedy = _mean_deviation([g.student_ids for g in result.groups], levels)

    baselines = []
    for seed in range(20):
        ids = [s.student_id for s in roster]
        random.Random(seed).shuffle(ids)
        baselines.append(_mean_deviation([ids[i:i + 3] for i in range(0, 12, 3)], levels))

    assert greedy == pytest.approx(1.0)
    assert greedy <= min(baselines) + 1e-9


@pytest.mark.parametrize("size", [1, 2, 3, 5, 7, 9, 16, 23, 40])
@pytest.mark.parametrize("group_size", [2, 3, 4, 5, 8])
def test_partition_and_balance_properties(size, group_size):
    roster = _random_roster(size, seed=size * 31 + group_size)
    config = AllocationConfig(group_size=group_size, skill_priorities=PRIORITIES)
    result = allocate(roster, config)
    assert result.ok

    assigned = [sid for g in result.groups for sid in g.student_ids]
    assert sorted(assigned) == sorted(s.student_id for s in roster)
    assert len(assigned) == len(set(assigned))

    sizes = [g.size for g in result.groups]
    assert max(sizes) - min(sizes) <= 1
    assert len(result.groups) == math.ceil(size / group_size)
    assert set(result.group_summaries) == {g.name for g in result.groups}
    assert len(result.rationales) == size


def test_allocation_is_deterministic():
    roster = _random_roster(17, seed=7)
    config = AllocationConfig(group_size=4, skill_priorities=PRIORITIES)
    first = allocate(roster, config)
    second = allocate(roster, config)
    assert first.groups == second.groups
    assert first.rationales == second.rationales


def test_invalid_configuration_outcomes():
    roster = _random_roster(4, seed=3)

    empty = allocate([], AllocationConfig(group_size=3))
    assert isinstance(empty, InvalidConfiguration)
    assert not empty.ok

    too_small = allocate(roster, AllocationConfig(group_size=1))
    assert isinstance(too_small, InvalidConfiguration)
    with pytest.raises(InvalidConfigurationError):
        too_small.unwrap()

    duplicated = allocate(roster + [roster[0]], AllocationConfig(group_size=2))
    assert isinstance(duplicated, InvalidConfiguration)

    bad_weight = allocate(roster, AllocationConfig(group_size=2, weights={"luck": 1.0}))
    assert isinstance(bad_weight, InvalidConfiguration)

    wordy_weight = allocate(roster, AllocationConfig(group_size=2, weights={"capacity": "heavy"}))
    assert isinstance(wordy_weight, InvalidConfiguration)
    assert "capacity" in wordy_weight.message

    nan_weight = allocate(roster, AllocationConfig(group_size=2, weights={"gender": float("nan")}))
    assert isinstance(nan_weight, InvalidConfiguration)

    nan_priority = allocate(
        roster, AllocationConfig(group_size=2, skill_priorities={"excel": float("nan")})
    )
    assert isinstance(nan_priority, InvalidConfiguration)


def test_missing_skill_is_an_allocation_failure():
    roster = [_student("a", excel=3), _student("b", writing=2)]
    outcome = allocate(roster, AllocationConfig(group_size=2, skill_priorities={"excel": 1}))
    assert isinstance(outcome, AllocationFailure)
    assert "b" in outcome.message
    assert not hasattr(outcome, "groups")
    with pytest.raises(AllocationFailureError):
        outcome.unwrap()


def test_weight_overrides_change_placement():
    roster = [
        _student("a", gender="F", excel=3),
        _student("b", gender="F", excel=3),
        _student("c", gender="M", excel=3),
        _student("d", gender="M", excel=3),
    ]
    config = AllocationConfig(group_size=2, skill_priorities={"excel": 1})
    default = allocate(roster, config)
    assert [set(g.student_ids) for g in default.groups] == [{"a", "c"}, {"b", "d"}]

    # without the capacity pull, "b" ties both groups and takes the first
    config.weights = {"capacity": 0.0}
    reweighted = allocate(roster, config)
    assert [set(g.student_ids) for g in reweighted.groups] == [{"a", "b"}, {"c", "d"}]


def test_package_result_attaches_rationales_and_summaries():
    roster = [_student("a", excel=5), _student("b", excel=1)]
    result = Allocator.run(roster, AllocationConfig(group_size=2, skill_priorities={"excel": 1}))
    assert len(result.groups) == 1
    summary = result.group_summaries["Group 1"]
    assert summary["size"] == 2
    assert summary["target_size"] == 2
    assert summary["skill_averages"] == {"excel": 3.0}
    assert summary["key_skills"] == ["excel"]
    assert summary["gender"] == {"F": 2}
    assert result.rationales[("Group 1", "a")].startswith("Best fit score")
