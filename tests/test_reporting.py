import csv
import sys
from pathlib import Path

import yaml

sys.path.append(str(Path(__file__).resolve().parents[1]))

from group_allocator.engine import allocate
from group_allocator.models.config import AllocationConfig
from group_allocator.models.student import Student
from group_allocator.reporting import export_csv, export_yaml, format_seat_rationales


def _result():
    roster = [
        Student(student_id="a", gender="F", ethnicity="X", academic_year="Y1", skills={"excel": 5}),
        Student(student_id="b", gender="M", ethnicity="X", academic_year="Y2", skills={"excel": 1}),
        Student(student_id="c", gender="F", ethnicity="Z", academic_year="Y1", skills={"excel": 4}),
        Student(student_id="d", gender="M", ethnicity="Z", academic_year="Y2", skills={"excel": 2}),
    ]
    return allocate(roster, AllocationConfig(group_size=2, skill_priorities={"excel": 1})).unwrap()


def test_format_seat_rationales_groups_by_name():
    result = _result()
    grouped = format_seat_rationales(result)
    assert set(grouped) == {"Group 1", "Group 2"}
    assert sum(len(seats) for seats in grouped.values()) == 4


def test_export_yaml_and_csv(tmp_path):
    result = _result()

    alloc_yaml = tmp_path / "alloc.yaml"
    rat_yaml = tmp_path / "rationale.yaml"
    export_yaml(result, str(alloc_yaml), str(rat_yaml))

    allocations = yaml.safe_load(alloc_yaml.read_text())
    assert allocations == {g.name: list(g.student_ids) for g in result.groups}

    rationale_data = yaml.safe_load(rat_yaml.read_text())
    assert rationale_data["group_summaries"]["Group 1"]["size"] == 2
    first = result.groups[0]
    assert (
        rationale_data["seats"]["Group 1"][first.student_ids[0]]
        == result.rationales[("Group 1", first.student_ids[0])]
    )

    alloc_csv = tmp_path / "alloc.csv"
    rat_csv = tmp_path / "rationale.csv"
    export_csv(result, str(alloc_csv), str(rat_csv))

    with open(alloc_csv, newline="", encoding="utf8") as handle:
        rows = list(csv.DictReader(handle))
    assert len(rows) == 4
    assert {row["group"] for row in rows} == {"Group 1", "Group 2"}

    with open(rat_csv, newline="", encoding="utf8") as handle:
        rows = list(csv.reader(handle))
    assert rows[0] == ["group", "student_id", "rationale"]
    header = [
        "group",
        "size",
        "target_size",
        "skill_averages",
        "key_skills",
        "gender",
        "ethnicity",
        "academic_year",
        "status",
    ]
    header_idx = rows.index(header)
    assert rows[header_idx + 1][:3] == ["Group 1", "2", "2"]
    assert rows[header_idx + 1][3].startswith("excel=")


def test_reports_keep_numeric_group_order(tmp_path):
    roster = [
        Student(student_id=f"s{i:02d}", gender="FM"[i % 2], skills={"excel": i % 6})
        for i in range(22)
    ]
    result = allocate(roster, AllocationConfig(group_size=2, skill_priorities={"excel": 1})).unwrap()
    expected = [f"Group {n}" for n in range(1, 12)]

    assert list(format_seat_rationales(result)) == expected

    alloc_yaml = tmp_path / "alloc.yaml"
    rat_yaml = tmp_path / "rationale.yaml"
    export_yaml(result, str(alloc_yaml), str(rat_yaml))
    assert list(yaml.safe_load(alloc_yaml.read_text())) == expected
    rationale_data = yaml.safe_load(rat_yaml.read_text())
    assert list(rationale_data["seats"]) == expected
    assert list(rationale_data["group_summaries"]) == expected

    alloc_csv = tmp_path / "alloc.csv"
    rat_csv = tmp_path / "rationale.csv"
    export_csv(result, str(alloc_csv), str(rat_csv))
    with open(rat_csv, newline="", encoding="utf8") as handle:
        rows = list(csv.reader(handle))
    seat_groups = []
    for row in rows[1:]:
        if not row:
            break
        if row[0] not in seat_groups:
            seat_groups.append(row[0])
    assert seat_groups == expected
