from __future__ import annotations

import itertools

import pytest

from crid.core.errors import AlreadyEnrolled, EnrollmentNotFound, InvalidPeriod, NotAuthorized
from crid.core.registry import EnrollmentRegistry

ADMIN = "secretary"


def _registry(period: str = "2025.1") -> EnrollmentRegistry:
    ticks = itertools.count(1000)
    return EnrollmentRegistry(ADMIN, period, clock=lambda: float(next(ticks)))


def _calc_courses(reg: EnrollmentRegistry, student: str = "A") -> None:
    reg.enroll(ADMIN, student, "Calc 1", "C1", "ProfX", "Normal")
    reg.enroll(ADMIN, student, "Calc 2", "C2", "ProfY", "Normal")
    reg.enroll(ADMIN, student, "Calc 3", "C3", "ProfZ", "Normal")


def _by_code(reg: EnrollmentRegistry, student: str, period: str) -> dict:
    return {e.course_code: e for e in reg.get_by_period(student, period)}


def test_calc_scenario() -> None:
    reg = _registry()
    _calc_courses(reg)

    entries = reg.get_by_period("A", "2025.1")
    assert [(e.course_name, e.course_code, e.instructor_name, e.status) for e in entries] == [
        ("Calc 1", "C1", "ProfX", "Normal"),
        ("Calc 2", "C2", "ProfY", "Normal"),
        ("Calc 3", "C3", "ProfZ", "Normal"),
    ]

    before = _by_code(reg, "A", "2025.1")
    reg.change_status(ADMIN, "A", "C2", "Pending")
    after = _by_code(reg, "A", "2025.1")
    assert after["C2"].status == "Pending"
    assert after["C1"] == before["C1"]
    assert after["C3"] == before["C3"]

    reg.remove(ADMIN, "A", "C3")
    final = _by_code(reg, "A", "2025.1")
    assert set(final) == {"C1", "C2"}
    assert final["C1"] == before["C1"]
    assert final["C2"].status == "Pending"
    assert final["C2"].course_name == "Calc 2"


def test_enroll_captures_time_and_appends() -> None:
    reg = _registry()
    first = reg.enroll(ADMIN, "A", "Calc 1", "C1", "ProfX", "Normal")
    second = reg.enroll(ADMIN, "A", "Calc 2", "C2", "ProfY", "Normal")

    assert first.enrolled_at == 1000.0
    assert second.enrolled_at == 1001.0
    assert reg.get_by_period("A", "2025.1") == [first, second]


def test_duplicate_enroll_is_rejected_and_state_unchanged() -> None:
    reg = _registry()
    reg.enroll(ADMIN, "A", "Calc 1", "C1", "ProfX", "Normal")
    snapshot = reg.get_by_period("A", "2025.1")
    revision = reg.facts.revision()

    with pytest.raises(AlreadyEnrolled) as exc_info:
        reg.enroll(ADMIN, "A", "Calculus I (again)", "C1", "ProfQ", "Pending")

    assert exc_info.value.student == "A"
    assert exc_info.value.course_code == "C1"
    assert exc_info.value.period == "2025.1"
    assert reg.get_by_period("A", "2025.1") == snapshot
    assert reg.facts.revision() == revision


def test_same_course_code_allowed_for_other_students_and_periods() -> None:
    reg = _registry()
    reg.enroll(ADMIN, "A", "Calc 1", "C1", "ProfX", "Normal")
    reg.enroll(ADMIN, "B", "Calc 1", "C1", "ProfX", "Normal")
    reg.set_current_period(ADMIN, "2025.2")
    reg.enroll(ADMIN, "A", "Calc 1", "C1", "ProfX", "Normal")

    assert len(reg.get_by_period("A", "2025.1")) == 1
    assert len(reg.get_by_period("B", "2025.1")) == 1
    assert len(reg.get_by_period("A", "2025.2")) == 1


def test_status_round_trip_keeps_other_fields() -> None:
    reg = _registry()
    original = reg.enroll(ADMIN, "A", "Calc 1", "C1", "ProfX", "Normal")

    reg.change_status(ADMIN, "A", "C1", "Pending")
    updated = reg.change_status(ADMIN, "A", "C1", "Approved")

    assert updated.status == "Approved"
    assert updated.course_name == original.course_name
    assert updated.course_code == original.course_code
    assert updated.instructor_name == original.instructor_name
    assert updated.enrolled_at == original.enrolled_at
    assert reg.get_by_period("A", "2025.1") == [updated]


def test_change_status_and_remove_require_existing_entry() -> None:
    reg = _registry()
    reg.enroll(ADMIN, "A", "Calc 1", "C1", "ProfX", "Normal")

    with pytest.raises(EnrollmentNotFound) as exc_info:
        reg.change_status(ADMIN, "A", "C9", "Pending")
    assert (exc_info.value.student, exc_info.value.course_code, exc_info.value.period) == ("A", "C9", "2025.1")

    with pytest.raises(EnrollmentNotFound):
        reg.remove(ADMIN, "B", "C1")

    assert [e.status for e in reg.get_by_period("A", "2025.1")] == ["Normal"]


@pytest.mark.parametrize(
    "operation",
    [
        lambda reg, who: reg.set_current_period(who, "2026.1"),
        lambda reg, who: reg.enroll(who, "A", "Calc 9", "C9", "ProfX", "Normal"),
        lambda reg, who: reg.change_status(who, "A", "C1", "Pending"),
        lambda reg, who: reg.remove(who, "A", "C1"),
    ],
    ids=["set_current_period", "enroll", "change_status", "remove"],
)
def test_mutations_require_administrator(operation) -> None:
    reg = _registry()
    reg.enroll(ADMIN, "A", "Calc 1", "C1", "ProfX", "Normal")
    snapshot = reg.get_by_period("A", "2025.1")
    revision = reg.facts.revision()

    with pytest.raises(NotAuthorized) as exc_info:
        operation(reg, "student-a")

    assert exc_info.value.caller == "student-a"
    assert reg.get_by_period("A", "2025.1") == snapshot
    assert reg.current_period == "2025.1"
    assert reg.facts.revision() == revision


def test_authorization_is_checked_before_preconditions() -> None:
    reg = _registry()
    with pytest.raises(NotAuthorized):
        reg.change_status("intruder", "A", "missing", "Pending")


def test_previous_period_becomes_read_only() -> None:
    reg = _registry()
    _calc_courses(reg)
    assert reg.set_current_period(ADMIN, "2025.2") == "2025.2"

    # Mutations now target 2025.2, where A has nothing.
    with pytest.raises(EnrollmentNotFound):
        reg.change_status(ADMIN, "A", "C1", "Pending")
    with pytest.raises(EnrollmentNotFound):
        reg.remove(ADMIN, "A", "C1")

    assert len(reg.get_by_period("A", "2025.1")) == 3
    assert reg.get_by_period("A", "2025.2") == []


def test_get_by_period_returns_a_copy() -> None:
    reg = _registry()
    reg.enroll(ADMIN, "A", "Calc 1", "C1", "ProfX", "Normal")

    entries = reg.get_by_period("A", "2025.1")
    entries.clear()

    assert len(reg.get_by_period("A", "2025.1")) == 1
    assert reg.get_by_period("nobody", "2025.1") == []


def test_get_by_period_strips_the_period_token() -> None:
    reg = _registry()
    reg.enroll(ADMIN, "A", "Calc 1", "C1", "ProfX", "Normal")

    assert [e.course_code for e in reg.get_by_period("A", " 2025.1")] == ["C1"]
    assert [e.course_code for e in reg.get_by_period("A", "2025.1\t")] == ["C1"]
    assert reg.get_by_period("A", "   ") == []


def test_period_tokens_must_not_be_empty() -> None:
    with pytest.raises(InvalidPeriod):
        EnrollmentRegistry(ADMIN, "")
    with pytest.raises(InvalidPeriod):
        EnrollmentRegistry(ADMIN, "   ")

    reg = _registry()
    with pytest.raises(InvalidPeriod):
        reg.set_current_period(ADMIN, "")
    assert reg.current_period == "2025.1"

    assert reg.set_current_period(ADMIN, " 2025.2 ") == "2025.2"


def test_administrator_is_required() -> None:
    with pytest.raises(ValueError):
        EnrollmentRegistry("", "2025.1")


def test_non_string_fields_are_rejected() -> None:
    reg = _registry()
    with pytest.raises(TypeError):
        reg.enroll(ADMIN, "A", "Calc 1", "C1", "ProfX", None)  # type: ignore[arg-type]
    assert reg.get_by_period("A", "2025.1") == []


def test_independent_registries_do_not_share_state() -> None:
    a = _registry()
    b = _registry()
    a.enroll(ADMIN, "A", "Calc 1", "C1", "ProfX", "Normal")

    assert b.get_by_period("A", "2025.1") == []
    assert b.facts.revision() == 0
