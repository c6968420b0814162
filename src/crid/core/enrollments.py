from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, kw_only=True)
class Enrollment:
    """One student's registration in one course for one period.

    Notes:
    - Entries have no identity of their own; they are addressed by
      (student, period, course_code).
    - `status` is free text ("Normal", "Pending", ...). A status change stores a
      new value in the same slot; `enrolled_at` is never touched after creation.
    """

    course_name: str
    course_code: str
    instructor_name: str
    status: str
    enrolled_at: float  # unix seconds


def normalize_period(value: object) -> str | None:
    """Return the stripped period token, or None if it is not a usable token."""
    if not isinstance(value, str):
        return None
    v = value.strip()
    return v or None


def require_text(value: object, *, name: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a string, got {type(value).__name__}")
    return value
