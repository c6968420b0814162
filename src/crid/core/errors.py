from __future__ import annotations

from typing import Any


class CridError(Exception):
    """Base class for rejected registry operations.

    Every failure is deterministic: the registry state is untouched and the
    same call with the same input fails the same way. Diagnostic fields are
    kept as attributes and exposed through `to_dict()`.
    """

    kind = "CridError"

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.kind, "detail": str(self)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CridError":
        """Rebuild an error from the payload `to_dict` produced."""
        return cls(str(data.get("detail", "")))


class NotAuthorized(CridError):
    kind = "NotAuthorized"

    def __init__(self, caller: str, operation: str) -> None:
        self.caller = caller
        self.operation = operation
        super().__init__(f"Caller {caller!r} is not allowed to {operation}")

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "caller": self.caller, "operation": self.operation}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NotAuthorized":
        return cls(str(data.get("caller", "")), str(data.get("operation", "")))


class _EnrollmentKeyError(CridError):
    def __init__(self, student: str, course_code: str, period: str) -> None:
        self.student = student
        self.course_code = course_code
        self.period = period
        super().__init__(self._message())

    def _message(self) -> str:  # pragma: no cover
        raise NotImplementedError

    def to_dict(self) -> dict[str, Any]:
        return {
            **super().to_dict(),
            "student": self.student,
            "courseCode": self.course_code,
            "period": self.period,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "_EnrollmentKeyError":
        return cls(str(data.get("student", "")), str(data.get("courseCode", "")), str(data.get("period", "")))


class AlreadyEnrolled(_EnrollmentKeyError):
    kind = "AlreadyEnrolled"

    def _message(self) -> str:
        return f"Student {self.student!r} is already enrolled in {self.course_code!r} for period {self.period!r}"


class EnrollmentNotFound(_EnrollmentKeyError):
    kind = "EnrollmentNotFound"

    def _message(self) -> str:
        return f"No enrollment in {self.course_code!r} for student {self.student!r} in period {self.period!r}"


class InvalidPeriod(CridError):
    kind = "InvalidPeriod"

    def __init__(self, period: Any) -> None:
        self.period = period
        super().__init__(f"Invalid period token: {period!r}")

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "period": self.period}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InvalidPeriod":
        return cls(data.get("period"))


# Kinds a server may report, so clients can raise the matching class.
ERRORS_BY_KIND: dict[str, type[CridError]] = {
    cls.kind: cls for cls in (NotAuthorized, AlreadyEnrolled, EnrollmentNotFound, InvalidPeriod)
}
