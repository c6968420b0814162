from __future__ import annotations

from .enrollments import Enrollment, normalize_period
from .errors import AlreadyEnrolled, CridError, EnrollmentNotFound, InvalidPeriod, NotAuthorized
from .events import FACT_FIELDS, Fact, FactLog, fact_to_dict
from .registry import EnrollmentRegistry

__all__ = [
    "Enrollment",
    "normalize_period",
    "EnrollmentRegistry",
    "Fact",
    "FactLog",
    "FACT_FIELDS",
    "fact_to_dict",
    "CridError",
    "NotAuthorized",
    "AlreadyEnrolled",
    "EnrollmentNotFound",
    "InvalidPeriod",
]
