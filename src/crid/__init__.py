from __future__ import annotations

from .core.enrollments import Enrollment
from .core.errors import AlreadyEnrolled, CridError, EnrollmentNotFound, InvalidPeriod, NotAuthorized
from .core.events import Fact, FactLog
from .core.registry import EnrollmentRegistry
from .runtime.server import CridServer, run
from .runtime.settings import Settings
from .sdk.client import CridClient

__all__ = [
    "run",
    "CridServer",
    "CridClient",
    "Settings",
    "Enrollment",
    "EnrollmentRegistry",
    "Fact",
    "FactLog",
    "CridError",
    "NotAuthorized",
    "AlreadyEnrolled",
    "EnrollmentNotFound",
    "InvalidPeriod",
]
