from __future__ import annotations

from .service import EnrollmentRegistry

__all__ = ["EnrollmentRegistry"]
