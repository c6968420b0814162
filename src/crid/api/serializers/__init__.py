from __future__ import annotations

from .enrollments import enrollment_from_dict, enrollment_to_dict

__all__ = ["enrollment_to_dict", "enrollment_from_dict"]
