from __future__ import annotations

from .enrollments import mount_enrollments_api

__all__ = ["mount_enrollments_api"]
