from __future__ import annotations

from .client import CridClient

__all__ = ["CridClient"]
