from __future__ import annotations

from .app import build_registry, create_app
from .logging import get_logger, setup_logging
from .server import CridServer, run
from .settings import Settings

__all__ = ["build_registry", "create_app", "CridServer", "run", "Settings", "setup_logging", "get_logger"]
