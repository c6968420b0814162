from __future__ import annotations

from fastapi import FastAPI

from ..api import create_api_app
from ..core.events import FactLog
from ..core.registry import EnrollmentRegistry
from .settings import Settings


def build_registry(settings: Settings) -> EnrollmentRegistry:
    return EnrollmentRegistry(
        settings.administrator,
        settings.period,
        facts=FactLog(max_history=settings.fact_history),
    )


def create_app(settings: Settings | None = None, *, registry: EnrollmentRegistry | None = None) -> FastAPI:
    """Create the full app around a fresh registry, or around `registry` if given."""

    if registry is None:
        registry = build_registry(settings if settings is not None else Settings.from_env())
    return create_api_app(registry)
