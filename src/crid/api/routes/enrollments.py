from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Header, HTTPException

from ...core.enrollments import normalize_period
from ...core.events import fact_to_dict
from ...core.registry import EnrollmentRegistry
from ..serializers import enrollment_to_dict


def _required_str(body: dict, field: str) -> str:
    value = body.get(field)
    if value is None:
        raise HTTPException(status_code=400, detail=f"Missing field: {field}")
    if not isinstance(value, str):
        raise HTTPException(status_code=400, detail=f"Invalid {field}: expected a string")
    return value


def mount_enrollments_api(app: FastAPI, registry: EnrollmentRegistry) -> None:
    """Mount the registry's contract surface.

    Mutating routes identify the caller from the `X-Caller` header; reads are public.
    Registry errors propagate to the `CridError` handler installed by `create_api_app`.
    """

    @app.get("/api/registry")
    def get_registry_info() -> dict[str, Any]:
        return {
            "administrator": registry.administrator,
            "currentPeriod": registry.current_period,
            "revision": registry.facts.revision(),
        }

    @app.put("/api/registry/period")
    def set_current_period(body: dict, x_caller: str = Header(default="")) -> dict[str, Any]:
        period = _required_str(body, "period")
        current = registry.set_current_period(x_caller, period)
        return {"ok": True, "currentPeriod": current}

    @app.post("/api/students/{student}/enrollments", status_code=201)
    def enroll(student: str, body: dict, x_caller: str = Header(default="")) -> dict[str, Any]:
        entry = registry.enroll(
            x_caller,
            student,
            course_name=_required_str(body, "courseName"),
            course_code=_required_str(body, "courseCode"),
            instructor_name=_required_str(body, "instructorName"),
            status=_required_str(body, "status"),
        )
        return enrollment_to_dict(entry)

    @app.patch("/api/students/{student}/enrollments/{course_code}")
    def change_status(student: str, course_code: str, body: dict, x_caller: str = Header(default="")) -> dict[str, Any]:
        entry = registry.change_status(x_caller, student, course_code, _required_str(body, "status"))
        return enrollment_to_dict(entry)

    @app.delete("/api/students/{student}/enrollments/{course_code}")
    def remove(student: str, course_code: str, x_caller: str = Header(default="")) -> dict[str, Any]:
        removed = registry.remove(x_caller, student, course_code)
        return {"ok": True, "removed": enrollment_to_dict(removed)}

    @app.get("/api/students/{student}/enrollments")
    def get_by_period(student: str, period: str | None = None) -> dict[str, Any]:
        # Without an explicit period, read whatever is current.
        p = registry.current_period if period is None else (normalize_period(period) or period)
        entries = registry.get_by_period(student, p)
        return {
            "student": student,
            "period": p,
            "enrollments": [enrollment_to_dict(e) for e in entries],
        }

    @app.get("/api/events")
    def events(since: int = 0) -> dict[str, Any]:
        # Minimal polling endpoint.
        return {
            "revision": registry.facts.revision(),
            "facts": [fact_to_dict(f) for f in registry.facts.since(since)],
        }
