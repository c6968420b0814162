from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..core.errors import CridError
from ..core.registry import EnrollmentRegistry
from .routes import mount_enrollments_api

ERROR_STATUS: dict[str, int] = {
    "NotAuthorized": 403,
    "EnrollmentNotFound": 404,
    "AlreadyEnrolled": 409,
    "InvalidPeriod": 400,
}


def _validation_detail(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part != "body"]
    where = ".".join(loc) or "body"
    if first.get("type") == "missing":
        return f"Missing {where}"
    return f"Invalid {where}: {first.get('msg', 'invalid value')}"


def create_api_app(registry: EnrollmentRegistry) -> FastAPI:
    app = FastAPI(title="crid", version="0.1.0")

    @app.exception_handler(CridError)
    async def _crid_error(request: Request, exc: CridError) -> JSONResponse:  # noqa: ARG001
        return JSONResponse(status_code=ERROR_STATUS.get(exc.kind, 400), content=exc.to_dict())

    # A missing or non-object body is a malformed request like any other bad field.
    @app.exception_handler(RequestValidationError)
    async def _malformed_request(request: Request, exc: RequestValidationError) -> JSONResponse:  # noqa: ARG001
        return JSONResponse(status_code=400, content={"detail": _validation_detail(exc)})

    mount_enrollments_api(app, registry)

    @app.get("/healthz")
    def healthz() -> dict[str, bool]:
        return {"ok": True}

    return app


__all__ = ["create_api_app", "ERROR_STATUS"]
