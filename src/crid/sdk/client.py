from __future__ import annotations

from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from ..api.serializers import enrollment_from_dict
from ..core.enrollments import Enrollment
from ..core.errors import ERRORS_BY_KIND

if TYPE_CHECKING:
    import httpx


def _seg(value: str) -> str:
    return quote(str(value), safe="")


def _error_from_response(res: "httpx.Response", action: str) -> Exception:
    """Rebuild the registry error carried by an error response, if there is one."""
    try:
        data = res.json()
    except ValueError:
        data = None

    cls = ERRORS_BY_KIND.get(data.get("error")) if isinstance(data, dict) else None
    if cls is not None:
        return cls.from_dict(data)
    return RuntimeError(f"Failed to {action}: {res.status_code} {res.text}")


class CridClient:
    """HTTP client for a running crid server.

    `caller` is sent as the `X-Caller` header on every request; reads work
    without it. Registry rejections are raised as the same `CridError`
    subclasses the in-process registry raises.

    Pass `http_client` to reuse an existing `httpx.Client` (it must already be
    bound to the server's base URL); otherwise each call opens its own.
    """

    def __init__(
        self,
        base_url: str = "http://127.0.0.1:8000",
        caller: str | None = None,
        *,
        timeout_s: float = 10.0,
        http_client: "httpx.Client | None" = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.caller = caller
        self.timeout_s = float(timeout_s)
        self._http = http_client

    def as_caller(self, caller: str | None) -> "CridClient":
        return CridClient(self.base_url, caller, timeout_s=self.timeout_s, http_client=self._http)

    def _request(self, method: str, path: str, *, action: str, **kwargs: Any) -> dict[str, Any]:
        import httpx

        headers = {"X-Caller": self.caller} if self.caller else {}
        try:
            if self._http is not None:
                res = self._http.request(method, path, headers=headers, **kwargs)
            else:
                with httpx.Client(base_url=self.base_url, timeout=self.timeout_s) as client:
                    res = client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as ex:
            raise RuntimeError(f"Failed to {action}: {ex}") from ex

        if res.status_code >= 400:
            raise _error_from_response(res, action)
        return dict(res.json())

    def registry_info(self) -> dict[str, Any]:
        return self._request("GET", "/api/registry", action="get registry info")

    def current_period(self) -> str:
        return str(self.registry_info()["currentPeriod"])

    def set_current_period(self, period: str) -> str:
        data = self._request("PUT", "/api/registry/period", action="set current period", json={"period": period})
        return str(data["currentPeriod"])

    def enroll(
        self,
        student: str,
        course_name: str,
        course_code: str,
        instructor_name: str,
        status: str,
    ) -> Enrollment:
        data = self._request(
            "POST",
            f"/api/students/{_seg(student)}/enrollments",
            action="enroll student",
            json={
                "courseName": course_name,
                "courseCode": course_code,
                "instructorName": instructor_name,
                "status": status,
            },
        )
        return enrollment_from_dict(data)

    def change_status(self, student: str, course_code: str, status: str) -> Enrollment:
        data = self._request(
            "PATCH",
            f"/api/students/{_seg(student)}/enrollments/{_seg(course_code)}",
            action="change enrollment status",
            json={"status": status},
        )
        return enrollment_from_dict(data)

    def remove(self, student: str, course_code: str) -> Enrollment:
        data = self._request(
            "DELETE",
            f"/api/students/{_seg(student)}/enrollments/{_seg(course_code)}",
            action="remove enrollment",
        )
        return enrollment_from_dict(data["removed"])

    def get_by_period(self, student: str, period: str | None = None) -> list[Enrollment]:
        params = {"period": period} if period is not None else {}
        data = self._request(
            "GET",
            f"/api/students/{_seg(student)}/enrollments",
            action="get enrollments",
            params=params,
        )
        return [enrollment_from_dict(e) for e in data.get("enrollments", [])]

    def events(self, since: int = 0) -> dict[str, Any]:
        return self._request("GET", "/api/events", action="get events", params={"since": int(since)})


__all__ = ["CridClient"]
