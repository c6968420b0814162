from __future__ import annotations

import contextlib
import socket
import threading
import time
from dataclasses import dataclass, field
from typing import Any

import httpx
import uvicorn

from ..core.registry import EnrollmentRegistry
from ..sdk.client import CridClient
from .app import build_registry, create_app
from .logging import get_logger
from .settings import Settings

logger = get_logger(__name__)


@dataclass(frozen=True)
class CridServer:
    host: str
    port: int
    url: str
    registry: EnrollmentRegistry = field(repr=False)
    _server: Any = field(default=None, repr=False, compare=False)
    _thread: threading.Thread | None = field(default=None, repr=False, compare=False)

    def as_client(self, caller: str | None = None) -> CridClient:
        return CridClient(self.url.rstrip("/"), caller)

    def stop(self, timeout_s: float = 5.0) -> None:
        """Ask uvicorn to exit and wait for its thread to finish."""
        if self._server is None:
            return
        self._server.should_exit = True
        if self._thread is not None:
            self._thread.join(timeout=timeout_s)
            if self._thread.is_alive():
                raise RuntimeError(f"crid server at {self.url} did not stop within {timeout_s}s")
        logger.info("server stopped", url=self.url)


def _find_free_port(host: str) -> int:
    with contextlib.closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind((host, 0))
        return int(s.getsockname()[1])


def _normalize_base_url(url: str) -> str:
    url = url.strip()
    if not url:
        return ""
    # Allow passing just host:port.
    if "://" not in url:
        url = "http://" + url
    return url.rstrip("/")


def _is_server_alive(base_url: str, *, timeout_s: float = 0.2) -> bool:
    """Best-effort probe to determine if a crid server is reachable."""

    try:
        with httpx.Client(base_url=base_url, timeout=timeout_s) as client:
            r = client.get("/healthz")
            if r.status_code != 200:
                return False
            return bool(r.json().get("ok"))
    except (httpx.HTTPError, ValueError):
        return False


def _wait_until_alive(base_url: str, *, timeout_s: float) -> bool:
    deadline = time.monotonic() + timeout_s
    while time.monotonic() < deadline:
        if _is_server_alive(base_url):
            return True
        time.sleep(0.05)
    return False


def run(
    settings: Settings | None = None,
    *,
    caller: str | None = None,
    new_server: bool = False,
    connect_timeout_s: float = 0.2,
    startup_timeout_s: float = 5.0,
) -> CridServer | CridClient:
    """Start a crid server with a single Python call, or attach to a running one.

    Behavior:
    - If `settings.url` (CRID_URL) points at a reachable server we attach to it
      and return a `CridClient` acting as `caller`, unless `new_server=True`.
    - Otherwise, if `settings.port != 0` and a server is already reachable at
      http://{host}:{port}, we attach to that one.
    - Otherwise a fresh registry is built from `settings` and served by uvicorn
      in a daemon thread; a `CridServer` is returned.

    `port=0` means "pick a free port", so there's nothing to attach to.
    """

    settings = settings if settings is not None else Settings.from_env()

    env_url = _normalize_base_url(settings.url)
    if env_url and not new_server:
        if _is_server_alive(env_url, timeout_s=connect_timeout_s):
            logger.info("attached to running server", url=env_url)
            return CridClient(env_url, caller)

    host = settings.host
    port = int(settings.port)
    if port != 0 and not new_server:
        default_url = _normalize_base_url(f"http://{host}:{port}")
        if _is_server_alive(default_url, timeout_s=connect_timeout_s):
            logger.info("attached to running server", url=default_url)
            return CridClient(default_url, caller)

    if port == 0:
        port = _find_free_port(host)

    registry = build_registry(settings)
    app = create_app(registry=registry)

    config = uvicorn.Config(app, host=host, port=port, log_level=settings.log_level, access_log=False)
    server = uvicorn.Server(config)

    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()

    url = f"http://{host}:{port}/"
    if not _wait_until_alive(url.rstrip("/"), timeout_s=startup_timeout_s):
        server.should_exit = True
        raise RuntimeError(f"crid server did not come up at {url} within {startup_timeout_s}s")

    logger.info(
        "server started",
        url=url,
        administrator=registry.administrator,
        current_period=registry.current_period,
    )
    return CridServer(host=host, port=port, url=url, registry=registry, _server=server, _thread=thread)
