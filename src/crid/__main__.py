from __future__ import annotations

import argparse

from .runtime.logging import setup_logging
from .runtime.server import run
from .runtime.settings import Settings


def main(argv: list[str] | None = None) -> None:
    p = argparse.ArgumentParser(prog="crid", description="crid: course registration record registry server")
    p.add_argument("--host", default=None)
    p.add_argument("--port", type=int, default=None)
    p.add_argument("--admin", default=None, help="identity allowed to mutate the registry")
    p.add_argument("--period", default=None, help="initial current period, e.g. 2025.1")
    p.add_argument("--log-level", default=None)
    p.add_argument("--log-json", action="store_true", default=None)
    args = p.parse_args(argv)

    settings = Settings.from_env().with_overrides(
        host=args.host,
        port=args.port,
        administrator=args.admin,
        period=args.period,
        log_level=args.log_level.lower() if args.log_level else None,
        log_json=args.log_json,
    )
    setup_logging(settings.log_level, json=settings.log_json)

    # The CLI always serves its own registry.
    srv = run(settings, new_server=True)
    print(srv.url)

    # Block forever (so it behaves like a normal CLI server)
    import time

    while True:
        time.sleep(3600)


if __name__ == "__main__":
    main()
