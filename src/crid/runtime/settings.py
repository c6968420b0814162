from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any, Mapping

LOG_LEVELS = frozenset({"critical", "error", "warning", "info", "debug"})


def _parse_bool(value: str, *, field: str) -> bool:
    s = value.strip().lower()
    if s in {"1", "true", "yes", "on"}:
        return True
    if s in {"0", "false", "no", "off", ""}:
        return False
    raise ValueError(f"Invalid {field}: {value!r}")


def _parse_int(value: str, *, field: str) -> int:
    try:
        return int(value)
    except ValueError as ex:
        raise ValueError(f"Invalid {field}: {value!r}") from ex


@dataclass(frozen=True)
class Settings:
    """Runtime configuration.

    Read from `CRID_*` environment variables; command-line flags override
    individual fields through `with_overrides`.
    """

    administrator: str = "secretary"
    period: str = "2025.1"
    host: str = "127.0.0.1"
    port: int = 8000
    url: str = ""
    log_level: str = "info"
    log_json: bool = False
    fact_history: int = 10_000

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        defaults = cls()
        settings = cls(
            administrator=env.get("CRID_ADMIN", defaults.administrator).strip(),
            period=env.get("CRID_PERIOD", defaults.period).strip(),
            host=env.get("CRID_HOST", defaults.host).strip(),
            port=_parse_int(env.get("CRID_PORT", str(defaults.port)), field="CRID_PORT"),
            url=env.get("CRID_URL", defaults.url).strip(),
            log_level=env.get("CRID_LOG_LEVEL", defaults.log_level).strip().lower(),
            log_json=_parse_bool(env.get("CRID_LOG_JSON", "0"), field="CRID_LOG_JSON"),
            fact_history=_parse_int(env.get("CRID_FACT_HISTORY", str(defaults.fact_history)), field="CRID_FACT_HISTORY"),
        )
        settings.validate()
        return settings

    def with_overrides(self, **fields: Any) -> "Settings":
        updated = replace(self, **{k: v for k, v in fields.items() if v is not None})
        updated.validate()
        return updated

    def validate(self) -> None:
        if not self.administrator:
            raise ValueError("administrator cannot be empty")
        if not self.period:
            raise ValueError("period cannot be empty")
        if not (0 <= int(self.port) <= 65535):
            raise ValueError(f"port must be within 0..65535, got {self.port}")
        if int(self.fact_history) <= 0:
            raise ValueError("fact_history must be a positive integer")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(LOG_LEVELS)}, got {self.log_level!r}")
