"""Runtime configuration read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping


DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True, slots=True)
class ServerConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ServerConfig":
        """
        Build a config from `HOST`, `PORT` and `LOG_LEVEL`.

        Unset or empty variables fall back to the defaults. A `PORT` that is
        not an integer in 0..65535 raises ValueError.
        """
        env = os.environ if environ is None else environ
        return cls(
            host=env.get("HOST") or DEFAULT_HOST,
            port=_parse_port(env.get("PORT")),
            log_level=(env.get("LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
        )


def _parse_port(raw: str | None) -> int:
    if not raw:
        return DEFAULT_PORT
    try:
        port = int(raw)
    except ValueError as e:
        raise ValueError(f"invalid PORT: {raw!r}") from e
    if not 0 <= port <= 65535:
        raise ValueError(f"PORT out of range: {port}")
    return port
