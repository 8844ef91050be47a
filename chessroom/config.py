"""Deployment settings, read from CHESSROOM_* environment variables."""

import os
from dataclasses import dataclass, field
from typing import Mapping

ENV_PREFIX = "CHESSROOM_"


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"Cannot interpret {value!r} as a boolean.")


def _parse_timeout(value: str) -> float | None:
    if value.strip().lower() == "none":
        return None
    timeout = float(value)
    if timeout <= 0:
        raise ValueError(f"Send timeout must be positive, got {timeout}.")
    return timeout


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    # Reject moves once the rules engine reports the game finished.
    enforce_game_over: bool = False
    send_timeout: float | None = 5.0
    send_state_on_connect: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        defaults = cls()

        def get(name: str) -> str | None:
            return env.get(ENV_PREFIX + name)

        port = get("PORT")
        log_level = get("LOG_LEVEL")
        cors = get("CORS_ORIGINS")
        enforce = get("ENFORCE_GAME_OVER")
        timeout = get("SEND_TIMEOUT")
        send_state = get("SEND_STATE_ON_CONNECT")

        return cls(
            host=get("HOST") or defaults.host,
            port=int(port) if port else defaults.port,
            log_level=log_level.upper() if log_level else defaults.log_level,
            cors_origins=[o.strip() for o in cors.split(",") if o.strip()] if cors else defaults.cors_origins,
            enforce_game_over=_parse_bool(enforce) if enforce is not None else defaults.enforce_game_over,
            send_timeout=_parse_timeout(timeout) if timeout is not None else defaults.send_timeout,
            send_state_on_connect=(
                _parse_bool(send_state) if send_state is not None else defaults.send_state_on_connect
            ),
        )
