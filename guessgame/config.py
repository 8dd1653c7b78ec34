from __future__ import annotations

import os
from dataclasses import dataclass

# Seconds on the clock at session start and after every correct answer.
ROUND_SECONDS = 5


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_seed() -> int | None:
    raw = os.environ.get("GUESSGAME_SEED", "").strip()
    return int(raw) if raw else None


@dataclass(frozen=True, slots=True)
class Settings:
    round_seconds: int = ROUND_SECONDS
    # Seconds between server-side ticks.
    tick_interval: float = 1.0
    # Seed for item selection; None draws from the OS.
    seed: int | None = None
    # Run the asyncio ticker inside the API process.
    server_ticker: bool = True
    # Raise instead of ignoring operations the current phase does not allow.
    strict_transitions: bool = False
    log_level: str = "INFO"


def load_settings() -> Settings:
    return Settings(
        round_seconds=int(os.environ.get("GUESSGAME_ROUND_SECONDS", str(ROUND_SECONDS))),
        tick_interval=float(os.environ.get("GUESSGAME_TICK_INTERVAL", "1.0")),
        seed=_env_seed(),
        server_ticker=_env_flag("GUESSGAME_SERVER_TICKER", True),
        strict_transitions=_env_flag("GUESSGAME_STRICT_TRANSITIONS", False),
        log_level=os.environ.get("GUESSGAME_LOG_LEVEL", "INFO").upper(),
    )
