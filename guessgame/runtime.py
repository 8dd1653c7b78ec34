from __future__ import annotations

import random
from dataclasses import dataclass
from pathlib import Path

from guessgame.config import Settings, load_settings
from guessgame.engine import EngineResult, SessionEngine
from guessgame.pool.registry import ItemPool
from guessgame.pool.singleton import init_pool
from guessgame.ticker import SessionTicker
from guessgame.websocket_hub import hub


@dataclass(slots=True)
class SessionRuntime:
    """Composition root: one engine plus the timer that drives it."""

    settings: Settings
    engine: SessionEngine
    ticker: SessionTicker


def result_message(result: EngineResult) -> dict[str, object]:
    return {
        "type": "session_updated",
        "phase": result.state.phase.value,
        "events": [e.to_json() for e in result.events],
    }


async def broadcast_result(result: EngineResult) -> None:
    if result.applied:
        await hub.broadcast(result_message(result))


def build_runtime(*, pool: ItemPool, settings: Settings) -> SessionRuntime:
    engine = SessionEngine(
        pool=pool.items,
        rng=random.Random(settings.seed),
        round_seconds=settings.round_seconds,
        strict=settings.strict_transitions,
    )
    ticker = SessionTicker(engine=engine, interval=settings.tick_interval, on_result=broadcast_result)
    return SessionRuntime(settings=settings, engine=engine, ticker=ticker)


_RUNTIME: SessionRuntime | None = None


def init_runtime(*, project_root: Path, settings: Settings | None = None) -> SessionRuntime:
    """Build the process-wide runtime once; later calls return the cached one."""

    global _RUNTIME
    if _RUNTIME is None:
        pool = init_pool(project_root=project_root)
        _RUNTIME = build_runtime(pool=pool, settings=settings or load_settings())
    return _RUNTIME


def reset_runtime_for_tests() -> None:
    global _RUNTIME
    _RUNTIME = None


def get_runtime() -> SessionRuntime:
    if _RUNTIME is None:
        raise RuntimeError("Runtime not initialized. Call init_runtime() at startup.")
    return _RUNTIME
