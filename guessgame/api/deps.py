from __future__ import annotations

from guessgame.runtime import SessionRuntime, get_runtime


def get_session_runtime() -> SessionRuntime:
    return get_runtime()
