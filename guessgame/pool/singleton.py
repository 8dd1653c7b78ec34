from __future__ import annotations

from pathlib import Path

from guessgame.pool.registry import ItemPool, load_item_pool


_POOL: ItemPool | None = None


def init_pool(*, project_root: Path) -> ItemPool:
    """Load the item pool once and cache it.

    Safe to call multiple times; subsequent calls return the already loaded instance.
    """

    global _POOL
    if _POOL is None:
        _POOL = load_item_pool(root=project_root)
    return _POOL


def reset_pool_for_tests() -> None:
    global _POOL
    _POOL = None

