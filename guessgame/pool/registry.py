from __future__ import annotations

import csv
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path

from guessgame.api.models import Item

logger = logging.getLogger(__name__)

POOL_FILE = "pool.csv"


def _slug_id(s: str) -> str:
    s = s.strip().casefold()
    s = re.sub(r"[^\w]+", "-", s)
    return s.strip("-")


class PoolLoadError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class ItemPool:
    """Ordered, immutable collection of quiz items.

    Order is the file order; ids are canonical and unique.
    """

    items: tuple[Item, ...]

    @staticmethod
    def from_rows(rows: list[Item]) -> "ItemPool":
        seen: set[str] = set()
        for item in rows:
            if item.id in seen:
                raise PoolLoadError(f"Duplicate item id: {item.id}")
            seen.add(item.id)
        return ItemPool(items=tuple(rows))

    def __len__(self) -> int:
        return len(self.items)


def _read_csv_rows(path: Path) -> list[list[str]]:
    try:
        raw = path.read_text(encoding="utf-8-sig")
    except FileNotFoundError as e:
        raise PoolLoadError(f"Pool file not found: {path}") from e

    reader = csv.reader(raw.splitlines())
    rows = [[c.strip() for c in row] for row in reader]
    return [row for row in rows if any(cell for cell in row)]


def load_pool_csv(path: Path) -> ItemPool:
    rows = _read_csv_rows(path)
    if not rows:
        raise PoolLoadError(f"Empty pool CSV: {path}")

    header = [c.casefold() for c in rows[0]]
    if header[:3] != ["id", "answer", "image"]:
        raise PoolLoadError(f"Unexpected header in {path}: {rows[0]}")

    out: list[Item] = []
    for row in rows[1:]:
        if len(row) < 2:
            continue
        rid, answer = row[0], row[1]
        image = row[2] if len(row) > 2 else ""
        if not answer:
            continue
        if not rid:
            rid = _slug_id(answer)
        out.append(Item(id=rid, answer=answer, image=image))

    return ItemPool.from_rows(out)


def _fallback_item_pool() -> ItemPool:
    """Tiny bundled pool used when no pool file is present."""

    rows = [
        Item(id="cat", answer="Cat", image="images/cat.png"),
        Item(id="dog", answer="Dog", image="images/dog.png"),
        Item(id="owl", answer="Owl", image="images/owl.png"),
        Item(id="fox", answer="Fox", image="images/fox.png"),
        Item(id="bear", answer="Bear", image="images/bear.png"),
    ]
    return ItemPool.from_rows(rows)


def load_item_pool(*, root: Path) -> ItemPool:
    path = root / "assets" / POOL_FILE

    # Default behavior: fall back to the bundled pool when the file is missing or broken.
    # Force strict behavior by setting GUESSGAME_STRICT_POOL=1.
    strict = os.getenv("GUESSGAME_STRICT_POOL", "").strip().lower() in {"1", "true", "yes"}

    try:
        pool = load_pool_csv(path)
    except PoolLoadError as e:
        if strict:
            raise
        logger.warning("Using bundled item pool: %s", e)
        return _fallback_item_pool()

    logger.info("Loaded %d items from %s", len(pool), path)
    return pool
