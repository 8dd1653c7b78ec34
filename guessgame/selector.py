from __future__ import annotations

import random
from collections.abc import Collection, Sequence

from guessgame.api.models import Item


def select_next(pool: Sequence[Item], used_ids: Collection[str], *, rng: random.Random) -> Item | None:
    """Pick an unused item uniformly at random.

    Returns None when every item in `pool` has been used (exhaustion).
    Candidates keep pool order, so a seeded `rng` gives reproducible picks.
    """

    used = set(used_ids)
    unknown = used.difference(item.id for item in pool)
    if unknown:
        raise ValueError(f"Used ids not in pool: {sorted(unknown)}")

    available = [item for item in pool if item.id not in used]
    if not available:
        return None
    return rng.choice(available)
