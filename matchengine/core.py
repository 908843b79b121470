from __future__ import annotations

import hashlib
import random
from typing import Sequence, Tuple, TypeVar

T = TypeVar("T")


def clamp(x: float, lo: float, hi: float) -> float:
    return lo if x < lo else hi if x > hi else x


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * clamp(t, 0.0, 1.0)


def stable_seed(*parts: str) -> int:
    """Deterministic seed from string parts (stable across runs)."""
    h = hashlib.sha256("|".join([str(p) for p in parts]).encode("utf-8")).hexdigest()
    return int(h[:16], 16)


def weighted_choice(rng: random.Random, items: Sequence[Tuple[T, float]]) -> T:
    """Pick one item with probability proportional to its weight.

    Non-positive weights are ignored; if every weight is non-positive the first
    item is returned.
    """
    if not items:
        raise ValueError("weighted_choice: empty items")
    total = sum(w for _, w in items if w > 0)
    if total <= 0:
        return items[0][0]
    r = rng.random() * total
    acc = 0.0
    for item, w in items:
        if w <= 0:
            continue
        acc += w
        if r < acc:
            return item
    return items[-1][0]


def roll(rng: random.Random, p: float) -> bool:
    return rng.random() < p
