from __future__ import annotations

import random
from collections.abc import Iterable, Sequence
from itertools import combinations

from .models import GameMode


Pair = tuple[str, str]

CYCLE_ATTEMPTS = 6


def planned_rounds(mode: GameMode, num_players: int) -> int:
    n = max(0, int(num_players or 0))
    if mode is GameMode.EXTENDED:
        return n * 2
    if mode is GameMode.ROUND_ROBIN:
        return n * (n - 1) // 2
    return n


def pair_key(a: str, b: str) -> Pair:
    return (a, b) if a < b else (b, a)


def _shuffled(items: Iterable, rng: random.Random) -> list:
    out = list(items)
    rng.shuffle(out)
    return out


def _cycle_edges(ids: Sequence[str], rng: random.Random) -> list[Pair]:
    n = len(ids)
    if n < 2:
        return []
    perm = _shuffled(ids, rng)
    return [(perm[i], perm[(i + 1) % n]) for i in range(n)]


def _round_robin(ids: Sequence[str], rng: random.Random) -> list[Pair]:
    return _shuffled(combinations(ids, 2), rng)


def _standard(ids: Sequence[str], rng: random.Random) -> list[Pair]:
    return _shuffled(_cycle_edges(ids, rng), rng)


def _extended(ids: Sequence[str], rng: random.Random) -> list[Pair]:
    """Aim for 2n distinct pairs with every degree as close to 4 as possible.

    Cycles are laid down first, then the emptiest unused pairs, and only when
    every distinct pair is taken do repeats get added.
    """
    target = len(ids) * 2
    used: set[Pair] = set()
    degree = {pid: 0 for pid in ids}
    schedule: list[Pair] = []

    def add(a: str, b: str) -> None:
        schedule.append((a, b))
        degree[a] += 1
        degree[b] += 1

    for _ in range(CYCLE_ATTEMPTS):
        if len(schedule) >= target:
            break
        for a, b in _shuffled(_cycle_edges(ids, rng), rng):
            if len(schedule) >= target:
                break
            key = pair_key(a, b)
            if a == b or key in used:
                continue
            used.add(key)
            add(a, b)

    tried: set[Pair] = set()
    while len(schedule) < target:
        by_degree = sorted(ids, key=lambda pid: degree[pid])
        added = False
        for a, b in combinations(by_degree, 2):
            key = pair_key(a, b)
            if key in tried:
                continue
            tried.add(key)
            if key not in used:
                used.add(key)
                add(a, b)
                added = True
                break
        if not added:
            break

    # Distinct pairs exhausted: repeat the least loaded pair.
    while len(schedule) < target:
        a, b = min(combinations(ids, 2), key=lambda p: degree[p[0]] + degree[p[1]])
        add(a, b)

    return _shuffled(schedule, rng)


def generate_schedule(
    mode: GameMode,
    participant_ids: Iterable[str],
    rng: random.Random | None = None,
) -> list[Pair]:
    """Return the ordered ``(contender_a, contender_b)`` pairs for ``mode``.

    The order is random on every call; pass a seeded ``rng`` to reproduce one.
    """
    ids = list(dict.fromkeys(participant_ids))
    if len(ids) < 2:
        return []
    rng = rng or random.Random()
    if mode is GameMode.ROUND_ROBIN:
        return _round_robin(ids, rng)
    if mode is GameMode.EXTENDED:
        return _extended(ids, rng)
    return _standard(ids, rng)


def candidate_counts(pairs: Iterable[Pair], roster: Iterable[str] = ()) -> dict[str, int]:
    counts = {pid: 0 for pid in roster}
    for a, b in pairs:
        counts[a] = counts.get(a, 0) + 1
        counts[b] = counts.get(b, 0) + 1
    return counts


def has_repeats(pairs: Sequence[Pair]) -> bool:
    return len({pair_key(a, b) for a, b in pairs}) < len(pairs)
