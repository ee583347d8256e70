from __future__ import annotations

import random
from typing import List, MutableSequence, Optional, Sequence, Tuple

from loguru import logger

from ..errors import DerangementFailed, DuplicateParticipant, InsufficientParticipants

MAX_ATTEMPTS = 100

Pair = Tuple[str, str]


def fisher_yates(items: MutableSequence, rng: random.Random) -> None:
    """In-place uniform shuffle: for i from last down to 1, swap with j in [0, i]."""
    for i in range(len(items) - 1, 0, -1):
        j = rng.randint(0, i)
        items[i], items[j] = items[j], items[i]


def has_fixed_point(givers: Sequence[str], receivers: Sequence[str]) -> bool:
    return any(g == r for g, r in zip(givers, receivers))


def _rotated(givers: Sequence[str], rng: random.Random) -> List[str]:
    # Shuffle an ordering, then map each element to the one `offset` places
    # later in it. A non-zero rotation of distinct items never maps an item to itself.
    order = list(givers)
    fisher_yates(order, rng)
    offset = rng.randint(1, len(order) - 1)
    target = {order[i]: order[(i + offset) % len(order)] for i in range(len(order))}
    return [target[g] for g in givers]


def generate_derangement(
    participants: Sequence[str],
    *,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
    max_attempts: int = MAX_ATTEMPTS,
    fallback: str = "raise",
) -> List[Pair]:
    """
    Pair every participant with a receiver other than themselves.

    Givers keep the input order. Receivers are reshuffled until no one draws
    themselves, at most `max_attempts` times. When every attempt fails,
    `fallback` decides what happens:

      raise   -> DerangementFailed (the caller may retry)
      rotate  -> a rotation-based derangement, always valid
      accept  -> the last shuffle as-is, fixed points included
    """
    givers = list(participants)
    if len(givers) < 2:
        raise InsufficientParticipants()
    if len(set(givers)) != len(givers):
        raise DuplicateParticipant("Participant names must be unique")
    if fallback not in ("raise", "rotate", "accept"):
        raise ValueError(f"Unknown derangement fallback: {fallback!r}")

    if rng is None:
        rng = random.Random(seed)

    receivers = givers[:]
    for attempt in range(1, max_attempts + 1):
        fisher_yates(receivers, rng)
        if not has_fixed_point(givers, receivers):
            logger.debug("derangement found after {attempts} attempt(s)", attempts=attempt)
            return list(zip(givers, receivers))

    logger.warning(
        "no derangement after {attempts} attempts (n={n}), fallback={fallback}",
        attempts=max_attempts,
        n=len(givers),
        fallback=fallback,
    )
    if fallback == "rotate":
        return list(zip(givers, _rotated(givers, rng)))
    if fallback == "accept":
        return list(zip(givers, receivers))
    raise DerangementFailed()
