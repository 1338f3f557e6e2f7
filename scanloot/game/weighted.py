from __future__ import annotations

from typing import Callable, Sequence, TypeVar

from .rng import RandomSource

T = TypeVar("T")


def weighted_pick(options: Sequence[T], weight_fn: Callable[[T], float], rng: RandomSource) -> T:
    """
    Cumulative-sum roulette selection.

    Weights are normalized to sum to 1; a single draw r ~ U(0,1) has each
    normalized weight subtracted in order and the first option that takes the
    remainder to <= 0 wins. Float rounding can leave a hair of remainder after
    the last option, in which case the last weighted option wins.
    Zero-weight options are never picked.
    """
    if not options:
        raise ValueError("weighted_pick needs at least one option")

    weights = [float(weight_fn(o)) for o in options]
    if any(w < 0 for w in weights):
        raise ValueError("weights must be non-negative")
    total = sum(weights)
    if total <= 0:
        raise ValueError("weights must sum to a positive value")

    r = rng.random()
    last: T = options[-1]
    for option, w in zip(options, weights):
        if w == 0:
            continue
        last = option
        r -= w / total
        if r <= 0:
            return option
    return last
