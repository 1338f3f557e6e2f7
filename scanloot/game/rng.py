from __future__ import annotations

import random
from typing import Protocol


class RandomSource(Protocol):
    """Anything with `random() -> float in [0, 1)`; `random.Random` qualifies."""

    def random(self) -> float: ...


_default_rng = random.Random()


def default_rng() -> RandomSource:
    return _default_rng
