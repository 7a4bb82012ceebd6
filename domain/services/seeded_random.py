from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


class SeededRandom:
    def __init__(self, seed: int) -> None:
        self.state = seed

    def random(self) -> float:
        value = math.sin(self.state) * 10000
        self.state += 1
        return value - math.floor(value)

    def range(self, minimum: float, maximum: float) -> float:
        return minimum + self.random() * (maximum - minimum)

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            msg = "Cannot choose from an empty sequence"
            raise ValueError(msg)
        return items[math.floor(self.random() * len(items))]
