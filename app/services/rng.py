import random
from typing import Sequence


class RandomSource:
    """Uniform draws shared by every game.

    Everything is derived from ``random()`` so a scripted subclass can force any
    outcome in tests.
    """

    def __init__(self, rng: random.Random | None = None):
        self._rng = rng or random.SystemRandom()

    def random(self) -> float:
        return self._rng.random()

    def random_open(self) -> float:
        # (0, 1): the crash formula raises the draw to a negative power.
        value = self.random()
        while value <= 0.0:
            value = self.random()
        return value

    def randint_below(self, n: int) -> int:
        return min(int(self.random() * n), n - 1)

    def sample(self, population: Sequence[int], k: int) -> list[int]:
        # Partial Fisher-Yates over a copy: k distinct picks without replacement.
        pool = list(population)
        picks = []
        for i in range(k):
            j = i + self.randint_below(len(pool) - i)
            pool[i], pool[j] = pool[j], pool[i]
            picks.append(pool[i])
        return picks
