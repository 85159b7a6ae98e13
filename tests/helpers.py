import random
from datetime import UTC, datetime

NOW = datetime(2025, 3, 15, 12, 0, tzinfo=UTC)


class ScriptedRandom(random.Random):
    """Deterministic draws: ``roll`` for the price-hike chance, ``pct`` for its size."""

    def __init__(self, roll: float, pct: int = 20) -> None:
        super().__init__(0)
        self._roll = roll
        self._pct = pct

    def random(self) -> float:
        return self._roll

    def randint(self, a: int, b: int) -> int:
        assert a <= self._pct <= b
        return self._pct
