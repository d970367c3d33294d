"""
Dice rolling.
"""

from __future__ import annotations

import random
from dataclasses import dataclass


@dataclass(frozen=True)
class DiceRoll:
    """Value object for a roll of two six-sided dice."""

    die1: int
    die2: int

    def __post_init__(self) -> None:
        for value in (self.die1, self.die2):
            if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= 6:
                raise ValueError(f"Dice values must be between 1 and 6, got {self.die1}, {self.die2}")

    @classmethod
    def roll(cls, rng: random.Random) -> "DiceRoll":
        return cls(rng.randint(1, 6), rng.randint(1, 6))

    @property
    def total(self) -> int:
        return self.die1 + self.die2

    @property
    def is_doubles(self) -> bool:
        return self.die1 == self.die2

    def __str__(self) -> str:
        suffix = " (doubles)" if self.is_doubles else ""
        return f"DiceRoll[{self.die1}, {self.die2} = {self.total}{suffix}]"
