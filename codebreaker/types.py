"""
Labels and small value types shared by the engine, solver and session.

- PegColor: the master palette (8 colors, in order). A difficulty activates the
  first `color_count` of them.
- Code: an ordered tuple of PegColor.
- Feedback: (black, white) pegs for one guess.
- DifficultyConfig: the immutable rules of a puzzle, plus the six shipped tiers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal, NamedTuple, Tuple


class PegColor(str, Enum):
    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    PURPLE = "purple"
    ORANGE = "orange"
    PINK = "pink"
    CYAN = "cyan"


PALETTE: Tuple[PegColor, ...] = tuple(PegColor)

Code = Tuple[PegColor, ...]
GameStatus = Literal["playing", "won", "lost", "paused"]
TierName = Literal["tutorial", "beginner", "intermediate", "advanced", "expert", "master"]


class Feedback(NamedTuple):
    black: int  # right color, right position
    white: int  # right color, wrong position


@dataclass(frozen=True)
class GuessResult:
    guess: Code
    feedback: Feedback

    @property
    def is_correct(self) -> bool:
        return self.feedback.black == len(self.guess) and self.feedback.white == 0


@dataclass(frozen=True)
class DifficultyConfig:
    code_length: int
    color_count: int
    allow_duplicates: bool
    max_attempts: int

    @property
    def colors(self) -> Tuple[PegColor, ...]:
        """The active symbols for this configuration (palette prefix)."""
        return PALETTE[: self.color_count]


@dataclass(frozen=True)
class Tier:
    name: TierName
    config: DifficultyConfig
    levels_count: int


# Shipped difficulty ladder, easiest first.
TIERS: Tuple[Tier, ...] = (
    Tier("tutorial", DifficultyConfig(3, 4, False, 10), 10),
    Tier("beginner", DifficultyConfig(4, 5, False, 10), 30),
    Tier("intermediate", DifficultyConfig(4, 6, True, 8), 50),
    Tier("advanced", DifficultyConfig(4, 6, True, 7), 60),
    Tier("expert", DifficultyConfig(5, 7, True, 7), 80),
    Tier("master", DifficultyConfig(5, 8, True, 6), 100),
)


def tier_by_name(name: str) -> Tier:
    for tier in TIERS:
        if tier.name == name:
            return tier
    raise KeyError(name)
