"""
Level catalog and daily challenge.

Levels are numbered 0..N-1 across the tiers, easiest tier first. Each level's
secret is derived from its id, and the daily challenge's from the date, so
neither secret ever needs to be stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from typing import List, Optional, Tuple

from .session import GameSession
from .types import TIERS, Tier, TierName, tier_by_name

LEVEL_SEED_MULTIPLIER = 12345
DAILY_TIER: TierName = "intermediate"


@dataclass(frozen=True)
class Level:
    id: int
    tier: Tier
    level_in_tier: int

    @property
    def display_name(self) -> str:
        return f"{self.tier.name.capitalize()} {self.level_in_tier}"

    @property
    def seed(self) -> int:
        return self.id * LEVEL_SEED_MULTIPLIER


@lru_cache(maxsize=1)
def all_levels() -> Tuple[Level, ...]:
    levels: List[Level] = []
    level_id = 0
    for tier in TIERS:
        for number in range(1, tier.levels_count + 1):
            levels.append(Level(level_id, tier, number))
            level_id += 1
    return tuple(levels)


def get_level(level_id: int) -> Level:
    levels = all_levels()
    if not 0 <= level_id < len(levels):
        raise KeyError(level_id)
    return levels[level_id]


def levels_for_tier(name: str) -> List[Level]:
    tier = tier_by_name(name)
    return [lvl for lvl in all_levels() if lvl.tier == tier]


def next_level(level_id: int) -> Optional[Level]:
    levels = all_levels()
    return levels[level_id + 1] if level_id + 1 < len(levels) else None


def session_for_level(level_id: int) -> GameSession:
    level = get_level(level_id)
    return GameSession(level.tier.config, seed=level.seed)


def daily_seed(day: date) -> int:
    return day.year * 10000 + day.month * 100 + day.day


def daily_session(day: Optional[date] = None) -> GameSession:
    day = day or date.today()
    return GameSession(tier_by_name(DAILY_TIER).config, seed=daily_seed(day))
