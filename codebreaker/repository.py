"""
DB-backed progress repository.

Public methods:
- record_start() -> None
- record_result(won, attempts, stars, level_id=None) -> None
- complete_daily(day, attempts, stars) -> bool
- record_hint() / record_bonus() -> None
- level_progress(level_id) -> LevelProgress | None
- list_levels() -> list[LevelOut]
- get_daily(day) -> DailyOut
- get_stats() -> StatsOut
- reset_stats() -> None

Consumes only what a finished round reports, (stars, attempts); the puzzle
core stays free of storage.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .levels import DAILY_TIER, all_levels, get_level, next_level
from .models import DailyResult, LevelProgress, Stats as StatsORM
from .schemas import DailyOut, LevelOut, StatsOut


class ProgressRepository:
    def __init__(self, db: Session):
        self.db = db

    # --- Helpers ---

    def _get_or_create_stats(self) -> StatsORM:
        stats = self.db.get(StatsORM, 1)
        if not stats:
            stats = StatsORM(
                id=1, games_started=0, games_won=0, games_lost=0,
                current_streak=0, best_streak=0, total_attempts_in_wins=0,
                fastest_win_attempts=None, hints_used=0, bonus_lives_used=0,
            )
            self.db.add(stats)
            self.db.flush()
        return stats

    def _get_or_create_level(self, level_id: int) -> LevelProgress:
        row = self.db.get(LevelProgress, level_id)
        if not row:
            level = get_level(level_id)
            row = LevelProgress(
                level_id=level_id,
                tier=level.tier.name,
                stars=0,
                best_attempts=None,
                # The very first level is open from the start
                is_unlocked=(level_id == 0),
                updated_at=datetime.utcnow(),
            )
            self.db.add(row)
            self.db.flush()
        return row

    # --- Recording ---

    def record_start(self) -> None:
        stats = self._get_or_create_stats()
        stats.games_started += 1
        self.db.commit()

    def record_result(self, won: bool, attempts: int, stars: int = 0,
                      level_id: Optional[int] = None) -> None:
        stats = self._get_or_create_stats()
        if won:
            stats.games_won += 1
            # Win streak counts games, not calendar days
            stats.current_streak += 1
            if stats.current_streak > stats.best_streak:
                stats.best_streak = stats.current_streak
            stats.total_attempts_in_wins += attempts
            if stats.fastest_win_attempts is None or attempts < stats.fastest_win_attempts:
                stats.fastest_win_attempts = attempts
            if level_id is not None:
                self._complete_level(level_id, attempts, stars)
        else:
            stats.games_lost += 1
            stats.current_streak = 0
        self.db.commit()

    def _complete_level(self, level_id: int, attempts: int, stars: int) -> None:
        row = self._get_or_create_level(level_id)
        row.is_unlocked = True
        if stars > row.stars:
            row.stars = stars
        if row.best_attempts is None or attempts < row.best_attempts:
            row.best_attempts = attempts
        row.updated_at = datetime.utcnow()

        following = next_level(level_id)
        if following is not None:
            self._get_or_create_level(following.id).is_unlocked = True

    def complete_daily(self, day: date, attempts: int, stars: int) -> bool:
        """Store the first completion of `day`; later ones are ignored."""
        if self.db.get(DailyResult, day):
            return False
        self.db.add(DailyResult(day=day, attempts=attempts, stars=stars,
                                completed_at=datetime.utcnow()))
        self.db.commit()
        return True

    def record_hint(self) -> None:
        self._get_or_create_stats().hints_used += 1
        self.db.commit()

    def record_bonus(self) -> None:
        self._get_or_create_stats().bonus_lives_used += 1
        self.db.commit()

    # --- Queries ---

    def level_progress(self, level_id: int) -> Optional[LevelProgress]:
        return self.db.get(LevelProgress, level_id)

    def is_unlocked(self, level_id: int) -> bool:
        if level_id == 0:
            return True
        row = self.db.get(LevelProgress, level_id)
        return bool(row and row.is_unlocked)

    def list_levels(self, tier: Optional[str] = None) -> List[LevelOut]:
        rows: Dict[int, LevelProgress] = {
            r.level_id: r for r in self.db.execute(select(LevelProgress)).scalars().all()
        }
        out: List[LevelOut] = []
        for level in all_levels():
            if tier is not None and level.tier.name != tier:
                continue
            row = rows.get(level.id)
            out.append(LevelOut(
                level_id=level.id,
                tier=level.tier.name,
                level_in_tier=level.level_in_tier,
                display_name=level.display_name,
                stars=row.stars if row else 0,
                best_attempts=row.best_attempts if row else None,
                is_unlocked=(row.is_unlocked if row else level.id == 0),
            ))
        return out

    def get_daily(self, day: date) -> DailyOut:
        row = self.db.get(DailyResult, day)
        return DailyOut(
            day=day,
            tier=DAILY_TIER,
            completed=row is not None,
            attempts=row.attempts if row else None,
            stars=row.stars if row else None,
        )

    def get_stats(self) -> StatsOut:
        stats = self._get_or_create_stats()
        total_stars = self.db.execute(select(func.coalesce(func.sum(LevelProgress.stars), 0))).scalar_one()
        completed = self.db.execute(
            select(func.count()).select_from(LevelProgress).where(LevelProgress.stars > 0)
        ).scalar_one()
        avg = (stats.total_attempts_in_wins / stats.games_won) if stats.games_won > 0 else None
        return StatsOut(
            games_started=stats.games_started,
            games_won=stats.games_won,
            games_lost=stats.games_lost,
            current_streak=stats.current_streak,
            best_streak=stats.best_streak,
            average_attempts_to_win=avg,
            fastest_win_attempts=stats.fastest_win_attempts,
            total_stars=int(total_stars),
            levels_completed=int(completed),
            hints_used=stats.hints_used,
            bonus_lives_used=stats.bonus_lives_used,
        )

    def reset_stats(self) -> None:
        stats = self._get_or_create_stats()
        stats.games_started = 0
        stats.games_won = 0
        stats.games_lost = 0
        stats.current_streak = 0
        stats.best_streak = 0
        stats.total_attempts_in_wins = 0
        stats.fastest_win_attempts = None
        stats.hints_used = 0
        stats.bonus_lives_used = 0
        self.db.commit()
