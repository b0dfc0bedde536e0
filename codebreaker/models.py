"""
SQLAlchemy ORM models for player progress.

Tables:
- level_progress: one row per level the player has unlocked or played
- daily_results: one row per completed daily challenge
- stats: single-row scoreboard (id=1)

The puzzle core never touches these; the API records outcomes after a round
ends. Secrets are not stored: levels and dailies re-derive them from seeds.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


class LevelProgress(Base):
    __tablename__ = "level_progress"

    level_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tier: Mapped[str] = mapped_column(String(16), nullable=False)

    # Best result so far (stars only ever go up, attempts only ever go down)
    stars: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    best_attempts: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_unlocked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class DailyResult(Base):
    __tablename__ = "daily_results"

    day: Mapped[date] = mapped_column(Date, primary_key=True)
    attempts: Mapped[int] = mapped_column(Integer, nullable=False)
    stars: Mapped[int] = mapped_column(Integer, nullable=False)
    completed_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)


class Stats(Base):
    __tablename__ = "stats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)

    games_started: Mapped[int] = mapped_column(Integer, default=0)
    games_won: Mapped[int] = mapped_column(Integer, default=0)
    games_lost: Mapped[int] = mapped_column(Integer, default=0)

    current_streak: Mapped[int] = mapped_column(Integer, default=0)
    best_streak: Mapped[int] = mapped_column(Integer, default=0)

    total_attempts_in_wins: Mapped[int] = mapped_column(Integer, default=0)
    fastest_win_attempts: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    hints_used: Mapped[int] = mapped_column(Integer, default=0)
    bonus_lives_used: Mapped[int] = mapped_column(Integer, default=0)
