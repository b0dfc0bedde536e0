"""
In-memory store
Holds the live GameSession objects, keyed by game id.

A GameSession is single-writer; the store is that writer. Every mutating call
runs under the store lock, so API threads never touch a session concurrently.
"""

from dataclasses import dataclass, field
from datetime import date
from threading import RLock
from time import time
from typing import Dict, Literal, Optional
from uuid import uuid4

from .session import GameSession
from .types import GuessResult, PegColor

GameKind = Literal["free", "level", "daily"]


@dataclass
class LiveGame:
    id: str
    session: GameSession
    kind: GameKind = "free"
    tier: str = "intermediate"
    level_id: Optional[int] = None
    day: Optional[date] = None
    hints_used: int = 0
    # A round's outcome goes to persistence exactly once
    result_recorded: bool = False
    created_at: float = field(default_factory=time)
    updated_at: float = field(default_factory=time)


class SessionStore:
    def __init__(self) -> None:
        self._games: Dict[str, LiveGame] = {}
        self._lock = RLock()

    def create(
        self,
        session: GameSession,
        kind: GameKind = "free",
        tier: str = "intermediate",
        level_id: Optional[int] = None,
        day: Optional[date] = None,
    ) -> LiveGame:
        game = LiveGame(id=str(uuid4()), session=session, kind=kind, tier=tier,
                        level_id=level_id, day=day)
        with self._lock:
            self._games[game.id] = game
        return game

    def get(self, game_id: str) -> Optional[LiveGame]:
        with self._lock:
            return self._games.get(game_id)

    def remove(self, game_id: str) -> bool:
        with self._lock:
            return self._games.pop(game_id, None) is not None

    # --- Mutations, one at a time ---

    def set_slot(self, game_id: str, index: int, color: PegColor) -> Optional[bool]:
        with self._lock:
            game = self._games.get(game_id)
            if game is None:
                return None
            changed = game.session.set_symbol(index, color)
            game.updated_at = time()
            return changed

    def clear_slot(self, game_id: str, index: Optional[int] = None) -> Optional[bool]:
        with self._lock:
            game = self._games.get(game_id)
            if game is None:
                return None
            if index is None:
                changed = game.session.clear_all()
            else:
                changed = game.session.clear_slot(index)
            game.updated_at = time()
            return changed

    def guess(self, game_id: str) -> Optional[GuessResult]:
        """Submit the current guess. None if unknown game or nothing submitted."""
        with self._lock:
            game = self._games.get(game_id)
            if game is None:
                return None
            result = game.session.submit_guess()
            game.updated_at = time()
            return result

    def grant_bonus(self, game_id: str) -> Optional[bool]:
        with self._lock:
            game = self._games.get(game_id)
            if game is None:
                return None
            granted = game.session.grant_bonus_life()
            if granted:
                # The reopened round will end again; let that outcome count
                game.result_recorded = False
            game.updated_at = time()
            return granted

    def pause(self, game_id: str, paused: bool = True) -> Optional[bool]:
        with self._lock:
            game = self._games.get(game_id)
            if game is None:
                return None
            changed = game.session.pause() if paused else game.session.resume()
            game.updated_at = time()
            return changed

    def restart(self, game_id: str) -> Optional[LiveGame]:
        with self._lock:
            game = self._games.get(game_id)
            if game is None:
                return None
            game.session.restart()
            game.hints_used = 0
            game.result_recorded = False
            game.updated_at = time()
            return game

    def mark_recorded(self, game_id: str) -> bool:
        """True the first time it is called for the current outcome."""
        with self._lock:
            game = self._games.get(game_id)
            if game is None or game.result_recorded:
                return False
            game.result_recorded = True
            return True

    def use_hint(self, game_id: str) -> Optional[int]:
        with self._lock:
            game = self._games.get(game_id)
            if game is None:
                return None
            game.hints_used += 1
            return game.hints_used
