"""
One puzzle being played: the secret, the guess being built, the history and
the win/loss state machine.

  playing --submit (all black)----------> won(attempts, stars)   terminal
  playing --submit (out of attempts)----> lost
  lost    --grant_bonus_life (once)-----> playing (one more attempt)
  playing <--pause/resume--> paused
  any     --restart-----------------------> playing (fresh round)

A session is single-writer: whoever owns it serialises calls to it.
"""

from __future__ import annotations

import logging
import random
import secrets
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from .codespace import validate_config
from .engine import score
from .errors import ConfigurationError, IncompleteGuessError
from .types import Code, DifficultyConfig, GameStatus, GuessResult, PegColor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameState:
    status: GameStatus
    attempts: Optional[int] = None  # only for won
    stars: Optional[int] = None     # only for won

    @classmethod
    def playing(cls) -> "GameState":
        return cls("playing")

    @classmethod
    def won(cls, attempts: int, stars: int) -> "GameState":
        return cls("won", attempts, stars)

    @classmethod
    def lost(cls) -> "GameState":
        return cls("lost")

    @classmethod
    def paused(cls) -> "GameState":
        return cls("paused")

    @property
    def is_finished(self) -> bool:
        return self.status in ("won", "lost")


def rate(attempts: int, max_attempts: int) -> int:
    """Stars for a win: <= 40% of the budget -> 3, <= 70% -> 2, else 1."""
    ratio = attempts / max_attempts
    if ratio <= 0.4:
        return 3
    if ratio <= 0.7:
        return 2
    return 1


def generate_secret(config: DifficultyConfig, seed: Optional[int] = None) -> Code:
    """
    Draw a secret for `config`. A given seed always yields the same code,
    in any process; without one the draw comes from the OS entropy pool.
    """
    validate_config(config)
    rng = random.Random(seed) if seed is not None else secrets.SystemRandom()
    colors = list(config.colors)
    if config.allow_duplicates:
        return tuple(rng.choice(colors) for _ in range(config.code_length))
    return tuple(rng.sample(colors, config.code_length))


def check_code(code: Sequence[PegColor], config: DifficultyConfig) -> Code:
    code = tuple(code)
    if len(code) != config.code_length:
        raise ConfigurationError(
            f"Code must have exactly {config.code_length} pegs, got {len(code)}."
        )
    for peg in code:
        if peg not in config.colors:
            raise ConfigurationError(f"Color {peg!r} is not active in this configuration.")
    if not config.allow_duplicates and len(set(code)) != len(code):
        raise ConfigurationError("Duplicates are not allowed in this configuration.")
    return code


class GameSession:
    def __init__(
        self,
        config: DifficultyConfig,
        seed: Optional[int] = None,
        secret: Optional[Sequence[PegColor]] = None,
        draw: Optional[Callable[[DifficultyConfig], Code]] = None,
    ):
        validate_config(config)
        self.config = config
        self.seed = seed
        self._draw = draw or generate_secret

        self._secret: Code = check_code(secret, config) if secret is not None else self._new_secret()
        self.current_guess: List[Optional[PegColor]] = [None] * config.code_length
        self._history: List[GuessResult] = []
        self.attempts_used = 0
        self.max_attempts = config.max_attempts
        self.bonus_granted = False
        self.state = GameState.playing()

    def _new_secret(self) -> Code:
        if self.seed is not None:
            return generate_secret(self.config, self.seed)
        return check_code(self._draw(self.config), self.config)

    # --- Read-only views ---

    @property
    def secret_code(self) -> Code:
        return self._secret

    @property
    def revealed_secret(self) -> Optional[Code]:
        """The secret, but only once the round is over."""
        return self._secret if self.state.is_finished else None

    @property
    def guess_history(self) -> Tuple[GuessResult, ...]:
        return tuple(self._history)

    @property
    def attempts_remaining(self) -> int:
        return max(0, self.max_attempts - self.attempts_used)

    @property
    def is_guess_complete(self) -> bool:
        return all(peg is not None for peg in self.current_guess)

    # --- Building the current guess ---

    def set_symbol(self, index: int, symbol: PegColor) -> bool:
        if self.state.status != "playing":
            return False
        if not 0 <= index < self.config.code_length or symbol not in self.config.colors:
            return False
        self.current_guess[index] = symbol
        return True

    def clear_slot(self, index: int) -> bool:
        if self.state.status != "playing" or not 0 <= index < self.config.code_length:
            return False
        self.current_guess[index] = None
        return True

    def clear_all(self) -> bool:
        if self.state.status != "playing":
            return False
        self._reset_guess()
        return True

    def _reset_guess(self) -> None:
        self.current_guess = [None] * self.config.code_length

    def require_complete_guess(self) -> Code:
        if not self.is_guess_complete:
            empty = [i for i, peg in enumerate(self.current_guess) if peg is None]
            raise IncompleteGuessError(f"Slots {empty} are still empty.")
        return tuple(self.current_guess)

    # --- Transitions ---

    def submit_guess(self) -> Optional[GuessResult]:
        """
        Score the current guess. Returns None (and changes nothing) when the
        round is not in play or the guess still has empty slots.
        """
        if self.state.status != "playing" or not self.is_guess_complete:
            return None

        guess = tuple(self.current_guess)
        result = GuessResult(guess, score(guess, self._secret))
        self._history.append(result)
        self.attempts_used += 1
        self._reset_guess()

        if result.is_correct:
            attempts = len(self._history)
            self.state = GameState.won(attempts, rate(attempts, self.max_attempts))
            logger.info("session won in %d attempt(s)", attempts)
        elif self.attempts_used >= self.max_attempts:
            self.state = GameState.lost()
            logger.info("session lost after %d attempt(s)", self.attempts_used)

        return result

    def grant_bonus_life(self) -> bool:
        """One extra attempt after a loss, once per round. False if not allowed."""
        if self.state.status != "lost" or self.bonus_granted:
            return False
        self.bonus_granted = True
        self.max_attempts += 1
        self.state = GameState.playing()
        self._reset_guess()
        return True

    def pause(self) -> bool:
        if self.state.status != "playing":
            return False
        self.state = GameState.paused()
        return True

    def resume(self) -> bool:
        if self.state.status != "paused":
            return False
        self.state = GameState.playing()
        return True

    def restart(self) -> None:
        self._secret = self._new_secret()
        self._history = []
        self._reset_guess()
        self.attempts_used = 0
        self.max_attempts = self.config.max_attempts
        self.bonus_granted = False
        self.state = GameState.playing()
        logger.debug("session restarted (seeded=%s)", self.seed is not None)
