"""
Player-facing hints and after-the-fact guess grading, built on KnuthSolver.

Every call rebuilds the remaining set from the history it is given, so there is
no solver state to share or invalidate between requests.

HintWorker moves that work onto a thread pool and hands back a Future.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Hashable, List, Optional, Sequence, Union

from .engine import score
from .errors import InconsistentHistoryError
from .constraints import filter_codes
from .solver import KnuthSolver, worst_case
from .types import Code, DifficultyConfig, Feedback, GuessResult, PegColor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HintResult:
    suggested_guess: Code
    remaining_possibilities: int
    guaranteed_elimination_min: int
    is_optimal: bool
    reasoning: str


class GuessRating(str, Enum):
    OPTIMAL = "optimal"
    GOOD = "good"
    ACCEPTABLE = "acceptable"
    SUBOPTIMAL = "suboptimal"
    POOR = "poor"


@dataclass(frozen=True)
class GuessAnalysis:
    guess: Code
    optimal_guess: Code
    was_optimal: bool
    possibilities_before: int
    possibilities_after: int
    # Approximation: the optimal guess scored against the player's guess as if
    # it were the secret. Not the count the optimal guess would really leave.
    optimal_would_leave: int
    rating: GuessRating


def rate_guess(actual_worst: int, optimal_worst: int, same_guess: bool = False) -> GuessRating:
    # A guess that beats the suggested one is still optimal
    if same_guess or actual_worst <= optimal_worst:
        return GuessRating.OPTIMAL
    if actual_worst <= optimal_worst + 1:
        return GuessRating.GOOD
    if actual_worst <= optimal_worst + 3:
        return GuessRating.ACCEPTABLE
    if actual_worst <= optimal_worst + 5:
        return GuessRating.SUBOPTIMAL
    return GuessRating.POOR


class HintService:
    def __init__(self, solver: Union[KnuthSolver, DifficultyConfig]):
        if isinstance(solver, DifficultyConfig):
            solver = KnuthSolver(solver)
        self.solver = solver

    def possible_codes(self, history: Sequence[GuessResult], strict: bool = False) -> List[Code]:
        remaining = self.solver.possible_codes(history)
        if strict and not remaining:
            raise InconsistentHistoryError(
                f"No code fits the {len(history)} recorded guess(es)."
            )
        return remaining

    def _pick(self, history: Sequence[GuessResult], remaining: Sequence[Code]) -> Optional[Code]:
        # Every code is symmetric before the first guess; skip the search
        if not history:
            return self.solver.opening_guess()
        return self.solver.best_guess(remaining)

    def get_hint(self, history: Sequence[GuessResult]) -> Optional[HintResult]:
        """
        Suggest the next guess for `history`, or None if the history is
        self-contradictory (no hint available).
        """
        remaining = self.possible_codes(history)

        if not remaining:
            logger.warning("no consistent code after %d guesses; hint unavailable", len(history))
            return None

        if len(remaining) == 1:
            return HintResult(
                suggested_guess=remaining[0],
                remaining_possibilities=1,
                guaranteed_elimination_min=1,
                is_optimal=True,
                reasoning="Only one possible code remains - this must be the answer!",
            )

        suggestion = self._pick(history, remaining)
        assert suggestion is not None, "solver returned no guess for a non-empty remaining set"

        eliminated = self.solver.guaranteed_elimination(suggestion, remaining)
        if suggestion in set(remaining):
            reasoning = (
                "This guess could be the answer and guarantees eliminating "
                f"at least {eliminated} possibilities."
            )
        else:
            reasoning = (
                "This guess maximizes information gain, eliminating "
                f"at least {eliminated} possibilities."
            )

        return HintResult(
            suggested_guess=suggestion,
            remaining_possibilities=len(remaining),
            guaranteed_elimination_min=eliminated,
            is_optimal=True,
            reasoning=reasoning,
        )

    def analyze_guess(
        self,
        guess: Sequence[PegColor],
        feedback: Feedback,
        history_before: Sequence[GuessResult],
    ) -> GuessAnalysis:
        """Compare a played guess with the minimax pick at the same point."""
        guess = tuple(guess)
        remaining = self.possible_codes(history_before)

        optimal = self._pick(history_before, remaining) or guess
        optimal_worst = worst_case(optimal, remaining)
        actual_worst = worst_case(guess, remaining)

        possibilities_after = len(filter_codes(remaining, guess, feedback))
        optimal_would_leave = len(filter_codes(remaining, optimal, score(optimal, guess)))

        rating = rate_guess(actual_worst, optimal_worst, same_guess=(guess == optimal))

        return GuessAnalysis(
            guess=guess,
            optimal_guess=optimal,
            was_optimal=rating is GuessRating.OPTIMAL,
            possibilities_before=len(remaining),
            possibilities_after=possibilities_after,
            optimal_would_leave=optimal_would_leave,
            rating=rating,
        )

    def analyze_game(self, history: Sequence[GuessResult]) -> List[GuessAnalysis]:
        return [
            self.analyze_guess(entry.guess, entry.feedback, history[:i])
            for i, entry in enumerate(history)
        ]


class HintWorker:
    """
    Runs hint/analysis requests on a thread pool.

    Requests may carry an owner key (e.g. a game id). If a newer request for the
    same key is submitted before an older one finishes, the older one's
    callback is skipped: last result wins. Its Future still completes.
    """

    def __init__(self, max_workers: int = 2):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="hint")
        self._lock = threading.Lock()
        self._latest: Dict[Hashable, int] = {}
        self._counter = 0

    def _ticket(self, key: Optional[Hashable]) -> int:
        with self._lock:
            self._counter += 1
            if key is not None:
                self._latest[key] = self._counter
            return self._counter

    def is_current(self, key: Optional[Hashable], ticket: int) -> bool:
        if key is None:
            return True
        with self._lock:
            return self._latest.get(key) == ticket

    def _submit(self, fn, args, key, callback) -> Future:
        ticket = self._ticket(key)
        future = self._executor.submit(fn, *args)

        if callback is not None:
            def _deliver(done: Future) -> None:
                if done.cancelled() or done.exception() is not None:
                    return
                if self.is_current(key, ticket):
                    callback(done.result())
                else:
                    logger.debug("dropping superseded result for %r", key)

            future.add_done_callback(_deliver)
        if key is not None:
            # Runs after _deliver; a newer ticket keeps its own entry
            future.add_done_callback(lambda _done: self._release(key, ticket))
        return future

    def _release(self, key: Hashable, ticket: int) -> None:
        with self._lock:
            if self._latest.get(key) == ticket:
                del self._latest[key]

    def forget(self, key: Hashable) -> None:
        """Drop `key` so any result still in flight for it is not delivered."""
        with self._lock:
            self._latest.pop(key, None)

    @property
    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._latest)

    def submit_hint(
        self,
        service: HintService,
        history: Sequence[GuessResult],
        key: Optional[Hashable] = None,
        callback: Optional[Callable[[Optional[HintResult]], None]] = None,
    ) -> "Future[Optional[HintResult]]":
        return self._submit(service.get_hint, (tuple(history),), key, callback)

    def submit_analysis(
        self,
        service: HintService,
        history: Sequence[GuessResult],
        key: Optional[Hashable] = None,
        callback: Optional[Callable[[List[GuessAnalysis]], None]] = None,
    ) -> "Future[List[GuessAnalysis]]":
        return self._submit(service.analyze_game, (tuple(history),), key, callback)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
