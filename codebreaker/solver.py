"""
Knuth-style minimax solver.

Idea:
  For each candidate guess g, bucket the remaining codes by the feedback g would
  get against each of them. The largest bucket is g's worst case. Pick the g
  with the smallest worst case; on a tie prefer a g that could itself be the
  secret, so a lucky guess still ends the game.

Cost is O(|remaining| * |candidates|) score calls. Small code spaces (<= 1000)
consider every code as a candidate; larger ones consider the remaining codes
plus a fixed-size seeded sample of the whole space.

The solver holds nothing but its (read-only) code space and a seed, so one
instance per difficulty config can serve concurrent requests.
"""

from __future__ import annotations

import logging
import random
import time
from collections import Counter
from typing import Dict, Iterable, List, Optional, Sequence

from .codespace import all_codes
from .constraints import replay_history
from .engine import score
from .types import Code, DifficultyConfig, Feedback, GuessResult, PegColor

logger = logging.getLogger(__name__)

FULL_SEARCH_LIMIT = 1000
SAMPLE_SIZE = 500


def partition(guess: Sequence[PegColor], remaining: Iterable[Code]) -> Dict[Feedback, int]:
    """Feedback -> how many remaining codes would answer `guess` with it."""
    return dict(Counter(score(guess, code) for code in remaining))


def worst_case(guess: Sequence[PegColor], remaining: Sequence[Code]) -> int:
    buckets = partition(guess, remaining)
    if not buckets:
        return 0
    return max(buckets.values())


class KnuthSolver:
    def __init__(self, config: DifficultyConfig, seed: Optional[int] = None):
        self.config = config
        self.seed = seed
        # Validates the config; raises ConfigurationError on a bad combination
        self.all_codes = all_codes(config)

    # --- Queries over the code space ---

    def possible_codes(self, history: Iterable[GuessResult]) -> List[Code]:
        return replay_history(self.all_codes, history)

    def opening_guess(self) -> Code:
        """
        Knuth's 1122 opening adapted to any length: first half color A,
        second half color B.
        """
        if not self.config.allow_duplicates:
            # Repeats are not a legal code here; take the first code instead
            return self.all_codes[0]
        colors = self.config.colors
        length = self.config.code_length
        if len(colors) < 2:
            return (colors[0],) * length
        half = length // 2
        return (colors[0],) * half + (colors[1],) * (length - half)

    def guaranteed_elimination(self, guess: Sequence[PegColor], remaining: Sequence[Code]) -> int:
        return len(remaining) - worst_case(guess, remaining)

    def candidates(self, remaining: Sequence[Code]) -> List[Code]:
        if len(self.all_codes) <= FULL_SEARCH_LIMIT:
            return list(self.all_codes)
        # Fresh generator per call: same inputs, same sample, no shared state
        rng = random.Random(self.seed)
        sample = rng.sample(self.all_codes, min(SAMPLE_SIZE, len(self.all_codes)))
        return list(remaining) + sample

    # --- Minimax ---

    def best_guess(self, remaining: Sequence[Code]) -> Optional[Code]:
        """
        The guess minimising the worst-case remaining set.
        Returns None only when `remaining` is empty (inconsistent history).
        """
        if not remaining:
            return None
        if len(remaining) <= 2:
            return remaining[0]

        started = time.perf_counter()
        remaining_set = set(remaining)
        best: Optional[Code] = None
        best_score: Optional[int] = None
        best_is_member = False

        for guess in self.candidates(remaining):
            s = worst_case(guess, remaining)
            is_member = guess in remaining_set
            if best_score is None or s < best_score:
                best, best_score, best_is_member = guess, s, is_member
            elif s == best_score and is_member and not best_is_member:
                best, best_is_member = guess, True

        logger.debug(
            "minimax over %d remaining picked worst case %s in %.3fs",
            len(remaining), best_score, time.perf_counter() - started,
        )
        return best

    def next_guess(self, history: Sequence[GuessResult]) -> Optional[Code]:
        """Opening move with no history, otherwise the minimax pick."""
        if not history:
            return self.opening_guess()
        return self.best_guess(self.possible_codes(history))
