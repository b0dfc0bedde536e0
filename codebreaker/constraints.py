"""
Candidate filtering given game history.

Given a pool of codes and a history of (guess, feedback) pairs, keep only the
codes that would have produced exactly the recorded feedback for every guess.
Each guess is an independent constraint, so the order of application does not
change the result, and re-applying a constraint is a no-op.
"""

from typing import Iterable, List, Sequence

from .engine import score
from .types import Code, Feedback, GuessResult, PegColor


def filter_codes(
    codes: Iterable[Code], guess: Sequence[PegColor], feedback: Feedback
) -> List[Code]:
    """Codes c with score(guess, c) == feedback, order preserved."""
    feedback = Feedback(*feedback)
    return [c for c in codes if score(guess, c) == feedback]


def replay_history(codes: Iterable[Code], history: Iterable[GuessResult]) -> List[Code]:
    remaining = list(codes)
    for entry in history:
        remaining = filter_codes(remaining, entry.guess, entry.feedback)
        if not remaining:
            break
    return remaining


def is_consistent(code: Code, history: Iterable[GuessResult]) -> bool:
    """True if `code` could still be the secret after `history`."""
    for entry in history:
        if score(entry.guess, code) != entry.feedback:
            return False
    return True
