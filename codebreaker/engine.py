"""
Pure game logic (no HTTP, no storage).
We compute two feedback numbers for each guess:
- black: how many positions hold the right color in the right place
- white: how many of the remaining (non-black) guess pegs have a partner of the
  same color somewhere else in the secret

Duplicates are handled as multisets: a secret peg can only be matched once.
"""

from typing import List, Optional, Sequence

from .errors import ConfigurationError
from .types import Feedback, PegColor


def score(guess: Sequence[PegColor], secret: Sequence[PegColor]) -> Feedback:
    """
    Example:
      secret = [R, R, G, B]
      guess  = [R, G, R, Y]
      black = 1  (position 0)
      white = 2  (left over: {R,G,B} vs {G,R,Y} share G and R)
    """

    # 0. Validate lengths match
    n = len(secret)
    if n == 0 or len(guess) != n:
        raise ConfigurationError("Secret and guess must be the same non-zero length.")

    secret_left: List[Optional[PegColor]] = list(secret)
    guess_left: List[Optional[PegColor]] = list(guess)

    # 1. Exact matches; consume both sides so pass 2 cannot reuse them
    black = 0
    for i in range(n):
        if guess[i] == secret[i]:
            black += 1
            secret_left[i] = None
            guess_left[i] = None

    # 2. Each unconsumed guess peg takes the first unconsumed secret peg of its color
    white = 0
    for color in guess_left:
        if color is None:
            continue
        for j in range(n):
            if secret_left[j] == color:
                white += 1
                secret_left[j] = None
                break

    return Feedback(black, white)


def is_win(guess: Sequence[PegColor], secret: Sequence[PegColor]) -> bool:
    """
    Win = every peg black. Mismatched lengths are never a win.
    """
    if len(secret) == 0 or len(guess) != len(secret):
        return False
    return score(guess, secret).black == len(secret)
