"""
- HTTP call with clear fallback
Draw an unseeded secret from random.org. If anything goes wrong (no internet,
timeout, bad response), we fall back to the local secure generator so the game
still works. Seeded (level / daily) secrets never come through here.
"""

import logging
from typing import List

import requests

from . import config as settings
from .session import generate_secret
from .types import Code, DifficultyConfig

logger = logging.getLogger(__name__)

INTEGERS_URL = "https://www.random.org/integers/"
SEQUENCES_URL = "https://www.random.org/sequences/"


def _request_indices(cfg: DifficultyConfig) -> List[int]:
    top = cfg.color_count - 1
    if cfg.allow_duplicates:
        url = INTEGERS_URL
        params = {"num": cfg.code_length, "min": 0, "max": top, "col": 1,
                  "base": 10, "format": "plain", "rnd": "new"}
    else:
        # A shuffled 0..top; its prefix is a draw without repetition
        url = SEQUENCES_URL
        params = {"min": 0, "max": top, "col": 1, "format": "plain", "rnd": "new"}

    response = requests.get(url, params=params, timeout=settings.RANDOM_ORG_TIMEOUT)
    response.raise_for_status()

    # The body looks like: 0\n3\n1\n2\n
    values = [int(line) for line in response.text.splitlines() if line.strip()]
    values = values[: cfg.code_length]

    if len(values) != cfg.code_length:
        raise ValueError(f"random.org returned {len(values)} values, expected {cfg.code_length}.")
    if any(v < 0 or v > top for v in values):
        raise ValueError(f"random.org number out of range 0..{top}.")
    if not cfg.allow_duplicates and len(set(values)) != len(values):
        raise ValueError("random.org sequence repeated a value.")
    return values


def fetch_code(cfg: DifficultyConfig) -> Code:
    if not settings.RANDOM_ORG_ENABLED:
        return generate_secret(cfg)
    try:
        indices = _request_indices(cfg)
    except (requests.RequestException, ValueError) as exc:
        logger.warning("random.org draw failed (%s); using local generator", exc)
        return generate_secret(cfg)
    colors = cfg.colors
    return tuple(colors[i] for i in indices)
