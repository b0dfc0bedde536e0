"""
Enumerates every code a difficulty configuration admits.

- duplicates allowed:  color_count ** code_length codes (Cartesian expansion)
- no duplicates:       color_count * (color_count - 1) * ... codes (permutations,
                       pruning any branch that reuses a color)

Output order is deterministic: palette order, lexicographic by position.
"""

from math import perm
from typing import List, Set, Tuple

from .errors import ConfigurationError
from .types import PALETTE, Code, DifficultyConfig, PegColor


def validate_config(config: DifficultyConfig) -> None:
    if config.code_length <= 0:
        raise ConfigurationError(f"code_length must be positive, got {config.code_length}.")
    if config.color_count <= 0:
        raise ConfigurationError(f"color_count must be positive, got {config.color_count}.")
    if config.color_count > len(PALETTE):
        raise ConfigurationError(
            f"color_count {config.color_count} exceeds the {len(PALETTE)}-color palette."
        )
    if not config.allow_duplicates and config.color_count < config.code_length:
        raise ConfigurationError(
            f"Need at least {config.code_length} colors for a code without duplicates, "
            f"got {config.color_count}."
        )
    if config.max_attempts <= 0:
        raise ConfigurationError(f"max_attempts must be positive, got {config.max_attempts}.")


def code_space_size(config: DifficultyConfig) -> int:
    validate_config(config)
    if config.allow_duplicates:
        return config.color_count ** config.code_length
    return perm(config.color_count, config.code_length)


def all_codes(config: DifficultyConfig) -> Tuple[Code, ...]:
    validate_config(config)
    colors = config.colors
    out: List[Code] = []

    if config.allow_duplicates:
        _expand(colors, config.code_length, (), out)
    else:
        _permute(colors, config.code_length, (), set(), out)

    return tuple(out)


def _expand(colors: Tuple[PegColor, ...], length: int, prefix: Code, out: List[Code]) -> None:
    if len(prefix) == length:
        out.append(prefix)
        return
    for color in colors:
        _expand(colors, length, prefix + (color,), out)


def _permute(
    colors: Tuple[PegColor, ...],
    length: int,
    prefix: Code,
    used: Set[PegColor],
    out: List[Code],
) -> None:
    if len(prefix) == length:
        out.append(prefix)
        return
    for color in colors:
        if color in used:
            continue
        used.add(color)
        _permute(colors, length, prefix + (color,), used, out)
        used.discard(color)
