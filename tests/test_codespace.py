from math import perm

import pytest

from codebreaker.codespace import all_codes, code_space_size
from codebreaker.errors import ConfigurationError
from codebreaker.types import TIERS, DifficultyConfig, PegColor


def test_duplicates_allowed_is_full_cartesian_product():
    cfg = DifficultyConfig(code_length=3, color_count=4, allow_duplicates=True, max_attempts=8)
    codes = all_codes(cfg)
    assert len(codes) == 4 ** 3
    assert len(set(codes)) == len(codes)
    assert codes[0] == (PegColor.RED,) * 3


def test_no_duplicates_is_permutations():
    cfg = DifficultyConfig(code_length=3, color_count=5, allow_duplicates=False, max_attempts=8)
    codes = all_codes(cfg)
    assert len(codes) == 5 * 4 * 3
    assert all(len(set(c)) == 3 for c in codes)
    assert all(set(c) <= set(cfg.colors) for c in codes)


@pytest.mark.parametrize("tier", TIERS, ids=lambda t: t.name)
def test_size_matches_formula_for_every_tier(tier):
    cfg = tier.config
    expected = cfg.color_count ** cfg.code_length if cfg.allow_duplicates else perm(cfg.color_count, cfg.code_length)
    assert code_space_size(cfg) == expected


def test_master_tier_space_size():
    assert code_space_size(TIERS[-1].config) == 32768


@pytest.mark.parametrize("cfg", [
    DifficultyConfig(0, 4, True, 8),
    DifficultyConfig(4, 0, True, 8),
    DifficultyConfig(4, 3, False, 8),
    DifficultyConfig(4, 9, True, 8),
])
def test_bad_configs_raise(cfg):
    with pytest.raises(ConfigurationError):
        all_codes(cfg)
