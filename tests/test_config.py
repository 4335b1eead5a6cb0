"""Test loading policy settings from a config module."""
import types

import config as settings
from RoyaleBot.policy.config import PolicyConfig


def test_shipped_settings_match_defaults():
    assert PolicyConfig.from_settings(settings) == PolicyConfig()


def test_settings_override_only_what_they_define():
    module = types.ModuleType("custom_settings")
    module.QUEEN_SAFE_RADIUS = 60
    module.EXPAND_FARTHEST_FIRST = True
    module.UNRELATED = "ignored"

    cfg = PolicyConfig.from_settings(module)

    assert cfg.queen_safe_radius == 60
    assert cfg.expand_farthest_first is True
    assert cfg.min_mines == PolicyConfig().min_mines


def test_no_settings_gives_defaults():
    assert PolicyConfig.from_settings(None) == PolicyConfig()


def test_neutral_archer_health_never_below_100():
    assert PolicyConfig().neutral_archer_health == 100
    assert PolicyConfig(min_avg_archer_health=150).neutral_archer_health == 150
