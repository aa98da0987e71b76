"""Tests for ConfigManager persistence."""

import json

import pytest

from rollcore.config import ConfigManager, RollLimits
from rollcore.errors import MalformedInput
from rollcore.roller import Roller


def _reload(tmp_path):
    return ConfigManager(
        global_path=str(tmp_path / "config.global.json"),
        guilds_dir=str(tmp_path / "guilds"),
    )


class TestConfigManager:
    """Test suite for global and per-guild settings."""

    def test_defaults(self, config_manager):
        """Test default limits and element."""
        assert config_manager.get_limits() == RollLimits(max_dice=100, max_sides=1000, max_repeat=50)
        assert config_manager.get_limits(1) == RollLimits()
        assert config_manager.get_default_element() == "fire"
        assert config_manager.get_default_element(1) == "fire"

    def test_guild_limit_round_trip(self, config_manager, tmp_path):
        """Test that a guild limit is saved and read back."""
        config_manager.set_limit(1, "max_dice", 20)
        assert config_manager.get_limits(1).max_dice == 20
        assert (tmp_path / "guilds" / "1.json").exists()
        assert _reload(tmp_path).get_limits(1).max_dice == 20

    def test_guild_limits_are_independent(self, config_manager):
        """Test that one guild's limits do not leak into another's."""
        config_manager.set_limit(1, "max_repeat", 5)
        assert config_manager.get_limits(2).max_repeat == 50
        assert config_manager.get_limits().max_repeat == 50

    def test_limit_is_at_least_one(self, config_manager):
        """Test that limits are clamped to a positive value."""
        config_manager.set_limit(1, "max_sides", -3)
        assert config_manager.get_limits(1).max_sides == 1

    def test_unknown_limit(self, config_manager):
        """Test that an unknown limit name is rejected."""
        with pytest.raises(ValueError):
            config_manager.set_limit(1, "max_fun", 3)

    def test_global_file_is_base_for_guilds(self, tmp_path):
        """Test that limits in the global file become the base for new guilds."""
        (tmp_path / "config.global.json").write_text(
            json.dumps({"limits": {"max_dice": 30}}), encoding="utf-8"
        )
        cfg = _reload(tmp_path)
        assert cfg.get_limits().max_dice == 30
        assert cfg.get_limits(9).max_dice == 30
        assert cfg.get_limits(9).max_sides == 1000

    def test_numeric_strings_in_guild_file(self, tmp_path):
        """Test that limits stored as strings are read back as ints."""
        guilds = tmp_path / "guilds"
        guilds.mkdir()
        (guilds / "7.json").write_text(json.dumps({"limits": {"max_dice": "50"}}), encoding="utf-8")
        limits = _reload(tmp_path).get_limits(7)
        assert limits.max_dice == 50
        assert isinstance(limits.max_dice, int)

    def test_non_numeric_limit_in_guild_file(self, tmp_path):
        """Test that an unusable limit falls back to defaults."""
        guilds = tmp_path / "guilds"
        guilds.mkdir()
        (guilds / "7.json").write_text(
            json.dumps({"limits": {"max_dice": "lots"}, "default_element": "water"}), encoding="utf-8"
        )
        cfg = _reload(tmp_path).get_guild_cfg(7)
        assert cfg.limits == RollLimits()
        assert cfg.default_element == "fire"

    def test_non_numeric_limit_in_global_file(self, tmp_path):
        """Test that a bad global file falls back to defaults."""
        (tmp_path / "config.global.json").write_text(
            json.dumps({"limits": {"max_sides": None}}), encoding="utf-8"
        )
        assert _reload(tmp_path).get_limits() == RollLimits()

    def test_string_limits_still_roll(self, tmp_path, scripted):
        """Test that a guild with string limits can still roll."""
        guilds = tmp_path / "guilds"
        guilds.mkdir()
        (guilds / "7.json").write_text(json.dumps({"limits": {"max_dice": "5"}}), encoding="utf-8")
        limits = _reload(tmp_path).get_limits(7)
        assert Roller("2d6", limits).roll_with_source(scripted([2, 3])).get_total() == 5
        with pytest.raises(MalformedInput):
            Roller("6d6", limits)

    def test_default_element(self, config_manager, tmp_path):
        """Test that element aliases are normalized and saved."""
        config_manager.set_default_element(1, "Eau")
        assert config_manager.get_default_element(1) == "water"
        assert _reload(tmp_path).get_default_element(1) == "water"

    def test_unknown_element(self, config_manager):
        """Test that an unknown element is malformed input."""
        with pytest.raises(MalformedInput):
            config_manager.set_default_element(1, "air")

    def test_corrupt_guild_file(self, tmp_path):
        """Test that an unreadable guild file falls back to defaults."""
        guilds = tmp_path / "guilds"
        guilds.mkdir()
        (guilds / "7.json").write_text("{not json", encoding="utf-8")
        cfg = _reload(tmp_path).get_guild_cfg(7)
        assert cfg.limits == RollLimits()
        assert cfg.default_element == "fire"

    def test_unknown_element_in_file(self, tmp_path):
        """Test that a bad element on disk falls back to defaults."""
        guilds = tmp_path / "guilds"
        guilds.mkdir()
        (guilds / "7.json").write_text(json.dumps({"default_element": "air"}), encoding="utf-8")
        assert _reload(tmp_path).get_default_element(7) == "fire"
