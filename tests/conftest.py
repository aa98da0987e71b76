"""Pytest configuration and fixtures."""

import pytest

from rollcore.config import ConfigManager


class ScriptedSource:
    """Draw source that hands out pre-set faces in order."""

    def __init__(self, faces):
        self._faces = iter(faces)
        self.calls = []

    def draw(self, n, sides):
        self.calls.append((n, sides))
        return [next(self._faces) for _ in range(n)]


@pytest.fixture
def scripted():
    """Factory for a scripted draw source."""
    return ScriptedSource


@pytest.fixture
def cde_pool():
    """Eight d10 faces used by the element reading tests."""
    return [1, 2, 3, 4, 5, 7, 10, 5]


@pytest.fixture
def config_manager(tmp_path):
    """ConfigManager writing into a temporary directory."""
    return ConfigManager(
        global_path=str(tmp_path / "config.global.json"),
        guilds_dir=str(tmp_path / "guilds"),
    )
