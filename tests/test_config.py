"""Tests for roost.config — frozen AppConfig."""

import dataclasses

import pytest

from roost.config import AppConfig


class TestAppConfig:
    def test_defaults(self) -> None:
        config = AppConfig()
        assert config.base_path == ""
        assert config.strict_routes is False
        assert config.route_cache_size == 1024
        assert config.ignore_patterns == (r"[._]test\.py$",)
        assert config.autoescape is True
        assert config.debug is False

    def test_override(self) -> None:
        config = AppConfig(base_path="/docs", route_cache_size=8, debug=True)
        assert config.base_path == "/docs"
        assert config.route_cache_size == 8
        assert config.debug is True

    def test_frozen(self) -> None:
        config = AppConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.debug = True  # type: ignore[misc]

    def test_replace(self) -> None:
        config = dataclasses.replace(AppConfig(), strict_routes=True)
        assert config.strict_routes is True

    def test_negative_cache_size(self) -> None:
        with pytest.raises(ValueError, match="route_cache_size"):
            AppConfig(route_cache_size=-1)

    def test_zero_cache_size_allowed(self) -> None:
        assert AppConfig(route_cache_size=0).route_cache_size == 0
