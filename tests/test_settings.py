import importlib

import pytest

import settings


@pytest.fixture
def reload_settings(monkeypatch):
    """Reload ``settings`` after tweaking the environment, then restore it."""

    def _reload(**env):
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        return importlib.reload(settings)

    yield _reload
    monkeypatch.undo()
    importlib.reload(settings)


def test_environment_overrides(reload_settings):
    mod = reload_settings(
        WFX_OPENWEATHER_API_KEY="secret",
        WFX_REFRESH_INTERVAL="60",
        WFX_MAX_PUDDLES="12",
        WFX_LATITUDE="-33.9",
        WFX_GROUND_EFFECTS="0",
    )
    assert mod.OPENWEATHER_API_KEY == "secret"
    assert mod.REFRESH_INTERVAL == 60.0
    assert mod.MAX_PUDDLES == 12
    assert mod.DEFAULT_LATITUDE == pytest.approx(-33.9)
    assert mod.GROUND_EFFECTS is False


def test_invalid_numbers_fall_back_to_defaults(reload_settings):
    mod = reload_settings(WFX_RAIN_DROP_COUNT="lots", WFX_TIME_SCALE="fast")
    assert mod.RAIN_DROP_COUNT == 15000
    assert mod.TIME_SCALE == 1.0


def test_json_values_are_used_without_environment(monkeypatch):
    monkeypatch.delenv("WFX_MAX_PUDDLES", raising=False)
    monkeypatch.setattr(settings, "_FILE_SETTINGS", {"max_puddles": "7", "debug": 1})
    assert settings._get_int("WFX_MAX_PUDDLES", "max_puddles", 50) == 7
    assert settings._get_bool("WFX_DEBUG", "debug") is True
    monkeypatch.setattr(settings, "_FILE_SETTINGS", {"max_puddles": "many"})
    assert settings._get_int("WFX_MAX_PUDDLES", "max_puddles", 50) == 50


def test_bool_environment_parsing(monkeypatch):
    monkeypatch.setenv("WFX_FLAG", "false")
    assert settings._get_bool("WFX_FLAG", "flag", True) is False
    monkeypatch.setenv("WFX_FLAG", "yes")
    assert settings._get_bool("WFX_FLAG", "flag") is True
