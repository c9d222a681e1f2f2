import logging

import pytest

import main
import settings


@pytest.fixture(autouse=True)
def small_world(monkeypatch):
    monkeypatch.setattr(settings, "OPENWEATHER_API_KEY", "")
    monkeypatch.setattr(settings, "RAIN_DROP_COUNT", 50)
    monkeypatch.setattr(settings, "BASE_CLOUD_COUNT", 5)
    monkeypatch.setattr(settings, "MAX_PUDDLES", 5)


def test_headless_run_reports_every_second(caplog):
    with caplog.at_level(logging.INFO):
        main.main(["--weather", "storm", "--transition", "0.5", "--seconds", "3",
                   "--hour", "12", "--seed", "1"])
    status = [r.getMessage() for r in caplog.records if r.name == "main"]
    assert 3 <= len(status) <= 4
    assert "storm" in status[-1]
    assert "intensity=1.00" in status[-1]
    assert "friction=0.50" in status[-1]
    assert "Weather API disabled" in caplog.text


def test_unknown_weather_argument_is_ignored(caplog):
    with caplog.at_level(logging.INFO):
        main.main(["--weather", "hail", "--seconds", "0.5", "--hour", "20"])
    assert "unknown weather type" in caplog.text
    status = [r.getMessage() for r in caplog.records if r.name == "main"]
    assert status and "clear" in status[0]
