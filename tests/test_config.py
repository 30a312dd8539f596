"""Tests for settings loading."""

import pytest

from fitmatch.config import ENV_OVERRIDES, Settings, load_settings, save_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)


def test_defaults_when_file_missing(tmp_path):
    settings = load_settings(tmp_path / "missing.yaml")

    assert settings.search_radius_m == 10_000
    assert settings.location_threshold_km == 10.0
    assert settings.online_window_minutes == 5.0


def test_values_from_yaml(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("search_radius_m: 2500\nlog_level: INFO\n", encoding="utf-8")

    settings = load_settings(path)

    assert settings.search_radius_m == 2500
    assert settings.log_level == "INFO"


def test_environment_overrides_file(tmp_path, monkeypatch):
    path = tmp_path / "settings.yaml"
    path.write_text("search_radius_m: 2500\n", encoding="utf-8")
    monkeypatch.setenv("FITMATCH_SEARCH_RADIUS_M", "7000")
    monkeypatch.setenv("FITMATCH_DATABASE_URL", "sqlite://")

    settings = load_settings(path)

    assert settings.search_radius_m == 7000
    assert settings.database_url == "sqlite://"


def test_invalid_radius_is_rejected(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("search_radius_m: -1\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_settings(path)


def test_save_then_load(tmp_path):
    path = tmp_path / "nested" / "settings.yaml"
    save_settings(Settings(online_window_minutes=10), path)

    assert load_settings(path).online_window_minutes == 10
