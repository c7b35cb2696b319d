"""Tests for config and availability file loading."""

from __future__ import annotations

from datetime import date

import pytest

from bookingcore.config import load_availability, load_config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("DATABASE_PATH", raising=False)


def test_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("timezone: Europe/Kyiv\n")

    config = load_config(path, env_path=tmp_path / ".env")

    assert config.timezone == "Europe/Kyiv"
    assert config.calendar.outbound_priority == ["google", "apple"]
    assert config.conference.providers == ["google", "zoom"]
    assert config.conflicts.exclusive_margin_seconds == 1
    assert config.search.default_window_days == 90
    assert config.database.path == "bookingcore.db"


def test_env_var_interpolation(tmp_path, monkeypatch):
    monkeypatch.setenv("ZOOM_CLIENT_ID", "zoom-id")
    path = tmp_path / "config.yaml"
    path.write_text(
        "zoom:\n"
        "  client_id: ${ZOOM_CLIENT_ID}\n"
        "  client_secret: ${ZOOM_SECRET_NOT_SET}\n"
        "calendar:\n"
        "  outbound_priority: [apple]\n"
        "  apple:\n"
        "    caldav_url: https://caldav.example.com\n"
        "retry:\n"
        "  max_retries: 5\n"
    )

    config = load_config(path, env_path=tmp_path / ".env")

    assert config.zoom.client_id == "zoom-id"
    assert config.zoom.client_secret == "${ZOOM_SECRET_NOT_SET}"
    assert config.calendar.outbound_priority == ["apple"]
    assert config.calendar.apple.caldav_url == "https://caldav.example.com"
    assert config.retry.max_retries == 5


def test_dotenv_beside_config(tmp_path, monkeypatch):
    monkeypatch.delenv("GOOGLE_CLIENT_ID", raising=False)
    (tmp_path / ".env").write_text("GOOGLE_CLIENT_ID=from-dotenv\n")
    path = tmp_path / "config.yaml"
    path.write_text("calendar:\n  google:\n    client_id: ${GOOGLE_CLIENT_ID}\n")

    config = load_config(path)

    assert config.calendar.google.client_id == "from-dotenv"


def test_database_path_env_override(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_PATH", "/data/bookings.db")
    path = tmp_path / "config.yaml"
    path.write_text("database:\n  path: local.db\n")

    assert load_config(path, env_path=tmp_path / ".env").database.path == "/data/bookings.db"


def test_missing_config(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml", env_path=tmp_path / ".env")


def test_load_availability(tmp_path):
    path = tmp_path / "availability.yaml"
    path.write_text(
        "timezone: America/New_York\n"
        "available_times:\n"
        "  - day: 0\n"
        "    time_ranges: ['09:00-21:00']\n"
        "  - day: 1\n"
        "    time_ranges:\n"
        "      - {start_time: '09:00', end_time: '12:00'}\n"
        "overrides:\n"
        "  - date: 2024-01-07\n"
        "    time_ranges: []\n"
    )

    availability = load_availability(path)

    assert availability.timezone == "America/New_York"
    assert availability.available_times[0].day == 0
    assert availability.available_times[0].time_ranges[0].start_time == "09:00"
    assert availability.available_times[1].time_ranges[0].end_time == "12:00"
    assert availability.overrides[0].target_date == date(2024, 1, 7)
    assert availability.overrides[0].time_ranges == []
