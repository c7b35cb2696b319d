"""Configuration loading from YAML + environment variables."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

import yaml
from dotenv import load_dotenv

from .models import Availability, AvailableTime, DateOverride, TimeRange


@dataclass
class GoogleConfig:
    client_id: str = ""
    client_secret: str = ""
    token_uri: str = "https://oauth2.googleapis.com/token"


@dataclass
class AppleConfig:
    caldav_url: str = "https://caldav.icloud.com"


@dataclass
class CalendarConfig:
    # Consulted in this order when looking for the host's outbound calendar
    outbound_priority: list[str] = field(default_factory=lambda: ["google", "apple"])
    google: GoogleConfig = field(default_factory=GoogleConfig)
    apple: AppleConfig = field(default_factory=AppleConfig)


@dataclass
class ZoomConfig:
    client_id: str = ""
    client_secret: str = ""
    token_url: str = "https://zoom.us/oauth/token"
    api_base_url: str = "https://api.zoom.us/v2"


@dataclass
class ConferenceConfig:
    providers: list[str] = field(default_factory=lambda: ["google", "zoom"])


@dataclass
class ConflictConfig:
    exclusive_margin_seconds: int = 1


@dataclass
class SearchConfig:
    default_window_days: int = 90


@dataclass
class RetryConfig:
    max_retries: int = 3
    base_delay: float = 1.0


@dataclass
class DatabaseConfig:
    path: str = "bookingcore.db"


@dataclass
class Config:
    timezone: str = "UTC"
    calendar: CalendarConfig = field(default_factory=CalendarConfig)
    conference: ConferenceConfig = field(default_factory=ConferenceConfig)
    zoom: ZoomConfig = field(default_factory=ZoomConfig)
    conflicts: ConflictConfig = field(default_factory=ConflictConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)


def _resolve_env_vars(value: str) -> str:
    """Replace ${VAR} with environment variable values."""
    def replacer(match):
        var_name = match.group(1)
        return os.environ.get(var_name, match.group(0))
    return re.sub(r"\$\{(\w+)\}", replacer, value)


def _resolve_dict(d: dict) -> dict:
    """Recursively resolve env vars in a dict."""
    resolved = {}
    for k, v in d.items():
        if isinstance(v, str):
            resolved[k] = _resolve_env_vars(v)
        elif isinstance(v, dict):
            resolved[k] = _resolve_dict(v)
        elif isinstance(v, list):
            resolved[k] = [_resolve_env_vars(i) if isinstance(i, str) else i for i in v]
        else:
            resolved[k] = v
    return resolved


def load_config(config_path: str | Path, env_path: str | Path | None = None) -> Config:
    """Load config from YAML file with env var resolution."""
    config_path = Path(config_path).resolve()
    config_dir = config_path.parent

    if env_path:
        load_dotenv(env_path)
    else:
        # Look for .env next to config file first, then CWD
        env_beside_config = config_dir / ".env"
        if env_beside_config.exists():
            load_dotenv(env_beside_config)
        else:
            load_dotenv()

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _resolve_dict(raw)

    cal_data = raw.get("calendar", {})
    google_data = cal_data.get("google", {})
    apple_data = cal_data.get("apple", {})
    calendar = CalendarConfig(
        outbound_priority=cal_data.get("outbound_priority", ["google", "apple"]),
        google=GoogleConfig(
            client_id=google_data.get("client_id", ""),
            client_secret=google_data.get("client_secret", ""),
            token_uri=google_data.get("token_uri", "https://oauth2.googleapis.com/token"),
        ),
        apple=AppleConfig(
            caldav_url=apple_data.get("caldav_url", "https://caldav.icloud.com"),
        ),
    )

    conf_data = raw.get("conference", {})
    conference = ConferenceConfig(
        providers=conf_data.get("providers", ["google", "zoom"]),
    )

    zoom_data = raw.get("zoom", {})
    zoom = ZoomConfig(
        client_id=zoom_data.get("client_id", ""),
        client_secret=zoom_data.get("client_secret", ""),
        token_url=zoom_data.get("token_url", "https://zoom.us/oauth/token"),
        api_base_url=zoom_data.get("api_base_url", "https://api.zoom.us/v2"),
    )

    conflicts = ConflictConfig(
        exclusive_margin_seconds=int(
            raw.get("conflicts", {}).get("exclusive_margin_seconds", 1)
        ),
    )

    search = SearchConfig(
        default_window_days=int(raw.get("search", {}).get("default_window_days", 90)),
    )

    retry_data = raw.get("retry", {})
    retry = RetryConfig(
        max_retries=int(retry_data.get("max_retries", 3)),
        base_delay=float(retry_data.get("base_delay", 1.0)),
    )

    db_path = os.environ.get("DATABASE_PATH") or raw.get("database", {}).get("path", "bookingcore.db")
    database = DatabaseConfig(path=db_path)

    return Config(
        timezone=raw.get("timezone", "UTC"),
        calendar=calendar,
        conference=conference,
        zoom=zoom,
        conflicts=conflicts,
        search=search,
        retry=retry,
        database=database,
    )


def _parse_range(value) -> TimeRange:
    if isinstance(value, dict):
        return TimeRange(start_time=value["start_time"], end_time=value["end_time"])
    start, end = str(value).split("-")
    return TimeRange(start_time=start.strip(), end_time=end.strip())


def load_availability(path: str | Path) -> Availability:
    """Load a host availability YAML file.

    timezone: "Europe/Kyiv"
    available_times:
      - day: 1            # 0=Sunday
        time_ranges: ["09:00-17:00"]
    overrides:
      - date: 2024-01-07
        time_ranges: []   # blackout
    """
    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    available_times = [
        AvailableTime(day=int(item["day"]), time_ranges=[_parse_range(r) for r in item.get("time_ranges", [])])
        for item in raw.get("available_times", [])
    ]
    overrides = []
    for item in raw.get("overrides", []):
        target = item["date"]
        if not isinstance(target, date):
            target = date.fromisoformat(str(target))
        overrides.append(
            DateOverride(target_date=target, time_ranges=[_parse_range(r) for r in item.get("time_ranges", [])])
        )
    return Availability(
        timezone=raw.get("timezone", "UTC"),
        available_times=available_times,
        overrides=overrides,
    )
