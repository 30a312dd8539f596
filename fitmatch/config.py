"""Configuration management for FitMatch."""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Default paths
DATA_DIR = Path(__file__).parent.parent / "data"
DEFAULT_DB_PATH = DATA_DIR / "fitmatch.db"
DEFAULT_SETTINGS_PATH = DATA_DIR / "settings.yaml"
LOG_PATH = DATA_DIR / "fitmatch.log"

# Environment variable -> Settings field
ENV_OVERRIDES = {
    "FITMATCH_DATABASE_URL": "database_url",
    "FITMATCH_SEARCH_RADIUS_M": "search_radius_m",
    "FITMATCH_LOCATION_THRESHOLD_KM": "location_threshold_km",
    "FITMATCH_ONLINE_WINDOW_MINUTES": "online_window_minutes",
    "FITMATCH_FANOUT_QUEUE_SIZE": "fanout_queue_size",
    "FITMATCH_LOG_LEVEL": "log_level",
}


class Settings(BaseModel):
    """Tunable values for matching, presence and delivery."""

    database_url: str = Field(
        f"sqlite:///{DEFAULT_DB_PATH}", description="SQLAlchemy database URL"
    )
    search_radius_m: float = Field(
        10_000, gt=0, description="Radius of the nearby-candidate search in meters"
    )
    location_threshold_km: float = Field(
        10.0, gt=0, description="Distance under which the location criterion is met"
    )
    online_window_minutes: float = Field(
        5.0, ge=0, description="A user is online if active within this window"
    )
    fanout_queue_size: int = Field(
        1000, gt=0, description="Pending events kept per connected session"
    )
    log_level: str = Field("WARNING", description="Root log level")


def ensure_data_dir() -> None:
    """Ensure the data directory exists."""
    DATA_DIR.mkdir(parents=True, exist_ok=True)


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from a YAML file, then apply environment overrides.

    Args:
        path: Optional path to settings file. Defaults to data/settings.yaml.

    Returns:
        Settings instance. Defaults are used if the file doesn't exist.
    """
    if path is None:
        path = DEFAULT_SETTINGS_PATH

    data = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        logger.debug(f"Loaded settings from {path}")

    for env_name, field_name in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            data[field_name] = value

    return Settings.model_validate(data)


def save_settings(settings: Settings, path: Optional[Path] = None) -> Path:
    """Save settings to a YAML file.

    Args:
        settings: Settings instance to save.
        path: Optional path to save to. Defaults to data/settings.yaml.

    Returns:
        Path where settings were saved.
    """
    if path is None:
        path = DEFAULT_SETTINGS_PATH

    path.parent.mkdir(parents=True, exist_ok=True)

    data = settings.model_dump(mode="json")

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)

    return path
