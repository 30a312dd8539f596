"""Load and save user profiles as YAML seed files."""

import logging
from pathlib import Path
from typing import List

import yaml

from fitmatch.errors import ValidationError
from fitmatch.profile.models import UserProfile, parse_profile

logger = logging.getLogger(__name__)


def load_profiles(path: Path) -> List[UserProfile]:
    """Load user profiles from a YAML file.

    The file holds either a list of profiles or a mapping with a "users"
    list. Times must be quoted ("18:00") so YAML doesn't read them as
    base-60 integers.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If any profile is invalid
    """
    if not path.exists():
        raise FileNotFoundError(f"Seed file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return []
    if isinstance(data, dict):
        data = data.get("users", [])
    if not isinstance(data, list):
        raise ValidationError(f"Seed file {path} must contain a list of users")

    profiles = [parse_profile(entry) for entry in data]
    logger.info(f"Loaded {len(profiles)} profiles from {path}")
    return profiles


def save_profiles(profiles: List[UserProfile], path: Path) -> Path:
    """Save user profiles to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)

    data = {"users": [p.model_dump(mode="json", exclude_none=True) for p in profiles]}

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)

    return path
