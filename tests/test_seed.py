"""Tests for YAML seed files."""

from pathlib import Path

import pytest

from fitmatch.errors import ValidationError
from fitmatch.seed import load_profiles, save_profiles

from tests.conftest import make_profile

SEED_FILE = Path(__file__).parent.parent / "data" / "seed.yaml"


def test_bundled_seed_file_loads():
    profiles = load_profiles(SEED_FILE)

    assert [p.id for p in profiles] == ["ana", "bruno", "carla"]
    assert profiles[0].availability[0].time_slots[0].start.hour == 18


def test_plain_list_is_accepted(tmp_path):
    path = tmp_path / "users.yaml"
    path.write_text(
        "- id: solo\n"
        "  name: Solo\n"
        "  location: {latitude: 0, longitude: 0}\n"
        "  fitness_level: beginner\n",
        encoding="utf-8",
    )

    (profile,) = load_profiles(path)

    assert profile.id == "solo"
    assert profile.fitness_goals == set()


def test_invalid_profile_raises(tmp_path):
    path = tmp_path / "users.yaml"
    path.write_text("- id: broken\n  name: ''\n", encoding="utf-8")

    with pytest.raises(ValidationError):
        load_profiles(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_profiles(tmp_path / "nope.yaml")


def test_save_then_load(tmp_path):
    profiles = [make_profile("ana", bio="Runner"), make_profile("bruno")]

    path = save_profiles(profiles, tmp_path / "out" / "users.yaml")

    assert load_profiles(path) == profiles
