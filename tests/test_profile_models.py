"""Tests for profile models and validation."""

from datetime import time

import pytest

from fitmatch.errors import ValidationError
from fitmatch.profile.models import FitnessGoal, TimeSlot, Weekday, parse_profile

from tests.conftest import make_profile


def valid_data(**overrides):
    data = {
        "id": "u1",
        "name": "Ana",
        "location": {"latitude": 10.0, "longitude": 20.0},
        "fitness_level": "beginner",
        "fitness_goals": ["endurance", "endurance", "weightLoss"],
        "preferred_workouts": ["yoga"],
        "availability": [
            {"day": "friday", "time_slots": [{"start": "07:00", "end": "08:00"}]}
        ],
    }
    data.update(overrides)
    return data


class TestParseProfile:
    """parse_profile turns bad input into our ValidationError."""

    def test_valid_profile(self):
        profile = parse_profile(valid_data())

        assert profile.fitness_goals == {FitnessGoal.ENDURANCE, FitnessGoal.WEIGHT_LOSS}
        assert profile.availability[0].day == Weekday.FRIDAY
        assert profile.availability[0].time_slots[0].start == time(7, 0)
        assert profile.active is True

    @pytest.mark.parametrize(
        "location",
        [
            {"latitude": 91.0, "longitude": 0.0},
            {"latitude": -90.5, "longitude": 0.0},
            {"latitude": 0.0, "longitude": 180.5},
        ],
    )
    def test_rejects_out_of_range_coordinates(self, location):
        with pytest.raises(ValidationError):
            parse_profile(valid_data(location=location))

    def test_rejects_slot_ending_before_start(self):
        availability = [
            {"day": "friday", "time_slots": [{"start": "09:00", "end": "08:00"}]}
        ]
        with pytest.raises(ValidationError):
            parse_profile(valid_data(availability=availability))

    def test_rejects_unknown_goal(self):
        with pytest.raises(ValidationError):
            parse_profile(valid_data(fitness_goals=["flying"]))

    def test_rejects_blank_name(self):
        with pytest.raises(ValidationError):
            parse_profile(valid_data(name="   "))


def test_time_slot_overlap_is_half_open():
    morning = TimeSlot(start=time(7), end=time(8))
    later = TimeSlot(start=time(8), end=time(9))
    inside = TimeSlot(start=time(7, 30), end=time(7, 45))

    assert not morning.overlaps(later)
    assert morning.overlaps(inside)
    assert inside.overlaps(morning)


def test_slots_for_merges_repeated_days():
    profile = make_profile(
        "u",
        availability=[
            {"day": "monday", "time_slots": [{"start": "07:00", "end": "08:00"}]},
            {"day": "monday", "time_slots": [{"start": "18:00", "end": "19:00"}]},
        ],
    )

    assert len(profile.slots_for(Weekday.MONDAY)) == 2
    assert profile.total_slots == 2


def test_public_projection_hides_training_data():
    public = make_profile("u", profile_image="u.png").public()

    assert public.model_dump().keys() == {"id", "name", "profile_image", "last_active"}
