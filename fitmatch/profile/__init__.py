"""Profile module for user profile data."""

from fitmatch.profile.models import (
    DayAvailability,
    FitnessGoal,
    FitnessLevel,
    Gender,
    GeoPoint,
    PublicProfile,
    TimeSlot,
    UserProfile,
    Weekday,
    WorkoutType,
    parse_profile,
)

__all__ = [
    "DayAvailability",
    "FitnessGoal",
    "FitnessLevel",
    "Gender",
    "GeoPoint",
    "PublicProfile",
    "TimeSlot",
    "UserProfile",
    "Weekday",
    "WorkoutType",
    "parse_profile",
]
