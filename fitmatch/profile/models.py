"""Pydantic models for user profile data."""

from datetime import datetime, time
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from fitmatch.errors import ValidationError


class FitnessLevel(str, Enum):
    """Self-reported training level."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class FitnessGoal(str, Enum):
    """What the user is training for."""

    WEIGHT_LOSS = "weightLoss"
    MUSCLE_GAIN = "muscleGain"
    ENDURANCE = "endurance"
    FLEXIBILITY = "flexibility"
    GENERAL_FITNESS = "generalFitness"


class WorkoutType(str, Enum):
    """Preferred kinds of workout."""

    CARDIO = "cardio"
    STRENGTH = "strength"
    YOGA = "yoga"
    CROSSFIT = "crossfit"
    RUNNING = "running"
    SWIMMING = "swimming"
    CYCLING = "cycling"


class Weekday(str, Enum):
    """Day of the week an availability entry applies to."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"


class Gender(str, Enum):
    """Gender options."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class GeoPoint(BaseModel):
    """A WGS84 coordinate pair."""

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


class TimeSlot(BaseModel):
    """A half-open [start, end) window within a day."""

    start: time
    end: time

    @model_validator(mode="after")
    def _start_before_end(self) -> "TimeSlot":
        if self.start >= self.end:
            raise ValueError(f"time slot start {self.start} must be before end {self.end}")
        return self

    def overlaps(self, other: "TimeSlot") -> bool:
        return self.start < other.end and other.start < self.end


class DayAvailability(BaseModel):
    """Time slots the user can train on a given day."""

    day: Weekday
    time_slots: list[TimeSlot] = Field(default_factory=list)


class UserProfile(BaseModel):
    """Profile of a user as seen by the matching engine."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    name: str = Field(..., min_length=1)
    age: Optional[int] = Field(None, ge=0, le=120)
    gender: Optional[Gender] = None
    bio: Optional[str] = Field(None, max_length=500)
    profile_image: Optional[str] = None

    location: GeoPoint
    fitness_level: FitnessLevel
    fitness_goals: set[FitnessGoal] = Field(default_factory=set)
    preferred_workouts: set[WorkoutType] = Field(default_factory=set)
    availability: list[DayAvailability] = Field(default_factory=list)

    active: bool = True
    last_active: Optional[datetime] = None

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

    def slots_for(self, day: Weekday) -> list[TimeSlot]:
        """All slots on a day, merging repeated day entries."""
        return [
            slot
            for entry in self.availability
            if entry.day == day
            for slot in entry.time_slots
        ]

    @property
    def total_slots(self) -> int:
        return sum(len(entry.time_slots) for entry in self.availability)

    def public(self) -> "PublicProfile":
        return PublicProfile(
            id=self.id,
            name=self.name,
            profile_image=self.profile_image,
            last_active=self.last_active,
        )


class PublicProfile(BaseModel):
    """Fields of a profile that may be shown to other users."""

    id: str
    name: str
    profile_image: Optional[str] = None
    last_active: Optional[datetime] = None


def parse_profile(data: dict[str, Any]) -> UserProfile:
    """Build a profile from untrusted input.

    Raises:
        ValidationError: If any field is missing or out of range.
    """
    try:
        return UserProfile.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid profile: {e}") from e
