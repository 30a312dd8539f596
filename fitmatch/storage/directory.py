"""SQLAlchemy implementation of the user directory."""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select

from fitmatch.clock import ensure_aware
from fitmatch.errors import NotFoundError
from fitmatch.matching.geo import bounding_box, haversine_km
from fitmatch.profile.models import GeoPoint, UserProfile
from fitmatch.storage.database import Database
from fitmatch.storage.interfaces import NearFilter, UserDirectory
from fitmatch.storage.models import UserRow

logger = logging.getLogger(__name__)


class SqlUserDirectory(UserDirectory):
    """Profiles stored in the users table.

    Nearby search narrows candidates with a lat/lon bounding box in SQL and
    then filters by exact great-circle distance.
    """

    def __init__(self, database: Database):
        self.database = database

    def add_user(self, profile: UserProfile) -> UserProfile:
        """Insert or replace a profile."""
        with self.database.session_scope() as session:
            row = session.get(UserRow, profile.id)
            if row is None:
                row = UserRow(id=profile.id)
                session.add(row)
            _fill_user_row(row, profile)
        logger.debug(f"Stored profile {profile.id}")
        return profile

    def get_by_id(self, user_id: str) -> UserProfile:
        with self.database.session_scope() as session:
            row = session.get(UserRow, user_id)
            if row is None:
                raise NotFoundError(f"User {user_id} not found")
            return _profile_from_row(row)

    def find_near(
        self, origin: GeoPoint, radius_m: float, near_filter: NearFilter
    ) -> List[UserProfile]:
        radius_km = radius_m / 1000.0
        min_lat, max_lat, min_lon, max_lon = bounding_box(origin, radius_km)

        query = select(UserRow).where(
            UserRow.latitude.between(min_lat, max_lat),
            UserRow.longitude.between(min_lon, max_lon),
        )
        if near_filter.active_only:
            query = query.where(UserRow.active.is_(True))
        if near_filter.fitness_level is not None:
            query = query.where(UserRow.fitness_level == near_filter.fitness_level.value)
        if near_filter.exclude_ids:
            query = query.where(UserRow.id.not_in(sorted(near_filter.exclude_ids)))

        with self.database.session_scope() as session:
            rows = session.scalars(query).all()
            profiles = [_profile_from_row(row) for row in rows]

        # Set membership filters run in Python; JSON containment is not portable
        nearby = [
            (haversine_km(origin, p.location), p)
            for p in profiles
            if near_filter.accepts(p)
        ]
        nearby = [(d, p) for d, p in nearby if d <= radius_km]
        nearby.sort(key=lambda pair: pair[0])
        logger.debug(f"{len(nearby)} users within {radius_m:.0f}m of {origin}")
        return [p for _, p in nearby]

    def touch(self, user_id: str, when: datetime) -> None:
        """Record user activity for presence."""
        with self.database.session_scope() as session:
            row = session.get(UserRow, user_id)
            if row is None:
                raise NotFoundError(f"User {user_id} not found")
            row.last_active = when


def _fill_user_row(row: UserRow, profile: UserProfile) -> None:
    data = profile.model_dump(mode="json")
    row.name = profile.name
    row.age = profile.age
    row.gender = profile.gender.value if profile.gender else None
    row.bio = profile.bio
    row.profile_image = profile.profile_image
    row.latitude = profile.location.latitude
    row.longitude = profile.location.longitude
    row.fitness_level = profile.fitness_level.value
    row.fitness_goals = sorted(data["fitness_goals"])
    row.preferred_workouts = sorted(data["preferred_workouts"])
    row.availability = data["availability"]
    row.active = profile.active
    row.last_active = profile.last_active


def _profile_from_row(row: UserRow) -> UserProfile:
    last_active: Optional[datetime] = None
    if row.last_active is not None:
        last_active = ensure_aware(row.last_active)
    return UserProfile(
        id=row.id,
        name=row.name,
        age=row.age,
        gender=row.gender,
        bio=row.bio,
        profile_image=row.profile_image,
        location=GeoPoint(latitude=row.latitude, longitude=row.longitude),
        fitness_level=row.fitness_level,
        fitness_goals=set(row.fitness_goals),
        preferred_workouts=set(row.preferred_workouts),
        availability=row.availability,
        active=row.active,
        last_active=last_active,
    )
