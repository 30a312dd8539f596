"""Test configuration and shared fixtures."""

from datetime import datetime, timezone

import pytest

from fitmatch.chat.fanout import NotificationHub
from fitmatch.chat.ledger import ChatLedger
from fitmatch.clock import FixedClock
from fitmatch.matching.service import MatchService
from fitmatch.profile.models import UserProfile
from fitmatch.storage.database import Database
from fitmatch.storage.directory import SqlUserDirectory
from fitmatch.storage.store import SqlStore

# Monday
NOW = datetime(2024, 3, 18, 12, 0, tzinfo=timezone.utc)

# About 2 km apart, north-south
ORIGIN = {"latitude": -34.6037, "longitude": -58.3816}
TWO_KM_NORTH = {"latitude": -34.5857, "longitude": -58.3816}
FAR_AWAY = {"latitude": -31.4201, "longitude": -64.1888}


def make_profile(user_id: str, **overrides) -> UserProfile:
    """Build a valid profile, overriding any field."""
    data = {
        "id": user_id,
        "name": user_id.capitalize(),
        "location": ORIGIN,
        "fitness_level": "intermediate",
        "fitness_goals": ["endurance"],
        "preferred_workouts": ["running"],
        "availability": [
            {"day": "monday", "time_slots": [{"start": "18:00", "end": "19:00"}]}
        ],
    }
    data.update(overrides)
    return UserProfile.model_validate(data)


# ============================================================================
# Infrastructure Fixtures
# ============================================================================

@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def database(tmp_path) -> Database:
    db = Database(f"sqlite:///{tmp_path / 'fitmatch-test.db'}")
    db.init()
    yield db
    db.dispose()


@pytest.fixture
def directory(database) -> SqlUserDirectory:
    return SqlUserDirectory(database)


@pytest.fixture
def store(database) -> SqlStore:
    return SqlStore(database)


@pytest.fixture
def hub() -> NotificationHub:
    return NotificationHub(queue_size=100)


# ============================================================================
# Service Fixtures
# ============================================================================

@pytest.fixture
def match_service(directory, store, clock) -> MatchService:
    return MatchService(directory=directory, store=store, clock=clock)


@pytest.fixture
def ledger(store, directory, hub, clock) -> ChatLedger:
    return ChatLedger(store=store, directory=directory, channel=hub, clock=clock)


@pytest.fixture
def users(directory):
    """Ana and Bruno, 2 km apart, sharing a Monday evening slot."""
    ana = directory.add_user(
        make_profile(
            "ana",
            fitness_goals=["endurance", "weightLoss"],
            preferred_workouts=["running"],
        )
    )
    bruno = directory.add_user(
        make_profile(
            "bruno",
            location=TWO_KM_NORTH,
            fitness_goals=["endurance"],
            preferred_workouts=["running", "yoga"],
        )
    )
    return ana, bruno


@pytest.fixture
def chat(match_service, users):
    """Chat created by a mutual like between Ana and Bruno."""
    match_service.like("ana", "bruno")
    result = match_service.like("bruno", "ana")
    return result.chat
