"""Capabilities the matching engine and chat ledger depend on.

Implementations raise NotFoundError, ConflictError or StorageError from
fitmatch.errors; nothing else should leak out of them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional

from fitmatch.chat.models import Chat
from fitmatch.matching.models import MatchRecord, MatchStatus, UserPair
from fitmatch.profile.models import (
    FitnessGoal,
    FitnessLevel,
    GeoPoint,
    PublicProfile,
    UserProfile,
    WorkoutType,
)


@dataclass(frozen=True)
class NearFilter:
    """Attribute filter applied to a nearby search.

    None means "no constraint". A set requires at least one element in
    common with the candidate, so an empty set matches nobody.
    """
    fitness_level: Optional[FitnessLevel] = None
    goals_any: Optional[FrozenSet[FitnessGoal]] = None
    workouts_any: Optional[FrozenSet[WorkoutType]] = None
    exclude_ids: FrozenSet[str] = field(default_factory=frozenset)
    active_only: bool = True

    def accepts(self, profile: UserProfile) -> bool:
        if profile.id in self.exclude_ids:
            return False
        if self.active_only and not profile.active:
            return False
        if self.fitness_level is not None and profile.fitness_level != self.fitness_level:
            return False
        if self.goals_any is not None and not (self.goals_any & profile.fitness_goals):
            return False
        if self.workouts_any is not None and not (
            self.workouts_any & profile.preferred_workouts
        ):
            return False
        return True


class UserDirectory(ABC):
    """Read access to user profiles."""

    @abstractmethod
    def get_by_id(self, user_id: str) -> UserProfile:
        """Return the profile.

        Raises:
            NotFoundError: If no user has this id
        """
        pass

    @abstractmethod
    def find_near(
        self, origin: GeoPoint, radius_m: float, near_filter: NearFilter
    ) -> List[UserProfile]:
        """Profiles within radius_m of origin that pass the filter, nearest first."""
        pass

    def get_public(self, user_id: str) -> PublicProfile:
        return self.get_by_id(user_id).public()


class PersistenceStore(ABC):
    """Durable storage for match records and chats."""

    @abstractmethod
    def save_match(self, record: MatchRecord) -> MatchRecord:
        """Insert or update a record.

        Raises:
            ConflictError: If this would leave two pending records for the pair
        """
        pass

    @abstractmethod
    def find_pending_match(self, pair: UserPair) -> Optional[MatchRecord]:
        pass

    @abstractmethod
    def find_match(self, pair: UserPair, status: MatchStatus) -> Optional[MatchRecord]:
        """Most recent record of the pair with the given status."""
        pass

    @abstractmethod
    def transition_matches_to_accepted(
        self, pair: UserPair, record: MatchRecord, chat: Chat
    ) -> MatchRecord:
        """Store record, accept every pending record of the pair and create chat.

        All three happen in one transaction.
        """
        pass

    @abstractmethod
    def list_accepted_matches(self, user_id: str) -> List[MatchRecord]:
        """Accepted records involving user_id, latest interaction first."""
        pass

    @abstractmethod
    def save_chat(self, chat: Chat) -> Chat:
        pass

    @abstractmethod
    def get_chat_by_id(self, chat_id: str) -> Optional[Chat]:
        pass

    @abstractmethod
    def get_chat_for_participant(self, chat_id: str, user_id: str) -> Optional[Chat]:
        """The chat if it is active and user_id takes part in it."""
        pass

    @abstractmethod
    def list_active_chats_for_user(self, user_id: str) -> List[Chat]:
        """Active chats of user_id, latest activity first."""
        pass
