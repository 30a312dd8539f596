"""Value objects for likes, mutual matches and nearby candidates."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Optional
from uuid import uuid4

from fitmatch.errors import ValidationError
from fitmatch.matching.scorer import CompatibilityScore, MatchCriteria
from fitmatch.profile.models import UserProfile

if TYPE_CHECKING:
    from fitmatch.chat.models import Chat


class MatchStatus(str, Enum):
    """Lifecycle of a like."""
    PENDING = "pending"      # Liked, waiting for the other side
    ACCEPTED = "accepted"    # Both users liked each other
    REJECTED = "rejected"    # Declined by the liked user


@dataclass(frozen=True)
class UserPair:
    """Unordered pair of two distinct user ids."""
    first: str
    second: str

    @classmethod
    def of(cls, a: str, b: str) -> "UserPair":
        if a == b:
            raise ValidationError("A pair needs two different users")
        low, high = sorted((a, b))
        return cls(low, high)

    @property
    def key(self) -> str:
        """Stable key shared by both orderings of the pair."""
        return f"{self.first}:{self.second}"

    @property
    def members(self) -> FrozenSet[str]:
        return frozenset((self.first, self.second))

    def other(self, user_id: str) -> str:
        if user_id == self.first:
            return self.second
        if user_id == self.second:
            return self.first
        raise ValueError(f"{user_id} is not part of {self.key}")


@dataclass
class MatchRecord:
    """A like from initiated_by towards the other member of the pair."""
    pair: UserPair
    initiated_by: str
    match_score: int
    criteria: MatchCriteria
    created_at: datetime
    last_interaction: datetime
    status: MatchStatus = MatchStatus.PENDING
    id: str = field(default_factory=lambda: uuid4().hex)

    @property
    def target_id(self) -> str:
        return self.pair.other(self.initiated_by)

    def involves(self, user_id: str) -> bool:
        return user_id in self.pair.members

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "users": [self.pair.first, self.pair.second],
            "status": self.status.value,
            "match_score": self.match_score,
            "match_criteria": self.criteria.to_dict(),
            "initiated_by": self.initiated_by,
            "created_at": self.created_at.isoformat(),
            "last_interaction": self.last_interaction.isoformat(),
        }


@dataclass
class LikeResult:
    """Outcome of a like: the stored record, plus the chat on a mutual match."""
    match: MatchRecord
    chat: Optional["Chat"] = None

    @property
    def is_mutual(self) -> bool:
        return self.chat is not None


@dataclass
class NearbyCandidate:
    """A candidate returned by the nearby search, scored for the searcher."""
    profile: UserProfile
    compatibility: CompatibilityScore

    @property
    def score(self) -> int:
        return self.compatibility.score

    @property
    def distance_km(self) -> float:
        return self.compatibility.distance_km

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user": self.profile.model_dump(mode="json"),
            "match_score": self.score,
            "distance_km": round(self.distance_km, 2),
            "criteria": self.compatibility.criteria.to_dict(),
        }
