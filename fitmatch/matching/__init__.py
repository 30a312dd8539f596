"""Matching module for compatibility scoring and the mutual-match protocol."""

from fitmatch.matching.models import (
    LikeResult,
    MatchRecord,
    MatchStatus,
    NearbyCandidate,
    UserPair,
)
from fitmatch.matching.scorer import CompatibilityScore, CompatibilityScorer, MatchCriteria
from fitmatch.matching.service import MatchService

__all__ = [
    "LikeResult",
    "MatchRecord",
    "MatchStatus",
    "NearbyCandidate",
    "UserPair",
    "CompatibilityScore",
    "CompatibilityScorer",
    "MatchCriteria",
    "MatchService",
]
