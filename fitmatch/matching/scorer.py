"""Compatibility score calculation for training partners.

Score formula (0-100):
- shared fitness goals, as a fraction of the first user's goals * 30
- shared preferred workouts, as a fraction of the first user's workouts * 30
- same fitness level: flat 20
- overlapping availability, as a fraction of the first user's slots * 20

Fractions are relative to the first profile only, so score(a, b) and
score(b, a) differ when set sizes differ. The score reads as "how good
b is for a".
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Tuple

from fitmatch.matching.geo import haversine_km
from fitmatch.profile.models import UserProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchCriteria:
    """Which criteria two profiles have in common."""
    goals: bool = False
    workouts: bool = False
    availability: bool = False
    location: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {
            "goals": self.goals,
            "workouts": self.workouts,
            "availability": self.availability,
            "location": self.location,
        }


@dataclass(frozen=True)
class CompatibilityScore:
    """Score with its per-component breakdown."""
    score: int                  # Final score (0-100)
    criteria: MatchCriteria
    goals: float                # Weighted components before rounding
    workouts: float
    level: float
    availability: float
    distance_km: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "criteria": self.criteria.to_dict(),
            "breakdown": {
                "goals": round(self.goals, 2),
                "workouts": round(self.workouts, 2),
                "level": round(self.level, 2),
                "availability": round(self.availability, 2),
            },
            "distance_km": round(self.distance_km, 2),
        }


class CompatibilityScorer:
    """Scores how well one user's profile suits another's."""

    WEIGHT_GOALS = 30
    WEIGHT_WORKOUTS = 30
    WEIGHT_LEVEL = 20
    WEIGHT_AVAILABILITY = 20

    def __init__(self, location_threshold_km: float = 10.0):
        """Initialize the scorer.

        Args:
            location_threshold_km: Distance at or under which the location
                criterion is met (default: 10.0)
        """
        self.location_threshold_km = location_threshold_km

    def score(self, a: UserProfile, b: UserProfile) -> CompatibilityScore:
        """Calculate the compatibility of b for a.

        Args:
            a: Profile whose sets form the denominators
            b: Candidate profile

        Returns:
            CompatibilityScore with breakdown and criteria flags
        """
        goals = self._overlap_fraction(a.fitness_goals, b.fitness_goals) * self.WEIGHT_GOALS
        workouts = (
            self._overlap_fraction(a.preferred_workouts, b.preferred_workouts)
            * self.WEIGHT_WORKOUTS
        )
        level = self.WEIGHT_LEVEL if a.fitness_level == b.fitness_level else 0
        hits, total = self._availability_hits(a, b)
        availability = (hits / total if total else 0.0) * self.WEIGHT_AVAILABILITY

        total_score = _round_half_up(goals + workouts + level + availability)
        distance_km = haversine_km(a.location, b.location)

        criteria = MatchCriteria(
            goals=bool(a.fitness_goals & b.fitness_goals),
            workouts=bool(a.preferred_workouts & b.preferred_workouts),
            availability=hits > 0,
            location=distance_km <= self.location_threshold_km,
        )

        return CompatibilityScore(
            score=min(100, max(0, total_score)),
            criteria=criteria,
            goals=goals,
            workouts=workouts,
            level=float(level),
            availability=availability,
            distance_km=distance_km,
        )

    def rank(
        self, user: UserProfile, candidates: Iterable[UserProfile]
    ) -> List[Tuple[UserProfile, CompatibilityScore]]:
        """Score candidates for user, best first (closer wins ties)."""
        scored = [(candidate, self.score(user, candidate)) for candidate in candidates]
        scored.sort(key=lambda pair: (-pair[1].score, pair[1].distance_km))
        logger.debug(f"Ranked {len(scored)} candidates for {user.id}")
        return scored

    def _overlap_fraction(self, mine: set, theirs: set) -> float:
        # Empty first set contributes nothing
        if not mine:
            return 0.0
        return len(mine & theirs) / len(mine)

    def _availability_hits(self, a: UserProfile, b: UserProfile) -> Tuple[int, int]:
        """Count a's slots overlapping any of b's slots on the same day.

        Returns:
            (hits, total slots of a). Each slot of a counts at most once, so the
            term never exceeds its weight. Counting every overlapping (slot of a,
            slot of b) pair instead would let one slot score several times and
            lean on the final clamp.
        """
        hits = 0
        for entry in a.availability:
            theirs = b.slots_for(entry.day)
            for slot in entry.time_slots:
                if any(slot.overlaps(other) for other in theirs):
                    hits += 1
        return hits, a.total_slots


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
