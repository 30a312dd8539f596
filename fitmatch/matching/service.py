"""Like / mutual-match state machine and nearby candidate search.

A like creates a pending record. When the liked user has already liked
back, the new record is stored as accepted, the reciprocal record flips to
accepted, and a chat is created. The three writes commit together under a
lock held for the pair, so no reader ever sees half of a mutual match.
"""

import logging
from typing import List, Optional

from fitmatch.chat.models import Chat
from fitmatch.clock import Clock, SystemClock, ensure_aware
from fitmatch.errors import AlreadyMatchedError, ConflictError, NotFoundError
from fitmatch.matching.models import (
    LikeResult,
    MatchRecord,
    MatchStatus,
    NearbyCandidate,
    UserPair,
)
from fitmatch.matching.scorer import CompatibilityScorer
from fitmatch.storage.interfaces import NearFilter, PersistenceStore, UserDirectory
from fitmatch.storage.locks import KeyedLock

logger = logging.getLogger(__name__)


class MatchService:
    """Records likes, detects mutual matches and finds nearby partners."""

    DEFAULT_RADIUS_M = 10_000

    def __init__(
        self,
        directory: UserDirectory,
        store: PersistenceStore,
        scorer: Optional[CompatibilityScorer] = None,
        clock: Optional[Clock] = None,
        pair_locks: Optional[KeyedLock] = None,
        search_radius_m: float = DEFAULT_RADIUS_M,
    ):
        self.directory = directory
        self.store = store
        self.scorer = scorer or CompatibilityScorer()
        self.clock = clock or SystemClock()
        self.pair_locks = pair_locks or KeyedLock()
        self.search_radius_m = search_radius_m

    def like(self, user_id: str, target_id: str) -> LikeResult:
        """Record that user_id likes target_id.

        Args:
            user_id: The liking user
            target_id: The liked user

        Returns:
            LikeResult with the stored record, and the new chat if the like
            completed a mutual match

        Raises:
            ValidationError: If a user likes themselves
            NotFoundError: If either user doesn't exist
            ConflictError: If user_id already has a pending like for target_id
            AlreadyMatchedError: If the pair is already mutually matched
        """
        pair = UserPair.of(user_id, target_id)
        target = self.directory.get_by_id(target_id)
        user = self.directory.get_by_id(user_id)
        # Score is always computed for the liker
        compatibility = self.scorer.score(user, target)

        with self.pair_locks.hold(pair.key):
            if self.store.find_match(pair, MatchStatus.ACCEPTED) is not None:
                raise AlreadyMatchedError(f"{user_id} and {target_id} are already matched")

            pending = self.store.find_pending_match(pair)
            if pending is not None and pending.initiated_by == user_id:
                raise ConflictError(f"{user_id} already has a pending like for {target_id}")

            now = ensure_aware(self.clock.now())
            record = MatchRecord(
                pair=pair,
                initiated_by=user_id,
                match_score=compatibility.score,
                criteria=compatibility.criteria,
                created_at=now,
                last_interaction=now,
            )

            if pending is None:
                self.store.save_match(record)
                logger.info(f"{user_id} liked {target_id} (score {record.match_score})")
                return LikeResult(match=record)

            chat = Chat(
                match_id=record.id,
                participants=pair.members,
                created_at=now,
            )
            self.store.transition_matches_to_accepted(pair, record, chat)
            logger.info(f"Mutual match between {user_id} and {target_id}, chat {chat.id}")
            return LikeResult(match=record, chat=chat)

    def reject(self, user_id: str, target_id: str) -> MatchRecord:
        """Decline the pending like that target_id sent to user_id.

        Raises:
            NotFoundError: If target_id has no pending like for user_id
        """
        pair = UserPair.of(user_id, target_id)
        with self.pair_locks.hold(pair.key):
            pending = self.store.find_pending_match(pair)
            if pending is None or pending.initiated_by != target_id:
                raise NotFoundError(f"No pending like from {target_id} to {user_id}")

            pending.status = MatchStatus.REJECTED
            pending.last_interaction = ensure_aware(self.clock.now())
            self.store.save_match(pending)

        logger.info(f"{user_id} rejected {target_id}")
        return pending

    def list_mutual(self, user_id: str) -> List[MatchRecord]:
        """Accepted matches of user_id, most recent interaction first."""
        return self.store.list_accepted_matches(user_id)

    def find_nearby(
        self, user_id: str, radius_m: Optional[float] = None
    ) -> List[NearbyCandidate]:
        """Active users near user_id sharing level, a goal and a workout.

        Candidates are scored from user_id's point of view and returned best
        first, closer candidates first on equal scores.

        Raises:
            NotFoundError: If user_id doesn't exist
        """
        user = self.directory.get_by_id(user_id)
        if radius_m is None:
            radius_m = self.search_radius_m

        near_filter = NearFilter(
            fitness_level=user.fitness_level,
            goals_any=frozenset(user.fitness_goals),
            workouts_any=frozenset(user.preferred_workouts),
            exclude_ids=frozenset({user.id}),
        )
        candidates = self.directory.find_near(user.location, radius_m, near_filter)
        ranked = self.scorer.rank(user, candidates)

        logger.info(f"Found {len(ranked)} nearby candidates for {user_id}")
        return [
            NearbyCandidate(profile=profile, compatibility=compatibility)
            for profile, compatibility in ranked
        ]
