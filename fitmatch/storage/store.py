"""SQLAlchemy implementation of the persistence store."""

import logging
from typing import Dict, List, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from fitmatch.chat.models import Chat, Message
from fitmatch.clock import ensure_aware
from fitmatch.errors import ConflictError, StorageError
from fitmatch.matching.models import MatchRecord, MatchStatus, UserPair
from fitmatch.matching.scorer import MatchCriteria
from fitmatch.storage.database import Database
from fitmatch.storage.interfaces import PersistenceStore
from fitmatch.storage.models import ChatRow, MatchRow, MessageRow

logger = logging.getLogger(__name__)


class SqlStore(PersistenceStore):
    """Stores match records and chats in a relational database."""

    def __init__(self, database: Database):
        self.database = database

    # Matches

    def save_match(self, record: MatchRecord) -> MatchRecord:
        with self.database.session_scope() as session:
            row = session.get(MatchRow, record.id)
            if row is None:
                row = MatchRow(id=record.id)
                session.add(row)
            _fill_match_row(row, record)
            self._flush_or_conflict(session, record.pair)
        logger.debug(f"Saved match {record.id} ({record.status.value})")
        return record

    def find_pending_match(self, pair: UserPair) -> Optional[MatchRecord]:
        return self.find_match(pair, MatchStatus.PENDING)

    def find_match(self, pair: UserPair, status: MatchStatus) -> Optional[MatchRecord]:
        with self.database.session_scope() as session:
            row = session.scalars(
                select(MatchRow)
                .where(MatchRow.pair_key == pair.key, MatchRow.status == status.value)
                .order_by(MatchRow.last_interaction.desc())
                .limit(1)
            ).first()
            return _match_from_row(row) if row is not None else None

    def transition_matches_to_accepted(
        self, pair: UserPair, record: MatchRecord, chat: Chat
    ) -> MatchRecord:
        with self.database.session_scope() as session:
            result = session.execute(
                update(MatchRow)
                .where(
                    MatchRow.pair_key == pair.key,
                    MatchRow.status == MatchStatus.PENDING.value,
                )
                .values(
                    status=MatchStatus.ACCEPTED.value,
                    last_interaction=record.last_interaction,
                )
            )
            # Zero rows: another handler accepted the pair first
            if result.rowcount != 1:
                raise ConflictError(f"No pending like to accept for {pair.key}")
            record.status = MatchStatus.ACCEPTED
            row = MatchRow(id=record.id)
            _fill_match_row(row, record)
            session.add(row)
            self._flush_or_conflict(session, pair)
            session.add(_new_chat_row(chat))
            self._flush_or_conflict(session, pair)
        logger.info(f"Pair {pair.key} accepted, chat {chat.id} created")
        return record

    def list_accepted_matches(self, user_id: str) -> List[MatchRecord]:
        with self.database.session_scope() as session:
            rows = session.scalars(
                select(MatchRow)
                .where(
                    or_(MatchRow.user_a == user_id, MatchRow.user_b == user_id),
                    MatchRow.status == MatchStatus.ACCEPTED.value,
                )
                .order_by(MatchRow.last_interaction.desc(), MatchRow.created_at.desc())
            ).all()
            return [_match_from_row(row) for row in rows]

    # Chats

    def save_chat(self, chat: Chat) -> Chat:
        with self.database.session_scope() as session:
            row = session.get(ChatRow, chat.id, options=[selectinload(ChatRow.messages)])
            if row is None:
                row = _new_chat_row(chat)
                session.add(row)
            else:
                row.is_active = chat.is_active
                row.last_activity = chat.last_activity
                row.last_message_id = chat.last_message.id if chat.last_message else None

            existing: Dict[str, MessageRow] = {m.id: m for m in row.messages}
            for message in chat.messages:
                message_row = existing.get(message.id)
                if message_row is None:
                    row.messages.append(_message_row(message))
                else:
                    message_row.read_by = sorted(message.read_by)
            try:
                session.flush()
            except IntegrityError as e:
                raise StorageError(f"Chat {chat.id} was changed concurrently: {e}") from e
        return chat

    def get_chat_by_id(self, chat_id: str) -> Optional[Chat]:
        with self.database.session_scope() as session:
            row = session.get(ChatRow, chat_id, options=[selectinload(ChatRow.messages)])
            return _chat_from_row(row) if row is not None else None

    def get_chat_for_participant(self, chat_id: str, user_id: str) -> Optional[Chat]:
        chat = self.get_chat_by_id(chat_id)
        if chat is None or not chat.is_active or not chat.has_participant(user_id):
            return None
        return chat

    def list_active_chats_for_user(self, user_id: str) -> List[Chat]:
        with self.database.session_scope() as session:
            rows = session.scalars(
                select(ChatRow)
                .options(selectinload(ChatRow.messages))
                .where(
                    or_(ChatRow.user_a == user_id, ChatRow.user_b == user_id),
                    ChatRow.is_active.is_(True),
                )
                .order_by(ChatRow.last_activity.desc())
            ).all()
            return [_chat_from_row(row) for row in rows]

    def _flush_or_conflict(self, session: Session, pair: UserPair) -> None:
        try:
            session.flush()
        except IntegrityError as e:
            raise ConflictError(f"A pending match already exists for {pair.key}") from e


def _fill_match_row(row: MatchRow, record: MatchRecord) -> None:
    row.pair_key = record.pair.key
    row.user_a = record.pair.first
    row.user_b = record.pair.second
    row.initiated_by = record.initiated_by
    row.status = record.status.value
    row.match_score = record.match_score
    row.criteria = record.criteria.to_dict()
    row.created_at = record.created_at
    row.last_interaction = record.last_interaction


def _match_from_row(row: MatchRow) -> MatchRecord:
    return MatchRecord(
        id=row.id,
        pair=UserPair.of(row.user_a, row.user_b),
        initiated_by=row.initiated_by,
        status=MatchStatus(row.status),
        match_score=row.match_score,
        criteria=MatchCriteria(**row.criteria),
        created_at=ensure_aware(row.created_at),
        last_interaction=ensure_aware(row.last_interaction),
    )


def _new_chat_row(chat: Chat) -> ChatRow:
    first, second = sorted(chat.participants)
    return ChatRow(
        id=chat.id,
        match_id=chat.match_id,
        user_a=first,
        user_b=second,
        is_active=chat.is_active,
        created_at=chat.created_at,
        last_activity=chat.last_activity,
        last_message_id=chat.last_message.id if chat.last_message else None,
    )


def _message_row(message: Message) -> MessageRow:
    return MessageRow(
        id=message.id,
        chat_id=message.chat_id,
        seq=message.seq,
        sender_id=message.sender_id,
        content=message.content,
        read_by=sorted(message.read_by),
        created_at=message.created_at,
    )


def _chat_from_row(row: ChatRow) -> Chat:
    messages = [
        Message(
            id=m.id,
            chat_id=m.chat_id,
            seq=m.seq,
            sender_id=m.sender_id,
            content=m.content,
            read_by=set(m.read_by),
            created_at=ensure_aware(m.created_at),
        )
        for m in row.messages
    ]
    return Chat(
        id=row.id,
        match_id=row.match_id,
        participants=frozenset((row.user_a, row.user_b)),
        created_at=ensure_aware(row.created_at),
        messages=messages,
        is_active=row.is_active,
    )
