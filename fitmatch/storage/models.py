"""SQLAlchemy models for the FitMatch database."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class UserRow(Base):
    """Profiles served by the user directory."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    age: Mapped[Optional[int]] = mapped_column(Integer)
    gender: Mapped[Optional[str]] = mapped_column(String(20))
    bio: Mapped[Optional[str]] = mapped_column(String(500))
    profile_image: Mapped[Optional[str]] = mapped_column(Text)
    latitude: Mapped[float] = mapped_column(Float, nullable=False, index=True)
    longitude: Mapped[float] = mapped_column(Float, nullable=False, index=True)
    fitness_level: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    fitness_goals: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    preferred_workouts: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    availability: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
    last_active: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<UserRow(id={self.id!r}, name={self.name!r})>"


class MatchRow(Base):
    """A like between two users and its state."""

    __tablename__ = "matches"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    pair_key: Mapped[str] = mapped_column(String(130), nullable=False, index=True)
    user_a: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    user_b: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    initiated_by: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    match_score: Mapped[int] = mapped_column(Integer, nullable=False)
    criteria: Mapped[dict] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    last_interaction: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )

    # At most one pending like per unordered pair
    __table_args__ = (
        Index(
            "uq_matches_pending_pair",
            "pair_key",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    def __repr__(self) -> str:
        return f"<MatchRow(id={self.id!r}, pair={self.pair_key!r}, status={self.status!r})>"


class ChatRow(Base):
    """A conversation between the two users of an accepted match."""

    __tablename__ = "chats"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    match_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("matches.id"), nullable=False, unique=True
    )
    user_a: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    user_b: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    last_activity: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    last_message_id: Mapped[Optional[str]] = mapped_column(String(64))

    messages: Mapped[list["MessageRow"]] = relationship(
        back_populates="chat",
        order_by="MessageRow.seq",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<ChatRow(id={self.id!r}, match_id={self.match_id!r})>"


class MessageRow(Base):
    """A message in a chat, ordered by seq."""

    __tablename__ = "messages"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    chat_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("chats.id"), nullable=False, index=True
    )
    seq: Mapped[int] = mapped_column(Integer, nullable=False)
    sender_id: Mapped[str] = mapped_column(String(64), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    read_by: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    chat: Mapped[ChatRow] = relationship(back_populates="messages")

    __table_args__ = (
        UniqueConstraint("chat_id", "seq", name="uq_messages_chat_seq"),
    )

    def __repr__(self) -> str:
        return f"<MessageRow(chat_id={self.chat_id!r}, seq={self.seq})>"
