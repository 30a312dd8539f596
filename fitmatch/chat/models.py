"""Value objects for chats, messages and their listings."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, FrozenSet, List, Optional
from uuid import uuid4

from fitmatch.profile.models import PublicProfile


@dataclass
class Message:
    """One entry of a chat's append-only log."""
    chat_id: str
    seq: int                    # Position in the chat, starting at 1
    sender_id: str
    content: str
    created_at: datetime
    read_by: set = field(default_factory=set)
    id: str = field(default_factory=lambda: uuid4().hex)

    def __post_init__(self):
        # The sender has always read their own message
        self.read_by.add(self.sender_id)

    def is_unread_by(self, user_id: str) -> bool:
        return user_id != self.sender_id and user_id not in self.read_by

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "chat_id": self.chat_id,
            "seq": self.seq,
            "sender_id": self.sender_id,
            "content": self.content,
            "read_by": sorted(self.read_by),
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class Chat:
    """Conversation opened by a mutual match."""
    match_id: str
    participants: FrozenSet[str]
    created_at: datetime
    messages: List[Message] = field(default_factory=list)
    last_message: Optional[Message] = None
    last_activity: Optional[datetime] = None
    is_active: bool = True
    id: str = field(default_factory=lambda: uuid4().hex)

    def __post_init__(self):
        self.participants = frozenset(self.participants)
        if len(self.participants) != 2:
            raise ValueError("A chat has exactly two participants")
        self._refresh_last_message()

    def has_participant(self, user_id: str) -> bool:
        return user_id in self.participants

    def other_participant(self, user_id: str) -> str:
        (other,) = self.participants - {user_id}
        return other

    @property
    def next_seq(self) -> int:
        return self.messages[-1].seq + 1 if self.messages else 1

    def append(self, sender_id: str, content: str, now: datetime) -> Message:
        """Add a message at the end of the log and refresh the cache."""
        # Timestamps never go backwards within a chat
        if self.messages and now < self.messages[-1].created_at:
            now = self.messages[-1].created_at
        message = Message(
            chat_id=self.id,
            seq=self.next_seq,
            sender_id=sender_id,
            content=content,
            created_at=now,
        )
        self.messages.append(message)
        self._refresh_last_message()
        return message

    def unread_for(self, user_id: str) -> List[Message]:
        return [m for m in self.messages if m.is_unread_by(user_id)]

    def mark_read(self, user_id: str) -> List[Message]:
        """Add user_id to read_by of every unread message; return those changed."""
        changed = self.unread_for(user_id)
        for message in changed:
            message.read_by.add(user_id)
        return changed

    def _refresh_last_message(self) -> None:
        if self.messages:
            self.last_message = self.messages[-1]
            self.last_activity = self.last_message.created_at
        else:
            self.last_message = None
            self.last_activity = self.created_at


@dataclass
class ChatSummary:
    """A row of the user's chat list."""
    chat_id: str
    user: PublicProfile
    online: bool
    last_message: str
    time: str
    unread_count: int
    last_activity: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.chat_id,
            "user": {
                "id": self.user.id,
                "name": self.user.name,
                "profile_image": self.user.profile_image,
                "online": self.online,
                "last_message": self.last_message,
                "time": self.time,
            },
            "unread_count": self.unread_count,
        }


@dataclass
class MessageView:
    """A message rendered for one of the participants."""
    id: str
    seq: int
    sender: str                 # "me" or "them"
    text: str
    time: str
    read_by: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "seq": self.seq,
            "sender": self.sender,
            "text": self.text,
            "time": self.time,
            "read_by": self.read_by,
        }


@dataclass
class ChatView:
    """A chat with its full history, as opened by a participant."""
    chat_id: str
    match_id: str
    user: PublicProfile
    online: bool
    messages: List[MessageView]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.chat_id,
            "match_id": self.match_id,
            "user": {
                "id": self.user.id,
                "name": self.user.name,
                "profile_image": self.user.profile_image,
                "online": self.online,
            },
            "messages": [m.to_dict() for m in self.messages],
        }
