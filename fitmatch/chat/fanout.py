"""Real-time delivery of new chat messages to connected sessions.

Delivery is best effort: events live only in the per-session queues of the
sessions connected when the message is published.
"""

import logging
import queue
from abc import ABC, abstractmethod
from dataclasses import dataclass
from threading import Lock
from typing import Any, Dict, List, Optional, Set

from fitmatch.chat.models import Message

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MessageEvent:
    """A new message pushed to a subscriber."""
    chat_id: str
    message_id: str
    seq: int
    sender_id: str
    content: str
    created_at: str

    @classmethod
    def from_message(cls, chat_id: str, message: Message) -> "MessageEvent":
        return cls(
            chat_id=chat_id,
            message_id=message.id,
            seq=message.seq,
            sender_id=message.sender_id,
            content=message.content,
            created_at=message.created_at.isoformat(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chat_id": self.chat_id,
            "message": {
                "id": self.message_id,
                "seq": self.seq,
                "sender_id": self.sender_id,
                "text": self.content,
                "created_at": self.created_at,
            },
        }


class NotificationChannel(ABC):
    """Pushes new messages to whoever is listening on a chat."""

    @abstractmethod
    def publish(self, chat_id: str, message: Message) -> int:
        """Deliver message to the chat's subscribers.

        Returns:
            int: Number of sessions the event was queued for
        """
        pass

    @abstractmethod
    def subscribe(self, session_id: str, chat_id: str) -> "Subscriber":
        pass

    @abstractmethod
    def unsubscribe(self, session_id: str, chat_id: str) -> None:
        pass


class Subscriber:
    """Queue of events for one connected session."""

    def __init__(self, session_id: str, maxsize: int = 1000):
        self.session_id = session_id
        self.chats: Set[str] = set()
        self._queue: "queue.Queue[MessageEvent]" = queue.Queue(maxsize=maxsize)

    def put(self, event: MessageEvent) -> None:
        """Queue an event without blocking, dropping the oldest when full."""
        while True:
            try:
                self._queue.put_nowait(event)
                return
            except queue.Full:
                try:
                    dropped = self._queue.get_nowait()
                except queue.Empty:
                    continue
                logger.warning(
                    f"[{self.session_id}] Queue full, dropped event "
                    f"{dropped.chat_id}#{dropped.seq}"
                )

    def get(self, timeout: Optional[float] = None) -> Optional[MessageEvent]:
        """Next event, or None if nothing arrives within timeout."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self) -> List[MessageEvent]:
        """All queued events, oldest first."""
        events = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                return events

    @property
    def pending(self) -> int:
        return self._queue.qsize()


class NotificationHub(NotificationChannel):
    """In-process fanout keyed by chat id."""

    def __init__(self, queue_size: int = 1000):
        self.queue_size = queue_size
        self._lock = Lock()
        self._sessions: Dict[str, Subscriber] = {}
        self._topics: Dict[str, Set[str]] = {}

    def connect(self, session_id: str) -> Subscriber:
        """Register a session, or return it if already connected."""
        with self._lock:
            return self._connect_locked(session_id)

    def subscribe(self, session_id: str, chat_id: str) -> Subscriber:
        with self._lock:
            subscriber = self._connect_locked(session_id)
            subscriber.chats.add(chat_id)
            self._topics.setdefault(chat_id, set()).add(session_id)
        logger.debug(f"[{session_id}] Subscribed to chat {chat_id}")
        return subscriber

    def unsubscribe(self, session_id: str, chat_id: str) -> None:
        with self._lock:
            subscriber = self._sessions.get(session_id)
            if subscriber is not None:
                subscriber.chats.discard(chat_id)
            self._drop_from_topic(chat_id, session_id)

    def disconnect(self, session_id: str) -> None:
        """Forget a session and all of its subscriptions."""
        with self._lock:
            subscriber = self._sessions.pop(session_id, None)
            if subscriber is None:
                return
            for chat_id in subscriber.chats:
                self._drop_from_topic(chat_id, session_id)
        logger.debug(f"[{session_id}] Disconnected")

    def publish(self, chat_id: str, message: Message) -> int:
        event = MessageEvent.from_message(chat_id, message)
        # Holding the lock keeps per-chat order across concurrent publishers
        with self._lock:
            session_ids = self._topics.get(chat_id, set())
            for session_id in session_ids:
                self._sessions[session_id].put(event)
            delivered = len(session_ids)
        logger.debug(f"Published {chat_id}#{message.seq} to {delivered} sessions")
        return delivered

    def subscribers_of(self, chat_id: str) -> Set[str]:
        with self._lock:
            return set(self._topics.get(chat_id, set()))

    def _connect_locked(self, session_id: str) -> Subscriber:
        subscriber = self._sessions.get(session_id)
        if subscriber is None:
            subscriber = Subscriber(session_id, maxsize=self.queue_size)
            self._sessions[session_id] = subscriber
        return subscriber

    def _drop_from_topic(self, chat_id: str, session_id: str) -> None:
        members = self._topics.get(chat_id)
        if members is None:
            return
        members.discard(session_id)
        if not members:
            del self._topics[chat_id]
