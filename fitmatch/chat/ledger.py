"""Chat ledger: append-only message logs with read receipts."""

import logging
from datetime import timedelta
from typing import List, Optional, Tuple

from fitmatch.chat.fanout import NotificationChannel
from fitmatch.chat.formatting import ONLINE_WINDOW, format_message_time, is_online
from fitmatch.chat.models import Chat, ChatSummary, ChatView, Message, MessageView
from fitmatch.clock import Clock, SystemClock, ensure_aware
from fitmatch.errors import NotFoundError, ValidationError
from fitmatch.storage.interfaces import PersistenceStore, UserDirectory
from fitmatch.storage.locks import KeyedLock

logger = logging.getLogger(__name__)


class ChatLedger:
    """Appends, reads and lists the chats opened by mutual matches.

    Writes to one chat are serialized by a lock keyed on the chat id, so
    message sequence numbers and publish order always agree.
    """

    def __init__(
        self,
        store: PersistenceStore,
        directory: UserDirectory,
        channel: NotificationChannel,
        clock: Optional[Clock] = None,
        chat_locks: Optional[KeyedLock] = None,
        online_window: timedelta = ONLINE_WINDOW,
    ):
        self.store = store
        self.directory = directory
        self.channel = channel
        self.clock = clock or SystemClock()
        self.chat_locks = chat_locks or KeyedLock()
        self.online_window = online_window

    def append_message(self, chat_id: str, sender_id: str, content: str) -> Message:
        """Add a message to a chat and push it to connected sessions.

        Raises:
            ValidationError: If content is empty or only whitespace
            NotFoundError: If no active chat with this id includes sender_id
        """
        if content is None or not content.strip():
            raise ValidationError("Message content must not be empty")

        with self.chat_locks.hold(chat_id):
            chat = self._get_visible_chat(chat_id, sender_id)
            message = chat.append(sender_id, content, ensure_aware(self.clock.now()))
            self.store.save_chat(chat)
            self._publish(chat, message)

        logger.debug(f"Appended {chat_id}#{message.seq} from {sender_id}")
        return message

    def mark_read(self, chat_id: str, reader_id: str) -> int:
        """Mark every message the reader hasn't read yet as read.

        Returns:
            int: Number of messages newly marked (0 when nothing changed)

        Raises:
            NotFoundError: If no active chat with this id includes reader_id
        """
        _, changed = self._mark_read(chat_id, reader_id)
        return changed

    def unread_count(self, chat: Chat, user_id: str) -> int:
        return len(chat.unread_for(user_id))

    def list_for_user(self, user_id: str) -> List[ChatSummary]:
        """Active chats of user_id, most recent activity first."""
        now = ensure_aware(self.clock.now())
        summaries = []
        for chat in self.store.list_active_chats_for_user(user_id):
            other = self.directory.get_public(chat.other_participant(user_id))
            last = chat.last_message
            summaries.append(
                ChatSummary(
                    chat_id=chat.id,
                    user=other,
                    online=is_online(other.last_active, now, self.online_window),
                    last_message=last.content if last else "",
                    time=format_message_time(last.created_at if last else None, now),
                    unread_count=self.unread_count(chat, user_id),
                    last_activity=chat.last_activity,
                )
            )
        summaries.sort(key=lambda s: s.last_activity, reverse=True)
        return summaries

    def open_chat(self, chat_id: str, user_id: str) -> ChatView:
        """Mark the chat read for user_id and return its full history.

        Raises:
            NotFoundError: If no active chat with this id includes user_id
        """
        chat, _ = self._mark_read(chat_id, user_id)
        now = ensure_aware(self.clock.now())
        other = self.directory.get_public(chat.other_participant(user_id))

        messages = [
            MessageView(
                id=m.id,
                seq=m.seq,
                sender="me" if m.sender_id == user_id else "them",
                text=m.content,
                time=format_message_time(m.created_at, now),
                read_by=sorted(m.read_by),
            )
            for m in chat.messages
        ]
        return ChatView(
            chat_id=chat.id,
            match_id=chat.match_id,
            user=other,
            online=is_online(other.last_active, now, self.online_window),
            messages=messages,
        )

    def archive(self, chat_id: str, user_id: str) -> Chat:
        """Hide a chat from listings; its history is kept."""
        with self.chat_locks.hold(chat_id):
            chat = self._get_visible_chat(chat_id, user_id)
            chat.is_active = False
            self.store.save_chat(chat)
        logger.info(f"Chat {chat_id} archived by {user_id}")
        return chat

    def _mark_read(self, chat_id: str, reader_id: str) -> Tuple[Chat, int]:
        with self.chat_locks.hold(chat_id):
            chat = self._get_visible_chat(chat_id, reader_id)
            changed = chat.mark_read(reader_id)
            if changed:
                self.store.save_chat(chat)
        return chat, len(changed)

    def _get_visible_chat(self, chat_id: str, user_id: str) -> Chat:
        chat = self.store.get_chat_for_participant(chat_id, user_id)
        if chat is None:
            raise NotFoundError(f"Chat {chat_id} not found")
        return chat

    def _publish(self, chat: Chat, message: Message) -> None:
        # The message is already stored; delivery is best effort
        try:
            self.channel.publish(chat.id, message)
        except Exception as e:
            logger.warning(f"Failed to publish {chat.id}#{message.seq}: {e}")
