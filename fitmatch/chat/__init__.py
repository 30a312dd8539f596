"""Chat module: message ledger, presence formatting and real-time fanout."""

from fitmatch.chat.models import Chat, ChatSummary, ChatView, Message, MessageView
from fitmatch.chat.fanout import MessageEvent, NotificationChannel, NotificationHub, Subscriber
from fitmatch.chat.formatting import format_message_time, is_online
from fitmatch.chat.ledger import ChatLedger

__all__ = [
    "Chat",
    "ChatSummary",
    "ChatView",
    "Message",
    "MessageView",
    "MessageEvent",
    "NotificationChannel",
    "NotificationHub",
    "Subscriber",
    "format_message_time",
    "is_online",
    "ChatLedger",
]
