"""Presence and relative-time rules shared by chat listings and history."""

from datetime import datetime, timedelta
from typing import Optional

from fitmatch.clock import ensure_aware

ONLINE_WINDOW = timedelta(minutes=5)
YESTERDAY = "yesterday"
WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


def is_online(
    last_active: Optional[datetime],
    now: datetime,
    window: timedelta = ONLINE_WINDOW,
) -> bool:
    """True if the user was active within the window ending at now."""
    if last_active is None:
        return False
    return ensure_aware(now) - ensure_aware(last_active) <= window


def format_message_time(value: Optional[datetime], now: datetime) -> str:
    """Render a timestamp relative to now.

    Same calendar day -> "HH:MM", previous day -> "yesterday", within the
    last week -> weekday name, anything else -> "dd/mm/yy". Days are taken
    in now's timezone.
    """
    if value is None:
        return ""

    now = ensure_aware(now)
    local = ensure_aware(value).astimezone(now.tzinfo)
    days_ago = (now.date() - local.date()).days

    if days_ago == 0:
        return local.strftime("%H:%M")
    if days_ago == 1:
        return YESTERDAY
    if 1 < days_ago < 7:
        return WEEKDAY_NAMES[local.weekday()]
    return local.strftime("%d/%m/%y")
