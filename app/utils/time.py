"""Time helpers for pickup scheduling."""

from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from app.core.config import settings

INSTANT_TIME_SLOT: str = "Instant Order"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def canteen_zone() -> ZoneInfo:
    return ZoneInfo(settings.canteen_timezone)


def ensure_aware(value: datetime) -> datetime:
    """Return an aware datetime, reading naive values as canteen local time."""
    if value.tzinfo is None:
        return value.replace(tzinfo=canteen_zone())
    return value


def format_time_slot(pickup_time: datetime | None) -> str:
    """Return the human-readable slot label shown on order cards.

    Scheduled pickups are rendered in the canteen's local time, e.g.
    ``"Scheduled: 01:30 PM"``.
    """
    if pickup_time is None:
        return INSTANT_TIME_SLOT
    local = ensure_aware(pickup_time).astimezone(canteen_zone())
    return f"Scheduled: {local.strftime('%I:%M %p')}"
