"""Display helpers for timestamps in the service table."""

from datetime import datetime
from typing import Optional

DISPLAY_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_datetime(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return value.strftime(DISPLAY_FORMAT)


def format_heartbeat_age(last_heartbeat: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Human-readable time since the last heartbeat, e.g. '42s ago' or '3h ago'."""
    if last_heartbeat is None:
        return ""
    if now is None:
        now = datetime.now(last_heartbeat.tzinfo)
    elif (now.tzinfo is None) != (last_heartbeat.tzinfo is None):
        # Naive values are local time
        now, last_heartbeat = now.astimezone(), last_heartbeat.astimezone()

    seconds = max(0, int((now - last_heartbeat).total_seconds()))
    if seconds < 60:
        return f"{seconds}s ago"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    return f"{seconds // 86400}d ago"
