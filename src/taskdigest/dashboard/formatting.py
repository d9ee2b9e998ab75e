"""Display formatting for dates, countdowns, cron expressions and badges."""

import re
from datetime import UTC, datetime, tzinfo
from zoneinfo import ZoneInfo

from taskdigest.agent.models import Priority
from taskdigest.scheduler.models import NOT_SCHEDULED

PENDING = "Pending..."

_DAILY_CRON = re.compile(r"^(\d{1,2})\s+(\d{1,2})\s+\*\s+\*\s+\*$")

_PRIORITY_CLASSES = {
    Priority.HIGH.value: "priority-high",
    Priority.MEDIUM.value: "priority-medium",
    Priority.LOW.value: "priority-low",
}


def resolve_timezone(tz: tzinfo | str | None) -> tzinfo:
    if tz is None:
        return UTC
    if isinstance(tz, str):
        return ZoneInfo(tz)
    return tz


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp.

    A trailing "Z" is accepted and timestamps without an offset are taken
    to be UTC. Returns None for anything unparseable.
    """
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _month_day_time(dt: datetime) -> str:
    return f"{dt:%b} {dt.day}, {dt:%I:%M %p}"


def format_date(value: str | None, tz: tzinfo | str | None = None) -> str:
    """Format a timestamp as "Mon, Oct 19, 04:30 PM".

    Unparseable input is returned unchanged.
    """
    parsed = parse_timestamp(value)
    if parsed is None:
        return value or ""

    local = parsed.astimezone(resolve_timezone(tz))
    return f"{local:%a}, {_month_day_time(local)}"


def format_next_run(
    value: str | None, tz: tzinfo | str | None = None, now: datetime | None = None
) -> str:
    """Format the next scheduled run as a countdown.

    Runs more than 24 whole hours away are shown as an absolute date
    instead ("Oct 21, 04:30 PM"). Past runs show as pending.
    """
    if not value or value == NOT_SCHEDULED:
        return NOT_SCHEDULED

    next_run = parse_timestamp(value)
    if next_run is None:
        return NOT_SCHEDULED

    now = now or datetime.now(tz=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)

    diff = (next_run - now).total_seconds()
    if diff < 0:
        return PENDING

    hours = int(diff // 3600)
    minutes = int((diff % 3600) // 60)

    if hours > 24:
        return _month_day_time(next_run.astimezone(resolve_timezone(tz)))

    return f"in {hours}h {minutes}m"


def cron_to_human(cron: str) -> str:
    """Describe a daily cron expression ("30 16 * * *" -> "Daily at 4:30 PM").

    Any other expression is returned unchanged.
    """
    match = _DAILY_CRON.match(cron.strip()) if cron else None
    if not match:
        return cron

    minute, hour = int(match.group(1)), int(match.group(2))
    if minute > 59 or hour > 23:
        return cron

    suffix = "AM" if hour < 12 else "PM"
    return f"Daily at {hour % 12 or 12}:{minute:02d} {suffix}"


def priority_class(priority: str) -> str:
    return _PRIORITY_CLASSES.get(priority, "priority-unknown")


def task_count_label(count: int) -> str:
    return f"{count} {'task' if count == 1 else 'tasks'}"
