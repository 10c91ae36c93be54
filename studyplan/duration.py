import logging
import re
from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from studyplan.schedule import count_scheduled_days

logger = logging.getLogger(__name__)

_HOURS_RE = re.compile(r"(\d+)\s*h")
_MINUTES_RE = re.compile(r"(\d+)\s*m")
_SECONDS_RE = re.compile(r"(\d+)\s*s")


class Duration(BaseModel):
    """Length of a study session, or a countdown timer reading"""
    hours: int = Field(default=0, ge=0)
    minutes: int = Field(default=0, ge=0)
    seconds: int = Field(default=0, ge=0)


def parse_duration_string(value: str) -> Duration:
    """
    Parse strings like "1h 30m", "45m" or "0h 20m 10s".

    Missing components default to 0. Anything unparseable yields a zero
    duration instead of raising.
    """
    if not isinstance(value, str):
        logger.debug("Cannot parse duration from %r, using 0m", value)
        return Duration()

    h_match = _HOURS_RE.search(value)
    m_match = _MINUTES_RE.search(value)
    s_match = _SECONDS_RE.search(value)

    if value.strip() and not (h_match or m_match or s_match):
        logger.debug("Malformed duration string %r, using 0m", value)

    return Duration(
        hours=int(h_match.group(1)) if h_match else 0,
        minutes=int(m_match.group(1)) if m_match else 0,
        seconds=int(s_match.group(1)) if s_match else 0,
    )


def format_duration_string(duration: Duration) -> str:
    """Render non-zero components, e.g. "1h 30m". Zero renders as "0m"."""
    parts = []
    if duration.hours > 0:
        parts.append(f"{duration.hours}h")
    if duration.minutes > 0:
        parts.append(f"{duration.minutes}m")
    if duration.seconds > 0:
        parts.append(f"{duration.seconds}s")
    return " ".join(parts) or "0m"


def to_seconds(duration: Duration) -> int:
    return duration.hours * 3600 + duration.minutes * 60 + duration.seconds


def to_minutes(duration: Duration) -> int:
    """Whole minutes; leftover seconds are dropped"""
    return to_seconds(duration) // 60


def to_hours(duration: Duration) -> float:
    return to_seconds(duration) / 3600


def seconds_to_timer(total_seconds: int) -> Duration:
    """Split a countdown value into hours/minutes/seconds"""
    total_seconds = max(int(total_seconds), 0)
    hours, rest = divmod(total_seconds, 3600)
    minutes, seconds = divmod(rest, 60)
    return Duration(hours=hours, minutes=minutes, seconds=seconds)


def timer_to_minutes(timer: Duration) -> int:
    return to_minutes(timer)


def auto_duration(
    total_hours_target: float,
    schedule,
    start_date: date,
    end_date: date
) -> Optional[Duration]:
    """
    Spread a total hour target evenly across the scheduled days in
    [start_date, end_date].

    Returns None when there is no scheduled day in range or when a single
    session would exceed 24 hours.
    """
    count = count_scheduled_days(schedule, start_date, end_date)
    if count == 0:
        return None

    per_session_hours = total_hours_target / count
    if per_session_hours > 24:
        return None

    hours = int(per_session_hours)
    minutes = round((per_session_hours - hours) * 60)
    if minutes == 60:
        hours += 1
        minutes = 0

    return Duration(hours=hours, minutes=minutes)
