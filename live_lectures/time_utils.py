"""
Wall-clock helpers for lecture schedules.

Section rows carry times as compact 12-hour tokens ("6:00p", "11:50a") and
meeting days as concatenated weekday codes ("MWF", "TuTh"). Everything here
compares same-day wall-clock instants in the campus timezone; there is no
notion of a multi-day schedule instance.
"""
import logging
import re
from datetime import datetime, timedelta
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from .config import CAMPUS_TIMEZONE, UPCOMING_WINDOW_MINUTES

logger = logging.getLogger(__name__)

CAMPUS_TZ = ZoneInfo(CAMPUS_TIMEZONE)

TIME_TOKEN_RE = re.compile(r"^(\d{1,2}):(\d{2})([ap])$", re.IGNORECASE)

# Two-letter codes come first so "Th" is never read as a stray "T"
DAY_TOKEN_RE = re.compile(r"Tu|Th|Sa|Su|M|W|F")
DAY_CODES = {"M": 0, "Tu": 1, "W": 2, "Th": 3, "F": 4, "Sa": 5, "Su": 6}
DAY_NAMES = {
    "M": "Monday",
    "Tu": "Tuesday",
    "W": "Wednesday",
    "Th": "Thursday",
    "F": "Friday",
    "Sa": "Saturday",
    "Su": "Sunday",
}


class InvalidTimeToken(ValueError):
    """Raised when a time token does not look like "6:00p"."""


def now_local() -> datetime:
    return datetime.now(CAMPUS_TZ)


def _as_local(reference: Optional[datetime]) -> datetime:
    if reference is None:
        return now_local()
    if reference.tzinfo is None:
        return reference.replace(tzinfo=CAMPUS_TZ)
    return reference.astimezone(CAMPUS_TZ)


def _parse_token(token: str) -> Tuple[int, int]:
    match = TIME_TOKEN_RE.match((token or "").strip())
    if not match:
        raise InvalidTimeToken(f"Invalid time format: {token!r}")

    hour = int(match.group(1))
    minute = int(match.group(2))
    period = match.group(3).lower()
    if not 1 <= hour <= 12 or minute > 59:
        raise InvalidTimeToken(f"Time out of range: {token!r}")

    # 12p stays 12, 12a becomes 0
    if period == "p" and hour != 12:
        hour += 12
    if period == "a" and hour == 12:
        hour = 0
    return hour, minute


def clock_minutes(token: str) -> int:
    """Minute of day for a token like "6:00p" (1080)."""
    hour, minute = _parse_token(token)
    return hour * 60 + minute


def parse_time_instant(token: str, reference: Optional[datetime] = None) -> datetime:
    """Place a time token on the reference date in the campus timezone."""
    hour, minute = _parse_token(token)
    ref = _as_local(reference)
    return ref.replace(hour=hour, minute=minute, second=0, microsecond=0)


def split_time_range(time_range: str) -> Tuple[str, str]:
    parts = (time_range or "").split("-")
    if len(parts) != 2:
        raise InvalidTimeToken(f"Invalid time range: {time_range!r}")
    return parts[0].strip(), parts[1].strip()


def day_codes(days: str):
    return DAY_TOKEN_RE.findall(days or "")


def expand_days(days: str):
    """Expand "TuTh" to ["Tuesday", "Thursday"]."""
    return [DAY_NAMES[code] for code in day_codes(days)]


def is_recurring_on_day(days: str, reference: Optional[datetime] = None) -> bool:
    weekday = _as_local(reference).weekday()
    return any(DAY_CODES[code] == weekday for code in day_codes(days))


def is_live_now(
    start: str,
    end: str,
    days: str,
    reference: Optional[datetime] = None,
) -> bool:
    now = _as_local(reference)
    if not is_recurring_on_day(days, now):
        return False
    try:
        start_dt = parse_time_instant(start, now)
        end_dt = parse_time_instant(end, now)
    except InvalidTimeToken as e:
        logger.warning("Skipping live check: %s", e)
        return False
    return start_dt <= now <= end_dt


def is_upcoming_within(
    start: str,
    days: str,
    window_minutes: int = UPCOMING_WINDOW_MINUTES,
    reference: Optional[datetime] = None,
) -> bool:
    now = _as_local(reference)
    if not is_recurring_on_day(days, now):
        return False
    try:
        start_dt = parse_time_instant(start, now)
    except InvalidTimeToken as e:
        logger.warning("Skipping upcoming check: %s", e)
        return False
    return now < start_dt <= now + timedelta(minutes=window_minutes)


def _floor_minutes(delta: timedelta) -> int:
    return max(0, int(delta.total_seconds() // 60))


def minutes_remaining(end: str, reference: Optional[datetime] = None) -> int:
    now = _as_local(reference)
    return _floor_minutes(parse_time_instant(end, now) - now)


def minutes_elapsed(start: str, reference: Optional[datetime] = None) -> int:
    now = _as_local(reference)
    return _floor_minutes(now - parse_time_instant(start, now))


def minutes_until_start(start: str, reference: Optional[datetime] = None) -> int:
    now = _as_local(reference)
    return _floor_minutes(parse_time_instant(start, now) - now)


def format_time(token: str) -> str:
    """Render "6:00p" as "6:00 PM"; anything unparseable is returned as-is."""
    match = TIME_TOKEN_RE.match((token or "").strip())
    if not match:
        return token
    period = "PM" if match.group(3).lower() == "p" else "AM"
    return f"{match.group(1)}:{match.group(2)} {period}"


def format_time_range(time_range: str) -> str:
    try:
        start, end = split_time_range(time_range)
    except InvalidTimeToken:
        return time_range
    return f"{format_time(start)} - {format_time(end)}"


def format_duration(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes}m"
    return f"{minutes // 60}h {minutes % 60}m"


def format_clock(instant: Optional[datetime] = None) -> str:
    now = _as_local(instant)
    hour = now.hour % 12 or 12
    period = "PM" if now.hour >= 12 else "AM"
    return f"{hour}:{now.minute:02d} {period}"


def format_minutes(minutes: int) -> str:
    """Minute of day as 24-hour "H:MM"."""
    return f"{minutes // 60}:{minutes % 60:02d}"


def time_of_day_bucket(minutes: int) -> str:
    if minutes < 12 * 60:
        return "morning"
    if minutes < 17 * 60:
        return "afternoon"
    return "evening"


def classify_lecture(
    time_range: str,
    days: str,
    reference: Optional[datetime] = None,
    window_minutes: int = UPCOMING_WINDOW_MINUTES,
) -> str:
    try:
        start, end = split_time_range(time_range)
    except InvalidTimeToken:
        return "other"
    if is_live_now(start, end, days, reference):
        return "live"
    if is_upcoming_within(start, days, window_minutes, reference):
        return "upcoming"
    return "other"
