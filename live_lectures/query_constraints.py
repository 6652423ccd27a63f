import re
from typing import Any, Dict, Optional

from .config import LARGE_CLASS_MIN, SMALL_CLASS_MAX
from .models import QueryConstraints, SizePreference, TimeConstraint
from .time_utils import format_minutes

CLOCK = r"(\d+(?::\d+)?\s*[ap]m?)"

# Order matters: first match per direction wins
BEFORE_PATTERNS = [
    re.compile(r"before\s+" + CLOCK, re.IGNORECASE),
    re.compile(r"ends?\s+before\s+" + CLOCK, re.IGNORECASE),
    re.compile(r"earlier\s+than\s+" + CLOCK, re.IGNORECASE),
]
AFTER_PATTERNS = [
    re.compile(r"after\s+" + CLOCK, re.IGNORECASE),
    re.compile(r"starts?\s+after\s+" + CLOCK, re.IGNORECASE),
    re.compile(r"later\s+than\s+" + CLOCK, re.IGNORECASE),
]

SPOKEN_CLOCK_RE = re.compile(r"(\d+)(?::(\d+))?\s*([ap])m?", re.IGNORECASE)

SMALL_WORDS = ("small", "tiny")
LARGE_WORDS = ("large", "big")
LARGEST_WORDS = ("biggest", "largest", "large", "big")

TIME_OF_DAY_WORDS = ("morning", "afternoon", "evening")
DAY_WORDS = ("monday", "tuesday", "wednesday", "thursday", "friday")


def spoken_clock_minutes(text: str) -> Optional[int]:
    """Minute of day for "2pm", "10:30 am", "9a"; None if it isn't a clock."""
    match = SPOKEN_CLOCK_RE.search(text)
    if not match:
        return None
    hours = int(match.group(1))
    minutes = int(match.group(2) or 0)
    is_pm = match.group(3).lower() == "p"

    if is_pm and hours != 12:
        hours += 12
    if not is_pm and hours == 12:
        hours = 0
    return hours * 60 + minutes


def _first_match(patterns, query: str) -> Optional[int]:
    for pattern in patterns:
        match = pattern.search(query)
        if match:
            return spoken_clock_minutes(match.group(1))
    return None


def extract_time_constraints(query: str) -> TimeConstraint:
    # before > after is not checked; the index filter simply matches nothing
    return TimeConstraint(
        before=_first_match(BEFORE_PATTERNS, query),
        after=_first_match(AFTER_PATTERNS, query),
    )


def extract_size_preference(query: str) -> SizePreference:
    query_lower = query.lower()
    if any(word in query_lower for word in SMALL_WORDS):
        return SizePreference(max=SMALL_CLASS_MAX)
    if any(word in query_lower for word in LARGE_WORDS):
        return SizePreference(min=LARGE_CLASS_MIN)
    return SizePreference()


def extract_time_of_day(query: str) -> Optional[str]:
    query_lower = query.lower()
    for word in TIME_OF_DAY_WORDS:
        if word in query_lower:
            return word
    return None


def extract_day_of_week(query: str) -> Optional[str]:
    query_lower = query.lower()
    for day in DAY_WORDS:
        if day in query_lower:
            return day.capitalize()
    return None


def extract_constraints(query: str) -> QueryConstraints:
    return QueryConstraints(
        time=extract_time_constraints(query),
        size=extract_size_preference(query),
        time_of_day=extract_time_of_day(query),
        day_of_week=extract_day_of_week(query),
    )


def size_sort_direction(query: str) -> Optional[str]:
    """
    Which way to re-sort matches by seat count. The index ranks by semantic
    similarity only, so "biggest music class" needs a client-side sort.
    """
    query_lower = query.lower()
    if any(word in query_lower for word in SMALL_WORDS):
        return "asc"
    if any(word in query_lower for word in LARGEST_WORDS):
        return "desc"
    return None


def build_enriched_query(query: str, constraints: QueryConstraints) -> str:
    lines = [
        "Find courses that match the following criteria:",
        f"Query: {query}",
    ]
    if constraints.time_of_day:
        lines.append(f"Time of day: {constraints.time_of_day}")
    if constraints.day_of_week:
        lines.append(f"Day of week: {constraints.day_of_week}")
    if constraints.time.before is not None:
        lines.append(f"Ends before: {format_minutes(constraints.time.before)}")
    if constraints.time.after is not None:
        lines.append(f"Starts after: {format_minutes(constraints.time.after)}")
    if constraints.size.min is not None:
        lines.append(f"Minimum class size: {constraints.size.min}")
    if constraints.size.max is not None:
        lines.append(f"Maximum class size: {constraints.size.max}")
    return "\n".join(lines)


def build_vector_filter(constraints: QueryConstraints) -> Optional[Dict[str, Any]]:
    """Pinecone metadata filter; unset constraints add no clause."""
    conditions: Dict[str, Any] = {}

    if constraints.day_of_week:
        conditions["expandedDays"] = {"$in": [constraints.day_of_week]}
    if constraints.time_of_day:
        conditions["timeOfDay"] = {"$eq": constraints.time_of_day}
    if constraints.time.before is not None:
        conditions["timeEnd"] = {"$lte": constraints.time.before}
    if constraints.time.after is not None:
        conditions["timeStart"] = {"$gte": constraints.time.after}

    seat_range: Dict[str, int] = {}
    if constraints.size.min is not None:
        seat_range["$gte"] = constraints.size.min
    if constraints.size.max is not None:
        seat_range["$lte"] = constraints.size.max
    if seat_range:
        conditions["seatLimit"] = seat_range

    return conditions or None
