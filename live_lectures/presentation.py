"""
View models for the lecture tabs and the assistant chat.

UI state is an immutable ViewState updated by pure reducers, so filtering,
classification and pagination can be computed (and tested) without a
browser. The reply parser is the display-side inverse of the card format
the assistant prompt asks for.
"""
import logging
import math
import re
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from .config import UPCOMING_WINDOW_MINUTES
from .models import (
    CardDetail,
    CatalogPage,
    ChatMessage,
    ClassItem,
    CourseCard,
    LectureFilters,
    LectureRow,
    LiveBoard,
    ReplySegment,
    ViewAction,
    ViewState,
)
from .prompts import CARD_FIELDS, ERROR_REPLY, card_values
from .time_utils import (
    InvalidTimeToken,
    classify_lecture,
    clock_minutes,
    format_clock,
    format_duration,
    format_time_range,
    minutes_remaining,
    minutes_until_start,
    now_local,
    split_time_range,
)

logger = logging.getLogger(__name__)

TABS = ["Live Lectures", "Course Catalog", "AI Assistant", "About"]

CARD_START_RE = re.compile(r"^\d+\.\s+\*\*")
CARD_TITLE_RE = re.compile(r"\*\*(.*?)\*\*")
DETAIL_PREFIX_RE = re.compile(r"^-\s+\*\*")


# ========= REDUCERS =========


def select_tab(state: ViewState, tab: str) -> ViewState:
    if tab not in TABS:
        raise ValueError(f"Unknown tab: {tab}")
    return state.model_copy(update={"active_tab": tab, "page": 1})


def set_filter(state: ViewState, field: str, value: Any) -> ViewState:
    if field not in LectureFilters.model_fields:
        raise ValueError(f"Unknown filter: {field}")
    if value == "":
        value = None
    filters = LectureFilters.model_validate({**state.filters.model_dump(), field: value})
    return state.model_copy(update={"filters": filters, "page": 1})


def clear_filters(state: ViewState) -> ViewState:
    return state.model_copy(update={"filters": LectureFilters(), "page": 1})


def toggle_sort(state: ViewState) -> ViewState:
    return state.model_copy(update={"sort_desc": not state.sort_desc})


def go_to_page(state: ViewState, page: int) -> ViewState:
    return state.model_copy(update={"page": max(1, page)})


def next_page(state: ViewState) -> ViewState:
    return go_to_page(state, state.page + 1)


def prev_page(state: ViewState) -> ViewState:
    return go_to_page(state, state.page - 1)


REDUCERS: Dict[str, Callable[[ViewState, ViewAction], ViewState]] = {
    "select_tab": lambda s, a: select_tab(s, a.tab or ""),
    "set_filter": lambda s, a: set_filter(s, a.field or "", a.value),
    "clear_filters": lambda s, a: clear_filters(s),
    "toggle_sort": lambda s, a: toggle_sort(s),
    "go_to_page": lambda s, a: go_to_page(s, a.page or 1),
    "next_page": lambda s, a: next_page(s),
    "prev_page": lambda s, a: prev_page(s),
}


def reduce_view(state: ViewState, action: ViewAction) -> ViewState:
    reducer = REDUCERS.get(action.type)
    if reducer is None:
        raise ValueError(f"Unknown action: {action.type}")
    return reducer(state, action)


# ========= LECTURE LISTS =========


def _start_minutes(item: ClassItem) -> int:
    try:
        return clock_minutes(split_time_range(item.time)[0])
    except InvalidTimeToken:
        return 24 * 60


def _remaining(item: ClassItem, now: datetime) -> int:
    try:
        return minutes_remaining(split_time_range(item.time)[1], now)
    except InvalidTimeToken:
        return 0


def live_lectures(items: Sequence[ClassItem], now: datetime) -> List[ClassItem]:
    live = [i for i in items if classify_lecture(i.time, i.days, now) == "live"]
    # most time remaining first
    return sorted(live, key=lambda i: _remaining(i, now), reverse=True)


def upcoming_lectures(
    items: Sequence[ClassItem],
    now: datetime,
    window_minutes: int = UPCOMING_WINDOW_MINUTES,
) -> List[ClassItem]:
    upcoming = [
        i for i in items
        if classify_lecture(i.time, i.days, now, window_minutes) == "upcoming"
    ]
    return sorted(upcoming, key=_start_minutes)


def catalog_lectures(items: Sequence[ClassItem], descending: bool = False) -> List[ClassItem]:
    return sorted(
        items,
        key=lambda i: (i.course_code.upper(), _start_minutes(i)),
        reverse=descending,
    )


def apply_filters(items: Sequence[ClassItem], filters: LectureFilters) -> List[ClassItem]:
    result = list(items)

    if filters.search:
        needle = filters.search.lower()
        result = [
            i for i in result
            if needle in i.course_code.lower()
            or needle in i.course_name.lower()
            or needle in i.professor.lower()
        ]
    if filters.subject:
        subject = filters.subject.upper()
        result = [i for i in result if i.course_code.upper().split(" ")[0] == subject]
    if filters.building:
        building = filters.building.upper()
        result = [i for i in result if i.building.upper() == building]
    if filters.min_capacity is not None:
        result = [i for i in result if i.capacity >= filters.min_capacity]

    return result


def paginate(items: Sequence[Any], page: int, page_size: int):
    """Return (slice, clamped page, total pages)."""
    page_size = max(1, page_size)
    total_pages = max(1, math.ceil(len(items) / page_size))
    page = min(max(1, page), total_pages)
    start = (page - 1) * page_size
    return list(items[start:start + page_size]), page, total_pages


# ========= ROWS / BOARDS =========


def to_row(item: ClassItem, status: str, now: datetime) -> LectureRow:
    row = LectureRow(
        id=item.id,
        status=status,
        course_code=item.course_code,
        course_name=item.course_name,
        professor=item.professor,
        building=item.building,
        room=item.room,
        capacity=item.capacity,
        time_display=format_time_range(item.time),
        description=item.description,
        prerequisites=item.prerequisites,
    )
    try:
        start, end = split_time_range(item.time)
        if status == "live":
            row.time_left = format_duration(minutes_remaining(end, now))
        elif status == "upcoming":
            row.begins_in = format_duration(minutes_until_start(start, now))
    except InvalidTimeToken as e:
        logger.warning("Bad time on %s: %s", item.course_code, e)
    return row


def build_live_board(items: Sequence[ClassItem], now: Optional[datetime] = None) -> LiveBoard:
    now = now or now_local()
    return LiveBoard(
        current_time=format_clock(now),
        total_lectures=len(items),
        live=[to_row(i, "live", now) for i in live_lectures(items, now)],
        upcoming=[to_row(i, "upcoming", now) for i in upcoming_lectures(items, now)],
    )


def build_catalog_page(
    items: Sequence[ClassItem],
    state: ViewState,
    now: Optional[datetime] = None,
) -> CatalogPage:
    now = now or now_local()
    ordered = catalog_lectures(apply_filters(items, state.filters), state.sort_desc)
    rows, page, total_pages = paginate(ordered, state.page, state.page_size)
    return CatalogPage(
        page=page,
        page_size=state.page_size,
        total_pages=total_pages,
        total_items=len(ordered),
        rows=[to_row(i, "other", now) for i in rows],
    )


# ========= ASSISTANT REPLIES =========


def format_course_card(metadata: Dict[str, Any], number: int = 1) -> str:
    """Render one course in the numbered-list format the assistant uses."""
    values = card_values(metadata)
    lines = [
        f"{number}. **{metadata.get('code', '')}: {metadata.get('title', '')}**",
        "",
    ]
    lines.extend(f"- **{label}**: {values[label]}" for label in CARD_FIELDS)
    return "\n".join(lines)


def parse_course_block(block: str) -> CourseCard:
    lines = [line.strip() for line in block.split("\n")]
    title_match = CARD_TITLE_RE.search(lines[0]) if lines else None
    title = title_match.group(1) if title_match else ""

    details = []
    for line in lines[1:]:
        if not line.startswith("-"):
            continue
        label, _, value = DETAIL_PREFIX_RE.sub("", line).partition(":")
        details.append(
            CardDetail(label=label.replace("**", "").strip(), value=value.strip())
        )
    return CourseCard(title=title, details=details)


def _split_blocks(text: str) -> List[str]:
    # the model puts a blank line between a card title and its bullets
    raw = [b for b in re.split(r"\n\s*\n", text.strip()) if b.strip()]
    blocks: List[str] = []
    for block in raw:
        stripped = block.strip()
        if blocks and stripped.startswith("-") and CARD_START_RE.match(blocks[-1]):
            blocks[-1] = blocks[-1] + "\n" + stripped
        else:
            blocks.append(stripped)
    return blocks


def parse_assistant_reply(text: str) -> List[ReplySegment]:
    segments = []
    for block in _split_blocks(text or ""):
        if CARD_START_RE.match(block):
            segments.append(ReplySegment(kind="card", card=parse_course_block(block)))
        else:
            segments.append(ReplySegment(kind="text", text=block))
    return segments


def append_exchange(
    messages: Sequence[ChatMessage],
    query: str,
    reply: Optional[str],
) -> List[ChatMessage]:
    """New transcript with the user turn and the reply (or the apology)."""
    stamp = datetime.now(timezone.utc)
    return list(messages) + [
        ChatMessage(role="user", content=query, timestamp=stamp),
        ChatMessage(
            role="assistant",
            content=reply if reply is not None else ERROR_REPLY,
            timestamp=stamp,
        ),
    ]
