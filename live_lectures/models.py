from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .config import CATALOG_PAGE_SIZE


class ClassItem(BaseModel):
    id: str
    course_id: str
    course_code: str
    course_name: str
    professor: str = ""
    building: str = ""
    room: str = ""
    capacity: int = 0
    time: str = ""
    days: str = ""
    meeting_type: str = "Lecture"
    units: Optional[str] = None
    description: Optional[str] = None
    prerequisites: Optional[str] = None

    def dedupe_key(self):
        return (self.course_code, self.professor, self.building, self.room, self.time)


class TimeConstraint(BaseModel):
    before: Optional[int] = None  # minute of day
    after: Optional[int] = None


class SizePreference(BaseModel):
    min: Optional[int] = None
    max: Optional[int] = None


class QueryConstraints(BaseModel):
    time: TimeConstraint = Field(default_factory=TimeConstraint)
    size: SizePreference = Field(default_factory=SizePreference)
    time_of_day: Optional[str] = None
    day_of_week: Optional[str] = None


class CourseMatch(BaseModel):
    id: str
    score: float = 0.0
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ChatMessage(BaseModel):
    role: str  # "user" or "assistant"
    content: str
    timestamp: Optional[datetime] = None


class ChatRequest(BaseModel):
    query: str


class ChatResponse(BaseModel):
    response: str
    courses: List[CourseMatch] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    error: str


# ========= VIEW MODELS =========


class LectureFilters(BaseModel):
    search: Optional[str] = None
    subject: Optional[str] = None
    building: Optional[str] = None
    min_capacity: Optional[int] = None


class ViewState(BaseModel, frozen=True):
    active_tab: str = "Live Lectures"
    filters: LectureFilters = Field(default_factory=LectureFilters)
    sort_desc: bool = False
    page: int = 1
    page_size: int = CATALOG_PAGE_SIZE


class ViewAction(BaseModel):
    type: str = Field(
        description=(
            "select_tab, set_filter, clear_filters, toggle_sort, "
            "go_to_page, next_page, prev_page"
        )
    )
    tab: Optional[str] = None
    field: Optional[str] = None
    value: Optional[Any] = None
    page: Optional[int] = None


class ViewRequest(BaseModel):
    state: ViewState = Field(default_factory=ViewState)
    action: ViewAction


class LectureRow(BaseModel):
    id: str
    status: str  # live, upcoming, other
    course_code: str
    course_name: str
    professor: str
    building: str
    room: str
    capacity: int
    time_display: str
    time_left: Optional[str] = None
    begins_in: Optional[str] = None
    description: Optional[str] = None
    prerequisites: Optional[str] = None


class LiveBoard(BaseModel):
    current_time: str
    total_lectures: int
    live: List[LectureRow] = Field(default_factory=list)
    upcoming: List[LectureRow] = Field(default_factory=list)


class CatalogPage(BaseModel):
    page: int
    page_size: int
    total_pages: int
    total_items: int
    rows: List[LectureRow] = Field(default_factory=list)


class CardDetail(BaseModel):
    label: str
    value: str


class CourseCard(BaseModel):
    title: str
    details: List[CardDetail] = Field(default_factory=list)

    def get(self, label: str) -> Optional[str]:
        for d in self.details:
            if d.label == label:
                return d.value
        return None


class ReplySegment(BaseModel):
    kind: str  # "text" or "card"
    text: Optional[str] = None
    card: Optional[CourseCard] = None
