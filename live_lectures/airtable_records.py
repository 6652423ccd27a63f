import logging
from collections import defaultdict
from typing import Any, Dict, List, Optional, Tuple

from .config import (
    AIRTABLE_BASE_ID_COURSES,
    AIRTABLE_BASE_ID_DESCRIPTIONS,
    AIRTABLE_BASE_ID_SECTIONS,
    AIRTABLE_TABLE_NAME_COURSES,
    AIRTABLE_TABLE_NAME_DESCRIPTIONS,
    AIRTABLE_TABLE_NAME_SECTIONS,
    REMOTE_BUILDING_CODE,
    get_airtable_api,
)
from .models import ClassItem

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


# ========= FETCH =========


def minify_record(record: Record) -> Record:
    """Flatten an Airtable record into {"id": ..., **fields}."""
    return {"id": record["id"], **(record.get("fields") or {})}


def fetch_table(base_id: Optional[str], table_name: str) -> List[Record]:
    if not base_id:
        raise RuntimeError(f"No Airtable base configured for table {table_name}")
    table = get_airtable_api().table(base_id, table_name)
    return [minify_record(r) for r in table.all()]


def fetch_tables() -> Tuple[List[Record], List[Record], List[Record]]:
    logger.info("Fetching courses...")
    courses = fetch_table(AIRTABLE_BASE_ID_COURSES, AIRTABLE_TABLE_NAME_COURSES)
    logger.info("Courses fetched: %d", len(courses))

    logger.info("Fetching sections...")
    sections = fetch_table(AIRTABLE_BASE_ID_SECTIONS, AIRTABLE_TABLE_NAME_SECTIONS)
    logger.info("Sections fetched: %d", len(sections))

    descriptions = fetch_table(
        AIRTABLE_BASE_ID_DESCRIPTIONS, AIRTABLE_TABLE_NAME_DESCRIPTIONS
    )
    logger.info("Descriptions fetched: %d", len(descriptions))

    return courses, sections, descriptions


def fetch_class_items() -> List[ClassItem]:
    courses, sections, descriptions = fetch_tables()
    return normalize_class_items(courses, sections, descriptions)


# ========= NORMALIZE =========


def course_link(section: Record) -> Optional[str]:
    link = section.get("Course Link")
    if isinstance(link, list):
        return link[0] if link else None
    return link or None


def seat_limit(section: Record) -> int:
    try:
        return int(section.get("Seat Limit") or 0)
    except (TypeError, ValueError):
        return 0


def is_lab_course(course_name: str) -> bool:
    name = course_name.lower()
    return "lab" in name or "laboratory" in name


def _is_lecture(section: Record) -> bool:
    return (
        section.get("Meeting Type") == "Lecture"
        and REMOTE_BUILDING_CODE not in (section.get("Building") or "")
    )


def discussion_capacity(sections: List[Record]) -> Dict[Tuple[str, str], int]:
    """Sum of Discussion seat limits keyed by (subject code, course link)."""
    totals: Dict[Tuple[str, str], int] = defaultdict(int)
    for section in sections:
        if section.get("Meeting Type") != "Discussion":
            continue
        link = course_link(section)
        if not link:
            continue
        totals[(section.get("Subject Code") or "", link)] += seat_limit(section)
    return totals


def index_descriptions(descriptions: List[Record]) -> Dict[str, Record]:
    indexed: Dict[str, Record] = {}
    for desc in descriptions:
        code = " ".join((desc.get("Course Code") or "").split()).upper()
        if code:
            indexed[code] = desc
    return indexed


def normalize_class_items(
    courses: List[Record],
    sections: List[Record],
    descriptions: Optional[List[Record]] = None,
) -> List[ClassItem]:
    """
    Join lecture sections with their parent course.

    Only Lecture rows outside the remote placeholder building survive, lab
    courses are dropped, a zero seat limit is backfilled from the course's
    discussion sections, and rows repeated in the source are collapsed.
    """
    courses_by_id = {c["id"]: c for c in courses}
    discussion_totals = discussion_capacity(sections)
    descriptions_by_code = index_descriptions(descriptions or [])

    items: List[ClassItem] = []
    seen = set()

    for section in sections:
        if not _is_lecture(section):
            continue

        link = course_link(section)
        if not link:
            logger.info("Section missing Course Link: %s", section.get("id"))
            continue

        course = courses_by_id.get(link)
        if course is None:
            logger.info("Course not found for link: %s", link)
            continue

        course_name = course.get("Course Name") or ""
        if is_lab_course(course_name):
            continue

        subject = section.get("Subject Code") or ""
        course_code = f"{subject} {course.get('Course Number', '')}".strip()

        capacity = seat_limit(section)
        if capacity == 0:
            capacity = discussion_totals.get((subject, link), 0)
            logger.debug("Backfilled seat limit for %s: %d", course_code, capacity)

        desc = descriptions_by_code.get(course_code.upper(), {})
        units = course.get("Units") or desc.get("Units")

        item = ClassItem(
            id=section["id"],
            course_id=course["id"],
            course_code=course_code,
            course_name=course_name,
            professor=section.get("Instructor") or "",
            building=section.get("Building") or "",
            room=str(section.get("Room") or ""),
            capacity=capacity,
            time=section.get("Time") or "",
            days=section.get("Days") or "",
            meeting_type=section.get("Meeting Type") or "Lecture",
            units=str(units) if units is not None else None,
            description=desc.get("Description"),
            prerequisites=desc.get("Prerequisites"),
        )

        key = item.dedupe_key()
        if key in seen:
            continue
        seen.add(key)
        items.append(item)

    logger.info("Normalized %d lecture sections", len(items))
    return items
