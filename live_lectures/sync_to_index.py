import logging
from typing import Any, Dict, List

from .airtable_records import fetch_class_items
from .config import OPENAI_EMBEDDING_MODEL, configure_logging, get_openai_client, get_vector_index
from .models import ClassItem
from .time_utils import (
    InvalidTimeToken,
    clock_minutes,
    expand_days,
    split_time_range,
    time_of_day_bucket,
)

logger = logging.getLogger(__name__)

BATCH_SIZE = 100


def build_vector_metadata(item: ClassItem) -> Dict[str, Any]:
    """Map a ClassItem to Pinecone metadata used by the assistant's filters."""
    subject = item.course_code.split(" ")[0] if item.course_code else ""
    meta: Dict[str, Any] = {
        "code": item.course_code,
        "title": item.course_name,
        "days": item.days,
        "expandedDays": expand_days(item.days),
        "time": item.time,
        "building": item.building,
        "room": item.room,
        "instructor": item.professor,
        "seatLimit": item.capacity,
        "description": item.description,
        "prerequisites": item.prerequisites,
        "department": subject,
        "units": item.units,
    }

    try:
        start, end = split_time_range(item.time)
        meta["timeStart"] = clock_minutes(start)
        meta["timeEnd"] = clock_minutes(end)
        meta["timeOfDay"] = time_of_day_bucket(meta["timeStart"])
    except InvalidTimeToken:
        logger.info("No parseable time for %s (%r)", item.course_code, item.time)

    # Pinecone rejects null metadata values
    return {k: v for k, v in meta.items() if v is not None}


def embedding_text(item: ClassItem) -> str:
    parts = [
        f"{item.course_code}: {item.course_name}",
        f"Instructor: {item.professor}",
        f"Meets: {', '.join(expand_days(item.days)) or item.days} at {item.time}",
        f"Location: {item.building} {item.room}",
        f"Class size: {item.capacity} seats",
    ]
    if item.description:
        parts.append(f"Description: {item.description}")
    if item.prerequisites:
        parts.append(f"Prerequisites: {item.prerequisites}")
    return "\n".join(parts)


def sync_items(items: List[ClassItem], batch_size: int = BATCH_SIZE) -> int:
    client = get_openai_client()
    index = get_vector_index()
    upserted = 0

    for offset in range(0, len(items), batch_size):
        batch = items[offset:offset + batch_size]
        response = client.embeddings.create(
            model=OPENAI_EMBEDDING_MODEL,
            input=[embedding_text(i) for i in batch],
        )
        vectors = [
            {
                "id": item.id,
                "values": data.embedding,
                "metadata": build_vector_metadata(item),
            }
            for item, data in zip(batch, response.data)
        ]
        index.upsert(vectors=vectors)
        upserted += len(vectors)
        logger.info("Upserted %d/%d lectures", upserted, len(items))

    return upserted


def main():
    configure_logging()
    items = fetch_class_items()
    if not items:
        logger.warning("No lecture sections found in Airtable")
        return

    count = sync_items(items)
    logger.info("Synced %d lectures to the vector index", count)


if __name__ == "__main__":
    main()
