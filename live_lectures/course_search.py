import logging
from typing import Any, Dict, List, Optional, Tuple

from .config import (
    CHAT_TEMPERATURE,
    DISPLAY_COUNT,
    OPENAI_CHAT_MODEL,
    OPENAI_EMBEDDING_MODEL,
    TOP_K,
    get_openai_client,
    get_vector_index,
)
from .models import CourseMatch
from .prompts import ASSISTANT_SYSTEM_PROMPT, CARD_FIELDS, card_values
from .query_constraints import (
    build_enriched_query,
    build_vector_filter,
    extract_constraints,
    size_sort_direction,
)

logger = logging.getLogger(__name__)


def embed_text(text: str) -> List[float]:
    response = get_openai_client().embeddings.create(
        model=OPENAI_EMBEDDING_MODEL,
        input=text,
    )
    return response.data[0].embedding


def _to_match(raw: Any) -> CourseMatch:
    if isinstance(raw, dict):
        return CourseMatch(
            id=str(raw.get("id", "")),
            score=raw.get("score") or 0.0,
            metadata=raw.get("metadata") or {},
        )
    return CourseMatch(
        id=str(raw.id),
        score=raw.score or 0.0,
        metadata=dict(raw.metadata or {}),
    )


def query_index(
    vector: List[float],
    metadata_filter: Optional[Dict[str, Any]] = None,
    top_k: int = TOP_K,
) -> List[CourseMatch]:
    kwargs: Dict[str, Any] = {
        "vector": vector,
        "top_k": top_k,
        "include_metadata": True,
    }
    if metadata_filter:
        kwargs["filter"] = metadata_filter

    results = get_vector_index().query(**kwargs)
    matches = results["matches"] if isinstance(results, dict) else results.matches
    return [_to_match(m) for m in matches or []]


def sort_by_size(matches: List[CourseMatch], direction: Optional[str]) -> List[CourseMatch]:
    if direction is None:
        return list(matches)
    return sorted(
        matches,
        key=lambda m: m.metadata.get("seatLimit") or 0,
        reverse=(direction == "desc"),
    )


def render_match(match: CourseMatch) -> str:
    """Plain-text context block for one match."""
    meta = match.metadata
    values = card_values(meta)
    lines = [f"Course: {meta.get('code', '')}: {meta.get('title', '')}"]
    lines.extend(f"{label}: {values[label]}" for label in CARD_FIELDS)
    lines.append(f"Relevance Score: {round((match.score or 0) * 100)}%")
    return "\n".join(lines)


def build_context(matches: List[CourseMatch]) -> str:
    return "\n\n".join(render_match(m) for m in matches)


def complete_answer(query: str, context: str) -> str:
    completion = get_openai_client().chat.completions.create(
        model=OPENAI_CHAT_MODEL,
        messages=[
            {"role": "system", "content": ASSISTANT_SYSTEM_PROMPT.format(context=context)},
            {"role": "user", "content": query},
        ],
        temperature=CHAT_TEMPERATURE,
    )
    return completion.choices[0].message.content or ""


def search_courses(query: str) -> List[CourseMatch]:
    """Embed, filter, query, resort and truncate for one user query."""
    constraints = extract_constraints(query)
    enriched = build_enriched_query(query, constraints)
    logger.debug("Enriched query: %s", enriched)

    vector = embed_text(enriched)
    vector_filter = build_vector_filter(constraints)
    matches = query_index(vector, vector_filter)
    logger.info(
        "Index returned %d matches (filter=%s)", len(matches), vector_filter
    )

    matches = sort_by_size(matches, size_sort_direction(query))
    return matches[:DISPLAY_COUNT]


def answer_course_query(query: str) -> Tuple[str, List[CourseMatch]]:
    """
    Single pass of the assistant: no retries and no partial results. Errors
    from any upstream call propagate to the caller.
    """
    matches = search_courses(query)
    reply = complete_answer(query, build_context(matches))
    return reply, matches
