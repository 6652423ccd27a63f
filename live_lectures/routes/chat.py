import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..models import ChatRequest, ChatResponse, ErrorResponse
from ..course_search import answer_course_query

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["course-assistant"])


@router.post(
    "/chat",
    response_model=ChatResponse,
    responses={500: {"model": ErrorResponse}},
)
def chat_with_assistant(req: ChatRequest):
    try:
        reply, matches = answer_course_query(req.query)
    except Exception:
        logger.exception("Course assistant request failed")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to process request"},
        )

    return ChatResponse(response=reply, courses=matches)
