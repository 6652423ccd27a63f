import asyncio
import logging
from typing import AsyncIterator, List, Optional, Sequence

from fastapi import APIRouter, HTTPException, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse

from ..airtable_records import fetch_class_items
from ..config import CATALOG_PAGE_SIZE, REFRESH_INTERVAL_SECONDS
from ..models import (
    CatalogPage,
    ClassItem,
    LectureFilters,
    LiveBoard,
    ViewRequest,
    ViewState,
)
from ..presentation import build_catalog_page, build_live_board, reduce_view
from ..refresh import MinuteTicker

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["lectures"])


def load_class_items() -> List[ClassItem]:
    try:
        return fetch_class_items()
    except Exception:
        logger.exception("Error fetching Airtable records")
        raise HTTPException(status_code=500, detail="Error fetching data")


@router.get("/lectures", response_model=List[ClassItem])
def list_lectures():
    return load_class_items()


@router.get("/lectures/live", response_model=LiveBoard)
def live_board():
    return build_live_board(load_class_items())


@router.get("/lectures/catalog", response_model=CatalogPage)
def catalog_page(
    page: int = Query(1, ge=1),
    page_size: int = Query(CATALOG_PAGE_SIZE, ge=1, le=200),
    search: Optional[str] = None,
    subject: Optional[str] = None,
    building: Optional[str] = None,
    min_capacity: Optional[int] = Query(None, ge=0),
    sort_desc: bool = False,
):
    state = ViewState(
        active_tab="Course Catalog",
        filters=LectureFilters(
            search=search,
            subject=subject,
            building=building,
            min_capacity=min_capacity,
        ),
        sort_desc=sort_desc,
        page=page,
        page_size=page_size,
    )
    return build_catalog_page(load_class_items(), state)


async def live_board_events(
    items: Sequence[ClassItem],
    interval: float = REFRESH_INTERVAL_SECONDS,
) -> AsyncIterator[str]:
    """
    Server-sent events: one live board now, then one per tick. Records are
    fetched once per connection; each tick only re-classifies them.
    """
    queue: "asyncio.Queue[LiveBoard]" = asyncio.Queue()

    def push_board():
        queue.put_nowait(build_live_board(items))

    ticker = MinuteTicker(push_board, interval=interval)
    push_board()
    ticker.start()
    try:
        while True:
            board = await queue.get()
            yield f"data: {board.model_dump_json()}\n\n"
    finally:
        await ticker.stop()


@router.get("/lectures/stream")
async def stream_live_board():
    items = await run_in_threadpool(load_class_items)
    return StreamingResponse(
        live_board_events(items),
        media_type="text/event-stream",
    )


@router.post("/view", response_model=ViewState)
async def update_view(req: ViewRequest):
    try:
        return reduce_view(req.state, req.action)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
