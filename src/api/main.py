"""FastAPI application for CardSheet API.

This module exposes the recovered configuration tables and the resolution
engine to the dashboard and phone-preview front end.
"""

import asyncio
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables from .env file
load_dotenv()

from src.api.error_handlers import (
    cardsheet_exception_handler,
    general_exception_handler,
    validation_exception_handler,
)
from src.api.exceptions import CardSheetException, ConfigNotFoundError, InvalidInputError
from src.api.schemas import (
    DashboardResponse,
    HealthResponse,
    PreviewCard,
    PreviewListResponse,
    SegmentsResponse,
    StatusResponse,
    TablesResponse,
)
from src.api.validators import validate_config_id, validate_segment
from src.ingest.snapshot import LoadStatus, SnapshotStore
from src.recommend.engine import (
    administrative_view,
    card_benefits,
    card_preview,
    eligible_cards,
    known_segments,
)
from src.tables.models import CardPreview
from src.utils.logging import get_logger

logger = get_logger("api")

store = SnapshotStore()


def get_store() -> SnapshotStore:
    """Dependency returning the process-wide snapshot store."""
    return store


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Load in the background so /api/status can report "loading"
    app.state.initial_load = asyncio.create_task(store.refresh())
    yield
    task = app.state.initial_load
    if not task.done():
        task.cancel()


app = FastAPI(
    title="CardSheet API",
    description="Partner card configuration dashboard and preview API",
    version="1.0.0",
    lifespan=lifespan,
)

# Add exception handlers
app.add_exception_handler(CardSheetException, cardsheet_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, general_exception_handler)

origins = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://127.0.0.1:5173",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request/Response logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all API requests and responses."""
    request_id = getattr(request.state, "request_id", "unknown")

    start_time = time.time()
    logger.info(
        f"Request: {request.method} {request.url.path}",
        extra={
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params)
        }
    )

    response = await call_next(request)

    process_time = time.time() - start_time
    logger.info(
        f"Response: {request.method} {request.url.path} - {response.status_code}",
        extra={
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "process_time_ms": round(process_time * 1000, 2)
        }
    )

    return response


# Request ID middleware (registered last so it runs first)
@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add request ID to all requests for tracing."""
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.get("/api/health", response_model=HealthResponse)
def health_check(sheets: SnapshotStore = Depends(get_store)):
    """Health check endpoint with sheet load status"""
    state = sheets.state
    return HealthResponse(
        status="ok" if state.status == LoadStatus.READY else "degraded",
        timestamp=datetime.now(),
        sheet=StatusResponse.from_state(state),
    )


@app.get("/api/status", response_model=StatusResponse)
def load_status(sheets: SnapshotStore = Depends(get_store)):
    """Tri-state load status of the configuration sheet"""
    return StatusResponse.from_state(sheets.state)


@app.post("/api/refresh", response_model=StatusResponse)
async def refresh_sheet(sheets: SnapshotStore = Depends(get_store)):
    """Re-fetch the sheet and replace the snapshot"""
    state = await sheets.refresh()
    return StatusResponse.from_state(state)


@app.get("/api/tables", response_model=TablesResponse)
def get_tables(sheets: SnapshotStore = Depends(get_store)):
    tables = sheets.require_tables()
    return TablesResponse(
        partners=list(tables.partners),
        cards=list(tables.cards),
        product_details=list(tables.product_details),
        display_rules=list(tables.display_rules),
    )


@app.get("/api/dashboard", response_model=DashboardResponse)
def get_dashboard(sheets: SnapshotStore = Depends(get_store)):
    """Administrative view: every card with partner and rule columns"""
    rows = administrative_view(sheets.require_tables())
    return DashboardResponse(rows=rows, total=len(rows))


@app.get("/api/segments", response_model=SegmentsResponse)
def get_segments(sheets: SnapshotStore = Depends(get_store)):
    return SegmentsResponse(segments=known_segments(sheets.require_tables()))


@app.get("/api/preview/cards", response_model=PreviewListResponse)
def get_preview_cards(
    segment: Optional[str] = Query(None, description="Viewer segment, matched exactly"),
    sheets: SnapshotStore = Depends(get_store),
):
    """Cards the phone preview lists for a segment, highest priority first"""
    is_valid, error_msg, segment = validate_segment(segment)
    if not is_valid:
        raise InvalidInputError(error_msg, field="segment")

    cards = [
        PreviewCard(**card.model_dump(), benefits=card_benefits(card))
        for card in eligible_cards(sheets.require_tables(), segment)
    ]
    return PreviewListResponse(segment=segment, cards=cards, total=len(cards))


@app.get("/api/preview/cards/{config_id}", response_model=CardPreview)
def get_preview_card(config_id: str, sheets: SnapshotStore = Depends(get_store)):
    """Detail and steps screen data for one card"""
    is_valid, error_msg = validate_config_id(config_id)
    if not is_valid:
        raise InvalidInputError(error_msg, field="config_id")

    preview = card_preview(sheets.require_tables(), config_id)
    if preview is None:
        raise ConfigNotFoundError(config_id)
    return preview
