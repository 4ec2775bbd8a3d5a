"""Response models for the CardSheet API."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel

from src.ingest.snapshot import LoadStatus, SheetState
from src.tables.models import (
    CardPresentation,
    DenormalizedRow,
    DisplayRule,
    Partner,
    ProductDetail,
)


class StatusResponse(BaseModel):
    status: LoadStatus
    error: Optional[str] = None
    generation: int = 0
    loaded_at: Optional[datetime] = None
    counts: Optional[Dict[str, int]] = None

    @classmethod
    def from_state(cls, state: SheetState) -> "StatusResponse":
        return cls(
            status=state.status,
            error=state.error,
            generation=state.generation,
            loaded_at=state.loaded_at,
            counts=state.tables.counts() if state.tables is not None else None,
        )


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    sheet: StatusResponse


class TablesResponse(BaseModel):
    partners: List[Partner]
    cards: List[CardPresentation]
    product_details: List[ProductDetail]
    display_rules: List[DisplayRule]


class DashboardResponse(BaseModel):
    rows: List[DenormalizedRow]
    total: int


class SegmentsResponse(BaseModel):
    segments: List[str]


class PreviewCard(CardPresentation):
    """A card as listed on the preview screen, with empty benefits removed."""

    benefits: List[str] = []


class PreviewListResponse(BaseModel):
    segment: str
    cards: List[PreviewCard]
    total: int
