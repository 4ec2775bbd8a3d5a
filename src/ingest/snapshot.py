"""Holder for the current sheet snapshot and its load status.

The store keeps a single reference to an immutable SheetState. A refresh
builds a complete new state and swaps the reference in one assignment, so
readers never see old and new tables mixed. Every refresh takes a generation
number; when an older fetch finishes after a newer one has started, its
result is discarded instead of overwriting the newer snapshot.
"""

from datetime import datetime
from enum import Enum
from typing import Awaitable, Callable, Optional

from pydantic import BaseModel, ConfigDict

from src.api.exceptions import CardSheetException, SnapshotNotReadyError
from src.ingest.grid_parser import parse_sheet_text
from src.ingest.sheet_fetcher import fetch_sheet_text
from src.tables.models import ParsedTables
from src.utils.logging import get_logger

logger = get_logger("ingest.snapshot")

Fetcher = Callable[[Optional[str]], Awaitable[str]]


class LoadStatus(str, Enum):
    LOADING = "loading"
    ERROR = "error"
    READY = "ready"


class SheetState(BaseModel):
    """Tri-state load result: loading, error with message, or ready with data."""

    model_config = ConfigDict(frozen=True)

    status: LoadStatus = LoadStatus.LOADING
    error: Optional[str] = None
    tables: Optional[ParsedTables] = None
    generation: int = 0
    loaded_at: Optional[datetime] = None


class SnapshotStore:
    """Owns the current SheetState and replaces it on refresh."""

    def __init__(self, url: Optional[str] = None, fetcher: Optional[Fetcher] = None):
        self.url = url
        self._fetcher = fetcher or fetch_sheet_text
        self._generation = 0
        self._state = SheetState()

    @property
    def state(self) -> SheetState:
        return self._state

    @property
    def generation(self) -> int:
        """Generation of the most recently started refresh."""
        return self._generation

    def require_tables(self) -> ParsedTables:
        """Return the current tables or raise if no successful load exists."""
        state = self._state
        if state.status == LoadStatus.READY and state.tables is not None:
            return state.tables
        if state.status == LoadStatus.ERROR:
            raise SnapshotNotReadyError(state.error or "Failed to load configuration sheet", status="error")
        raise SnapshotNotReadyError()

    def install(self, tables: ParsedTables) -> SheetState:
        """Install already-parsed tables as a new generation."""
        generation = self._begin()
        return self._commit(generation, self._ready(generation, tables))

    async def refresh(self) -> SheetState:
        """Fetch, parse and install the sheet.

        Fetch, transport and parse failures become an error state rather than
        an exception, so a started refresh always settles its generation.

        Returns:
            The resulting state. For a refresh that was superseded while in
            flight, this is the newer state that was kept.
        """
        generation = self._begin()
        logger.info(f"Fetching configuration sheet (generation {generation})")

        try:
            text = await self._fetcher(self.url)
        except CardSheetException as exc:
            logger.warning(f"Configuration sheet fetch failed (generation {generation}): {exc.message}")
            failed = SheetState(status=LoadStatus.ERROR, error=exc.message, generation=generation)
            return self._commit(generation, failed)

        try:
            tables = parse_sheet_text(text)
        except Exception as exc:
            logger.exception(f"Configuration sheet could not be parsed (generation {generation})")
            failed = SheetState(
                status=LoadStatus.ERROR,
                error=f"Failed to parse CSV data: {exc}",
                generation=generation,
            )
            return self._commit(generation, failed)

        return self._commit(generation, self._ready(generation, tables))

    def _begin(self) -> int:
        self._generation += 1
        return self._generation

    def _ready(self, generation: int, tables: ParsedTables) -> SheetState:
        return SheetState(
            status=LoadStatus.READY,
            tables=tables,
            generation=generation,
            loaded_at=datetime.now(),
        )

    def _commit(self, generation: int, state: SheetState) -> SheetState:
        if generation != self._generation:
            logger.info(
                f"Discarding stale sheet load (generation {generation}, latest {self._generation})"
            )
            return self._state
        self._state = state
        if state.status == LoadStatus.READY:
            logger.info(f"Configuration sheet loaded (generation {generation}): {state.tables.counts()}")
        return state
