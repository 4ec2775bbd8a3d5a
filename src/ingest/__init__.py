"""Ingest module for CardSheet.

This module fetches the stacked configuration sheet and recovers its four
tables into an immutable snapshot.
"""

from src.ingest.grid_parser import (
    parse_grid,
    parse_sheet_text,
    read_grid,
)
from src.ingest.sheet_fetcher import fetch_sheet_text
from src.ingest.snapshot import LoadStatus, SheetState, SnapshotStore

__all__ = [
    "parse_grid",
    "parse_sheet_text",
    "read_grid",
    "fetch_sheet_text",
    "LoadStatus",
    "SheetState",
    "SnapshotStore",
]
