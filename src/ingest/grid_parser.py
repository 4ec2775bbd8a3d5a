"""Table recovery for the stacked configuration sheet.

The sheet holds four tables one under the other, each introduced by a header
row and separated by blank rows. There are no explicit delimiters, so the
tables are recovered with a small state machine:

- a blank row closes the current table
- a header row (key column first, signature column anywhere) opens a table
- any other row belongs to the open table, or is dropped if none is open

Rows are processed top to bottom in a single pass. Malformed input never
raises; bad rows are simply left out of the result.
"""

import csv
import io
import sys
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from src.tables.models import RECORD_TYPES, ParsedTables, SheetRecord, TableKind
from src.utils.logging import get_logger

logger = get_logger("ingest.grid_parser")

# Long cells such as TnC_Content must not hit the csv module's 128 KiB default
csv.field_size_limit(min(sys.maxsize, 2**31 - 1))

Row = Sequence[str]

# (key column, signature column) per table. Order matters: cards and product
# details share "Config_ID", so "Card_Title" must be checked first.
TABLE_SIGNATURES: Tuple[Tuple[TableKind, str, str], ...] = (
    (TableKind.PARTNER, "Partner_ID", "Partner_Name"),
    (TableKind.CARD, "Config_ID", "Card_Title"),
    (TableKind.PRODUCT_DETAIL, "Config_ID", "Hero_Banner_URL"),
    (TableKind.DISPLAY_RULE, "Rule_ID", "User_Segment"),
)


@dataclass(frozen=True)
class ParserState:
    table: Optional[TableKind] = None
    headers: Tuple[str, ...] = ()


# A data row attributed to a table, before it is typed
Emission = Tuple[TableKind, Dict[str, str]]


def _cell(row: Row, index: int) -> str:
    if index >= len(row) or row[index] is None:
        return ""
    return row[index]


def is_blank_row(row: Row) -> bool:
    """True if the row has no cells or only empty/whitespace cells."""
    return all(not (cell or "").strip() for cell in row)


def detect_header(row: Row) -> Optional[TableKind]:
    """Return the table a header row introduces, or None for other rows."""
    first = _cell(row, 0).strip()
    cells = {(cell or "").strip() for cell in row}
    for kind, key_column, signature_column in TABLE_SIGNATURES:
        if first == key_column and signature_column in cells:
            return kind
    return None


def build_record(headers: Sequence[str], row: Row) -> Dict[str, str]:
    """Zip headers with row cells.

    Missing cells become "", extra cells are ignored, and empty header names
    contribute no field. Every value is trimmed.
    """
    values: Dict[str, str] = {}
    for index, header in enumerate(headers):
        if not header:
            continue
        values[header] = _cell(row, index).strip()
    return values


def advance(state: ParserState, row: Row) -> Tuple[ParserState, Optional[Emission]]:
    """Transition function of the recovery state machine."""
    if is_blank_row(row):
        return ParserState(), None

    kind = detect_header(row)
    if kind is not None:
        headers = tuple((cell or "").strip() for cell in row)
        return ParserState(table=kind, headers=headers), None

    if state.table is None:
        # Orphan row: no open table to attribute it to
        return state, None

    return state, (state.table, build_record(state.headers, row))


def parse_grid(grid: Sequence[Row]) -> ParsedTables:
    """Recover the four typed tables from a grid of text cells.

    Args:
        grid: Rows of raw cell strings, in sheet order. Rows may be ragged.

    Returns:
        ParsedTables with every table in original row order
    """
    collected: Dict[TableKind, List[SheetRecord]] = {kind: [] for kind in TableKind}
    state = ParserState()
    dropped = 0

    for row in grid:
        next_state, emission = advance(state, row)
        if emission is not None:
            kind, values = emission
            collected[kind].append(RECORD_TYPES[kind].model_validate(values))
        elif next_state.table is None and not is_blank_row(row):
            dropped += 1
        state = next_state

    tables = ParsedTables(
        partners=tuple(collected[TableKind.PARTNER]),
        cards=tuple(collected[TableKind.CARD]),
        product_details=tuple(collected[TableKind.PRODUCT_DETAIL]),
        display_rules=tuple(collected[TableKind.DISPLAY_RULE]),
    )
    logger.debug(f"Recovered tables {tables.counts()}, dropped {dropped} orphan rows")
    return tables


def read_grid(csv_text: str) -> List[List[str]]:
    """Tokenize CSV text into rows, keeping blank lines as empty rows.

    A leading byte-order mark is removed so the first header cell still
    matches its key column. Text the csv module cannot tokenize ends the
    grid at that point; the rows read before it are kept.
    """
    if csv_text.startswith("\ufeff"):
        csv_text = csv_text[1:]

    rows: List[List[str]] = []
    reader = csv.reader(io.StringIO(csv_text, newline=""))
    try:
        for row in reader:
            rows.append(row)
    except csv.Error as exc:
        logger.warning(f"Stopped reading sheet at line {reader.line_num}: {exc}")
    return rows


def parse_sheet_text(csv_text: str) -> ParsedTables:
    """Tokenize and recover a full sheet export in one call."""
    return parse_grid(read_grid(csv_text))
