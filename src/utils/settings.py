"""Runtime settings for CardSheet.

Values come from the environment (optionally a .env file loaded by the API
entrypoint). The only behavior that is configurable is where the sheet is
fetched from and how long the transport may wait for it.
"""

import os

# Published CSV export of the partner card configuration sheet
DEFAULT_CSV_URL = (
    "https://docs.google.com/spreadsheets/d/e/"
    "2PACX-1vRu49yPLpD0mYpHNBG8LOG3q-HuHyqoBT4T8Xyy2kKpX48z58eS4ZMIwOFYZW8rgBjO5-8Xg4yjkyUb"
    "/pub?output=csv"
)
DEFAULT_FETCH_TIMEOUT = 15.0  # seconds


def get_csv_url() -> str:
    """Return the configured sheet URL, falling back to the published export."""
    return os.getenv("CARDSHEET_CSV_URL", "").strip() or DEFAULT_CSV_URL


def get_fetch_timeout() -> float:
    """Return the transport timeout in seconds.

    Unparseable or non-positive values fall back to DEFAULT_FETCH_TIMEOUT.
    """
    raw = os.getenv("CARDSHEET_FETCH_TIMEOUT", "")
    try:
        timeout = float(raw)
    except ValueError:
        return DEFAULT_FETCH_TIMEOUT
    if timeout <= 0:
        return DEFAULT_FETCH_TIMEOUT
    return timeout
