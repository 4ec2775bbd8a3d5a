"""HTTP transport for the configuration sheet.

The sheet is a published CSV export fetched with a plain, unauthenticated
GET. The whole body is read before parsing starts. The blocking requests call
runs in Starlette's threadpool so the event loop stays free while waiting.
"""

from typing import Optional

import requests
from starlette.concurrency import run_in_threadpool

from src.api.exceptions import FetchFailure, TransportException
from src.utils.logging import get_logger
from src.utils.settings import get_csv_url, get_fetch_timeout

logger = get_logger("ingest.sheet_fetcher")


def fetch_sheet_text_sync(url: Optional[str] = None, timeout: Optional[float] = None) -> str:
    """Download the sheet and return its text.

    Args:
        url: Sheet URL. If None, uses the configured URL.
        timeout: Request timeout in seconds. If None, uses the configured timeout.

    Returns:
        Response body decoded as UTF-8

    Raises:
        FetchFailure: The server answered with a non-2xx status
        TransportException: The request failed before a response arrived
    """
    url = url or get_csv_url()
    timeout = timeout or get_fetch_timeout()

    try:
        response = requests.get(url, timeout=timeout)
    except requests.exceptions.RequestException as req_err:
        logger.error(f"Request exception fetching sheet from {url}: {req_err}")
        raise TransportException(str(req_err)) from req_err

    if not 200 <= response.status_code < 300:
        logger.error(f"Sheet fetch returned HTTP {response.status_code} for {url}")
        raise FetchFailure(response.status_code)

    # utf-8-sig drops a leading BOM if the export carries one
    return response.content.decode("utf-8-sig", errors="replace")


async def fetch_sheet_text(url: Optional[str] = None, timeout: Optional[float] = None) -> str:
    """Awaitable wrapper around fetch_sheet_text_sync."""
    return await run_in_threadpool(fetch_sheet_text_sync, url, timeout)
