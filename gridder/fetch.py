"""
Retrieval of the daily statistics page.
"""

import base64
from datetime import date
from typing import Optional

import requests

from gridder.config import get_settings
from gridder.utils.errors import FetchError
from gridder.utils.logging import get_logger

logger = get_logger(__name__)

URL_PREFIX = "aHR0cHM6Ly93d3cubnl0aW1lcy5jb20="
URL_SUFFIX = "Y3Jvc3N3b3Jkcy9zcGVsbGluZy1iZWUtZm9ydW0uaHRtbA=="

HEADERS = {
    "User-Agent": "Mozilla/5.0 (X11; Linux x86_64; rv:128.0) Gecko/20100101 Firefox/128.0",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}


def _decode(value: str) -> str:
    return base64.b64decode(value).decode("utf-8")


def page_url(day: date, base_url: Optional[str] = None) -> str:
    """Build the statistics page URL for ``day``."""
    prefix = (base_url or _decode(URL_PREFIX)).rstrip("/")
    return f"{prefix}/{day:%Y/%m/%d}/{_decode(URL_SUFFIX)}"


def fetch_for_date(
    day: date,
    session: Optional[requests.Session] = None,
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
) -> str:
    """
    Download the statistics page published for ``day``.

    Args:
        day: Puzzle date
        session: Optional requests session (a plain ``requests.get`` otherwise)
        base_url: Override for the site root
        timeout: Request timeout in seconds

    Returns:
        Page body as text

    Raises:
        FetchError: If the request fails, the status is not 2xx, or the body
            cannot be decoded
    """
    settings = get_settings()
    url = page_url(day, base_url or settings.base_url)
    timeout = timeout if timeout is not None else settings.request_timeout
    http = session or requests

    logger.info(f"Fetching statistics page for {day:%Y-%m-%d}")
    try:
        response = http.get(url, headers=HEADERS, timeout=timeout)
    except requests.exceptions.RequestException as e:
        raise FetchError("request", url) from e

    try:
        response.raise_for_status()
    except requests.exceptions.HTTPError as e:
        raise FetchError("status", url) from e

    try:
        return response.text
    except (UnicodeDecodeError, LookupError) as e:
        raise FetchError("body", url) from e
