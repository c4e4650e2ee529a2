import logging
import time
from urllib.parse import quote
from typing import Callable, Optional

import requests

from .config import get_settings

logger = logging.getLogger(__name__)

UA = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"

HEADERS = {
    "User-Agent": UA,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "es-ES,es;q=0.9,en;q=0.8",
}


def fetch_html(
    url: str,
    retries: int = 3,
    *,
    session: Optional[requests.Session] = None,
    sleep: Callable[[float], None] = time.sleep,
    timeout: Optional[float] = None,
) -> str:
    """
    GET `url` and return the response body.

    Each failed attempt n (1-based) waits 2 * n seconds before the next one;
    the exception from the last attempt is re-raised.
    """
    http = session or requests
    if timeout is None:
        timeout = get_settings().http_timeout

    for attempt in range(1, retries + 1):
        try:
            r = http.get(url, headers=HEADERS, timeout=timeout)
            r.raise_for_status()
            return r.text
        except requests.RequestException:
            logger.warning("[FETCH] retry %d/%d for %s", attempt, retries, url)
            if attempt == retries:
                raise
            sleep(2.0 * attempt)


def encode_component(value: str) -> str:
    # Leaves only unreserved characters unescaped, spaces become %20.
    return quote(value, safe="!'()*")
