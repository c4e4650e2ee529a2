import logging
from typing import Callable, Optional

from bs4 import BeautifulSoup

from ..fetcher import encode_component, fetch_html
from ..prices import parse_price
from ..schema import StoreResult

logger = logging.getLogger(__name__)

BASE_URL = "https://www.amazon.es"
SHIPPING = 0.0  # free with Prime


def search_url(term: str) -> str:
    return f"{BASE_URL}/s?k={encode_component(term)}"


def extract_amazon(html: str) -> Optional[StoreResult]:
    """
    First priced result among the top three search cards.

    Amazon splits the price into whole and fraction spans; they are joined
    before parsing ("1.299," + "00").
    """
    soup = BeautifulSoup(html, "lxml")
    for card in soup.select('[data-component-type="s-search-result"]')[:3]:
        whole = card.select_one(".a-price-whole")
        if not whole or not whole.get_text():
            continue
        fraction = card.select_one(".a-price-fraction")
        price = parse_price(whole.get_text() + (fraction.get_text() if fraction else ""))
        if not price:
            continue

        title = card.select_one("h2 a span")
        link = card.select_one("h2 a")
        href = link.get("href", "") if link else ""
        return StoreResult(
            title=title.get_text(strip=True) if title else "",
            price=price,
            shipping=SHIPPING,
            url=f"{BASE_URL}{href}",
        )
    return None


def scrape_amazon(term: str, fetch: Callable[[str], str] = fetch_html) -> Optional[StoreResult]:
    logger.info("[STORE] Amazon: %s", term)
    try:
        return extract_amazon(fetch(search_url(term)))
    except Exception as e:
        logger.error("[STORE] Amazon error: %s", e)
        return None
