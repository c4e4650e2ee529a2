import logging
from typing import Callable, Optional

from bs4 import BeautifulSoup

from ..fetcher import encode_component, fetch_html
from ..prices import parse_price
from ..schema import StoreResult
from .adapter_pccomponentes import absolute_url

logger = logging.getLogger(__name__)

BASE_URL = "https://www.mediamarkt.es"
SHIPPING = 0.0


def search_url(term: str) -> str:
    return f"{BASE_URL}/es/search.html?query={encode_component(term)}"


def extract_mediamarkt(html: str) -> Optional[StoreResult]:
    soup = BeautifulSoup(html, "lxml")
    card = soup.select_one('[data-test="mms-search-srp-productlist-item"]')
    if card is None:
        return None

    price_node = card.select_one('[data-test="product-price"]')
    price = parse_price(price_node.get_text() if price_node else None)
    if not price:
        return None

    title = card.select_one('[data-test="product-title"]')
    link = card.select_one("a")
    return StoreResult(
        title=title.get_text(strip=True) if title else "",
        price=price,
        shipping=SHIPPING,
        url=absolute_url(link.get("href") if link else None, BASE_URL),
    )


def scrape_mediamarkt(term: str, fetch: Callable[[str], str] = fetch_html) -> Optional[StoreResult]:
    logger.info("[STORE] MediaMarkt: %s", term)
    try:
        return extract_mediamarkt(fetch(search_url(term)))
    except Exception as e:
        logger.error("[STORE] MediaMarkt error: %s", e)
        return None
