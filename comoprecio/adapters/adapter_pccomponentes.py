import logging
from typing import Callable, Optional

from bs4 import BeautifulSoup

from ..fetcher import encode_component, fetch_html
from ..prices import parse_price
from ..schema import StoreResult

logger = logging.getLogger(__name__)

BASE_URL = "https://www.pccomponentes.com"
SHIPPING = 0.0  # free over 25€


def search_url(term: str) -> str:
    return f"{BASE_URL}/buscar/?query={encode_component(term)}"


def absolute_url(href: Optional[str], base_url: str) -> str:
    href = href or ""
    return href if href.startswith("http") else f"{base_url}{href}"


def extract_pccomponentes(html: str) -> Optional[StoreResult]:
    soup = BeautifulSoup(html, "lxml")
    card = soup.select_one("[data-product-name]")
    if card is None:
        return None

    price_node = card.select_one("[data-product-price]")
    price = parse_price(price_node.get("data-product-price") if price_node else None)
    if not price:
        return None

    link = card.select_one("a")
    return StoreResult(
        title=card.get("data-product-name", ""),
        price=price,
        shipping=SHIPPING,
        url=absolute_url(link.get("href") if link else None, BASE_URL),
    )


def scrape_pccomponentes(term: str, fetch: Callable[[str], str] = fetch_html) -> Optional[StoreResult]:
    logger.info("[STORE] PCComponentes: %s", term)
    try:
        return extract_pccomponentes(fetch(search_url(term)))
    except Exception as e:
        logger.error("[STORE] PCComponentes error: %s", e)
        return None
