import logging
import random
import re
import string
import time
from pathlib import Path
from typing import Dict, List, Optional, Set
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from .prices import detect_currency, discount_percent, format_price, parse_display_price, parse_sales
from .schema import ConsoleProduct, SearchCard
from .storage import utc_now_iso, write_json

logger = logging.getLogger(__name__)

SOURCE = "AliExpress"

# Tried in order; the first selector with at least one match supplies the cards.
SEARCH_CARD_SELECTORS = [
    '[class*="search-item-card"]',
    '[class*="product-item"]',
    ".search-card-item",
    '[class*="manhattan--container"]',
    'a[href*="/item/"]',
]

ITEM_ID_RE = re.compile(r"/item/(\d+)")


def _now_ms() -> int:
    return int(time.time() * 1000)


def _text(node: Optional[Tag]) -> str:
    return node.get_text().strip() if node else ""


def _href(node: Optional[Tag], base_url: str) -> str:
    href = node.get("href") if node else None
    return urljoin(base_url, href) if href else ""


def _image_url(img: Optional[Tag], base_url: str) -> str:
    if img is None:
        return ""
    src = img.get("src")
    url = urljoin(base_url, src) if src else (img.get("data-src") or "")
    if url.startswith("//"):
        url = "https:" + url
    return url


def select_cards(soup: BeautifulSoup, selectors: List[str] = SEARCH_CARD_SELECTORS) -> List[Tag]:
    for sel in selectors:
        found = soup.select(sel)
        if found:
            return found
    return []


def extract_search_cards(html: str, base_url: str = "", now_ms: Optional[int] = None) -> List[SearchCard]:
    """
    Read the product cards currently in the page.

    Every field is best effort: a missing element leaves an empty string.
    Cards without a title or an image are dropped. Ids come from the
    /item/<digits> part of the link, or are synthesized from `now_ms` and
    the card position.
    """
    soup = BeautifulSoup(html, "lxml")
    now_ms = _now_ms() if now_ms is None else now_ms
    items: List[SearchCard] = []

    for index, card in enumerate(select_cards(soup)):
        title = _text(card.select_one('[class*="title"], h3, [class*="Title"]'))
        image_url = _image_url(card.select_one("img"), base_url)

        price, original_price = "", ""
        for el in card.select('[class*="price"], span[class*="Price"]'):
            text = _text(el)
            if re.search(r"[\d,.]", text) and len(text) < 20:
                if not price:
                    price = text
                elif not original_price:
                    original_price = text

        link = card.select_one('a[href*="/item/"]')
        if link is None:
            link = card if card.name == "a" else card.find_parent("a")
        product_url = _href(link, base_url)

        m = ITEM_ID_RE.search(product_url)
        product_id = m.group(1) if m else f"ali-{now_ms}-{index}"

        if title and image_url:
            items.append(
                SearchCard(
                    product_id=product_id,
                    title=title[:200],
                    price=price,
                    original_price=original_price,
                    discount=_text(card.select_one('[class*="discount"]')),
                    image_url=image_url,
                    product_url=product_url,
                    source=SOURCE,
                )
            )

    return items


class ProductCollector:
    """
    Accumulates product cards seen on a page the user is browsing.

    Holds one record per product id for the lifetime of the collector;
    `clear()` forgets everything.
    """

    SELECTORS: Dict[str, str] = {
        "product_card": '[class*="search-item-card"], [class*="product-item"], .search-card-item, [data-product-id]',
        "title": '[class*="title"], .manhattan--titleText, h3',
        "price": '[class*="price"], .manhattan--price-sale, .search-card-item--price',
        "original_price": '[class*="origPrice"], .manhattan--price-del, [class*="original"]',
        "discount": '[class*="discount"], .manhattan--discount',
        "image": 'img[src*="alicdn"], img[data-src*="alicdn"]',
        "sales": '[class*="sold"], [class*="trade"]',
        "rating": '[class*="rating"], [class*="star"]',
        "store": '[class*="store"], .manhattan--store',
    }

    def __init__(self):
        self.products: List[ConsoleProduct] = []
        self.seen_ids: Set[str] = set()

    def __len__(self):
        return len(self.products)

    def _product_id(self, card: Tag, base_url: str) -> str:
        pid = card.get("data-product-id")
        if pid:
            return pid
        m = ITEM_ID_RE.search(_href(card.select_one("a"), base_url))
        if m:
            return m.group(1)
        # Not stable: the same card rescanned later gets a new id.
        suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
        return f"{_now_ms()}{suffix}"

    def extract_product(self, card: Tag, base_url: str = "") -> Optional[ConsoleProduct]:
        sel = self.SELECTORS
        product_id = self._product_id(card, base_url)
        if product_id in self.seen_ids:
            return None

        title = _text(card.select_one(sel["title"]))
        if not title:
            return None

        price_text = _text(card.select_one(sel["price"]))
        current = parse_display_price(price_text)
        original = parse_display_price(_text(card.select_one(sel["original_price"]))) or current
        currency = detect_currency(price_text)

        discount = _text(card.select_one(sel["discount"])) or discount_percent(current, original)

        product = ConsoleProduct(
            ProductId=product_id,
            ImageUrl=_image_url(card.select_one(sel["image"]), base_url),
            ProductDesc=title,
            OriginPrice=format_price(currency, original),
            DiscountPrice=format_price(currency, current),
            Discount=discount,
            Currency=currency,
            Sales180Day=parse_sales(_text(card.select_one(sel["sales"]))),
            PromotionUrl=_href(card.select_one('a[href*="/item/"]'), base_url),
            Store=_text(card.select_one(sel["store"])) or SOURCE,
            ScrapedAt=utc_now_iso(),
        )
        self.seen_ids.add(product_id)
        return product

    def scan(self, html: str, base_url: str = "") -> int:
        soup = BeautifulSoup(html, "lxml")
        new_count = 0
        for card in soup.select(self.SELECTORS["product_card"]):
            product = self.extract_product(card, base_url)
            if product:
                self.products.append(product)
                new_count += 1
        if new_count:
            logger.info("[SCAN] +%d products (total: %d)", new_count, len(self.products))
        return new_count

    def to_document(self) -> dict:
        return {
            "source": SOURCE,
            "scrapedAt": utc_now_iso(),
            "count": len(self.products),
            "products": [p.model_dump() for p in self.products],
        }

    def download(self, directory: Path) -> Optional[Path]:
        if not self.products:
            logger.warning("[DOWNLOAD] No products to download")
            return None
        path = write_json(Path(directory) / f"aliexpress_products_{_now_ms()}.json", self.to_document())
        logger.info("[DOWNLOAD] Saved %d products to %s", len(self.products), path)
        return path

    def show(self) -> List[dict]:
        rows = [
            {
                "ID": p.ProductId,
                "Title": p.ProductDesc[:50] + "...",
                "Price": p.DiscountPrice,
                "Discount": p.Discount,
            }
            for p in self.products
        ]
        for row in rows:
            print(f"{row['ID']:<20} {row['Title']:<53} {row['Price']:<14} {row['Discount']}")
        return rows

    def clear(self) -> None:
        self.products.clear()
        self.seen_ids.clear()
        logger.info("[CLEAR] Products cleared")
