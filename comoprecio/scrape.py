import logging
import sys
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional

from .adapters import adapter_amazon, adapter_mediamarkt, adapter_pccomponentes
from .config import get_settings, setup_logging
from .schema import CatalogProduct, Offer, PriceDocument, ProductEntry, StoreResult
from .storage import read_json, utc_now_iso, write_json
from .stores import PRODUCTS_TO_SCRAPE, STORES, get_default_image, load_catalog

logger = logging.getLogger(__name__)

Scraper = Callable[[str], Optional[StoreResult]]

SCRAPERS: Dict[str, Scraper] = {
    "amazon": adapter_amazon.scrape_amazon,
    "pccomponentes": adapter_pccomponentes.scrape_pccomponentes,
    "mediamarkt": adapter_mediamarkt.scrape_mediamarkt,
    # add more stores here...
}

RATE_LIMIT_SECONDS = 1.5
CONFIDENCE = 0.90


def build_offer(store_id: str, result: StoreResult) -> Offer:
    return Offer(
        source=store_id,
        price=result.price,
        shipping=result.shipping,
        total=result.price + result.shipping,
        url=result.url,
        stock=result.stock,
        delivery="10-20" if store_id == "aliexpress" else "1-3",
        confidence=CONFIDENCE,
    )


def sort_offers(offers: List[Offer]) -> List[Offer]:
    return sorted(offers, key=lambda o: o.total)


def scrape_product(
    config: CatalogProduct,
    scrapers: Dict[str, Scraper] = SCRAPERS,
    sleep: Optional[Callable[[float], None]] = None,
) -> ProductEntry:
    logger.info("[PRODUCT] Scraping: %s", config.id)
    sleep = sleep or time.sleep
    term = config.search_term
    offers: List[Offer] = []

    for store_id in config.stores:
        scraper = scrapers.get(store_id)
        if scraper:
            result = scraper(term)
            if result:
                offers.append(build_offer(store_id, result))
                logger.info("[PRODUCT]   %s: %s€", store_id, result.price)
            else:
                logger.info("[PRODUCT]   %s: no offer", store_id)
        else:
            logger.info("[PRODUCT]   %s: no scraper yet, skipped", store_id)

        sleep(RATE_LIMIT_SECONDS)

    return ProductEntry(
        id=config.id,
        title=term,
        brand=config.brand,
        category=config.category,
        upc=None,
        image=get_default_image(config.brand, config.id),
        offers=sort_offers(offers),
    )


def scrape_all_products(
    catalog: List[CatalogProduct] = PRODUCTS_TO_SCRAPE,
    scrapers: Dict[str, Scraper] = SCRAPERS,
    sleep: Optional[Callable[[float], None]] = None,
) -> List[ProductEntry]:
    logger.info("[INIT] Starting price scrape of %d products", len(catalog))
    return [scrape_product(config, scrapers, sleep) for config in catalog]


def build_document(products: List[ProductEntry]) -> PriceDocument:
    return PriceDocument(
        last_updated=utc_now_iso(),
        sources=list(STORES.values()),
        products=products,
    )


def save_products(products: List[ProductEntry], path: Optional[Path] = None) -> Path:
    path = path or get_settings().products_path
    write_json(path, build_document(products).model_dump(by_alias=True))
    logger.info("[DONE] Saved %d products to %s", len(products), path)
    return path


def load_existing_products(path: Optional[Path] = None) -> dict:
    """Previous output document, or an empty one if it is missing or unreadable."""
    path = path or get_settings().products_path
    try:
        data = read_json(path)
    except (OSError, ValueError):
        return {"products": []}
    return data if isinstance(data, dict) else {"products": []}


def run_test_mode() -> Optional[StoreResult]:
    logger.info("[TEST] Running single Amazon query")
    result = adapter_amazon.scrape_amazon("iPhone 15 Pro Max")
    logger.info("[TEST] Result: %r", result)
    return result


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    setup_logging()

    if "--test" in argv:
        run_test_mode()
        return 0

    catalog_path = None
    if "--catalog" in argv:
        idx = argv.index("--catalog")
        if idx + 1 >= len(argv):
            logger.error("--catalog needs a path")
            return 2
        catalog_path = Path(argv[idx + 1])

    try:
        catalog = load_catalog(catalog_path) if catalog_path else PRODUCTS_TO_SCRAPE
        products = scrape_all_products(catalog)
        save_products(products)
    except Exception:
        logger.exception("[FATAL] Scraper failed")
        return 1

    logger.info("[DONE] Scraping complete")
    logger.info("[DONE]   Products: %d", len(products))
    logger.info("[DONE]   Total offers: %d", sum(len(p.offers) for p in products))
    return 0


if __name__ == "__main__":
    sys.exit(main())
