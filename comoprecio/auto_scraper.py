import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional, Set

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from .cards import SOURCE, extract_search_cards
from .config import get_settings, setup_logging
from .fetcher import encode_component
from .schema import SearchCard
from .storage import utc_now_iso, write_json

logger = logging.getLogger(__name__)

UA = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
HOME_URL = "https://www.aliexpress.com"
DEFAULT_SEARCH_TERM = "women clothes"

SEARCH_BOX_SELECTORS = [
    'input[type="search"]',
    'input[class*="search"]',
    "#search-words",
    'input[placeholder*="search"]',
    'input[name="SearchText"]',
]


def search_page_url(term: str) -> str:
    return f"{HOME_URL}/wholesale?SearchText={encode_component(term)}"


class AutoScraper:
    def __init__(self, search_term: str = DEFAULT_SEARCH_TERM, max_products: int = 200, max_scrolls: int = 50):
        self.search_term = search_term
        self.max_products = max_products
        self.max_scrolls = max_scrolls
        self.products: List[SearchCard] = []
        self.seen_ids: Set[str] = set()

    def add_products(self, items: List[SearchCard]) -> int:
        added = 0
        for item in items:
            if item.product_id in self.seen_ids:
                continue
            self.seen_ids.add(item.product_id)
            self.products.append(item)
            added += 1
            logger.info("  [NEW] %d. %s...", len(self.products), item.title[:50])
        return added

    async def open_search(self, page):
        timeout = get_settings().navigation_timeout_ms
        logger.info("[NAV] Opening %s", HOME_URL)
        await page.goto(HOME_URL, wait_until="networkidle", timeout=timeout)
        await page.wait_for_timeout(3000)

        try:
            await page.click('[class*="close"]', timeout=2000)
        except PlaywrightError:
            logger.debug("[NAV] no popup to close")

        logger.info("[NAV] Searching: %s", self.search_term)
        for selector in SEARCH_BOX_SELECTORS:
            try:
                await page.wait_for_selector(selector, timeout=3000)
                await page.locator(selector).first.press_sequentially(self.search_term, delay=50)
                await page.keyboard.press("Enter")
                break
            except PlaywrightError:
                continue
        else:
            logger.info("[NAV] Search box not found, going to the search URL")
            await page.goto(search_page_url(self.search_term), wait_until="networkidle", timeout=timeout)

        logger.info("[NAV] Waiting for results...")
        await page.wait_for_timeout(5000)

    async def harvest(self, page):
        scroll_count = 0
        while len(self.products) < self.max_products and scroll_count < self.max_scrolls:
            logger.info("[SCROLL] %d/%d", scroll_count + 1, self.max_scrolls)

            html = await page.content()
            self.add_products(extract_search_cards(html, page.url))

            await page.evaluate("() => window.scrollBy(0, window.innerHeight)")
            await page.wait_for_timeout(2000)
            scroll_count += 1

    async def run(self, page) -> List[SearchCard]:
        try:
            await self.open_search(page)
            await self.harvest(page)
            logger.info("[DONE] Total products captured: %d", len(self.products))
        except Exception as e:
            logger.error("[ERROR] %s", e)
        return self.products

    def to_document(self) -> dict:
        return {
            "source": SOURCE,
            "searchTerm": self.search_term,
            "scrapedAt": utc_now_iso(),
            "count": len(self.products),
            "products": [p.model_dump(by_alias=True) for p in self.products],
        }

    def save(self, path: Optional[Path] = None) -> Optional[Path]:
        if not self.products:
            return None
        path = write_json(path or get_settings().aliexpress_path, self.to_document())
        logger.info("[SAVE] Saved to %s", path)
        return path


async def scrape_aliexpress(search_term: str = DEFAULT_SEARCH_TERM, output: Optional[Path] = None) -> List[SearchCard]:
    scraper = AutoScraper(search_term)

    async with async_playwright() as p:
        browser = await p.chromium.launch(
            headless=False,
            args=["--no-sandbox", "--disable-setuid-sandbox"],
        )
        ctx = await browser.new_context(viewport={"width": 1280, "height": 900}, user_agent=UA)
        page = await ctx.new_page()

        await scraper.run(page)
        scraper.save(output)

        logger.info("[SHUTDOWN] Browser closes in 5 seconds...")
        await page.wait_for_timeout(5000)
        await browser.close()

    logger.info("[DONE] Completed")
    return scraper.products


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    setup_logging()
    search_term = argv[0] if argv else DEFAULT_SEARCH_TERM
    logger.info("[INIT] AliExpress scraper, searching: %s", search_term)
    asyncio.run(scrape_aliexpress(search_term))
    return 0


if __name__ == "__main__":
    sys.exit(main())
