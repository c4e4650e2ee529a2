import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from .auto_scraper import HOME_URL, UA
from .cards import ProductCollector
from .config import get_settings, setup_logging

logger = logging.getLogger(__name__)

SCAN_BINDING = "__comoprecioScan"

# Installed on every document the page loads. The badge and the scroll
# listener call back into Python through the exposed bindings.
PAGE_SCRIPT = """
(() => {
  if (window.__comoprecioInstalled) return;
  window.__comoprecioInstalled = true;
  window.__comoprecioCount = window.__comoprecioCount || 0;

  const install = () => {
    let scrollTimeout;
    window.addEventListener('scroll', () => {
      clearTimeout(scrollTimeout);
      scrollTimeout = setTimeout(async () => {
        window.__comoprecioCount = await window.__comoprecioScan(
          document.documentElement.outerHTML, location.href);
      }, 500);
    });

    const indicator = document.createElement('div');
    indicator.id = 'ali-scraper-indicator';
    indicator.innerHTML = `
      <div style="position: fixed; top: 10px; right: 10px;
                  background: linear-gradient(135deg, #ff6b35, #ff4757);
                  color: white; padding: 12px 20px; border-radius: 12px;
                  font-family: -apple-system, BlinkMacSystemFont, sans-serif;
                  font-size: 14px; z-index: 99999;
                  box-shadow: 0 4px 20px rgba(0,0,0,0.3); cursor: pointer;">
        Scraper active: <span id="product-count">0</span> products
      </div>`;
    document.body.appendChild(indicator);
    indicator.onclick = () => window.downloadProducts();

    setInterval(() => {
      const countEl = document.getElementById('product-count');
      if (countEl) countEl.textContent = window.__comoprecioCount;
    }, 1000);
  };

  if (document.readyState === 'loading') {
    document.addEventListener('DOMContentLoaded', install);
  } else {
    install();
  }
})();
"""


class ConsoleSession:
    """
    Binds a ProductCollector to a live page the user browses by hand.

    The page gets three globals (downloadProducts, showProducts,
    clearProducts), a counter badge that downloads on click, and a scroll
    listener debounced to 500 ms. A scan also runs every `interval` seconds
    until the page is closed.
    """

    def __init__(self, page, collector: Optional[ProductCollector] = None,
                 download_dir: Optional[Path] = None, interval: float = 3.0):
        self.page = page
        self.collector = collector or ProductCollector()
        self.download_dir = download_dir or get_settings().download_dir
        self.interval = interval

    # --- page globals ---

    def download_products(self) -> Optional[str]:
        path = self.collector.download(self.download_dir)
        return str(path) if path else None

    def show_products(self) -> List[dict]:
        return self.collector.show()

    def clear_products(self) -> int:
        self.collector.clear()
        return 0

    def _on_scan(self, html: str, url: str) -> int:
        self.collector.scan(html, url)
        return len(self.collector)

    async def install(self):
        await self.page.expose_function("downloadProducts", self.download_products)
        await self.page.expose_function("showProducts", self.show_products)
        await self.page.expose_function("clearProducts", self.clear_products)
        await self.page.expose_function(SCAN_BINDING, self._on_scan)
        await self.page.add_init_script(PAGE_SCRIPT)
        await self.page.evaluate(PAGE_SCRIPT)

        logger.info("[CONSOLE] Scraper started, scroll to capture products")
        logger.info("[CONSOLE] Page commands: downloadProducts(), showProducts(), clearProducts()")

    async def scan_page(self) -> int:
        try:
            html = await self.page.content()
            new_count = self.collector.scan(html, self.page.url)
            await self.page.evaluate("n => { window.__comoprecioCount = n; }", len(self.collector))
        except PlaywrightError as e:
            # page navigating or closed mid-scan
            logger.warning("[CONSOLE] scan skipped: %s", e)
            return 0
        return new_count

    async def watch(self):
        await asyncio.sleep(1.0)
        while not self.page.is_closed():
            await self.scan_page()
            await asyncio.sleep(self.interval)


async def run_console(url: str = HOME_URL) -> ProductCollector:
    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=False)
        ctx = await browser.new_context(viewport={"width": 1280, "height": 900}, user_agent=UA)
        page = await ctx.new_page()
        await page.goto(url, wait_until="domcontentloaded", timeout=get_settings().navigation_timeout_ms)

        session = ConsoleSession(page)
        await session.install()
        await session.watch()
        await browser.close()

    logger.info("[CONSOLE] Page closed with %d products collected", len(session.collector))
    return session.collector


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    setup_logging()
    asyncio.run(run_console(argv[0] if argv else HOME_URL))
    return 0


if __name__ == "__main__":
    sys.exit(main())
