import asyncio
import json

from playwright.async_api import Error as PlaywrightError

from comoprecio.cards import ProductCollector
from comoprecio.console_scraper import PAGE_SCRIPT, SCAN_BINDING, ConsoleSession, main

URL = "https://www.aliexpress.com/w/wholesale-phone-case.html"
CARD = '<div data-product-id="42"><h3 class="title">Phone case</h3><span class="price">US $8.00</span></div>'


class FakePage:
    def __init__(self, html=CARD, closes_after=None):
        self.html = html
        self.url = URL
        self.bindings = {}
        self.init_scripts = []
        self.evaluated = []
        self.content_calls = 0
        self.closes_after = closes_after

    async def expose_function(self, name, callback):
        self.bindings[name] = callback

    async def add_init_script(self, script):
        self.init_scripts.append(script)

    async def evaluate(self, script, arg=None):
        self.evaluated.append((script, arg))

    async def content(self):
        self.content_calls += 1
        return self.html

    def is_closed(self):
        return self.closes_after is not None and self.content_calls >= self.closes_after


def test_install_exposes_page_commands(tmp_path):
    page = FakePage()
    asyncio.run(ConsoleSession(page, download_dir=tmp_path).install())

    assert set(page.bindings) == {"downloadProducts", "showProducts", "clearProducts", SCAN_BINDING}
    assert page.init_scripts == [PAGE_SCRIPT]
    assert page.evaluated[0] == (PAGE_SCRIPT, None)


def test_scroll_binding_scans_submitted_html(tmp_path):
    page = FakePage()
    session = ConsoleSession(page, download_dir=tmp_path)
    asyncio.run(session.install())

    scan = page.bindings[SCAN_BINDING]
    assert scan(CARD + CARD, URL) == 1
    assert scan(CARD, URL) == 1
    assert session.collector.products[0].ProductId == "42"


def test_download_and_clear_commands(tmp_path):
    page = FakePage()
    session = ConsoleSession(page, download_dir=tmp_path)
    asyncio.run(session.install())

    assert page.bindings["downloadProducts"]() is None

    page.bindings[SCAN_BINDING](CARD, URL)
    path = page.bindings["downloadProducts"]()
    assert json.loads(open(path, encoding="utf-8").read())["count"] == 1
    assert page.bindings["showProducts"]()[0]["ID"] == "42"

    assert page.bindings["clearProducts"]() == 0
    assert len(session.collector) == 0


def test_scan_page_pushes_count_to_badge(tmp_path):
    page = FakePage()
    session = ConsoleSession(page, ProductCollector(), download_dir=tmp_path)

    assert asyncio.run(session.scan_page()) == 1
    script, count = page.evaluated[-1]
    assert "__comoprecioCount" in script
    assert count == 1


def test_scan_page_skips_when_page_is_navigating(tmp_path):
    class NavigatingPage(FakePage):
        async def content(self):
            raise PlaywrightError("Unable to retrieve content because the page is navigating")

    session = ConsoleSession(NavigatingPage(), download_dir=tmp_path)
    assert asyncio.run(session.scan_page()) == 0


def test_watch_scans_until_page_closes(tmp_path):
    page = FakePage(closes_after=2)
    session = ConsoleSession(page, download_dir=tmp_path, interval=0)

    asyncio.run(session.watch())

    assert page.content_calls == 2
    assert len(session.collector) == 1


def test_main_opens_given_url(monkeypatch):
    urls = []

    async def fake_run(url):
        urls.append(url)
        return ProductCollector()

    monkeypatch.setattr("comoprecio.console_scraper.run_console", fake_run)

    assert main([]) == 0
    assert main(["https://es.aliexpress.com/w/wholesale-funda.html"]) == 0
    assert urls == ["https://www.aliexpress.com", "https://es.aliexpress.com/w/wholesale-funda.html"]
