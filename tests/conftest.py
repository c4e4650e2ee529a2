import pytest
import requests


class FakeResponse:
    def __init__(self, text="", status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


class FakeSession:
    """Plays back a list of responses/exceptions, one per GET."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "timeout": timeout})
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeClock:
    def __init__(self):
        self.waits = []

    def __call__(self, seconds):
        self.waits.append(seconds)

    @property
    def elapsed_ms(self):
        return round(sum(self.waits) * 1000)


AMAZON_HTML = """
<html><body>
  <div data-component-type="s-search-result">
    <h2><a href="/dp/B0NOPRICE"><span>Funda iPhone</span></a></h2>
  </div>
  <div data-component-type="s-search-result">
    <h2><a href="/dp/B0CHX1W1XY"><span>Apple iPhone 15 Pro Max (256 GB)</span></a></h2>
    <span class="a-price"><span class="a-price-whole">1.299,</span><span class="a-price-fraction">00</span></span>
  </div>
</body></html>
"""

PCCOMPONENTES_HTML = """
<html><body>
  <div data-product-name="Sony WH-1000XM5 Negro">
    <a href="/sony-wh-1000xm5-negro">Sony WH-1000XM5</a>
    <span data-product-price="329,99"></span>
  </div>
</body></html>
"""

MEDIAMARKT_HTML = """
<html><body>
  <div data-test="mms-search-srp-productlist-item">
    <a href="https://www.mediamarkt.es/es/product/_consola-sony-ps5-slim-digital-1.html">
      <p data-test="product-title">Consola Sony PS5 Slim Digital</p>
    </a>
    <div data-test="product-price">€ 449,00</div>
  </div>
</body></html>
"""


@pytest.fixture
def clock():
    return FakeClock()
