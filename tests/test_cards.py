import json

from bs4 import BeautifulSoup

from comoprecio.cards import ProductCollector, extract_search_cards, select_cards

BASE = "https://www.aliexpress.com/w/wholesale-dress.html"


def search_card(item_id, title="Summer dress", img='src="//ae01.alicdn.com/kf/a.jpg"'):
    return f"""
    <div class="search-item-card-wrapper">
      <a href="//www.aliexpress.com/item/{item_id}.html"><img {img}></a>
      <h3 class="multi--title">{title}</h3>
      <div class="multi--price-sale">€12,34</div>
      <div class="multi--price-original">€20,00</div>
      <span class="multi--discount">-38%</span>
    </div>"""


def test_extract_search_cards_fields():
    (card,) = extract_search_cards(f"<body>{search_card(1005001)}</body>", BASE)

    assert card.product_id == "1005001"
    assert card.title == "Summer dress"
    assert card.price == "€12,34"
    assert card.original_price == "€20,00"
    assert card.discount == "-38%"
    assert card.image_url == "https://ae01.alicdn.com/kf/a.jpg"
    assert card.product_url == "https://www.aliexpress.com/item/1005001.html"
    assert card.model_dump(by_alias=True) == {
        "productId": "1005001",
        "title": "Summer dress",
        "price": "€12,34",
        "originalPrice": "€20,00",
        "discount": "-38%",
        "imageUrl": "https://ae01.alicdn.com/kf/a.jpg",
        "productUrl": "https://www.aliexpress.com/item/1005001.html",
        "source": "AliExpress",
    }


def test_cards_without_title_or_image_are_skipped():
    html = search_card(1, title="") + search_card(2, img="") + search_card(3)
    assert [c.product_id for c in extract_search_cards(html, BASE)] == ["3"]


def test_long_titles_are_truncated():
    (card,) = extract_search_cards(search_card(9, title="x" * 500), BASE)
    assert len(card.title) == 200


def test_lazy_image_and_synthesized_id():
    html = """
    <div class="product-item">
      <img data-src="//ae01.alicdn.com/kf/lazy.jpg">
      <span class="Title">No link here</span>
    </div>"""
    (card,) = extract_search_cards(html, BASE, now_ms=1700000000000)

    assert card.image_url == "https://ae01.alicdn.com/kf/lazy.jpg"
    assert card.product_id == "ali-1700000000000-0"
    assert card.product_url == ""
    assert card.price == ""


def test_first_matching_selector_wins():
    soup = BeautifulSoup(
        '<div class="product-item">a</div><div class="search-item-card">b</div>', "lxml"
    )
    assert [c.get_text() for c in select_cards(soup)] == ["b"]


def test_bare_item_links_are_cards():
    html = '<a href="/item/77.html"><img src="/i.jpg"><span class="title">Bag</span></a>'
    (card,) = extract_search_cards(html, BASE)
    assert card.product_id == "77"
    assert card.image_url == "https://www.aliexpress.com/i.jpg"


CONSOLE_CARD = """
<div class="product-item" data-product-id="42">
  <h3 class="title"><a href="/item/42.html">Phone case</a></h3>
  <img src="https://ae01.alicdn.com/kf/b.jpg">
  <span class="price-current">US $8.00</span>
  <span class="origPrice">US $10.00</span>
  <span class="sold">532 sold</span>
  <a class="store-link">Best Store</a>
</div>
"""


def test_collector_extracts_console_record():
    collector = ProductCollector()

    assert collector.scan(CONSOLE_CARD, BASE) == 1
    p = collector.products[0]
    assert p.ProductId == "42"
    assert p.ProductDesc == "Phone case"
    assert p.Currency == "USD"
    assert p.DiscountPrice == "USD 8.00"
    assert p.OriginPrice == "USD 10.00"
    assert p.Discount == "20%"
    assert p.Sales180Day == 532
    assert p.Store == "Best Store"
    assert p.PromotionUrl == "https://www.aliexpress.com/item/42.html"
    assert p.ImageUrl == "https://ae01.alicdn.com/kf/b.jpg"
    assert p.VideoUrl == "" and p.CommissionRate == 0


def test_collector_deduplicates_same_product_id():
    collector = ProductCollector()

    assert collector.scan(CONSOLE_CARD + CONSOLE_CARD, BASE) == 1
    assert collector.scan(CONSOLE_CARD, BASE) == 0
    assert len(collector) == 1


def test_collector_deduplicates_by_item_link():
    card = '<div class="search-card-item"><a href="/item/77.html">x</a><h3>Bag</h3></div>'
    collector = ProductCollector()

    assert collector.scan(card + card, BASE) == 1
    assert collector.products[0].ProductId == "77"
    assert collector.products[0].Store == "AliExpress"
    assert collector.products[0].DiscountPrice == ""


def test_titleless_cards_are_not_remembered():
    collector = ProductCollector()
    assert collector.scan('<div data-product-id="5"><span class="price">1</span></div>') == 0
    assert "5" not in collector.seen_ids


def test_download_show_and_clear(tmp_path, capsys):
    collector = ProductCollector()
    assert collector.download(tmp_path) is None

    collector.scan(CONSOLE_CARD, BASE)
    path = collector.download(tmp_path)

    assert path.parent == tmp_path
    assert path.name.startswith("aliexpress_products_") and path.suffix == ".json"
    doc = json.loads(path.read_text(encoding="utf-8"))
    assert doc["source"] == "AliExpress"
    assert doc["count"] == 1
    assert doc["products"][0]["ProductId"] == "42"

    rows = collector.show()
    assert rows == [{"ID": "42", "Title": "Phone case...", "Price": "USD 8.00", "Discount": "20%"}]
    assert "Phone case" in capsys.readouterr().out

    collector.clear()
    assert len(collector) == 0
    assert collector.scan(CONSOLE_CARD, BASE) == 1
