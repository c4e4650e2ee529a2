from pathlib import Path
from typing import Dict, List
from urllib.parse import quote

from slugify import slugify

from .schema import CatalogProduct, StoreDescriptor
from .storage import read_json

STORES: Dict[str, StoreDescriptor] = {
    s.id: s
    for s in [
        StoreDescriptor(id="amazon", name="Amazon ES", logo="🛒", country="ES", base_url="https://www.amazon.es"),
        StoreDescriptor(id="pccomponentes", name="PCComponentes", logo="🖥️", country="ES", base_url="https://www.pccomponentes.com"),
        StoreDescriptor(id="mediamarkt", name="MediaMarkt", logo="🔴", country="ES", base_url="https://www.mediamarkt.es"),
        StoreDescriptor(id="aliexpress", name="AliExpress", logo="🇨🇳", country="CN", base_url="https://es.aliexpress.com"),
        StoreDescriptor(id="ebay", name="eBay ES", logo="🏷️", country="ES", base_url="https://www.ebay.es"),
        StoreDescriptor(id="fnac", name="Fnac", logo="📀", country="ES", base_url="https://www.fnac.es"),
        StoreDescriptor(id="carrefour", name="Carrefour", logo="🛒", country="ES", base_url="https://www.carrefour.es"),
    ]
}

PRODUCTS_TO_SCRAPE: List[CatalogProduct] = [
    CatalogProduct(
        id="samsung-s24-ultra-256gb",
        search_terms=["Samsung Galaxy S24 Ultra 256GB"],
        brand="Samsung", category="Smartphones",
        stores=["amazon", "pccomponentes", "mediamarkt", "aliexpress"],
    ),
    CatalogProduct(
        id="samsung-s24-plus-256gb",
        search_terms=["Samsung Galaxy S24+ 256GB", "Samsung Galaxy S24 Plus 256GB"],
        brand="Samsung", category="Smartphones",
        stores=["amazon", "pccomponentes", "mediamarkt"],
    ),
    CatalogProduct(
        id="iphone-15-pro-max-256gb",
        search_terms=["iPhone 15 Pro Max 256GB"],
        brand="Apple", category="Smartphones",
        stores=["amazon", "pccomponentes", "mediamarkt", "fnac", "aliexpress"],
    ),
    CatalogProduct(
        id="iphone-15-pro-128gb",
        search_terms=["iPhone 15 Pro 128GB"],
        brand="Apple", category="Smartphones",
        stores=["amazon", "pccomponentes", "mediamarkt"],
    ),
    CatalogProduct(
        id="sony-wh1000xm5",
        search_terms=["Sony WH-1000XM5", "Sony WH1000XM5"],
        brand="Sony", category="Audio",
        stores=["amazon", "mediamarkt", "fnac", "aliexpress"],
    ),
    CatalogProduct(
        id="airpods-pro-2",
        search_terms=["AirPods Pro 2", "AirPods Pro USB-C"],
        brand="Apple", category="Audio",
        stores=["amazon", "pccomponentes", "mediamarkt", "fnac"],
    ),
    CatalogProduct(
        id="ps5-slim-digital",
        search_terms=["PlayStation 5 Slim Digital", "PS5 Slim Digital"],
        brand="Sony", category="Gaming",
        stores=["amazon", "mediamarkt", "pccomponentes", "carrefour"],
    ),
    CatalogProduct(
        id="nintendo-switch-oled",
        search_terms=["Nintendo Switch OLED"],
        brand="Nintendo", category="Gaming",
        stores=["amazon", "pccomponentes", "mediamarkt", "ebay"],
    ),
]

# Matched by substring against the catalog id, first hit wins.
DEFAULT_IMAGES = {
    "samsung-s24-ultra": "https://images.samsung.com/es/smartphones/galaxy-s24-ultra/images/galaxy-s24-ultra-highlights-color-titanium-black-mo.jpg",
    "samsung-s24-plus": "https://images.samsung.com/es/smartphones/galaxy-s24/images/galaxy-s24-plus-highlights-color-marble-gray-mo.jpg",
    "iphone-15-pro-max": "https://store.storeimages.cdn-apple.com/4668/as-images.apple.com/is/iphone-15-pro-max-black-titanium-select",
    "iphone-15-pro": "https://store.storeimages.cdn-apple.com/4668/as-images.apple.com/is/iphone-15-pro-finish-select-202309-6-1inch-bluetitanium",
    "sony-wh1000xm5": "https://www.sony.es/image/5d02da5df552836db894cead8a68f5f3",
    "airpods-pro": "https://store.storeimages.cdn-apple.com/4668/as-images.apple.com/is/MQD83",
    "ps5": "https://gmedia.playstation.com/is/image/SIEPDC/ps5-slim-digital-edition-front",
    "nintendo-switch": "https://assets.nintendo.com/image/upload/ncom/en_US/switch/site-design-update/hardware-lineup-oled-white",
}


def get_default_image(brand: str, product_id: str) -> str:
    for key, url in DEFAULT_IMAGES.items():
        if key in product_id:
            return url
    return "https://via.placeholder.com/400x400?text=" + quote(brand, safe="!'()*")


def load_catalog(path: Path) -> List[CatalogProduct]:
    """
    Load a catalog from a JSON list of entries shaped like PRODUCTS_TO_SCRAPE.

    Entries without an "id" get a slug of their first search term.
    """
    raw = read_json(path)
    if not isinstance(raw, list):
        raise ValueError(f"catalog {path} must be a JSON list")

    catalog: List[CatalogProduct] = []
    for entry in raw:
        entry = dict(entry)
        if not entry.get("id"):
            terms = entry.get("search_terms") or []
            entry["id"] = slugify(terms[0]) if terms else ""
        catalog.append(CatalogProduct(**entry))
    return catalog
