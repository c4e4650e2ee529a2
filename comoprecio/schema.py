from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List


# --- stores / catalog (static configuration) ---

class StoreDescriptor(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    logo: str
    country: str
    base_url: str = Field(alias="baseUrl")


class CatalogProduct(BaseModel):
    id: str
    search_terms: List[str] = Field(min_length=1)   # only the first is queried
    brand: str
    category: str
    stores: List[str] = Field(default_factory=list)

    @property
    def search_term(self) -> str:
        return self.search_terms[0]


# --- HTTP scraper output ---

class StoreResult(BaseModel):
    title: str = ""
    price: float
    shipping: float = 0.0
    url: str
    stock: bool = True


class Offer(BaseModel):
    source: str
    price: float
    shipping: float
    total: float
    url: str
    stock: bool
    delivery: str
    confidence: float


class ProductEntry(BaseModel):
    id: str
    title: str
    brand: str
    category: str
    upc: Optional[str] = None
    image: str
    offers: List[Offer] = Field(default_factory=list)


class PriceDocument(BaseModel):
    last_updated: str
    sources: List[StoreDescriptor]
    products: List[ProductEntry]


# --- browser scrapers output ---

class SearchCard(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(alias="productId")
    title: str
    price: str = ""
    original_price: str = Field(default="", alias="originalPrice")
    discount: str = ""
    image_url: str = Field(alias="imageUrl")
    product_url: str = Field(default="", alias="productUrl")
    source: str = "AliExpress"


class ConsoleProduct(BaseModel):
    ProductId: str
    ImageUrl: str = ""
    VideoUrl: str = ""
    ProductDesc: str
    OriginPrice: str = ""
    DiscountPrice: str = ""
    Discount: str = ""
    Currency: str = "EUR"
    CommissionRate: int = 0
    Commission: str = ""
    Sales180Day: int = 0
    PositiveFeedback: str = ""
    PromotionUrl: str = ""
    Store: str = "AliExpress"
    ScrapedAt: str
