"""
商品目录数据模型

目录数据由外部目录服务提供，引擎只读不写。
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

_CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
}


class ProductAvailability(str, Enum):
    IN_STOCK = "in_stock"
    LIMITED_STOCK = "limited_stock"
    OUT_OF_STOCK = "out_of_stock"
    PRE_ORDER = "pre_order"
    DISCONTINUED = "discontinued"


class CollectionCategory(str, Enum):
    AVIATION = "aviation"
    DIVING = "diving"
    PROFESSIONAL = "professional"
    LIFESTYLE = "lifestyle"
    HERITAGE = "heritage"


class ProductSpecifications(BaseModel):
    model_config = ConfigDict(frozen=True)

    movement: str
    case_material: str
    case_diameter: str = ""
    case_thickness: Optional[str] = None
    water_resistance: str = ""
    crystal: str = ""
    bracelet_material: Optional[str] = None
    functions: list[str] = Field(default_factory=list)


class ProductRecord(BaseModel):
    """目录中的单个腕表商品"""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    collection: str = Field(..., description="目录原始系列名（未规范化）")
    price: float = Field(..., ge=0)
    currency: str = "USD"
    image_urls: list[str] = Field(default_factory=list)
    description: str = ""
    specifications: ProductSpecifications
    availability: ProductAvailability = ProductAvailability.IN_STOCK
    is_limited_edition: bool = False
    tags: list[str] = Field(default_factory=list)


class PriceRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: float = Field(..., ge=0)
    max: float = Field(..., ge=0)
    currency: str = "USD"


class CollectionRecord(BaseModel):
    """腕表系列（Navitimer、Chronomat ...）"""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str
    tagline: str = ""
    description: str = ""
    heritage: str = ""
    image_url: str = ""
    hero_image_url: str = ""
    category: CollectionCategory = CollectionCategory.LIFESTYLE
    established_year: int = 1884
    featured_product_ids: list[str] = Field(default_factory=list)
    total_product_count: int = 0
    price_range: PriceRange
    key_features: list[str] = Field(default_factory=list)

    @property
    def formatted_price_range(self) -> str:
        currency = self.price_range.currency
        return f"{format_price(self.price_range.min, currency)} - {format_price(self.price_range.max, currency)}"


def format_price(amount: float, currency: str) -> str:
    symbol = _CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")
    return f"{symbol}{amount:,.2f}"
