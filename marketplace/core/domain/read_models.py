# marketplace/core/domain/read_models.py
"""
Read models returned by the catalog and order use cases.

They are built straight from ORM rows (``from_attributes``) and serialize
to the camelCase JSON the storefront consumes.
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from marketplace.core.domain.models import CamelModel


def _decode_json(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return None
    return value


class ProductSummary(CamelModel):
    id: str
    name: str
    slug: str
    price: float
    stock: int
    image_urls: List[str] = Field(default_factory=list)
    seller_id: str
    category_id: str

    @field_validator("image_urls", mode="before")
    @classmethod
    def _parse_images(cls, value: Any) -> List[str]:
        decoded = _decode_json(value)
        return [str(v) for v in decoded] if isinstance(decoded, list) else []


class ProductView(ProductSummary):
    description: str
    short_description: Optional[str] = None
    original_price: Optional[float] = None
    min_order: int = 1
    brand: Optional[str] = None
    model: Optional[str] = None
    sku: Optional[str] = None
    weight: Optional[float] = None
    dimensions: Optional[Dict[str, float]] = None
    colors: Optional[List[str]] = None
    sizes: Optional[List[str]] = None
    specifications: Optional[Dict[str, Any]] = None
    warranty: Optional[str] = None
    return_policy: Optional[str] = None
    tags: Optional[List[str]] = None
    rating: float = 0
    review_count: int = 0
    is_active: bool = True
    is_featured: bool = False
    created_at: datetime

    @field_validator("dimensions", "colors", "sizes", "specifications", "tags", mode="before")
    @classmethod
    def _parse_json_columns(cls, value: Any) -> Any:
        return _decode_json(value)


class ProductPage(CamelModel):
    items: List[ProductView]
    total: int
    page: int
    limit: int


class OrderItemView(CamelModel):
    id: str
    product_id: str
    quantity: int
    price: float
    product: ProductSummary


class OrderView(CamelModel):
    id: str
    order_number: str
    buyer_id: str
    status: str
    payment_status: str
    total_amount: float
    tax_amount: float
    shipping_cost: float
    shipping_address: Optional[Dict[str, Any]] = None
    created_at: datetime
    items: List[OrderItemView]

    @field_validator("shipping_address", mode="before")
    @classmethod
    def _parse_address(cls, value: Any) -> Optional[Dict[str, Any]]:
        decoded = _decode_json(value)
        return decoded if isinstance(decoded, dict) else None

    @field_validator("status", "payment_status", mode="before")
    @classmethod
    def _enum_value(cls, value: Any) -> Any:
        return getattr(value, "value", value)


class TimelineStep(CamelModel):
    id: str
    status: str
    label: str
    timestamp: datetime
    is_completed: bool


class OrderDetailView(OrderView):
    timeline: List[TimelineStep] = Field(default_factory=list)
