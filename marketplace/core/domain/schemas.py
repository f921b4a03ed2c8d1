# marketplace/core/domain/schemas.py
"""
Input validation schemas.

Every payload that enters the system through the HTTP layer is parsed by one
of the models below. They mirror the marketplace's product/order/review
contracts and are also usable outside FastAPI through ``validate_input``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Tuple, Type, TypeVar, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    ValidationError as PydanticValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

SchemaT = TypeVar("SchemaT", bound=BaseModel)

Price = float


class InputModel(BaseModel):
    """Base model for inbound payloads: camelCase on the wire, strings trimmed."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------


class ShippingAddress(InputModel):
    """
    Structured delivery address.

    Accepts either ``name`` or ``firstName`` + ``lastName``, and either
    ``line1`` or ``address``. Required fields must be non-empty after trimming.
    """

    name: str = Field(..., min_length=1)
    line1: str = Field(..., min_length=1)
    line2: Optional[str] = None
    city: str = Field(..., min_length=1)
    state: Optional[str] = None
    postal_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)
    phone: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_aliases(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if not str(data.get("name") or "").strip():
            first = str(data.get("firstName") or data.get("first_name") or "").strip()
            last = str(data.get("lastName") or data.get("last_name") or "").strip()
            if first and last:
                data["name"] = f"{first} {last}"
        if not str(data.get("line1") or "").strip() and data.get("address"):
            data["line1"] = data["address"]
        return data

    def to_storage(self) -> Dict[str, Optional[str]]:
        return self.model_dump(by_alias=True)


class BillingAddress(InputModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    postal_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------


class CheckoutItem(InputModel):
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0, strict=True)


class CheckoutRequest(InputModel):
    items: List[CheckoutItem] = Field(..., min_length=1)
    shipping_address: ShippingAddress


class SingleItemOrderRequest(InputModel):
    product_id: str = Field(..., min_length=1)
    # Legacy clients send the quantity as a string ("2").
    quantity: int = Field(1, gt=0)
    shipping_address: ShippingAddress

    def as_checkout(self) -> CheckoutRequest:
        return CheckoutRequest(
            items=[CheckoutItem(product_id=self.product_id, quantity=self.quantity)],
            shipping_address=self.shipping_address,
        )


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class Dimensions(InputModel):
    length: float = Field(..., gt=0)
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)


class ProductInput(InputModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1, max_length=5000)
    short_description: Optional[str] = Field(None, max_length=500)
    price: Price = Field(..., gt=0, le=999999.99)
    original_price: Optional[Price] = Field(None, gt=0, le=999999.99)
    image_urls: List[HttpUrl] = Field(..., min_length=1)
    brand: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    sku: Optional[str] = Field(None, max_length=100)
    stock: int = Field(0, ge=0)
    min_order: int = Field(1, ge=1)
    weight: Optional[float] = Field(None, gt=0, le=999.999)
    dimensions: Optional[Dimensions] = None
    colors: Optional[List[str]] = None
    sizes: Optional[List[str]] = None
    specifications: Optional[Dict[str, Union[str, float, bool]]] = None
    warranty: Optional[str] = Field(None, max_length=500)
    return_policy: Optional[str] = Field(None, max_length=1000)
    tags: Optional[List[str]] = None
    category_id: str = Field(..., min_length=1)

    @field_validator("colors", "tags")
    @classmethod
    def _short_labels(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is not None and any(len(v) > 50 for v in value):
            raise ValueError("entries must be at most 50 characters")
        return value

    @field_validator("sizes")
    @classmethod
    def _short_sizes(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        if value is not None and any(len(v) > 20 for v in value):
            raise ValueError("entries must be at most 20 characters")
        return value


class CategoryInput(InputModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    image_url: Optional[HttpUrl] = None
    parent_id: Optional[str] = None


class ReviewInput(InputModel):
    rating: int = Field(..., ge=1, le=5)
    title: Optional[str] = Field(None, max_length=200)
    comment: Optional[str] = Field(None, max_length=2000)
    images: Optional[List[HttpUrl]] = None
    product_id: str = Field(..., min_length=1)


class UserInput(InputModel):
    email: str = Field(..., pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=8)
    avatar: Optional[HttpUrl] = None
    bio: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=20)


class OrderLineInput(InputModel):
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)
    color: Optional[str] = Field(None, max_length=50)
    size: Optional[str] = Field(None, max_length=20)


class OrderInput(InputModel):
    """Full order document as exchanged with back-office tooling."""

    total_amount: Price = Field(..., gt=0)
    shipping_cost: Price = Field(..., ge=0)
    tax_amount: Price = Field(..., ge=0)
    discount_amount: Price = Field(0, ge=0)
    payment_method: Optional[str] = Field(None, max_length=100)
    shipping_address: ShippingAddress
    billing_address: Optional[BillingAddress] = None
    notes: Optional[str] = Field(None, max_length=1000)
    items: List[OrderLineInput] = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# Query parameters
# ---------------------------------------------------------------------------


class ProductQuery(InputModel):
    category: Optional[str] = None
    sort: Literal["newest", "price-low", "price-high", "rating", "popular"] = "newest"
    min_price: Optional[float] = Field(None, gt=0)
    max_price: Optional[float] = Field(None, gt=0)
    brand: Optional[str] = None
    featured: Optional[Literal["true", "false"]] = None
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)


class SearchQuery(InputModel):
    q: str = Field(..., min_length=1)
    category: Optional[str] = None
    min_price: Optional[float] = Field(None, gt=0)
    max_price: Optional[float] = Field(None, gt=0)
    sort: Literal["relevance", "price-low", "price-high", "rating", "newest"] = "relevance"
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def format_errors(exc: PydanticValidationError) -> List[str]:
    """Flatten pydantic errors into ``"path: message"`` strings."""
    return [
        f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    ]


def validate_input(schema: Type[SchemaT], data: Any) -> Tuple[bool, Union[SchemaT, List[str]]]:
    """
    Validate ``data`` against ``schema``.

    Returns ``(True, model)`` on success and ``(False, ["path: message", ...])``
    on failure.
    """
    try:
        return True, schema.model_validate(data)
    except PydanticValidationError as exc:
        return False, format_errors(exc)
