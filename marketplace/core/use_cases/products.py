# marketplace/core/use_cases/products.py
import json
import re
import time
from typing import Any, Optional, Set

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt

from marketplace.adapters.persistence.models import Category, Product
from marketplace.adapters.persistence.repositories import ProductsRepository, UsersRepository
from marketplace.core.domain.exceptions import AuthorizationError, NotFoundError
from marketplace.core.domain.models import UserIdentity, UserRole
from marketplace.core.domain.read_models import ProductPage, ProductView
from marketplace.core.domain.schemas import ProductInput, ProductQuery
from marketplace.shared.observability import get_tracer

logger = structlog.get_logger()
tracer = get_tracer(__name__)

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def _json_or_none(value: Any) -> Optional[str]:
    return None if value is None else json.dumps(value)


def slugify(name: str) -> str:
    """Lowercase, collapse every run of non-alphanumerics into '-', trim dashes."""
    return _NON_SLUG.sub("-", name.lower()).strip("-")


def first_free_slug(base_slug: str, taken: Set[str]) -> str:
    """``base``, then ``base-1``, ``base-2``... until one is not taken."""
    slug = base_slug
    suffix = 1
    while slug in taken:
        slug = f"{base_slug}-{suffix}"
        suffix += 1
    return slug


class CreateProduct:
    """
    Use Case: A seller lists a new product.

    The slug is derived from the name and made unique by numeric suffix.
    If a concurrent insert grabs the same slug first, the unique index
    rejects ours and the whole attempt is retried with a fresh view of the
    taken slugs. After ``max_attempts`` failures a timestamp suffix is used.
    """

    def __init__(self, session_factory: sessionmaker[Session], max_attempts: int = 3):
        self._session_factory = session_factory
        self._max_attempts = max_attempts

    def execute(self, seller: UserIdentity, payload: ProductInput) -> ProductView:
        if seller.role not in (UserRole.SELLER, UserRole.ADMIN):
            raise AuthorizationError("Only sellers can list products")

        with tracer.start_as_current_span("use_case.create_product") as span:
            span.set_attribute("product.seller_id", seller.id)

            base_slug = slugify(payload.name) or f"product-{int(time.time() * 1000)}"

            try:
                for attempt in Retrying(
                    stop=stop_after_attempt(self._max_attempts),
                    retry=retry_if_exception_type(IntegrityError),
                    reraise=True,
                ):
                    with attempt:
                        view = self._insert(seller, payload, base_slug, None)
            except IntegrityError:
                fallback = f"{base_slug}-{int(time.time() * 1000)}"
                logger.warning("product_slug_retries_exhausted", base_slug=base_slug, fallback=fallback)
                view = self._insert(seller, payload, base_slug, fallback)

            logger.info("product_created", product_id=view.id, slug=view.slug, seller_id=seller.id)
            return view

    def _insert(
        self,
        seller: UserIdentity,
        payload: ProductInput,
        base_slug: str,
        slug: Optional[str],
    ) -> ProductView:
        with self._session_factory.begin() as session:
            if session.get(Category, payload.category_id) is None:
                raise NotFoundError("Category")

            repo = ProductsRepository(session)
            UsersRepository(session).ensure(seller)
            if slug is None:
                slug = first_free_slug(base_slug, repo.slugs_like(base_slug))

            product = repo.add(
                Product(
                    name=payload.name,
                    slug=slug,
                    description=payload.description,
                    short_description=payload.short_description,
                    price=payload.price,
                    original_price=payload.original_price,
                    stock=payload.stock,
                    min_order=payload.min_order,
                    image_urls=json.dumps([str(u) for u in payload.image_urls]),
                    brand=payload.brand,
                    model=payload.model,
                    sku=payload.sku,
                    weight=payload.weight,
                    warranty=payload.warranty,
                    return_policy=payload.return_policy,
                    dimensions=_json_or_none(payload.dimensions.model_dump() if payload.dimensions else None),
                    colors=_json_or_none(payload.colors),
                    sizes=_json_or_none(payload.sizes),
                    specifications=_json_or_none(payload.specifications),
                    tags=_json_or_none(payload.tags),
                    category_id=payload.category_id,
                    seller_id=seller.id,
                )
            )
            return ProductView.model_validate(product)


class ProductCatalog:
    """Read-side of the catalog."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def list_products(self, query: ProductQuery) -> ProductPage:
        with self._session_factory() as session:
            items, total = ProductsRepository(session).search(query)
            return ProductPage(
                items=[ProductView.model_validate(p) for p in items],
                total=total,
                page=query.page,
                limit=query.limit,
            )

    def get_by_slug(self, slug: str) -> ProductView:
        with self._session_factory() as session:
            product = ProductsRepository(session).get_by_slug(slug)
            if product is None:
                raise NotFoundError("Product")
            return ProductView.model_validate(product)
