# marketplace/adapters/persistence/repositories/products.py

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Set, Tuple

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session

from marketplace.adapters.persistence.models import Category, Product
from marketplace.core.domain.schemas import ProductQuery


_SORTS = {
    "newest": (Product.created_at.desc(),),
    "price-low": (Product.price.asc(),),
    "price-high": (Product.price.desc(),),
    "rating": (Product.rating.desc(), Product.review_count.desc()),
    "popular": (Product.review_count.desc(), Product.rating.desc()),
}


class ProductsRepository:
    """
    Thin data-access layer around the Product model.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    def get_by_id(self, product_id: str) -> Optional[Product]:
        return self.session.get(Product, product_id)

    def get_by_slug(self, slug: str) -> Optional[Product]:
        stmt = select(Product).where(Product.slug == slug)
        return self.session.execute(stmt).scalar_one_or_none()

    def lock_for_checkout(self, product_ids: Iterable[str]) -> List[Product]:
        """
        Load the given products for update.

        Engines with row locks (PostgreSQL, MySQL) hold them until the
        surrounding transaction ends; SQLite serializes writers instead.
        """
        stmt = (
            select(Product)
            .where(Product.id.in_(list(product_ids)))
            .with_for_update()
        )
        return list(self.session.execute(stmt).scalars().all())

    def slugs_like(self, base_slug: str) -> Set[str]:
        """Existing slugs equal to ``base_slug`` or starting with ``base_slug-``."""
        stmt = select(Product.slug).where(
            or_(Product.slug == base_slug, Product.slug.startswith(f"{base_slug}-"))
        )
        return set(self.session.execute(stmt).scalars().all())

    def search(self, query: ProductQuery) -> Tuple[Sequence[Product], int]:
        """
        Filter, sort and paginate active products.
        Returns the page and the total number of matches.
        """
        stmt = select(Product).where(Product.is_active.is_(True))

        if query.category:
            stmt = stmt.join(Category).where(Category.slug == query.category)
        if query.min_price is not None:
            stmt = stmt.where(Product.price >= query.min_price)
        if query.max_price is not None:
            stmt = stmt.where(Product.price <= query.max_price)
        if query.brand:
            stmt = stmt.where(func.lower(Product.brand) == query.brand.lower())
        if query.featured is not None:
            stmt = stmt.where(Product.is_featured.is_(query.featured == "true"))

        total = self.session.execute(
            select(func.count()).select_from(stmt.subquery())
        ).scalar_one()

        stmt = (
            stmt.order_by(*_SORTS[query.sort], Product.id)
            .offset((query.page - 1) * query.limit)
            .limit(query.limit)
        )
        return list(self.session.execute(stmt).scalars().all()), total

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    def add(self, product: Product) -> Product:
        self.session.add(product)
        self.session.flush()
        return product

    def decrement_stock(self, product_id: str, quantity: int) -> bool:
        """
        Atomically take ``quantity`` units out of stock.

        The UPDATE only matches while enough stock remains, so it returns
        False instead of ever driving stock negative.
        """
        stmt = (
            update(Product)
            .where(Product.id == product_id, Product.stock >= quantity)
            .values(stock=Product.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return result.rowcount == 1
