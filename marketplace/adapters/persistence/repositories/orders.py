# marketplace/adapters/persistence/repositories/orders.py

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.orm import Session, selectinload

from marketplace.adapters.persistence.models import Order, OrderItem, Product


class OrdersRepository:
    """
    Repository for persisting and querying orders.

    Reads always eager-load items and their products so callers can serialize
    the result after the session is closed.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    @staticmethod
    def _with_items():
        return selectinload(Order.items).selectinload(OrderItem.product)

    def add(self, order: Order) -> Order:
        self.session.add(order)
        self.session.flush()
        return order

    def get_with_items(self, order_id: str) -> Optional[Order]:
        stmt = select(Order).where(Order.id == order_id).options(self._with_items())
        return self.session.execute(stmt).scalar_one_or_none()

    def list_for_buyer(self, buyer_id: str) -> List[Order]:
        stmt = (
            select(Order)
            .where(Order.buyer_id == buyer_id)
            .options(self._with_items())
            .order_by(desc(Order.created_at))
        )
        return list(self.session.execute(stmt).scalars().all())

    def list_for_seller(self, seller_id: str) -> List[Order]:
        """Orders containing at least one of the seller's products."""
        stmt = (
            select(Order)
            .where(Order.items.any(OrderItem.product.has(Product.seller_id == seller_id)))
            .options(self._with_items())
            .order_by(desc(Order.created_at))
        )
        return list(self.session.execute(stmt).scalars().all())
