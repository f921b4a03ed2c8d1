# marketplace/core/use_cases/checkout.py
import json
import time
import uuid
from collections import OrderedDict
from typing import Dict, Iterable

import structlog
from sqlalchemy.orm import Session, sessionmaker

from marketplace.adapters.persistence.models import Order, OrderItem
from marketplace.adapters.persistence.repositories import (
    OrdersRepository,
    ProductsRepository,
    UsersRepository,
)
from marketplace.core.domain.exceptions import DomainError, InsufficientStockError, NotFoundError
from marketplace.core.domain.models import UserIdentity
from marketplace.core.domain.pricing import PricingPolicy
from marketplace.core.domain.read_models import OrderView
from marketplace.core.domain.schemas import CheckoutItem, CheckoutRequest
from marketplace.shared.observability import get_tracer

logger = structlog.get_logger()
tracer = get_tracer(__name__)


def generate_order_number() -> str:
    """Millisecond timestamp plus a random UUID: ``ORD-<ms>-<uuid4>``."""
    return f"ORD-{int(time.time() * 1000)}-{uuid.uuid4()}"


def merge_quantities(items: Iterable[CheckoutItem]) -> Dict[str, int]:
    """Collapse repeated product ids into one line, keeping first-seen order."""
    merged: Dict[str, int] = OrderedDict()
    for item in items:
        merged[item.product_id] = merged.get(item.product_id, 0) + item.quantity
    return merged


class CheckoutOrder:
    """
    Use Case: Turns a validated cart into a persisted order.

    Everything happens inside one database transaction:
    1. Lock and load the requested products (each id once).
    2. Fail with NotFound if any is missing, Conflict if any lacks stock.
    3. Price the cart from the locked rows.
    4. Decrement stock with a guarded UPDATE per product.
    5. Record the buyer and insert the order with line prices snapshotted
       from step 3.

    Any exception rolls the whole transaction back: no order row and no
    stock change survive a failed checkout. Both the multi-item and the
    single-item endpoints go through here.
    """

    def __init__(self, session_factory: sessionmaker[Session], pricing: PricingPolicy):
        self._session_factory = session_factory
        self._pricing = pricing

    def execute(self, buyer: UserIdentity, request: CheckoutRequest) -> OrderView:
        with tracer.start_as_current_span("use_case.checkout") as span:
            quantities = merge_quantities(request.items)
            span.set_attribute("checkout.buyer_id", buyer.id)
            span.set_attribute("checkout.line_count", len(quantities))

            try:
                with self._session_factory.begin() as session:
                    view = self._place(session, buyer, request, quantities)
            except DomainError as e:
                logger.warning("checkout_rejected", buyer_id=buyer.id, code=e.code, reason=e.message)
                raise

            logger.info(
                "order_created",
                order_number=view.order_number,
                buyer_id=buyer.id,
                total_amount=view.total_amount,
            )
            return view

    def _place(
        self,
        session: Session,
        buyer: UserIdentity,
        request: CheckoutRequest,
        quantities: Dict[str, int],
    ) -> OrderView:
        products_repo = ProductsRepository(session)
        products = {p.id: p for p in products_repo.lock_for_checkout(quantities.keys())}

        missing = [pid for pid in quantities if pid not in products]
        if missing:
            raise NotFoundError("Product", details={"productIds": missing})

        for product_id, quantity in quantities.items():
            if products[product_id].stock < quantity:
                raise InsufficientStockError(product_id)

        unit_prices = {pid: products[pid].price for pid in quantities}
        totals = self._pricing.totals(
            (unit_prices[pid], quantity) for pid, quantity in quantities.items()
        )

        for product_id, quantity in quantities.items():
            # Another transaction may have taken the stock since the check above.
            if not products_repo.decrement_stock(product_id, quantity):
                raise InsufficientStockError(product_id)
            session.expire(products[product_id], ["stock"])

        UsersRepository(session).ensure(buyer)
        order = Order(
            order_number=generate_order_number(),
            buyer_id=buyer.id,
            total_amount=totals.total_amount,
            tax_amount=totals.tax_amount,
            shipping_cost=totals.shipping_cost,
            shipping_address=json.dumps(request.shipping_address.to_storage()),
            items=[
                OrderItem(
                    product_id=pid,
                    product=products[pid],
                    quantity=quantity,
                    price=unit_prices[pid],
                )
                for pid, quantity in quantities.items()
            ],
        )
        OrdersRepository(session).add(order)
        return OrderView.model_validate(order)
