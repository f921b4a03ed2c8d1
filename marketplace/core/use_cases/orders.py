# marketplace/core/use_cases/orders.py
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

import structlog
from sqlalchemy.orm import Session, sessionmaker

from marketplace.adapters.persistence.models import Order, OrderStatus
from marketplace.adapters.persistence.repositories import OrdersRepository
from marketplace.core.domain.exceptions import NotFoundError, ValidationError
from marketplace.core.domain.models import UserIdentity
from marketplace.core.domain.read_models import OrderDetailView, OrderView, TimelineStep

logger = structlog.get_logger()

# step key -> (label, offset from order creation)
TIMELINE_STEPS: Dict[str, Tuple[str, Optional[timedelta]]] = {
    "ordered": ("Order Placed", timedelta(0)),
    "confirmed": ("Order Confirmed", timedelta(minutes=5)),
    "processing": ("Processing", timedelta(minutes=30)),
    "shipped": ("Shipped", timedelta(hours=24)),
    "delivered": ("Delivered", timedelta(days=3)),
    "cancelled": ("Cancelled", None),
    "returned": ("Returned", None),
}

_HAPPY_PATH = ["ordered", "confirmed", "processing", "shipped", "delivered"]

# PENDING orders sit on the first step.
_CURRENT_STEP = {
    OrderStatus.PENDING: "ordered",
    OrderStatus.CONFIRMED: "confirmed",
    OrderStatus.PROCESSING: "processing",
    OrderStatus.SHIPPED: "shipped",
    OrderStatus.DELIVERED: "delivered",
    OrderStatus.CANCELLED: "cancelled",
    OrderStatus.RETURNED: "returned",
}


def _aware(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands timestamps back without tzinfo; they were written as UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def build_order_timeline(order: Order) -> List[TimelineStep]:
    """
    Derive the tracking timeline of an order from its creation time and status.

    Steps are projected from fixed offsets after creation; the delivered step
    prefers the actual or estimated delivery time. A terminal step (cancelled,
    returned) always comes last, stamped with the order's last update. Every
    step up to and including the current status is marked completed.
    """
    created_at = _aware(order.created_at)
    if created_at is None:
        return []

    terminal = None
    if order.status == OrderStatus.CANCELLED:
        keys, terminal = ["ordered"], "cancelled"
    elif order.status == OrderStatus.RETURNED:
        keys, terminal = list(_HAPPY_PATH), "returned"
    else:
        keys = list(_HAPPY_PATH)

    steps: List[Tuple[str, str, datetime]] = []
    for key in keys:
        label, offset = TIMELINE_STEPS[key]
        if key == "delivered":
            at = (
                _aware(order.delivered_at)
                or _aware(order.estimated_delivery)
                or created_at + offset
            )
        else:
            at = created_at + offset
        steps.append((key, label, at))

    steps.sort(key=lambda s: s[2])
    if terminal is not None:
        label, _ = TIMELINE_STEPS[terminal]
        at = max(_aware(order.updated_at) or created_at, steps[-1][2])
        steps.append((terminal, label, at))

    current_key = _CURRENT_STEP[order.status]
    current_index = next((i for i, s in enumerate(steps) if s[0] == current_key), 0)

    return [
        TimelineStep(
            id=str(index + 1),
            status=key,
            label=label,
            timestamp=at,
            is_completed=index <= current_index,
        )
        for index, (key, label, at) in enumerate(steps)
    ]


class OrderQueries:
    """Read-side of orders: listings for buyers and sellers, and tracking detail."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def list_orders(self, user: UserIdentity, role: str = "buyer") -> List[OrderView]:
        if role not in ("buyer", "seller"):
            raise ValidationError("role must be 'buyer' or 'seller'")

        with self._session_factory() as session:
            repo = OrdersRepository(session)
            orders = repo.list_for_seller(user.id) if role == "seller" else repo.list_for_buyer(user.id)
            return [OrderView.model_validate(o) for o in orders]

    def get_order(self, user: UserIdentity, order_id: str) -> OrderDetailView:
        with self._session_factory() as session:
            order = OrdersRepository(session).get_with_items(order_id)
            # Other buyers' orders are reported as missing, not forbidden.
            if order is None or order.buyer_id != user.id:
                raise NotFoundError("Order")

            view = OrderDetailView.model_validate(order)
            view.timeline = build_order_timeline(order)
            return view
