# marketplace/adapters/api/routers/orders.py
from typing import List, Optional

import structlog
from fastapi import APIRouter, Body, Depends, Query, status

from marketplace.adapters.api.dependencies import (
    enforce_rate_limit,
    get_checkout_order,
    get_current_user,
    get_message_store,
    get_order_queries,
    participant_role,
)
from marketplace.adapters.api.schemas import OrderMessageRequest, parse_target
from marketplace.core.domain.exceptions import ValidationError
from marketplace.core.domain.models import Message, MessageDraft, UserIdentity
from marketplace.core.domain.read_models import OrderDetailView, OrderView
from marketplace.core.domain.schemas import CheckoutRequest, SingleItemOrderRequest
from marketplace.core.ports.message_store import IMessageStore
from marketplace.core.use_cases.checkout import CheckoutOrder
from marketplace.core.use_cases.orders import OrderQueries

logger = structlog.get_logger()

router = APIRouter(
    prefix="/api/orders",
    tags=["Orders"],
    dependencies=[Depends(enforce_rate_limit)],
)


@router.post(
    "/checkout",
    response_model=OrderView,
    status_code=status.HTTP_201_CREATED,
    summary="Place a multi-item order",
)
def checkout(
    payload: CheckoutRequest = Body(...),
    user: UserIdentity = Depends(get_current_user),
    use_case: CheckoutOrder = Depends(get_checkout_order),
):
    """
    Validates stock for every line, prices the cart and creates the order
    in one transaction.

    * 404 when any product id does not exist.
    * 409 with ``productId`` when a line exceeds available stock.
    """
    return use_case.execute(user, payload)


@router.post(
    "",
    response_model=OrderView,
    status_code=status.HTTP_200_OK,
    summary="Place a single-item order",
)
def place_single_item_order(
    payload: SingleItemOrderRequest = Body(...),
    user: UserIdentity = Depends(get_current_user),
    use_case: CheckoutOrder = Depends(get_checkout_order),
):
    return use_case.execute(user, payload.as_checkout())


@router.get("", response_model=List[OrderView])
def list_orders(
    role: str = Query("buyer", description="buyer | seller"),
    user: UserIdentity = Depends(get_current_user),
    queries: OrderQueries = Depends(get_order_queries),
):
    """A buyer's own orders, or a seller's orders containing their products; newest first."""
    return queries.list_orders(user, role)


@router.get("/{order_id}", response_model=OrderDetailView)
def get_order(
    order_id: str,
    user: UserIdentity = Depends(get_current_user),
    queries: OrderQueries = Depends(get_order_queries),
):
    return queries.get_order(user, order_id)


# --- Order conversations ---

@router.get("/{order_id}/messages", response_model=List[Message])
async def list_order_messages(
    order_id: str,
    target: Optional[str] = Query(None, description="seller | platform"),
    user: UserIdentity = Depends(get_current_user),
    store: IMessageStore = Depends(get_message_store),
):
    thread = await store.get_or_create_order_thread(order_id, parse_target(target), user)
    return await store.read_thread_messages(thread.id)


@router.post(
    "/{order_id}/messages",
    response_model=Message,
    status_code=status.HTTP_201_CREATED,
)
async def post_order_message(
    order_id: str,
    payload: OrderMessageRequest = Body(...),
    user: UserIdentity = Depends(get_current_user),
    store: IMessageStore = Depends(get_message_store),
):
    content = payload.content.strip()
    if not content:
        raise ValidationError("Empty message")

    thread = await store.get_or_create_order_thread(order_id, parse_target(payload.target), user)
    message = await store.add_message_to_thread(
        MessageDraft(
            thread_id=thread.id,
            author_id=user.id,
            author_role=participant_role(user),
            content=content,
        )
    )
    logger.info("order_message_posted", order_id=order_id, thread_id=thread.id)
    return message
