# marketplace/adapters/api/routers/messages.py
from typing import List, Optional, Union

from fastapi import APIRouter, Body, Depends, Query, status

from marketplace.adapters.api.dependencies import (
    enforce_rate_limit,
    get_message_store,
    get_user_or_guest,
    participant_role,
)
from marketplace.adapters.api.schemas import MessagesCommand, SeedResult, parse_kind, parse_target
from marketplace.core.domain.exceptions import ValidationError
from marketplace.core.domain.models import Message, MessageDraft, Thread, ThreadInput, UserIdentity
from marketplace.core.ports.message_store import IMessageStore

router = APIRouter(
    prefix="/api/messages",
    tags=["Messages"],
    dependencies=[Depends(enforce_rate_limit)],
)


@router.get("", response_model=Union[List[Thread], List[Message]])
async def list_threads_or_messages(
    q: Optional[str] = Query(None, description="Filter on thread title or participant name"),
    thread_id: Optional[str] = Query(None, alias="threadId"),
    user: UserIdentity = Depends(get_user_or_guest),
    store: IMessageStore = Depends(get_message_store),
):
    """
    With ``threadId``: that thread's messages, oldest first.
    Otherwise: the caller's threads, seeding demo content when they have none.
    """
    if thread_id:
        return await store.read_thread_messages(thread_id)

    threads = await store.list_threads_for_user(user.id, q)
    if not threads:
        await store.seed_demo_for_user(user)
        threads = await store.list_threads_for_user(user.id, q)
    return threads


@router.post("", response_model=Union[Thread, Message], status_code=status.HTTP_201_CREATED)
async def messages_command(
    command: MessagesCommand = Body(...),
    user: UserIdentity = Depends(get_user_or_guest),
    store: IMessageStore = Depends(get_message_store),
):
    if command.intent == "create-thread":
        if not command.id:
            raise ValidationError("Thread id is required")
        return await store.upsert_thread(
            ThreadInput(
                id=command.id,
                kind=parse_kind(command.kind),
                title=command.title or None,
                participants=command.participants,
            )
        )

    if command.intent == "order-thread":
        if not command.order_id:
            raise ValidationError("Order id is required")
        return await store.get_or_create_order_thread(
            command.order_id, parse_target(command.target), user, command.others
        )

    if command.intent == "send-message":
        content = command.content.strip()
        if not command.thread_id or (not content and not command.attachments):
            raise ValidationError("Empty message")
        return await store.add_message_to_thread(
            MessageDraft(
                thread_id=command.thread_id,
                author_id=user.id,
                author_role=participant_role(user),
                content=content,
                attachments=command.attachments or None,
            )
        )

    raise ValidationError("Unsupported intent", details={"intent": command.intent})


@router.post("/seed", response_model=SeedResult)
async def seed_demo(
    user: UserIdentity = Depends(get_user_or_guest),
    store: IMessageStore = Depends(get_message_store),
):
    seeded = await store.seed_demo_for_user(user)
    return SeedResult(ok=True, seeded=seeded)
