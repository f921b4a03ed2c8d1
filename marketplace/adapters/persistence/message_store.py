# marketplace/adapters/persistence/message_store.py
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import structlog

from marketplace.adapters.persistence.json_file import JsonFile
from marketplace.core.domain.models import (
    Attachment,
    Message,
    MessageDraft,
    Participant,
    ParticipantRole,
    Thread,
    ThreadInput,
    ThreadKind,
    ThreadTarget,
    UserIdentity,
)

logger = structlog.get_logger()

Document = Dict[str, List[Dict[str, Any]]]


def _empty_document() -> Document:
    return {"messages": [], "threads": []}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def order_thread_id(order_id: str, target: ThreadTarget) -> str:
    """Deterministic id of the thread about ``order_id`` with ``target``."""
    return f"order-{order_id}-{target.value}"


class FileSystemMessageStore:
    """
    Threads and messages kept in a single JSON document.

    Each mutation reads the whole file, changes it in memory and writes it
    back through ``JsonFile`` (temp file + rename).
    """

    def __init__(self, path: str):
        self._file = JsonFile(path, _empty_document)

    # --- Document I/O ---

    async def _load(self) -> Document:
        data = await self._file.read()
        if not isinstance(data, dict):
            return _empty_document()
        data.setdefault("messages", [])
        data.setdefault("threads", [])
        return data

    async def _save(self, data: Document) -> None:
        await self._file.write(data)

    @staticmethod
    def _dump(model) -> Dict[str, Any]:
        return model.model_dump(mode="json", by_alias=True, exclude_none=True)

    # --- Interface Implementation ---

    async def get_or_create_order_thread(
        self,
        order_id: str,
        target: ThreadTarget,
        me: UserIdentity,
        others: Optional[List[Participant]] = None,
    ) -> Thread:
        data = await self._load()
        thread_id = order_thread_id(order_id, target)

        for raw in data["threads"]:
            if raw.get("id") == thread_id:
                return Thread.model_validate(raw)

        now = _utcnow()
        thread = Thread(
            id=thread_id,
            kind=ThreadKind.ORDER,
            title=f"Order {order_id} ({target.value})",
            participants=[
                Participant(id=me.id, name=me.name or "You", role=ParticipantRole.BUYER),
                *(others or []),
            ],
            order_id=order_id,
            target=target,
            created_at=now,
            updated_at=now,
        )
        data["threads"].append(self._dump(thread))
        await self._save(data)

        logger.info("order_thread_created", thread_id=thread_id, order_id=order_id)
        return thread

    async def upsert_thread(self, thread: ThreadInput) -> Thread:
        data = await self._load()
        now = _utcnow()

        for index, raw in enumerate(data["threads"]):
            if raw.get("id") == thread.id:
                existing = Thread.model_validate(raw)
                updated = Thread(
                    **thread.model_dump(),
                    created_at=existing.created_at,
                    updated_at=now,
                )
                data["threads"][index] = self._dump(updated)
                await self._save(data)
                return updated

        created = Thread(**thread.model_dump(), created_at=now, updated_at=now)
        data["threads"].append(self._dump(created))
        await self._save(data)
        return created

    async def list_threads_for_user(self, user_id: str, query: Optional[str] = None) -> List[Thread]:
        data = await self._load()
        threads = [Thread.model_validate(raw) for raw in data["threads"]]
        mine = [t for t in threads if any(p.id == user_id for p in t.participants)]

        needle = (query or "").strip().lower()
        if needle:
            mine = [
                t for t in mine
                if needle in (t.title or "").lower()
                or any(needle in (p.name or "").lower() for p in t.participants)
            ]

        return sorted(mine, key=lambda t: t.updated_at, reverse=True)

    async def read_thread_messages(self, thread_id: str) -> List[Message]:
        data = await self._load()
        messages = [
            Message.model_validate(raw)
            for raw in data["messages"]
            if raw.get("threadId") == thread_id
        ]
        return sorted(messages, key=lambda m: m.created_at)

    async def add_message_to_thread(self, draft: MessageDraft) -> Message:
        data = await self._load()
        message = Message(
            **draft.model_dump(),
            id=str(uuid.uuid4()),
            created_at=_utcnow(),
        )
        data["messages"].append(self._dump(message))

        for raw in data["threads"]:
            if raw.get("id") == draft.thread_id:
                raw["updatedAt"] = message.created_at.isoformat()
                break

        await self._save(data)
        return message

    async def seed_demo_for_user(self, user: UserIdentity) -> bool:
        data = await self._load()
        # Global guard: any existing content means somebody was already seeded.
        if data["threads"] or data["messages"]:
            return False

        now = _utcnow()
        me = Participant(id=user.id, name=user.name or "You", role=ParticipantRole.BUYER)
        support = Thread(
            id="support-1",
            kind=ThreadKind.SUPPORT,
            title="Marketplace Support",
            participants=[
                me,
                Participant(id="platform", name="Marketplace Support", role=ParticipantRole.PLATFORM),
            ],
            created_at=now - timedelta(hours=1),
            updated_at=now - timedelta(minutes=10),
        )
        order = Thread(
            id=order_thread_id("DEMO-1001", ThreadTarget.SELLER),
            kind=ThreadKind.ORDER,
            title="Order DEMO-1001 (Seller)",
            participants=[
                me,
                Participant(id="seller-1", name="Demo Equipments", role=ParticipantRole.SELLER),
            ],
            order_id="DEMO-1001",
            target=ThreadTarget.SELLER,
            created_at=now - timedelta(hours=2),
            updated_at=now - timedelta(minutes=15),
        )

        def mk(thread: Thread, author_id: str, role: ParticipantRole, content: str,
               minutes_ago: int, attachments: Optional[List[Attachment]] = None) -> Message:
            return Message(
                id=f"msg_{uuid.uuid4().hex[:6]}",
                thread_id=thread.id,
                author_id=author_id,
                author_role=role,
                content=content,
                attachments=attachments,
                created_at=now - timedelta(minutes=minutes_ago),
            )

        messages = [
            mk(support, "platform", ParticipantRole.PLATFORM, "Hi, how can we help you today?", 58),
            mk(support, user.id, ParticipantRole.BUYER, "Need the invoice for last order", 55),
            mk(support, "platform", ParticipantRole.PLATFORM, "Sure, sending it here and to your email.", 53,
               [Attachment(url="/uploads/invoice.pdf", name="invoice.pdf", type="application/pdf", size=102400)]),
            mk(order, "seller-1", ParticipantRole.SELLER, "Your order is packed and will ship today.", 42),
            mk(order, user.id, ParticipantRole.BUYER, "Great, please ensure fragile handling.", 40),
            mk(order, "seller-1", ParticipantRole.SELLER, "Noted. Sharing label copy.", 38,
               [Attachment(url="/uploads/sample-label.png", name="label.png", type="image/png", size=20480)]),
        ]

        data["threads"].extend(self._dump(t) for t in (support, order))
        data["messages"].extend(self._dump(m) for m in messages)
        await self._save(data)

        logger.info("message_demo_seeded", user_id=user.id)
        return True

    async def ensure(self) -> None:
        await self._file.ensure()

    async def health_check(self) -> bool:
        return self._file.is_writable()
