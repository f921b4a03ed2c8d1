# marketplace/adapters/api/schemas.py
"""Request/response DTOs that only exist at the HTTP boundary."""

from typing import List, Optional

from pydantic import Field

from marketplace.core.domain.models import Attachment, CamelModel, Participant, ThreadKind, ThreadTarget
from marketplace.core.domain.schemas import InputModel


def parse_target(raw: Optional[str]) -> ThreadTarget:
    """Unknown or missing targets route to the platform."""
    try:
        return ThreadTarget((raw or "").strip().lower())
    except ValueError:
        return ThreadTarget.PLATFORM


def parse_kind(raw: Optional[str]) -> ThreadKind:
    try:
        return ThreadKind((raw or "").strip().lower())
    except ValueError:
        return ThreadKind.SUPPORT


class MessagesCommand(InputModel):
    """
    Body of ``POST /api/messages``. ``intent`` selects which of the other
    fields are read:

    * ``create-thread``: id, kind, title, participants
    * ``order-thread``: orderId, target, others
    * ``send-message``: threadId, content, attachments
    """

    intent: str = ""

    id: Optional[str] = None
    kind: Optional[str] = None
    title: Optional[str] = None
    participants: List[Participant] = Field(default_factory=list)

    order_id: Optional[str] = None
    target: Optional[str] = None
    others: Optional[List[Participant]] = None

    thread_id: Optional[str] = None
    content: str = ""
    attachments: Optional[List[Attachment]] = None


class OrderMessageRequest(InputModel):
    content: str = ""
    target: Optional[str] = None


class SeedResult(CamelModel):
    ok: bool
    seeded: bool


class AdminSessionStatus(CamelModel):
    ok: bool
    sub: Optional[str] = None
    exp: Optional[int] = None
