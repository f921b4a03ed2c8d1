# marketplace/core/domain/models.py
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Base model for everything that crosses the HTTP or JSON-file boundary.
    Python attributes are snake_case, the wire format is camelCase.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# --- Enums ---

class UserRole(str, Enum):
    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"


class ParticipantRole(str, Enum):
    """Who speaks in a thread. PLATFORM is the marketplace operator's support desk."""
    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"
    PLATFORM = "platform"


class ThreadKind(str, Enum):
    ORDER = "order"
    SUPPORT = "support"
    DM = "dm"


class ThreadTarget(str, Enum):
    """The counterpart of an order-scoped thread."""
    SELLER = "seller"
    PLATFORM = "platform"


class AnnouncementLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"


class AnnouncementAudience(str, Enum):
    ALL = "all"
    BUYERS = "buyers"
    SELLERS = "sellers"


# --- Identity ---

class UserIdentity(CamelModel):
    """The caller as asserted by the upstream session layer."""
    id: str
    name: Optional[str] = None
    role: UserRole = UserRole.BUYER


GUEST = UserIdentity(id="guest", name="Guest", role=UserRole.BUYER)


class AdminClaims(BaseModel):
    """Decoded payload of a verified admin session token."""
    sub: str
    exp: Optional[int] = None
    iat: Optional[int] = None
    jti: Optional[str] = None


# --- Messaging ---

class Participant(CamelModel):
    id: str
    name: Optional[str] = None
    role: Optional[ParticipantRole] = None
    whatsapp: Optional[str] = None


class Attachment(CamelModel):
    url: str
    name: Optional[str] = None
    type: Optional[str] = None
    size: Optional[int] = None


class ThreadInput(CamelModel):
    """A thread as supplied by a caller; timestamps are owned by the store."""
    id: str
    kind: ThreadKind = ThreadKind.SUPPORT
    title: Optional[str] = None
    participants: List[Participant] = Field(default_factory=list)
    order_id: Optional[str] = None
    target: Optional[ThreadTarget] = None


class Thread(ThreadInput):
    created_at: datetime
    updated_at: datetime


class MessageDraft(CamelModel):
    """A message before the store assigns its id and timestamp."""
    thread_id: str
    author_id: str
    author_role: ParticipantRole
    content: str = ""
    attachments: Optional[List[Attachment]] = None


class Message(MessageDraft):
    id: str
    created_at: datetime


# --- Announcements ---

class Announcement(CamelModel):
    id: str
    title: str
    body: str
    level: AnnouncementLevel = AnnouncementLevel.INFO
    audience: AnnouncementAudience = AnnouncementAudience.ALL
    is_active: bool = True
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    def is_visible_at(self, now: datetime) -> bool:
        if not self.is_active:
            return False
        if self.starts_at is not None and self.starts_at > now:
            return False
        if self.ends_at is not None and self.ends_at < now:
            return False
        return True
