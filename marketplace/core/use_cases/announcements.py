# marketplace/core/use_cases/announcements.py
import html
import uuid
from datetime import datetime, timezone
from typing import Callable, List, Optional

import structlog
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from marketplace.core.domain.exceptions import NotFoundError, ValidationError
from marketplace.core.domain.models import (
    Announcement,
    AnnouncementAudience,
    AnnouncementLevel,
)
from marketplace.core.ports.announcement_store import IAnnouncementStore

logger = structlog.get_logger()

TITLE_MAX_LENGTH = 200
BODY_MAX_LENGTH = 5000


class AnnouncementForm(BaseModel):
    """Raw admin form submission; every field arrives as loose text."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = None
    title: str = ""
    body: str = ""
    level: str = "info"
    audience: str = "all"
    is_active: bool = False
    starts_at: Optional[str] = None
    ends_at: Optional[str] = None


def _parse_when(raw: Optional[str], label: str) -> Optional[datetime]:
    raw = (raw or "").strip()
    if not raw:
        return None
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"Invalid {label} date")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class AnnouncementService:
    """
    Admin-managed site announcements.

    Titles and bodies are HTML-escaped before they are stored, so the
    storefront can render them verbatim.
    """

    def __init__(self, store: IAnnouncementStore, clock: Optional[Callable[[], datetime]] = None):
        self._store = store
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def save(self, form: AnnouncementForm) -> Announcement:
        title = form.title.strip()
        body = form.body.strip()
        if not title:
            raise ValidationError("Title is required")
        if not body:
            raise ValidationError("Body is required")
        if len(title) > TITLE_MAX_LENGTH:
            raise ValidationError(f"Title is too long (max {TITLE_MAX_LENGTH} characters)")
        if len(body) > BODY_MAX_LENGTH:
            raise ValidationError(f"Body is too long (max {BODY_MAX_LENGTH} characters)")

        starts_at = _parse_when(form.starts_at, "start")
        ends_at = _parse_when(form.ends_at, "end")
        if starts_at and ends_at and not ends_at > starts_at:
            raise ValidationError("End date must be after start date")

        level_raw = form.level.strip()
        audience_raw = form.audience.strip()
        level = (
            AnnouncementLevel(level_raw)
            if level_raw in {lv.value for lv in AnnouncementLevel}
            else AnnouncementLevel.INFO
        )
        audience = (
            AnnouncementAudience(audience_raw)
            if audience_raw in {au.value for au in AnnouncementAudience}
            else AnnouncementAudience.ALL
        )

        now = self._clock()
        announcement_id = form.id or uuid.uuid4().hex
        created_at = now
        for existing in await self._store.read_all():
            if existing.id == announcement_id:
                created_at = existing.created_at
                break

        announcement = Announcement(
            id=announcement_id,
            title=html.escape(title, quote=True),
            body=html.escape(body, quote=True),
            level=level,
            audience=audience,
            is_active=form.is_active,
            starts_at=starts_at,
            ends_at=ends_at,
            created_at=created_at,
            updated_at=now,
        )
        return await self._store.save(announcement)

    async def remove(self, announcement_id: str) -> None:
        if not await self._store.delete(announcement_id):
            raise NotFoundError("Announcement")

    async def list_all(self) -> List[Announcement]:
        return await self._store.read_all()

    async def list_active(self) -> List[Announcement]:
        now = self._clock()
        return [a for a in await self._store.read_all() if a.is_visible_at(now)]
