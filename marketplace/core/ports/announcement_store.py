# marketplace/core/ports/announcement_store.py
from typing import List, Protocol

from marketplace.core.domain.models import Announcement


class IAnnouncementStore(Protocol):
    """Port for site-wide announcements."""

    async def read_all(self) -> List[Announcement]:
        ...

    async def save(self, announcement: Announcement) -> Announcement:
        """Replaces the announcement with the same id or appends it."""
        ...

    async def delete(self, announcement_id: str) -> bool:
        """Returns False when no announcement had that id."""
        ...

    async def health_check(self) -> bool:
        ...
