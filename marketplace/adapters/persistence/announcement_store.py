# marketplace/adapters/persistence/announcement_store.py
from typing import List

import structlog

from marketplace.adapters.persistence.json_file import JsonFile
from marketplace.core.domain.models import Announcement

logger = structlog.get_logger()


class FileSystemAnnouncementStore:
    """Announcements kept as a JSON array."""

    def __init__(self, path: str):
        self._file = JsonFile(path, list)

    async def read_all(self) -> List[Announcement]:
        data = await self._file.read()
        if not isinstance(data, list):
            return []
        return [Announcement.model_validate(raw) for raw in data]

    async def _write_all(self, items: List[Announcement]) -> None:
        await self._file.write(
            [a.model_dump(mode="json", by_alias=True, exclude_none=True) for a in items]
        )

    async def save(self, announcement: Announcement) -> Announcement:
        items = await self.read_all()
        for index, existing in enumerate(items):
            if existing.id == announcement.id:
                items[index] = announcement
                break
        else:
            items.append(announcement)

        await self._write_all(items)
        logger.info("announcement_saved", announcement_id=announcement.id)
        return announcement

    async def delete(self, announcement_id: str) -> bool:
        items = await self.read_all()
        remaining = [a for a in items if a.id != announcement_id]
        if len(remaining) == len(items):
            return False

        await self._write_all(remaining)
        logger.info("announcement_deleted", announcement_id=announcement_id)
        return True

    async def ensure(self) -> None:
        await self._file.ensure()

    async def health_check(self) -> bool:
        return self._file.is_writable()
