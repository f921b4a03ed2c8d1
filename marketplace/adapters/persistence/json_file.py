# marketplace/adapters/persistence/json_file.py
import json
import uuid
from pathlib import Path
from typing import Any, Callable

import aiofiles
import aiofiles.os
import structlog

logger = structlog.get_logger()


class JsonFile:
    """
    A whole-document JSON file with atomic replacement.

    Every write goes to its own ``<path>.<random>.tmp`` first and is then
    renamed over the target, so readers never observe a half-written
    document, even while several writers overlap. There is no locking
    around read-modify-write: two concurrent writers both succeed and the
    last rename wins.
    """

    def __init__(self, path: str, default_factory: Callable[[], Any]):
        self.path = Path(path)
        self._default_factory = default_factory

    def _temp_path(self) -> Path:
        return self.path.with_name(f"{self.path.name}.{uuid.uuid4().hex}.tmp")

    async def ensure(self) -> None:
        """Creates the file (and its directory) with the default document if missing."""
        if not self.path.exists():
            await self.write(self._default_factory())

    async def read(self) -> Any:
        if not self.path.exists():
            return self._default_factory()

        try:
            async with aiofiles.open(self.path, mode="r", encoding="utf-8") as f:
                content = await f.read()
            return json.loads(content) if content.strip() else self._default_factory()
        except (OSError, json.JSONDecodeError) as e:
            logger.error("json_store_read_failed", path=str(self.path), error=str(e))
            return self._default_factory()

    async def write(self, data: Any) -> None:
        payload = json.dumps(data, indent=2, ensure_ascii=False)
        self.path.parent.mkdir(parents=True, exist_ok=True)

        tmp = self._temp_path()
        try:
            async with aiofiles.open(tmp, mode="w", encoding="utf-8") as f:
                await f.write(payload)
            await aiofiles.os.replace(tmp, self.path)
        except OSError:
            if tmp.exists():
                await aiofiles.os.remove(tmp)
            logger.error("json_store_write_failed", path=str(self.path))
            raise

    def is_writable(self) -> bool:
        directory = self.path.parent
        return directory.exists() and directory.is_dir()
