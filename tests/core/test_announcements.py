# tests/core/test_announcements.py
from datetime import datetime, timedelta, timezone

import pytest

from marketplace.adapters.persistence.announcement_store import FileSystemAnnouncementStore
from marketplace.core.domain.exceptions import NotFoundError, ValidationError
from marketplace.core.domain.models import AnnouncementAudience, AnnouncementLevel
from marketplace.core.use_cases.announcements import (
    BODY_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    AnnouncementForm,
    AnnouncementService,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def store(tmp_path):
    return FileSystemAnnouncementStore(str(tmp_path / "announcements.json"))


@pytest.fixture
def service(store):
    return AnnouncementService(store, clock=lambda: NOW)


@pytest.mark.asyncio
class TestAnnouncementService:

    async def test_save_escapes_html(self, service, store):
        """
        Scenario: Title and body contain markup.
        Expected: Stored HTML-escaped.
        """
        saved = await service.save(
            AnnouncementForm(title="<b>Sale</b>", body='Use code "SUN" & save', is_active=True)
        )

        assert saved.title == "&lt;b&gt;Sale&lt;/b&gt;"
        assert saved.body == "Use code &quot;SUN&quot; &amp; save"
        assert [a.id for a in await store.read_all()] == [saved.id]

    async def test_unknown_level_and_audience_fall_back(self, service):
        saved = await service.save(AnnouncementForm(title="T", body="B", level="shout", audience="aliens"))

        assert saved.level == AnnouncementLevel.INFO
        assert saved.audience == AnnouncementAudience.ALL

    async def test_known_level_and_audience_kept(self, service):
        saved = await service.save(AnnouncementForm(title="T", body="B", level="warning", audience="sellers"))

        assert saved.level == AnnouncementLevel.WARNING
        assert saved.audience == AnnouncementAudience.SELLERS

    @pytest.mark.parametrize(
        "form",
        [
            AnnouncementForm(title="  ", body="B"),
            AnnouncementForm(title="T", body=""),
            AnnouncementForm(title="x" * (TITLE_MAX_LENGTH + 1), body="B"),
            AnnouncementForm(title="T", body="x" * (BODY_MAX_LENGTH + 1)),
            AnnouncementForm(title="T", body="B", starts_at="not-a-date"),
            AnnouncementForm(title="T", body="B", starts_at="2024-06-02T00:00:00Z", ends_at="2024-06-01T00:00:00Z"),
            AnnouncementForm(title="T", body="B", starts_at="2024-06-01T00:00:00Z", ends_at="2024-06-01T00:00:00Z"),
        ],
    )
    async def test_invalid_forms(self, service, store, form):
        with pytest.raises(ValidationError):
            await service.save(form)

        assert await store.read_all() == []

    async def test_update_keeps_created_at(self, store):
        clock = {"now": NOW}
        service = AnnouncementService(store, clock=lambda: clock["now"])
        first = await service.save(AnnouncementForm(id="a1", title="T", body="B"))

        clock["now"] = NOW + timedelta(hours=1)
        second = await service.save(AnnouncementForm(id="a1", title="T2", body="B2"))

        assert second.created_at == first.created_at
        assert second.updated_at == NOW + timedelta(hours=1)
        assert [a.title for a in await store.read_all()] == ["T2"]

    async def test_list_active_respects_window(self, service):
        await service.save(AnnouncementForm(id="live", title="T", body="B", is_active=True))
        await service.save(AnnouncementForm(id="off", title="T", body="B", is_active=False))
        await service.save(AnnouncementForm(
            id="future", title="T", body="B", is_active=True, starts_at="2024-06-02T00:00:00Z",
        ))
        await service.save(AnnouncementForm(
            id="past", title="T", body="B", is_active=True, ends_at="2024-05-31T00:00:00Z",
        ))
        await service.save(AnnouncementForm(
            id="window", title="T", body="B", is_active=True,
            starts_at="2024-06-01T00:00:00", ends_at="2024-06-30T00:00:00",
        ))

        active = await service.list_active()

        assert sorted(a.id for a in active) == ["live", "window"]
        assert len(await service.list_all()) == 5

    async def test_remove(self, service, store):
        await service.save(AnnouncementForm(id="a1", title="T", body="B"))

        await service.remove("a1")

        assert await store.read_all() == []
        with pytest.raises(NotFoundError):
            await service.remove("a1")
