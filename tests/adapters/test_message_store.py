# tests/adapters/test_message_store.py
import asyncio
import json

import pytest

from marketplace.adapters.persistence.message_store import FileSystemMessageStore, order_thread_id
from marketplace.core.domain.models import (
    MessageDraft,
    Participant,
    ParticipantRole,
    ThreadInput,
    ThreadKind,
    ThreadTarget,
    UserIdentity,
)

ME = UserIdentity(id="u1", name="Uma")


@pytest.fixture
def path(tmp_path):
    return tmp_path / "data" / "messages.json"


@pytest.fixture
def store(path):
    return FileSystemMessageStore(str(path))


@pytest.mark.asyncio
class TestOrderThreads:

    async def test_get_or_create_is_idempotent(self, store, path):
        """
        Scenario: The same (order, target) thread is requested twice.
        Expected: Same id both times and only one thread on disk.
        """
        first = await store.get_or_create_order_thread("o-1", ThreadTarget.SELLER, ME)
        second = await store.get_or_create_order_thread("o-1", ThreadTarget.SELLER, ME)

        assert first.id == second.id == order_thread_id("o-1", ThreadTarget.SELLER)
        assert len(json.loads(path.read_text())["threads"]) == 1

    async def test_targets_get_separate_threads(self, store):
        seller = await store.get_or_create_order_thread("o-1", ThreadTarget.SELLER, ME)
        platform = await store.get_or_create_order_thread("o-1", ThreadTarget.PLATFORM, ME)

        assert seller.id != platform.id

    async def test_existing_participants_are_not_modified(self, store):
        others = [Participant(id="s1", name="Shop", role=ParticipantRole.SELLER)]
        created = await store.get_or_create_order_thread("o-1", ThreadTarget.SELLER, ME, others)

        again = await store.get_or_create_order_thread(
            "o-1", ThreadTarget.SELLER, UserIdentity(id="u2", name="Other")
        )

        assert [p.id for p in again.participants] == ["u1", "s1"]
        assert again.created_at == created.created_at
        assert again.kind == ThreadKind.ORDER


@pytest.mark.asyncio
class TestThreadsAndMessages:

    async def test_list_only_returns_participating_threads(self, store):
        await store.upsert_thread(ThreadInput(id="t1", title="Mine", participants=[Participant(id="u1")]))
        await store.upsert_thread(ThreadInput(id="t2", title="Theirs", participants=[Participant(id="u2")]))

        threads = await store.list_threads_for_user("u1")

        assert [t.id for t in threads] == ["t1"]

    async def test_list_query_matches_title_or_participant_name(self, store):
        await store.upsert_thread(ThreadInput(
            id="t1", title="Invoice question", participants=[Participant(id="u1", name="Uma")],
        ))
        await store.upsert_thread(ThreadInput(
            id="t2", title="Delivery", participants=[Participant(id="u1"), Participant(id="s", name="SunShop")],
        ))

        assert [t.id for t in await store.list_threads_for_user("u1", "INVOICE")] == ["t1"]
        assert [t.id for t in await store.list_threads_for_user("u1", "sunshop")] == ["t2"]
        assert await store.list_threads_for_user("u1", "nothing") == []

    async def test_list_sorted_by_updated_desc(self, store):
        await store.upsert_thread(ThreadInput(id="old", participants=[Participant(id="u1")]))
        await asyncio.sleep(0.01)
        await store.upsert_thread(ThreadInput(id="new", participants=[Participant(id="u1")]))

        assert [t.id for t in await store.list_threads_for_user("u1")] == ["new", "old"]

        await asyncio.sleep(0.01)
        await store.add_message_to_thread(
            MessageDraft(thread_id="old", author_id="u1", author_role=ParticipantRole.BUYER, content="ping")
        )

        assert [t.id for t in await store.list_threads_for_user("u1")] == ["old", "new"]

    async def test_upsert_replaces_and_bumps_updated_at(self, store):
        created = await store.upsert_thread(ThreadInput(id="t1", title="A", participants=[Participant(id="u1")]))
        await asyncio.sleep(0.01)

        updated = await store.upsert_thread(ThreadInput(id="t1", title="B", participants=[Participant(id="u1")]))

        assert updated.title == "B"
        assert updated.created_at == created.created_at
        assert updated.updated_at > created.updated_at
        assert len(await store.list_threads_for_user("u1")) == 1

    async def test_messages_come_back_oldest_first(self, store):
        for text in ("one", "two", "three"):
            await store.add_message_to_thread(
                MessageDraft(thread_id="t1", author_id="u1", author_role=ParticipantRole.BUYER, content=text)
            )
            await asyncio.sleep(0.001)
        await store.add_message_to_thread(
            MessageDraft(thread_id="t2", author_id="u1", author_role=ParticipantRole.BUYER, content="other")
        )

        messages = await store.read_thread_messages("t1")

        assert [m.content for m in messages] == ["one", "two", "three"]
        assert len({m.id for m in messages}) == 3

    async def test_writes_leave_no_temp_file(self, store, path):
        await store.upsert_thread(ThreadInput(id="t1", participants=[Participant(id="u1")]))

        assert path.exists()
        assert list(path.parent.glob("*.tmp")) == []

    async def test_corrupt_file_reads_as_empty(self, store, path):
        path.parent.mkdir(parents=True)
        path.write_text("{not json")

        assert await store.list_threads_for_user("u1") == []


@pytest.mark.asyncio
class TestDemoSeed:

    async def test_seed_populates_once(self, store):
        """
        Scenario: Seeding is requested twice, for different users.
        Expected: Only the first call writes; the guard is global.
        """
        assert await store.seed_demo_for_user(ME) is True
        assert await store.seed_demo_for_user(UserIdentity(id="u2", name="Other")) is False

        threads = await store.list_threads_for_user("u1")
        assert {t.id for t in threads} == {"support-1", "order-DEMO-1001-seller"}
        assert len(await store.read_thread_messages("support-1")) == 3
        assert await store.list_threads_for_user("u2") == []

    async def test_seed_skipped_when_store_has_content(self, store):
        await store.upsert_thread(ThreadInput(id="t1", participants=[Participant(id="someone")]))

        assert await store.seed_demo_for_user(ME) is False
