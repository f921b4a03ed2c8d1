# marketplace/core/ports/message_store.py
from typing import List, Optional, Protocol

from marketplace.core.domain.models import (
    Message,
    MessageDraft,
    Participant,
    Thread,
    ThreadInput,
    ThreadTarget,
    UserIdentity,
)


class IMessageStore(Protocol):
    """
    Port for conversation threads and their messages.
    Implementations could be a JSON file, a SQL table, or a remote service.
    """

    async def get_or_create_order_thread(
        self,
        order_id: str,
        target: ThreadTarget,
        me: UserIdentity,
        others: Optional[List[Participant]] = None,
    ) -> Thread:
        """
        Returns the thread for (order_id, target), creating it on first access.
        An existing thread's participants are never modified.
        """
        ...

    async def upsert_thread(self, thread: ThreadInput) -> Thread:
        """Replaces or inserts a thread by id and bumps its updated_at."""
        ...

    async def list_threads_for_user(self, user_id: str, query: Optional[str] = None) -> List[Thread]:
        """Threads the user participates in, most recently updated first."""
        ...

    async def read_thread_messages(self, thread_id: str) -> List[Message]:
        """Messages of a thread, oldest first."""
        ...

    async def add_message_to_thread(self, draft: MessageDraft) -> Message:
        """Appends a message and touches the parent thread's updated_at."""
        ...

    async def seed_demo_for_user(self, user: UserIdentity) -> bool:
        """Populates demo data once; returns False when the store already has content."""
        ...

    async def health_check(self) -> bool:
        ...
