# marketplace/core/ports/__init__.py
from .announcement_store import IAnnouncementStore
from .message_store import IMessageStore

__all__ = ["IAnnouncementStore", "IMessageStore"]
