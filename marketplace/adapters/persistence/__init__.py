# marketplace/adapters/persistence/__init__.py
"""
Persistence adapters.

Relational data (users, catalog, orders) lives in SQLAlchemy; message threads
and announcements live in flat JSON documents.

    from marketplace.adapters.persistence import Base, create_db_engine
"""

from .announcement_store import FileSystemAnnouncementStore
from .database import create_db_engine, create_session_factory, init_db
from .message_store import FileSystemMessageStore
from .models import Base

__all__ = [
    "Base",
    "create_db_engine",
    "create_session_factory",
    "init_db",
    "FileSystemAnnouncementStore",
    "FileSystemMessageStore",
]
