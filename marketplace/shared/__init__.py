# marketplace/shared/__init__.py
"""
Cross-cutting infrastructure: settings, logging, tracing and the DI container.

The container lives in ``marketplace.shared.container``; importing it pulls in
every adapter.
"""

from .config import AppEnv, Settings, settings

__all__ = ["AppEnv", "Settings", "settings"]
