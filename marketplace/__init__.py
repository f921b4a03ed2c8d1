# marketplace/__init__.py
"""
Marketplace backend.

Catalog, checkout, order tracking, messaging and announcements, laid out
as a Hexagonal Architecture (Ports & Adapters) service.
"""

__version__ = "1.0.0"
