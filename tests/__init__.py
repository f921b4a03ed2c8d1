# tests/__init__.py
"""
Test suite for the marketplace service.

Organization:
- `core`: use cases, pricing and validation against in-memory SQLite and temp-dir stores.
- `adapters`: JSON stores, admin tokens, the rate limiter and end-to-end API tests.
"""
