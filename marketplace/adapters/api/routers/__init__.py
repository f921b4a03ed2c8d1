# marketplace/adapters/api/routers/__init__.py
