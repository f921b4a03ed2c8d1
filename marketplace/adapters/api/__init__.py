# marketplace/adapters/api/__init__.py
