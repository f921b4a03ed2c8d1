# marketplace/adapters/__init__.py
