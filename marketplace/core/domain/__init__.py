# marketplace/core/domain/__init__.py
"""
Domain layer: models, validation schemas, pricing rules and the error taxonomy.
Nothing in here imports FastAPI or SQLAlchemy.
"""
