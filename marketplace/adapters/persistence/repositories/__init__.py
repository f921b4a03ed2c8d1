# marketplace/adapters/persistence/repositories/__init__.py
"""
Repository layer public exports.

    from marketplace.adapters.persistence.repositories import ProductsRepository
"""

from .orders import OrdersRepository
from .products import ProductsRepository
from .users import UsersRepository

__all__ = ["OrdersRepository", "ProductsRepository", "UsersRepository"]
