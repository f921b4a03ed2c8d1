# marketplace/core/use_cases/__init__.py
from .announcements import AnnouncementForm, AnnouncementService
from .checkout import CheckoutOrder
from .orders import OrderQueries, build_order_timeline
from .products import CreateProduct, ProductCatalog, slugify

__all__ = [
    "AnnouncementForm",
    "AnnouncementService",
    "CheckoutOrder",
    "OrderQueries",
    "build_order_timeline",
    "CreateProduct",
    "ProductCatalog",
    "slugify",
]
