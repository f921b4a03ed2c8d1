# marketplace/shared/container.py
import os

from dependency_injector import containers, providers

from marketplace.adapters.persistence.announcement_store import FileSystemAnnouncementStore
from marketplace.adapters.persistence.database import create_db_engine, create_session_factory
from marketplace.adapters.persistence.message_store import FileSystemMessageStore
from marketplace.adapters.security.admin_auth import AdminTokenVerifier
from marketplace.adapters.security.rate_limiter import RateLimiter
from marketplace.core.domain.pricing import PricingPolicy
from marketplace.core.use_cases.announcements import AnnouncementService
from marketplace.core.use_cases.checkout import CheckoutOrder
from marketplace.core.use_cases.orders import OrderQueries
from marketplace.core.use_cases.products import CreateProduct, ProductCatalog
from marketplace.shared.config import settings


class Container(containers.DeclarativeContainer):
    """
    Dependency Injection Container.

    Owns every piece of process state (engine, stores, limiter, verifier);
    tests override these providers instead of patching module globals.
    """

    # 1. Configuration
    config = providers.Configuration(pydantic_settings=[settings])

    # 2. Gateways (Infrastructure Adapters)

    # Database (Singleton: one engine and connection pool per process)
    db_engine = providers.Singleton(create_db_engine, url=config.DATABASE_URL)
    session_factory = providers.Singleton(create_session_factory, engine=db_engine)

    # Flat-file stores (Singleton: one access point per file)
    message_store = providers.Singleton(
        FileSystemMessageStore,
        path=providers.Callable(os.path.join, config.DATA_DIR, "messages.json"),
    )
    announcement_store = providers.Singleton(
        FileSystemAnnouncementStore,
        path=providers.Callable(os.path.join, config.DATA_DIR, "announcements.json"),
    )

    # Security
    rate_limiter = providers.Singleton(
        RateLimiter,
        window_seconds=config.RATE_LIMIT_WINDOW_SEC,
        max_requests=config.RATE_LIMIT_MAX_REQUESTS,
    )
    admin_verifier = providers.Singleton(AdminTokenVerifier, secret=config.ADMIN_SESSION_SECRET)

    pricing = providers.Singleton(
        PricingPolicy,
        tax_rate=config.TAX_RATE,
        free_shipping_threshold=config.FREE_SHIPPING_THRESHOLD,
        flat_shipping_cost=config.FLAT_SHIPPING_COST,
    )

    # 3. Use Cases (Application Logic)
    # Factory: new instance per request, Singleton dependencies injected.

    checkout_order = providers.Factory(
        CheckoutOrder,
        session_factory=session_factory,
        pricing=pricing,
    )

    order_queries = providers.Factory(OrderQueries, session_factory=session_factory)

    create_product = providers.Factory(
        CreateProduct,
        session_factory=session_factory,
        max_attempts=config.SLUG_MAX_ATTEMPTS,
    )

    product_catalog = providers.Factory(ProductCatalog, session_factory=session_factory)

    announcement_service = providers.Factory(AnnouncementService, store=announcement_store)


# Instantiate the container for global access (e.g. by FastAPI)
container = Container()
