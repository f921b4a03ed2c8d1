# tests/conftest.py
import json

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from marketplace.adapters.api.main import create_app
from marketplace.adapters.persistence.announcement_store import FileSystemAnnouncementStore
from marketplace.adapters.persistence.database import create_db_engine, create_session_factory, init_db
from marketplace.adapters.persistence.message_store import FileSystemMessageStore
from marketplace.adapters.persistence.models import AccountRole, Category, Product, User
from marketplace.adapters.security.admin_auth import AdminTokenVerifier
from marketplace.adapters.security.rate_limiter import RateLimiter
from marketplace.core.domain.models import UserIdentity, UserRole
from marketplace.shared.container import Container

ADMIN_SECRET = "test-secret"

BUYER_HEADERS = {"X-User-Id": "buyer-1", "X-User-Name": "Bea Buyer", "X-User-Role": "buyer"}
SELLER_HEADERS = {"X-User-Id": "seller-1", "X-User-Name": "Sol Seller", "X-User-Role": "seller"}


@pytest.fixture(scope="function")
def engine():
    """
    A fresh in-memory database shared by every session of one test.
    Built like the production engine, so foreign keys are enforced.
    """
    engine = create_db_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture(scope="function")
def seeded(session_factory):
    """
    Two users, one category and two products:
    p1 costs 1000 with 10 in stock, p2 costs 3000 with 5 in stock.
    """
    with session_factory.begin() as session:
        session.add_all([
            User(id="buyer-1", email="buyer@example.com", name="Bea Buyer", role=AccountRole.BUYER),
            User(id="seller-1", email="seller@example.com", name="Sol Seller", role=AccountRole.SELLER),
            Category(id="cat-1", name="Solar", slug="solar"),
        ])
        session.flush()
        session.add_all([
            Product(
                id="p1",
                name="Solar Panel 400W",
                slug="solar-panel-400w",
                description="Monocrystalline panel",
                price=1000,
                stock=10,
                image_urls=json.dumps(["https://cdn.example.com/p1.jpg"]),
                brand="Sunly",
                rating=4.5,
                review_count=12,
                category_id="cat-1",
                seller_id="seller-1",
            ),
            Product(
                id="p2",
                name="Hybrid Inverter",
                slug="hybrid-inverter",
                description="5kW hybrid inverter",
                price=3000,
                stock=5,
                image_urls=json.dumps(["https://cdn.example.com/p2.jpg"]),
                brand="Voltix",
                rating=4.0,
                review_count=30,
                is_featured=True,
                category_id="cat-1",
                seller_id="seller-1",
            ),
        ])
    return session_factory


@pytest.fixture
def buyer():
    return UserIdentity(id="buyer-1", name="Bea Buyer", role=UserRole.BUYER)


@pytest.fixture
def seller():
    return UserIdentity(id="seller-1", name="Sol Seller", role=UserRole.SELLER)


@pytest.fixture(scope="function")
def container(engine, session_factory, tmp_path):
    """
    Sets up the Dependency Injection Container for testing.
    Real adapters, pointed at the in-memory database and a temp data dir.
    """
    container = Container()

    container.db_engine.override(providers.Object(engine))
    container.session_factory.override(providers.Object(session_factory))
    container.message_store.override(
        providers.Singleton(FileSystemMessageStore, path=str(tmp_path / "messages.json"))
    )
    container.announcement_store.override(
        providers.Singleton(FileSystemAnnouncementStore, path=str(tmp_path / "announcements.json"))
    )
    container.admin_verifier.override(providers.Singleton(AdminTokenVerifier, secret=ADMIN_SECRET))
    container.rate_limiter.override(
        providers.Singleton(RateLimiter, window_seconds=60, max_requests=1000)
    )

    yield container

    # Clean up overrides after test
    container.unwire()
    container.reset_override()


@pytest.fixture
def client(container, seeded):
    """
    Returns a FastAPI TestClient bound to the test container.
    Entering the client runs the lifespan, which wires the container.
    """
    app = create_app(container)
    with TestClient(app) as c:
        yield c
