# tests/core/test_products.py
import re

import pytest

from marketplace.adapters.persistence.models import AccountRole, User
from marketplace.adapters.persistence.repositories import ProductsRepository
from marketplace.core.domain.exceptions import AuthorizationError, NotFoundError
from marketplace.core.domain.models import UserIdentity, UserRole
from marketplace.core.domain.schemas import ProductInput, ProductQuery
from marketplace.core.use_cases.products import first_free_slug, slugify


def _payload(**overrides):
    data = {
        "name": "Solar Panel 400W",
        "description": "Second listing of the same panel",
        "price": 950,
        "imageUrls": ["https://cdn.example.com/new.jpg"],
        "stock": 3,
        "categoryId": "cat-1",
    }
    data.update(overrides)
    return ProductInput.model_validate(data)


class TestSlugs:

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("Solar Panel 400W", "solar-panel-400w"),
            ("  --Hello,   World!!  ", "hello-world"),
            ("MPPT/PWM Controller (12V)", "mppt-pwm-controller-12v"),
            ("!!!", ""),
        ],
    )
    def test_slugify(self, name, expected):
        assert slugify(name) == expected

    def test_first_free_slug(self):
        assert first_free_slug("panel", set()) == "panel"
        assert first_free_slug("panel", {"panel"}) == "panel-1"
        assert first_free_slug("panel", {"panel", "panel-1", "panel-2"}) == "panel-3"


class TestCreateProduct:

    def test_seller_creates_product_with_suffixed_slug(self, container, seeded, seller):
        """
        Scenario: A product with the same name as an existing one.
        Expected: The new slug gets a numeric suffix.
        """
        use_case = container.create_product()

        product = use_case.execute(seller, _payload())

        assert product.slug == "solar-panel-400w-1"
        assert product.seller_id == "seller-1"
        assert product.image_urls == ["https://cdn.example.com/new.jpg"]

        again = use_case.execute(seller, _payload())
        assert again.slug == "solar-panel-400w-2"

    def test_optional_details_are_stored(self, container, seeded, seller):
        """
        Scenario: The listing carries physical details, variants and policies.
        Expected: Every one of them comes back on the product, including by slug.
        """
        payload = _payload(
            name="Portable Battery",
            weight=12.5,
            dimensions={"length": 40, "width": 20, "height": 15},
            colors=["black", "white"],
            sizes=["1kWh"],
            specifications={"capacity": "1kWh", "cycles": 3000, "waterproof": False},
            warranty="2 years",
            returnPolicy="30 days",
            tags=["camping", "backup"],
        )

        container.create_product().execute(seller, payload)
        product = container.product_catalog().get_by_slug("portable-battery")

        assert product.weight == 12.5
        assert product.dimensions == {"length": 40, "width": 20, "height": 15}
        assert product.colors == ["black", "white"]
        assert product.sizes == ["1kWh"]
        assert product.specifications == {"capacity": "1kWh", "cycles": 3000, "waterproof": False}
        assert product.warranty == "2 years"
        assert product.return_policy == "30 days"
        assert product.tags == ["camping", "backup"]

    def test_omitted_details_stay_empty(self, container, seeded, seller):
        product = container.create_product().execute(seller, _payload(name="Bare Listing"))

        assert product.dimensions is None
        assert product.tags is None
        assert product.weight is None

    def test_first_time_seller_is_recorded(self, container, seeded):
        """
        Scenario: A seller known only from request headers lists a product,
        with foreign keys enforced.
        Expected: The product is stored and the seller gets a users row.
        """
        newcomer = UserIdentity(id="seller-from-header", name="Sam New", role=UserRole.SELLER)

        product = container.create_product().execute(newcomer, _payload(name="Fresh Panel"))

        assert product.seller_id == "seller-from-header"
        with seeded() as session:
            user = session.get(User, "seller-from-header")
            assert user.role == AccountRole.SELLER
            assert user.name == "Sam New"

    def test_buyer_cannot_create(self, container, seeded, buyer):
        with pytest.raises(AuthorizationError):
            container.create_product().execute(buyer, _payload())

    def test_unknown_category(self, container, seeded, seller):
        with pytest.raises(NotFoundError) as excinfo:
            container.create_product().execute(seller, _payload(categoryId="missing"))

        assert excinfo.value.message == "Category not found"

    def test_name_without_slug_characters(self, container, seeded, seller):
        product = container.create_product().execute(seller, _payload(name="!!!"))

        assert re.fullmatch(r"product-\d+", product.slug)

    def test_falls_back_to_timestamp_slug_after_retries(self, container, seeded, seller, monkeypatch):
        """
        Scenario: Every attempt picks a slug that the unique index rejects.
        Expected: After the retry budget the product is stored with a timestamp suffix.
        """
        calls = []

        def blind_slugs_like(self, base_slug):
            calls.append(base_slug)
            return set()

        monkeypatch.setattr(ProductsRepository, "slugs_like", blind_slugs_like)

        product = container.create_product().execute(seller, _payload())

        assert len(calls) == 3
        assert re.fullmatch(r"solar-panel-400w-\d{13}", product.slug)


class TestProductCatalog:

    def test_sort_by_price_high(self, container, seeded):
        page = container.product_catalog().list_products(ProductQuery(sort="price-high"))

        assert [p.id for p in page.items] == ["p2", "p1"]
        assert page.total == 2

    def test_filters(self, container, seeded):
        catalog = container.product_catalog()

        assert catalog.list_products(ProductQuery(featured="true")).total == 1
        assert catalog.list_products(ProductQuery(brand="sunly")).items[0].id == "p1"
        assert catalog.list_products(ProductQuery(min_price=2000)).items[0].id == "p2"
        assert catalog.list_products(ProductQuery(category="other")).total == 0

    def test_pagination(self, container, seeded):
        page = container.product_catalog().list_products(ProductQuery(sort="price-low", page=2, limit=1))

        assert [p.id for p in page.items] == ["p2"]
        assert page.total == 2

    def test_get_by_slug(self, container, seeded):
        catalog = container.product_catalog()

        assert catalog.get_by_slug("hybrid-inverter").id == "p2"
        with pytest.raises(NotFoundError):
            catalog.get_by_slug("nope")
