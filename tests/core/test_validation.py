# tests/core/test_validation.py
import pytest
from pydantic import ValidationError

from marketplace.core.domain.schemas import (
    CheckoutRequest,
    OrderInput,
    ProductInput,
    ProductQuery,
    ReviewInput,
    SearchQuery,
    ShippingAddress,
    SingleItemOrderRequest,
    validate_input,
)

ADDRESS = {
    "name": "Bea Buyer",
    "line1": "12 Market Street",
    "city": "Pune",
    "postalCode": "411001",
    "country": "IN",
}

PRODUCT = {
    "name": "Solar Panel 400W",
    "description": "Monocrystalline panel",
    "price": 1000,
    "imageUrls": ["https://cdn.example.com/p1.jpg"],
    "stock": 10,
    "categoryId": "cat-1",
}


class TestShippingAddress:

    def test_first_and_last_name_fold_into_name(self):
        data = {**ADDRESS, "firstName": "Bea", "lastName": "Buyer"}
        del data["name"]

        address = ShippingAddress.model_validate(data)

        assert address.name == "Bea Buyer"

    def test_address_is_accepted_for_line1(self):
        data = {**ADDRESS, "address": "7 Side Road"}
        del data["line1"]

        assert ShippingAddress.model_validate(data).line1 == "7 Side Road"

    @pytest.mark.parametrize("field", ["name", "line1", "city", "postalCode", "country"])
    def test_blank_required_field_is_rejected(self, field):
        """
        Scenario: A required field is whitespace only.
        Expected: Rejected after trimming.
        """
        with pytest.raises(ValidationError):
            ShippingAddress.model_validate({**ADDRESS, field: "   "})

    def test_values_are_trimmed_and_optional_fields_kept(self):
        address = ShippingAddress.model_validate({**ADDRESS, "city": "  Pune ", "phone": "123"})

        stored = address.to_storage()

        assert stored["city"] == "Pune"
        assert stored["phone"] == "123"
        assert stored["line2"] is None


class TestCheckoutPayloads:

    def test_empty_items_rejected(self):
        ok, errors = validate_input(CheckoutRequest, {"items": [], "shippingAddress": ADDRESS})

        assert ok is False
        assert any(e.startswith("items") for e in errors)

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, "2", True])
    def test_quantity_must_be_positive_integer(self, quantity):
        ok, _ = validate_input(
            CheckoutRequest,
            {"items": [{"productId": "p1", "quantity": quantity}], "shippingAddress": ADDRESS},
        )
        assert ok is False

    def test_single_item_defaults_quantity_to_one(self):
        request = SingleItemOrderRequest.model_validate({"productId": "p1", "shippingAddress": ADDRESS})

        checkout = request.as_checkout()

        assert checkout.items[0].product_id == "p1"
        assert checkout.items[0].quantity == 1

    def test_single_item_accepts_numeric_string(self):
        request = SingleItemOrderRequest.model_validate(
            {"productId": "p1", "quantity": "3", "shippingAddress": ADDRESS}
        )
        assert request.quantity == 3


class TestProductInput:

    def test_valid_product(self):
        ok, product = validate_input(ProductInput, PRODUCT)

        assert ok is True
        assert product.min_order == 1
        assert product.category_id == "cat-1"

    @pytest.mark.parametrize(
        "override",
        [
            {"name": ""},
            {"price": 0},
            {"price": 1_000_000},
            {"imageUrls": []},
            {"imageUrls": ["not-a-url"]},
            {"stock": -1},
            {"minOrder": 0},
            {"tags": ["x" * 51]},
            {"sizes": ["y" * 21]},
        ],
    )
    def test_invalid_products(self, override):
        ok, errors = validate_input(ProductInput, {**PRODUCT, **override})

        assert ok is False
        assert errors and all(": " in e for e in errors)


class TestOtherSchemas:

    def test_review_rating_bounds(self):
        assert validate_input(ReviewInput, {"rating": 5, "productId": "p1"})[0] is True
        assert validate_input(ReviewInput, {"rating": 6, "productId": "p1"})[0] is False
        assert validate_input(ReviewInput, {"rating": 0, "productId": "p1"})[0] is False

    def test_order_input_requires_items(self):
        ok, _ = validate_input(
            OrderInput,
            {
                "totalAmount": 100,
                "shippingCost": 0,
                "taxAmount": 0,
                "shippingAddress": ADDRESS,
                "items": [],
            },
        )
        assert ok is False

    def test_product_query_defaults_and_limits(self):
        query = ProductQuery.model_validate({})
        assert (query.sort, query.page, query.limit) == ("newest", 1, 20)

        assert validate_input(ProductQuery, {"limit": "101"})[0] is False
        assert validate_input(ProductQuery, {"sort": "cheapest"})[0] is False
        assert validate_input(ProductQuery, {"minPrice": "10", "page": "2"})[1].min_price == 10

    def test_search_query_requires_text(self):
        assert validate_input(SearchQuery, {"q": ""})[0] is False
        assert validate_input(SearchQuery, {"q": "panel"})[1].sort == "relevance"
