# marketplace/adapters/api/routers/products.py
from fastapi import APIRouter, Body, Depends, Request, status

from marketplace.adapters.api.dependencies import (
    enforce_rate_limit,
    get_create_product,
    get_current_user,
    get_product_catalog,
)
from marketplace.core.domain.exceptions import ValidationError
from marketplace.core.domain.models import UserIdentity
from marketplace.core.domain.read_models import ProductPage, ProductView
from marketplace.core.domain.schemas import ProductInput, ProductQuery, validate_input
from marketplace.core.use_cases.products import CreateProduct, ProductCatalog

router = APIRouter(
    prefix="/api/products",
    tags=["Catalog"],
    dependencies=[Depends(enforce_rate_limit)],
)


@router.get("", response_model=ProductPage)
def list_products(
    request: Request,
    catalog: ProductCatalog = Depends(get_product_catalog),
):
    """
    Active products, filtered and paginated.

    **Query:** ``category`` (slug), ``sort`` (newest | price-low | price-high |
    rating | popular), ``minPrice``, ``maxPrice``, ``brand``, ``featured``,
    ``page``, ``limit`` (max 100).
    """
    ok, result = validate_input(ProductQuery, dict(request.query_params))
    if not ok:
        raise ValidationError("Invalid query parameters", details=result)
    return catalog.list_products(result)


@router.post(
    "",
    response_model=ProductView,
    status_code=status.HTTP_201_CREATED,
    summary="List a new product (sellers only)",
)
def create_product(
    payload: ProductInput = Body(...),
    user: UserIdentity = Depends(get_current_user),
    use_case: CreateProduct = Depends(get_create_product),
):
    return use_case.execute(user, payload)


@router.get("/{slug}", response_model=ProductView)
def get_product(slug: str, catalog: ProductCatalog = Depends(get_product_catalog)):
    return catalog.get_by_slug(slug)
