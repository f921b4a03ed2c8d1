# marketplace/adapters/api/dependencies.py
from typing import Annotated, Optional

import structlog
from dependency_injector.wiring import Provide, inject
from fastapi import Cookie, Depends, Header, Request

from marketplace.adapters.security.admin_auth import AdminTokenVerifier
from marketplace.adapters.security.rate_limiter import RateLimiter
from marketplace.core.domain.exceptions import AuthenticationError
from marketplace.core.domain.models import GUEST, AdminClaims, ParticipantRole, UserIdentity, UserRole
from marketplace.core.ports.announcement_store import IAnnouncementStore
from marketplace.core.ports.message_store import IMessageStore
from marketplace.core.use_cases.announcements import AnnouncementService
from marketplace.core.use_cases.checkout import CheckoutOrder
from marketplace.core.use_cases.orders import OrderQueries
from marketplace.core.use_cases.products import CreateProduct, ProductCatalog
from marketplace.shared.container import Container

logger = structlog.get_logger()


# -----------------------------------------------------------------------------
# Caller identity (asserted upstream, forwarded as headers)
# -----------------------------------------------------------------------------
def _parse_role(raw: Optional[str]) -> UserRole:
    value = (raw or "").strip().lower()
    try:
        return UserRole(value)
    except ValueError:
        return UserRole.BUYER


async def get_optional_user(
    x_user_id: Annotated[Optional[str], Header(description="Authenticated user id")] = None,
    x_user_name: Annotated[Optional[str], Header()] = None,
    x_user_role: Annotated[Optional[str], Header(description="buyer | seller | admin")] = None,
) -> Optional[UserIdentity]:
    user_id = (x_user_id or "").strip()
    if not user_id:
        return None
    return UserIdentity(id=user_id, name=(x_user_name or "").strip() or None, role=_parse_role(x_user_role))


async def get_current_user(user: Optional[UserIdentity] = Depends(get_optional_user)) -> UserIdentity:
    """Requires an identified caller; raises 401 otherwise."""
    if user is None:
        raise AuthenticationError()
    return user


async def get_user_or_guest(user: Optional[UserIdentity] = Depends(get_optional_user)) -> UserIdentity:
    """Messaging endpoints fall back to the shared guest identity."""
    return user or GUEST


def participant_role(user: UserIdentity) -> ParticipantRole:
    return {
        UserRole.SELLER: ParticipantRole.SELLER,
        UserRole.ADMIN: ParticipantRole.ADMIN,
    }.get(user.role, ParticipantRole.BUYER)


# -----------------------------------------------------------------------------
# Security: admin session cookie, rate limiting
# -----------------------------------------------------------------------------
@inject
async def require_admin(
    admin_session: Annotated[Optional[str], Cookie()] = None,
    verifier: AdminTokenVerifier = Depends(Provide[Container.admin_verifier]),
) -> AdminClaims:
    """Validates the ``admin_session`` cookie; any failure is a 401."""
    return verifier.assert_admin(admin_session)


@inject
async def enforce_rate_limit(
    request: Request,
    limiter: RateLimiter = Depends(Provide[Container.rate_limiter]),
) -> None:
    identifier = request.client.host if request.client else "anonymous"
    limiter.hit(identifier)


# -----------------------------------------------------------------------------
# Stores and use cases (container-managed)
# -----------------------------------------------------------------------------
@inject
def get_message_store(
    store: IMessageStore = Depends(Provide[Container.message_store]),
) -> IMessageStore:
    return store


@inject
def get_announcement_store(
    store: IAnnouncementStore = Depends(Provide[Container.announcement_store]),
) -> IAnnouncementStore:
    return store


@inject
def get_checkout_order(
    use_case: CheckoutOrder = Depends(Provide[Container.checkout_order]),
) -> CheckoutOrder:
    return use_case


@inject
def get_order_queries(
    queries: OrderQueries = Depends(Provide[Container.order_queries]),
) -> OrderQueries:
    return queries


@inject
def get_create_product(
    use_case: CreateProduct = Depends(Provide[Container.create_product]),
) -> CreateProduct:
    return use_case


@inject
def get_product_catalog(
    catalog: ProductCatalog = Depends(Provide[Container.product_catalog]),
) -> ProductCatalog:
    return catalog


@inject
def get_announcement_service(
    service: AnnouncementService = Depends(Provide[Container.announcement_service]),
) -> AnnouncementService:
    return service
