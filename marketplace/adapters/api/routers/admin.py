# marketplace/adapters/api/routers/admin.py
from typing import Annotated, Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Cookie, Depends, status
from fastapi.responses import JSONResponse

from marketplace.adapters.api.dependencies import enforce_rate_limit
from marketplace.adapters.api.schemas import AdminSessionStatus
from marketplace.adapters.security.admin_auth import AdminTokenVerifier
from marketplace.core.domain.exceptions import AuthenticationError
from marketplace.shared.container import Container

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    dependencies=[Depends(enforce_rate_limit)],
)


@router.get(
    "/session/validate",
    response_model=AdminSessionStatus,
    responses={401: {"model": AdminSessionStatus}},
)
@inject
async def validate_session(
    admin_session: Annotated[Optional[str], Cookie()] = None,
    verifier: AdminTokenVerifier = Depends(Provide[Container.admin_verifier]),
):
    """Reports whether the ``admin_session`` cookie holds a live admin token."""
    try:
        claims = verifier.assert_admin(admin_session)
    except AuthenticationError:
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content={"ok": False})
    return AdminSessionStatus(ok=True, sub=claims.sub, exp=claims.exp)
