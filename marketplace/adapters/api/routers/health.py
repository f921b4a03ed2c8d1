# marketplace/adapters/api/routers/health.py
from typing import Dict

import structlog
from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.engine import Engine

from marketplace.adapters.persistence.database import ping
from marketplace.core.ports.announcement_store import IAnnouncementStore
from marketplace.core.ports.message_store import IMessageStore
from marketplace.shared.config import settings
from marketplace.shared.container import Container

logger = structlog.get_logger()

router = APIRouter(prefix="/health", tags=["System"])


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_probe():
    """
    K8s Liveness Probe.
    Returns 200 OK if the process is serving requests.
    """
    return {"status": "ok", "service": settings.APP_NAME}


@router.get("/ready", status_code=status.HTTP_200_OK)
@inject
async def readiness_probe(
    response: Response,
    engine: Engine = Depends(Provide[Container.db_engine]),
    messages: IMessageStore = Depends(Provide[Container.message_store]),
    announcements: IAnnouncementStore = Depends(Provide[Container.announcement_store]),
) -> Dict[str, str]:
    """
    K8s Readiness Probe.
    Checks the database and both JSON stores; 503 if any is down.
    """
    health_status = {
        "database": "down",
        "messages": "down",
        "announcements": "down",
    }

    try:
        if ping(engine):
            health_status["database"] = "up"
    except Exception as e:
        logger.error("health_check_failed", component="database", error=str(e))

    try:
        if await messages.health_check():
            health_status["messages"] = "up"
    except OSError as e:
        logger.error("health_check_failed", component="messages", error=str(e))

    try:
        if await announcements.health_check():
            health_status["announcements"] = "up"
    except OSError as e:
        logger.error("health_check_failed", component="announcements", error=str(e))

    is_healthy = all(value == "up" for value in health_status.values())
    if not is_healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning("readiness_probe_failed", status=health_status)

    return health_status
