# marketplace/adapters/api/routers/announcements.py
from typing import List

import structlog
from fastapi import APIRouter, Body, Depends, Response, status

from marketplace.adapters.api.dependencies import (
    enforce_rate_limit,
    get_announcement_service,
    require_admin,
)
from marketplace.core.domain.models import AdminClaims, Announcement
from marketplace.core.use_cases.announcements import AnnouncementForm, AnnouncementService

logger = structlog.get_logger()

router = APIRouter(
    prefix="/api",
    tags=["Announcements"],
    dependencies=[Depends(enforce_rate_limit)],
)


@router.get("/announcements", response_model=List[Announcement])
async def list_active_announcements(
    response: Response,
    service: AnnouncementService = Depends(get_announcement_service),
):
    """Active announcements whose optional start/end window contains now."""
    response.headers["Cache-Control"] = "public, s-maxage=60, stale-while-revalidate=300"
    return await service.list_active()


@router.get("/admin/announcements", response_model=List[Announcement])
async def list_all_announcements(
    admin: AdminClaims = Depends(require_admin),
    service: AnnouncementService = Depends(get_announcement_service),
):
    return await service.list_all()


@router.post("/admin/announcements", response_model=Announcement)
async def save_announcement(
    form: AnnouncementForm = Body(...),
    admin: AdminClaims = Depends(require_admin),
    service: AnnouncementService = Depends(get_announcement_service),
):
    """Creates an announcement, or replaces the one with the given ``id``."""
    announcement = await service.save(form)
    logger.info("admin_announcement_saved", announcement_id=announcement.id, jti=admin.jti)
    return announcement


@router.delete("/admin/announcements/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_announcement(
    announcement_id: str,
    admin: AdminClaims = Depends(require_admin),
    service: AnnouncementService = Depends(get_announcement_service),
):
    await service.remove(announcement_id)
    logger.info("admin_announcement_deleted", announcement_id=announcement_id, jti=admin.jti)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
