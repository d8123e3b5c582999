# app/api/v1/routes/notifications.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.database import db_helper
from app.core.exceptions import NotFoundError
from app.core.utils import get_current_user
from app.core.schemas.tracking import FCMTokenRequest, NotificationResponse
from app.models.user import User
from app.repositories.notification_repository import NotificationRepository

router = APIRouter(tags=["notifications"])

@router.post("/fcm/register")
async def register_fcm_token(
    payload: FCMTokenRequest,
    session: AsyncSession = Depends(db_helper.session_getter),
    current_user: User = Depends(get_current_user),
):
    await NotificationRepository(session).register_token(current_user.id, payload.token, payload.platform)
    return {"success": True}

@router.post("/fcm/unregister")
async def unregister_fcm_token(
    payload: FCMTokenRequest,
    session: AsyncSession = Depends(db_helper.session_getter),
    current_user: User = Depends(get_current_user),
):
    removed = await NotificationRepository(session).remove_token(current_user.id, payload.token)
    return {"success": True, "removed": removed}

@router.get("/notifications", response_model=list[NotificationResponse])
async def get_notifications(
    session: AsyncSession = Depends(db_helper.session_getter),
    current_user: User = Depends(get_current_user),
):
    return await NotificationRepository(session).list_for_user(current_user.id)

@router.post("/notifications/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: int,
    session: AsyncSession = Depends(db_helper.session_getter),
    current_user: User = Depends(get_current_user),
):
    notification = await NotificationRepository(session).mark_read(current_user.id, notification_id)
    if notification is None:
        raise NotFoundError("Notification not found")
    return notification
