# app/api/v1/routes/wear_time.py
from datetime import date, timedelta
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.database import db_helper
from app.core.utils import require_roles, get_achievement_evaluator
from app.core.schemas.tracking import WearTimeLogCreate, WearTimeLogResponse
from app.models.user import User, UserRole
from app.repositories.tracking_repository import TrackingRepository
from app.services.achievement_service import AchievementEvaluator
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/wear-time", tags=["wear-time"])

@router.get("/", response_model=list[WearTimeLogResponse])
async def get_wear_time_logs(
    days: int = Query(7, ge=1, le=365, description="How many days back to return"),
    session: AsyncSession = Depends(db_helper.session_getter),
    current_user: User = Depends(require_roles(UserRole.PATIENT)),
):
    # days=7 это сегодня и шесть предыдущих дней
    since = date.today() - timedelta(days=days - 1)
    return await TrackingRepository(session).get_wear_time_since(current_user.id, since)

@router.post("/", response_model=WearTimeLogResponse)
async def log_wear_time(
    payload: WearTimeLogCreate,
    session: AsyncSession = Depends(db_helper.session_getter),
    current_user: User = Depends(require_roles(UserRole.PATIENT)),
    evaluator: AchievementEvaluator = Depends(get_achievement_evaluator),
):
    """Записать время ношения за день (повторная запись за тот же день перезаписывает)"""
    user_id = current_user.id
    log = await TrackingRepository(session).upsert_wear_time(
        user_id, payload.date or date.today(), payload.hours_worn
    )
    # Снимок до проверки достижений: она может сделать rollback сессии
    response = WearTimeLogResponse.model_validate(log)
    logger.info(f"User {user_id} logged {payload.hours_worn}h for {response.date}")

    await evaluator.evaluate(user_id)
    return response
