# app/api/v1/routes/photos.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.database import db_helper
from app.core.utils import require_roles, get_achievement_evaluator
from app.core.schemas.tracking import ProgressPhotoCreate, ProgressPhotoResponse
from app.models.user import User, UserRole
from app.repositories.tracking_repository import TrackingRepository
from app.services.achievement_service import AchievementEvaluator

router = APIRouter(prefix="/photos", tags=["photos"])

@router.get("/", response_model=list[ProgressPhotoResponse])
async def get_photos(
    session: AsyncSession = Depends(db_helper.session_getter),
    current_user: User = Depends(require_roles(UserRole.PATIENT)),
):
    return await TrackingRepository(session).get_photos(current_user.id)

@router.post("/", response_model=ProgressPhotoResponse, status_code=status.HTTP_201_CREATED)
async def create_photo(
    payload: ProgressPhotoCreate,
    session: AsyncSession = Depends(db_helper.session_getter),
    current_user: User = Depends(require_roles(UserRole.PATIENT)),
    evaluator: AchievementEvaluator = Depends(get_achievement_evaluator),
):
    """Сохранить фото прогресса, уже загруженное клиентом в хранилище"""
    user_id = current_user.id
    photo = await TrackingRepository(session).create_photo(
        user_id, payload.aligner_number, payload.photo_type, payload.storage_path
    )
    response = ProgressPhotoResponse.model_validate(photo)

    await evaluator.evaluate(user_id)
    return response
