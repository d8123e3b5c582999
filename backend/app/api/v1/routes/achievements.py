# app/api/v1/routes/achievements.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.database import db_helper
from app.core.exceptions import NotFoundError
from app.core.utils import get_current_user, require_roles
from app.core.schemas.achievements import AchievementResponse
from app.core.schemas.auth import UserResponse
from app.models.user import User, UserRole
from app.repositories.achievement_repository import AchievementRepository
from app.repositories.user_repository import UserRepository

router = APIRouter(tags=["achievements"])

async def _achievements_for(session: AsyncSession, user_id: int) -> list[AchievementResponse]:
    """Весь каталог с отметкой, что открыто у пользователя"""
    repo = AchievementRepository(session)
    catalog = await repo.list_catalog()
    unlocked = {ua.achievement_id: ua.unlocked_at for ua in await repo.get_user_achievements(user_id)}

    return [
        AchievementResponse(
            id=a.id,
            name=a.name,
            description=a.description,
            icon=a.icon,
            requirement=a.requirement,
            unlocked=a.id in unlocked,
            unlocked_at=unlocked.get(a.id),
        )
        for a in catalog
    ]

@router.get("/achievements", response_model=list[AchievementResponse])
async def get_my_achievements(
    session: AsyncSession = Depends(db_helper.session_getter),
    current_user: User = Depends(get_current_user),
):
    return await _achievements_for(session, current_user.id)

@router.get("/doctor/patients", response_model=list[UserResponse])
async def get_doctor_patients(
    session: AsyncSession = Depends(db_helper.session_getter),
    current_user: User = Depends(require_roles(UserRole.DOCTOR)),
):
    return await UserRepository(session).get_patients_of(current_user.id)

@router.get("/doctor/patients/{patient_id}/achievements", response_model=list[AchievementResponse])
async def get_patient_achievements(
    patient_id: int,
    session: AsyncSession = Depends(db_helper.session_getter),
    current_user: User = Depends(require_roles(UserRole.DOCTOR)),
):
    patient = await UserRepository(session).get_by_id(patient_id)
    if patient is None or patient.doctor_id != current_user.id:
        raise NotFoundError("Patient not found")
    return await _achievements_for(session, patient_id)
