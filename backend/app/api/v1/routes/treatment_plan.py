# app/api/v1/routes/treatment_plan.py
from datetime import date
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.core.database import db_helper
from app.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from app.core.utils import get_current_user, require_roles
from app.core.schemas.tracking import TreatmentPlanCreate, TreatmentPlanUpdate, TreatmentPlanResponse
from app.models.user import User, UserRole
from app.repositories.tracking_repository import TrackingRepository
from app.repositories.user_repository import UserRepository
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/treatment-plan", tags=["treatment-plan"])

@router.get("/")
async def get_treatment_plan(
    session: AsyncSession = Depends(db_helper.session_getter),
    current_user: User = Depends(get_current_user),
):
    """План текущего пользователя или {} если его ещё нет"""
    plan = await TrackingRepository(session).get_plan(current_user.id)
    if plan is None:
        return {}
    return TreatmentPlanResponse.model_validate(plan)

@router.post("/", response_model=TreatmentPlanResponse)
async def save_treatment_plan(
    payload: TreatmentPlanCreate,
    session: AsyncSession = Depends(db_helper.session_getter),
    current_user: User = Depends(require_roles(UserRole.PATIENT)),
):
    return await TrackingRepository(session).upsert_plan(
        current_user.id,
        start_date=payload.start_date,
        total_aligners=payload.total_aligners,
        aligner_change_interval=payload.aligner_change_interval,
        daily_wear_time_goal=payload.daily_wear_time_goal or settings.achievements.DEFAULT_DAILY_WEAR_GOAL,
    )

@router.patch("/{patient_id}", response_model=TreatmentPlanResponse)
async def update_patient_plan(
    patient_id: int,
    payload: TreatmentPlanUpdate,
    session: AsyncSession = Depends(db_helper.session_getter),
    current_user: User = Depends(require_roles(UserRole.DOCTOR, UserRole.ADMIN)),
):
    """Врач меняет план своего пациента (админ любого)"""
    patient = await UserRepository(session).get_by_id(patient_id)
    if patient is None or patient.role != UserRole.PATIENT.value:
        raise NotFoundError("Patient not found")
    if current_user.role == UserRole.DOCTOR.value and patient.doctor_id != current_user.id:
        raise AuthorizationError("Patient is not linked to this doctor")

    repo = TrackingRepository(session)
    plan = await repo.get_plan(patient_id)
    if plan is None:
        raise NotFoundError("Treatment plan not found")

    fields = payload.model_dump(exclude_none=True)
    logger.info(f"User {current_user.id} updates plan of patient {patient_id}: {fields}")
    return await repo.update_plan(plan, **fields)

@router.post("/change-aligner", response_model=TreatmentPlanResponse)
async def change_aligner(
    session: AsyncSession = Depends(db_helper.session_getter),
    current_user: User = Depends(require_roles(UserRole.PATIENT)),
):
    """Пациент переходит на следующий элайнер"""
    repo = TrackingRepository(session)
    plan = await repo.get_plan(current_user.id)
    if plan is None:
        raise NotFoundError("Treatment plan not found")
    if plan.current_aligner >= plan.total_aligners:
        raise ValidationError("Already on the last aligner")

    plan = await repo.advance_aligner(plan, date.today())
    logger.info(f"User {current_user.id} switched to aligner {plan.current_aligner}/{plan.total_aligners}")
    return plan
