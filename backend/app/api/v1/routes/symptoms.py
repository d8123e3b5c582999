# app/api/v1/routes/symptoms.py
from datetime import date, timedelta
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.database import db_helper
from app.core.exceptions import NotFoundError
from app.core.utils import require_roles
from app.core.schemas.tracking import SymptomLogCreate, SymptomLogResponse
from app.models.user import User, UserRole
from app.repositories.tracking_repository import TrackingRepository

router = APIRouter(prefix="/symptoms", tags=["symptoms"])

@router.get("/", response_model=list[SymptomLogResponse])
async def get_symptoms(
    days: int = Query(30, ge=1, le=365, description="How many days back to return"),
    session: AsyncSession = Depends(db_helper.session_getter),
    current_user: User = Depends(require_roles(UserRole.PATIENT)),
):
    since = date.today() - timedelta(days=days - 1)
    return await TrackingRepository(session).get_symptoms_since(current_user.id, since)

@router.post("/", response_model=SymptomLogResponse, status_code=status.HTTP_201_CREATED)
async def log_symptom(
    payload: SymptomLogCreate,
    session: AsyncSession = Depends(db_helper.session_getter),
    current_user: User = Depends(require_roles(UserRole.PATIENT)),
):
    return await TrackingRepository(session).create_symptom(
        current_user.id,
        payload.date or date.today(),
        payload.symptom_type,
        payload.severity,
        payload.notes,
    )

@router.delete("/{symptom_id}")
async def delete_symptom(
    symptom_id: int,
    session: AsyncSession = Depends(db_helper.session_getter),
    current_user: User = Depends(require_roles(UserRole.PATIENT)),
):
    if not await TrackingRepository(session).delete_symptom(current_user.id, symptom_id):
        raise NotFoundError("Symptom log not found")
    return {"success": True}
