# app/api/v1/routes/connections.py
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.api.v1.routes.auth import limiter
from app.core.database import db_helper
from app.core.utils import require_roles
from app.core.schemas.connections import (
    InvitationCreate,
    InvitationResponse,
    ConnectRequest,
    ConnectionResponse,
    DoctorInfo,
)
from app.models.user import User, UserRole
from app.repositories.user_repository import UserRepository
from app.services.connection_service import ConnectionService

router = APIRouter(tags=["connections"])

@router.post("/doctor/invitations", response_model=InvitationResponse, status_code=status.HTTP_201_CREATED)
async def create_invitation(
    payload: InvitationCreate,
    session: AsyncSession = Depends(db_helper.session_getter),
    current_user: User = Depends(require_roles(UserRole.DOCTOR)),
):
    service = ConnectionService(UserRepository(session))
    invitation = await service.create_invitation(current_user, payload.invite_type, payload.expires_in_days)
    return service.to_response(invitation)

@router.get("/doctor/invitations", response_model=list[InvitationResponse])
async def list_invitations(
    session: AsyncSession = Depends(db_helper.session_getter),
    current_user: User = Depends(require_roles(UserRole.DOCTOR)),
):
    service = ConnectionService(UserRepository(session))
    return [service.to_response(i) for i in await service.list_invitations(current_user)]

@router.post("/patient/connect", response_model=ConnectionResponse)
@limiter.limit("10/minute")
async def connect_to_doctor(
    request: Request,
    payload: ConnectRequest,
    session: AsyncSession = Depends(db_helper.session_getter),
    current_user: User = Depends(require_roles(UserRole.PATIENT)),
):
    """Пациент вводит код приглашения врача"""
    doctor = await ConnectionService(UserRepository(session)).connect(current_user, payload.invite_code)
    return ConnectionResponse(connected=True, doctor=DoctorInfo.model_validate(doctor))

@router.get("/patient/connect", response_model=ConnectionResponse)
async def get_connection(
    session: AsyncSession = Depends(db_helper.session_getter),
    current_user: User = Depends(require_roles(UserRole.PATIENT)),
):
    doctor = await ConnectionService(UserRepository(session)).get_doctor(current_user)
    if doctor is None:
        return ConnectionResponse(connected=False)
    return ConnectionResponse(connected=True, doctor=DoctorInfo.model_validate(doctor))
