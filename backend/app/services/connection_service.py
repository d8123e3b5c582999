# app/services/connection_service.py
from typing import Callable, List, Optional
from datetime import datetime, timedelta, timezone
import logging
import secrets
from app.core.config import settings
from app.core.exceptions import NotFoundError, ValidationError
from app.core.schemas.connections import InvitationResponse
from app.repositories.user_repository import UserRepository
from app.models.user import User, UserRole, DoctorInvitation

logger = logging.getLogger(__name__)


def generate_invite_code(prefix: str) -> str:
    """Код вида SS-1A2B-3C4D"""
    code = secrets.token_hex(4).upper()
    return f"{prefix}-{code[:4]}-{code[4:]}"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite отдаёт datetime без tzinfo
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class ConnectionService:
    """Связь врач - пациент через коды приглашений"""

    def __init__(self, user_repository: UserRepository, now: Callable[[], datetime] = _utc_now):
        self.user_repository = user_repository
        self.now = now

    async def create_invitation(
        self, doctor: User, invite_type: str = "code", expires_in_days: Optional[int] = None
    ) -> DoctorInvitation:
        expires_at = None
        if expires_in_days:
            expires_at = self.now() + timedelta(days=expires_in_days)

        invitation = await self.user_repository.create_invitation(
            doctor_id=doctor.id,
            invite_code=generate_invite_code(settings.invitations.CODE_PREFIX),
            invite_type=invite_type,
            expires_at=expires_at,
            max_uses=settings.invitations.MAX_USES,
        )
        logger.info(f"Doctor {doctor.id} created invitation {invitation.invite_code}")
        return invitation

    async def list_invitations(self, doctor: User) -> List[DoctorInvitation]:
        return await self.user_repository.list_invitations(doctor.id)

    async def connect(self, patient: User, invite_code: str) -> User:
        """Привязывает пациента к врачу по коду. Возвращает врача."""
        invitation = await self.user_repository.get_invitation_by_code(invite_code.strip().upper())
        if invitation is None:
            raise NotFoundError("Invalid invite code")

        now = self.now()
        if invitation.expires_at and _as_utc(invitation.expires_at) < now:
            raise ValidationError("This invitation has expired")
        if invitation.current_uses >= invitation.max_uses:
            raise ValidationError("This invitation has already been used")
        if patient.doctor_id == invitation.doctor_id:
            raise ValidationError("You are already connected to this doctor")

        doctor_id = invitation.doctor_id
        await self.user_repository.connect_patient(patient, invitation, now)
        logger.info(f"Patient {patient.id} connected to doctor {doctor_id}")
        return await self.user_repository.get_by_id(doctor_id)

    async def get_doctor(self, patient: User) -> Optional[User]:
        if patient.doctor_id is None:
            return None
        doctor = await self.user_repository.get_by_id(patient.doctor_id)
        if doctor is None or doctor.role != UserRole.DOCTOR.value:
            return None
        return doctor

    @staticmethod
    def to_response(invitation: DoctorInvitation) -> InvitationResponse:
        base_url = settings.invitations.FRONTEND_URL.rstrip("/")
        return InvitationResponse(
            id=invitation.id,
            code=invitation.invite_code,
            type=invitation.invite_type,
            expires_at=invitation.expires_at,
            max_uses=invitation.max_uses,
            current_uses=invitation.current_uses,
            invite_link=f"{base_url}/connect?code={invitation.invite_code}",
        )
