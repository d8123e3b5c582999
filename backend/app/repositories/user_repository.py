# app/repositories/user_repository.py
from typing import Optional, List
from datetime import datetime
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.user import User, UserRole, DoctorInvitation
from app.core.schemas.auth import UserCreate

class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_email(self, email: str) -> Optional[User]:
        """Получить пользователя по email"""
        stmt = select(User).where(func.lower(User.email) == email.lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: int) -> Optional[User]:
        """Получить пользователя по ID"""
        stmt = select(User).where(User.id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, user_create: UserCreate, password_hash: str, role: UserRole = UserRole.PATIENT) -> User:
        """Создать нового пользователя"""
        db_user = User(
            email=user_create.email.lower(),
            password_hash=password_hash,
            full_name=user_create.full_name,
            role=role.value,
        )
        self.session.add(db_user)
        await self.session.commit()
        await self.session.refresh(db_user)
        return db_user

    async def get_patients_of(self, doctor_id: int) -> List[User]:
        """Пациенты, привязанные к врачу"""
        stmt = (
            select(User)
            .where(User.doctor_id == doctor_id, User.role == UserRole.PATIENT.value)
            .order_by(User.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    # === ПРИГЛАШЕНИЯ ВРАЧЕЙ ===

    async def create_invitation(
        self,
        doctor_id: int,
        invite_code: str,
        invite_type: str,
        expires_at: Optional[datetime],
        max_uses: int,
    ) -> DoctorInvitation:
        invitation = DoctorInvitation(
            doctor_id=doctor_id,
            invite_code=invite_code,
            invite_type=invite_type,
            expires_at=expires_at,
            max_uses=max_uses,
            current_uses=0,
        )
        self.session.add(invitation)
        await self.session.commit()
        await self.session.refresh(invitation)
        return invitation

    async def get_invitation_by_code(self, invite_code: str) -> Optional[DoctorInvitation]:
        stmt = select(DoctorInvitation).where(DoctorInvitation.invite_code == invite_code)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_invitations(self, doctor_id: int) -> List[DoctorInvitation]:
        stmt = (
            select(DoctorInvitation)
            .where(DoctorInvitation.doctor_id == doctor_id)
            .order_by(DoctorInvitation.created_at.desc(), DoctorInvitation.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def connect_patient(self, patient: User, invitation: DoctorInvitation, used_at: datetime) -> User:
        """Привязать пациента к врачу из приглашения и засчитать использование"""
        patient.doctor_id = invitation.doctor_id
        invitation.current_uses += 1
        invitation.used_by = patient.id
        invitation.used_at = used_at
        await self.session.commit()
        await self.session.refresh(patient)
        return patient
