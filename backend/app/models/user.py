# app/models/user.py
from sqlalchemy import Column, Integer, String, DateTime, func, ForeignKey
from sqlalchemy.orm import relationship
import enum
from .base import Base

class UserRole(str, enum.Enum):
    PATIENT = "patient"
    DOCTOR = "doctor"
    ADMIN = "admin"

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False) 
    full_name = Column(String, nullable=True)
    role = Column(String, default=UserRole.PATIENT.value, nullable=False) 
    doctor_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    doctor = relationship("User", remote_side=[id], back_populates="patients")
    patients = relationship("User", back_populates="doctor")
    treatment_plan = relationship("TreatmentPlan", back_populates="user", uselist=False)
    achievements = relationship("UserAchievement", back_populates="user")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

class DoctorInvitation(Base):
    """Код приглашения, по которому пациент привязывается к врачу"""
    __tablename__ = "doctor_invitations"

    id = Column(Integer, primary_key=True, index=True)
    doctor_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    invite_code = Column(String, unique=True, nullable=False)
    invite_type = Column(String, default="code", nullable=False) # code, link, qr
    expires_at = Column(DateTime(timezone=True), nullable=True) # None = бессрочно
    max_uses = Column(Integer, default=1, nullable=False)
    current_uses = Column(Integer, default=0, nullable=False)
    used_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    used_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    doctor = relationship("User", foreign_keys=[doctor_id])
