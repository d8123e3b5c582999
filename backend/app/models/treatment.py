# app/models/treatment.py
from sqlalchemy import (
    Column, Integer, String, Float, Date, DateTime, ForeignKey, UniqueConstraint, Text, func
)
from sqlalchemy.orm import relationship
from .base import Base

class TreatmentPlan(Base):
    __tablename__ = "treatment_plans"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    start_date = Column(Date, nullable=True)
    total_aligners = Column(Integer, default=20, nullable=False)
    current_aligner = Column(Integer, default=1, nullable=False)
    aligner_change_interval = Column(Integer, default=14, nullable=False) # дни
    daily_wear_time_goal = Column(Float, default=22, nullable=False) # часы
    last_aligner_change_date = Column(Date, nullable=True)
    next_aligner_change_date = Column(Date, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="treatment_plan")

class WearTimeLog(Base):
    __tablename__ = "wear_time_logs"
    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_wear_time_logs_user_id_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    hours_worn = Column(Float, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<WearTimeLog(user_id={self.user_id}, date={self.date}, hours_worn={self.hours_worn})>"

class ProgressPhoto(Base):
    __tablename__ = "progress_photos"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    aligner_number = Column(Integer, nullable=False)
    photo_type = Column(String, nullable=False) # front, left, right, upper, lower
    storage_path = Column(String, nullable=False) # ключ в объектном хранилище
    captured_at = Column(DateTime(timezone=True), server_default=func.now())

class SymptomLog(Base):
    __tablename__ = "symptom_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    symptom_type = Column(String, nullable=False) # pain, discomfort, soreness, sensitivity, pressure, other
    severity = Column(String, nullable=False) # mild, moderate, severe
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
