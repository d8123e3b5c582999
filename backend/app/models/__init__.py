# app/models/__init__.py
from .base import Base
from .user import User, UserRole, DoctorInvitation
from .treatment import TreatmentPlan, WearTimeLog, ProgressPhoto, SymptomLog
from .engagement import Achievement, UserAchievement
from .system import Notification, FCMToken

# Этот список нужен, чтобы IDE и инструменты видели, что экспортируется
__all__ = [
    "Base",
    "User", "UserRole", "DoctorInvitation",
    "TreatmentPlan", "WearTimeLog", "ProgressPhoto", "SymptomLog",
    "Achievement", "UserAchievement",
    "Notification", "FCMToken",
]
