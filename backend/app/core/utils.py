# app/core/utils.py
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.database import db_helper
from app.core.exceptions import AppException
from app.repositories.user_repository import UserRepository
from app.repositories.achievement_repository import AchievementRepository
from app.services.auth_service import AuthService
from app.services.achievement_service import AchievementEvaluator
from app.services.notification_service import PushNotificationService
from app.models.user import User, UserRole
import logging

logger = logging.getLogger(__name__)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/v1/auth/login")

async def get_current_user(
    token: str = Depends(oauth2_scheme),
    session: AsyncSession = Depends(db_helper.session_getter)
) -> User:
    """Зависимость для получения текущего пользователя из токена"""
    try:
        auth_service = AuthService(UserRepository(session))
        return await auth_service.get_current_user(token)
    except AppException as e:
        logger.warning(f"Authentication failed: {e.detail}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

def require_roles(*roles: UserRole):
    """Зависимость: пропускает только пользователей с одной из ролей"""
    allowed = {role.value for role in roles}

    async def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions",
            )
        return current_user

    return checker

def get_achievement_evaluator(
    session: AsyncSession = Depends(db_helper.session_getter)
) -> AchievementEvaluator:
    return AchievementEvaluator(
        store=AchievementRepository(session),
        notifier=PushNotificationService(session),
    )
