# app/services/auth_service.py
from typing import Tuple
from datetime import timedelta
import logging
from app.core.security import (
    get_password_hash,
    verify_password,
    create_access_token,
    create_refresh_token,
    decode_token
)
from app.repositories.user_repository import UserRepository
from app.core.schemas.auth import UserCreate, Token
from app.core.config import settings
from app.core.exceptions import AuthenticationError, ValidationError
from app.models.user import User

logger = logging.getLogger(__name__)

# Хеш для сравнения, когда пользователь не найден: время ответа не выдаёт существование email
_DUMMY_HASH = get_password_hash("dummy-password-0")

class AuthService:
    def __init__(self, user_repository: UserRepository):
        self.user_repository = user_repository

    async def register_user(self, user_create: UserCreate) -> Tuple[User, Token]:
        """Регистрация нового пациента"""
        existing_user = await self.user_repository.get_by_email(user_create.email)
        if existing_user:
            raise ValidationError("User with this email already exists")

        password_hash = get_password_hash(user_create.password)
        user = await self.user_repository.create(user_create, password_hash)
        return user, self._generate_tokens(user)

    async def authenticate_user(self, email: str, password: str) -> Tuple[User, Token]:
        """Проверка email и пароля, выдача пары токенов"""
        user = await self.user_repository.get_by_email(email.lower())
        if not user:
            verify_password(password, _DUMMY_HASH)
            raise AuthenticationError("Invalid email or password")

        if not verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid email or password")

        return user, self._generate_tokens(user)

    async def refresh_tokens(self, refresh_token: str) -> Token:
        """Обновление access token с помощью refresh token"""
        user = await self._user_from_token(refresh_token, expected_type="refresh")
        return self._generate_tokens(user)

    async def get_current_user(self, token: str) -> User:
        """Получение текущего пользователя из access token"""
        return await self._user_from_token(token, expected_type="access")

    async def _user_from_token(self, token: str, expected_type: str) -> User:
        try:
            payload = decode_token(token)
        except ValueError as e:
            raise AuthenticationError(str(e))

        if payload.get("type") != expected_type:
            raise AuthenticationError("Invalid token type")

        user_id = payload.get("sub")
        if not user_id:
            raise AuthenticationError("Invalid token payload")

        user = await self.user_repository.get_by_id(int(user_id))
        if not user:
            raise AuthenticationError("User not found")
        return user

    def _generate_tokens(self, user: User) -> Token:
        """Генерация пары access/refresh токенов"""
        access_token_expires = timedelta(
            minutes=settings.security.JWT_ACCESS_TOKEN_EXPIRE_MINUTES
        )
        return Token(
            access_token=create_access_token(user.id, user.role, access_token_expires),
            refresh_token=create_refresh_token(user.id),
            expires_in=int(access_token_expires.total_seconds())
        )
