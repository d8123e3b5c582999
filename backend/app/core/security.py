# app/core/security.py
import bcrypt
from jose import jwt, JWTError, ExpiredSignatureError
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from app.core.config import settings


def get_password_hash(password: str) -> str:
    """Хеширование пароля с помощью bcrypt"""
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(
        plain_password.encode('utf-8'),
        hashed_password.encode('utf-8')
    )

def _encode(payload: Dict[str, Any]) -> str:
    secret_key = settings.security.JWT_SECRET_KEY.get_secret_value()
    return jwt.encode(payload, secret_key, algorithm=settings.security.JWT_ALGORITHM)

def create_access_token(user_id: int, role: str, expires_delta: Optional[timedelta] = None) -> str:
    """Создание JWT access token, роль кладём в claims для проверок без запроса в БД"""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.security.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode({
        "sub": str(user_id),
        "role": role,
        "exp": datetime.now(timezone.utc) + expires_delta,
        "type": "access",
    })

def create_refresh_token(user_id: int) -> str:
    """Создание JWT refresh token"""
    expire = datetime.now(timezone.utc) + timedelta(
        days=settings.security.JWT_REFRESH_TOKEN_EXPIRE_DAYS
    )
    return _encode({
        "sub": str(user_id),
        "exp": expire,
        "type": "refresh",
        "jti": secrets.token_urlsafe(32)  # Уникальный идентификатор
    })

def decode_token(token: str) -> Dict[str, Any]:
    """Декодирование и валидация JWT токена"""
    try:
        return jwt.decode(
            token,
            settings.security.JWT_SECRET_KEY.get_secret_value(),
            algorithms=[settings.security.JWT_ALGORITHM]
        )
    except ExpiredSignatureError:
        raise ValueError("Token expired")
    except JWTError:
        raise ValueError("Invalid token")
