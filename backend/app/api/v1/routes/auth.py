# app/api/v1/routes/auth.py
from fastapi import APIRouter, Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.database import db_helper
from app.core.utils import get_current_user
from app.repositories.user_repository import UserRepository
from app.services.auth_service import AuthService
from app.core.schemas.auth import (
    UserCreate,
    UserResponse,
    Token,
    RefreshTokenRequest,
)
from app.models.user import User
from app.core.exceptions import AuthenticationError, ValidationError
from slowapi import Limiter
from slowapi.util import get_remote_address
import logging

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)

router = APIRouter(prefix="/auth", tags=["authentication"])

@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")
async def register_user(
    request: Request,
    user_create: UserCreate,
    session: AsyncSession = Depends(db_helper.session_getter)
):
    """Регистрация нового пациента"""
    client_ip = request.client.host if request.client else "unknown"
    logger.info(f"Registration attempt from IP: {client_ip} for email: {user_create.email}")

    try:
        auth_service = AuthService(UserRepository(session))
        user, _ = await auth_service.register_user(user_create)
    except ValidationError as e:
        logger.warning(f"Validation error during registration: {e.detail}")
        raise HTTPException(status_code=e.status_code, detail=e.detail)

    logger.info(f"Successful registration for user ID: {user.id}")
    return user

@router.post("/login", response_model=Token)
@limiter.limit("10/minute")
async def login_for_access_token(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: AsyncSession = Depends(db_helper.session_getter)
):
    """Логин пользователя и получение токенов"""
    client_ip = request.client.host if request.client else "unknown"

    try:
        auth_service = AuthService(UserRepository(session))
        user, token = await auth_service.authenticate_user(form_data.username, form_data.password)
    except AuthenticationError as e:
        logger.warning(f"Authentication failed for email: {form_data.username} from IP: {client_ip}")
        raise HTTPException(
            status_code=e.status_code,
            detail=e.detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.info(f"Successful login for user ID: {user.id}")
    return token

@router.post("/refresh", response_model=Token)
@limiter.limit("20/hour")
async def refresh_access_token(
    request: Request,
    refresh_request: RefreshTokenRequest,
    session: AsyncSession = Depends(db_helper.session_getter)
):
    """Обновление access token с помощью refresh token"""
    try:
        auth_service = AuthService(UserRepository(session))
        return await auth_service.refresh_tokens(refresh_request.refresh_token)
    except AuthenticationError as e:
        logger.warning(f"Token refresh failed: {e.detail}")
        raise HTTPException(
            status_code=e.status_code,
            detail=e.detail,
            headers={"WWW-Authenticate": "Bearer"},
        )

@router.get("/me", response_model=UserResponse)
async def read_current_user(current_user: User = Depends(get_current_user)):
    return current_user
