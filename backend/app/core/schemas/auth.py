# app/core/schemas/auth.py
from pydantic import BaseModel, EmailStr, Field, ConfigDict, validator
from typing import Optional
from datetime import datetime

class PasswordComplexity:
    """Проверка сложности пароля"""
    MIN_LENGTH = 8
    MAX_LENGTH = 64
    REQUIRE_LETTER = True
    REQUIRE_DIGIT = True

    @classmethod
    def validate(cls, password: str) -> None:
        errors = []

        if len(password) < cls.MIN_LENGTH:
            errors.append(f"Password must be at least {cls.MIN_LENGTH} characters long")
        if len(password) > cls.MAX_LENGTH:
            errors.append(f"Password must be at most {cls.MAX_LENGTH} characters long")
        if cls.REQUIRE_LETTER and not any(c.isalpha() for c in password):
            errors.append("Password must contain at least one letter")
        if cls.REQUIRE_DIGIT and not any(c.isdigit() for c in password):
            errors.append("Password must contain at least one digit")

        weak_passwords = ["password1", "12345678", "qwerty123", "aligner1", "abc12345"]
        if password.lower() in weak_passwords:
            errors.append("Password is too common and easily guessable")

        if errors:
            raise ValueError("; ".join(errors))

class UserCreate(BaseModel):
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")
    full_name: Optional[str] = Field(None, description="Full name", max_length=120)

    @validator('email')
    def lowercase_email(cls, v):
        return v.lower()

    @validator('password')
    def validate_password(cls, v):
        """Валидация сложности пароля"""
        PasswordComplexity.validate(v)
        return v

class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Token expiration time in seconds")

class UserResponse(BaseModel):
    id: int
    email: str
    full_name: Optional[str] = None
    role: str = "patient"
    doctor_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., description="Refresh token for getting new access token")
