from pydantic_settings import BaseSettings
from pydantic import BaseModel, Field, SecretStr
from typing import List, Optional
from functools import lru_cache

class DataBaseConfig(BaseModel):
    DB_HOST: str = Field(..., description="Database host")
    DB_PORT: int = Field(5432, description="Database port")
    DB_NAME: str = Field(..., description="Database name")
    DB_USER: str = Field(..., description="Database user")
    DB_PASSWORD: SecretStr = Field(..., description="Database password")  # SecretStr скрывает значение в логах
    DB_ECHO: bool = Field(False, description="Enable SQL echo")
    DB_POOL_SIZE: int = Field(5, description="Database pool size")
    DB_MAX_OVERFLOW: int = Field(10, description="Database max overflow")

    @property
    def DATABASE_URL(self) -> str:
        return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD.get_secret_value()}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    naming_convention: dict[str, str] = {
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_N_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }

class SecurityConfig(BaseModel):
    JWT_SECRET_KEY: SecretStr = Field(..., description="JWT secret key")
    JWT_ALGORITHM: str = Field("HS256", description="JWT algorithm")
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(30, description="Access token expiration")
    JWT_REFRESH_TOKEN_EXPIRE_DAYS: int = Field(7, description="Refresh token expiration")

class PushConfig(BaseModel):
    # Без сервисного аккаунта пуши не отправляются, пишутся только уведомления в БД
    FIREBASE_CREDENTIALS_PATH: Optional[str] = Field(None, description="Path to Firebase service account JSON")
    FIREBASE_APP_NAME: str = Field("aligner-tracker", description="Firebase app name")

    @property
    def enabled(self) -> bool:
        return bool(self.FIREBASE_CREDENTIALS_PATH)

class AchievementsConfig(BaseModel):
    DEFAULT_DAILY_WEAR_GOAL: float = Field(22, description="Daily wear goal (hours) when user has no treatment plan")
    DEFAULT_TOTAL_ALIGNERS: int = Field(20, description="Total aligners when user has no treatment plan")
    LOG_WINDOW: int = Field(365, description="How many recent wear-time logs the evaluator reads")

class InvitationsConfig(BaseModel):
    FRONTEND_URL: str = Field("http://localhost:3000", description="Base URL for invite links")
    CODE_PREFIX: str = Field("SS", description="Prefix of doctor invite codes")
    MAX_USES: int = Field(1, ge=1, description="How many patients one invite code can connect")

class Settings(BaseSettings):
    app_name: str = Field("Aligner Tracker", description="Application name")
    debug: bool = Field(False, description="Debug mode")
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:5137",
            "http://localhost:3000",
        ],
        description="CORS origins"
    )

    db: DataBaseConfig
    security: SecurityConfig
    push: PushConfig = PushConfig()
    achievements: AchievementsConfig = AchievementsConfig()
    invitations: InvitationsConfig = InvitationsConfig()

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        case_sensitive = False
        env_nested_delimiter = '__'  # Для вложенных объектов

@lru_cache()
def get_settings() -> Settings:
    """Кэшированный экземпляр настроек"""
    return Settings()

settings = get_settings()
