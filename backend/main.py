# main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from datetime import datetime, timezone
from contextlib import asynccontextmanager
from sqlalchemy import text
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import logging
from app.core.admin import setup_admin
from app.api.v1.routes import api_router
from app.api.v1.routes.auth import limiter
from app.core.config import settings
from app.core.database import db_helper
from app.core.exceptions import AppException

# Настройка логирования
logging.basicConfig(
    level=logging.INFO if settings.debug else logging.WARNING,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

def _now() -> str:
    return datetime.now(timezone.utc).isoformat()

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Контекстный менеджер для жизненного цикла приложения"""
    logger.info(f"🚀 Starting {settings.app_name} in {'DEBUG' if settings.debug else 'PRODUCTION'} mode")
    logger.info(f"📝 Database: {settings.db.DB_HOST}:{settings.db.DB_PORT}/{settings.db.DB_NAME}")
    logger.info(f"🔔 Push notifications: {'enabled' if settings.push.enabled else 'disabled'}")

    # Проверка подключения к базе данных при старте
    try:
        async with db_helper.session_factory() as session:
            await session.execute(text("SELECT 1"))
        logger.info("✅ Database connection successful")
    except Exception as e:
        logger.error(f"❌ Database connection failed: {e}")
        raise

    yield

    await db_helper.dispose()
    logger.info("👋 Application shutdown complete")

app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")
setup_admin(app, db_helper.engine)

@app.get("/", summary="Root endpoint", tags=["root"])
async def root():
    return {
        "message": f"Welcome to {settings.app_name} API",
        "environment": "development" if settings.debug else "production",
        "timestamp": _now(),
    }

@app.get("/health", summary="Health check", tags=["health"])
async def health_check():
    """Проверка здоровья приложения"""
    try:
        async with db_helper.session_factory() as session:
            await session.execute(text("SELECT 1"))
        return {"status": "healthy", "database": "connected", "timestamp": _now()}
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "database": "connection failed",
                "error": str(e) if settings.debug else "Database connection error",
                "timestamp": _now(),
            },
        )

@app.exception_handler(AppException)
async def app_exception_handler(request, exc: AppException):
    """Глобальный обработчик кастомных исключений"""
    logger.error(f"AppException: {exc.detail} (type: {type(exc).__name__})")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "detail": exc.detail,
            "error": type(exc).__name__,
            "timestamp": _now(),
        }
    )

@app.exception_handler(Exception)
async def global_exception_handler(request, exc: Exception):
    """Глобальный обработчик всех исключений"""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error": "InternalServerError",
            "timestamp": _now(),
            "debug_info": str(exc) if settings.debug else None
        }
    )

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level="info" if settings.debug else "warning",
        access_log=False
    )
