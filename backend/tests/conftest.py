"""Shared fixtures for backend tests."""

import json
import os

# Настройки читаются при импорте app.*, поэтому окружение задаём до импортов
os.environ.setdefault(
    "DB",
    json.dumps({
        "DB_HOST": "localhost",
        "DB_NAME": "aligner_test",
        "DB_USER": "test",
        "DB_PASSWORD": "test",
    }),
)
os.environ.setdefault("SECURITY", json.dumps({"JWT_SECRET_KEY": "test-secret-key-for-jwt-signing"}))

from datetime import date, timedelta
from typing import Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.models import Base, User, UserRole
from app.services.achievement_service import (
    AchievementDefinition,
    PlanSnapshot,
    WearTimeEntry,
)
from app.services.achievement_catalog import ACHIEVEMENTS

TODAY = date(2026, 3, 15)


class FakeAchievementStore:
    """In-memory AchievementStore."""

    def __init__(self, catalog=None, role: Optional[str] = UserRole.PATIENT.value):
        self.logs: list[WearTimeEntry] = []
        self.plan: Optional[PlanSnapshot] = None
        self.photo_numbers: set[int] = set()
        self.unlocked: set[int] = set()
        self.role = role
        self.unlock_calls: list[int] = []
        self.fail_reads = False
        self.catalog = catalog if catalog is not None else [
            AchievementDefinition(id=i, **entry) for i, entry in enumerate(ACHIEVEMENTS, start=1)
        ]

    def add_log(self, day: date, hours: float) -> None:
        self.logs = [log for log in self.logs if log.date != day]
        self.logs.append(WearTimeEntry(day, hours))

    async def get_wear_time_logs(self, user_id, limit):
        if self.fail_reads:
            raise ConnectionError("database is down")
        return sorted(self.logs, key=lambda log: log.date, reverse=True)[:limit]

    async def get_treatment_plan(self, user_id):
        return self.plan

    async def get_unlocked_achievement_ids(self, user_id):
        return set(self.unlocked)

    async def get_achievements(self):
        return list(self.catalog)

    async def get_photo_aligner_numbers(self, user_id):
        return set(self.photo_numbers)

    async def get_user_role(self, user_id):
        return self.role

    async def unlock_achievement(self, user_id, achievement_id):
        self.unlock_calls.append(achievement_id)
        if achievement_id in self.unlocked:
            return False
        self.unlocked.add(achievement_id)
        return True


class FakeNotifier:
    def __init__(self, fail: bool = False):
        self.sent: list[dict] = []
        self.fail = fail

    async def notify_user(self, user_id, title, body, data=None):
        if self.fail:
            raise RuntimeError("push transport unavailable")
        self.sent.append({"user_id": user_id, "title": title, "body": body, "data": data})


def days_back(count: int, hours: float = 23, start: date = TODAY) -> list[tuple[date, float]]:
    """count consecutive days ending at start, newest first."""
    return [(start - timedelta(days=i), hours) for i in range(count)]


@pytest.fixture
def store() -> FakeAchievementStore:
    return FakeAchievementStore()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    factory = async_sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def patient(session) -> User:
    user = User(email="anna@alignmail.com", password_hash="x", full_name="Anna", role=UserRole.PATIENT.value)
    session.add(user)
    await session.commit()
    return user
