# app/services/achievement_catalog.py
import logging
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.schemas.achievements import parse_requirement
from app.repositories.achievement_repository import AchievementRepository

logger = logging.getLogger(__name__)

ACHIEVEMENTS = [
    {
        "name": "First Step",
        "description": "Logged your first wear time",
        "icon": "🎯",
        "requirement": {"type": "first_log"},
    },
    {
        "name": "Perfect Day",
        "description": "Reached your daily wear time goal",
        "icon": "⭐",
        "requirement": {"type": "perfect_day"},
    },
    {
        "name": "Week Warrior",
        "description": "Achieved 7 consecutive days of compliance",
        "icon": "🔥",
        "requirement": {"type": "week_streak"},
    },
    {
        "name": "Two Week Champion",
        "description": "Achieved 14 consecutive days of compliance",
        "icon": "💪",
        "requirement": {"type": "two_week_streak"},
    },
    {
        "name": "Monthly Master",
        "description": "Achieved 30 consecutive days of compliance",
        "icon": "🏆",
        "requirement": {"type": "month_streak"},
    },
    {
        "name": "Three Month Legend",
        "description": "Achieved 90 consecutive days of compliance",
        "icon": "👑",
        "requirement": {"type": "three_month_streak"},
    },
    {
        "name": "Committed",
        "description": "Tracked your wear time for 30 days",
        "icon": "📅",
        "requirement": {"type": "total_days", "days": 30},
    },
    {
        "name": "Consistency King",
        "description": "Maintained 90% compliance over 30 days",
        "icon": "🎊",
        "requirement": {"type": "compliance_rate", "days": 30, "rate": 90},
    },
    {
        "name": "Picture Perfect Start",
        "description": "Captured your first aligner photos",
        "icon": "📸",
        "requirement": {"type": "first_aligner_photos"},
    },
    {
        "name": "Journey Complete",
        "description": "Captured your final aligner photos",
        "icon": "🎓",
        "requirement": {"type": "last_aligner_photos"},
    },
]


async def seed_achievements(session: AsyncSession, reset: bool = False) -> int:
    """Заполняет каталог достижений. С reset=True сначала удаляет всё, включая выданные.

    Возвращает количество созданных записей.
    """
    repo = AchievementRepository(session)
    if reset:
        logger.warning("Removing all achievements and unlocks")
        await repo.clear_catalog()

    created = 0
    for entry in ACHIEVEMENTS:
        # валидируем до записи, чтобы в БД не попало неизвестное условие
        parse_requirement(entry["requirement"])
        if await repo.upsert_catalog_entry(**entry):
            created += 1

    await session.commit()
    logger.info(f"Achievement catalog seeded: {created} created, {len(ACHIEVEMENTS) - created} already present")
    return created
