# app/repositories/achievement_repository.py
from typing import Optional, List
import logging
from sqlalchemy import select, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.engagement import Achievement, UserAchievement
from app.models.treatment import TreatmentPlan, WearTimeLog, ProgressPhoto
from app.models.user import User
from app.services.achievement_service import (
    AchievementDefinition,
    PlanSnapshot,
    WearTimeEntry,
)

logger = logging.getLogger(__name__)

class AchievementRepository:
    """Хранилище для AchievementEvaluator поверх AsyncSession.

    Наружу отдаёт простые снимки (NamedTuple/dataclass), а не ORM-объекты:
    после rollback на дубликате ORM-объекты протухают.
    """
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_wear_time_logs(self, user_id: int, limit: int = 365) -> List[WearTimeEntry]:
        """Последние записи ношения, от новых к старым"""
        stmt = (
            select(WearTimeLog.date, WearTimeLog.hours_worn)
            .where(WearTimeLog.user_id == user_id)
            .order_by(WearTimeLog.date.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [WearTimeEntry(row.date, row.hours_worn) for row in result.all()]

    async def get_treatment_plan(self, user_id: int) -> Optional[PlanSnapshot]:
        stmt = select(
            TreatmentPlan.daily_wear_time_goal, TreatmentPlan.total_aligners
        ).where(TreatmentPlan.user_id == user_id)
        row = (await self.session.execute(stmt)).first()
        if row is None:
            return None
        return PlanSnapshot(row.daily_wear_time_goal, row.total_aligners)

    async def get_unlocked_achievement_ids(self, user_id: int) -> set[int]:
        stmt = select(UserAchievement.achievement_id).where(UserAchievement.user_id == user_id)
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def get_achievements(self) -> List[AchievementDefinition]:
        result = await self.session.execute(select(Achievement).order_by(Achievement.id))
        return [
            AchievementDefinition(
                id=a.id,
                name=a.name,
                description=a.description,
                icon=a.icon,
                requirement=a.requirement,
            )
            for a in result.scalars().all()
        ]

    async def get_photo_aligner_numbers(self, user_id: int) -> set[int]:
        stmt = select(ProgressPhoto.aligner_number).where(ProgressPhoto.user_id == user_id).distinct()
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def get_user_role(self, user_id: int) -> Optional[str]:
        result = await self.session.execute(select(User.role).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def unlock_achievement(self, user_id: int, achievement_id: int) -> bool:
        """Записать получение достижения. Каждая запись коммитится отдельно.

        Уникальный индекс (user_id, achievement_id) отсекает параллельную
        выдачу того же достижения; такой дубликат возвращает False.
        """
        self.session.add(UserAchievement(user_id=user_id, achievement_id=achievement_id))
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            logger.info(f"Duplicate unlock ignored: user={user_id} achievement={achievement_id}")
            return False
        return True

    async def get_user_achievements(self, user_id: int) -> List[UserAchievement]:
        stmt = select(UserAchievement).where(UserAchievement.user_id == user_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_catalog(self) -> List[Achievement]:
        result = await self.session.execute(select(Achievement).order_by(Achievement.id))
        return list(result.scalars().all())

    async def upsert_catalog_entry(self, name: str, description: str, icon: str, requirement: dict) -> bool:
        """Добавить достижение, если его ещё нет. Существующие не трогаем. True если создано."""
        stmt = select(Achievement).where(Achievement.name == name)
        existing = (await self.session.execute(stmt)).scalar_one_or_none()
        if existing:
            return False
        self.session.add(Achievement(name=name, description=description, icon=icon, requirement=requirement))
        await self.session.flush()
        return True

    async def clear_catalog(self) -> None:
        """Удалить все достижения вместе с выданными"""
        await self.session.execute(delete(UserAchievement))
        await self.session.execute(delete(Achievement))
        await self.session.flush()
