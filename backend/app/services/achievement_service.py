"""Выдача достижений пациентам.

AchievementEvaluator получает id пользователя, читает его журнал ношения,
план лечения, фото прогресса и уже полученные достижения, проверяет условие
каждого ещё закрытого достижения и записывает новые. Вызывается из роутов
после записи времени ношения или загрузки фото и никогда не роняет запрос:
любая ошибка логируется, проверка для этого вызова прекращается.

Хранилище и отправка уведомлений передаются снаружи (AchievementStore,
Notifier), поэтому сервис тестируется без базы и без Firebase.
"""
from dataclasses import dataclass, field
from datetime import date
from functools import cached_property
from typing import Any, Callable, NamedTuple, Optional, Protocol, Sequence
import logging

from pydantic import ValidationError as PydanticValidationError

from app.core.config import settings
from app.core.schemas.achievements import (
    ComplianceRateRequirement,
    FirstAlignerPhotosRequirement,
    FirstLogRequirement,
    LastAlignerPhotosRequirement,
    PerfectDayRequirement,
    Requirement,
    STREAK_THRESHOLDS,
    TotalDaysRequirement,
    parse_requirement,
)
from app.models.user import UserRole
from app.services.streaks import calculate_streak, compliance_rate, is_compliant

logger = logging.getLogger(__name__)

ACHIEVEMENT_TITLE = "Achievement Unlocked! 🎉"


class WearTimeEntry(NamedTuple):
    date: date
    hours_worn: float

class PlanSnapshot(NamedTuple):
    daily_wear_time_goal: Optional[float]
    total_aligners: Optional[int]

@dataclass(frozen=True)
class AchievementDefinition:
    id: int
    name: str
    description: str
    icon: str
    requirement: Any


class AchievementStore(Protocol):
    """Чтение данных пользователя и запись полученных достижений."""

    async def get_wear_time_logs(self, user_id: int, limit: int) -> Sequence[WearTimeEntry]: ...

    async def get_treatment_plan(self, user_id: int) -> Optional[PlanSnapshot]: ...

    async def get_unlocked_achievement_ids(self, user_id: int) -> set[int]: ...

    async def get_achievements(self) -> Sequence[AchievementDefinition]: ...

    async def get_photo_aligner_numbers(self, user_id: int) -> set[int]: ...

    async def get_user_role(self, user_id: int) -> Optional[str]: ...

    async def unlock_achievement(self, user_id: int, achievement_id: int) -> bool:
        """True если запись создана, False если такая уже есть."""
        ...


class Notifier(Protocol):
    async def notify_user(
        self, user_id: int, title: str, body: str, data: Optional[dict[str, str]] = None
    ) -> None: ...


@dataclass
class EvaluationContext:
    """Всё, что нужно для проверки условий, уже загружено из хранилища."""
    logs: Sequence[WearTimeEntry]  # от новых к старым
    goal: float
    total_aligners: int
    photo_aligner_numbers: set[int] = field(default_factory=set)
    today: date = field(default_factory=date.today)

    @cached_property
    def streak(self) -> int:
        return calculate_streak(self.logs, self.goal, self.today)


def requirement_met(requirement: Requirement, context: EvaluationContext) -> bool:
    """Проверяет одно условие достижения."""
    if isinstance(requirement, FirstLogRequirement):
        return len(context.logs) >= 1
    if isinstance(requirement, PerfectDayRequirement):
        return any(is_compliant(log, context.goal) for log in context.logs)
    if type(requirement) in STREAK_THRESHOLDS:
        return context.streak >= STREAK_THRESHOLDS[type(requirement)]
    if isinstance(requirement, TotalDaysRequirement):
        return len(context.logs) >= requirement.days
    if isinstance(requirement, ComplianceRateRequirement):
        rate = compliance_rate(context.logs, context.goal, requirement.days)
        return rate >= requirement.rate
    if isinstance(requirement, FirstAlignerPhotosRequirement):
        return 1 in context.photo_aligner_numbers
    if isinstance(requirement, LastAlignerPhotosRequirement):
        return context.total_aligners in context.photo_aligner_numbers
    return False


class AchievementEvaluator:
    def __init__(
        self,
        store: AchievementStore,
        notifier: Notifier,
        clock: Callable[[], date] = date.today,
        log_window: Optional[int] = None,
        default_goal: Optional[float] = None,
        default_total_aligners: Optional[int] = None,
    ):
        self.store = store
        self.notifier = notifier
        self.clock = clock
        self.log_window = log_window or settings.achievements.LOG_WINDOW
        self.default_goal = default_goal or settings.achievements.DEFAULT_DAILY_WEAR_GOAL
        self.default_total_aligners = (
            default_total_aligners or settings.achievements.DEFAULT_TOTAL_ALIGNERS
        )

    async def evaluate(self, user_id: int) -> list[AchievementDefinition]:
        """Открывает все достижения, условия которых выполнены.

        Возвращает открытые в этом вызове достижения (роуты результат не
        используют). Исключения наружу не пробрасываются.
        """
        unlocked: list[AchievementDefinition] = []
        try:
            context, locked, role = await self._load(user_id)

            for achievement in locked:
                try:
                    requirement = parse_requirement(achievement.requirement)
                except PydanticValidationError as e:
                    logger.warning(
                        f"Skipping achievement {achievement.id} with bad requirement "
                        f"{achievement.requirement!r}: {e.error_count()} error(s)"
                    )
                    continue

                if not requirement_met(requirement, context):
                    continue

                created = await self.store.unlock_achievement(user_id, achievement.id)
                if not created:
                    logger.info(f"Achievement {achievement.id} already unlocked for user {user_id}")
                    continue

                logger.info(f"User {user_id} unlocked achievement '{achievement.name}'")
                unlocked.append(achievement)
                await self._notify(user_id, role, achievement)
        except Exception as e:
            logger.exception(f"Error checking achievements for user {user_id}: {e}")

        return unlocked

    async def _load(self, user_id: int):
        logs = await self.store.get_wear_time_logs(user_id, limit=self.log_window)
        plan = await self.store.get_treatment_plan(user_id)
        unlocked_ids = await self.store.get_unlocked_achievement_ids(user_id)
        photo_numbers = await self.store.get_photo_aligner_numbers(user_id)
        catalog = await self.store.get_achievements()
        role = await self.store.get_user_role(user_id)

        goal = self.default_goal
        total_aligners = self.default_total_aligners
        if plan is not None:
            goal = plan.daily_wear_time_goal or goal
            total_aligners = plan.total_aligners or total_aligners

        context = EvaluationContext(
            logs=sorted(logs, key=lambda log: log.date, reverse=True),
            goal=goal,
            total_aligners=total_aligners,
            photo_aligner_numbers=set(photo_numbers),
            today=self.clock(),
        )
        locked = [a for a in catalog if a.id not in unlocked_ids]
        return context, locked, role

    async def _notify(self, user_id: int, role: Optional[str], achievement: AchievementDefinition):
        # Уведомляем только пациентов
        if role != UserRole.PATIENT.value:
            return
        try:
            await self.notifier.notify_user(
                user_id,
                ACHIEVEMENT_TITLE,
                f'Congratulations! You unlocked "{achievement.name}"',
                data={
                    "type": "achievement",
                    "achievementName": achievement.name,
                    "icon": achievement.icon,
                },
            )
        except Exception as e:
            logger.error(f"Failed to send achievement notification to user {user_id}: {e}")
