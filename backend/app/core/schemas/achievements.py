# app/core/schemas/achievements.py
"""Условия получения достижений.

Поле ``Achievement.requirement`` хранит JSON вида ``{"type": "...", ...}``.
Здесь он превращается в один из вариантов ``Requirement`` (дискриминатор
``type``), чтобы сервис достижений работал с типизированными данными, а не
с произвольными словарями.
"""
from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class FirstLogRequirement(BaseModel):
    type: Literal["first_log"] = "first_log"

class PerfectDayRequirement(BaseModel):
    type: Literal["perfect_day"] = "perfect_day"

class WeekStreakRequirement(BaseModel):
    type: Literal["week_streak"] = "week_streak"

class TwoWeekStreakRequirement(BaseModel):
    type: Literal["two_week_streak"] = "two_week_streak"

class MonthStreakRequirement(BaseModel):
    type: Literal["month_streak"] = "month_streak"

class ThreeMonthStreakRequirement(BaseModel):
    type: Literal["three_month_streak"] = "three_month_streak"

class TotalDaysRequirement(BaseModel):
    type: Literal["total_days"] = "total_days"
    days: int = Field(..., ge=1)

class ComplianceRateRequirement(BaseModel):
    type: Literal["compliance_rate"] = "compliance_rate"
    days: int = Field(30, ge=1)
    rate: float = Field(..., ge=0, le=100)

class FirstAlignerPhotosRequirement(BaseModel):
    type: Literal["first_aligner_photos"] = "first_aligner_photos"

class LastAlignerPhotosRequirement(BaseModel):
    type: Literal["last_aligner_photos"] = "last_aligner_photos"


Requirement = Annotated[
    Union[
        FirstLogRequirement,
        PerfectDayRequirement,
        WeekStreakRequirement,
        TwoWeekStreakRequirement,
        MonthStreakRequirement,
        ThreeMonthStreakRequirement,
        TotalDaysRequirement,
        ComplianceRateRequirement,
        FirstAlignerPhotosRequirement,
        LastAlignerPhotosRequirement,
    ],
    Field(discriminator="type"),
]

# Минимальная длина серии для каждого варианта со стриком
STREAK_THRESHOLDS: dict[type, int] = {
    WeekStreakRequirement: 7,
    TwoWeekStreakRequirement: 14,
    MonthStreakRequirement: 30,
    ThreeMonthStreakRequirement: 90,
}

_requirement_adapter = TypeAdapter(Requirement)


def parse_requirement(raw) -> Requirement:
    """Разбирает requirement из БД (dict или JSON-строка). Бросает pydantic.ValidationError."""
    if isinstance(raw, (str, bytes)):
        return _requirement_adapter.validate_json(raw)
    return _requirement_adapter.validate_python(raw)


class AchievementResponse(BaseModel):
    id: int
    name: str
    description: str
    icon: str
    requirement: dict
    unlocked: bool = False
    unlocked_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
