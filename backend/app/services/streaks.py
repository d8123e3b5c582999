"""Расчёт серии и процента соблюдения режима по журналу времени ношения.

Чистые функции без доступа к БД: получают список записей (любые объекты с
атрибутами ``date`` и ``hours_worn``) и цель по часам в день.
"""
from datetime import date, datetime, timedelta
from typing import Iterable, Protocol, Sequence


class WearLog(Protocol):
    date: date
    hours_worn: float


def _as_day(value) -> date:
    """Обрезает datetime до календарного дня."""
    if isinstance(value, datetime):
        return value.date()
    return value


def is_compliant(log: WearLog, goal: float) -> bool:
    return log.hours_worn >= goal


def calculate_streak(logs: Iterable[WearLog], goal: float, today: date) -> int:
    """Количество дней подряд, начиная с сегодняшнего, когда цель выполнена.

    Если последняя запись старше вчерашнего дня, серия считается прерванной.
    Обход идёт от сегодняшнего дня назад; первая же запись, которая не
    подходит под ожидаемую дату или не дотягивает до цели, останавливает счёт.
    """
    sorted_logs = sorted(logs, key=lambda log: _as_day(log.date), reverse=True)
    if not sorted_logs:
        return 0

    today = _as_day(today)
    if (today - _as_day(sorted_logs[0].date)).days > 1:
        return 0

    streak = 0
    expected = today
    for log in sorted_logs:
        log_day = _as_day(log.date)
        if log_day > expected:
            # запись из будущего относительно ожидаемой даты, пропускаем
            continue
        if log_day < expected or not is_compliant(log, goal):
            break
        streak += 1
        expected -= timedelta(days=1)

    return streak


def compliance_rate(recent_logs: Sequence[WearLog], goal: float, days: int) -> float:
    """Процент дней с выполненной целью среди последних ``days`` записей.

    Делитель всегда ``days``: недостающие записи считаются невыполненными днями.
    ``recent_logs`` должен быть отсортирован от новых к старым.
    """
    if days <= 0:
        return 0.0
    window = recent_logs[:days]
    compliant_days = sum(1 for log in window if is_compliant(log, goal))
    return compliant_days * 100 / days
