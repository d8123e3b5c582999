"""Streak and compliance helpers."""

from datetime import datetime, timedelta

from app.services.achievement_service import WearTimeEntry
from app.services.streaks import calculate_streak, compliance_rate

from .conftest import TODAY, days_back

GOAL = 22


def entries(pairs):
    return [WearTimeEntry(day, hours) for day, hours in pairs]


def test_no_logs_means_no_streak():
    assert calculate_streak([], GOAL, TODAY) == 0


def test_three_compliant_days_ending_today():
    logs = entries(days_back(3))
    assert calculate_streak(logs, GOAL, TODAY) == 3


def test_low_hours_on_third_day_stops_streak():
    logs = entries([
        (TODAY, 23),
        (TODAY - timedelta(days=1), 22),
        (TODAY - timedelta(days=2), 20),
        (TODAY - timedelta(days=3), 23),
    ])
    assert calculate_streak(logs, GOAL, TODAY) == 2


def test_low_hours_today_gives_zero():
    logs = entries([(TODAY, 21.5), (TODAY - timedelta(days=1), 23)])
    assert calculate_streak(logs, GOAL, TODAY) == 0


def test_most_recent_log_two_days_ago_resets_streak():
    logs = entries(days_back(10, start=TODAY - timedelta(days=2)))
    assert calculate_streak(logs, GOAL, TODAY) == 0


def test_streak_counts_from_today_only():
    # последняя запись вчера: серия начинается с сегодняшнего дня и пока пуста
    logs = entries(days_back(5, start=TODAY - timedelta(days=1)))
    assert calculate_streak(logs, GOAL, TODAY) == 0


def test_missing_day_is_a_gap():
    logs = entries([
        (TODAY, 23),
        (TODAY - timedelta(days=1), 23),
        (TODAY - timedelta(days=3), 23),
    ])
    assert calculate_streak(logs, GOAL, TODAY) == 2


def test_unsorted_input_is_sorted():
    logs = entries(reversed(days_back(4)))
    assert calculate_streak(logs, GOAL, TODAY) == 4


def test_future_log_is_skipped():
    logs = entries([(TODAY + timedelta(days=1), 23)] + days_back(2))
    assert calculate_streak(logs, GOAL, TODAY) == 2


def test_datetime_values_are_truncated_to_days():
    logs = [
        WearTimeEntry(datetime(TODAY.year, TODAY.month, TODAY.day, 9, 30), 23),
        WearTimeEntry(datetime(TODAY.year, TODAY.month, TODAY.day - 1, 0, 0), 23),
    ]
    assert calculate_streak(logs, GOAL, datetime(TODAY.year, TODAY.month, TODAY.day, 18)) == 2


def test_compliance_rate_27_of_30():
    pairs = days_back(27) + days_back(3, hours=20, start=TODAY - timedelta(days=27))
    assert compliance_rate(entries(pairs), GOAL, 30) == 90


def test_compliance_rate_only_looks_at_window():
    pairs = days_back(10) + days_back(20, hours=5, start=TODAY - timedelta(days=10))
    assert compliance_rate(entries(pairs), GOAL, 10) == 100


def test_compliance_rate_missing_days_count_against():
    assert round(compliance_rate(entries(days_back(10)), GOAL, 30), 2) == 33.33
