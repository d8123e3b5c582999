"""AchievementEvaluator against in-memory store and notifier."""

from datetime import timedelta

import pytest

from app.models.user import UserRole
from app.services.achievement_service import (
    ACHIEVEMENT_TITLE,
    AchievementDefinition,
    AchievementEvaluator,
    PlanSnapshot,
)

from .conftest import TODAY, FakeAchievementStore, FakeNotifier, days_back

USER_ID = 7


def make_evaluator(store, notifier):
    return AchievementEvaluator(store, notifier, clock=lambda: TODAY)


def names(achievements):
    return {a.name for a in achievements}


def fill(store, pairs):
    for day, hours in pairs:
        store.add_log(day, hours)


@pytest.mark.asyncio
async def test_no_data_unlocks_nothing(store, notifier):
    unlocked = await make_evaluator(store, notifier).evaluate(USER_ID)

    assert unlocked == []
    assert store.unlocked == set()
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_first_log_above_goal_unlocks_first_step_and_perfect_day(store, notifier):
    store.add_log(TODAY, 23)

    unlocked = await make_evaluator(store, notifier).evaluate(USER_ID)

    assert names(unlocked) == {"First Step", "Perfect Day"}
    assert len(notifier.sent) == 2
    assert notifier.sent[0]["title"] == ACHIEVEMENT_TITLE
    assert notifier.sent[0]["data"]["type"] == "achievement"
    assert 'You unlocked "First Step"' in notifier.sent[0]["body"]


@pytest.mark.asyncio
async def test_same_day_upsert_unlocks_nothing_new(store, notifier):
    evaluator = make_evaluator(store, notifier)
    store.add_log(TODAY, 23)
    await evaluator.evaluate(USER_ID)
    before = set(store.unlocked)

    store.add_log(TODAY, 23.5)
    unlocked = await evaluator.evaluate(USER_ID)

    assert unlocked == []
    assert store.unlocked == before
    assert len(notifier.sent) == 2


@pytest.mark.asyncio
async def test_repeated_runs_never_insert_twice(store, notifier):
    evaluator = make_evaluator(store, notifier)
    fill(store, days_back(7))

    await evaluator.evaluate(USER_ID)
    await evaluator.evaluate(USER_ID)

    assert len(store.unlock_calls) == len(set(store.unlock_calls))
    assert "Week Warrior" in {a.name for a in store.catalog if a.id in store.unlocked}


@pytest.mark.asyncio
async def test_unlocked_set_only_grows(store, notifier):
    evaluator = make_evaluator(store, notifier)
    fill(store, days_back(7))
    await evaluator.evaluate(USER_ID)
    after_first = set(store.unlocked)

    # серия прервалась, но открытое не отзывается
    store.logs = []
    store.add_log(TODAY - timedelta(days=5), 3)
    await evaluator.evaluate(USER_ID)

    assert after_first <= store.unlocked


@pytest.mark.asyncio
async def test_streak_thresholds(store, notifier):
    fill(store, days_back(14))

    unlocked = await make_evaluator(store, notifier).evaluate(USER_ID)

    assert {"Week Warrior", "Two Week Champion"} <= names(unlocked)
    assert "Monthly Master" not in names(unlocked)


@pytest.mark.asyncio
async def test_streak_broken_by_short_day(store, notifier):
    fill(store, days_back(6))
    store.add_log(TODAY - timedelta(days=6), 21)
    fill(store, days_back(5, start=TODAY - timedelta(days=7)))

    unlocked = await make_evaluator(store, notifier).evaluate(USER_ID)

    assert "Week Warrior" not in names(unlocked)


@pytest.mark.asyncio
async def test_total_days_counts_logs_regardless_of_hours(store, notifier):
    fill(store, days_back(30, hours=10))

    unlocked = await make_evaluator(store, notifier).evaluate(USER_ID)

    assert "Committed" in names(unlocked)
    assert "Perfect Day" not in names(unlocked)


@pytest.mark.asyncio
async def test_compliance_rate_threshold(notifier):
    catalog = [
        AchievementDefinition(1, "Ninety", "", "🎊", {"type": "compliance_rate", "days": 30, "rate": 90}),
        AchievementDefinition(2, "Ninety-one", "", "🎊", {"type": "compliance_rate", "days": 30, "rate": 91}),
    ]
    store = FakeAchievementStore(catalog=catalog)
    fill(store, days_back(27))
    fill(store, days_back(3, hours=12, start=TODAY - timedelta(days=27)))

    unlocked = await make_evaluator(store, notifier).evaluate(USER_ID)

    assert names(unlocked) == {"Ninety"}


@pytest.mark.asyncio
async def test_compliance_rate_requires_full_window(store, notifier):
    fill(store, days_back(5))

    unlocked = await make_evaluator(store, notifier).evaluate(USER_ID)

    assert "Consistency King" not in names(unlocked)


@pytest.mark.asyncio
async def test_first_aligner_photo_without_wear_data(store, notifier):
    store.photo_numbers = {1}

    unlocked = await make_evaluator(store, notifier).evaluate(USER_ID)

    assert names(unlocked) == {"Picture Perfect Start"}


@pytest.mark.asyncio
async def test_last_aligner_photo_uses_plan_total(store, notifier):
    store.plan = PlanSnapshot(daily_wear_time_goal=22, total_aligners=12)
    store.photo_numbers = {12}

    unlocked = await make_evaluator(store, notifier).evaluate(USER_ID)

    assert names(unlocked) == {"Journey Complete"}


@pytest.mark.asyncio
async def test_missing_plan_defaults_to_twenty_aligners(store, notifier):
    store.photo_numbers = {12}
    assert await make_evaluator(store, notifier).evaluate(USER_ID) == []

    store.photo_numbers = {20}
    unlocked = await make_evaluator(store, notifier).evaluate(USER_ID)
    assert names(unlocked) == {"Journey Complete"}


@pytest.mark.asyncio
async def test_missing_plan_defaults_goal_to_22(store, notifier):
    store.add_log(TODAY, 21.5)

    unlocked = await make_evaluator(store, notifier).evaluate(USER_ID)

    assert names(unlocked) == {"First Step"}


@pytest.mark.asyncio
async def test_plan_goal_is_used(store, notifier):
    store.plan = PlanSnapshot(daily_wear_time_goal=20, total_aligners=20)
    store.add_log(TODAY, 21.5)

    unlocked = await make_evaluator(store, notifier).evaluate(USER_ID)

    assert names(unlocked) == {"First Step", "Perfect Day"}


@pytest.mark.asyncio
async def test_notification_failure_does_not_block_unlocks(store):
    notifier = FakeNotifier(fail=True)
    store.add_log(TODAY, 23)

    unlocked = await make_evaluator(store, notifier).evaluate(USER_ID)

    assert names(unlocked) == {"First Step", "Perfect Day"}
    assert len(store.unlocked) == 2


@pytest.mark.asyncio
async def test_only_patients_are_notified(notifier):
    store = FakeAchievementStore(role=UserRole.DOCTOR.value)
    store.add_log(TODAY, 23)

    unlocked = await make_evaluator(store, notifier).evaluate(USER_ID)

    assert len(unlocked) == 2
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_concurrent_duplicate_is_a_noop(store, notifier):
    store.add_log(TODAY, 23)
    first_step = next(a for a in store.catalog if a.name == "First Step")

    # другой запрос успел записать достижение после того, как мы прочитали unlocked
    original_unlock = store.unlock_achievement

    async def racing_unlock(user_id, achievement_id):
        if achievement_id == first_step.id:
            store.unlocked.add(achievement_id)
        return await original_unlock(user_id, achievement_id)

    store.unlock_achievement = racing_unlock

    unlocked = await make_evaluator(store, notifier).evaluate(USER_ID)

    assert names(unlocked) == {"Perfect Day"}
    assert [n["data"]["achievementName"] for n in notifier.sent] == ["Perfect Day"]


@pytest.mark.asyncio
async def test_read_failure_is_swallowed(store, notifier):
    store.add_log(TODAY, 23)
    store.fail_reads = True

    unlocked = await make_evaluator(store, notifier).evaluate(USER_ID)

    assert unlocked == []
    assert store.unlock_calls == []


@pytest.mark.asyncio
async def test_unknown_requirement_is_skipped(notifier):
    catalog = [
        AchievementDefinition(1, "Mystery", "", "❓", {"type": "moon_phase"}),
        AchievementDefinition(2, "First Step", "", "🎯", '{"type": "first_log"}'),
    ]
    store = FakeAchievementStore(catalog=catalog)
    store.add_log(TODAY, 5)

    unlocked = await make_evaluator(store, notifier).evaluate(USER_ID)

    assert names(unlocked) == {"First Step"}
