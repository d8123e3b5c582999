"""AchievementRepository and catalog seeding on SQLite."""

from datetime import timedelta

import pytest
from sqlalchemy import func, select

from app.models import Achievement, ProgressPhoto, TreatmentPlan, UserAchievement, WearTimeLog
from app.repositories.achievement_repository import AchievementRepository
from app.services.achievement_catalog import ACHIEVEMENTS, seed_achievements
from app.services.achievement_service import AchievementEvaluator, PlanSnapshot

from .conftest import TODAY, FakeNotifier


@pytest.mark.asyncio
async def test_seed_is_idempotent(session):
    assert await seed_achievements(session) == len(ACHIEVEMENTS)
    assert await seed_achievements(session) == 0

    count = await session.scalar(select(func.count()).select_from(Achievement))
    assert count == len(ACHIEVEMENTS)


@pytest.mark.asyncio
async def test_seed_reset_removes_unlocks(session, patient):
    await seed_achievements(session)
    repo = AchievementRepository(session)
    achievement = (await repo.get_achievements())[0]
    await repo.unlock_achievement(patient.id, achievement.id)

    assert await seed_achievements(session, reset=True) == len(ACHIEVEMENTS)
    assert await repo.get_unlocked_achievement_ids(patient.id) == set()


@pytest.mark.asyncio
async def test_unlock_twice_returns_false(session, patient):
    # после rollback на дубликате ORM-объекты протухают, id берём заранее
    patient_id = patient.id
    await seed_achievements(session)
    repo = AchievementRepository(session)
    achievement_id = (await repo.get_achievements())[0].id

    assert await repo.unlock_achievement(patient_id, achievement_id) is True
    assert await repo.unlock_achievement(patient_id, achievement_id) is False

    rows = await session.scalar(
        select(func.count()).select_from(UserAchievement).where(UserAchievement.user_id == patient_id)
    )
    assert rows == 1
    assert await repo.get_unlocked_achievement_ids(patient_id) == {achievement_id}


@pytest.mark.asyncio
async def test_wear_time_logs_newest_first_and_limited(session, patient):
    for offset in range(5):
        session.add(WearTimeLog(user_id=patient.id, date=TODAY - timedelta(days=offset), hours_worn=20 + offset))
    await session.commit()

    logs = await AchievementRepository(session).get_wear_time_logs(patient.id, limit=3)

    assert [log.date for log in logs] == [TODAY, TODAY - timedelta(days=1), TODAY - timedelta(days=2)]
    assert logs[0].hours_worn == 20


@pytest.mark.asyncio
async def test_plan_and_photos_snapshots(session, patient):
    repo = AchievementRepository(session)
    assert await repo.get_treatment_plan(patient.id) is None

    session.add(TreatmentPlan(user_id=patient.id, total_aligners=18, daily_wear_time_goal=21))
    session.add_all([
        ProgressPhoto(user_id=patient.id, aligner_number=1, photo_type="front", storage_path="a"),
        ProgressPhoto(user_id=patient.id, aligner_number=1, photo_type="left", storage_path="b"),
        ProgressPhoto(user_id=patient.id, aligner_number=4, photo_type="front", storage_path="c"),
    ])
    await session.commit()

    assert await repo.get_treatment_plan(patient.id) == PlanSnapshot(21, 18)
    assert await repo.get_photo_aligner_numbers(patient.id) == {1, 4}
    assert await repo.get_user_role(patient.id) == "patient"


@pytest.mark.asyncio
async def test_evaluator_with_database(session, patient):
    await seed_achievements(session)
    session.add(WearTimeLog(user_id=patient.id, date=TODAY, hours_worn=23))
    await session.commit()
    notifier = FakeNotifier()
    evaluator = AchievementEvaluator(AchievementRepository(session), notifier, clock=lambda: TODAY)

    first = await evaluator.evaluate(patient.id)
    second = await evaluator.evaluate(patient.id)

    assert {a.name for a in first} == {"First Step", "Perfect Day"}
    assert second == []
    assert len(notifier.sent) == 2
