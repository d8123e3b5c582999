"""PushNotificationService against SQLite with a stubbed FCM transport."""

import pytest
from firebase_admin import exceptions, messaging
from sqlalchemy import event, func, select

from app.models import Notification, WearTimeLog
from app.repositories.achievement_repository import AchievementRepository
from app.repositories.notification_repository import NotificationRepository
from app.services.achievement_catalog import seed_achievements
from app.services.achievement_service import AchievementEvaluator
from app.services.notification_service import PushNotificationService

from .conftest import TODAY

FIREBASE_APP = object()


class FakeFCM:
    """Stands in for messaging.send: records delivered tokens, fails configured ones."""

    def __init__(self, errors=None):
        self.errors = errors or {}
        self.delivered: list[messaging.Message] = []

    def __call__(self, message, dry_run=False, app=None):
        assert app is FIREBASE_APP
        error = self.errors.get(message.token)
        if error is not None:
            raise error
        self.delivered.append(message)
        return f"projects/test/messages/{len(self.delivered)}"


async def register(session, user_id, *tokens):
    repo = NotificationRepository(session)
    for token in tokens:
        await repo.register_token(user_id, token, "android")


@pytest.mark.asyncio
async def test_push_goes_to_every_device(session, patient, monkeypatch):
    fcm = FakeFCM()
    monkeypatch.setattr(messaging, "send", fcm)
    await register(session, patient.id, "device-token-phone", "device-token-tablet")

    service = PushNotificationService(session, firebase_app=FIREBASE_APP)
    sent = await service.notify_user(patient.id, "Hi", "Body", data={"type": "achievement", "icon": "🏆"})

    assert sent == 2
    assert {m.token for m in fcm.delivered} == {"device-token-phone", "device-token-tablet"}
    message = fcm.delivered[0]
    assert message.notification.title == "Hi"
    assert message.data["type"] == "achievement"
    assert "timestamp" in message.data

    stored = await NotificationRepository(session).list_for_user(patient.id)
    assert [(n.title, n.type) for n in stored] == [("Hi", "achievement")]


@pytest.mark.asyncio
async def test_unregistered_token_is_removed(session, patient, monkeypatch):
    fcm = FakeFCM(errors={"device-token-stale": messaging.UnregisteredError("Requested entity was not found.")})
    monkeypatch.setattr(messaging, "send", fcm)
    await register(session, patient.id, "device-token-live", "device-token-stale")

    sent = await PushNotificationService(session, firebase_app=FIREBASE_APP).notify_user(patient.id, "Hi", "Body")

    assert sent == 1
    assert await NotificationRepository(session).get_tokens(patient.id) == ["device-token-live"]


@pytest.mark.asyncio
async def test_firebase_error_only_affects_its_device(session, patient, monkeypatch):
    fcm = FakeFCM(errors={"device-token-flaky": exceptions.UnavailableError("FCM is down")})
    monkeypatch.setattr(messaging, "send", fcm)
    await register(session, patient.id, "device-token-flaky", "device-token-live")

    sent = await PushNotificationService(session, firebase_app=FIREBASE_APP).notify_user(patient.id, "Hi", "Body")

    assert sent == 1
    assert [m.token for m in fcm.delivered] == ["device-token-live"]
    # временная ошибка не повод удалять токен
    tokens = await NotificationRepository(session).get_tokens(patient.id)
    assert set(tokens) == {"device-token-flaky", "device-token-live"}


@pytest.mark.asyncio
async def test_without_firebase_push_is_skipped(session, patient, monkeypatch):
    fcm = FakeFCM()
    monkeypatch.setattr(messaging, "send", fcm)
    monkeypatch.setattr("app.services.notification_service.get_firebase_app", lambda: None)
    await register(session, patient.id, "device-token-phone")

    sent = await PushNotificationService(session).notify_user(patient.id, "Hi", "Body")

    assert sent == 0
    assert fcm.delivered == []
    assert len(await NotificationRepository(session).list_for_user(patient.id)) == 1


@pytest.mark.asyncio
async def test_failed_inbox_write_does_not_stop_later_unlocks(session, patient):
    patient_id = patient.id
    await seed_achievements(session)
    session.add(WearTimeLog(user_id=patient_id, date=TODAY, hours_worn=23))
    await session.commit()

    def broken_insert(mapper, connection, target):
        raise RuntimeError("notifications table is locked")

    event.listen(Notification, "before_insert", broken_insert)
    try:
        repo = AchievementRepository(session)
        evaluator = AchievementEvaluator(repo, PushNotificationService(session), clock=lambda: TODAY)
        unlocked = await evaluator.evaluate(patient_id)
    finally:
        event.remove(Notification, "before_insert", broken_insert)

    assert {a.name for a in unlocked} == {"First Step", "Perfect Day"}
    stored_ids = await repo.get_unlocked_achievement_ids(patient_id)
    assert stored_ids == {a.id for a in unlocked}
    assert await session.scalar(select(func.count()).select_from(Notification)) == 0
