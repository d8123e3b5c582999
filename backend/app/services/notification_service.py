# app/services/notification_service.py
from typing import Optional, Dict
from datetime import datetime, timezone
import asyncio
import logging

import firebase_admin
from firebase_admin import credentials, messaging
from firebase_admin.exceptions import FirebaseError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.repositories.notification_repository import NotificationRepository

logger = logging.getLogger(__name__)


def get_firebase_app() -> Optional[firebase_admin.App]:
    """Приложение Firebase, если задан сервисный аккаунт. Инициализируется один раз."""
    if not settings.push.enabled:
        return None
    try:
        return firebase_admin.get_app(settings.push.FIREBASE_APP_NAME)
    except ValueError:
        cred = credentials.Certificate(settings.push.FIREBASE_CREDENTIALS_PATH)
        return firebase_admin.initialize_app(cred, name=settings.push.FIREBASE_APP_NAME)


class PushNotificationService:
    """Уведомление пользователя: запись во входящие + FCM на все его устройства.

    Отсутствие устройств или ненастроенный Firebase это не ошибка, пуш
    просто не отправляется.
    """
    def __init__(self, session: AsyncSession, firebase_app: Optional[firebase_admin.App] = None):
        self.repository = NotificationRepository(session)
        self._firebase_app = firebase_app

    async def notify_user(
        self, user_id: int, title: str, body: str, data: Optional[Dict[str, str]] = None
    ) -> int:
        """Возвращает количество устройств, на которые ушёл пуш"""
        data = dict(data or {})
        await self.repository.create(user_id, title, body, type=data.get("type", "info"))

        tokens = await self.repository.get_tokens(user_id)
        if not tokens:
            logger.info(f"No FCM tokens for user {user_id}, push skipped")
            return 0

        app = self._firebase_app or get_firebase_app()
        if app is None:
            logger.info("Firebase is not configured, push skipped")
            return 0

        data["timestamp"] = datetime.now(timezone.utc).isoformat()
        sent = 0
        for token in tokens:
            message = messaging.Message(
                token=token,
                notification=messaging.Notification(title=title, body=body),
                data=data,
            )
            try:
                await asyncio.to_thread(messaging.send, message, app=app)
                sent += 1
            except messaging.UnregisteredError:
                logger.info(f"Removing stale FCM token for user {user_id}")
                await self.repository.remove_token(user_id, token)
            except FirebaseError as e:
                logger.error(f"Failed to send push to user {user_id}: {e}")

        logger.info(f"Push sent to {sent}/{len(tokens)} device(s) of user {user_id}: {title}")
        return sent
