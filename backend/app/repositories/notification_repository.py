# app/repositories/notification_repository.py
from typing import Optional, List
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.system import Notification, FCMToken

class NotificationRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user_id: int, title: str, body: str, type: str = "info") -> Notification:
        """Запись во входящие. При ошибке сессия откатывается, чтобы ей можно было пользоваться дальше"""
        notification = Notification(user_id=user_id, title=title, body=body, type=type)
        self.session.add(notification)
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return notification

    async def list_for_user(self, user_id: int, limit: int = 50) -> List[Notification]:
        stmt = (
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def mark_read(self, user_id: int, notification_id: int) -> Optional[Notification]:
        stmt = select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == user_id,
        )
        notification = (await self.session.execute(stmt)).scalar_one_or_none()
        if notification is None:
            return None
        notification.is_read = True
        await self.session.commit()
        await self.session.refresh(notification)
        return notification

    # === FCM ТОКЕНЫ ===

    async def get_tokens(self, user_id: int) -> List[str]:
        stmt = select(FCMToken.token).where(FCMToken.user_id == user_id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def register_token(self, user_id: int, token: str, platform: str) -> FCMToken:
        """Токен уникален: если устройство сменило владельца, перепривязываем"""
        stmt = select(FCMToken).where(FCMToken.token == token)
        record = (await self.session.execute(stmt)).scalar_one_or_none()
        if record is None:
            record = FCMToken(user_id=user_id, token=token, platform=platform)
            self.session.add(record)
        else:
            record.user_id = user_id
            record.platform = platform
        await self.session.commit()
        return record

    async def remove_token(self, user_id: int, token: str) -> int:
        stmt = delete(FCMToken).where(FCMToken.user_id == user_id, FCMToken.token == token)
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount
