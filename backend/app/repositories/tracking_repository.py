# app/repositories/tracking_repository.py
from typing import Optional, List
from datetime import date, timedelta
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.treatment import TreatmentPlan, WearTimeLog, ProgressPhoto, SymptomLog

class TrackingRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    # === ВРЕМЯ НОШЕНИЯ ===

    async def get_wear_time_since(self, user_id: int, since: date) -> List[WearTimeLog]:
        """Записи с указанной даты включительно, от новых к старым"""
        stmt = (
            select(WearTimeLog)
            .where(WearTimeLog.user_id == user_id, WearTimeLog.date >= since)
            .order_by(WearTimeLog.date.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def upsert_wear_time(self, user_id: int, log_date: date, hours_worn: float) -> WearTimeLog:
        """Одна запись на пользователя и день: повторная запись за тот же день перезаписывает часы"""
        stmt = select(WearTimeLog).where(
            WearTimeLog.user_id == user_id,
            WearTimeLog.date == log_date,
        )
        log = (await self.session.execute(stmt)).scalar_one_or_none()
        if log is None:
            log = WearTimeLog(user_id=user_id, date=log_date, hours_worn=hours_worn)
            self.session.add(log)
        else:
            log.hours_worn = hours_worn

        await self.session.commit()
        await self.session.refresh(log)
        return log

    # === СИМПТОМЫ ===

    async def get_symptoms_since(self, user_id: int, since: date) -> List[SymptomLog]:
        stmt = (
            select(SymptomLog)
            .where(SymptomLog.user_id == user_id, SymptomLog.date >= since)
            .order_by(SymptomLog.date.desc(), SymptomLog.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create_symptom(
        self, user_id: int, log_date: date, symptom_type: str, severity: str, notes: Optional[str] = None
    ) -> SymptomLog:
        symptom = SymptomLog(
            user_id=user_id,
            date=log_date,
            symptom_type=symptom_type,
            severity=severity,
            notes=notes,
        )
        self.session.add(symptom)
        await self.session.commit()
        await self.session.refresh(symptom)
        return symptom

    async def delete_symptom(self, user_id: int, symptom_id: int) -> bool:
        """Удаляет только свою запись"""
        stmt = delete(SymptomLog).where(SymptomLog.id == symptom_id, SymptomLog.user_id == user_id)
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0

    # === ФОТО ===

    async def get_photos(self, user_id: int) -> List[ProgressPhoto]:
        stmt = (
            select(ProgressPhoto)
            .where(ProgressPhoto.user_id == user_id)
            .order_by(ProgressPhoto.aligner_number.desc(), ProgressPhoto.captured_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def create_photo(self, user_id: int, aligner_number: int, photo_type: str, storage_path: str) -> ProgressPhoto:
        photo = ProgressPhoto(
            user_id=user_id,
            aligner_number=aligner_number,
            photo_type=photo_type,
            storage_path=storage_path,
        )
        self.session.add(photo)
        await self.session.commit()
        await self.session.refresh(photo)
        return photo

    # === ПЛАН ЛЕЧЕНИЯ ===

    async def get_plan(self, user_id: int) -> Optional[TreatmentPlan]:
        stmt = select(TreatmentPlan).where(TreatmentPlan.user_id == user_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert_plan(
        self,
        user_id: int,
        start_date: date,
        total_aligners: int,
        aligner_change_interval: int,
        daily_wear_time_goal: float,
    ) -> TreatmentPlan:
        """Создать или перезаписать план; дата следующей смены = старт + интервал"""
        plan = await self.get_plan(user_id)
        if plan is None:
            plan = TreatmentPlan(user_id=user_id, current_aligner=1)
            self.session.add(plan)

        plan.start_date = start_date
        plan.total_aligners = total_aligners
        plan.aligner_change_interval = aligner_change_interval
        plan.daily_wear_time_goal = daily_wear_time_goal
        plan.last_aligner_change_date = start_date
        plan.next_aligner_change_date = start_date + timedelta(days=aligner_change_interval)

        await self.session.commit()
        await self.session.refresh(plan)
        return plan

    async def update_plan(self, plan: TreatmentPlan, **fields) -> TreatmentPlan:
        for key, value in fields.items():
            setattr(plan, key, value)
        if "aligner_change_interval" in fields and plan.last_aligner_change_date:
            plan.next_aligner_change_date = plan.last_aligner_change_date + timedelta(
                days=plan.aligner_change_interval
            )
        await self.session.commit()
        await self.session.refresh(plan)
        return plan

    async def advance_aligner(self, plan: TreatmentPlan, changed_on: date) -> TreatmentPlan:
        """Переход на следующий элайнер; следующая смена = день смены + интервал"""
        plan.current_aligner += 1
        plan.last_aligner_change_date = changed_on
        plan.next_aligner_change_date = changed_on + timedelta(days=plan.aligner_change_interval)
        await self.session.commit()
        await self.session.refresh(plan)
        return plan
