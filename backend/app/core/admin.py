# app/core/admin.py
from sqladmin import Admin, ModelView
from sqladmin.authentication import AuthenticationBackend
from fastapi import Request
from app.core.security import verify_password, create_access_token, decode_token
from app.core.config import settings
from app.core.database import db_helper
from app.repositories.user_repository import UserRepository
from app.models.user import User, UserRole, DoctorInvitation
from app.models.treatment import TreatmentPlan, WearTimeLog, ProgressPhoto, SymptomLog
from app.models.engagement import Achievement, UserAchievement

# 1. Авторизация в админке: только пользователи с ролью admin
class AdminAuth(AuthenticationBackend):
    async def login(self, request: Request) -> bool:
        form = await request.form()
        email, password = form["username"], form["password"]

        async with db_helper.session_factory() as session:
            user = await UserRepository(session).get_by_email(email)

        if user and user.role == UserRole.ADMIN.value and verify_password(password, user.password_hash):
            request.session.update({"token": create_access_token(user.id, user.role)})
            return True
        return False

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> bool:
        token = request.session.get("token")
        if not token:
            return False
        try:
            payload = decode_token(token)
        except ValueError:
            return False
        return payload.get("type") == "access" and payload.get("role") == UserRole.ADMIN.value

authentication_backend = AdminAuth(secret_key=settings.security.JWT_SECRET_KEY.get_secret_value())

# 2. Представления моделей (Views)

class UserAdmin(ModelView, model=User):
    column_list = [User.id, User.email, User.full_name, User.role, User.doctor_id, User.created_at]
    column_searchable_list = [User.email, User.full_name]
    column_sortable_list = [User.id, User.created_at]
    form_excluded_columns = [User.password_hash, User.achievements, User.treatment_plan, User.patients]
    icon = "fa-solid fa-user"

class TreatmentPlanAdmin(ModelView, model=TreatmentPlan):
    column_list = [
        TreatmentPlan.id, TreatmentPlan.user, TreatmentPlan.current_aligner,
        TreatmentPlan.total_aligners, TreatmentPlan.daily_wear_time_goal,
    ]
    icon = "fa-solid fa-tooth"

class WearTimeLogAdmin(ModelView, model=WearTimeLog):
    column_list = [WearTimeLog.id, WearTimeLog.user_id, WearTimeLog.date, WearTimeLog.hours_worn]
    column_sortable_list = [WearTimeLog.date]
    can_create = False
    icon = "fa-solid fa-clock"

class ProgressPhotoAdmin(ModelView, model=ProgressPhoto):
    column_list = [ProgressPhoto.id, ProgressPhoto.user_id, ProgressPhoto.aligner_number, ProgressPhoto.photo_type]
    can_create = False
    icon = "fa-solid fa-camera"

class SymptomLogAdmin(ModelView, model=SymptomLog):
    column_list = [SymptomLog.id, SymptomLog.user_id, SymptomLog.date, SymptomLog.symptom_type, SymptomLog.severity]
    column_sortable_list = [SymptomLog.date]
    can_create = False
    icon = "fa-solid fa-notes-medical"

class DoctorInvitationAdmin(ModelView, model=DoctorInvitation):
    column_list = [
        DoctorInvitation.id, DoctorInvitation.doctor, DoctorInvitation.invite_code,
        DoctorInvitation.expires_at, DoctorInvitation.current_uses, DoctorInvitation.max_uses,
    ]
    column_searchable_list = [DoctorInvitation.invite_code]
    can_create = False
    icon = "fa-solid fa-link"

class AchievementAdmin(ModelView, model=Achievement):
    column_list = [Achievement.id, Achievement.icon, Achievement.name, Achievement.requirement]
    icon = "fa-solid fa-trophy"

class UserAchievementAdmin(ModelView, model=UserAchievement):
    column_list = [UserAchievement.id, UserAchievement.user, UserAchievement.achievement, UserAchievement.unlocked_at]
    # Достижения не отзываются
    can_edit = False
    can_delete = False
    icon = "fa-solid fa-medal"

# 3. Функция инициализации
def setup_admin(app, engine):
    admin = Admin(app, engine, authentication_backend=authentication_backend, title="Aligner Tracker Admin")

    admin.add_view(UserAdmin)
    admin.add_view(TreatmentPlanAdmin)
    admin.add_view(WearTimeLogAdmin)
    admin.add_view(ProgressPhotoAdmin)
    admin.add_view(SymptomLogAdmin)
    admin.add_view(DoctorInvitationAdmin)
    admin.add_view(AchievementAdmin)
    admin.add_view(UserAchievementAdmin)
    return admin
