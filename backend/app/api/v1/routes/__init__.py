from fastapi import APIRouter
from app.api.v1.routes import auth
from .wear_time import router as wear_time_router
from .photos import router as photos_router
from .treatment_plan import router as treatment_plan_router
from .achievements import router as achievements_router
from .notifications import router as notifications_router
from .symptoms import router as symptoms_router
from .connections import router as connections_router


api_router = APIRouter()

api_router.include_router(auth.router, tags=["auth"])

api_router.include_router(wear_time_router)
api_router.include_router(photos_router)
api_router.include_router(treatment_plan_router)
api_router.include_router(achievements_router)
api_router.include_router(notifications_router)
api_router.include_router(symptoms_router)
api_router.include_router(connections_router)
