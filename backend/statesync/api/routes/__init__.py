from fastapi import APIRouter

from statesync.api.routes import actions, health, onboarding

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(actions.router, prefix="/actions", tags=["actions"])
api_router.include_router(onboarding.router, prefix="/onboarding", tags=["onboarding"])
