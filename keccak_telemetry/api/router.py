from fastapi import APIRouter

from .endpoints import events, health, stats

api_router = APIRouter(prefix="/api")
api_router.include_router(health.router)
api_router.include_router(events.router)
api_router.include_router(stats.router)
