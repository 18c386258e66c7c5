from fastapi import APIRouter

from .endpoints import collect, dashboard, health

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(collect.router)
api_router.include_router(dashboard.router)
