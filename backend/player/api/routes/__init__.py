"""API route registration."""

from fastapi import APIRouter

from player.api.routes import actions, health, views

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(views.router, prefix="/views", tags=["views"])
api_router.include_router(actions.router, prefix="/items", tags=["items"])
