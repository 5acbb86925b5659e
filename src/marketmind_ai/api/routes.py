"""Main API router aggregating all endpoints."""

from fastapi import APIRouter

from marketmind_ai.api import generation, models

api_router = APIRouter()

api_router.include_router(generation.router, tags=["generation"])
api_router.include_router(models.router, tags=["models"])
