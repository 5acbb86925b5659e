"""FastAPI dependencies resolving the services built at application startup."""

from fastapi import Request

from marketmind_ai.orchestrator.health_monitor import HealthMonitor
from marketmind_ai.services.generation_service import GenerationService


def get_generation_service(request: Request) -> GenerationService:
    return request.app.state.generation_service


def get_health_monitor(request: Request) -> HealthMonitor:
    return request.app.state.health_monitor
