"""Model health and diagnostics endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from marketmind_ai.api.dependencies import get_health_monitor
from marketmind_ai.orchestrator.health_monitor import HealthMonitor

router = APIRouter()


@router.get("/models/health")
async def model_health(monitor: HealthMonitor = Depends(get_health_monitor)):
    """Current health table as recorded by the last probe."""
    return {"success": True, **monitor.get_model_health().model_dump(mode="json")}


@router.post("/models/probe")
async def probe_models(monitor: HealthMonitor = Depends(get_health_monitor)):
    """Probe every model now and return the refreshed table."""
    await monitor.probe_all()
    return {"success": True, **monitor.get_model_health().model_dump(mode="json")}


@router.get("/test-models")
async def test_models(
    prompt: Optional[str] = Query(None, description="Prompt sent to every model"),
    monitor: HealthMonitor = Depends(get_health_monitor),
):
    """Run a realistic prompt through every model and report timings and failures."""
    report = await monitor.test_models(prompt)
    return {"success": True, **report.model_dump(mode="json")}
