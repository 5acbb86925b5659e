"""FastAPI application factory and server entry point."""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import structlog
import uvicorn
from fastapi import FastAPI, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST

from marketmind_ai import __version__
from marketmind_ai.api.routes import api_router
from marketmind_ai.config.settings import Settings, get_settings
from marketmind_ai.exceptions import DraftInvalidError, MarketMindException
from marketmind_ai.orchestrator import FallbackChainRunner, ModelRegistry, RetryHandler
from marketmind_ai.orchestrator.health_monitor import HealthMonitor
from marketmind_ai.providers import BaseProvider, GroqProvider
from marketmind_ai.server.middleware import RequestIdMiddleware
from marketmind_ai.services.generation_service import GenerationService
from marketmind_ai.telemetry.logger import setup_logging
from marketmind_ai.telemetry.metrics import MetricsCollector, metrics_collector

logger = structlog.get_logger()


def _build_provider(settings: Settings) -> GroqProvider:
    if not settings.has_groq_key:
        logger.warning("groq_api_key_missing", detail="Upstream calls will fail authentication")
    api_key = settings.groq_api_key.get_secret_value() if settings.groq_api_key else ""
    return GroqProvider(
        api_key=api_key,
        base_url=settings.groq_base_url,
        timeout=settings.request_timeout,
    )


def _error_body(request: Request, exc: MarketMindException) -> dict:
    body = {
        "success": False,
        "message": exc.message,
        "error_code": exc.error_code,
        "details": exc.details,
        "request_id": getattr(request.state, "request_id", None),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if isinstance(exc, DraftInvalidError):
        body["ai_text"] = exc.raw_text
    return body


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run the startup probe in the background and close the provider on shutdown."""
    settings: Settings = app.state.settings
    logger.info(
        "application_starting",
        version=__version__,
        environment=settings.environment,
        models=settings.model_roles,
    )

    probe_task: Optional[asyncio.Task] = None
    if settings.health_check_on_startup:
        probe_task = asyncio.create_task(app.state.health_monitor.probe_all())

    yield

    logger.info("application_stopping")
    if probe_task is not None and not probe_task.done():
        probe_task.cancel()
        try:
            await probe_task
        except asyncio.CancelledError:
            pass
    await app.state.provider.close()


def create_app(
    settings: Optional[Settings] = None,
    provider: Optional[BaseProvider] = None,
    retry_handler: Optional[RetryHandler] = None,
    metrics: Optional[MetricsCollector] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Components are built eagerly so that they are available on ``app.state``
    whether or not the lifespan runs; tests pass their own provider and
    retry handler.
    """
    settings = settings or get_settings()
    metrics = metrics or metrics_collector

    provider = provider or _build_provider(settings)
    registry = ModelRegistry.from_settings(settings)
    retry_handler = retry_handler or RetryHandler.from_settings(settings)
    health_monitor = HealthMonitor(provider, registry, metrics=metrics)
    generation_service = GenerationService(
        provider,
        registry,
        FallbackChainRunner(retry_handler, metrics=metrics),
        health_monitor=health_monitor,
        health_aware_routing=settings.health_aware_routing,
    )

    app = FastAPI(
        title=settings.app_name,
        description="AI orchestration for marketing content, campaign drafts and sales forecasts",
        version=__version__,
        debug=settings.debug,
        docs_url="/docs",
        redoc_url=None if settings.is_production else "/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.provider = provider
    app.state.registry = registry
    app.state.metrics = metrics
    app.state.health_monitor = health_monitor
    app.state.generation_service = generation_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIdMiddleware)

    @app.exception_handler(MarketMindException)
    async def marketmind_exception_handler(request: Request, exc: MarketMindException):
        log = logger.warning if exc.status_code < 500 else logger.error
        log(
            "request_failed",
            path=request.url.path,
            error_code=exc.error_code,
            status_code=exc.status_code,
            error=exc.message,
        )
        return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(_error_body(request, exc)))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning("request_invalid", path=request.url.path, errors=exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=jsonable_encoder(
                {
                    "success": False,
                    "message": "Invalid request body",
                    "error_code": "VALIDATION_ERROR",
                    "details": {"errors": exc.errors()},
                    "request_id": getattr(request.state, "request_id", None),
                    "timestamp": datetime.now(timezone.utc).isoformat(),
                }
            ),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error("unexpected_error", path=request.url.path, error=str(exc), exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "message": "Internal server error",
                "error_code": "INTERNAL_ERROR",
                "request_id": getattr(request.state, "request_id", None),
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )

    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health", tags=["health"])
    async def health(request: Request):
        """Liveness plus a summary of the last model probe."""
        monitor: HealthMonitor = request.app.state.health_monitor
        last_checked = monitor.last_checked
        return {
            "status": "healthy",
            "service": settings.app_name,
            "version": __version__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "groq_configured": settings.has_groq_key,
            "models_checked_at": last_checked.isoformat() if last_checked else None,
            "available_models": [m.identifier for m in monitor.get_available_models()],
        }

    @app.get("/metrics", include_in_schema=False)
    async def metrics_endpoint(request: Request):
        return Response(content=request.app.state.metrics.export(), media_type=CONTENT_TYPE_LATEST)

    return app


def start_server(host: Optional[str] = None, port: Optional[int] = None, reload: bool = False) -> None:
    """Configure logging and run the application under uvicorn."""
    settings = get_settings()
    setup_logging()
    uvicorn.run(
        "marketmind_ai.server.main:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload or settings.reload,
        workers=settings.workers,
        log_config=None,
    )
