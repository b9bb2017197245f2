"""
QRGen HTTP API
Routes, error handling and lifecycle for the QR generation service.
"""

import platform
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator

from fastapi import Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from injector import Injector
from prometheus_client import CONTENT_TYPE_LATEST
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from .cache.health import CacheReporter
from .cache.store import QRCacheStore
from .cache.sweeper import CacheSweeper
from .core import Settings, ValidationError, build_request, get_logger, get_settings
from .core.container import create_container
from .core.hash import Algorithm, hash_bytes
from .core.validate import QRRequest
from .encoding.qr import EncodingError
from .handlers.qr import QRHandler
from .middleware.rate_limit import RateLimitMiddleware, RateLimitRule
from .middleware.security import (
    ApiKeyMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from .monitoring.memory import process_memory, to_megabytes
from .monitoring.metrics import MetricsCollector

logger = get_logger(__name__)

AVAILABLE_ENDPOINTS = [
    "GET /api",
    "GET /api/qr",
    "GET /api/qr/url",
    "POST /api/qr/batch",
    "GET /api/cache/stats",
    "GET /health",
    "GET /metrics",
]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _human_uptime(seconds: float) -> str:
    seconds = int(seconds)
    return f"{seconds // 3600}h {(seconds % 3600) // 60}m {seconds % 60}s"


# ============================================================================
# Dependencies
# ============================================================================

def get_container(request: Request) -> Injector:
    return request.app.state.container


def get_app_settings(container: Injector = Depends(get_container)) -> Settings:
    return container.get(Settings)


def get_handler(container: Injector = Depends(get_container)) -> QRHandler:
    return container.get(QRHandler)


def get_reporter(container: Injector = Depends(get_container)) -> CacheReporter:
    return container.get(CacheReporter)


def get_metrics(container: Injector = Depends(get_container)) -> MetricsCollector:
    return container.get(MetricsCollector)


def qr_query(request: Request, settings: Settings = Depends(get_app_settings)) -> QRRequest:
    """Validated request from query parameters."""
    params = request.query_params
    return build_request(
        params.get("data"),
        params.get("size"),
        params,
        max_data_length=settings.max_data_length,
    )


# ============================================================================
# Application factory
# ============================================================================

def create_app(settings: Settings | None = None, container: Injector | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Service settings (defaults to environment)
        container: Pre-built injector; one is created from ``settings`` otherwise

    Returns:
        Configured application
    """
    settings = settings or get_settings()
    container = container or create_container(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Start the cache sweeper on startup, release the cache on shutdown."""
        sweeper = container.get(CacheSweeper)
        logger.info("starting", environment=settings.environment, version=settings.version)
        sweeper.start()
        if settings.cache_preload and settings.cache_enabled:
            await container.get(QRHandler).preload()
        try:
            yield
        finally:
            await sweeper.stop()
            container.get(QRCacheStore).clear_all()
            logger.info("stopped")

    app = FastAPI(
        title="QRGen API",
        version=settings.version,
        description="QR code generation API with caching, validation and rate limiting",
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
    )
    app.state.container = container

    # Middleware (last added runs first)
    app.add_middleware(ApiKeyMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        rules=[
            RateLimitRule("/api/", settings.general_limit_max, settings.general_limit_window),
            RateLimitRule("/api/qr", settings.qr_limit_max, settings.qr_limit_window),
        ],
        enabled=settings.rate_limit_enabled,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins if settings.is_production else ["*"],
        allow_credentials=settings.is_production,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    if not settings.is_production:
        app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(SecurityHeadersMiddleware)

    _register_error_handlers(app, settings)
    _register_qr_routes(app)
    _register_system_routes(app, settings)

    return app


# ============================================================================
# Error handling
# ============================================================================

def _register_error_handlers(app: FastAPI, settings: Settings) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError) -> ORJSONResponse:
        return ORJSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        return ORJSONResponse(
            status_code=400,
            content={"error": "Invalid request", "message": first.get("msg", "Malformed request")},
        )

    @app.exception_handler(EncodingError)
    async def encoding_error(request: Request, exc: EncodingError) -> ORJSONResponse:
        return ORJSONResponse(
            status_code=500,
            content={"error": "Failed to generate QR code", "details": exc.reason},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> ORJSONResponse:
        if exc.status_code == 404:
            return ORJSONResponse(
                status_code=404,
                content={
                    "error": "Endpoint not found",
                    "message": f"The requested endpoint {request.method} {request.url.path} was not found",
                    "available_endpoints": AVAILABLE_ENDPOINTS,
                },
            )
        return ORJSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> ORJSONResponse:
        logger.error(
            "unhandled_error",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        content: dict[str, Any] = {
            "error": "Internal server error",
            "message": "Something went wrong" if settings.is_production else str(exc),
            "timestamp": _now_iso(),
        }
        if not settings.is_production:
            content["type"] = type(exc).__name__
        return ORJSONResponse(status_code=500, content=content)


# ============================================================================
# QR routes
# ============================================================================

def _register_qr_routes(app: FastAPI) -> None:
    @app.get("/api/qr", response_class=Response)
    async def qr_image(
        request: Request,
        qr: QRRequest = Depends(qr_query),
        handler: QRHandler = Depends(get_handler),
        metrics: MetricsCollector = Depends(get_metrics),
    ) -> Response:
        """Generate a QR code as a PNG image."""
        result = await handler.generate(qr)
        metrics.record_request("image", "hit" if result.cache_hit else "miss")

        etag = f'"{hash_bytes(result.image, Algorithm.XXHASH64)}"'
        headers = {
            "Cache-Control": "public, max-age=3600",
            "ETag": etag,
            "X-Cache": "HIT" if result.cache_hit else "MISS",
        }
        if request.headers.get("If-None-Match") == etag:
            return Response(status_code=304, headers=headers)

        headers["Content-Disposition"] = f'inline; filename="qr-code-{int(time.time() * 1000)}.png"'
        return Response(content=result.image, media_type="image/png", headers=headers)

    @app.get("/api/qr/url")
    async def qr_data_url(
        qr: QRRequest = Depends(qr_query),
        handler: QRHandler = Depends(get_handler),
        metrics: MetricsCollector = Depends(get_metrics),
    ) -> dict[str, Any]:
        """Generate a QR code as a base64 data URL."""
        result = await handler.generate(qr)
        metrics.record_request("data_url", "hit" if result.cache_hit else "miss")
        return {
            "success": True,
            "cached": result.cache_hit,
            "data": {
                "url": result.data_url,
                "size": qr.dimensions,
                "content": qr.data,
                "options": qr.options(),
            },
        }

    @app.post("/api/qr/batch")
    async def qr_batch(
        payload: dict[str, Any] = Body(...),
        handler: QRHandler = Depends(get_handler),
        settings: Settings = Depends(get_app_settings),
        metrics: MetricsCollector = Depends(get_metrics),
    ) -> ORJSONResponse:
        """Generate several QR codes in one call."""
        requests = payload.get("requests")
        if not isinstance(requests, list) or not requests:
            return ORJSONResponse(
                status_code=400,
                content={
                    "error": "Invalid batch request",
                    "message": "Requests must be a non-empty array",
                },
            )
        if len(requests) > settings.max_batch_size:
            return ORJSONResponse(
                status_code=400,
                content={
                    "error": "Batch size too large",
                    "message": f"Maximum {settings.max_batch_size} requests per batch",
                    "received": len(requests),
                    "maximum": settings.max_batch_size,
                },
            )

        report = await handler.generate_batch(requests, settings.max_data_length)
        metrics.record_request("batch", "partial" if report.errors else "success")
        return ORJSONResponse(content=report.to_dict())


# ============================================================================
# System routes
# ============================================================================

def _register_system_routes(app: FastAPI, settings: Settings) -> None:
    @app.get("/health")
    async def health(
        reporter: CacheReporter = Depends(get_reporter),
        metrics: MetricsCollector = Depends(get_metrics),
    ) -> dict[str, Any]:
        """Service health with cache and memory figures."""
        start = time.perf_counter()
        memory = process_memory()
        uptime = metrics.uptime_seconds()
        cache_health = reporter.health()
        return {
            "status": "healthy",
            "timestamp": _now_iso(),
            "version": settings.version,
            "environment": settings.environment,
            "uptime": {"seconds": int(uptime), "human": _human_uptime(uptime)},
            "memory": {
                "rss": f"{to_megabytes(memory.rss_bytes)} MB",
                "peak_rss": f"{to_megabytes(memory.peak_rss_bytes)} MB",
            },
            "performance": {"response_time": f"{round((time.perf_counter() - start) * 1000, 2)}ms"},
            "cache": cache_health["cache"],
            "dependencies": {
                "qrcode": "operational",
                "fastapi": "operational",
                "python": platform.python_version(),
            },
        }

    @app.get("/api")
    async def api_info() -> dict[str, Any]:
        """Describe the API."""
        return {
            "name": "QRGen API",
            "version": settings.version,
            "description": "QR code generation API with caching, validation and rate limiting",
            "timestamp": _now_iso(),
            "endpoints": {
                "qr_generation": {
                    "image": "/api/qr?data=<data>&size=<WIDTHxHEIGHT>&margin=<0-10>&el=<L|M|Q|H>&color=<hex>&bgcolor=<hex>",
                    "data_url": "/api/qr/url?data=<data>&size=<WIDTHxHEIGHT>&margin=<0-10>&el=<L|M|Q|H>&color=<hex>&bgcolor=<hex>",
                    "batch": "/api/qr/batch (POST)",
                    "description": (
                        f"Batch generation takes a JSON body {{\"requests\": [...]}}, "
                        f"at most {settings.max_batch_size} entries."
                    ),
                },
                "system": {
                    "health": "/health",
                    "metrics": "/metrics",
                    "cache_stats": "/api/cache/stats",
                },
            },
            "limits": {
                "rate_limit": f"{settings.qr_limit_max} QR requests per {settings.qr_limit_window} seconds per IP",
                "data_length": f"{settings.max_data_length} characters maximum",
                "size_range": "50x50 to 2000x2000 pixels",
                "supported_formats": ["PNG", "Data URL"],
            },
            "examples": {
                "basic": "/api/qr?data=Hello%20World",
                "custom_size": "/api/qr?data=example.com&size=500x500",
                "high_quality": "/api/qr?data=important-data&el=H&margin=3",
                "branded": "/api/qr?data=company.com&color=FF6B35&bgcolor=F7F7F7",
            },
        }

    @app.get("/api/cache/stats")
    async def cache_stats(reporter: CacheReporter = Depends(get_reporter)) -> dict[str, Any]:
        """Formatted cache statistics."""
        return reporter.stats()

    @app.get("/metrics", response_class=Response)
    async def prometheus_metrics(
        container: Injector = Depends(get_container),
        metrics: MetricsCollector = Depends(get_metrics),
    ) -> Response:
        """Prometheus exposition."""
        metrics.update_cache(container.get(QRCacheStore).current_stats())
        metrics.set_memory(process_memory().rss_bytes)
        return Response(content=metrics.get_metrics(), media_type=CONTENT_TYPE_LATEST)

    if settings.is_production:
        return

    @app.post("/api/cache/clear")
    async def cache_clear(container: Injector = Depends(get_container)) -> dict[str, Any]:
        """Drop every cached entry (non-production only)."""
        container.get(QRCacheStore).clear_all()
        return {"message": "Cache cleared successfully"}

    @app.get("/api/cache/health")
    async def cache_health(reporter: CacheReporter = Depends(get_reporter)) -> dict[str, Any]:
        """Cache health document (non-production only)."""
        return reporter.health()
