"""FastAPI application factory"""

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from fundability_engine.api.middleware import MetricsMiddleware, RequestIDMiddleware
from fundability_engine.api.v1 import analytics, snapshot
from fundability_engine.config import settings
from fundability_engine.domain.scoring import ENGINE_VERSION
from fundability_engine.infrastructure.analytics.store import AnalyticsStore
from fundability_engine.infrastructure.clients.webhook import WebhookClient
from fundability_engine.infrastructure.observability.logging import setup_logging

# Setup structured logging
setup_logging(settings.log_level)


def create_app(
    analytics_store: AnalyticsStore | None = None,
    webhook_client: WebhookClient | None = None,
) -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Fundability Snapshot Engine",
        description="Deterministic fundability scoring and funding recommendations",
        version=ENGINE_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Process-owned collaborators
    app.state.analytics_store = analytics_store if analytics_store is not None else AnalyticsStore()
    app.state.webhook_client = webhook_client if webhook_client is not None else WebhookClient()

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.exception_handler(StarletteHTTPException)
    async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 405:
            return JSONResponse(
                status_code=405,
                content={"error": "Method not allowed"},
                headers=exc.headers,
            )
        return await http_exception_handler(request, exc)

    @app.exception_handler(RequestValidationError)
    async def query_validation_handler(request: Request, exc: RequestValidationError):
        details = []
        for error in exc.errors():
            name = str(error["loc"][-1]) if error["loc"] else "request"
            message = analytics.FILTER_MESSAGES.get(name, f"{name}: {error['msg']}")
            if message not in details:
                details.append(message)
        return JSONResponse(status_code=400, content={"error": "Validation failed", "details": details})

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(snapshot.router, prefix="/v1", tags=["snapshots"])
    app.include_router(analytics.router, prefix="/v1", tags=["analytics"])

    # Legacy /api/fs-* paths used by existing integrations
    app.include_router(snapshot.router, prefix="/api", include_in_schema=False)
    app.include_router(analytics.router, prefix="/api", include_in_schema=False)

    return app


app = create_app()
