"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from moneywise.api.errors import register_exception_handlers
from moneywise.api.middleware import RequestIDMiddleware, MetricsMiddleware
from moneywise.api.v1 import budgets, categories, goals, notifications, reports, transactions
from moneywise.infrastructure.observability.logging import setup_logging
from moneywise.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Moneywise API",
        description="Personal finance service: transactions, budgets, savings goals and reports",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(goals.router, prefix="/api/v1", tags=["goals"])
    app.include_router(budgets.router, prefix="/api/v1", tags=["budgets"])
    app.include_router(transactions.router, prefix="/api/v1", tags=["transactions"])
    app.include_router(categories.router, prefix="/api/v1", tags=["categories"])
    app.include_router(notifications.router, prefix="/api/v1", tags=["notifications"])
    app.include_router(reports.router, prefix="/api/v1", tags=["reports"])

    return app


app = create_app()
