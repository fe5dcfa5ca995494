"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from finance_analytics.api.middleware import RequestIDMiddleware, MetricsMiddleware
from finance_analytics.api.v1 import comparison, forecast, health, trends
from finance_analytics.config import Settings, settings
from finance_analytics.infrastructure.clients.advice import AdviceClient, build_advice_client
from finance_analytics.infrastructure.clients.store import StoreClient
from finance_analytics.infrastructure.database.repositories import DatabaseTransactionSource
from finance_analytics.infrastructure.database.session import create_session_factory
from finance_analytics.infrastructure.observability.logging import setup_logging
from finance_analytics.services.analytics import TransactionSource

# Setup structured logging
setup_logging(settings.log_level)


def build_transaction_source(config: Settings = settings) -> TransactionSource:
    """Relational store by default; the hosted REST store when transaction_source == "rest" """
    if config.transaction_source == "rest":
        return StoreClient(config.store_api_base, config.store_api_key, config.http_timeout_seconds)
    return DatabaseTransactionSource(create_session_factory(config.database_url))


def create_app(
    transaction_source: TransactionSource | None = None,
    advice_client: AdviceClient | None = None,
) -> FastAPI:
    """Create and configure FastAPI application"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await app.state.advice_client.aclose()
        logging.info("Advice client closed")

    app = FastAPI(
        title="Finance Analytics",
        description="Forecasts, period comparisons and financial health for personal finance data",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Collaborators are built once and shared by every request
    app.state.transaction_source = transaction_source or build_transaction_source()
    app.state.advice_client = advice_client or build_advice_client()

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {
            "status": "ok",
            "service": settings.service_name,
            "advice_enabled": app.state.advice_client.enabled,
        }

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(forecast.router, prefix="/v1", tags=["forecast"])
    app.include_router(comparison.router, prefix="/v1", tags=["comparison"])
    app.include_router(health.router, prefix="/v1", tags=["health"])
    app.include_router(trends.router, prefix="/v1", tags=["trends"])

    return app


app = create_app()
