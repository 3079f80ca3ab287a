"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from icarus_finance.api.middleware import MetricsMiddleware, RequestIDMiddleware
from icarus_finance.api.v1 import agent, assistant, budget, forecast
from icarus_finance.config import Settings, settings
from icarus_finance.infrastructure.clients.registry import ClientRegistry
from icarus_finance.infrastructure.observability.logging import setup_logging


def create_app(app_settings: Settings = settings) -> FastAPI:
    """Create and configure the FastAPI application"""
    setup_logging(app_settings.log_level, app_settings.service_name)

    app = FastAPI(
        title="ICARUS Finance",
        description="Cash-flow forecasting, budget analysis and OPME finance agents",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Built lazily, once per application
    app.state.clients = ClientRegistry(app_settings)

    # Last added = first executed
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": app_settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(forecast.router, prefix="/v1", tags=["forecast"])
    app.include_router(budget.router, prefix="/v1", tags=["budget"])
    app.include_router(agent.router, prefix="/v1", tags=["agents"])
    app.include_router(assistant.router, prefix="/v1", tags=["agents"])

    return app


app = create_app()
