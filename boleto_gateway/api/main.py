"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from boleto_gateway.api.errors import register_exception_handlers
from boleto_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from boleto_gateway.api.routes import boletos, clientes, webhook
from boleto_gateway.infrastructure.database.session import init_db
from boleto_gateway.infrastructure.observability.logging import setup_logging
from boleto_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app(run_startup: bool = True) -> FastAPI:
    """
    Create and configure FastAPI application.

    `run_startup=False` skips table creation and seeding; tests prepare their own database.
    """
    app = FastAPI(
        title="Boleto Gateway",
        description="Bradesco boleto issuance, maintenance and settlement service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan if run_startup else None,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name, "mock_bradesco": settings.mock_bradesco}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(boletos.router, tags=["boletos"])
    app.include_router(clientes.router, tags=["clientes"])
    app.include_router(webhook.router, tags=["webhook"])

    return app


app = create_app()
