"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from clinic_compass.api.middleware import RequestIDMiddleware, MetricsMiddleware
from clinic_compass.api.v1 import analysis, chat, clinic
from clinic_compass.infrastructure.database.session import init_db
from clinic_compass.infrastructure.observability.logging import setup_logging
from clinic_compass.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.create_tables_on_startup:
        init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Clinic Compass",
        description="Business analysis service for Korean medicine clinics",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(clinic.router, prefix="/v1", tags=["clinic"])
    app.include_router(analysis.router, prefix="/v1", tags=["analysis"])
    app.include_router(chat.router, prefix="/v1", tags=["chat"])

    return app


app = create_app()
