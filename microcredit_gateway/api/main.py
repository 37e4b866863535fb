"""FastAPI application factory"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from microcredit_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from microcredit_gateway.api.v1 import score, documents, loans, session
from microcredit_gateway.infrastructure.database.session import init_db
from microcredit_gateway.infrastructure.observability.logging import setup_logging
from microcredit_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Micro-Credit Score Gateway",
        description="Credit score, document verification and loan application service",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name, "scoring_strategy": settings.scoring_strategy}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(score.router, prefix="/v1", tags=["score"])
    app.include_router(documents.router, prefix="/v1", tags=["documents"])
    app.include_router(loans.router, prefix="/v1", tags=["loans"])
    app.include_router(session.router, prefix="/v1", tags=["session"])

    return app


app = create_app()
