"""
FastAPI application entry point
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.routes import health as health_routes
from api.routes import orders as orders_routes
from api.routes import payments as payments_routes
from api.routes import webhooks as webhooks_routes
from api.middleware import RequestIDMiddleware, LoggingMiddleware
from core.config import settings
from core.exceptions import register_exception_handlers
from core.response import success_response
from core.logging_config import get_logger, configure_logging
from infrastructure.database import create_tables, engine
from infrastructure.external.payments import resolve_access_token
from infrastructure.ratelimit import build_rate_limiter


configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle"""
    # fail fast: a missing provider credential stops startup
    resolve_access_token()
    logger.info("provider_credentials_resolved", provider="mercadopago")

    # dev only; production uses Alembic (alembic upgrade head)
    if settings.DEBUG:
        await create_tables()
        logger.info("database_initialized", message="Database tables created (development)")
    else:
        logger.info(
            "database_migrations_required",
            message="No auto-create in production, use Alembic migrations (alembic upgrade head)"
        )

    app.state.rate_limiter = build_rate_limiter()
    logger.info(
        "rate_limiter_initialized",
        limiter=type(app.state.rate_limiter).__name__ if app.state.rate_limiter else None,
    )

    yield

    limiter = getattr(app.state, "rate_limiter", None)
    if limiter is not None:
        await limiter.aclose()
    await engine.dispose()
    logger.info("application_shutdown", message="Application shutdown")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        description="Payment orchestration for self-service totems (Mercado Pago Point and PIX)",
    )
    app.state.rate_limiter = None

    # middlewares run bottom-up: request id first, then logging
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(orders_routes.router, prefix="/api/v1")
    app.include_router(payments_routes.router, prefix="/api/v1")
    app.include_router(webhooks_routes.router, prefix="/api/v1")
    app.include_router(health_routes.router)

    @app.get("/", tags=["Root"])
    async def root():
        return success_response(
            data={
                "name": settings.PROJECT_NAME,
                "version": settings.VERSION,
                "docs": "/docs",
            }
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info"
    )
