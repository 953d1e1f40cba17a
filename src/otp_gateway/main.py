"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from otp_gateway.api.admin import router as admin_router
from otp_gateway.api.auth import router as auth_router
from otp_gateway.api.errors import register_exception_handlers
from otp_gateway.api.otp import router as otp_router
from otp_gateway.clock import SystemClock
from otp_gateway.config import settings
from otp_gateway.database.engine import async_session_factory, engine, init_db
from otp_gateway.services.container import build_services

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle hook."""
    logger.info("Starting %s …", settings.app_name)
    await init_db(
        engine,
        async_session_factory,
        settings.default_otp_length,
        settings.default_otp_ttl_seconds,
    )
    logger.info("Database initialised")

    services = build_services(settings, async_session_factory, SystemClock())
    app.state.services = services
    services.scheduler.start()
    yield
    logger.info("Shutting down %s …", settings.app_name)
    # The sweep must stop before its connections go away
    services.scheduler.stop()
    await engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app_name,
        description="One-time password issuing and validation service",
        version="0.1.0",
        lifespan=lifespan,
    )
    register_exception_handlers(app)
    app.include_router(auth_router)
    app.include_router(otp_router)
    app.include_router(admin_router)

    @app.get("/health")
    async def health_check():
        """Simple liveness probe."""
        return {"status": "healthy", "app": settings.app_name}

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    uvicorn.run(
        app,
        host=settings.server_host,
        port=settings.server_port,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    run()
