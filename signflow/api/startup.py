"""Startup hooks for the Signflow API.

Usage in FastAPI (see ``signflow.api.main``)::

    @asynccontextmanager
    async def lifespan(app):
        configure_logging()
        record_service_startup()
        yield
        await close_database_engine()
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from structlog import get_logger

from signflow.bootstrap.database import close_database_engine
from signflow.config.settings import get_settings
from signflow.infrastructure.monitoring.metrics import get_metrics_collector
from signflow.infrastructure.observability import configure_structlog

SERVICE_NAME = "api"

logger = get_logger()


def configure_logging() -> None:
    """Configure structlog for the current environment.

    Production renders JSON lines; every other environment gets colored
    console output. Must run before anything logs.
    """
    environment = get_settings().environment
    configure_structlog(environment=environment)
    get_logger().bind(component="startup_logging").info(
        "structured_logging_configured", environment=environment
    )


def record_service_startup() -> None:
    get_metrics_collector().record_startup(SERVICE_NAME)
    logger.info("service_startup_recorded", service=SERVICE_NAME)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging()
    settings = get_settings()
    logger.info(
        "api_starting",
        environment=settings.environment,
        persistence="postgres" if settings.database_url else "in-memory",
        signing_provider="clicksign" if settings.clicksign.is_configured else "stub",
    )
    record_service_startup()
    yield
    await close_database_engine()
    logger.info("api_stopped")
