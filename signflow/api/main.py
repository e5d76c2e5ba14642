"""FastAPI application entry point for Signflow."""

from fastapi import FastAPI

from signflow.api.errors import register_exception_handlers
from signflow.api.middleware import (
    LoggingMiddleware,
    MetricsMiddleware,
    OriginCheckMiddleware,
)
from signflow.api.routes import (
    admin_router,
    audit_router,
    auth_router,
    certificates_router,
    dashboard_router,
    documents_router,
    health_router,
    metrics_router,
    signers_router,
    users_router,
)
from signflow.api.startup import lifespan


def create_app() -> FastAPI:
    app = FastAPI(
        title="Signflow API",
        description="Digital document signatures with A1 certificates",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Last added runs first: logging wraps metrics wraps the origin check
    app.add_middleware(OriginCheckMiddleware)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(LoggingMiddleware)

    register_exception_handlers(app)

    for router in (
        health_router,
        metrics_router,
        auth_router,
        users_router,
        admin_router,
        certificates_router,
        documents_router,
        signers_router,
        audit_router,
        dashboard_router,
    ):
        app.include_router(router)
    return app


app = create_app()
