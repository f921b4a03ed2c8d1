# marketplace/adapters/api/main.py
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from marketplace.adapters.api.errors import register_exception_handlers
from marketplace.adapters.persistence.database import init_db
from marketplace.shared.config import AppEnv, settings
from marketplace.shared.container import Container, container
from marketplace.shared.logging_config import configure_logging
from marketplace.shared.observability import instrument_fastapi, setup_telemetry

# Import Routers
# Note: We import the modules directly to ensure 'container.wire' works correctly
from marketplace.adapters.api.routers import admin, announcements, health, messages, orders, products

logger = structlog.get_logger()

WIRED_MODULES = [
    "marketplace.adapters.api.dependencies",
    "marketplace.adapters.api.routers.admin",
    "marketplace.adapters.api.routers.health",
]


def create_app(app_container: Optional[Container] = None) -> FastAPI:
    """
    Factory function to create the FastAPI application.

    Tests pass their own container with overridden providers.
    """
    app_container = app_container or container

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        1. Startup: logging, tracing, DI wiring, schema and JSON stores.
        2. Shutdown: unwire and release the connection pool.
        """
        configure_logging(app_container.config.LOG_FORMAT(), app_container.config.LOG_LEVEL())
        setup_telemetry(settings.OTEL_SERVICE_NAME)
        logger.info("app_startup", env=settings.APP_ENV.value, app=settings.APP_NAME)

        # We must explicitly tell the container which modules use the @inject decorator.
        app_container.wire(modules=WIRED_MODULES)

        # Fail fast on a bad database URL or unwritable data directory.
        init_db(app_container.db_engine())
        await app_container.message_store().ensure()
        await app_container.announcement_store().ensure()

        yield

        logger.info("app_shutdown")
        app_container.unwire()
        app_container.db_engine().dispose()

    app = FastAPI(
        title=settings.APP_NAME,
        version="1.0.0",
        description="Marketplace backend: catalog, checkout, orders, messaging, announcements",
        lifespan=lifespan,
        docs_url="/docs" if settings.APP_ENV != AppEnv.PRODUCTION else None,
        redoc_url=None,
    )
    app.state.container = app_container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.DEBUG else settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    instrument_fastapi(app)
    register_exception_handlers(
        app,
        expose_internal_errors=settings.APP_ENV != AppEnv.PRODUCTION,
    )

    # Register Routers
    app.include_router(health.router)
    app.include_router(orders.router)
    app.include_router(messages.router)
    app.include_router(products.router)
    app.include_router(announcements.router)
    app.include_router(admin.router)

    return app


# Entry point for Uvicorn
app = create_app()

# Entry point for local debugging (e.g. `python -m marketplace.adapters.api.main`)
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "marketplace.adapters.api.main:create_app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        factory=True,
    )
