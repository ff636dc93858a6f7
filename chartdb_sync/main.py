"""ChartDB Sync API — reference sync endpoint (FastAPI application entry point).

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ChartSyncError → wire error envelope
    - CORS configured from settings (the diagram editor runs on another origin)
    - Database initialized and tables created on startup via lifespan

Design Decisions:
    - create_app(settings) factory plus module-level app: tests build their
      own app, uvicorn serves chartdb_sync.main:app
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chartdb_sync.api.error_handlers import register_error_handlers
from chartdb_sync.api.routes import health, sync
from chartdb_sync.config import Settings, get_settings
from chartdb_sync.infrastructure.database import init_db
from chartdb_sync.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown lifecycle."""
        setup_logging(settings.log_level, settings.log_format)
        manager = init_db(
            settings.database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
        )
        await manager.create_tables()
        logger.info("ChartDB sync API started")
        yield
        logger.info("ChartDB sync API shutting down")
        await manager.dispose()

    app = FastAPI(title="ChartDB Sync API", version="1.0.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(health.router)
    app.include_router(sync.router)
    register_error_handlers(app)
    return app


app = create_app()
