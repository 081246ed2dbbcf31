import logging
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from insightmate.analysis.router import router as analysis_router
from insightmate.config import settings
from insightmate.database import create_tables
from insightmate.insights.router import router as insights_router
from insightmate.middleware.error_handler import ErrorHandlerMiddleware
from insightmate.middleware.logging import RequestLoggingMiddleware
from insightmate.records.router import collect_router
from insightmate.records.router import router as records_router
from insightmate.similarity.router import router as similarity_router

structlog.configure(
    processors=[
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.getLevelName(settings.LOG_LEVEL.upper())
    ),
    logger_factory=structlog.PrintLoggerFactory(),
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.DB_AUTO_CREATE:
        await create_tables()
        logger.info("database_tables_ready")
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="InsightMate API",
        version="0.1.0",
        docs_url="/docs",
        lifespan=lifespan,
    )

    cors_origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(ErrorHandlerMiddleware)

    app.include_router(collect_router, prefix="/api")
    app.include_router(analysis_router, prefix="/api")
    app.include_router(similarity_router, prefix="/api")
    app.include_router(insights_router, prefix="/api")
    app.include_router(records_router, prefix="/api")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
