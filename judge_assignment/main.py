"""
judge_assignment/main.py
FastAPI application for the judge-team assignment engine
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from judge_assignment import __version__
from judge_assignment.config import settings
from judge_assignment.database import init_db, close_db
from judge_assignment.errors import register_exception_handlers, get_error_summary
from judge_assignment.routes import router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting judge assignment engine...")
    await init_db()
    logger.info(f"Feature flags: {settings.get_all_flags()}")
    yield
    await close_db()
    logger.info("Judge assignment engine stopped")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Judge Assignment Engine",
        description="Judge-team assignment and workload balancing",
        version=__version__,
        lifespan=lifespan
    )

    register_exception_handlers(app)
    app.include_router(router, prefix="/api")

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "service": "judge-assignment", "version": __version__}

    @app.get("/api/errors/health")
    async def errors_health():
        return get_error_summary()

    return app


app = create_app()
