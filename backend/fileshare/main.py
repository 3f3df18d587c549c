"""FastAPI application entry point."""
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from fileshare.config import Settings
from fileshare.context import AppContext
from fileshare.database import get_db
from fileshare.errors import register_error_handlers
from fileshare.models import Base
from fileshare.routes.files import router as files_router
from fileshare.routes.pages import router as pages_router
from fileshare.schemas.common import HealthResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and the storage directory on startup, release the pool on shutdown."""
    context: AppContext = app.state.context
    async with context.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    context.storage.base_path.mkdir(parents=True, exist_ok=True)
    logger.info("File share ready, storing uploads in %s", context.storage.base_path.resolve())

    yield

    await context.engine.dispose()
    logger.info("Application shutdown complete")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()

    app = FastAPI(
        title="File Share API",
        version="1.0.0",
        description="Upload a file, get back a public URL.",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.context = AppContext.from_settings(settings)

    register_error_handlers(app)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        logger.info(
            "method=%s path=%s status=%s duration=%.4fs",
            request.method, request.url.path, response.status_code, time.time() - start_time,
        )
        return response

    @app.get("/api/health", response_model=HealthResponse)
    async def health_check(db: AsyncSession = Depends(get_db)):
        """Verify API and database connectivity."""
        try:
            await db.execute(text("SELECT 1"))
            return {"status": "ok", "database": "connected"}
        except Exception as e:
            return {"status": "error", "database": str(e)}

    app.include_router(pages_router)
    app.include_router(files_router)
    return app


def run() -> None:
    """Console entry point: serve the app on API_HOST:API_PORT."""
    settings = Settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app(settings)
    logger.info("Server is starting on http://%s:%d", settings.API_HOST, settings.API_PORT)
    try:
        uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT, log_config=None)
    except SystemExit as e:
        if e.code:
            logger.error(
                "Error starting server on %s:%d (exit status %s)",
                settings.API_HOST, settings.API_PORT, e.code,
            )
        raise


if __name__ == "__main__":
    run()
