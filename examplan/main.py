# examplan/main.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import uvicorn
import logging

from .api.v1.api import api_router
from .core.config import get_settings
from .core.exceptions import AppError
from .database import init_db
from .logging_config import LOGGING_CONFIG

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown."""
    logger.info("Starting up the application...")
    try:
        await init_db(database_url=settings.DATABASE_URL, create_tables=True)
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}", exc_info=True)
        raise

    yield

    logger.info("Shutting down the application...")
    from .database import db_manager

    await db_manager.close()


def create_app(use_lifespan: bool = True) -> FastAPI:
    """Build the API application; tests skip the lifespan and override the session."""
    app = FastAPI(
        title="Examplan API",
        description="Automated exam scheduling for academic institutions",
        version="1.0.0",
        lifespan=lifespan if use_lifespan else None,
    )

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(
                f"{exc} for request {request.method} {request.url}", exc_info=True
            )
        else:
            logger.info(f"{request.method} {request.url.path} -> {exc.code}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Log unhandled exceptions with a full traceback and return a generic
        500 so internals are not leaked to the client.
        """
        logger.error(
            f"Unhandled exception for request {request.method} {request.url}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "An internal server error occurred."},
        )

    app.include_router(api_router, prefix="/api/v1")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():
        """Health check endpoint to verify service and database connectivity."""
        from .database import check_db_health

        db_health = await check_db_health()
        return {
            "status": "healthy" if db_health["status"] == "healthy" else "unhealthy",
            "service": "examplan",
            "database": db_health,
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "examplan.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
        log_config=LOGGING_CONFIG,
    )
