"""
TutorGate FastAPI Application

Content entitlement and release engine for the tutoring portal.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from tutorgate.config import settings
from tutorgate.core.database import close_db, engine
from tutorgate.jobs.scheduler import start_release_sweeps, stop_release_sweeps

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events.

    Startup:
    - Configure logging
    - Verify database connection
    - Start the publication and curriculum sweeps

    Shutdown:
    - Stop the sweeps
    - Close database connections
    """
    configure_logging()
    logger.info("TutorGate starting...")

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection verified")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        raise

    sweeps = start_release_sweeps() if settings.SCHEDULER_ENABLED else []
    if not sweeps:
        logger.info("Release sweeps disabled")

    logger.info("TutorGate ready")

    yield

    logger.info("TutorGate shutting down...")
    await stop_release_sweeps(sweeps)
    await close_db()
    logger.info("Shutdown complete")


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="TutorGate",
        description="Content entitlement and release engine",
        version="0.1.0",
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.is_local else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", tags=["Health"])
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {
            "service": "TutorGate",
            "status": "operational",
            "version": "0.1.0",
            "environment": settings.ENVIRONMENT,
        }

    @app.get("/health", tags=["Health"], response_model=None)
    async def health_check() -> JSONResponse:
        """Health check endpoint for load balancers."""
        checks: dict[str, dict[str, Any]] = {}

        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            checks["database"] = {"status": "healthy"}
        except Exception as e:
            checks["database"] = {"status": "unhealthy", "error": str(e)}

        checks["scheduler"] = {
            "status": "healthy",
            "enabled": settings.SCHEDULER_ENABLED,
            "publication_interval_seconds": settings.PUBLICATION_SWEEP_INTERVAL_SECONDS,
            "curriculum_interval_seconds": settings.CURRICULUM_SWEEP_INTERVAL_SECONDS,
        }

        all_healthy = all(check["status"] == "healthy" for check in checks.values())
        status_code = 200 if all_healthy else 503

        return JSONResponse(
            status_code=status_code,
            content={
                "status": "healthy" if all_healthy else "unhealthy",
                "environment": settings.ENVIRONMENT,
                "checks": checks,
            },
        )

    @app.get("/health/ready", tags=["Health"], response_model=None)
    async def readiness_check() -> dict[str, str] | JSONResponse:
        """Readiness check. Returns 200 when the database answers."""
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return {"status": "ready"}
        except Exception:
            return JSONResponse(
                status_code=503,
                content={"status": "not_ready"},
            )

    @app.get("/health/live", tags=["Health"])
    async def liveness_check() -> dict[str, str]:
        """Liveness check."""
        return {"status": "alive"}

    # Register API routers
    from tutorgate.api.v1 import classes, content, operations, submissions

    app.include_router(content.router, prefix="/api/v1/content", tags=["Content"])
    app.include_router(submissions.router, prefix="/api/v1", tags=["Submissions"])
    app.include_router(classes.router, prefix="/api/v1/classes", tags=["Classes"])
    app.include_router(operations.router, prefix="/api/v1/operations", tags=["Operations"])

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tutorgate.main:app",
        host="0.0.0.0",  # nosec B104 - Intentional for containerized deployment
        port=8000,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
