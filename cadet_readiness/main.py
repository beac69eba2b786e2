"""
HTTP entry point for the scoring engine.

`create_app()` wires settings, routers and error handlers together. Tests
build their own instance with overridden dependencies; servers import the
module-level `app`.

Run locally:
    uvicorn cadet_readiness.main:app --reload

Behind a process manager:
    gunicorn cadet_readiness.main:app -w 4 -k uvicorn.workers.UvicornWorker
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.routes import fitness, grades, health, readiness
from .config.settings import get_settings
from .core.scoring.results import ConfigurationError

# Root logging: one line per record, level from LOG_LEVEL
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=get_settings().log_level.upper(),
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup and shutdown hooks.

    Logs which scoring configuration is active and any problems with it.
    Tables are loaded lazily on first use and then cached.
    """
    settings = get_settings()

    logger.info(
        "Cadet Readiness API starting",
        extra={
            "version": settings.api_version,
            "grade_scale": settings.grade_scale_path or settings.grade_scale,
            "standards": settings.standards_path or "packaged",
        }
    )

    problems = settings.validate_scoring_config()
    if problems:
        logger.error(
            "Invalid scoring configuration",
            extra={"problems": problems}
        )
        # /health/ready reports these; scoring routes return 422 or
        # invalid_configuration outcomes until they're fixed

    yield

    logger.info("Cadet Readiness API shutting down")


def create_app() -> FastAPI:
    """Build the FastAPI app: middleware, routers and exception handlers."""
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=__version__,
        description="""
        Progress scoring for service-academy applicants.

        ## Features

        - Course percentage and letter grade from assignments and grades
        - Cumulative GPA (standard and weighted)
        - CFA event scoring and composite fitness score
        - Overall readiness index

        ## Results

        Every score carries an `outcome`: `ok`, `no_data`,
        `insufficient_data` or `invalid_configuration`. Numeric fields are
        null unless the outcome is `ok`. A zero is always a real zero.
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Dashboard origins come from CORS_ORIGINS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    app.include_router(
        grades.router,
        prefix="/api/v1/grades",
        tags=["Grades"],
    )

    app.include_router(
        fitness.router,
        prefix="/api/v1/fitness",
        tags=["Fitness"],
    )

    app.include_router(
        readiness.router,
        prefix="/api/v1/readiness",
        tags=["Readiness"],
    )

    @app.get("/", include_in_schema=False)
    async def root():
        """Service name and where to find the docs."""
        return {
            "message": "Cadet Readiness API",
            "version": settings.api_version,
            "docs": "/docs",
            "health": "/health",
        }

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(request: Request, exc: ConfigurationError):
        """
        Inconsistent input the engine refuses to score.

        A course with zero credit hours or an assignment out of zero points
        would produce a plausible but wrong number, so the request fails.
        """
        logger.warning(
            "Rejected inconsistent scoring input",
            extra={"path": request.url.path, "error": str(exc)},
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": str(exc), "outcome": "invalid_configuration"},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Anything unexpected: full traceback in the log, generic 500 to the client."""
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error while scoring. The error has been logged."
            }
        )

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": __version__,
        }
    )

    return app


# Imported by uvicorn/gunicorn
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "cadet_readiness.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
