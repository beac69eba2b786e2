"""
Service health checks.

- /health answers as long as the process is up and touches no files.
- /health/ready loads the configured standards table and grade scale and
  re-checks the scoring settings, so a bad file for a new CFA year is
  caught by the deploy instead of by a student looking at a wrong score.
"""

import logging
from typing import Any

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from ... import __version__
from ...core.scoring.results import ConfigurationError
from ...infrastructure.standards.loader import StandardsLoadError
from ..dependencies import SettingsDep, get_grade_scale, get_standards_table

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Liveness payload, plus which tables the process is configured with."""
    status: str
    version: str
    details: dict[str, Any] = {}


class ReadinessCheck(BaseModel):
    """Outcome of one readiness check."""
    name: str
    status: str  # "ok" or "error"
    error: str | None = None


class ReadinessResponse(BaseModel):
    status: str  # "ready" or "not_ready"
    version: str
    checks: list[ReadinessCheck]


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness check",
    description="200 whenever the process is up. Does not load scoring tables.",
)
async def health_check(settings: SettingsDep) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        details={
            "grade_scale": settings.grade_scale_path or settings.grade_scale,
            "standards": settings.standards_path or "packaged",
        }
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    status_code=status.HTTP_200_OK,
    summary="Scoring configuration check",
    description="200 when the tables load and the settings validate, 503 otherwise.",
    responses={
        503: {
            "description": "Scoring configuration is broken",
            "model": ReadinessResponse,
        }
    },
)
async def readiness_check(settings: SettingsDep, response: Response) -> ReadinessResponse:
    """
    Loads the configured standards table and grade scale and checks the
    scoring policy. A table that fails validation would otherwise only
    surface on the first scoring request.
    """
    checks: list[ReadinessCheck] = []

    problems = settings.validate_scoring_config()
    if problems:
        checks.append(ReadinessCheck(
            name="configuration",
            status="error",
            error="; ".join(problems),
        ))
    else:
        checks.append(ReadinessCheck(name="configuration", status="ok"))

    try:
        table = get_standards_table(settings)
        missing = table.missing_entries()
        if missing:
            checks.append(ReadinessCheck(
                name="standards",
                status="error",
                error="No standard for: " + ", ".join(f"{e.value}/{g.value}" for e, g in missing),
            ))
        else:
            checks.append(ReadinessCheck(name="standards", status="ok"))
    except (StandardsLoadError, ConfigurationError) as e:
        checks.append(ReadinessCheck(name="standards", status="error", error=str(e)))

    try:
        get_grade_scale(settings)
        checks.append(ReadinessCheck(name="grade_scale", status="ok"))
    except (StandardsLoadError, ConfigurationError) as e:
        checks.append(ReadinessCheck(name="grade_scale", status="error", error=str(e)))

    all_ok = all(c.status == "ok" for c in checks)
    if not all_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning(
            "Readiness check failed",
            extra={
                "checks": [
                    {"name": c.name, "status": c.status, "error": c.error}
                    for c in checks
                ]
            }
        )

    return ReadinessResponse(
        status="ready" if all_ok else "not_ready",
        version=__version__,
        checks=checks,
    )
