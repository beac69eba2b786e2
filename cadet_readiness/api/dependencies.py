"""
Wiring between settings and the scoring engine.

The engine itself takes every table and policy as an argument; it never
reads the environment. This module is where the environment turns into
those arguments:

    Settings (env / .env)
        -> grade scale, CFA standards table  (loaded from disk or presets)
        -> ScoringProfile                    (tables + policies together)
        -> route handler

Standards files change once a year at most, so a loaded table is kept
for the life of the process, keyed by its path. Tests swap settings
through ``app.dependency_overrides`` and call ``clear_table_cache()`` so
one test's table never leaks into the next.

A misconfigured scale or table surfaces as ``ConfigurationError`` from
here, which the app turns into a 422 with an ``invalid_configuration``
outcome.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated, Optional

from fastapi import Depends

from ..config.settings import Settings, get_settings
from ..core.scoring.fitness import StandardsTable
from ..core.scoring.grading import DuplicateGradePolicy, GradeScale, grade_scale_preset
from ..core.scoring.readiness import MissingScorePolicy, ReadinessWeights
from ..infrastructure.standards.loader import load_grade_scale, load_standards_table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoringProfile:
    """Everything a scoring call needs besides the student's records."""
    grade_scale: GradeScale
    standards: StandardsTable
    readiness_weights: ReadinessWeights
    duplicate_policy: DuplicateGradePolicy
    missing_policy: MissingScorePolicy
    min_fitness_events: int


# ---------------------------------------------------------------------------
# Table loading (cached per path)
# ---------------------------------------------------------------------------

@lru_cache()
def _cached_standards(path: Optional[str]) -> StandardsTable:
    return load_standards_table(path)


@lru_cache()
def _cached_grade_scale(preset: str, path: Optional[str]) -> GradeScale:
    if path:
        return load_grade_scale(path)
    return grade_scale_preset(preset)


def clear_table_cache() -> None:
    """Forget loaded tables. For tests and for reloading revised standards."""
    _cached_standards.cache_clear()
    _cached_grade_scale.cache_clear()


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

def get_standards_table(
    settings: Annotated[Settings, Depends(get_settings)],
) -> StandardsTable:
    """Active CFA standards table."""
    return _cached_standards(settings.standards_path)


def get_grade_scale(
    settings: Annotated[Settings, Depends(get_settings)],
) -> GradeScale:
    """Active grade scale: a custom file if configured, else a built-in preset."""
    return _cached_grade_scale(settings.grade_scale, settings.grade_scale_path)


def get_scoring_profile(
    settings: Annotated[Settings, Depends(get_settings)],
    standards: Annotated[StandardsTable, Depends(get_standards_table)],
    grade_scale: Annotated[GradeScale, Depends(get_grade_scale)],
) -> ScoringProfile:
    """
    Bundle tables and policy into one object for the routes.

    Weights are passed through unvalidated: the readiness composer reports
    bad weights as an invalid-configuration outcome, which is what the
    client should see.
    """
    profile = ScoringProfile(
        grade_scale=grade_scale,
        standards=standards,
        readiness_weights=settings.readiness_weights,
        duplicate_policy=settings.duplicate_grade_policy,
        missing_policy=settings.missing_score_policy,
        min_fitness_events=settings.min_fitness_events,
    )
    logger.debug(
        "Built scoring profile",
        extra={"grade_scale": grade_scale.name, "standards": standards.name},
    )
    return profile


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# Route signatures use these instead of spelling out Depends()
SettingsDep = Annotated[Settings, Depends(get_settings)]
StandardsTableDep = Annotated[StandardsTable, Depends(get_standards_table)]
ScoringProfileDep = Annotated[ScoringProfile, Depends(get_scoring_profile)]
