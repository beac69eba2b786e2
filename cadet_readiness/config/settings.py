"""
Environment-driven settings.

Every field maps to an upper-case environment variable (or a line in
.env); pydantic converts and type-checks the values when Settings is built.

Scoring policy (which grade scale, how readiness is blended, how many
CFA events make a reportable composite) is configuration, not code, so a
school or a new CFA year doesn't need a release.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.scoring.fitness import CFA_EVENT_COUNT, MIN_REPORTABLE_EVENTS
from ..core.scoring.grading import GRADE_SCALES, DuplicateGradePolicy
from ..core.scoring.readiness import MissingScorePolicy, ReadinessWeights


class Settings(BaseSettings):
    """
    Service and scoring-policy settings.

    List-valued settings such as cors_origins are comma-separated strings.
    """

    # Service
    api_title: str = "Cadet Readiness API"
    api_version: str = "v1"

    # Scoring tables
    standards_path: Optional[str] = Field(
        default=None,
        description="Path to a CFA standards JSON file. Defaults to the packaged table."
    )
    grade_scale: str = Field(
        default="plus_minus",
        description="Built-in grade scale to use: plus_minus or letter."
    )
    grade_scale_path: Optional[str] = Field(
        default=None,
        description="Path to a custom grade scale JSON file. Overrides grade_scale."
    )

    # Scoring policy
    duplicate_grade_policy: DuplicateGradePolicy = Field(
        default=DuplicateGradePolicy.MOST_RECENT,
        description="Which score counts when an assignment was graded twice."
    )
    min_fitness_events: int = Field(
        default=MIN_REPORTABLE_EVENTS,
        description="CFA events required before a composite is reported."
    )
    readiness_weight_gpa: float = Field(default=0.5)
    readiness_weight_fitness: float = Field(default=0.3)
    readiness_weight_goals: float = Field(default=0.2)
    missing_score_policy: MissingScorePolicy = Field(
        default=MissingScorePolicy.RENORMALIZE,
        description="renormalize: drop missing sub-scores; undefined: no readiness until all exist."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Root log level for the service"
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Origins allowed to call the API, comma-separated; * allows any."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """CORS_ORIGINS split on commas, blanks dropped."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def readiness_weights(self) -> ReadinessWeights:
        return ReadinessWeights(
            gpa=self.readiness_weight_gpa,
            fitness=self.readiness_weight_fitness,
            goals=self.readiness_weight_goals,
        )

    def validate_scoring_config(self) -> list[str]:
        """
        Check scoring settings that pydantic can't check field by field.

        Returns a list of problems; empty means the configuration is usable.
        Kept separate from field validation so the API can start and
        report the problems on /health/ready instead of crash-looping.
        """
        problems = []

        if not self.grade_scale_path and self.grade_scale not in GRADE_SCALES:
            problems.append(
                f"GRADE_SCALE must be one of {sorted(GRADE_SCALES)}, got {self.grade_scale!r}"
            )
        if self.grade_scale_path and not Path(self.grade_scale_path).is_file():
            problems.append(f"GRADE_SCALE_PATH does not exist: {self.grade_scale_path}")
        if self.standards_path and not Path(self.standards_path).is_file():
            problems.append(f"STANDARDS_PATH does not exist: {self.standards_path}")

        if not 1 <= self.min_fitness_events <= CFA_EVENT_COUNT:
            problems.append(
                f"MIN_FITNESS_EVENTS must be between 1 and {CFA_EVENT_COUNT}, "
                f"got {self.min_fitness_events}"
            )

        problems.extend(f"READINESS_WEIGHT: {p}" for p in self.readiness_weights.problems())
        return problems


@lru_cache()
def get_settings() -> Settings:
    """Process-wide settings. Tests call get_settings.cache_clear() after changing the environment."""
    return Settings()
