"""
Readiness index endpoint.

Takes a full snapshot of a student's records and runs the whole engine:
grades -> GPA, measurements -> fitness composite, goals -> completion
rate, and finally the blended readiness index. The sub-results come
back alongside the index so the dashboard can show where it came from.
"""

import logging
from typing import Optional

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from ...core.scoring.fitness import composite_score, score_records
from ...core.scoring.gpa import compute_gpa, course_percentages
from ...core.scoring.readiness import (
    MissingScorePolicy,
    compute_readiness,
    goal_completion_rate,
)
from ..dependencies import ScoringProfileDep
from ..schemas import (
    AssignmentIn,
    CompositeOut,
    CourseIn,
    ExerciseIn,
    GoalIn,
    GpaOut,
    GradeIn,
    ReadinessOut,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class ReadinessRequest(BaseModel):
    """Everything the storage layer holds for one student."""
    courses: list[CourseIn] = Field(default_factory=list)
    assignments: list[AssignmentIn] = Field(default_factory=list)
    grades: list[GradeIn] = Field(default_factory=list)
    exercises: list[ExerciseIn] = Field(default_factory=list)
    goals: list[GoalIn] = Field(default_factory=list)
    missing_policy: Optional[MissingScorePolicy] = Field(
        None,
        description="Override how missing sub-scores are handled"
    )


class ReadinessResponse(BaseModel):
    readiness: ReadinessOut
    gpa: GpaOut
    fitness: CompositeOut
    goal_completion_rate: Optional[float] = Field(
        None,
        description="Percent of goals completed; null when there are no goals"
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=ReadinessResponse,
    status_code=status.HTTP_200_OK,
    summary="Overall readiness index",
)
async def readiness(request: ReadinessRequest, profile: ScoringProfileDep) -> ReadinessResponse:
    """
    Compute the readiness index from raw records.

    A GPA with no graded courses and a fitness composite below the
    reportable minimum both count as missing; the configured (or
    requested) missing-score policy decides what happens then.
    """
    courses = [c.to_domain() for c in request.courses]
    percentages = course_percentages(
        courses,
        [a.to_domain() for a in request.assignments],
        [g.to_domain() for g in request.grades],
        scale=profile.grade_scale,
        policy=profile.duplicate_policy,
    )
    gpa = compute_gpa(courses, percentages, scale=profile.grade_scale)

    scores = score_records([e.to_domain() for e in request.exercises], profile.standards)
    fitness = composite_score(scores, min_events=profile.min_fitness_events)

    goal_rate = goal_completion_rate(g.to_domain() for g in request.goals)

    result = compute_readiness(
        gpa.value_or_none(),
        fitness.value_or_none(),
        goal_rate,
        weights=profile.readiness_weights,
        policy=request.missing_policy or profile.missing_policy,
    )

    logger.info(
        "Computed readiness",
        extra={
            "outcome": result.outcome.value,
            "gpa_outcome": gpa.outcome.value,
            "fitness_outcome": fitness.outcome.value,
            "goals": len(request.goals),
        },
    )

    return ReadinessResponse(
        readiness=ReadinessOut.from_result(result),
        gpa=GpaOut.from_result(gpa),
        fitness=CompositeOut.from_result(fitness),
        goal_completion_rate=goal_rate,
    )
