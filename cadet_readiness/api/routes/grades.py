"""
Academic scoring endpoints.

Clients post the records they already hold (courses, assignments,
grades) and get back course percentages, letter grades and GPA. Nothing
is stored; every call is computed from the request body alone.
"""

import logging
from typing import Optional

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from ...core.scoring.gpa import compute_gpa, course_percentages, gpa_impact
from ...core.scoring.grading import (
    DuplicateGradePolicy,
    compute_course_grade,
    grade_distribution,
    predict_course_grade,
    required_score,
)
from ..dependencies import ScoringProfileDep
from ..schemas import (
    AssignmentIn,
    CourseGradeOut,
    CourseIn,
    GpaImpactOut,
    GpaOut,
    GradeIn,
    RequiredScoreOut,
)

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class CourseGradeRequest(BaseModel):
    """One course's assignments and the grades recorded against them."""
    assignments: list[AssignmentIn] = Field(default_factory=list)
    grades: list[GradeIn] = Field(default_factory=list)
    duplicate_policy: Optional[DuplicateGradePolicy] = Field(
        None,
        description="Override the configured policy for repeated grades"
    )


class PredictionRequest(CourseGradeRequest):
    projected_scores: dict[str, float] = Field(
        default_factory=dict,
        description="assignment id -> expected raw score for ungraded assignments"
    )


class PredictionResponse(BaseModel):
    current: CourseGradeOut
    projected: CourseGradeOut
    projected_assignments: list[str] = Field(
        description="Assignments whose projection was applied"
    )


class DistributionResponse(BaseModel):
    grade_scale: str
    distribution: dict[str, int] = Field(description="letter -> graded assignment count")


class RequiredScoreRequest(PredictionRequest):
    assignment_id: str = Field(description="The ungraded assignment to solve for")
    target_percentage: float = Field(ge=0, le=100, description="Course percentage to reach")


class GpaRequest(BaseModel):
    """All courses plus every assignment and grade across them."""
    courses: list[CourseIn] = Field(default_factory=list)
    assignments: list[AssignmentIn] = Field(default_factory=list)
    grades: list[GradeIn] = Field(default_factory=list)


class GpaImpactRequest(GpaRequest):
    predicted_percentages: dict[str, float] = Field(
        default_factory=dict,
        description="course id -> predicted final percentage"
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post(
    "/course",
    response_model=CourseGradeOut,
    status_code=status.HTTP_200_OK,
    summary="Course percentage and letter grade",
)
async def course_grade(request: CourseGradeRequest, profile: ScoringProfileDep) -> CourseGradeOut:
    """
    Weighted course percentage.

    Ungraded assignments don't count against the student. If nothing is
    graded yet the outcome is ``no_data`` and percentage is null.
    """
    result = compute_course_grade(
        [a.to_domain() for a in request.assignments],
        [g.to_domain() for g in request.grades],
        scale=profile.grade_scale,
        policy=request.duplicate_policy or profile.duplicate_policy,
    )
    logger.info(
        "Computed course grade",
        extra={
            "outcome": result.outcome.value,
            "graded": result.graded_assignments,
            "total": result.total_assignments,
        },
    )
    return CourseGradeOut.from_result(result)


@router.post(
    "/course/predict",
    response_model=PredictionResponse,
    status_code=status.HTTP_200_OK,
    summary="Project a course grade forward",
)
async def predict_grade(request: PredictionRequest, profile: ScoringProfileDep) -> PredictionResponse:
    """What the course grade becomes if the upcoming assignments score as projected."""
    prediction = predict_course_grade(
        [a.to_domain() for a in request.assignments],
        [g.to_domain() for g in request.grades],
        request.projected_scores,
        scale=profile.grade_scale,
        policy=request.duplicate_policy or profile.duplicate_policy,
    )
    return PredictionResponse(
        current=CourseGradeOut.from_result(prediction.current),
        projected=CourseGradeOut.from_result(prediction.projected),
        projected_assignments=list(prediction.projected_assignments),
    )


@router.post(
    "/course/required-score",
    response_model=RequiredScoreOut,
    status_code=status.HTTP_200_OK,
    summary="Score needed on an assignment to reach a target grade",
)
async def required(request: RequiredScoreRequest, profile: ScoringProfileDep) -> RequiredScoreOut:
    """
    Raw score the student needs on one ungraded assignment.

    ``achievable`` is false when even full marks fall short; ``secured``
    is true when the target is met whatever the score.
    """
    result = required_score(
        [a.to_domain() for a in request.assignments],
        [g.to_domain() for g in request.grades],
        request.assignment_id,
        request.target_percentage,
        projected_scores=request.projected_scores,
        policy=request.duplicate_policy or profile.duplicate_policy,
    )
    logger.info(
        "Computed required score",
        extra={
            "outcome": result.outcome.value,
            "assignment_id": request.assignment_id,
            "achievable": result.achievable,
        },
    )
    return RequiredScoreOut.from_result(result)


@router.post(
    "/course/distribution",
    response_model=DistributionResponse,
    status_code=status.HTTP_200_OK,
    summary="Letter-grade distribution of graded assignments",
)
async def distribution(request: CourseGradeRequest, profile: ScoringProfileDep) -> DistributionResponse:
    counts = grade_distribution(
        [a.to_domain() for a in request.assignments],
        [g.to_domain() for g in request.grades],
        scale=profile.grade_scale,
        policy=request.duplicate_policy or profile.duplicate_policy,
    )
    return DistributionResponse(grade_scale=profile.grade_scale.name, distribution=counts)


@router.post(
    "/gpa",
    response_model=GpaOut,
    status_code=status.HTTP_200_OK,
    summary="Cumulative GPA",
)
async def gpa(request: GpaRequest, profile: ScoringProfileDep) -> GpaOut:
    """
    Credit-weighted GPA across all posted courses.

    Returns both the standard GPA (4.0 cap) and the weighted
    quality-point GPA. Courses with nothing graded are skipped.
    """
    courses = [c.to_domain() for c in request.courses]
    percentages = course_percentages(
        courses,
        [a.to_domain() for a in request.assignments],
        [g.to_domain() for g in request.grades],
        scale=profile.grade_scale,
        policy=profile.duplicate_policy,
    )
    result = compute_gpa(courses, percentages, scale=profile.grade_scale)

    logger.info(
        "Computed GPA",
        extra={
            "outcome": result.outcome.value,
            "courses": len(courses),
            "courses_counted": result.courses_counted,
        },
    )
    return GpaOut.from_result(result)


@router.post(
    "/gpa/impact",
    response_model=GpaImpactOut,
    status_code=status.HTTP_200_OK,
    summary="GPA change if predicted course grades come true",
)
async def impact(request: GpaImpactRequest, profile: ScoringProfileDep) -> GpaImpactOut:
    courses = [c.to_domain() for c in request.courses]
    percentages = course_percentages(
        courses,
        [a.to_domain() for a in request.assignments],
        [g.to_domain() for g in request.grades],
        scale=profile.grade_scale,
        policy=profile.duplicate_policy,
    )
    result = gpa_impact(
        courses,
        percentages,
        request.predicted_percentages,
        scale=profile.grade_scale,
    )
    return GpaImpactOut.from_result(result)
