"""
Fitness scoring endpoints.

Score a single CFA measurement, or a batch of measurements into a
composite. The standards table in force can be inspected so a client can
show "what does 100 look like" next to the student's numbers.
"""

import logging
from typing import Optional

from fastapi import APIRouter, status
from pydantic import BaseModel, Field

from ...core.scoring.fitness import (
    ExerciseStatus,
    composite_score,
    exercise_status,
    score_exercise,
    score_records,
)
from ...core.scoring.models import CfaEvent, Gender
from ..dependencies import ScoringProfileDep, StandardsTableDep
from ..schemas import CompositeOut, ExerciseIn

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class ScoreRequest(BaseModel):
    event: CfaEvent
    gender: Gender
    value: float = Field(description="Raw measurement in the standard's unit")


class ScoreResponse(BaseModel):
    event: CfaEvent
    label: str = Field(description="Event name as printed on the score sheet")
    gender: Gender
    value: float
    unit: str
    score: float = Field(description="0-100 points")
    status: ExerciseStatus


class CompositeRequest(BaseModel):
    records: list[ExerciseIn] = Field(
        default_factory=list,
        description="Measurements; only the latest per event is scored"
    )
    min_events: Optional[int] = Field(
        None,
        description="Override the configured minimum events for a reportable composite"
    )


class StandardOut(BaseModel):
    event: CfaEvent
    label: str
    gender: Gender
    unit: str
    direction: str
    breakpoints: list[tuple[float, float]]


class StandardsResponse(BaseModel):
    name: str
    standards: list[StandardOut]


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "/standards",
    response_model=StandardsResponse,
    status_code=status.HTTP_200_OK,
    summary="Active CFA standards table",
)
async def get_standards(table: StandardsTableDep) -> StandardsResponse:
    return StandardsResponse(
        name=table.name,
        standards=[
            StandardOut(
                event=s.event,
                label=s.event.label,
                gender=s.gender,
                unit=s.unit,
                direction=s.direction.value,
                breakpoints=[(b.raw, b.points) for b in s.breakpoints],
            )
            for s in table.standards
        ],
    )


@router.post(
    "/score",
    response_model=ScoreResponse,
    status_code=status.HTTP_200_OK,
    summary="Score one measurement",
)
async def score_one(request: ScoreRequest, table: StandardsTableDep) -> ScoreResponse:
    standard = table.standard_for(request.event, request.gender)
    return ScoreResponse(
        event=request.event,
        label=request.event.label,
        gender=request.gender,
        value=request.value,
        unit=standard.unit,
        score=score_exercise(request.event, request.gender, request.value, table),
        status=exercise_status(request.event, request.gender, request.value, table),
    )


@router.post(
    "/composite",
    response_model=CompositeOut,
    status_code=status.HTTP_200_OK,
    summary="Composite CFA score",
)
async def composite(request: CompositeRequest, profile: ScoringProfileDep) -> CompositeOut:
    """
    Composite over the latest measurement of each event.

    With fewer events than the configured minimum the outcome is
    ``insufficient_data``. Between the minimum and six, the value is
    reported with ``complete`` false.
    """
    scores = score_records([r.to_domain() for r in request.records], profile.standards)
    result = composite_score(scores, min_events=request.min_events or profile.min_fitness_events)

    logger.info(
        "Computed fitness composite",
        extra={
            "outcome": result.outcome.value,
            "events_present": result.events_present,
            "records": len(request.records),
        },
    )
    return CompositeOut.from_result(result)
