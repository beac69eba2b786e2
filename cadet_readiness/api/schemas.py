"""
Request and response models shared across routes.

Input models mirror the records the storage layer already holds and
convert to core dataclasses with ``to_domain()``. Output models flatten
the engine's tagged results: ``outcome`` says whether the numeric fields
are meaningful, so clients never have to guess whether 0 means zero.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from ..core.scoring.models import (
    Assignment,
    CfaEvent,
    Course,
    ExerciseRecord,
    Gender,
    Goal,
    GoalStatus,
    Grade,
    Semester,
    Term,
    WeightClass,
)
from ..core.scoring.results import (
    CompositeResult,
    CourseGradeResult,
    GpaImpact,
    GpaResult,
    Outcome,
    ReadinessResult,
    RequiredScoreResult,
)


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

class CourseIn(BaseModel):
    """A course. Credit hours are validated by the engine, not here."""
    id: str
    code: str = ""
    name: str = ""
    credit_hours: float = Field(description="Credit hours; must be positive")
    weight_class: WeightClass = WeightClass.STANDARD
    year: Optional[int] = None
    semester: Optional[Semester] = None

    def to_domain(self) -> Course:
        term = Term(self.year, self.semester) if self.year and self.semester else None
        return Course(
            id=self.id,
            code=self.code,
            name=self.name,
            credit_hours=self.credit_hours,
            weight_class=self.weight_class,
            term=term,
        )


class AssignmentIn(BaseModel):
    id: str
    course_id: str = ""
    max_score: float = Field(description="Points available; must be positive")
    weight: float = Field(default=1.0, description="Relative weight within the course")
    title: str = ""
    due_date: Optional[date] = None

    def to_domain(self) -> Assignment:
        return Assignment(
            id=self.id,
            course_id=self.course_id,
            max_score=self.max_score,
            weight=self.weight,
            title=self.title,
            due_date=self.due_date,
        )


class GradeIn(BaseModel):
    id: str
    assignment_id: str
    score: float
    recorded_at: datetime

    def to_domain(self) -> Grade:
        return Grade(
            id=self.id,
            assignment_id=self.assignment_id,
            score=self.score,
            recorded_at=self.recorded_at,
        )


class ExerciseIn(BaseModel):
    event: CfaEvent
    value: float
    unit: str
    gender: Gender
    measured_on: date

    def to_domain(self) -> ExerciseRecord:
        return ExerciseRecord(
            event=self.event,
            value=self.value,
            unit=self.unit,
            gender=self.gender,
            measured_on=self.measured_on,
        )


class GoalIn(BaseModel):
    id: str
    title: str = ""
    status: GoalStatus = GoalStatus.NOT_STARTED
    category: str = ""

    def to_domain(self) -> Goal:
        return Goal(id=self.id, title=self.title, status=self.status, category=self.category)


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------

class CourseGradeOut(BaseModel):
    outcome: Outcome
    percentage: Optional[float] = None
    letter: Optional[str] = None
    graded_assignments: int = 0
    total_assignments: int = 0
    reason: str = ""

    @classmethod
    def from_result(cls, result: CourseGradeResult) -> "CourseGradeOut":
        return cls(
            outcome=result.outcome,
            percentage=result.percentage,
            letter=result.letter,
            graded_assignments=result.graded_assignments,
            total_assignments=result.total_assignments,
            reason=result.reason,
        )


class RequiredScoreOut(BaseModel):
    outcome: Outcome
    assignment_id: str
    target_percentage: float
    required_score: Optional[float] = Field(None, description="Raw score needed, clamped to [0, max_score]")
    required_percentage: Optional[float] = Field(None, description="Unclamped; above 100 means out of reach")
    max_score: float = 0.0
    achievable: bool = False
    secured: bool = False
    reason: str = ""

    @classmethod
    def from_result(cls, result: RequiredScoreResult) -> "RequiredScoreOut":
        return cls(
            outcome=result.outcome,
            assignment_id=result.assignment_id,
            target_percentage=result.target_percentage,
            required_score=result.value,
            required_percentage=result.required_percentage,
            max_score=result.max_score,
            achievable=result.achievable,
            secured=result.secured,
            reason=result.reason,
        )


class CoursePointsOut(BaseModel):
    course_id: str
    percentage: float
    letter: str
    base_points: float
    quality_points: float
    standard_points: float
    credit_hours: float


class GpaOut(BaseModel):
    outcome: Outcome
    gpa: Optional[float] = Field(None, description="Standard GPA, 4.0 cap")
    weighted_gpa: Optional[float] = Field(None, description="Quality-point GPA, 5.0 cap")
    courses_counted: int = 0
    credit_hours: float = 0.0
    courses: list[CoursePointsOut] = Field(default_factory=list)
    reason: str = ""

    @classmethod
    def from_result(cls, result: GpaResult) -> "GpaOut":
        return cls(
            outcome=result.outcome,
            gpa=result.gpa,
            weighted_gpa=result.weighted_gpa,
            courses_counted=result.courses_counted,
            credit_hours=result.credit_hours,
            courses=[
                CoursePointsOut(
                    course_id=c.course_id,
                    percentage=c.percentage,
                    letter=c.letter,
                    base_points=c.base_points,
                    quality_points=c.quality_points,
                    standard_points=c.standard_points,
                    credit_hours=c.credit_hours,
                )
                for c in result.courses
            ],
            reason=result.reason,
        )


class GpaImpactOut(BaseModel):
    current: GpaOut
    predicted: GpaOut
    difference: Optional[float] = Field(None, description="Predicted minus current standard GPA")

    @classmethod
    def from_result(cls, impact: GpaImpact) -> "GpaImpactOut":
        return cls(
            current=GpaOut.from_result(impact.current),
            predicted=GpaOut.from_result(impact.predicted),
            difference=impact.difference,
        )


class CompositeOut(BaseModel):
    outcome: Outcome
    value: Optional[float] = None
    complete: bool = False
    events_present: int = 0
    events_expected: int = 6
    min_events: int = 4
    scores: dict[str, float] = Field(default_factory=dict, description="Per-event points")
    reason: str = ""

    @classmethod
    def from_result(cls, result: CompositeResult) -> "CompositeOut":
        return cls(
            outcome=result.outcome,
            value=result.value,
            complete=result.complete,
            events_present=result.events_present,
            events_expected=result.events_expected,
            min_events=result.min_events,
            scores={event.value: score for event, score in result.scores.items()},
            reason=result.reason,
        )


class ReadinessComponentOut(BaseModel):
    name: str
    score: Optional[float] = None
    weight: float
    effective_weight: float
    contribution: float


class ReadinessOut(BaseModel):
    outcome: Outcome
    value: Optional[float] = None
    components: list[ReadinessComponentOut] = Field(default_factory=list)
    reason: str = ""

    @classmethod
    def from_result(cls, result: ReadinessResult) -> "ReadinessOut":
        return cls(
            outcome=result.outcome,
            value=result.value,
            components=[
                ReadinessComponentOut(
                    name=c.name,
                    score=c.score,
                    weight=c.weight,
                    effective_weight=c.effective_weight,
                    contribution=c.contribution,
                )
                for c in result.components
            ],
            reason=result.reason,
        )
