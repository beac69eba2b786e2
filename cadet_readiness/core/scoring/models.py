"""
Domain records consumed by the scoring engine.

These are snapshots handed over by the storage layer for a single call.
The engine never creates, updates or deletes them, so they are frozen.
Nothing here knows about HTTP or JSON; the API layer converts its
request models into these before calling the engine.

Validation covers only what would make a score meaningless:
- A course worth zero credits
- An assignment out of zero points
- A score or measurement that is NaN

Out-of-range scores are *not* rejected; the aggregator clamps them.
A quiz marked 12/10 is a data-entry problem, not a reason to refuse
the whole course.

Timestamps arrive from several sources, some with an offset and some
without. Naive ones are read as UTC so every ``recorded_at`` can be
compared with every other.
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from .results import ConfigurationError


class WeightClass(Enum):
    """Course rigor category. Each carries a GPA bonus defined by the grade scale."""
    STANDARD = "standard"
    HONORS = "honors"
    ADVANCED = "advanced"  # AP / IB / dual enrollment


class Semester(Enum):
    FALL = "fall"
    SPRING = "spring"
    SUMMER = "summer"
    WINTER = "winter"


class Gender(Enum):
    """Selects the standards column for fitness scoring."""
    MALE = "male"
    FEMALE = "female"


class GoalStatus(Enum):
    NOT_STARTED = "not started"
    IN_PROGRESS = "in progress"
    COMPLETED = "completed"


class CfaEvent(Enum):
    """
    The six events of the Candidate Fitness Assessment.

    Values are stable identifiers used in configuration files and the API;
    ``label`` is how the events are written on the score sheet.
    """
    BASKETBALL_THROW = "basketball_throw"
    PULL_UPS = "pull_ups"
    SHUTTLE_RUN = "shuttle_run"
    CRUNCHES = "crunches"
    PUSH_UPS = "push_ups"
    ONE_MILE_RUN = "one_mile_run"

    @property
    def label(self) -> str:
        return _EVENT_LABELS[self]


_EVENT_LABELS = {
    CfaEvent.BASKETBALL_THROW: "Basketball Throw",
    CfaEvent.PULL_UPS: "Pull-ups",
    CfaEvent.SHUTTLE_RUN: "Shuttle Run",
    CfaEvent.CRUNCHES: "Crunches",
    CfaEvent.PUSH_UPS: "Push-ups",
    CfaEvent.ONE_MILE_RUN: "1-Mile Run",
}


@dataclass(frozen=True)
class Term:
    """An academic term, e.g. Fall 2024."""
    year: int
    semester: Semester

    @property
    def label(self) -> str:
        return f"{self.semester.value.capitalize()} {self.year}"


@dataclass(frozen=True)
class Course:
    """A course on the student's schedule."""
    id: str
    code: str
    name: str
    credit_hours: float
    weight_class: WeightClass = WeightClass.STANDARD
    term: Optional[Term] = None

    def __post_init__(self) -> None:
        if not math.isfinite(self.credit_hours) or self.credit_hours <= 0:
            raise ConfigurationError(
                f"Course {self.code or self.id} must have positive credit hours, "
                f"got {self.credit_hours}"
            )


@dataclass(frozen=True)
class Assignment:
    """
    A gradable item within a course.

    Weights are relative. A course whose weights add up to 40 is treated
    the same as one whose weights add up to 100.
    """
    id: str
    course_id: str
    max_score: float
    weight: float = 1.0
    title: str = ""
    due_date: Optional[date] = None

    def __post_init__(self) -> None:
        if not math.isfinite(self.max_score) or self.max_score <= 0:
            raise ConfigurationError(
                f"Assignment {self.title or self.id} must have a positive max score, "
                f"got {self.max_score}"
            )
        if not math.isfinite(self.weight):
            raise ConfigurationError(
                f"Assignment {self.title or self.id} must have a finite weight, "
                f"got {self.weight}"
            )
        if self.weight < 0:
            raise ConfigurationError(
                f"Assignment {self.title or self.id} cannot have a negative weight"
            )


@dataclass(frozen=True)
class Grade:
    """
    A score recorded against an assignment. Several may exist per assignment.

    ``recorded_at`` is always timezone-aware after construction; a naive
    timestamp is taken to be UTC.
    """
    id: str
    assignment_id: str
    score: float
    recorded_at: datetime

    def __post_init__(self) -> None:
        if math.isnan(self.score):
            raise ConfigurationError(f"Grade {self.id} has a NaN score")
        if self.recorded_at.tzinfo is None:
            object.__setattr__(
                self, "recorded_at", self.recorded_at.replace(tzinfo=timezone.utc)
            )


@dataclass(frozen=True)
class ExerciseRecord:
    """One raw CFA measurement."""
    event: CfaEvent
    value: float
    unit: str
    gender: Gender
    measured_on: date

    def __post_init__(self) -> None:
        if math.isnan(self.value):
            raise ConfigurationError(
                f"{self.event.label} measurement on {self.measured_on} is NaN"
            )


@dataclass(frozen=True)
class Goal:
    """An application goal. Only its status feeds the readiness index."""
    id: str
    title: str
    status: GoalStatus = GoalStatus.NOT_STARTED
    category: str = ""

    @property
    def is_completed(self) -> bool:
        return self.status is GoalStatus.COMPLETED
