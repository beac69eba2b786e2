"""
Tagged result types for the scoring engine.

Every scoring entry point returns one of these instead of a bare number.
A result either carries a value (``Outcome.OK``) or names why there is
none. A zero score and "nothing to score" must never look the same to
the presentation layer, so sentinel numbers (0, -1, NaN) are not used.

Configuration mistakes are a different animal: they are caller bugs, so
they raise ``ConfigurationError`` at the point the bad object is built.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ConfigurationError(ValueError):
    """Raised when a table, scale, weight set or record is internally inconsistent."""
    pass


class UndefinedScoreError(LookupError):
    """Raised by ``unwrap()`` when a result carries no value."""
    pass


class Outcome(Enum):
    """How a scoring call ended."""
    OK = "ok"
    NO_DATA = "no_data"                              # nothing recorded yet
    INSUFFICIENT_DATA = "insufficient_data"          # some data, below the coverage policy
    INVALID_CONFIGURATION = "invalid_configuration"  # caller supplied inconsistent config


@dataclass(frozen=True)
class ScoreResult:
    """
    A value, or the reason there isn't one.

    Subclasses add the detail each component reports (letter grade,
    coverage counts, per-component breakdown) but keep this contract.
    """
    outcome: Outcome
    value: Optional[float] = None
    reason: str = ""

    def __post_init__(self) -> None:
        if self.outcome is Outcome.OK and self.value is None:
            raise ValueError("An OK result must carry a value")
        if self.outcome is not Outcome.OK and self.value is not None:
            raise ValueError(f"A {self.outcome.value} result cannot carry a value")

    @classmethod
    def no_data(cls, reason: str = "", **detail):
        return cls(outcome=Outcome.NO_DATA, reason=reason, **detail)

    @classmethod
    def insufficient_data(cls, reason: str = "", **detail):
        return cls(outcome=Outcome.INSUFFICIENT_DATA, reason=reason, **detail)

    @classmethod
    def invalid_configuration(cls, reason: str = "", **detail):
        return cls(outcome=Outcome.INVALID_CONFIGURATION, reason=reason, **detail)

    @property
    def is_ok(self) -> bool:
        return self.outcome is Outcome.OK

    def unwrap(self) -> float:
        """Return the value or raise ``UndefinedScoreError``."""
        if self.value is None:
            raise UndefinedScoreError(self.reason or self.outcome.value)
        return self.value

    def value_or_none(self) -> Optional[float]:
        return self.value if self.is_ok else None


@dataclass(frozen=True)
class CourseGradeResult(ScoreResult):
    """Percentage (``value``) and letter grade for one course."""
    letter: Optional[str] = None
    graded_assignments: int = 0
    total_assignments: int = 0

    @property
    def percentage(self) -> Optional[float]:
        return self.value


@dataclass(frozen=True)
class RequiredScoreResult(ScoreResult):
    """
    Raw score one ungraded assignment needs for the course to hit a target.

    ``value`` is clamped to ``[0, max_score]`` so it can be shown as-is.
    ``required_percentage`` is the unclamped figure:
    - above 100: the target is out of reach even with full marks
    - 0 or below: the target is already secured whatever happens
    """
    assignment_id: str = ""
    target_percentage: float = 0.0
    required_percentage: Optional[float] = None
    max_score: float = 0.0

    @property
    def achievable(self) -> bool:
        # Same tolerance as letter thresholds
        return self.required_percentage is not None and self.required_percentage <= 100 + 1e-9

    @property
    def secured(self) -> bool:
        return self.required_percentage is not None and self.required_percentage <= 0


@dataclass(frozen=True)
class CourseGradePoints:
    """How one course contributed to a GPA."""
    course_id: str
    percentage: float
    letter: str
    base_points: float
    quality_points: float   # base + weight-class bonus, capped at the weighted cap
    standard_points: float  # capped at the standard cap
    credit_hours: float


@dataclass(frozen=True)
class GpaResult(ScoreResult):
    """
    Cumulative GPA.

    ``value`` is the standard figure (per-course points capped at 4.0).
    ``weighted_gpa`` is the transcript-style quality-point average.
    """
    weighted_gpa: Optional[float] = None
    courses_counted: int = 0
    credit_hours: float = 0.0
    courses: tuple[CourseGradePoints, ...] = ()

    @property
    def gpa(self) -> Optional[float]:
        return self.value


@dataclass(frozen=True)
class GpaImpact:
    """
    GPA now versus GPA if predicted course grades come true.

    ``difference`` is predicted minus current, and is None unless both
    GPAs are defined.
    """
    current: GpaResult
    predicted: GpaResult

    @property
    def difference(self) -> Optional[float]:
        if not (self.current.is_ok and self.predicted.is_ok):
            return None
        return self.predicted.value - self.current.value


@dataclass(frozen=True)
class CompositeResult(ScoreResult):
    """Composite fitness score over the events that were measured."""
    scores: dict = field(default_factory=dict)  # CfaEvent -> per-event score
    events_present: int = 0
    events_expected: int = 6
    min_events: int = 4

    @property
    def complete(self) -> bool:
        """True only when every event contributed."""
        return self.is_ok and self.events_present == self.events_expected

    @property
    def is_reportable(self) -> bool:
        return self.is_ok


@dataclass(frozen=True)
class ReadinessComponent:
    """One input to the readiness index and what it contributed."""
    name: str
    score: Optional[float]      # normalized to 0-100, None when missing
    weight: float               # configured weight
    effective_weight: float     # weight after re-normalization, 0 when missing
    contribution: float


@dataclass(frozen=True)
class ReadinessResult(ScoreResult):
    """Readiness index (0-100) with its per-component breakdown."""
    components: tuple[ReadinessComponent, ...] = ()
