"""
Unit tests for the domain records and tagged results.

These tests verify the core data types without touching
external services (no HTTP, no file system).

Testing philosophy:
- Test behavior, not implementation
- Each test should have a clear "given/when/then" structure
- Use descriptive names that explain what we're testing
- Prefer real objects over mocks where practical
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from cadet_readiness.core.scoring.models import (
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
from cadet_readiness.core.scoring.results import (
    CompositeResult,
    ConfigurationError,
    CourseGradeResult,
    GpaResult,
    Outcome,
    ScoreResult,
    UndefinedScoreError,
)


# ---------------------------------------------------------------------------
# Record Validation Tests
# ---------------------------------------------------------------------------

class TestCourse:
    """Tests for the Course record."""

    def test_course_defaults_to_standard_weight(self):
        """Courses without a weight class count as standard."""
        course = Course(id="c1", code="MATH101", name="Algebra", credit_hours=3)
        assert course.weight_class is WeightClass.STANDARD

    def test_course_rejects_zero_credit_hours(self):
        """A zero-credit course would vanish from the GPA silently."""
        with pytest.raises(ConfigurationError, match="positive credit hours"):
            Course(id="c1", code="PE", name="Gym", credit_hours=0)

    def test_course_rejects_negative_credit_hours(self):
        with pytest.raises(ConfigurationError):
            Course(id="c1", code="PE", name="Gym", credit_hours=-1)

    def test_configuration_error_is_a_value_error(self):
        """Callers that already catch ValueError keep working."""
        with pytest.raises(ValueError):
            Course(id="c1", code="PE", name="Gym", credit_hours=0)


class TestAssignment:
    """Tests for the Assignment record."""

    def test_assignment_rejects_zero_max_score(self):
        """An assignment out of zero points can't be turned into a percentage."""
        with pytest.raises(ConfigurationError, match="positive max score"):
            Assignment(id="a1", course_id="c1", max_score=0)

    def test_assignment_rejects_negative_weight(self):
        with pytest.raises(ConfigurationError, match="negative weight"):
            Assignment(id="a1", course_id="c1", max_score=100, weight=-1)

    def test_zero_weight_is_allowed(self):
        """Practice work can be recorded without counting."""
        assignment = Assignment(id="a1", course_id="c1", max_score=10, weight=0)
        assert assignment.weight == 0

    def test_due_date_is_optional(self):
        assignment = Assignment(
            id="a1", course_id="c1", max_score=10, due_date=date(2024, 10, 1)
        )
        assert assignment.due_date == date(2024, 10, 1)

    def test_assignment_rejects_non_finite_numbers(self):
        with pytest.raises(ConfigurationError, match="positive max score"):
            Assignment(id="a1", course_id="c1", max_score=float("inf"))
        with pytest.raises(ConfigurationError, match="finite weight"):
            Assignment(id="a1", course_id="c1", max_score=10, weight=float("nan"))


class TestGrade:
    """Tests for the Grade record."""

    def test_naive_timestamp_is_read_as_utc(self):
        grade = Grade(id="g1", assignment_id="a1", score=90, recorded_at=datetime(2024, 10, 1, 9, 0))

        assert grade.recorded_at.tzinfo is timezone.utc
        assert grade.recorded_at == datetime(2024, 10, 1, 9, 0, tzinfo=timezone.utc)

    def test_aware_timestamp_is_kept(self):
        eastern = timezone(timedelta(hours=-5))
        recorded = datetime(2024, 10, 1, 9, 0, tzinfo=eastern)

        grade = Grade(id="g1", assignment_id="a1", score=90, recorded_at=recorded)

        assert grade.recorded_at.tzinfo is eastern

    def test_naive_and_aware_grades_compare(self):
        """Mixed sources must still sort by time."""
        naive = Grade(id="g1", assignment_id="a1", score=70, recorded_at=datetime(2024, 1, 2))
        aware = Grade(id="g2", assignment_id="a1", score=90,
                      recorded_at=datetime(2024, 1, 1, tzinfo=timezone.utc))

        assert naive.recorded_at > aware.recorded_at

    def test_nan_score_is_rejected(self):
        """NaN would slip through clamping and come out as an OK percentage."""
        with pytest.raises(ConfigurationError, match="NaN"):
            Grade(id="g1", assignment_id="a1", score=float("nan"), recorded_at=datetime(2024, 10, 1))

    def test_out_of_range_score_is_allowed(self):
        """Clamping happens in the aggregator, not here."""
        grade = Grade(id="g1", assignment_id="a1", score=120, recorded_at=datetime(2024, 10, 1))
        assert grade.score == 120


class TestExerciseRecord:
    """Tests for the ExerciseRecord record."""

    def test_nan_measurement_is_rejected(self):
        with pytest.raises(ConfigurationError, match="Pull-ups measurement on 2024-05-01 is NaN"):
            ExerciseRecord(
                event=CfaEvent.PULL_UPS,
                value=float("nan"),
                unit="reps",
                gender=Gender.MALE,
                measured_on=date(2024, 5, 1),
            )


class TestTermAndGoal:
    """Tests for small value objects."""

    def test_term_label(self):
        """Terms read the way a transcript prints them."""
        assert Term(2024, Semester.FALL).label == "Fall 2024"

    def test_goal_is_completed_only_when_status_completed(self):
        assert Goal(id="g1", title="Nomination", status=GoalStatus.COMPLETED).is_completed
        assert not Goal(id="g2", title="Essay", status=GoalStatus.IN_PROGRESS).is_completed
        assert not Goal(id="g3", title="Interview").is_completed

    def test_goal_status_values_match_storage(self):
        """Statuses are stored with spaces, not underscores."""
        assert GoalStatus("in progress") is GoalStatus.IN_PROGRESS
        assert GoalStatus("not started") is GoalStatus.NOT_STARTED

    def test_event_labels(self):
        """Every CFA event has a score-sheet label."""
        assert CfaEvent.ONE_MILE_RUN.label == "1-Mile Run"
        assert all(event.label for event in CfaEvent)
        assert len(CfaEvent) == 6


# ---------------------------------------------------------------------------
# Result Contract Tests
# ---------------------------------------------------------------------------

class TestScoreResult:
    """Tests for the tagged result contract."""

    def test_ok_result_requires_value(self):
        """An OK result without a value would be indistinguishable from no data."""
        with pytest.raises(ValueError, match="must carry a value"):
            ScoreResult(outcome=Outcome.OK)

    def test_non_ok_result_cannot_carry_value(self):
        """No sentinel values on undefined results."""
        with pytest.raises(ValueError, match="cannot carry a value"):
            ScoreResult(outcome=Outcome.NO_DATA, value=0.0)

    def test_zero_is_a_valid_ok_value(self):
        """A real zero is a score, not missing data."""
        result = ScoreResult(outcome=Outcome.OK, value=0.0)
        assert result.is_ok
        assert result.unwrap() == 0.0

    def test_unwrap_raises_on_no_data(self):
        result = ScoreResult.no_data("No graded assignments")
        with pytest.raises(UndefinedScoreError, match="No graded assignments"):
            result.unwrap()

    def test_value_or_none(self):
        assert ScoreResult(outcome=Outcome.OK, value=42.0).value_or_none() == 42.0
        assert ScoreResult.insufficient_data("too few").value_or_none() is None

    def test_constructors_pass_detail_to_subclasses(self):
        """Subclass detail fields survive the classmethod constructors."""
        result = CourseGradeResult.no_data("nothing", graded_assignments=0, total_assignments=3)
        assert result.outcome is Outcome.NO_DATA
        assert result.total_assignments == 3
        assert result.percentage is None
        assert result.letter is None

    def test_invalid_configuration_constructor(self):
        result = ScoreResult.invalid_configuration("weights must sum to 1.0")
        assert result.outcome is Outcome.INVALID_CONFIGURATION
        assert not result.is_ok


class TestSubclassResults:
    """Tests for component-specific result properties."""

    def test_gpa_property_is_standard_value(self):
        result = GpaResult(outcome=Outcome.OK, value=3.5, weighted_gpa=4.0)
        assert result.gpa == 3.5
        assert result.weighted_gpa == 4.0

    def test_composite_complete_needs_all_events(self):
        """Five of six events is reportable but not complete."""
        partial = CompositeResult(outcome=Outcome.OK, value=80.0, events_present=5)
        full = CompositeResult(outcome=Outcome.OK, value=80.0, events_present=6)

        assert partial.is_reportable and not partial.complete
        assert full.complete

    def test_insufficient_composite_is_not_complete(self):
        result = CompositeResult.insufficient_data("3 of 6", events_present=3)
        assert not result.complete
        assert not result.is_reportable

