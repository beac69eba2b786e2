"""
Unit tests for course grade aggregation, grade scales and predictions.
"""

from datetime import datetime, timezone

import pytest

from cadet_readiness.core.scoring.grading import (
    LETTER_SCALE,
    PLUS_MINUS_SCALE,
    DuplicateGradePolicy,
    GradeScale,
    LetterBand,
    compute_course_grade,
    grade_distribution,
    grade_scale_preset,
    normalize_score,
    predict_course_grade,
    required_score,
    select_score,
)
from cadet_readiness.core.scoring.models import Assignment, Grade, WeightClass
from cadet_readiness.core.scoring.results import ConfigurationError, Outcome


def make_grade(grade_id: str, assignment_id: str, score: float, day: int = 1) -> Grade:
    return Grade(
        id=grade_id,
        assignment_id=assignment_id,
        score=score,
        recorded_at=datetime(2024, 10, day, 9, 0),
    )


@pytest.fixture
def two_assignments() -> list[Assignment]:
    """A test out of 100 and a quiz out of 50, weighted equally."""
    return [
        Assignment(id="test", course_id="math", max_score=100, weight=50),
        Assignment(id="quiz", course_id="math", max_score=50, weight=50),
    ]


# ---------------------------------------------------------------------------
# Course Grade Tests
# ---------------------------------------------------------------------------

class TestComputeCourseGrade:
    """Tests for weighted course percentages."""

    def test_weighted_percentage_and_letter(self, two_assignments):
        """90/100 and 40/50 at equal weight is 85%, a B."""
        grades = [make_grade("g1", "test", 90), make_grade("g2", "quiz", 40)]

        result = compute_course_grade(two_assignments, grades)

        assert result.outcome is Outcome.OK
        assert result.percentage == pytest.approx(85.0)
        assert result.letter == "B"
        assert result.graded_assignments == 2

    def test_no_grades_is_no_data_not_zero(self, two_assignments):
        """A course with nothing graded has no percentage at all."""
        result = compute_course_grade(two_assignments, [])

        assert result.outcome is Outcome.NO_DATA
        assert result.percentage is None
        assert result.letter is None
        assert result.total_assignments == 2
        assert "No graded assignments" in result.reason

    def test_all_zero_scores_is_a_real_zero(self, two_assignments):
        """Zeros that were actually earned are reported as 0%, not no data."""
        grades = [make_grade("g1", "test", 0), make_grade("g2", "quiz", 0)]

        result = compute_course_grade(two_assignments, grades)

        assert result.outcome is Outcome.OK
        assert result.percentage == 0.0
        assert result.letter == "F"

    def test_ungraded_assignments_do_not_count(self, two_assignments):
        """Only the graded test counts until the quiz is graded."""
        result = compute_course_grade(two_assignments, [make_grade("g1", "test", 92)])

        assert result.percentage == pytest.approx(92.0)
        assert result.graded_assignments == 1
        assert result.total_assignments == 2

    def test_only_zero_weight_graded_is_no_data(self):
        assignments = [
            Assignment(id="practice", course_id="c", max_score=10, weight=0),
            Assignment(id="exam", course_id="c", max_score=100, weight=1),
        ]
        result = compute_course_grade(assignments, [make_grade("g1", "practice", 10)])

        assert result.outcome is Outcome.NO_DATA
        assert "no weight" in result.reason

    def test_scores_are_clamped(self):
        """Extra credit above max and negative entries are clamped, not rejected."""
        assignments = [
            Assignment(id="a", course_id="c", max_score=10),
            Assignment(id="b", course_id="c", max_score=10),
        ]
        grades = [make_grade("g1", "a", 12), make_grade("g2", "b", -3)]

        result = compute_course_grade(assignments, grades)

        assert result.percentage == pytest.approx(50.0)

    def test_relative_weights(self):
        """Weights summing to 40 behave like weights summing to 100."""
        small = [
            Assignment(id="a", course_id="c", max_score=100, weight=10),
            Assignment(id="b", course_id="c", max_score=100, weight=30),
        ]
        large = [
            Assignment(id="a", course_id="c", max_score=100, weight=25),
            Assignment(id="b", course_id="c", max_score=100, weight=75),
        ]
        grades = [make_grade("g1", "a", 60), make_grade("g2", "b", 100)]

        assert compute_course_grade(small, grades).percentage == pytest.approx(
            compute_course_grade(large, grades).percentage
        )

    def test_input_order_does_not_matter(self, two_assignments):
        grades = [make_grade("g1", "test", 77), make_grade("g2", "quiz", 43)]

        forward = compute_course_grade(two_assignments, grades)
        backward = compute_course_grade(list(reversed(two_assignments)), list(reversed(grades)))

        assert forward.percentage == backward.percentage

    def test_grades_for_other_courses_are_ignored(self, two_assignments):
        grades = [make_grade("g1", "test", 90), make_grade("g2", "history-essay", 10)]

        result = compute_course_grade(two_assignments, grades)

        assert result.percentage == pytest.approx(90.0)

    def test_letter_scale_can_be_swapped(self, two_assignments):
        """80% is a B on the simple scale and a B- with plus/minus."""
        grades = [make_grade("g1", "test", 80), make_grade("g2", "quiz", 40)]

        assert compute_course_grade(two_assignments, grades, scale=LETTER_SCALE).letter == "B"
        assert compute_course_grade(two_assignments, grades, scale=PLUS_MINUS_SCALE).letter == "B-"


class TestDuplicateGrades:
    """Tests for assignments graded more than once."""

    @pytest.fixture
    def regrades(self) -> list[Grade]:
        return [
            make_grade("g1", "test", 70, day=1),
            make_grade("g2", "test", 90, day=3),
            make_grade("g3", "test", 80, day=2),
        ]

    def test_most_recent_wins_by_default(self, regrades):
        assert select_score(regrades, DuplicateGradePolicy.MOST_RECENT) == 90

    def test_highest(self, regrades):
        assert select_score(regrades, DuplicateGradePolicy.HIGHEST) == 90

    def test_average(self, regrades):
        assert select_score(regrades, DuplicateGradePolicy.AVERAGE) == pytest.approx(80.0)

    def test_most_recent_tie_broken_by_id(self):
        """Same timestamp: the larger id wins regardless of input order."""
        tied = [make_grade("g-a", "test", 60), make_grade("g-b", "test", 75)]

        assert select_score(tied, DuplicateGradePolicy.MOST_RECENT) == 75
        assert select_score(list(reversed(tied)), DuplicateGradePolicy.MOST_RECENT) == 75

    def test_policy_applies_to_course_grade(self, regrades):
        assignments = [Assignment(id="test", course_id="c", max_score=100)]

        result = compute_course_grade(assignments, regrades, policy=DuplicateGradePolicy.AVERAGE)

        assert result.percentage == pytest.approx(80.0)

    def test_most_recent_with_mixed_timezones(self):
        """Imported grades may or may not carry an offset; naive ones are UTC."""
        grades = [
            Grade(id="g1", assignment_id="test", score=70,
                  recorded_at=datetime(2024, 1, 1, tzinfo=timezone.utc)),
            Grade(id="g2", assignment_id="test", score=90, recorded_at=datetime(2024, 1, 2)),
        ]

        assert select_score(grades, DuplicateGradePolicy.MOST_RECENT) == 90

        result = compute_course_grade([Assignment(id="test", course_id="c", max_score=100)], grades)
        assert result.percentage == pytest.approx(90.0)

    def test_select_score_needs_grades(self):
        with pytest.raises(ValueError):
            select_score([], DuplicateGradePolicy.HIGHEST)


# ---------------------------------------------------------------------------
# Grade Scale Tests
# ---------------------------------------------------------------------------

class TestGradeScale:
    """Tests for letter thresholds and grade points."""

    @pytest.mark.parametrize("percentage,letter", [
        (100, "A+"), (97, "A+"), (96.99, "A"), (90, "A-"), (85, "B"),
        (80, "B-"), (60, "D-"), (59.99, "F"), (0, "F"),
    ])
    def test_plus_minus_thresholds(self, percentage, letter):
        assert PLUS_MINUS_SCALE.letter_for(percentage) == letter

    def test_threshold_tolerates_float_noise(self):
        """A percentage a rounding error below 90 still earns the A-."""
        assert PLUS_MINUS_SCALE.letter_for(89.99999999999) == "A-"

    def test_negative_percentage_is_f(self):
        assert LETTER_SCALE.letter_for(-5) == "F"

    def test_weight_class_bonus(self):
        assert LETTER_SCALE.points_for(95, WeightClass.STANDARD) == 4.0
        assert LETTER_SCALE.points_for(95, WeightClass.HONORS) == 4.5
        assert LETTER_SCALE.points_for(95, WeightClass.ADVANCED) == 5.0

    def test_bands_are_sorted_on_construction(self):
        scale = GradeScale(
            name="pass_fail",
            bands=(LetterBand("F", 0, 0.0), LetterBand("P", 65, 4.0)),
        )
        assert scale.letters == ["P", "F"]

    def test_rejects_repeated_letter(self):
        with pytest.raises(ConfigurationError, match="repeats a letter"):
            GradeScale(name="bad", bands=(LetterBand("A", 90, 4), LetterBand("A", 0, 0)))

    def test_rejects_overlapping_thresholds(self):
        with pytest.raises(ConfigurationError, match="overlapping"):
            GradeScale(name="bad", bands=(
                LetterBand("A", 90, 4), LetterBand("B", 90, 3), LetterBand("F", 0, 0),
            ))

    def test_rejects_gap_at_bottom(self):
        """Every percentage needs a letter."""
        with pytest.raises(ConfigurationError, match="without a letter"):
            GradeScale(name="bad", bands=(LetterBand("A", 90, 4), LetterBand("B", 80, 3)))

    def test_rejects_points_that_rise_as_letters_fall(self):
        with pytest.raises(ConfigurationError, match="worth more points"):
            GradeScale(name="bad", bands=(LetterBand("A", 90, 3), LetterBand("B", 0, 4)))

    def test_rejects_negative_bonus(self):
        with pytest.raises(ConfigurationError, match="negative bonus"):
            GradeScale(
                name="bad",
                bands=(LetterBand("A", 0, 4),),
                weight_class_bonus={WeightClass.HONORS: -0.5},
            )

    def test_rejects_standard_cap_above_weighted_cap(self):
        with pytest.raises(ConfigurationError, match="cap"):
            GradeScale(name="bad", bands=(LetterBand("A", 0, 4),), standard_cap=5.0, weighted_cap=4.0)

    def test_preset_lookup(self):
        assert grade_scale_preset("letter") is LETTER_SCALE
        assert grade_scale_preset("plus_minus") is PLUS_MINUS_SCALE

    def test_unknown_preset_names_the_choices(self):
        with pytest.raises(ConfigurationError, match="'pass_fail'; choose from letter, plus_minus"):
            grade_scale_preset("pass_fail")


def test_normalize_score_clamps():
    assert normalize_score(15, 10) == 1.0
    assert normalize_score(-2, 10) == 0.0
    assert normalize_score(7, 10) == pytest.approx(0.7)
    assert normalize_score(float("inf"), 10) == 1.0


def test_normalize_score_rejects_nan():
    with pytest.raises(ConfigurationError, match="NaN"):
        normalize_score(float("nan"), 10)


# ---------------------------------------------------------------------------
# Prediction and Distribution Tests
# ---------------------------------------------------------------------------

class TestPrediction:
    """Tests for projecting a course grade forward."""

    def test_projection_fills_ungraded_assignments(self, two_assignments):
        grades = [make_grade("g1", "test", 80)]

        prediction = predict_course_grade(two_assignments, grades, {"quiz": 50})

        assert prediction.current.percentage == pytest.approx(80.0)
        assert prediction.projected.percentage == pytest.approx(90.0)
        assert prediction.projected_assignments == ("quiz",)

    def test_recorded_scores_beat_projections(self, two_assignments):
        grades = [make_grade("g1", "test", 80)]

        prediction = predict_course_grade(two_assignments, grades, {"test": 100})

        assert prediction.projected.percentage == pytest.approx(80.0)
        assert prediction.projected_assignments == ()

    def test_projection_for_unknown_assignment_ignored(self, two_assignments):
        prediction = predict_course_grade(two_assignments, [], {"final": 100})

        assert prediction.current.outcome is Outcome.NO_DATA
        assert prediction.projected.outcome is Outcome.NO_DATA

    def test_projection_from_nothing_graded(self, two_assignments):
        prediction = predict_course_grade(two_assignments, [], {"test": 95, "quiz": 45})

        assert prediction.current.outcome is Outcome.NO_DATA
        assert prediction.projected.percentage == pytest.approx(92.5)
        assert prediction.projected_assignments == ("quiz", "test")

    def test_nan_projection_is_rejected(self, two_assignments):
        with pytest.raises(ConfigurationError, match="NaN"):
            predict_course_grade(two_assignments, [], {"quiz": float("nan")})


class TestRequiredScore:
    """Tests for solving for the score an ungraded assignment needs."""

    def test_score_needed_on_remaining_assignment(self, two_assignments):
        """90 on the test; 85% overall needs 40/50 on the quiz."""
        grades = [make_grade("g1", "test", 90)]

        result = required_score(two_assignments, grades, "quiz", 85)

        assert result.outcome is Outcome.OK
        assert result.value == pytest.approx(40.0)
        assert result.required_percentage == pytest.approx(80.0)
        assert result.max_score == 50
        assert result.achievable
        assert not result.secured

    def test_required_score_reaches_target(self, two_assignments):
        """Scoring exactly the answer lands the course exactly on the target."""
        grades = [make_grade("g1", "test", 90)]
        needed = required_score(two_assignments, grades, "quiz", 85).value

        result = compute_course_grade(two_assignments, grades + [make_grade("g2", "quiz", needed)])

        assert result.percentage == pytest.approx(85.0)

    def test_out_of_reach_clamps_to_max(self, two_assignments):
        grades = [make_grade("g1", "test", 90)]

        result = required_score(two_assignments, grades, "quiz", 100)

        assert result.value == 50
        assert result.required_percentage == pytest.approx(110.0)
        assert not result.achievable

    def test_already_secured_clamps_to_zero(self, two_assignments):
        grades = [make_grade("g1", "test", 90)]

        result = required_score(two_assignments, grades, "quiz", 40)

        assert result.value == 0
        assert result.secured
        assert result.achievable

    def test_projections_for_other_assignments_count(self):
        assignments = [
            Assignment(id="test", course_id="c", max_score=100),
            Assignment(id="quiz", course_id="c", max_score=50),
            Assignment(id="final", course_id="c", max_score=100, weight=2),
        ]
        grades = [make_grade("g1", "test", 80)]

        without = required_score(assignments, grades, "final", 90)
        with_quiz = required_score(assignments, grades, "final", 90, projected_scores={"quiz": 50})

        assert without.value == pytest.approx(95.0)
        assert with_quiz.value == pytest.approx(90.0)

    def test_nothing_graded_yet(self, two_assignments):
        result = required_score(two_assignments, [], "test", 90)

        assert result.value == pytest.approx(90.0)

    def test_duplicate_policy_applies(self, two_assignments):
        grades = [make_grade("g1", "test", 60, day=1), make_grade("g2", "test", 100, day=2)]

        most_recent = required_score(two_assignments, grades, "quiz", 85)
        average = required_score(two_assignments, grades, "quiz", 85, policy=DuplicateGradePolicy.AVERAGE)

        assert most_recent.value == pytest.approx(35.0)
        assert average.value == pytest.approx(45.0)

    @pytest.mark.parametrize("assignment_id,reason", [
        ("final", "not part of this course"),
        ("test", "already graded"),
    ])
    def test_no_data_cases(self, two_assignments, assignment_id, reason):
        grades = [make_grade("g1", "test", 90)]

        result = required_score(two_assignments, grades, assignment_id, 85)

        assert result.outcome is Outcome.NO_DATA
        assert result.value is None
        assert reason in result.reason
        assert not result.achievable

    def test_zero_weight_target_is_no_data(self):
        """Nothing scored on practice work can move the course."""
        assignments = [
            Assignment(id="test", course_id="c", max_score=100),
            Assignment(id="practice", course_id="c", max_score=10, weight=0),
        ]

        result = required_score(assignments, [make_grade("g1", "test", 70)], "practice", 90)

        assert result.outcome is Outcome.NO_DATA
        assert "no weight" in result.reason

    def test_nan_target_is_rejected(self, two_assignments):
        with pytest.raises(ConfigurationError, match="NaN"):
            required_score(two_assignments, [], "quiz", float("nan"))


class TestDistribution:
    """Tests for letter-grade counts."""

    def test_counts_every_letter(self, two_assignments):
        grades = [make_grade("g1", "test", 95), make_grade("g2", "quiz", 20)]

        counts = grade_distribution(two_assignments, grades, scale=LETTER_SCALE)

        assert counts == {"A": 1, "B": 0, "C": 0, "D": 0, "F": 1}

    def test_empty_distribution_lists_all_letters(self, two_assignments):
        counts = grade_distribution(two_assignments, [])

        assert set(counts) == set(PLUS_MINUS_SCALE.letters)
        assert sum(counts.values()) == 0
