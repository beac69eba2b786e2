"""
Course grade aggregation.

Turns a course's assignments and the scores recorded against them into a
percentage and a letter grade. Letter thresholds and grade points live in
a ``GradeScale`` so a school's scale can be swapped without touching the
aggregation rules.

Three things make a gradebook messier than a list of numbers:
- An assignment may be graded several times (regrades, late corrections).
  ``DuplicateGradePolicy`` picks the one that counts.
- Scores outside ``[0, max_score]`` happen. They are clamped, not refused.
- Most of the course is usually still ungraded. Ungraded work is left out
  of the percentage; it is not a zero.

The forward-looking helpers (``predict_course_grade``, ``required_score``)
reuse exactly the same rules, so "what if" answers never disagree with
the grade the student will actually see.
"""

import logging
import math
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping, Optional, Sequence

from .aggregation import Component, weighted_mean
from .models import Assignment, Grade, WeightClass
from .results import ConfigurationError, CourseGradeResult, Outcome, RequiredScoreResult

logger = logging.getLogger(__name__)

# Percentages that land within this distance of a threshold count as reaching it.
# 100 * (0.9 * 50 + 0.8 * 50) / 100 should be a B, not a hair under one.
THRESHOLD_EPSILON = 1e-9


# ---------------------------------------------------------------------------
# Grade scales
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LetterBand:
    """A letter grade, the lowest percentage that earns it, and its grade points."""
    letter: str
    min_percentage: float
    points: float


@dataclass(frozen=True)
class GradeScale:
    """
    Percentage -> letter -> grade points.

    Bands are sorted highest threshold first on construction. The lowest
    band must start at or below 0 so every percentage maps to a letter.
    ``weight_class_bonus`` is added to base points for honors/advanced
    courses; the GPA calculator caps the sum at ``standard_cap`` for the
    standard GPA and ``weighted_cap`` for quality points.
    """
    name: str
    bands: tuple[LetterBand, ...]
    weight_class_bonus: Mapping[WeightClass, float] = field(default_factory=lambda: {
        WeightClass.STANDARD: 0.0,
        WeightClass.HONORS: 0.5,
        WeightClass.ADVANCED: 1.0,
    })
    standard_cap: float = 4.0
    weighted_cap: float = 5.0

    def __post_init__(self) -> None:
        if not self.bands:
            raise ConfigurationError(f"Grade scale {self.name!r} has no bands")

        bands = tuple(sorted(self.bands, key=lambda b: b.min_percentage, reverse=True))
        object.__setattr__(self, "bands", bands)

        letters = [b.letter for b in bands]
        if len(set(letters)) != len(letters):
            raise ConfigurationError(f"Grade scale {self.name!r} repeats a letter")

        thresholds = [b.min_percentage for b in bands]
        if len(set(thresholds)) != len(thresholds):
            raise ConfigurationError(f"Grade scale {self.name!r} has overlapping thresholds")

        if bands[-1].min_percentage > 0:
            raise ConfigurationError(
                f"Grade scale {self.name!r} leaves percentages below "
                f"{bands[-1].min_percentage} without a letter"
            )

        for higher, lower in zip(bands, bands[1:]):
            if lower.points > higher.points:
                raise ConfigurationError(
                    f"Grade scale {self.name!r}: {lower.letter} is worth more points "
                    f"than {higher.letter}"
                )

        for weight_class in WeightClass:
            bonus = self.weight_class_bonus.get(weight_class, 0.0)
            if bonus < 0:
                raise ConfigurationError(
                    f"Grade scale {self.name!r}: negative bonus for {weight_class.value}"
                )

        if self.standard_cap > self.weighted_cap:
            raise ConfigurationError(
                f"Grade scale {self.name!r}: standard cap exceeds weighted cap"
            )

    @property
    def letters(self) -> list[str]:
        return [b.letter for b in self.bands]

    def band_for(self, percentage: float) -> LetterBand:
        for band in self.bands:
            if percentage + THRESHOLD_EPSILON >= band.min_percentage:
                return band
        return self.bands[-1]

    def letter_for(self, percentage: float) -> str:
        return self.band_for(percentage).letter

    def points_for(self, percentage: float, weight_class: WeightClass = WeightClass.STANDARD) -> float:
        """Base points plus the weight-class bonus, uncapped."""
        return self.band_for(percentage).points + self.weight_class_bonus.get(weight_class, 0.0)


PLUS_MINUS_SCALE = GradeScale(
    name="plus_minus",
    bands=(
        LetterBand("A+", 97, 4.0),
        LetterBand("A", 93, 4.0),
        LetterBand("A-", 90, 3.7),
        LetterBand("B+", 87, 3.3),
        LetterBand("B", 83, 3.0),
        LetterBand("B-", 80, 2.7),
        LetterBand("C+", 77, 2.3),
        LetterBand("C", 73, 2.0),
        LetterBand("C-", 70, 1.7),
        LetterBand("D+", 67, 1.3),
        LetterBand("D", 63, 1.0),
        LetterBand("D-", 60, 0.7),
        LetterBand("F", 0, 0.0),
    ),
)

LETTER_SCALE = GradeScale(
    name="letter",
    bands=(
        LetterBand("A", 90, 4.0),
        LetterBand("B", 80, 3.0),
        LetterBand("C", 70, 2.0),
        LetterBand("D", 60, 1.0),
        LetterBand("F", 0, 0.0),
    ),
)

GRADE_SCALES: dict[str, GradeScale] = {
    PLUS_MINUS_SCALE.name: PLUS_MINUS_SCALE,
    LETTER_SCALE.name: LETTER_SCALE,
}

DEFAULT_GRADE_SCALE = PLUS_MINUS_SCALE


def grade_scale_preset(name: str) -> GradeScale:
    """Look up a built-in scale by name."""
    try:
        return GRADE_SCALES[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown grade scale {name!r}; choose from {', '.join(sorted(GRADE_SCALES))}"
        ) from None


# ---------------------------------------------------------------------------
# Duplicate grades
# ---------------------------------------------------------------------------

class DuplicateGradePolicy(Enum):
    """Which score counts when an assignment was graded more than once."""
    MOST_RECENT = "most_recent"
    HIGHEST = "highest"
    AVERAGE = "average"


def select_score(grades: Sequence[Grade], policy: DuplicateGradePolicy) -> float:
    """Collapse the grades recorded for one assignment into a single score."""
    if not grades:
        raise ValueError("select_score needs at least one grade")

    if policy is DuplicateGradePolicy.MOST_RECENT:
        # Ties on timestamp fall back to id so the choice never depends on input order
        return max(grades, key=lambda g: (g.recorded_at, g.id)).score
    if policy is DuplicateGradePolicy.HIGHEST:
        return max(g.score for g in grades)
    return math.fsum(g.score for g in grades) / len(grades)


def _group_by_assignment(grades: Iterable[Grade]) -> dict[str, list[Grade]]:
    grouped: dict[str, list[Grade]] = defaultdict(list)
    for grade in grades:
        grouped[grade.assignment_id].append(grade)
    return grouped


def normalize_score(score: float, max_score: float) -> float:
    """Fraction of the available points, with the score clamped into range."""
    if math.isnan(score):
        # min/max would pass NaN straight through into the percentage
        raise ConfigurationError("Cannot normalize a NaN score")
    return min(max(score, 0.0), max_score) / max_score


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def _collapse_scores(
    assignments: Sequence[Assignment],
    grades: Iterable[Grade],
    policy: DuplicateGradePolicy,
) -> dict[str, float]:
    """assignment id -> the one score that counts, for graded assignments only."""
    by_assignment = _group_by_assignment(grades)
    known = {a.id for a in assignments}
    orphaned = [aid for aid in by_assignment if aid not in known]
    if orphaned:
        logger.debug(
            "Ignoring grades for assignments outside this course",
            extra={"assignment_ids": sorted(orphaned)},
        )
    return {
        aid: select_score(received, policy)
        for aid, received in by_assignment.items()
        if aid in known
    }


def _grade_from_scores(
    assignments: Sequence[Assignment],
    scores: Mapping[str, float],
    scale: GradeScale,
) -> CourseGradeResult:
    components = [
        Component(
            value=normalize_score(scores[a.id], a.max_score) if a.id in scores else None,
            weight=a.weight,
            key=a.id,
        )
        for a in assignments
    ]
    mean = weighted_mean(components)

    if not mean.defined:
        reason = (
            "No graded assignments" if mean.present == 0
            else "Graded assignments carry no weight"
        )
        return CourseGradeResult.no_data(
            reason,
            graded_assignments=mean.present,
            total_assignments=len(assignments),
        )

    percentage = 100 * mean.value
    return CourseGradeResult(
        outcome=Outcome.OK,
        value=percentage,
        letter=scale.letter_for(percentage),
        graded_assignments=mean.present,
        total_assignments=len(assignments),
    )


def compute_course_grade(
    assignments: Sequence[Assignment],
    grades: Iterable[Grade],
    scale: GradeScale = DEFAULT_GRADE_SCALE,
    policy: DuplicateGradePolicy = DuplicateGradePolicy.MOST_RECENT,
) -> CourseGradeResult:
    """
    Weighted course percentage and letter grade.

    Each assignment contributes ``clamp(score, 0, max) / max`` times its
    weight. Ungraded assignments are left out entirely, so an assignment
    that hasn't been graded yet cannot drag the average down. With nothing
    graded (or only zero-weight items graded) the result is ``NO_DATA``.
    """
    scores = _collapse_scores(assignments, grades, policy)
    return _grade_from_scores(assignments, scores, scale)


@dataclass(frozen=True)
class GradePrediction:
    """Where a course stands now and where it lands if projections come true."""
    current: CourseGradeResult
    projected: CourseGradeResult
    projected_assignments: tuple[str, ...] = ()


def predict_course_grade(
    assignments: Sequence[Assignment],
    grades: Iterable[Grade],
    projected_scores: Mapping[str, float],
    scale: GradeScale = DEFAULT_GRADE_SCALE,
    policy: DuplicateGradePolicy = DuplicateGradePolicy.MOST_RECENT,
) -> GradePrediction:
    """
    Project the course grade forward.

    ``projected_scores`` maps assignment ids to expected raw scores. Only
    assignments that are still ungraded take a projection; recorded
    scores always win.
    """
    actual = _collapse_scores(assignments, grades, policy)
    known = {a.id for a in assignments}

    projected = dict(actual)
    applied = []
    for assignment_id, score in projected_scores.items():
        if assignment_id in known and assignment_id not in actual:
            projected[assignment_id] = score
            applied.append(assignment_id)

    return GradePrediction(
        current=_grade_from_scores(assignments, actual, scale),
        projected=_grade_from_scores(assignments, projected, scale),
        projected_assignments=tuple(sorted(applied)),
    )


def required_score(
    assignments: Sequence[Assignment],
    grades: Iterable[Grade],
    assignment_id: str,
    target_percentage: float,
    projected_scores: Optional[Mapping[str, float]] = None,
    policy: DuplicateGradePolicy = DuplicateGradePolicy.MOST_RECENT,
) -> RequiredScoreResult:
    """
    What does the student need on ``assignment_id`` to finish the course
    at ``target_percentage``?

    The course is treated the way ``compute_course_grade`` treats it:
    recorded grades count as they stand, other ungraded assignments count
    only if ``projected_scores`` covers them, and everything else is left
    out. The target assignment is then solved for:

        (earned + needed * w_target) / (counted_weight + w_target) = target

    The answer is a raw score on the assignment's own scale, clamped to
    ``[0, max_score]``; the unclamped percentage says whether the target
    is out of reach or already in the bag.

    ``NO_DATA`` when the assignment is unknown, already graded, or has
    zero weight (nothing scored on it can move the course).
    """
    if math.isnan(target_percentage):
        raise ConfigurationError("Target percentage cannot be NaN")

    detail = {"assignment_id": assignment_id, "target_percentage": target_percentage}
    by_id = {a.id: a for a in assignments}
    target = by_id.get(assignment_id)
    if target is None:
        return RequiredScoreResult.no_data(
            f"Assignment {assignment_id} is not part of this course", **detail
        )

    scores = _collapse_scores(assignments, grades, policy)
    if assignment_id in scores:
        return RequiredScoreResult.no_data(
            f"Assignment {assignment_id} is already graded", **detail
        )
    if target.weight == 0:
        return RequiredScoreResult.no_data(
            f"Assignment {assignment_id} carries no weight", **detail
        )

    for other_id, score in (projected_scores or {}).items():
        if other_id in by_id and other_id not in scores and other_id != assignment_id:
            scores[other_id] = score

    counted = [a for a in assignments if a.id in scores]
    earned = math.fsum(normalize_score(scores[a.id], a.max_score) * a.weight for a in counted)
    total_weight = math.fsum(a.weight for a in counted) + target.weight
    needed = (target_percentage / 100 * total_weight - earned) / target.weight

    return RequiredScoreResult(
        outcome=Outcome.OK,
        value=min(max(needed, 0.0), 1.0) * target.max_score,
        required_percentage=100 * needed,
        max_score=target.max_score,
        **detail,
    )


def grade_distribution(
    assignments: Sequence[Assignment],
    grades: Iterable[Grade],
    scale: GradeScale = DEFAULT_GRADE_SCALE,
    policy: DuplicateGradePolicy = DuplicateGradePolicy.MOST_RECENT,
) -> dict[str, int]:
    """How many graded assignments fall under each letter of the scale."""
    scores = _collapse_scores(assignments, grades, policy)
    distribution = {letter: 0 for letter in scale.letters}
    for assignment in assignments:
        if assignment.id not in scores:
            continue
        percentage = 100 * normalize_score(scores[assignment.id], assignment.max_score)
        distribution[scale.letter_for(percentage)] += 1
    return distribution
