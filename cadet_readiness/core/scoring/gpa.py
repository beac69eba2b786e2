"""
Cumulative GPA from per-course percentages.

Courses contribute in proportion to their credit hours. A course without
any graded work is skipped, not counted as a zero.

Two GPAs come out of every calculation. The standard GPA caps each course
at 4.0 because that is what admissions offices compare. The weighted GPA
keeps the honors/AP bonus because that is what the transcript prints.
They share every other rule, so they are computed in one pass.
"""

import math
from typing import Iterable, Mapping, Optional, Sequence

from .aggregation import Component, weighted_mean
from .grading import (
    DEFAULT_GRADE_SCALE,
    DuplicateGradePolicy,
    GradeScale,
    compute_course_grade,
)
from .models import Assignment, Course, Grade
from .results import ConfigurationError, CourseGradePoints, GpaImpact, GpaResult, Outcome


def course_percentages(
    courses: Sequence[Course],
    assignments: Iterable[Assignment],
    grades: Iterable[Grade],
    scale: GradeScale = DEFAULT_GRADE_SCALE,
    policy: DuplicateGradePolicy = DuplicateGradePolicy.MOST_RECENT,
) -> dict[str, float]:
    """
    Run the grade aggregator for every course.

    Returns course id -> percentage. Courses with no graded work are
    omitted, which is exactly what ``compute_gpa`` expects.
    """
    assignments = list(assignments)
    grades = list(grades)

    percentages: dict[str, float] = {}
    for course in courses:
        course_assignments = [a for a in assignments if a.course_id == course.id]
        assignment_ids = {a.id for a in course_assignments}
        course_grades = [g for g in grades if g.assignment_id in assignment_ids]

        result = compute_course_grade(course_assignments, course_grades, scale, policy)
        if result.is_ok:
            percentages[course.id] = result.value
    return percentages


def compute_gpa(
    courses: Sequence[Course],
    percentages: Mapping[str, float],
    scale: GradeScale = DEFAULT_GRADE_SCALE,
) -> GpaResult:
    """
    Credit-hour weighted GPA.

    Per course: percentage -> base points on ``scale``, plus the weight
    class bonus. The standard GPA caps each course at ``scale.standard_cap``
    (4.0); the weighted GPA keeps the bonus up to ``scale.weighted_cap``
    (5.0) for transcript-style display.
    """
    standard_components = []
    weighted_components = []
    breakdown = []

    for course in courses:
        percentage = percentages.get(course.id)
        if percentage is None:
            standard_components.append(Component(None, course.credit_hours, course.id))
            weighted_components.append(Component(None, course.credit_hours, course.id))
            continue
        if math.isnan(percentage):
            raise ConfigurationError(f"Course {course.id} has a NaN percentage")

        band = scale.band_for(percentage)
        raw_points = scale.points_for(percentage, course.weight_class)
        quality = min(raw_points, scale.weighted_cap)
        standard = min(raw_points, scale.standard_cap)

        standard_components.append(Component(standard, course.credit_hours, course.id))
        weighted_components.append(Component(quality, course.credit_hours, course.id))
        breakdown.append(CourseGradePoints(
            course_id=course.id,
            percentage=percentage,
            letter=band.letter,
            base_points=band.points,
            quality_points=quality,
            standard_points=standard,
            credit_hours=course.credit_hours,
        ))

    standard_mean = weighted_mean(standard_components)
    if not standard_mean.defined:
        return GpaResult.no_data(
            "No courses with graded work" if courses else "No courses",
        )

    weighted = weighted_mean(weighted_components)
    return GpaResult(
        outcome=Outcome.OK,
        value=standard_mean.value,
        weighted_gpa=weighted.value,
        courses_counted=standard_mean.present,
        credit_hours=standard_mean.total_weight,
        courses=tuple(breakdown),
    )


def gpa_impact(
    courses: Sequence[Course],
    current_percentages: Mapping[str, float],
    predicted_percentages: Mapping[str, Optional[float]],
    scale: GradeScale = DEFAULT_GRADE_SCALE,
) -> GpaImpact:
    """
    How the GPA moves if predicted course grades come true.

    Courses without a prediction keep their current percentage. A course
    with no graded work yet but a prediction joins the predicted GPA.
    """
    predicted = dict(current_percentages)
    for course_id, percentage in predicted_percentages.items():
        if percentage is not None:
            predicted[course_id] = percentage

    return GpaImpact(
        current=compute_gpa(courses, current_percentages, scale),
        predicted=compute_gpa(courses, predicted, scale),
    )
