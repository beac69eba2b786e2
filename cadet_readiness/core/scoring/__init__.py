"""
Performance scoring engine.

Pure functions over already-retrieved records:

- grading: assignments + grades -> course percentage and letter
- gpa: course percentages -> cumulative GPA
- fitness: CFA measurements -> per-event points -> composite
- readiness: GPA, fitness and goals -> readiness index

Every entry point returns a tagged result (see ``results``) so that
"no data yet" never masquerades as a score of zero.
"""

from .aggregation import Component, WeightedMean, weighted_mean
from .fitness import (
    MIN_REPORTABLE_EVENTS,
    Breakpoint,
    Direction,
    EventStandard,
    ExerciseStatus,
    StandardsTable,
    composite_score,
    exercise_status,
    latest_records,
    score_exercise,
    score_records,
)
from .gpa import compute_gpa, course_percentages, gpa_impact
from .grading import (
    DEFAULT_GRADE_SCALE,
    GRADE_SCALES,
    LETTER_SCALE,
    PLUS_MINUS_SCALE,
    DuplicateGradePolicy,
    GradePrediction,
    GradeScale,
    LetterBand,
    compute_course_grade,
    grade_distribution,
    grade_scale_preset,
    predict_course_grade,
    required_score,
)
from .models import (
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
from .readiness import (
    MissingScorePolicy,
    ReadinessWeights,
    compute_readiness,
    goal_completion_rate,
    normalize_gpa,
)
from .results import (
    CompositeResult,
    ConfigurationError,
    CourseGradePoints,
    CourseGradeResult,
    GpaImpact,
    GpaResult,
    Outcome,
    ReadinessComponent,
    ReadinessResult,
    RequiredScoreResult,
    ScoreResult,
    UndefinedScoreError,
)

__all__ = [
    # Records
    "Assignment",
    "CfaEvent",
    "Course",
    "ExerciseRecord",
    "Gender",
    "Goal",
    "GoalStatus",
    "Grade",
    "Semester",
    "Term",
    "WeightClass",
    # Results
    "CompositeResult",
    "ConfigurationError",
    "CourseGradePoints",
    "CourseGradeResult",
    "GpaImpact",
    "GpaResult",
    "Outcome",
    "ReadinessComponent",
    "ReadinessResult",
    "RequiredScoreResult",
    "ScoreResult",
    "UndefinedScoreError",
    # Aggregation
    "Component",
    "WeightedMean",
    "weighted_mean",
    # Grades
    "DEFAULT_GRADE_SCALE",
    "GRADE_SCALES",
    "LETTER_SCALE",
    "PLUS_MINUS_SCALE",
    "DuplicateGradePolicy",
    "GradePrediction",
    "GradeScale",
    "LetterBand",
    "compute_course_grade",
    "grade_distribution",
    "grade_scale_preset",
    "predict_course_grade",
    "required_score",
    # GPA
    "compute_gpa",
    "course_percentages",
    "gpa_impact",
    # Fitness
    "MIN_REPORTABLE_EVENTS",
    "Breakpoint",
    "Direction",
    "EventStandard",
    "ExerciseStatus",
    "StandardsTable",
    "composite_score",
    "exercise_status",
    "latest_records",
    "score_exercise",
    "score_records",
    # Readiness
    "MissingScorePolicy",
    "ReadinessWeights",
    "compute_readiness",
    "goal_completion_rate",
    "normalize_gpa",
]
