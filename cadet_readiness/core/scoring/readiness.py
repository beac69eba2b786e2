"""
Readiness index: one number for "how ready is this applicant".

Blends the academic picture (GPA), the fitness composite and progress on
application goals. The blend weights are configuration. Unlike missing
data, a weight set that doesn't add up to 1 is a caller bug and is
reported as ``INVALID_CONFIGURATION`` rather than quietly rescaled.

The distinction matters:
- Missing input: "no fitness test yet". Normal early in the year, so the
  default policy rescales the remaining weights.
- Bad weights: "GPA 0.6, fitness 0.3, goals 0.2". Every index computed
  with them would be wrong, so none is computed.

Every input is put on a 0-100 scale first. GPA is the only one that isn't
already there, and is mapped linearly from the 4.0 scale.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from .aggregation import Component, weighted_mean
from .models import Goal
from .results import ConfigurationError, Outcome, ReadinessComponent, ReadinessResult

logger = logging.getLogger(__name__)

GPA_SCALE = 4.0
WEIGHT_TOLERANCE = 1e-6


class MissingScorePolicy(Enum):
    """
    What to do when a sub-score is undefined.

    RENORMALIZE: drop it and spread its weight over the remaining inputs.
    UNDEFINED: no readiness figure until every input is available.
    """
    RENORMALIZE = "renormalize"
    UNDEFINED = "undefined"


@dataclass(frozen=True)
class ReadinessWeights:
    """Blend weights. Must be non-negative and sum to 1.0."""
    gpa: float = 0.5
    fitness: float = 0.3
    goals: float = 0.2

    @property
    def total(self) -> float:
        return math.fsum((self.gpa, self.fitness, self.goals))

    def problems(self) -> list[str]:
        problems = []
        for name, weight in (("gpa", self.gpa), ("fitness", self.fitness), ("goals", self.goals)):
            if weight < 0 or math.isnan(weight):
                problems.append(f"{name} weight must be non-negative, got {weight}")
        if not math.isclose(self.total, 1.0, rel_tol=0.0, abs_tol=WEIGHT_TOLERANCE):
            problems.append(f"weights must sum to 1.0, got {self.total}")
        return problems

    def validate(self) -> "ReadinessWeights":
        """Raise ``ConfigurationError`` if the weights are inconsistent."""
        problems = self.problems()
        if problems:
            raise ConfigurationError("; ".join(problems))
        return self


def normalize_gpa(gpa: float) -> float:
    """4.0 scale -> 0-100, capped at 100."""
    return min(100.0, max(0.0, gpa / GPA_SCALE * 100))


def goal_completion_rate(goals: Iterable[Goal]) -> Optional[float]:
    """Percentage of goals completed. None when there are no goals to complete."""
    goals = list(goals)
    if not goals:
        return None
    completed = sum(1 for goal in goals if goal.is_completed)
    return 100.0 * completed / len(goals)


def compute_readiness(
    gpa: Optional[float],
    fitness_score: Optional[float],
    goal_rate: Optional[float],
    weights: ReadinessWeights = ReadinessWeights(),
    policy: MissingScorePolicy = MissingScorePolicy.RENORMALIZE,
) -> ReadinessResult:
    """
    Weighted readiness index on a 0-100 scale.

    ``gpa`` is on the 4.0 scale; ``fitness_score`` and ``goal_rate`` are
    already 0-100. Pass None for any input that is undefined (no graded
    courses, too few fitness events, no goals).
    """
    problems = weights.problems()
    if problems:
        logger.error(
            "Rejecting readiness weights",
            extra={"weights": weights, "problems": problems},
        )
        return ReadinessResult.invalid_configuration("; ".join(problems))

    inputs = (
        ("gpa", normalize_gpa(gpa) if gpa is not None else None, weights.gpa),
        ("fitness", fitness_score, weights.fitness),
        ("goals", goal_rate, weights.goals),
    )
    required = len(inputs) if policy is MissingScorePolicy.UNDEFINED else 1
    mean = weighted_mean(
        (Component(score, weight, name) for name, score, weight in inputs),
        min_present=required,
    )

    if not mean.defined:
        missing = [name for name, score, _ in inputs if score is None]
        components = tuple(
            ReadinessComponent(name, score, weight, 0.0, 0.0)
            for name, score, weight in inputs
        )
        return ReadinessResult.insufficient_data(
            f"Missing sub-scores: {', '.join(missing)}" if missing
            else "Available sub-scores carry no weight",
            components=components,
        )

    components = []
    for name, score, weight in inputs:
        effective = weight / mean.total_weight if score is not None else 0.0
        components.append(ReadinessComponent(
            name=name,
            score=score,
            weight=weight,
            effective_weight=effective,
            contribution=effective * score if score is not None else 0.0,
        ))

    return ReadinessResult(
        outcome=Outcome.OK,
        value=mean.value,
        components=tuple(components),
    )
