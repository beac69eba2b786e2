"""
Weighted mean over components that may be missing.

Course grades, GPA, the fitness composite and the readiness index are all
the same computation: average whatever is present, weight it, and refuse
to answer when too little is present. Missing components are left out of
both numerator and denominator, never counted as zero.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from .results import ConfigurationError


@dataclass(frozen=True)
class Component:
    """One term of a weighted mean. ``value`` is None when the input is missing."""
    value: Optional[float]
    weight: float = 1.0
    key: str = ""

    def __post_init__(self) -> None:
        if self.weight < 0 or math.isnan(self.weight):
            raise ConfigurationError(f"Component {self.key!r} has invalid weight {self.weight}")

    @property
    def present(self) -> bool:
        return self.value is not None


@dataclass(frozen=True)
class WeightedMean:
    """Result of ``weighted_mean``: the value (or None) plus coverage counts."""
    value: Optional[float]
    present: int
    expected: int
    total_weight: float

    @property
    def defined(self) -> bool:
        return self.value is not None

    @property
    def complete(self) -> bool:
        return self.present == self.expected


def weighted_mean(components: Iterable[Component], min_present: int = 1) -> WeightedMean:
    """
    Weighted mean of the present components.

    Returns an undefined mean (``value=None``) when fewer than
    ``min_present`` components are present or the present weights sum to
    zero. Sums use ``math.fsum`` so the result does not depend on the order
    the components arrive in.
    """
    components = list(components)
    present = [c for c in components if c.present]
    total_weight = math.fsum(c.weight for c in present)

    if len(present) < min_present or total_weight <= 0:
        return WeightedMean(
            value=None,
            present=len(present),
            expected=len(components),
            total_weight=total_weight,
        )

    numerator = math.fsum(c.value * c.weight for c in present)
    return WeightedMean(
        value=numerator / total_weight,
        present=len(present),
        expected=len(components),
        total_weight=total_weight,
    )
