"""
Candidate Fitness Assessment scoring.

A standards table maps each (event, gender) pair to a list of breakpoints:
raw measurement -> points. A raw value between two breakpoints is scored
by linear interpolation; a value outside the table takes the score of the
nearest edge. Nothing is extrapolated.

Events differ in which direction is "better". More pull-ups is better; a
longer mile time is worse. Each standard declares its direction and the
table is validated against it, so a typo that makes a slower run score
higher is caught when the table is built rather than on a score sheet.

The best breakpoint of every standard is worth exactly 100. Beating the
table can never earn more, and a table whose top tops out at 95 would
quietly cap every candidate below full marks.

Raw values and points are kept apart on purpose:
- Raw: "14 pull-ups", "6:05 mile" (what the candidate did)
- Points: 0-100 on a common scale (what the table says it is worth)

Only points are ever averaged. Averaging reps with minutes is meaningless.
"""

import bisect
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping, Optional

from .aggregation import Component, weighted_mean
from .models import CfaEvent, ExerciseRecord, Gender
from .results import CompositeResult, ConfigurationError, Outcome

logger = logging.getLogger(__name__)

CFA_EVENT_COUNT = len(CfaEvent)

# A composite over fewer events than this is not shown as a score at all
MIN_REPORTABLE_EVENTS = 4


class Direction(Enum):
    HIGHER_IS_BETTER = "higher_is_better"  # counts and distances
    LOWER_IS_BETTER = "lower_is_better"    # times


class ExerciseStatus(Enum):
    """Coarse rating of a single measurement, for progress displays."""
    EXCELLENT = "excellent"          # at or beyond the top of the table
    GOOD = "good"                    # at least halfway up the table
    NEEDS_WORK = "needs_work"        # on the table, lower half
    BELOW_MINIMUM = "below_minimum"  # worse than the lowest breakpoint


@dataclass(frozen=True)
class Breakpoint:
    raw: float
    points: float


@dataclass(frozen=True)
class EventStandard:
    """
    Scoring curve for one event and gender.

    Breakpoints may be listed in either raw order (the published tables
    list run times from slowest to fastest) but must be strictly monotonic.
    They are stored ascending by raw value.
    """
    event: CfaEvent
    gender: Gender
    unit: str
    direction: Direction
    breakpoints: tuple[Breakpoint, ...]

    def __post_init__(self) -> None:
        label = f"{self.event.value}/{self.gender.value}"
        points = self.breakpoints
        if len(points) < 2:
            raise ConfigurationError(f"Standard {label} needs at least two breakpoints")

        raws = [p.raw for p in points]
        ascending = all(a < b for a, b in zip(raws, raws[1:]))
        descending = all(a > b for a, b in zip(raws, raws[1:]))
        if not (ascending or descending):
            raise ConfigurationError(f"Standard {label} has non-monotonic breakpoints: {raws}")
        if descending:
            points = tuple(reversed(points))
            object.__setattr__(self, "breakpoints", points)

        for p in points:
            if not 0 <= p.points <= 100:
                raise ConfigurationError(
                    f"Standard {label}: {p.points} points is outside 0-100"
                )

        values = [p.points for p in points]
        if self.direction is Direction.HIGHER_IS_BETTER:
            monotonic = all(a <= b for a, b in zip(values, values[1:]))
        else:
            monotonic = all(a >= b for a, b in zip(values, values[1:]))
        if not monotonic:
            raise ConfigurationError(
                f"Standard {label}: points must improve as performance improves "
                f"({self.direction.value})"
            )

        # Beating the top of the table is worth exactly full marks
        if self.best.points != 100:
            raise ConfigurationError(
                f"Standard {label}: best breakpoint must score 100, got {self.best.points}"
            )

    @property
    def best(self) -> Breakpoint:
        if self.direction is Direction.HIGHER_IS_BETTER:
            return self.breakpoints[-1]
        return self.breakpoints[0]

    @property
    def worst(self) -> Breakpoint:
        if self.direction is Direction.HIGHER_IS_BETTER:
            return self.breakpoints[0]
        return self.breakpoints[-1]

    def at_least_as_good(self, raw: float, reference: float) -> bool:
        if self.direction is Direction.HIGHER_IS_BETTER:
            return raw >= reference
        return raw <= reference

    def score(self, raw: float) -> float:
        """
        Interpolated points for a raw measurement, clamped to the table.

        Infinities clamp like any other out-of-range value. NaN has no
        position on the curve and is refused.
        """
        _require_number(raw, self)
        points = self.breakpoints
        if raw <= points[0].raw:
            return points[0].points
        if raw >= points[-1].raw:
            return points[-1].points

        raws = [p.raw for p in points]
        upper = bisect.bisect_right(raws, raw)
        lo, hi = points[upper - 1], points[upper]
        fraction = (raw - lo.raw) / (hi.raw - lo.raw)
        return lo.points + fraction * (hi.points - lo.points)

    def status(self, raw: float) -> ExerciseStatus:
        _require_number(raw, self)
        if self.at_least_as_good(raw, self.best.raw):
            return ExerciseStatus.EXCELLENT
        if not self.at_least_as_good(raw, self.worst.raw):
            return ExerciseStatus.BELOW_MINIMUM
        midpoint = (self.worst.points + self.best.points) / 2
        if self.score(raw) >= midpoint:
            return ExerciseStatus.GOOD
        return ExerciseStatus.NEEDS_WORK


def _require_number(raw: float, standard: EventStandard) -> None:
    if math.isnan(raw):
        raise ConfigurationError(
            f"Cannot score NaN for {standard.event.value}/{standard.gender.value}"
        )


@dataclass(frozen=True)
class StandardsTable:
    """
    All event standards in force, e.g. one year's CFA tables.

    Built once from configuration and passed into every scoring call.
    """
    standards: tuple[EventStandard, ...]
    name: str = "CFA"
    _index: dict = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index: dict[tuple[CfaEvent, Gender], EventStandard] = {}
        for standard in self.standards:
            key = (standard.event, standard.gender)
            if key in index:
                raise ConfigurationError(
                    f"Standards table {self.name!r} defines "
                    f"{standard.event.value}/{standard.gender.value} twice"
                )
            index[key] = standard
        object.__setattr__(self, "_index", index)

    def standard_for(self, event: CfaEvent, gender: Gender) -> EventStandard:
        try:
            return self._index[(event, gender)]
        except KeyError:
            raise ConfigurationError(
                f"Standards table {self.name!r} has no entry for "
                f"{event.value}/{gender.value}"
            ) from None

    def covers(self, event: CfaEvent, gender: Gender) -> bool:
        return (event, gender) in self._index

    def missing_entries(self) -> list[tuple[CfaEvent, Gender]]:
        """Event/gender pairs with no standard. Empty for a complete CFA table."""
        return [
            (event, gender)
            for event in CfaEvent
            for gender in Gender
            if (event, gender) not in self._index
        ]


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

def score_exercise(
    event: CfaEvent,
    gender: Gender,
    raw_value: float,
    table: StandardsTable,
) -> float:
    """0-100 points for one measurement."""
    return table.standard_for(event, gender).score(raw_value)


def exercise_status(
    event: CfaEvent,
    gender: Gender,
    raw_value: float,
    table: StandardsTable,
) -> ExerciseStatus:
    return table.standard_for(event, gender).status(raw_value)


def latest_records(records: Iterable[ExerciseRecord]) -> dict[CfaEvent, ExerciseRecord]:
    """The most recent measurement for each event. Later entries win date ties."""
    latest: dict[CfaEvent, ExerciseRecord] = {}
    for record in records:
        current = latest.get(record.event)
        if current is None or record.measured_on >= current.measured_on:
            latest[record.event] = record
    return latest


def score_records(
    records: Iterable[ExerciseRecord],
    table: StandardsTable,
) -> dict[CfaEvent, float]:
    """
    Score the latest measurement of each event.

    A record in a different unit from its standard (seconds vs minutes
    for the mile) cannot be scored honestly and is skipped; the event then
    counts as missing.
    """
    scores: dict[CfaEvent, float] = {}
    for event, record in latest_records(records).items():
        standard = table.standard_for(event, record.gender)
        if record.unit.strip().lower() != standard.unit.lower():
            logger.warning(
                "Skipping exercise record with mismatched unit",
                extra={
                    "event": event.value,
                    "record_unit": record.unit,
                    "standard_unit": standard.unit,
                },
            )
            continue
        scores[event] = standard.score(record.value)
    return scores


def composite_score(
    scores: Mapping[CfaEvent, Optional[float]],
    min_events: int = MIN_REPORTABLE_EVENTS,
) -> CompositeResult:
    """
    Unweighted mean of the per-event scores.

    Missing events (absent or None) are left out rather than scored zero.
    The result is OK once at least ``min_events`` events are present and
    is flagged incomplete until all six are.
    """
    if not 1 <= min_events <= CFA_EVENT_COUNT:
        raise ConfigurationError(
            f"min_events must be between 1 and {CFA_EVENT_COUNT}, got {min_events}"
        )

    present = {event: scores[event] for event in CfaEvent if scores.get(event) is not None}
    mean = weighted_mean(
        (Component(scores.get(event), 1.0, event.value) for event in CfaEvent),
        min_present=min_events,
    )

    if not mean.defined:
        return CompositeResult.insufficient_data(
            f"{mean.present} of {CFA_EVENT_COUNT} events recorded, "
            f"{min_events} needed",
            scores=present,
            events_present=mean.present,
            events_expected=CFA_EVENT_COUNT,
            min_events=min_events,
        )

    return CompositeResult(
        outcome=Outcome.OK,
        value=mean.value,
        scores=present,
        events_present=mean.present,
        events_expected=CFA_EVENT_COUNT,
        min_events=min_events,
    )

