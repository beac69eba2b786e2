"""
Standards table and grade scale loading.

CFA standards are revised from year to year and schools grade on
different scales, so both live in JSON files rather than in code. This
module reads those files and turns them into validated core objects.

Two kinds of failure are kept apart:
- StandardsLoadError: the file is missing, isn't JSON, or is missing keys
- ConfigurationError: the file parsed but the table itself is inconsistent
  (raised by the core constructors and passed through untouched)
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, Union

from ...core.scoring.fitness import Breakpoint, Direction, EventStandard, StandardsTable
from ...core.scoring.grading import GradeScale, LetterBand
from ...core.scoring.models import CfaEvent, Gender, WeightClass
from ...core.scoring.results import ConfigurationError

logger = logging.getLogger(__name__)

# Packaged default (cadet_readiness/data/cfa_standards.json)
DEFAULT_STANDARDS_PATH = Path(__file__).resolve().parents[2] / "data" / "cfa_standards.json"


class StandardsLoadError(Exception):
    """Raised when a configuration file can't be read or has the wrong shape."""
    pass


def _read_json(path: Union[str, Path]) -> Any:
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise StandardsLoadError(f"Configuration file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise StandardsLoadError(f"Configuration file is not valid JSON: {path} ({e})") from e


# ---------------------------------------------------------------------------
# Standards tables
# ---------------------------------------------------------------------------

def parse_standards_table(data: dict) -> StandardsTable:
    """
    Build a StandardsTable from its JSON form.

    Expected shape:
        {
            "name": "CFA 2025",
            "standards": [
                {
                    "event": "pull_ups",
                    "gender": "male",
                    "unit": "reps",
                    "direction": "higher_is_better",
                    "breakpoints": [[7, 0], [18, 100]]
                },
                ...
            ]
        }
    """
    try:
        standards = tuple(
            EventStandard(
                event=CfaEvent(entry["event"]),
                gender=Gender(entry["gender"]),
                unit=str(entry["unit"]),
                direction=Direction(entry["direction"]),
                breakpoints=tuple(
                    Breakpoint(raw=float(raw), points=float(points))
                    for raw, points in entry["breakpoints"]
                ),
            )
            for entry in data["standards"]
        )
        return StandardsTable(standards=standards, name=str(data.get("name", "CFA")))
    except ConfigurationError:
        raise
    except (KeyError, TypeError, ValueError) as e:
        raise StandardsLoadError(f"Malformed standards table: {e!r}") from e


def load_standards_table(path: Optional[Union[str, Path]] = None) -> StandardsTable:
    """Load a standards table from ``path``, or the packaged CFA table."""
    path = Path(path) if path else DEFAULT_STANDARDS_PATH
    table = parse_standards_table(_read_json(path))

    missing = table.missing_entries()
    logger.info(
        "Loaded standards table",
        extra={
            "path": str(path),
            "table": table.name,
            "standards": len(table.standards),
            "missing": [f"{e.value}/{g.value}" for e, g in missing],
        },
    )
    return table


# ---------------------------------------------------------------------------
# Grade scales
# ---------------------------------------------------------------------------

def parse_grade_scale(data: dict) -> GradeScale:
    """
    Build a GradeScale from its JSON form.

    Expected shape:
        {
            "name": "district",
            "bands": [{"letter": "A", "min_percentage": 90, "points": 4.0}, ...],
            "weight_class_bonus": {"honors": 0.5, "advanced": 1.0},
            "standard_cap": 4.0,
            "weighted_cap": 5.0
        }

    Omitted bonuses are 0; omitted caps take the GradeScale defaults.
    """
    try:
        bands = tuple(
            LetterBand(
                letter=str(band["letter"]),
                min_percentage=float(band["min_percentage"]),
                points=float(band["points"]),
            )
            for band in data["bands"]
        )
        kwargs: dict[str, Any] = {"name": str(data.get("name", "custom")), "bands": bands}

        if "weight_class_bonus" in data:
            bonus = {WeightClass.STANDARD: 0.0}
            for key, value in data["weight_class_bonus"].items():
                bonus[WeightClass(key)] = float(value)
            kwargs["weight_class_bonus"] = bonus
        if "standard_cap" in data:
            kwargs["standard_cap"] = float(data["standard_cap"])
        if "weighted_cap" in data:
            kwargs["weighted_cap"] = float(data["weighted_cap"])

        return GradeScale(**kwargs)
    except ConfigurationError:
        raise
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise StandardsLoadError(f"Malformed grade scale: {e!r}") from e


def load_grade_scale(path: Union[str, Path]) -> GradeScale:
    scale = parse_grade_scale(_read_json(path))
    logger.info(
        "Loaded grade scale",
        extra={"path": str(path), "scale": scale.name, "letters": scale.letters},
    )
    return scale
