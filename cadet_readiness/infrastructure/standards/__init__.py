"""Standards table and grade scale loading."""

from .loader import (
    DEFAULT_STANDARDS_PATH,
    StandardsLoadError,
    load_grade_scale,
    load_standards_table,
    parse_grade_scale,
    parse_standards_table,
)

__all__ = [
    "DEFAULT_STANDARDS_PATH",
    "StandardsLoadError",
    "load_grade_scale",
    "load_standards_table",
    "parse_grade_scale",
    "parse_standards_table",
]
