#!/usr/bin/env python3
"""
Check a CFA standards table and/or grade scale before deploying it.

Loads the files through the same code the API uses, so anything that
passes here will load at startup. Prints each event's scoring range and
a few sample scores so a transcription error in a new year's table is
easy to spot.

Usage:
    python scripts/validate_standards.py
    python scripts/validate_standards.py --standards cfa_2026.json
    python scripts/validate_standards.py --grade-scale district.json

Without arguments, checks whatever STANDARDS_PATH / GRADE_SCALE_PATH in
.env point at (or the packaged defaults).
"""

import sys
from pathlib import Path

# Add project root to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from cadet_readiness.config.settings import get_settings
from cadet_readiness.core.scoring.grading import grade_scale_preset
from cadet_readiness.core.scoring.results import ConfigurationError
from cadet_readiness.infrastructure.standards.loader import (
    StandardsLoadError,
    load_grade_scale,
    load_standards_table,
)


def check_standards(path) -> bool:
    """Load a standards table and print a per-event summary."""
    print(f"Standards table: {path or 'packaged default'}")
    try:
        table = load_standards_table(path)
    except (StandardsLoadError, ConfigurationError) as e:
        print(f"[ERR] {e}")
        return False

    print(f"Name: {table.name}")
    for standard in sorted(table.standards, key=lambda s: (s.event.value, s.gender.value)):
        worst, best = standard.worst, standard.best
        midpoint = (worst.raw + best.raw) / 2
        print(
            f"  {standard.event.label:<17} {standard.gender.value:<6} "
            f"{worst.raw:g} -> {best.raw:g} {standard.unit} "
            f"(midpoint {midpoint:g} scores {standard.score(midpoint):.1f})"
        )

    missing = table.missing_entries()
    if missing:
        print("[ERR] Missing entries:")
        for event, gender in missing:
            print(f"  {event.value}/{gender.value}")
        return False

    print("[OK] Standards table is complete")
    return True


def check_grade_scale(path, preset: str) -> bool:
    """Load a grade scale (file or built-in preset) and print its bands."""
    print(f"Grade scale: {path or preset}")
    try:
        scale = load_grade_scale(path) if path else grade_scale_preset(preset)
    except (StandardsLoadError, ConfigurationError) as e:
        print(f"[ERR] {e}")
        return False

    for band in scale.bands:
        print(f"  {band.letter:<3} >= {band.min_percentage:g}%  {band.points:.1f}")
    bonuses = ", ".join(f"{k.value} +{v:g}" for k, v in scale.weight_class_bonus.items())
    print(f"  bonuses: {bonuses}; caps {scale.standard_cap:g}/{scale.weighted_cap:g}")
    print("[OK] Grade scale is valid")
    return True


def main():
    import argparse

    settings = get_settings()

    parser = argparse.ArgumentParser(description='Validate scoring configuration files')
    parser.add_argument('--standards', default=settings.standards_path, help='Standards table JSON path')
    parser.add_argument('--grade-scale', default=settings.grade_scale_path, help='Grade scale JSON path')
    parser.add_argument('--skip-standards', action='store_true', help='Only check the grade scale')
    parser.add_argument('--skip-grade-scale', action='store_true', help='Only check the standards table')
    args = parser.parse_args()

    success = True

    if not args.skip_standards:
        success = check_standards(args.standards) and success
        print()

    if not args.skip_grade_scale:
        success = check_grade_scale(args.grade_scale, settings.grade_scale) and success
        print()

    problems = settings.validate_scoring_config()
    if problems:
        print("Configuration problems:")
        for problem in problems:
            print(f"  [ERR] {problem}")
        success = False

    print("=== Validation " + ("passed" if success else "FAILED") + " ===")
    sys.exit(0 if success else 1)


if __name__ == '__main__':
    main()
