"""
Core scoring logic for academy readiness tracking.

This package is framework-agnostic: it imports nothing from FastAPI,
pydantic or the configuration loader. Callers hand it records and tables,
it hands back results.
"""
