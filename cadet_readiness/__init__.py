"""
Cadet Readiness - progress scoring for service-academy applicants.

This package contains the complete application:
- core: Framework-agnostic scoring engine
- infrastructure: Loading standards tables and grade scales from files
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
