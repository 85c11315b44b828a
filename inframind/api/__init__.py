"""
InfraMind Web API

FastAPI application for health-check admission and run/report lookups.
"""

from inframind.api.web import app

__all__ = ["app"]
