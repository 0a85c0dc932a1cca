"""
Strava Dashboard Service
------------------------
Per-sport aggregation of an activity snapshot and its display adapter.
"""

from .aggregator import aggregate
from .models import (
    ComparisonRow,
    DashboardView,
    RawActivity,
    SeriesPoint,
    SportCard,
    SportSummary,
)
from .presenter import build_card, build_comparison_chart, build_dashboard

__all__ = [
    "aggregate",
    "build_card",
    "build_comparison_chart",
    "build_dashboard",
    "ComparisonRow",
    "DashboardView",
    "RawActivity",
    "SeriesPoint",
    "SportCard",
    "SportSummary",
]
