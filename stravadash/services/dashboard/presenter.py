"""
Presentation Adapter
--------------------
Maps SportSummary records to display-ready cards and chart rows.
Rendering itself (HTML, charts) belongs to the client.
"""

import logging
from typing import Iterable, List, Optional

from .aggregator import ActivityInput, aggregate
from .config import (
    DECIMALS,
    EMPTY_DASHBOARD_MESSAGE,
    EMPTY_SERIES_MESSAGE,
    TRUNCATED_NOTICE,
    UNAVAILABLE_LABEL,
)
from .models import ComparisonRow, DashboardView, SportCard, SportSummary

logger = logging.getLogger(__name__)


def format_value(value: Optional[float], unit: str, decimals: int = DECIMALS) -> str:
    """Format a number with its unit, or the unavailable label for None."""
    if value is None:
        return UNAVAILABLE_LABEL
    return f"{value:.{decimals}f} {unit}"


def build_card(summary: SportSummary) -> SportCard:
    """Build the card for one sport."""
    chart = [
        {
            "date": point.date,
            "distance": point.distance_km,
            "elevation": point.elevation_m,
        }
        for point in summary.recent_series
    ]
    return SportCard(
        title=summary.sport,
        total_distance=format_value(summary.total_distance_km, "km"),
        total_elevation=format_value(summary.total_elevation_m, "m"),
        total_duration=format_value(summary.total_duration_hours, "hours"),
        activity_count=summary.count,
        average_speed=format_value(summary.average_speed_km_h, "km/h"),
        chart=chart,
        empty_message=None if chart else EMPTY_SERIES_MESSAGE,
    )


def build_comparison_chart(summaries: Iterable[SportSummary]) -> List[ComparisonRow]:
    """One row per sport with its total distance and elevation, for a bar chart."""
    return [
        ComparisonRow(
            sport=summary.sport,
            total_distance=summary.total_distance_km,
            total_elevation=summary.total_elevation_m,
        )
        for summary in summaries
    ]


def build_dashboard(
    activities: List[ActivityInput],
    possibly_truncated: bool = False,
    page_size: Optional[int] = None,
) -> DashboardView:
    """
    Aggregate a raw snapshot and assemble the full dashboard view.

    Args:
        activities: Raw activities in API order (newest first).
        possibly_truncated: True when the fetch returned a full page.
        page_size: Page size used for the fetch, quoted in the notice.

    Returns:
        DashboardView with cards, comparison chart and notices.
    """
    summaries = aggregate(activities)
    notice = None
    if possibly_truncated:
        notice = TRUNCATED_NOTICE.format(page_size=page_size or len(activities))
        logger.info(notice)

    return DashboardView(
        cards=[build_card(summary) for summary in summaries],
        comparison=build_comparison_chart(summaries),
        activity_count=len(activities),
        possibly_truncated=possibly_truncated,
        notice=notice,
        empty_message=None if summaries else EMPTY_DASHBOARD_MESSAGE,
    )
