"""
Activity Aggregator
-------------------
Turns a raw snapshot of Strava activities into per-sport summaries.

Totals are accumulated at full precision and rounded once, when the
summary is built. Each summary also carries a short chronological series
of its most recent activities for charting.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from .config import DECIMALS, ORDER_BY, SERIES_WINDOW
from .dates import format_display_date, sort_key
from .models import RawActivity, SeriesPoint, SportSummary

logger = logging.getLogger(__name__)

ActivityInput = Union[RawActivity, Mapping[str, Any]]


@dataclass
class _SportAccumulator:
    """Running totals for one sport during a single aggregation pass."""

    sport: str
    total_distance_km: float = 0.0
    total_elevation_m: float = 0.0
    total_duration_hours: float = 0.0
    count: int = 0
    # (start_date, point) in input order, i.e. newest first
    series_buffer: List[Tuple[datetime, SeriesPoint]] = field(default_factory=list)

    def add(self, activity: RawActivity, decimals: int) -> None:
        distance_km = activity.distance / 1000
        self.total_distance_km += distance_km
        self.total_elevation_m += activity.total_elevation_gain
        self.total_duration_hours += activity.moving_time / 3600
        self.count += 1
        self.series_buffer.append(
            (
                activity.start_date,
                SeriesPoint(
                    date=format_display_date(activity.start_date),
                    distance_km=round(distance_km, decimals),
                    elevation_m=round(activity.total_elevation_gain, decimals),
                ),
            )
        )


def to_raw_activity(activity: ActivityInput) -> RawActivity:
    """Validate a raw API record into a RawActivity (no-op for instances)."""
    if isinstance(activity, RawActivity):
        return activity
    return RawActivity.model_validate(activity)


def average_speed(
    total_distance_km: float, total_duration_hours: float, decimals: int = DECIMALS
) -> Optional[float]:
    """
    Average speed in km/h.

    Returns None when the duration is zero: the ratio is not available and
    must never surface as an error or as infinity.
    """
    if total_duration_hours == 0:
        return None
    return round(total_distance_km / total_duration_hours, decimals)


def recent_series(
    series_buffer: List[Tuple[datetime, SeriesPoint]], window: int = SERIES_WINDOW
) -> List[SeriesPoint]:
    """
    Pick the ``window`` most recent entries and order them oldest first.

    The buffer follows the API order (newest first), so the most recent
    entries are the leading ones. They are then sorted by start date; the
    sort is stable over the reversed slice, so entries sharing a timestamp
    stay oldest-by-input first.
    """
    selected = list(series_buffer[:window])
    selected.reverse()
    selected.sort(key=lambda entry: sort_key(entry[0]))
    return [point for _, point in selected]


def _build_summary(
    acc: _SportAccumulator, series_window: int, decimals: int
) -> SportSummary:
    return SportSummary(
        sport=acc.sport,
        total_distance_km=round(acc.total_distance_km, decimals),
        total_elevation_m=round(acc.total_elevation_m, decimals),
        total_duration_hours=round(acc.total_duration_hours, decimals),
        count=acc.count,
        average_speed_km_h=average_speed(
            acc.total_distance_km, acc.total_duration_hours, decimals
        ),
        recent_series=recent_series(acc.series_buffer, series_window),
    )


def sort_summaries(summaries: List[SportSummary], order_by: str = ORDER_BY) -> List[SportSummary]:
    """Order summaries by activity count (desc) or sport name, ties broken by name."""
    if order_by == "sport":
        return sorted(summaries, key=lambda s: s.sport)
    if order_by == "count":
        return sorted(summaries, key=lambda s: (-s.count, s.sport))
    raise ValueError(f"Unknown ordering: {order_by}")


def aggregate(
    activities: Iterable[ActivityInput],
    series_window: int = SERIES_WINDOW,
    order_by: str = ORDER_BY,
    decimals: int = DECIMALS,
) -> List[SportSummary]:
    """
    Aggregate activities by sport type.

    Args:
        activities: Activities in API order (newest first), as RawActivity
            instances or raw API dicts.
        series_window: Maximum number of entries kept in each recent series.
        order_by: "count" (most activities first) or "sport" (alphabetical).
        decimals: Decimal places applied to every output value.

    Returns:
        One SportSummary per distinct ``type`` value. An empty input gives an
        empty list.
    """
    accumulators: Dict[str, _SportAccumulator] = {}
    for raw in activities:
        activity = to_raw_activity(raw)
        acc = accumulators.get(activity.type)
        if acc is None:
            acc = accumulators[activity.type] = _SportAccumulator(sport=activity.type)
        acc.add(activity, decimals)

    summaries = [
        _build_summary(acc, series_window, decimals) for acc in accumulators.values()
    ]
    logger.debug(
        f"Aggregated {sum(s.count for s in summaries)} activities into {len(summaries)} sports"
    )
    return sort_summaries(summaries, order_by)
