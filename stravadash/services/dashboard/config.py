"""
Dashboard Configuration
-----------------------
Aggregation and presentation settings, loaded from settings.yaml.
"""
import logging
from pathlib import Path
from typing import Any, Dict, Final

import yaml

SETTINGS_FILE: Final[Path] = Path(__file__).parent / "settings.yaml"

DEFAULT_SERIES_WINDOW: Final[int] = 10
DEFAULT_ORDER_BY: Final[str] = "count"
DEFAULT_DECIMALS: Final[int] = 2
VALID_ORDERINGS: Final[tuple] = ("count", "sport")


def load_settings(path: Path = SETTINGS_FILE) -> Dict[str, Any]:
    """Load the YAML settings file."""
    try:
        with open(path, "r") as f:
            return yaml.safe_load(f) or {}
    except Exception as e:
        logging.error(f"Failed to load {path}: {e}")
        raise RuntimeError(f"Could not load dashboard settings: {e}") from e


SETTINGS: Final[Dict[str, Any]] = load_settings()

_aggregation = SETTINGS.get("aggregation", {})
_presentation = SETTINGS.get("presentation", {})

SERIES_WINDOW: Final[int] = int(_aggregation.get("series_window", DEFAULT_SERIES_WINDOW))
ORDER_BY: Final[str] = _aggregation.get("order_by", DEFAULT_ORDER_BY)
DECIMALS: Final[int] = int(_aggregation.get("decimals", DEFAULT_DECIMALS))

UNAVAILABLE_LABEL: Final[str] = _presentation.get("unavailable_label", "N/A")
EMPTY_SERIES_MESSAGE: Final[str] = _presentation.get(
    "empty_series_message", "No activity data available for this sport."
)
EMPTY_DASHBOARD_MESSAGE: Final[str] = _presentation.get(
    "empty_dashboard_message", "No athlete data available."
)
TRUNCATED_NOTICE: Final[str] = _presentation.get(
    "truncated_notice",
    "Only the {page_size} most recent activities were loaded; older ones are not included.",
)

if ORDER_BY not in VALID_ORDERINGS:
    raise RuntimeError(
        f"Invalid aggregation.order_by '{ORDER_BY}', expected one of {VALID_ORDERINGS}"
    )
