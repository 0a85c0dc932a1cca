"""Strava sport dashboard: activity fetch, per-sport aggregation and display adapter."""

__version__ = "1.0.0"
