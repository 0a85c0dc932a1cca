"""Connectors to external data sources."""
