"""Services built on top of the connectors."""
