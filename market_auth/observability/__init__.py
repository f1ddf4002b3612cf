"""Logging setup shared by services and the API."""

from market_auth.observability.logging import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
