"""Logging configuration and utilities for eventfund."""

from .config import configure_logging, get_campaign_logger, get_logger

__all__ = ["configure_logging", "get_campaign_logger", "get_logger"]
