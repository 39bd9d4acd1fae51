"""Shared utilities."""

from backdrop.core.utils.logging import JsonLineFormatter, configure_logging

__all__ = ["JsonLineFormatter", "configure_logging"]
