"""Logging utilities for dummysrc."""

from __future__ import annotations

import logging

_LOGGER_NAME = "dummysrc"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the dummysrc hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


__all__ = ["get_logger"]
