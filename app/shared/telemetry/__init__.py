"""Shared telemetry: logging setup."""

from app.shared.telemetry.logging import (
    RequestIdFilter,
    get_logger,
    request_id_var,
    setup_logging,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "request_id_var",
    "RequestIdFilter",
]
