"""
Utility modules for the Works bridge.
"""

from works_bridge.utils.logging import (
    get_logger,
    setup_logging,
    log_event_received,
    log_dispatch,
    log_api_call,
    log_error_with_context,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "log_event_received",
    "log_dispatch",
    "log_api_call",
    "log_error_with_context",
]
