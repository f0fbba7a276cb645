"""
Router utility functions.

Contains helpers shared by router endpoints to keep them clean.
"""

from storyboard.api.routers.router_utils.error_handling import (
    handle_storyboard_errors,
    status_code_for,
)

__all__ = [
    "handle_storyboard_errors",
    "status_code_for",
]
