"""Ports - interfaces/protocols for external dependencies."""

from .action_log import ActionLog

__all__ = [
    "ActionLog",
]
