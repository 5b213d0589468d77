"""Adapters - I/O implementations of ports."""

from .yaml_log import YamlActionLog, ActionLogError

__all__ = [
    "YamlActionLog",
    "ActionLogError",
]
