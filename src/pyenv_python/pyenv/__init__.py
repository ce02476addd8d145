"""pyenv compatible front end: answer what we can locally, delegate and cache the rest."""

from __future__ import annotations

from ._action import UNKNOWN_COMMAND_BEHAVIOR, Action, Delegate, Intercept, classify
from ._cache import CacheBehavior, CacheType, CapturedOutput, CommandCache, default_store
from ._command import Command, Context
from ._delegate import PyenvRunner, find_pyenv

__all__ = [
    "UNKNOWN_COMMAND_BEHAVIOR",
    "Action",
    "CacheBehavior",
    "CacheType",
    "CapturedOutput",
    "Command",
    "CommandCache",
    "Context",
    "Delegate",
    "Intercept",
    "PyenvRunner",
    "classify",
    "default_store",
    "find_pyenv",
]
