"""Environment variables and constants shared by the entry points."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

PYENV_ROOT = "PYENV_ROOT"
PYENV_VERSION = "PYENV_VERSION"
HOME = "HOME"
PATH = "PATH"

PYENV_PYTHON_PYENV = "PYENV_PYTHON_PYENV"
PYENV_PYTHON_CACHE = "PYENV_PYTHON_CACHE"
PYENV_PYTHON_CACHE_DIR = "PYENV_PYTHON_CACHE_DIR"
PYENV_PYTHON_LOG_LEVEL = "PYENV_PYTHON_LOG_LEVEL"

LOCAL_VERSION_FILE = ".python-version"
GLOBAL_VERSION_FILE = "version"
SYSTEM_VERSION = "system"

EXIT_FAILURE = 1

LOG_FORMAT = "%(name)s: %(levelname)s: %(message)s"


def get_env(env: Mapping[str, str] | None) -> Mapping[str, str]:
    return os.environ if env is None else env


def setup_logging(env: Mapping[str, str] | None = None) -> None:
    env = get_env(env)
    raw = env.get(PYENV_PYTHON_LOG_LEVEL, "").strip().upper()
    level = logging.getLevelName(raw) if raw else logging.WARNING
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT)


def cache_enabled(env: Mapping[str, str] | None = None) -> bool:
    env = get_env(env)
    if env.get(PYENV_PYTHON_CACHE_DIR):
        return True
    return env.get(PYENV_PYTHON_CACHE, "").strip().lower() in {"1", "true", "yes", "on"}


__all__ = [
    "EXIT_FAILURE",
    "GLOBAL_VERSION_FILE",
    "HOME",
    "LOCAL_VERSION_FILE",
    "PATH",
    "PYENV_PYTHON_CACHE",
    "PYENV_PYTHON_CACHE_DIR",
    "PYENV_PYTHON_LOG_LEVEL",
    "PYENV_PYTHON_PYENV",
    "PYENV_ROOT",
    "PYENV_VERSION",
    "SYSTEM_VERSION",
    "cache_enabled",
    "get_env",
    "setup_logging",
]
