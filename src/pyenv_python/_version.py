"""Locate the pyenv root and decide the active version.

The version is chosen the way pyenv documents it: the ``PYENV_VERSION`` variable, then the nearest ``.python-version``
file walking up from the working directory, then the global ``<root>/version`` file.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from ._config import GLOBAL_VERSION_FILE, HOME, LOCAL_VERSION_FILE, PYENV_ROOT, PYENV_VERSION, get_env
from ._errors import RootNotADirectoryError, RootNotFoundError, VersionNotFoundError

if TYPE_CHECKING:
    from collections.abc import Generator, Mapping

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class PyenvRoot:
    root: Path

    def __post_init__(self) -> None:
        if not self.root.exists():
            raise RootNotFoundError(self.root)
        if not self.root.is_dir():
            raise RootNotADirectoryError(self.root)

    @property
    def versions_dir(self) -> Path:
        return self.root / "versions"

    @property
    def shims_dir(self) -> Path:
        return self.root / "shims"

    @property
    def global_version_file(self) -> Path:
        return global_version_file(self.root)

    def prefix(self, name: str) -> Path:
        return self.versions_dir / name

    def __str__(self) -> str:
        return str(self.root)


class Origin(Enum):
    SHELL = "shell"
    LOCAL = "local"
    GLOBAL = "global"


@dataclass(frozen=True)
class PyenvVersion:
    name: str
    origin: Origin
    file: Path | None = field(default=None)

    def describe_origin(self) -> str:
        if self.origin is Origin.SHELL or self.file is None:
            return f"{PYENV_VERSION} environment variable"
        return str(self.file)

    def __str__(self) -> str:
        return f"{self.name} (set by {self.describe_origin()})"


def resolve_root(env: Mapping[str, str] | None = None) -> PyenvRoot:
    """Return what ``pyenv root`` would: ``$PYENV_ROOT`` or ``$HOME/.pyenv``.

    :raises RootNotFoundError: if neither is set or the directory is missing
    :raises RootNotADirectoryError: if the path exists but is not a directory

    """
    env = get_env(env)
    if raw := env.get(PYENV_ROOT):
        root = Path(raw).expanduser()
    elif home := env.get(HOME):
        root = Path(home).expanduser() / ".pyenv"
    else:
        raise RootNotFoundError(None)
    LOGGER.debug("pyenv root candidate %s", root)
    return PyenvRoot(root)


def read_version_file(path: Path) -> str | None:
    """Read the version named by the first line of a marker file, ``None`` if unreadable or blank."""
    try:
        with path.open(encoding="utf-8", errors="replace") as file_handler:
            first_line = file_handler.readline()
    except OSError:
        LOGGER.debug("could not read version file %s", path, exc_info=True)
        return None
    return first_line.strip() or None


def global_version_file(root: Path) -> Path:
    return root / GLOBAL_VERSION_FILE


def _ancestors(start: Path) -> Generator[Path, None, None]:
    start = start.absolute()
    yield start
    yield from start.parents


def find_local_version_file(start: Path) -> Path | None:
    """Find the nearest ``.python-version`` holding a version, walking up to the filesystem root."""
    version = local_version(start)
    return None if version is None else version.file


def version_file(root: Path, start: Path) -> Path:
    """The marker file deciding the version for ``start``: the local one if present, otherwise the global one."""
    return find_local_version_file(start) or global_version_file(root)


def shell_version(env: Mapping[str, str] | None = None) -> PyenvVersion | None:
    env = get_env(env)
    if PYENV_VERSION not in env:
        return None
    return PyenvVersion(env[PYENV_VERSION], Origin.SHELL)


def local_version(cwd: Path) -> PyenvVersion | None:
    for directory in _ancestors(cwd):
        candidate = directory / LOCAL_VERSION_FILE
        if (name := read_version_file(candidate)) is not None:
            return PyenvVersion(name, Origin.LOCAL, candidate)
    return None


def global_version(root: Path) -> PyenvVersion | None:
    candidate = global_version_file(root)
    if (name := read_version_file(candidate)) is not None:
        return PyenvVersion(name, Origin.GLOBAL, candidate)
    return None


def resolve_version(
    root: PyenvRoot,
    env: Mapping[str, str] | None = None,
    cwd: Path | None = None,
) -> PyenvVersion:
    """Decide the active version, first match wins.

    :raises VersionNotFoundError: if no source names a version

    """
    cwd = Path(os.getcwd()) if cwd is None else cwd
    if (version := shell_version(env)) is not None:
        LOGGER.debug("version %r from %s", version.name, PYENV_VERSION)
        return version
    if (version := local_version(cwd)) is not None:
        LOGGER.debug("version %r from local file %s", version.name, version.file)
        return version
    if (version := global_version(root.root)) is not None:
        LOGGER.debug("version %r from global file %s", version.name, version.file)
        return version
    raise VersionNotFoundError(root.root, cwd)


__all__ = [
    "Origin",
    "PyenvRoot",
    "PyenvVersion",
    "find_local_version_file",
    "global_version",
    "global_version_file",
    "local_version",
    "read_version_file",
    "resolve_root",
    "resolve_version",
    "shell_version",
    "version_file",
]
