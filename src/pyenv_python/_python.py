"""Turn a pyenv root and version into an interpreter, falling back to a ``python`` on ``PATH``."""

from __future__ import annotations

import logging
import os
import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Union

from ._compat import PYTHON_EXE, FileId, is_executable
from ._config import PATH, get_env
from ._errors import (
    ExecutableMissingError,
    NotExecutableError,
    PythonNotFoundError,
    ResolutionError,
    SystemPythonNotFoundError,
)
from ._version import PyenvRoot, PyenvVersion, resolve_root, resolve_version

if TYPE_CHECKING:
    from collections.abc import Generator, Mapping

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class PythonExecutable:
    """A validated interpreter path, compared by the identity of the file it points to."""

    path: Path
    file_id: FileId

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PythonExecutable):
            return NotImplemented
        return self.file_id == other.file_id

    def __hash__(self) -> int:
        return hash(self.file_id)

    def __str__(self) -> str:
        return str(self.path)


@dataclass(frozen=True)
class UncheckedPythonPath:
    path: Path

    def check(self) -> PythonExecutable:
        """:raises ExecutableMissingError | NotExecutableError: if the path is not a runnable file"""
        try:
            file_id = FileId.of(self.path)
        except FileNotFoundError:
            raise ExecutableMissingError(self.path) from None
        except OSError as exc:
            raise NotExecutableError(self.path, f"not accessible ({exc.strerror})") from exc
        if not self.path.is_file():
            raise NotExecutableError(self.path, "not a file")
        if not is_executable(self.path):
            raise NotExecutableError(self.path, "not executable")
        return PythonExecutable(self.path, file_id)


def locate(root: PyenvRoot, version: PyenvVersion) -> PythonExecutable:
    """Build ``<root>/versions/<version>/bin/python`` and check it can be run."""
    candidate = UncheckedPythonPath(root.prefix(version.name) / "bin" / PYTHON_EXE)
    LOGGER.debug("locate python for version %r at %s", version.name, candidate.path)
    return candidate.check()


@dataclass(frozen=True)
class Pyenv:
    root: PyenvRoot
    version: PyenvVersion
    python: PythonExecutable

    @classmethod
    def from_root(
        cls,
        root: PyenvRoot,
        env: Mapping[str, str] | None = None,
        cwd: Path | None = None,
    ) -> Pyenv:
        version = resolve_version(root, env, cwd)
        return cls(root, version, locate(root, version))

    @classmethod
    def discover(cls, env: Mapping[str, str] | None = None, cwd: Path | None = None) -> Pyenv:
        """:raises ResolutionError: from the first stage that fails"""
        return cls.from_root(resolve_root(env), env, cwd)


@dataclass(frozen=True)
class PyenvPython:
    pyenv: Pyenv

    @property
    def executable(self) -> PythonExecutable:
        return self.pyenv.python

    def describe(self) -> str:
        version = self.pyenv.version
        return f"pyenv python {version.name} at {self.executable} (set by {version.describe_origin()})"


@dataclass(frozen=True)
class SystemPython:
    executable: PythonExecutable
    pyenv_error: ResolutionError | None = field(default=None, compare=False)

    def describe(self) -> str:
        reason = "" if self.pyenv_error is None else f" (pyenv failed: {self.pyenv_error})"
        return f"system python at {self.executable}{reason}"


Python = Union[PyenvPython, SystemPython]


def get_paths(env: Mapping[str, str]) -> Generator[Path, None, None]:
    path = env.get(PATH, None)
    if path is None:
        try:
            path = os.confstr("CS_PATH")
        except (AttributeError, ValueError):
            path = os.defpath
    for entry in path.split(os.pathsep):
        if entry:
            yield Path(entry)


def current_executable(argv0: str | None = None, env: Mapping[str, str] | None = None) -> Path | None:
    """Path of the program running now, as the user invoked it."""
    argv0 = sys.argv[0] if argv0 is None else argv0
    if not argv0:
        return None
    if os.sep in argv0 or (os.altsep and os.altsep in argv0):
        return Path(argv0).absolute()
    found = shutil.which(argv0, path=get_env(env).get(PATH))
    return None if found is None else Path(found)


def find_system_python(
    current: Path | None,
    shim: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> PythonExecutable:
    """Return the first ``python`` on ``PATH`` that is neither this program nor the pyenv shim.

    :raises SystemPythonNotFoundError: if every candidate is excluded or missing

    """
    env = get_env(env)
    excluded_paths = [p for p in (current, shim) if p is not None]
    excluded = {file_id for p in excluded_paths if (file_id := FileId.maybe(p)) is not None}
    for pos, directory in enumerate(get_paths(env)):
        candidate = directory / PYTHON_EXE
        file_id = FileId.maybe(candidate)
        if file_id is None:
            continue
        if file_id in excluded:
            LOGGER.debug("skip PATH[%d]=%s, same file as an excluded executable", pos, candidate)
            continue
        if not candidate.is_file() or not is_executable(candidate):
            LOGGER.debug("skip PATH[%d]=%s, not an executable file", pos, candidate)
            continue
        LOGGER.debug("accepted system python PATH[%d]=%s", pos, candidate)
        return PythonExecutable(candidate, file_id)
    raise SystemPythonNotFoundError(excluded_paths)


def resolve_python(
    current: Path | None = None,
    env: Mapping[str, str] | None = None,
    cwd: Path | None = None,
) -> Python:
    """Resolve through pyenv, otherwise through ``PATH``.

    :raises PythonNotFoundError: carrying both causes when neither produces an interpreter

    """
    shim = None
    try:
        root = resolve_root(env)
        shim = root.shims_dir / PYTHON_EXE
        return PyenvPython(Pyenv.from_root(root, env, cwd))
    except ResolutionError as exc:
        pyenv_error = exc
    LOGGER.info("pyenv resolution failed, searching PATH: %s", pyenv_error)
    try:
        system = find_system_python(current, shim, env)
    except SystemPythonNotFoundError as exc:
        raise PythonNotFoundError(pyenv_error, exc) from exc
    return SystemPython(system, pyenv_error)


__all__ = [
    "Pyenv",
    "PyenvPython",
    "Python",
    "PythonExecutable",
    "SystemPython",
    "UncheckedPythonPath",
    "current_executable",
    "find_system_python",
    "get_paths",
    "locate",
    "resolve_python",
]
