"""Error hierarchy for interpreter resolution, invocation and pyenv delegation."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class PyenvPythonError(RuntimeError):
    """Base class, every failure here is terminal for the current invocation."""


class ResolutionError(PyenvPythonError):
    """Pyenv could not produce an interpreter."""


class RootNotFoundError(ResolutionError):
    def __init__(self, path: Path | None) -> None:
        self.path = path
        if path is None:
            msg = "pyenv root not found, neither PYENV_ROOT nor HOME is set"
        else:
            msg = f"pyenv root {path} does not exist"
        super().__init__(msg)


class RootNotADirectoryError(ResolutionError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"pyenv root {path} is not a directory")


class VersionNotFoundError(ResolutionError):
    def __init__(self, root: Path, cwd: Path) -> None:
        self.path = root
        self.cwd = cwd
        super().__init__(f"no pyenv version set for {cwd} (root {root})")


class ExecutableMissingError(ResolutionError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"python executable {path} does not exist")


class NotExecutableError(ResolutionError):
    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"python executable {path} is {reason}")


class SystemPythonNotFoundError(PyenvPythonError):
    def __init__(self, excluded: list[Path]) -> None:
        self.paths = excluded
        excluding = ", ".join(str(p) for p in excluded)
        super().__init__(f"no system python found on PATH (excluding {excluding})")


class PythonNotFoundError(PyenvPythonError):
    """Both pyenv resolution and the system search failed."""

    def __init__(self, pyenv_error: ResolutionError, system_error: SystemPythonNotFoundError) -> None:
        self.pyenv_error = pyenv_error
        self.system_error = system_error
        super().__init__(f"python not found: {pyenv_error}; {system_error}")


class Argv0DetectionError(PyenvPythonError):
    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"error running argv0 program {path}: {message}")


class ProcessSpawnError(PyenvPythonError):
    def __init__(self, path: Path, cause: OSError) -> None:
        self.path = path
        super().__init__(f"failed to run {path}: {cause}")


class PyenvNotFoundError(PyenvPythonError):
    def __init__(self) -> None:
        super().__init__("pyenv not found, set PYENV_PYTHON_PYENV or put pyenv on PATH")


class CacheStoreError(PyenvPythonError):
    def __init__(self, path: Path, cause: OSError) -> None:
        self.path = path
        super().__init__(f"cannot use pyenv output cache at {path}: {cause}")


class CommandError(PyenvPythonError):
    """User facing failure of a locally implemented pyenv subcommand."""


__all__ = [
    "Argv0DetectionError",
    "CacheStoreError",
    "CommandError",
    "ExecutableMissingError",
    "NotExecutableError",
    "ProcessSpawnError",
    "PyenvNotFoundError",
    "PyenvPythonError",
    "PythonNotFoundError",
    "ResolutionError",
    "RootNotADirectoryError",
    "RootNotFoundError",
    "SystemPythonNotFoundError",
    "VersionNotFoundError",
]
