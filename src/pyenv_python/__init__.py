"""Find the python pyenv would pick and run it, without going through pyenv's shell shims."""

from __future__ import annotations

from ._argv0 import Argv0Program, Argv0ProgramType
from ._compat import FileId
from ._errors import PyenvPythonError, PythonNotFoundError
from ._exec import invoke
from ._python import (
    Pyenv,
    PyenvPython,
    Python,
    PythonExecutable,
    SystemPython,
    UncheckedPythonPath,
    find_system_python,
    locate,
    resolve_python,
)
from ._version import Origin, PyenvRoot, PyenvVersion, resolve_root, resolve_version

__version__ = "0.1.0"

__all__ = [
    "Argv0Program",
    "Argv0ProgramType",
    "FileId",
    "Origin",
    "Pyenv",
    "PyenvPython",
    "PyenvPythonError",
    "PyenvRoot",
    "PyenvVersion",
    "Python",
    "PythonExecutable",
    "PythonNotFoundError",
    "SystemPython",
    "UncheckedPythonPath",
    "find_system_python",
    "invoke",
    "locate",
    "resolve_python",
    "resolve_root",
    "resolve_version",
]
