"""Decide how to run the program named by argv0 from the interpreter's directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from ._compat import is_executable
from ._errors import Argv0DetectionError

if TYPE_CHECKING:
    from collections.abc import Sequence

LOGGER = logging.getLogger(__name__)

SHEBANG = b"#!"
PYTHON_SCRIPT_MARKERS = ("python", "pip")


class Argv0ProgramType(Enum):
    BINARY = "binary"
    PYTHON_SCRIPT = "python-script"
    SCRIPT = "script"

    @classmethod
    def detect(cls, path: Path) -> Argv0ProgramType:
        """Detect the type of the program at ``path``.

        Anything without a shebang is treated as a binary and run directly, this includes the plain ``python`` case.
        A script whose shebang line mentions python (or pip) is handed to the interpreter, any other script is run
        directly and left to the OS.

        :raises Argv0DetectionError: if the path does not exist, is not a file or is not executable

        """
        if not path.exists():
            raise Argv0DetectionError(path, "does not exist")
        if not path.is_file():
            raise Argv0DetectionError(path, "not a file")
        if not is_executable(path):
            raise Argv0DetectionError(path, "not executable")
        try:
            with path.open("rb") as file_handler:
                if file_handler.read(2) != SHEBANG:
                    return cls.BINARY
                # only decode once we know it is a script, a binary need not be valid text
                first_line = file_handler.readline().decode("utf-8", errors="replace")
        except OSError as exc:
            raise Argv0DetectionError(path, str(exc)) from exc
        if any(marker in first_line for marker in PYTHON_SCRIPT_MARKERS):
            return cls.PYTHON_SCRIPT
        return cls.SCRIPT


@dataclass(frozen=True)
class Argv0Program:
    python_path: Path
    path: Path
    exe_type: Argv0ProgramType

    @classmethod
    def from_python(cls, python_path: Path, argv0: str | None = None) -> Argv0Program:
        """Pick the program sitting next to ``python_path`` with the same name as ``argv0``.

        Linking this tool as ``pip`` therefore runs the active version's ``pip``. Falls back to the interpreter when no
        such sibling exists.

        """
        path = python_path
        if argv0:
            sibling = python_path.parent / Path(argv0).name
            if sibling.exists():
                path = sibling
            else:
                LOGGER.debug("no %s next to %s, running the interpreter", Path(argv0).name, python_path)
        exe_type = Argv0ProgramType.detect(path)
        LOGGER.debug("argv0 program %s detected as %s", path, exe_type.value)
        return cls(python_path, path, exe_type)

    @property
    def argv0(self) -> Path:
        """The path to execute."""
        if self.exe_type is Argv0ProgramType.PYTHON_SCRIPT:
            return self.python_path
        return self.path

    @property
    def python_script(self) -> Path | None:
        return self.path if self.exe_type is Argv0ProgramType.PYTHON_SCRIPT else None

    def command(self, args: Sequence[str]) -> list[str]:
        """Full argument vector, starting with :attr:`argv0`, followed by the caller's trailing ``args``."""
        cmd = [str(self.argv0)]
        if (script := self.python_script) is not None:
            cmd.append(str(script))
        cmd.extend(args)
        return cmd


__all__ = [
    "Argv0Program",
    "Argv0ProgramType",
]
