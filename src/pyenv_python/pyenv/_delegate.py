"""Find the real ``pyenv`` and run it with captured output."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

from pyenv_python._compat import FileId, is_executable
from pyenv_python._config import PYENV_PYTHON_PYENV, get_env
from pyenv_python._errors import ProcessSpawnError, PyenvNotFoundError
from pyenv_python._python import get_paths

from ._cache import CapturedOutput

if TYPE_CHECKING:
    from collections.abc import Generator, Mapping, Sequence

LOGGER = logging.getLogger(__name__)

PYENV_EXE = "pyenv"


def _candidates(root: Path | None, env: Mapping[str, str]) -> Generator[Path, None, None]:
    if raw := env.get(PYENV_PYTHON_PYENV):
        yield Path(raw).expanduser()
    if root is not None:
        yield root / "libexec" / PYENV_EXE
        yield root / "bin" / PYENV_EXE
    for directory in get_paths(env):
        yield directory / PYENV_EXE


def find_pyenv(
    root: Path | None = None,
    current: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> Path:
    """Locate the real ``pyenv``, skipping this program if it was installed under that name.

    :raises PyenvNotFoundError: if no candidate is an executable file

    """
    env = get_env(env)
    current_id = None if current is None else FileId.maybe(current)
    for candidate in _candidates(root, env):
        file_id = FileId.maybe(candidate)
        if file_id is None or file_id == current_id:
            continue
        if candidate.is_file() and is_executable(candidate):
            LOGGER.debug("delegate to pyenv at %s", candidate)
            return candidate
    raise PyenvNotFoundError


class PyenvRunner:
    """Run ``pyenv`` with the given arguments and capture everything it prints."""

    def __init__(self, pyenv: Path, env: Mapping[str, str] | None = None) -> None:
        self.pyenv = pyenv
        self._env = env

    def __call__(self, args: Sequence[str]) -> CapturedOutput:
        cmd = [str(self.pyenv), *args]
        LOGGER.debug("run %r", cmd)
        try:
            process = subprocess.run(cmd, capture_output=True, check=False, env=self._env)  # noqa: S603
        except OSError as exc:
            raise ProcessSpawnError(self.pyenv, exc) from exc
        return CapturedOutput(process.returncode, process.stdout, process.stderr)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(pyenv={self.pyenv})"


__all__ = [
    "PyenvRunner",
    "find_pyenv",
]
