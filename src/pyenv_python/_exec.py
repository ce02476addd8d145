"""Hand control to another program, replacing this process where the platform allows it."""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

from ._compat import CAN_EXEC
from ._config import EXIT_FAILURE
from ._errors import ProcessSpawnError

if TYPE_CHECKING:
    from collections.abc import Sequence

LOGGER = logging.getLogger(__name__)


def exit_code(returncode: int) -> int:
    """A negative return code means the child was killed by a signal."""
    return returncode if returncode >= 0 else EXIT_FAILURE


def invoke(path: Path | str, args: Sequence[str], argv0: str | None = None) -> NoReturn:
    """Run ``path`` with ``args`` and never come back.

    On posix the current process image is replaced, otherwise a child is spawned and waited on and this process exits
    with the child's code. Standard streams are inherited either way.

    :raises ProcessSpawnError: if the program could not be started

    """
    path = Path(path)
    argv = [str(path) if argv0 is None else argv0, *args]
    LOGGER.debug("invoke %s as %r", path, argv)
    sys.stdout.flush()
    sys.stderr.flush()
    if CAN_EXEC:
        try:
            os.execv(path, argv)
        except OSError as exc:
            raise ProcessSpawnError(path, exc) from exc
    try:
        process = subprocess.run([str(path), *args], check=False)  # noqa: S603
    except OSError as exc:
        raise ProcessSpawnError(path, exc) from exc
    sys.exit(exit_code(process.returncode))


__all__ = [
    "exit_code",
    "invoke",
]
