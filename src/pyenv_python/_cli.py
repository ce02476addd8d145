"""Console entry points.

``pyenv-python`` behaves like ``python`` itself (link it as ``python``, ``pip``, ...) with four extra first arguments
that never clash with python's own options: ``--path``, ``--dir``, ``--prefix`` and ``--which``.
``pyenv-python-pyenv`` behaves like ``pyenv``.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from ._argv0 import Argv0Program
from ._config import EXIT_FAILURE, get_env, setup_logging
from ._errors import PyenvPythonError, ResolutionError
from ._exec import invoke
from ._python import current_executable, resolve_python
from ._version import resolve_root
from .pyenv import CommandCache, Context, Intercept, PyenvRunner, classify, default_store, find_pyenv

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

LOGGER = logging.getLogger(__name__)

PARENT_LEVELS = {"--path": 0, "--dir": 1, "--prefix": 2}
WHICH = "--which"


def parent_dir(path: Path, level: int) -> Path:
    """Walk ``level`` directories up from ``path``.

    :raises PyenvPythonError: if ``path`` does not have that many parents

    """
    directory = path
    for _ in range(level):
        parent = directory.parent
        if parent == directory:
            msg = f"python --path doesn't have {level} parent directories"
            raise PyenvPythonError(msg)
        directory = parent
    return directory


def _fail(prog: str, exc: PyenvPythonError) -> int:
    LOGGER.debug("%s failed", prog, exc_info=True)
    print(f"{prog}: {exc}", file=sys.stderr)
    return EXIT_FAILURE


def _run_python(argv: Sequence[str], env: Mapping[str, str]) -> int:
    current = current_executable(argv[0], env) if argv else None
    python = resolve_python(current, env)
    flag = argv[1] if len(argv) > 1 else None
    if flag == WHICH:
        print(python.describe())
        return 0
    if flag in PARENT_LEVELS:
        print(parent_dir(python.executable.path, PARENT_LEVELS[flag]))
        return 0
    program = Argv0Program.from_python(python.executable.path, argv[0] if argv else None)
    argv0, *args = program.command(argv[1:])
    invoke(argv0, args)


def python_main(argv: Sequence[str] | None = None, env: Mapping[str, str] | None = None) -> int:
    """Run the resolved python with ``argv[1:]``, this only returns on failure or for the informational flags."""
    argv = sys.argv if argv is None else argv
    env = get_env(env)
    setup_logging(env)
    try:
        return _run_python(argv, env)
    except PyenvPythonError as exc:
        return _fail("pyenv-python", exc)


def python_path_main(argv: Sequence[str] | None = None, env: Mapping[str, str] | None = None) -> int:
    """Print the path of the resolved python."""
    argv = sys.argv if argv is None else argv
    env = get_env(env)
    setup_logging(env)
    try:
        current = current_executable(argv[0], env) if argv else None
        print(resolve_python(current, env).executable.path)
    except PyenvPythonError as exc:
        return _fail("pyenv-python-path", exc)
    return 0


def _run_pyenv(argv: Sequence[str], env: Mapping[str, str]) -> int:
    current = current_executable(argv[0], env) if argv else None
    action = classify(argv)
    if isinstance(action, Intercept):
        return action.run(Context(env=env, current=current))
    try:
        root = resolve_root(env).root
    except ResolutionError as exc:
        LOGGER.debug("no pyenv root for locating pyenv: %s", exc)
        root = None
    runner = PyenvRunner(find_pyenv(root, current, env), env)
    cache = CommandCache(default_store(f"{root or '<none>'}:{runner.pyenv}", env))
    with cache.session():
        return action.run(argv[1:], cache, runner)


def pyenv_main(argv: Sequence[str] | None = None, env: Mapping[str, str] | None = None) -> int:
    """Behave like ``pyenv``, exiting with the status of whatever answered the command."""
    argv = sys.argv if argv is None else argv
    env = get_env(env)
    setup_logging(env)
    try:
        return _run_pyenv(argv, env)
    except PyenvPythonError as exc:
        return _fail("pyenv", exc)


__all__ = [
    "parent_dir",
    "pyenv_main",
    "python_main",
    "python_path_main",
]
