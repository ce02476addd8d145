"""pyenv subcommands answered locally instead of spawning ``pyenv``.

Every command only reads what the resolution layer already knows: the root, the active version and the interpreter.
"""

from __future__ import annotations

import logging
import os
import shutil
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar, TextIO

from pyenv_python._compat import PYTHON_EXE, is_executable
from pyenv_python._config import PATH, PYENV_VERSION, SYSTEM_VERSION, get_env
from pyenv_python._errors import CommandError
from pyenv_python._exec import invoke
from pyenv_python._python import find_system_python, resolve_python
from pyenv_python._version import (
    PyenvRoot,
    PyenvVersion,
    global_version,
    local_version,
    read_version_file,
    resolve_root,
    resolve_version,
    version_file,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Context:
    """Everything a command may look at, injectable for tests."""

    env: Mapping[str, str] = field(default_factory=lambda: get_env(None))
    cwd: Path = field(default_factory=lambda: Path(os.getcwd()))
    current: Path | None = None
    out: TextIO | None = None

    def echo(self, value: object) -> None:
        print(value, file=sys.stdout if self.out is None else self.out)

    def root(self) -> PyenvRoot:
        return resolve_root(self.env)

    def version(self) -> PyenvVersion:
        return resolve_version(self.root(), self.env, self.cwd)

    def bin_dir(self) -> Path:
        return resolve_python(self.current, self.env, self.cwd).executable.path.parent


class Command(ABC):
    name: ClassVar[str]

    @abstractmethod
    def run(self, ctx: Context) -> int:
        """Write the result to ``ctx`` and return the exit code.

        :raises PyenvPythonError: when the command can not produce its answer

        """
        raise NotImplementedError


@dataclass(frozen=True)
class Root(Command):
    name: ClassVar[str] = "root"

    def run(self, ctx: Context) -> int:
        ctx.echo(ctx.root())
        return 0


@dataclass(frozen=True)
class Prefix(Command):
    name: ClassVar[str] = "prefix"

    version: str | None = None
    virtualenv: bool = False

    def run(self, ctx: Context) -> int:
        root = ctx.root()
        name = self.version or resolve_version(root, ctx.env, ctx.cwd).name
        if name == SYSTEM_VERSION and not self.virtualenv:
            system = find_system_python(ctx.current, root.shims_dir / PYTHON_EXE, ctx.env)
            ctx.echo(system.path.parent.parent)
            return 0
        prefix = root.prefix(name)
        if not prefix.is_dir():
            msg = f"version `{name}' not installed"
            raise CommandError(msg)
        if self.virtualenv:
            prefix = _virtualenv_base_prefix(prefix, name)
        ctx.echo(prefix)
        return 0


def _virtualenv_base_prefix(prefix: Path, name: str) -> Path:
    try:
        lines = (prefix / "pyvenv.cfg").read_text(encoding="utf-8").splitlines()
    except OSError:
        msg = f"version `{name}' is not a virtualenv"
        raise CommandError(msg) from None
    for line in lines:
        key, _, value = line.partition("=")
        if key.strip() == "home" and value.strip():
            return Path(value.strip()).parent
    msg = f"version `{name}' has no home in pyvenv.cfg"
    raise CommandError(msg)


@dataclass(frozen=True)
class Shell(Command):
    name: ClassVar[str] = "shell"

    def run(self, ctx: Context) -> int:
        if PYENV_VERSION not in ctx.env:
            msg = "no shell-specific version configured"
            raise CommandError(msg)
        ctx.echo(ctx.env[PYENV_VERSION])
        return 0


@dataclass(frozen=True)
class Version(Command):
    name: ClassVar[str] = "version"

    def run(self, ctx: Context) -> int:
        ctx.echo(ctx.version())
        return 0


@dataclass(frozen=True)
class VersionFile(Command):
    name: ClassVar[str] = "version-file"

    dir: Path | None = None

    def run(self, ctx: Context) -> int:
        start = ctx.cwd if self.dir is None else ctx.cwd / self.dir
        ctx.echo(version_file(ctx.root().root, start))
        return 0


@dataclass(frozen=True)
class VersionFileRead(Command):
    name: ClassVar[str] = "version-file-read"

    path: Path

    def run(self, ctx: Context) -> int:
        version = read_version_file(ctx.cwd / self.path)
        if version is None:
            msg = f"no version in {self.path}"
            raise CommandError(msg)
        ctx.echo(version)
        return 0


@dataclass(frozen=True)
class VersionName(Command):
    name: ClassVar[str] = "version-name"

    def run(self, ctx: Context) -> int:
        ctx.echo(ctx.version().name)
        return 0


@dataclass(frozen=True)
class VersionOrigin(Command):
    name: ClassVar[str] = "version-origin"

    def run(self, ctx: Context) -> int:
        ctx.echo(ctx.version().describe_origin())
        return 0


@dataclass(frozen=True)
class Global(Command):
    name: ClassVar[str] = "global"

    def run(self, ctx: Context) -> int:
        version = global_version(ctx.root().root)
        ctx.echo(SYSTEM_VERSION if version is None else version.name)
        return 0


@dataclass(frozen=True)
class Local(Command):
    name: ClassVar[str] = "local"

    def run(self, ctx: Context) -> int:
        version = local_version(ctx.cwd)
        if version is None:
            msg = "no local version configured for this directory"
            raise CommandError(msg)
        ctx.echo(version.name)
        return 0


@dataclass(frozen=True)
class Exec(Command):
    name: ClassVar[str] = "exec"

    args: tuple[str, ...] = ()

    def run(self, ctx: Context) -> int:
        if not self.args:
            msg = "usage: pyenv exec <command> [arg1 arg2...]"
            raise CommandError(msg)
        command, *rest = self.args
        path = ctx.bin_dir() / command
        if not (path.is_file() and is_executable(path)):
            found = shutil.which(command, path=ctx.env.get(PATH))
            if found is None:
                msg = f"{command}: command not found"
                raise CommandError(msg)
            path = Path(found)
        invoke(path, rest)


@dataclass(frozen=True)
class Shims(Command):
    name: ClassVar[str] = "shims"

    short: bool = False

    def run(self, ctx: Context) -> int:
        shims_dir = ctx.root().shims_dir
        if not shims_dir.is_dir():
            LOGGER.debug("no shims directory at %s", shims_dir)
            return 0
        for shim in sorted(shims_dir.iterdir()):
            ctx.echo(shim.name if self.short else shim)
        return 0


@dataclass(frozen=True)
class Which(Command):
    name: ClassVar[str] = "which"

    command: str | None = None

    def run(self, ctx: Context) -> int:
        if not self.command:
            msg = "usage: pyenv which <command>"
            raise CommandError(msg)
        path = ctx.bin_dir() / self.command
        if not (path.is_file() and is_executable(path)):
            msg = f"{self.command}: command not found"
            raise CommandError(msg)
        ctx.echo(path)
        return 0


__all__ = [
    "Command",
    "Context",
    "Exec",
    "Global",
    "Local",
    "Prefix",
    "Root",
    "Shell",
    "Shims",
    "Version",
    "VersionFile",
    "VersionFileRead",
    "VersionName",
    "VersionOrigin",
    "Which",
]
