"""Map a pyenv command line to either a local command or a cached delegation to the real ``pyenv``."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO, Union

from ._cache import CacheBehavior, CacheType, CommandCache, Runner
from ._command import (
    Command,
    Context,
    Exec,
    Global,
    Local,
    Prefix,
    Root,
    Shell,
    Shims,
    Version,
    VersionFile,
    VersionFileRead,
    VersionName,
    VersionOrigin,
    Which,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

LOGGER = logging.getLogger(__name__)

HELP_FLAGS = frozenset({"--help", "-h"})

HELP = CacheBehavior.cache(CacheType.HELP)

DELEGATE_BEHAVIORS: dict[str, CacheBehavior] = {
    **dict.fromkeys(
        ("shell", "global", "local", "rehash", "completions", "version-file-read", "version-file-write"),
        CacheBehavior.ignore(),
    ),
    **dict.fromkeys(("--version", "commands", "help", "hooks", "init", "virtualenv-init"), HELP),
    **dict.fromkeys(("versions", "virtualenvs", "whence"), CacheBehavior.cache(CacheType.VERSIONS)),
    **dict.fromkeys(("activate", "deactivate", "install", "uninstall"), CacheBehavior.invalidate(CacheType.VERSIONS)),
    "update": CacheBehavior.invalidate(CacheType.HELP),
}

# without an argument these query the version, with one they set it and go to pyenv
QUERY_COMMANDS: dict[str, type[Command]] = {"shell": Shell, "global": Global, "local": Local}

# Unknown subcommands could just as well change the installed versions, which would call for
# Invalidate(VERSIONS) here instead; kept as Ignore until that is decided.
UNKNOWN_COMMAND_BEHAVIOR = CacheBehavior.ignore()


@dataclass(frozen=True)
class Intercept:
    """Answer the command locally."""

    command: Command

    def run(self, ctx: Context) -> int:
        return self.command.run(ctx)


@dataclass(frozen=True)
class Delegate:
    """Hand the command to ``pyenv``, caching according to :attr:`behavior`."""

    behavior: CacheBehavior

    def run(
        self,
        args: Sequence[str],
        cache: CommandCache,
        runner: Runner,
        stdout: BinaryIO | None = None,
        stderr: BinaryIO | None = None,
    ) -> int:
        output = cache.run(self.behavior, args, runner)
        stderr = sys.stderr.buffer if stderr is None else stderr
        stdout = sys.stdout.buffer if stdout is None else stdout
        stderr.write(output.stderr)
        stderr.flush()
        stdout.write(output.stdout)
        stdout.flush()
        return output.status


Action = Union[Intercept, Delegate]


class _MissingArgumentError(Exception):
    pass


def _to_command(name: str, args: Sequence[str]) -> Command | None:
    arg1 = args[0] if args else None
    if name == "root":
        return Root()
    if name == "prefix":
        return Prefix(arg1, virtualenv=False)
    if name == "virtualenv-prefix":
        return Prefix(arg1, virtualenv=True)
    if name == "version":
        return Version()
    if name == "version-file":
        return VersionFile(None if arg1 is None else Path(arg1))
    if name == "version-file-read":
        if arg1 is None:
            raise _MissingArgumentError
        return VersionFileRead(Path(arg1))
    if name == "version-name":
        return VersionName()
    if name == "version-origin":
        return VersionOrigin()
    if name == "exec":
        return Exec(tuple(args))
    if name == "shims":
        return Shims(short=arg1 == "--short")
    if name == "which":
        return Which(arg1)
    if arg1 is None and name in QUERY_COMMANDS:
        return QUERY_COMMANDS[name]()
    return None


def _delegate_behavior(name: str, args: Sequence[str]) -> CacheBehavior:
    if name == "virtualenv" and args and args[0] == "--version":
        return CacheBehavior.cache(CacheType.VERSIONS)
    return DELEGATE_BEHAVIORS.get(name, UNKNOWN_COMMAND_BEHAVIOR)


def classify(argv: Sequence[str]) -> Action:
    """Classify a full pyenv command line, ``argv[0]`` being the program name."""
    if len(argv) < 2:
        return Delegate(HELP)
    name, args = argv[1], argv[2:]
    if name in HELP_FLAGS or (args and args[0] in HELP_FLAGS):
        return Delegate(HELP)
    try:
        command = _to_command(name, args)
    except _MissingArgumentError:
        return Delegate(HELP)
    if command is not None:
        action: Action = Intercept(command)
    else:
        action = Delegate(_delegate_behavior(name, args))
    LOGGER.debug("classified %r as %s", list(argv[1:]), action)
    return action


__all__ = [
    "DELEGATE_BEHAVIORS",
    "UNKNOWN_COMMAND_BEHAVIOR",
    "Action",
    "Delegate",
    "Intercept",
    "classify",
]
