from __future__ import annotations

import io
from pathlib import Path

import pytest

from pyenv_python.pyenv import UNKNOWN_COMMAND_BEHAVIOR, CacheBehavior, CacheType, CapturedOutput, CommandCache
from pyenv_python.pyenv._action import Delegate, Intercept, classify
from pyenv_python.pyenv._command import (
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

HELP = Delegate(CacheBehavior.cache(CacheType.HELP))
VERSIONS = Delegate(CacheBehavior.cache(CacheType.VERSIONS))
IGNORE = Delegate(CacheBehavior.ignore())


@pytest.mark.parametrize(
    ("argv", "expected"),
    [
        (["pyenv"], HELP),
        ([], HELP),
        (["pyenv", "--help"], HELP),
        (["pyenv", "install", "--help"], HELP),
        (["pyenv", "which", "-h"], HELP),
        (["pyenv", "version-file-read"], HELP),
    ],
)
def test_help(argv, expected):
    assert classify(argv) == expected


@pytest.mark.parametrize(
    ("argv", "command"),
    [
        (["pyenv", "root"], Root()),
        (["pyenv", "prefix"], Prefix(None, virtualenv=False)),
        (["pyenv", "prefix", "3.9.1"], Prefix("3.9.1", virtualenv=False)),
        (["pyenv", "virtualenv-prefix", "venv"], Prefix("venv", virtualenv=True)),
        (["pyenv", "version"], Version()),
        (["pyenv", "version-file"], VersionFile(None)),
        (["pyenv", "version-file", "sub"], VersionFile(Path("sub"))),
        (["pyenv", "version-file-read", ".python-version"], VersionFileRead(Path(".python-version"))),
        (["pyenv", "version-name"], VersionName()),
        (["pyenv", "version-origin"], VersionOrigin()),
        (["pyenv", "exec", "pip", "list"], Exec(("pip", "list"))),
        (["pyenv", "shims"], Shims(short=False)),
        (["pyenv", "shims", "--short"], Shims(short=True)),
        (["pyenv", "which", "pip"], Which("pip")),
        (["pyenv", "which"], Which(None)),
        (["pyenv", "shell"], Shell()),
        (["pyenv", "global"], Global()),
        (["pyenv", "local"], Local()),
    ],
)
def test_intercepted(argv, command):
    assert classify(argv) == Intercept(command)


@pytest.mark.parametrize(
    ("argv", "behavior"),
    [
        (["pyenv", "shell", "3.9.1"], CacheBehavior.ignore()),
        (["pyenv", "global", "3.9.1"], CacheBehavior.ignore()),
        (["pyenv", "local", "3.9.1"], CacheBehavior.ignore()),
        (["pyenv", "rehash"], CacheBehavior.ignore()),
        (["pyenv", "completions", "install"], CacheBehavior.ignore()),
        (["pyenv", "version-file-write", "f", "3.9.1"], CacheBehavior.ignore()),
        (["pyenv", "--version"], CacheBehavior.cache(CacheType.HELP)),
        (["pyenv", "commands"], CacheBehavior.cache(CacheType.HELP)),
        (["pyenv", "help", "install"], CacheBehavior.cache(CacheType.HELP)),
        (["pyenv", "hooks", "exec"], CacheBehavior.cache(CacheType.HELP)),
        (["pyenv", "init", "-"], CacheBehavior.cache(CacheType.HELP)),
        (["pyenv", "virtualenv-init", "-"], CacheBehavior.cache(CacheType.HELP)),
        (["pyenv", "versions"], CacheBehavior.cache(CacheType.VERSIONS)),
        (["pyenv", "virtualenvs"], CacheBehavior.cache(CacheType.VERSIONS)),
        (["pyenv", "whence", "pip"], CacheBehavior.cache(CacheType.VERSIONS)),
        (["pyenv", "virtualenv", "--version"], CacheBehavior.cache(CacheType.VERSIONS)),
        (["pyenv", "virtualenv", "3.9.1", "venv"], UNKNOWN_COMMAND_BEHAVIOR),
        (["pyenv", "activate", "venv"], CacheBehavior.invalidate(CacheType.VERSIONS)),
        (["pyenv", "deactivate"], CacheBehavior.invalidate(CacheType.VERSIONS)),
        (["pyenv", "install", "3.9.1"], CacheBehavior.invalidate(CacheType.VERSIONS)),
        (["pyenv", "uninstall", "3.9.1"], CacheBehavior.invalidate(CacheType.VERSIONS)),
        (["pyenv", "update"], CacheBehavior.invalidate(CacheType.HELP)),
        (["pyenv", "made-up"], UNKNOWN_COMMAND_BEHAVIOR),
    ],
)
def test_delegated(argv, behavior):
    assert classify(argv) == Delegate(behavior)


def test_unknown_commands_are_not_cached():
    assert UNKNOWN_COMMAND_BEHAVIOR == CacheBehavior.ignore()


def test_delegate_forwards_output_verbatim():
    stdout, stderr = io.BytesIO(), io.BytesIO()
    output = CapturedOutput(4, b"out\x00\xff", b"err\n")

    status = VERSIONS.run(["versions"], CommandCache(), lambda _args: output, stdout, stderr)

    assert status == 4
    assert stdout.getvalue() == b"out\x00\xff"
    assert stderr.getvalue() == b"err\n"
