from __future__ import annotations

import os
import stat
from pathlib import Path

import pytest

from pyenv_python._compat import PYTHON_EXE

ELF_MAGIC = b"\x7fELF\x02\x01\x01\x00"
VERSION = "3.9.1"


def write_exe(path: Path, content: bytes = ELF_MAGIC, *, executable: bool = True) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    mode = path.stat().st_mode
    if executable:
        mode |= stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH
    else:
        mode &= ~(stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    os.chmod(path, mode)
    return path


@pytest.fixture
def make_exe():
    return write_exe


@pytest.fixture
def pyenv_root(tmp_path: Path) -> Path:
    root = tmp_path / "pyenv"
    write_exe(root / "versions" / VERSION / "bin" / PYTHON_EXE)
    (root / "shims").mkdir()
    return root


@pytest.fixture
def work_dir(tmp_path: Path) -> Path:
    path = tmp_path / "work" / "project"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def env(pyenv_root: Path) -> dict[str, str]:
    return {"PYENV_ROOT": str(pyenv_root), "PYENV_VERSION": VERSION, "PATH": ""}
