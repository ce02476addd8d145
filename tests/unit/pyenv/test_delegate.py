from __future__ import annotations

import subprocess

import pytest

from pyenv_python._compat import IS_WIN
from pyenv_python._errors import ProcessSpawnError, PyenvNotFoundError
from pyenv_python.pyenv._cache import CapturedOutput
from pyenv_python.pyenv._delegate import PyenvRunner, find_pyenv


def test_find_pyenv_override_first(tmp_path, make_exe, pyenv_root):
    override = make_exe(tmp_path / "custom" / "pyenv")
    make_exe(pyenv_root / "libexec" / "pyenv")
    assert find_pyenv(pyenv_root, env={"PYENV_PYTHON_PYENV": str(override), "PATH": ""}) == override


def test_find_pyenv_in_root(pyenv_root, make_exe):
    make_exe(pyenv_root / "bin" / "pyenv")
    libexec = make_exe(pyenv_root / "libexec" / "pyenv")
    assert find_pyenv(pyenv_root, env={"PATH": ""}) == libexec


@pytest.mark.skipif(IS_WIN, reason="symlinks need privileges on windows")
def test_find_pyenv_on_path_skips_self(tmp_path, make_exe):
    current = make_exe(tmp_path / "tool" / "pyenv-python-pyenv")
    (tmp_path / "alias").mkdir()
    (tmp_path / "alias" / "pyenv").symlink_to(current)
    real = make_exe(tmp_path / "real" / "pyenv")
    path = f"{tmp_path / 'alias'}:{tmp_path / 'real'}"
    assert find_pyenv(None, current, {"PATH": path}) == real


def test_find_pyenv_missing(tmp_path):
    with pytest.raises(PyenvNotFoundError):
        find_pyenv(tmp_path, env={"PATH": ""})


def test_runner_captures_output(mocker, tmp_path):
    run = mocker.patch(
        "pyenv_python.pyenv._delegate.subprocess.run",
        return_value=subprocess.CompletedProcess([], 2, b"3.9.1\n", b"warning\n"),
    )
    runner = PyenvRunner(tmp_path / "pyenv", {"PATH": ""})

    assert runner(["versions", "--bare"]) == CapturedOutput(2, b"3.9.1\n", b"warning\n")
    run.assert_called_once_with(
        [str(tmp_path / "pyenv"), "versions", "--bare"], capture_output=True, check=False, env={"PATH": ""}
    )


def test_runner_spawn_failure(tmp_path):
    with pytest.raises(ProcessSpawnError) as context:
        PyenvRunner(tmp_path / "missing")(["versions"])
    assert context.value.path == tmp_path / "missing"
