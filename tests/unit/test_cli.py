from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from pyenv_python._cli import parent_dir, pyenv_main, python_main, python_path_main
from pyenv_python._compat import PYTHON_EXE
from pyenv_python._errors import PyenvPythonError


class Replaced(Exception):  # noqa: N818
    pass


@pytest.fixture
def python(pyenv_root):
    return pyenv_root / "versions" / "3.9.1" / "bin" / PYTHON_EXE


@pytest.fixture
def tool(tmp_path, make_exe):
    return make_exe(tmp_path / "tool" / "pyenv-python")


@pytest.fixture(autouse=True)
def _in_work_dir(monkeypatch, work_dir):
    monkeypatch.chdir(work_dir)


@pytest.mark.parametrize(
    ("flag", "level"),
    [("--path", 0), ("--dir", 1), ("--prefix", 2)],
)
def test_parent_flags(capsys, env, tool, python, flag, level):
    assert python_main([str(tool), flag], env) == 0
    expected = python
    for _ in range(level):
        expected = expected.parent
    assert capsys.readouterr().out == f"{expected}\n"


def test_parent_dir():
    path = Path("/root/versions/3.9/bin/python")
    assert parent_dir(path, 1) == Path("/root/versions/3.9/bin")
    assert parent_dir(path, 2) == Path("/root/versions/3.9")


def test_parent_dir_too_deep():
    with pytest.raises(PyenvPythonError, match="doesn't have 3 parent directories"):
        parent_dir(Path("/python"), 3)
    with pytest.raises(PyenvPythonError):
        parent_dir(Path("python"), 2)


def test_which_flag(capsys, env, tool, python):
    assert python_main([str(tool), "--which"], env) == 0
    out = capsys.readouterr().out
    assert out.startswith(f"pyenv python 3.9.1 at {python}")
    assert "PYENV_VERSION environment variable" in out


def test_runs_resolved_python(mocker, env, tool, python):
    invoke = mocker.patch("pyenv_python._cli.invoke", side_effect=Replaced)
    with pytest.raises(Replaced):
        python_main([str(tool), "-c", "pass"], env)
    invoke.assert_called_once_with(str(python), ["-c", "pass"])


def test_runs_console_script_through_python(mocker, env, tmp_path, make_exe, python):
    pip = make_exe(python.parent / "pip", b"#!" + str(python).encode() + b"\n")
    invoke = mocker.patch("pyenv_python._cli.invoke", side_effect=Replaced)
    with pytest.raises(Replaced):
        python_main([str(tmp_path / "links" / "pip"), "install", "x"], env)
    invoke.assert_called_once_with(str(python), [str(pip), "install", "x"])


def test_resolution_failure(capsys, tmp_path, tool):
    assert python_main([str(tool)], {"PYENV_ROOT": str(tmp_path / "missing"), "PATH": ""}) == 1
    err = capsys.readouterr().err
    assert err.startswith("pyenv-python: python not found")
    assert str(tmp_path / "missing") in err


def test_python_path(capsys, env, tool, python):
    assert python_path_main([str(tool)], env) == 0
    assert capsys.readouterr().out == f"{python}\n"


def test_python_path_failure(capsys, tmp_path, tool):
    assert python_path_main([str(tool)], {"PYENV_ROOT": str(tmp_path / "missing"), "PATH": ""}) == 1
    assert capsys.readouterr().err.startswith("pyenv-python-path: ")


def test_pyenv_intercepts(capsys, env, pyenv_root):
    assert pyenv_main(["pyenv", "root"], env) == 0
    assert capsys.readouterr().out == f"{pyenv_root}\n"


def test_pyenv_intercept_failure(capsys, env):
    assert pyenv_main(["pyenv", "local"], env) == 1
    assert capsys.readouterr().err == "pyenv: no local version configured for this directory\n"


def test_pyenv_delegates(capsysbinary, mocker, env, pyenv_root, make_exe):
    pyenv = make_exe(pyenv_root / "libexec" / "pyenv")
    run = mocker.patch(
        "pyenv_python.pyenv._delegate.subprocess.run",
        return_value=subprocess.CompletedProcess([], 5, b"  3.9.1\n", b"note\n"),
    )

    assert pyenv_main(["pyenv", "versions"], env) == 5

    assert run.call_args.args[0] == [str(pyenv), "versions"]
    captured = capsysbinary.readouterr()
    assert captured.out == b"  3.9.1\n"
    assert captured.err == b"note\n"


def test_pyenv_missing(capsys, env):
    assert pyenv_main(["pyenv", "install", "3.9.1"], env) == 1
    assert "pyenv not found" in capsys.readouterr().err


def test_pyenv_disk_cache_is_per_root(capsysbinary, mocker, tmp_path, make_exe):
    pyenv = make_exe(tmp_path / "shared" / "pyenv")
    mocker.patch(
        "pyenv_python.pyenv._delegate.subprocess.run",
        side_effect=[
            subprocess.CompletedProcess([], 0, b"  3.8.0\n", b""),
            subprocess.CompletedProcess([], 0, b"  3.12.0\n", b""),
        ],
    )
    outputs = []
    for name in ("a", "b"):
        root = tmp_path / name
        root.mkdir()
        env = {
            "PYENV_ROOT": str(root),
            "PYENV_PYTHON_PYENV": str(pyenv),
            "PYENV_PYTHON_CACHE_DIR": str(tmp_path / "cache"),
            "PATH": "",
        }
        assert pyenv_main(["pyenv", "versions"], env) == 0
        outputs.append(capsysbinary.readouterr().out)

    assert outputs == [b"  3.8.0\n", b"  3.12.0\n"]
    assert len(list((tmp_path / "cache").glob("*.json"))) == 2


def test_pyenv_unusable_cache_dir(capsysbinary, mocker, env, pyenv_root, make_exe, tmp_path):
    make_exe(pyenv_root / "libexec" / "pyenv")
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    mocker.patch(
        "pyenv_python.pyenv._delegate.subprocess.run",
        return_value=subprocess.CompletedProcess([], 0, b"  3.9.1\n", b""),
    )

    assert pyenv_main(["pyenv", "versions"], {**env, "PYENV_PYTHON_CACHE_DIR": str(blocker)}) == 0

    assert capsysbinary.readouterr().out == b"  3.9.1\n"
