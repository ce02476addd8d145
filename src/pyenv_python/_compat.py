"""Platform compatibility utilities: file identity and executable checks."""

from __future__ import annotations

import functools
import logging
import os
import sys
import tempfile
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

IS_WIN = sys.platform == "win32"
CAN_EXEC = os.name == "posix" and hasattr(os, "execv")
PYTHON_EXE = "python.exe" if IS_WIN else "python"

LOGGER = logging.getLogger(__name__)


@functools.lru_cache(maxsize=1)
def fs_is_case_sensitive() -> bool:
    with tempfile.NamedTemporaryFile(prefix="TmP") as tmp_file:
        result = not os.path.exists(tmp_file.name.lower())
    LOGGER.debug("filesystem is %scase-sensitive", "" if result else "not ")
    return result


def fs_path_id(path: str) -> str:
    return path.casefold() if not fs_is_case_sensitive() else path


class FileId:
    """Identity of a file on disk, equal iff two paths denote the same file.

    Uses ``(st_dev, st_ino)``. Where the platform reports no inode the canonical real path is compared instead, which
    cannot see through hard links.

    """

    __slots__ = ("_key",)

    def __init__(self, key: tuple[int, int] | str) -> None:
        self._key = key

    @classmethod
    def of(cls, path: Path | str) -> FileId:
        """:raises OSError: if ``path`` can not be stat-ed"""
        st = os.stat(path)
        if st.st_ino:
            return cls((st.st_dev, st.st_ino))
        return cls(fs_path_id(os.path.normcase(os.path.realpath(path))))

    @classmethod
    def maybe(cls, path: Path | str) -> FileId | None:
        try:
            return cls.of(path)
        except OSError:
            return None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FileId):
            return NotImplemented
        return self._key == other._key

    def __hash__(self) -> int:
        return hash(self._key)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._key!r})"


def is_executable(path: Path | str) -> bool:
    return os.access(path, os.X_OK)


__all__ = [
    "CAN_EXEC",
    "IS_WIN",
    "PYTHON_EXE",
    "FileId",
    "fs_is_case_sensitive",
    "fs_path_id",
    "is_executable",
]
