"""Cache of delegated pyenv output, keyed by the exact argument vector and split into domains.

The cache lives for a single run by default. A :class:`ContentStore` can persist it between runs, the disk backed one
guards load and save with a file lock.
"""

from __future__ import annotations

import base64
import json
import logging
from collections.abc import Callable, Sequence
from contextlib import ExitStack, contextmanager, suppress
from dataclasses import dataclass, field
from enum import Enum
from hashlib import sha256
from pathlib import Path
from typing import TYPE_CHECKING, NamedTuple, Protocol, runtime_checkable

from platformdirs import user_cache_path

from pyenv_python._config import PYENV_PYTHON_CACHE_DIR, cache_enabled, get_env
from pyenv_python._errors import CacheStoreError

if TYPE_CHECKING:
    from collections.abc import Generator, Mapping

LOGGER = logging.getLogger(__name__)

APP_NAME = "pyenv-python"
FORMAT_VERSION = 1


class CacheType(Enum):
    HELP = "help"
    VERSIONS = "versions"

    @property
    def invalidates(self) -> tuple[CacheType, ...]:
        """Every domain cleared when this one is invalidated."""
        return _INVALIDATES[self]


_INVALIDATES = {
    CacheType.HELP: (CacheType.HELP, CacheType.VERSIONS),
    CacheType.VERSIONS: (CacheType.VERSIONS,),
}


class BehaviorKind(Enum):
    CACHE = "cache"
    IGNORE = "ignore"
    INVALIDATE = "invalidate"


@dataclass(frozen=True)
class CacheBehavior:
    kind: BehaviorKind
    cache_type: CacheType | None = field(default=None)

    def __post_init__(self) -> None:
        if self.kind is BehaviorKind.IGNORE and self.cache_type is not None:
            msg = f"ignore behavior takes no cache type, got {self.cache_type.value}"
            raise ValueError(msg)
        if self.kind is not BehaviorKind.IGNORE and self.cache_type is None:
            msg = f"{self.kind.value} behavior needs a cache type"
            raise ValueError(msg)

    @classmethod
    def cache(cls, cache_type: CacheType) -> CacheBehavior:
        return cls(BehaviorKind.CACHE, cache_type)

    @classmethod
    def ignore(cls) -> CacheBehavior:
        return cls(BehaviorKind.IGNORE)

    @classmethod
    def invalidate(cls, cache_type: CacheType) -> CacheBehavior:
        return cls(BehaviorKind.INVALIDATE, cache_type)

    def __str__(self) -> str:
        if self.cache_type is None:
            return self.kind.value
        return f"{self.kind.value}({self.cache_type.value})"


class CapturedOutput(NamedTuple):
    status: int
    stdout: bytes
    stderr: bytes


Args = tuple[str, ...]
Runner = Callable[[Sequence[str]], CapturedOutput]


@runtime_checkable
class ContentStore(Protocol):
    """A store for reading and writing cached content."""

    def read(self) -> dict | None: ...

    def write(self, content: dict) -> None: ...

    def remove(self) -> None: ...

    @contextmanager
    def locked(self) -> Generator[None]: ...


class DiskContentStore:
    """JSON file-based content store with file locking."""

    def __init__(self, folder: Path, key: str) -> None:
        self._folder = folder
        self._key = key

    @property
    def _file(self) -> Path:
        return self._folder / f"{self._key}.json"

    def read(self) -> dict | None:
        data, bad_format = None, False
        try:
            data = json.loads(self._file.read_text(encoding="utf-8"))
        except ValueError:
            bad_format = True
        except OSError:
            LOGGER.debug("failed to read %s", self._file, exc_info=True)
        else:
            LOGGER.debug("got pyenv output cache from %s", self._file)
            return data
        if bad_format:
            self.remove()
        return None

    def write(self, content: dict) -> None:
        try:
            self._folder.mkdir(parents=True, exist_ok=True)
            self._file.write_text(json.dumps(content, sort_keys=True, indent=2), encoding="utf-8")
        except OSError as exc:
            raise CacheStoreError(self._file, exc) from exc
        LOGGER.debug("wrote pyenv output cache at %s", self._file)

    def remove(self) -> None:
        with suppress(OSError):
            self._file.unlink()
        LOGGER.debug("removed pyenv output cache at %s", self._file)

    @contextmanager
    def locked(self) -> Generator[None]:
        from filelock import FileLock  # noqa: PLC0415

        lock_path = self._folder / f"{self._key}.lock"
        try:
            lock_path.parent.mkdir(parents=True, exist_ok=True)
            lock = FileLock(str(lock_path))
            lock.acquire()
        except OSError as exc:
            raise CacheStoreError(lock_path, exc) from exc
        try:
            yield
        finally:
            lock.release()


class NoOpContentStore:
    """Content store that does nothing, the cache then lives only as long as the process."""

    def read(self) -> dict | None:
        return None

    def write(self, content: dict) -> None:
        pass

    def remove(self) -> None:
        pass

    @contextmanager
    def locked(self) -> Generator[None]:
        yield


def default_store(key: str, env: Mapping[str, str] | None = None) -> ContentStore:
    """Disk store when persistence is switched on through the environment, otherwise a no-op one.

    :param key: what the cached output depends on, e.g. the pyenv root

    """
    env = get_env(env)
    if not cache_enabled(env):
        return NoOpContentStore()
    folder = Path(raw).expanduser() if (raw := env.get(PYENV_PYTHON_CACHE_DIR)) else user_cache_path(APP_NAME)
    return DiskContentStore(folder, sha256(key.encode("utf-8")).hexdigest())


def _encode(output: CapturedOutput) -> dict:
    return {
        "status": output.status,
        "stdout": base64.b64encode(output.stdout).decode("ascii"),
        "stderr": base64.b64encode(output.stderr).decode("ascii"),
    }


def _decode(raw: dict) -> CapturedOutput:
    return CapturedOutput(int(raw["status"]), base64.b64decode(raw["stdout"]), base64.b64decode(raw["stderr"]))


class CommandCache:
    def __init__(self, store: ContentStore | None = None) -> None:
        self._store = NoOpContentStore() if store is None else store
        self._domains: dict[CacheType, dict[Args, CapturedOutput]] = {cache_type: {} for cache_type in CacheType}

    def get(self, cache_type: CacheType, args: Sequence[str]) -> CapturedOutput | None:
        return self._domains[cache_type].get(tuple(args))

    def put(self, cache_type: CacheType, args: Sequence[str], output: CapturedOutput) -> None:
        self._domains[cache_type][tuple(args)] = output

    def invalidate(self, cache_type: CacheType) -> None:
        for sub_cache_type in cache_type.invalidates:
            LOGGER.debug("invalidate %s cache", sub_cache_type.value)
            self._domains[sub_cache_type].clear()

    def __len__(self) -> int:
        return sum(len(domain) for domain in self._domains.values())

    def run(self, behavior: CacheBehavior, args: Sequence[str], runner: Runner) -> CapturedOutput:
        """Produce the output of ``args`` according to ``behavior``, calling ``runner`` only when needed."""
        if behavior.kind is BehaviorKind.CACHE and behavior.cache_type is not None:
            if (output := self.get(behavior.cache_type, args)) is not None:
                LOGGER.debug("%s cache hit for %r", behavior.cache_type.value, list(args))
                return output
            output = runner(args)
            self.put(behavior.cache_type, args, output)
            return output
        if behavior.kind is BehaviorKind.INVALIDATE and behavior.cache_type is not None:
            self.invalidate(behavior.cache_type)
        return runner(args)

    def load(self) -> None:
        content = self._store.read()
        if not content or content.get("version") != FORMAT_VERSION:
            return
        try:
            for cache_type in CacheType:
                for entry in content.get(cache_type.value, []):
                    self.put(cache_type, entry["args"], _decode(entry))
        except (KeyError, TypeError, ValueError):
            LOGGER.debug("discard malformed pyenv output cache", exc_info=True)
            for domain in self._domains.values():
                domain.clear()
            self._store.remove()

    def save(self) -> None:
        content: dict = {"version": FORMAT_VERSION}
        for cache_type, domain in self._domains.items():
            content[cache_type.value] = [{"args": list(args), **_encode(output)} for args, output in domain.items()]
        self._store.write(content)

    @contextmanager
    def session(self) -> Generator[CommandCache]:
        """Hold the store lock while the cache is loaded, used and written back.

        A store that cannot be used is dropped for an in-memory one, the delegated command still runs.
        """
        with ExitStack() as stack:
            try:
                stack.enter_context(self._store.locked())
            except CacheStoreError as exc:
                LOGGER.debug("%s, keeping it in memory", exc)
                self._store = NoOpContentStore()
            self.load()
            yield self
            try:
                self.save()
            except CacheStoreError as exc:
                LOGGER.debug("%s, not saved", exc)


__all__ = [
    "BehaviorKind",
    "CacheBehavior",
    "CacheType",
    "CapturedOutput",
    "CommandCache",
    "ContentStore",
    "DiskContentStore",
    "NoOpContentStore",
    "Runner",
    "default_store",
]
