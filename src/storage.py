"""Document storage: pluggable backends and typed repositories.

Every persisted entity kind lives in one JSON document, loaded whole on
each access. Services never touch a backend directly; they go through a
:class:`DocumentRepository`, which validates the document with Pydantic
and serializes read-modify-write cycles with a per-document lock.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Generic, TypeVar

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

DocT = TypeVar("DocT", bound=BaseModel)


class StorageBackend(ABC):
    """Key -> JSON text store with one reentrant lock per key."""

    def __init__(self) -> None:
        self._locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def lock_for(self, key: str) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    @abstractmethod
    def read(self, key: str) -> str | None:
        """Return the stored text for ``key`` or None if absent."""

    @abstractmethod
    def write(self, key: str, text: str) -> None:
        """Replace the stored text for ``key``."""


class JsonFileBackend(StorageBackend):
    """Stores each document as ``<root>/<key>.json``."""

    def __init__(self, root: Path) -> None:
        super().__init__()
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def path_for(self, key: str) -> Path:
        return self._root / f"{key}.json"

    def read(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Failed to read %s: %s", path, exc)
            return None

    def write(self, key: str, text: str) -> None:
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(text, encoding="utf-8")
        tmp.replace(path)


class MemoryBackend(StorageBackend):
    """In-process backend for tests and dry runs."""

    def __init__(self) -> None:
        super().__init__()
        self._docs: dict[str, str] = {}

    def read(self, key: str) -> str | None:
        return self._docs.get(key)

    def write(self, key: str, text: str) -> None:
        self._docs[key] = text

    def keys(self) -> list[str]:
        return sorted(self._docs)


class DocumentRepository(Generic[DocT]):
    """Typed load/save access to one document in a backend.

    Absent or corrupt documents load as ``model()`` (the zero value)
    instead of raising.
    """

    def __init__(
        self,
        backend: StorageBackend,
        key: str,
        model: type[DocT],
        default: Callable[[], DocT] | None = None,
    ) -> None:
        self._backend = backend
        self._key = key
        self._model = model
        self._default = default or model

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> DocT:
        raw = self._backend.read(self._key)
        if raw is None:
            return self._default()
        try:
            return self._model.model_validate_json(raw)
        except ValidationError:
            logger.warning("Corrupt %s document, starting fresh", self._key)
            return self._default()

    def save(self, document: DocT) -> None:
        with self._backend.lock_for(self._key):
            self._backend.write(self._key, document.model_dump_json(indent=2, exclude_none=True))

    @contextmanager
    def edit(self) -> Iterator[DocT]:
        """Load, yield for mutation, and save, all under the document lock.

        Nothing is written if the block raises.
        """
        with self._backend.lock_for(self._key):
            document = self.load()
            yield document
            self.save(document)
