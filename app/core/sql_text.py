# app/core/sql_text.py
import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from app.core.sql_watcher import SqlFileWatcher

logger = logging.getLogger(__name__)

SQL_SUFFIX = ".sql"


def normalize_key(key: str) -> str:
    """Turn 'User\\GetAllUsers' or '/User/GetAllUsers' into 'User/GetAllUsers'"""
    if not key or not key.strip():
        raise ValueError("SQL key must be a non-empty string")
    normalized = key.replace("\\", "/").lstrip("/")
    if not normalized:
        raise ValueError(f"SQL key '{key}' does not name a query")
    return normalized


def dotted_key(normalized: str) -> str:
    return normalized.replace("/", ".")


class SqlTextNotFoundError(FileNotFoundError):
    """Raised when no source holds SQL text for a key"""

    def __init__(self, key: str, searched: List[str]):
        self.key = key
        self.searched = searched
        super().__init__(
            f"SQL not found for key '{key}'. Looked in: {'; '.join(searched)}"
        )


class ResourceBundle:
    """
    Read-only tree of packaged data files, addressed by dotted resource names.

    A file at ``Sql/User/GetAllUsers.sql`` inside a bundle named ``app`` is
    exposed as ``app.Sql.User.GetAllUsers.sql``. The root may be any
    ``Traversable``: ``importlib.resources.files(package)`` for installed
    packages (including zipped ones) or a plain ``Path``.
    """

    def __init__(self, root: Traversable, name: str):
        self.root = root
        self.name = name
        self._index: Optional[Dict[str, Traversable]] = None
        self._lock = threading.Lock()

    @classmethod
    def from_package(cls, package: str) -> "ResourceBundle":
        return cls(resources.files(package), package)

    def _walk(self, node: Traversable, parts: Tuple[str, ...]) -> Iterable[Tuple[str, Traversable]]:
        for child in node.iterdir():
            if child.name == "__pycache__":
                continue
            if child.is_dir():
                yield from self._walk(child, parts + (child.name,))
            elif child.is_file():
                yield ".".join((self.name,) + parts + (child.name,)), child

    def _resources(self) -> Dict[str, Traversable]:
        # Bundles are immutable, so the index is built once
        if self._index is None:
            with self._lock:
                if self._index is None:
                    self._index = dict(sorted(self._walk(self.root, ())))
        return self._index

    def names(self) -> List[str]:
        return list(self._resources())

    def read_text(self, name: str) -> Optional[str]:
        resource = self._resources().get(name)
        if resource is None:
            return None
        return resource.read_text(encoding="utf-8")

    def __repr__(self) -> str:
        return f"ResourceBundle({self.name!r})"


class SqlTextOptions(BaseModel):
    """Settings for SqlTextResolver"""
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    root: str = "Sql"
    prefer_file_system: bool = True
    resource_bundle: Optional[ResourceBundle] = None
    resource_namespace: Optional[str] = None


class SqlSource(ABC):
    """A place SQL text can be found"""

    @abstractmethod
    def find(self, normalized: str) -> Optional[str]:
        """Return the text for ``normalized`` or None when this source has no match"""

    @abstractmethod
    def describe(self, normalized: str) -> str:
        """Human readable location probed for ``normalized``"""


class NullSource(SqlSource):
    """Stands in for a directory that did not exist at startup"""

    def __init__(self, directory: Path):
        self.directory = directory

    def find(self, normalized: str) -> Optional[str]:
        return None

    def describe(self, normalized: str) -> str:
        return f"file '{self.directory / (normalized + SQL_SUFFIX)}' (directory missing)"


class FileSystemSource(SqlSource):
    def __init__(self, directory: Path):
        self.directory = directory.resolve()

    def _candidate(self, normalized: str) -> Optional[Path]:
        segments = normalized.split("/")
        # Hidden and parent segments are never served
        if any(not s or s.startswith(".") for s in segments):
            return None
        candidate = (self.directory / f"{normalized}{SQL_SUFFIX}").resolve()
        if not candidate.is_relative_to(self.directory):
            return None
        return candidate

    def find(self, normalized: str) -> Optional[str]:
        candidate = self._candidate(normalized)
        if candidate is None or not candidate.is_file():
            return None
        return candidate.read_text(encoding="utf-8")

    def describe(self, normalized: str) -> str:
        return f"file '{self.directory / (normalized + SQL_SUFFIX)}'"


class EmbeddedSource(SqlSource):
    """
    Looks SQL text up in a ResourceBundle.

    With a namespace the resource name is built directly as
    ``{namespace}.{dotted key}.sql``. Without one, every resource name is
    scanned for a case-insensitive ``.{dotted key}.sql`` suffix.
    """

    def __init__(self, bundle: ResourceBundle, namespace: Optional[str] = None):
        self.bundle = bundle
        self.namespace = namespace.rstrip(".") if namespace else None

    def resource_name(self, normalized: str) -> Optional[str]:
        dotted = dotted_key(normalized)
        if self.namespace:
            return f"{self.namespace}.{dotted}{SQL_SUFFIX}"

        suffix = f".{dotted}{SQL_SUFFIX}".casefold()
        for name in self.bundle.names():
            if name.casefold().endswith(suffix):
                return name
        return None

    def find(self, normalized: str) -> Optional[str]:
        name = self.resource_name(normalized)
        if name is None:
            return None
        return self.bundle.read_text(name)

    def describe(self, normalized: str) -> str:
        if self.namespace:
            return f"embedded resource '{self.resource_name(normalized)}' in {self.bundle.name}"
        return f"embedded resource '*.{dotted_key(normalized)}{SQL_SUFFIX}' in {self.bundle.name}"


def directory_source(directory: Path) -> SqlSource:
    return FileSystemSource(directory) if directory.is_dir() else NullSource(directory)


class SqlTextResolver:
    """
    Resolve named SQL text from the filesystem or an embedded bundle, with caching.

    Filesystem sources are probed first (development path before output path
    when ``prefer_file_system`` is set, output path first otherwise); the
    embedded bundle, if any, is always probed last. Any change to a ``*.sql``
    file under the watched directories clears the whole cache.
    """

    def __init__(
        self,
        options: SqlTextOptions,
        dev_path: Path,
        out_path: Path,
        watch: bool = True,
    ):
        self.options = options
        self.dev_path = Path(dev_path)
        self.out_path = Path(out_path)

        dev_source = directory_source(self.dev_path)
        out_source = directory_source(self.out_path)
        if options.prefer_file_system:
            self.sources: List[SqlSource] = [dev_source, out_source]
        else:
            self.sources = [out_source, dev_source]
        if options.resource_bundle is not None:
            self.sources.append(
                EmbeddedSource(options.resource_bundle, options.resource_namespace)
            )

        self._cache: Dict[str, str] = {}
        # key -> [lock, callers holding or waiting on it]; dropped when idle
        self._key_locks: Dict[str, list] = {}
        self._lock = threading.Lock()
        self._generation = 0

        watched = [s.directory for s in (dev_source, out_source) if isinstance(s, FileSystemSource)]
        if not watched:
            logger.warning(
                f"No SQL directory found at '{self.dev_path}' or '{self.out_path}'. "
                "Either create the folder, ship it next to the app, or embed it as package data."
            )

        self._watcher: Optional[SqlFileWatcher] = None
        if watch and watched:
            self._watcher = SqlFileWatcher(sorted(set(watched)), self.invalidate)
            self._watcher.start()

    def get(self, key: str) -> str:
        """Return the SQL text for ``key``, resolving and caching it on first use"""
        normalized = normalize_key(key)
        text = self._cache.get(normalized)
        if text is not None:
            return text

        with self._key_lock(normalized):
            text = self._cache.get(normalized)
            if text is not None:
                return text

            generation = self._generation
            text = self._resolve(normalized)
            with self._lock:
                if generation == self._generation:
                    self._cache[normalized] = text
            return text

    @contextmanager
    def _key_lock(self, normalized: str) -> Iterator[None]:
        with self._lock:
            entry = self._key_locks.get(normalized)
            if entry is None:
                entry = self._key_locks[normalized] = [threading.Lock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._lock:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._key_locks[normalized]

    def _resolve(self, normalized: str) -> str:
        for source in self.sources:
            text = source.find(normalized)
            if text is not None:
                logger.debug(f"Resolved SQL '{normalized}' from {source.describe(normalized)}")
                return text

        raise SqlTextNotFoundError(
            normalized, [source.describe(normalized) for source in self.sources]
        )

    def invalidate(self, changes=None) -> None:
        """Drop every cached entry so the next get() re-reads from its source"""
        with self._lock:
            self._generation += 1
            self._cache.clear()
        if changes:
            logger.info(f"SQL text cache invalidated due to file change ({len(changes)} file(s)).")
        else:
            logger.info("SQL text cache invalidated.")

    def close(self) -> None:
        if self._watcher is not None:
            self._watcher.close()
            self._watcher = None

    def __enter__(self) -> "SqlTextResolver":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
