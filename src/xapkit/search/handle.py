"""Lazily connected handles onto a Xapian database."""

from __future__ import annotations

import importlib
import logging
from enum import Enum
from pathlib import Path
from types import ModuleType
from typing import Any, Iterable

from .errors import EngineUnavailableError, HandleConnectedError, UnsupportedAccessModeError

LOGGER = logging.getLogger(__name__)

DEFAULT_ENGINE = "xapian"
DEFAULT_STEM_LANGUAGE = "english"


class AccessMode(str, Enum):
    """Ways an index handle may open its database."""

    READ_ONLY = "read_only"
    READ_WRITE = "read_write"


def load_engine(engine: str | ModuleType | None = None) -> ModuleType:
    """Return the engine module, importing it by dotted name when needed.

    Args:
        engine: Engine module, dotted import path, or ``None`` for the Xapian bindings.

    Returns:
        ModuleType: Module exposing the Xapian binding API.

    Raises:
        EngineUnavailableError: If the named module cannot be imported.
    """

    if isinstance(engine, ModuleType):
        return engine
    name = engine or DEFAULT_ENGINE
    try:
        return importlib.import_module(name)
    except ImportError as exc:
        raise EngineUnavailableError(
            f"Search engine module {name!r} could not be imported: {exc}"
        ) from exc


class IndexHandle:
    """Own a single engine connection that is opened on first use.

    Configuration setters are fluent and only accepted while the handle is
    unconnected; once :meth:`connect` has opened the database they raise
    :class:`HandleConnectedError` so callers never believe a stem language or
    stopper change reached an already open connection.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        access_mode: AccessMode | str = AccessMode.READ_ONLY,
        stem_language: str = DEFAULT_STEM_LANGUAGE,
        stopper: Any | None = None,
        engine: str | ModuleType | None = None,
    ) -> None:
        self._path = Path(path).expanduser()
        self._access_mode = access_mode
        self._stem_language = stem_language
        self._stopper = stopper
        self._engine_ref = engine
        self._engine: ModuleType | None = None
        self._db: Any | None = None

    def __enter__(self) -> "IndexHandle":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "connected" if self.is_connected else "unconnected"
        return f"IndexHandle({str(self._path)!r}, {self._access_mode!s}, {state})"

    @property
    def path(self) -> Path:
        """Return the filesystem location of the index."""
        return self._path

    @property
    def access_mode(self) -> AccessMode | str:
        """Return the configured access mode."""
        return self._access_mode

    @property
    def stem_language(self) -> str:
        """Return the language used for stemming text and queries."""
        return self._stem_language

    @property
    def is_connected(self) -> bool:
        """Return whether the engine connection has been opened."""
        return self._db is not None

    @property
    def engine(self) -> ModuleType:
        """Return the engine module, importing it on first access."""
        if self._engine is None:
            self._engine = load_engine(self._engine_ref)
        return self._engine

    @property
    def database(self) -> Any:
        """Return the open engine database, connecting if necessary."""
        self.connect()
        return self._db

    @property
    def stopper(self) -> Any:
        """Return the configured stopper, creating an empty one when unset."""
        if self._stopper is None:
            self._stopper = self.engine.SimpleStopper()
        return self._stopper

    @property
    def doc_count(self) -> int:
        """Return the number of documents currently stored in the index."""
        return self.database.get_doccount()

    # Configuration -----------------------------------------------------

    def set_read_write(self) -> "IndexHandle":
        """Open the database for writing, creating it when absent."""
        self._ensure_unconnected("access mode")
        self._access_mode = AccessMode.READ_WRITE
        return self

    def set_stem_language(self, language: str) -> "IndexHandle":
        """Set the stemming language used for indexing and query parsing."""
        self._ensure_unconnected("stem language")
        self._stem_language = language
        return self

    def set_stopper(self, stopper: Any) -> "IndexHandle":
        """Set the engine stopper consulted while parsing queries."""
        self._ensure_unconnected("stopper")
        self._stopper = stopper
        return self

    def set_stopwords(self, words: Iterable[str]) -> "IndexHandle":
        """Build a ``SimpleStopper`` from ``words`` and install it.

        Args:
            words: Stopwords to ignore when parsing queries.

        Returns:
            IndexHandle: This handle, for chaining.
        """
        self._ensure_unconnected("stopper")
        stopper = self.engine.SimpleStopper()
        for word in words:
            stopper.add(word)
        self._stopper = stopper
        return self

    # Connection lifecycle ----------------------------------------------

    def connect(self) -> "IndexHandle":
        """Open the engine connection once; later calls are no-ops.

        Returns:
            IndexHandle: This handle, for chaining.

        Raises:
            UnsupportedAccessModeError: If the access mode is not recognized.
        """

        if self._db is not None:
            return self

        mode = self._resolve_access_mode()
        engine = self.engine
        if mode is AccessMode.READ_ONLY:
            self._db = engine.Database(str(self._path))
        else:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._db = engine.WritableDatabase(str(self._path), engine.DB_CREATE_OR_OPEN)
        self._access_mode = mode
        LOGGER.debug("Opened %s index at %s", mode.value, self._path)
        return self

    def commit(self) -> "IndexHandle":
        """Flush pending modifications when the connection is writable."""
        if self._db is not None and self._access_mode is AccessMode.READ_WRITE:
            self._db.commit()
        return self

    def close(self) -> None:
        """Release the engine connection; the handle may reconnect afterwards."""
        if self._db is None:
            return
        self._db.close()
        self._db = None
        LOGGER.debug("Closed index at %s", self._path)

    def stemmer(self) -> Any:
        """Return a new engine stemmer for the configured language."""
        return self.engine.Stem(self._stem_language)

    def get_document(self, docid: int) -> Any:
        """Return the stored engine document with ``docid``."""
        return self.database.get_document(docid)

    def _resolve_access_mode(self) -> AccessMode:
        try:
            return AccessMode(self._access_mode)
        except ValueError as exc:
            raise UnsupportedAccessModeError(
                f'Unrecognized index access mode "{self._access_mode}".'
            ) from exc

    def _ensure_unconnected(self, setting: str) -> None:
        if self._db is not None:
            raise HandleConnectedError(
                f"Cannot change the {setting} of {self._path} after it has been opened."
            )


__all__ = ["AccessMode", "IndexHandle", "load_engine", "DEFAULT_ENGINE", "DEFAULT_STEM_LANGUAGE"]
