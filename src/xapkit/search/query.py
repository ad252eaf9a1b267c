"""Execute text queries against an index and walk the paginated matches."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import ModuleType
from typing import Any, Iterator, Optional

from .errors import EmptyQueryError, InvalidWindowError, NoResultSetError
from .handle import DEFAULT_STEM_LANGUAGE, IndexHandle
from .prefixes import PrefixRegistry

LOGGER = logging.getLogger(__name__)

DEFAULT_NUM_TO_FETCH = 100


@dataclass(frozen=True, slots=True)
class Match:
    """One entry of a match set.

    Attributes:
        docid: Id the document was stored under.
        rank: Zero-based position of the match within the whole result list.
        weight: Relevance weight assigned by the engine.
        percent: Relevance expressed as a percentage of the best match.
        document: Engine document for reading stored terms, values and data.
        engine: Engine module used to decode sortable values.
    """

    docid: int
    rank: int
    weight: float
    percent: int
    document: Any
    engine: ModuleType

    @property
    def data(self) -> Any:
        """Return the opaque payload stored with the document."""
        return self.document.get_data()

    def value(self, slot: int) -> Optional[float]:
        """Return the number stored in ``slot`` or ``None`` when the slot is empty."""
        raw = self.document.get_value(slot)
        if not raw:
            return None
        return self.engine.sortable_unserialise(raw)


class CursorState(str, Enum):
    """Position of a :class:`MatchCursor`."""

    NOT_STARTED = "not_started"
    POSITIONED = "positioned"
    EXHAUSTED = "exhausted"


class MatchCursor:
    """Forward-only, single-pass walk over a match set."""

    def __init__(self, match_set: Any, total_estimated: int, engine: ModuleType) -> None:
        self._engine = engine
        self._total_estimated = total_estimated
        self._items: Iterator[Any] = iter(match_set) if total_estimated else iter(())
        self._lookahead: Optional[Match] = None
        self._state = CursorState.NOT_STARTED
        self._position: Optional[int] = None

    @property
    def total_estimated(self) -> int:
        """Return the engine's estimate of the total number of matches."""
        return self._total_estimated

    @property
    def state(self) -> CursorState:
        return self._state

    @property
    def position(self) -> Optional[int]:
        """Return the index of the last returned match within this window."""
        return self._position

    def has_next(self) -> bool:
        """Return whether another match is available without consuming it."""
        if self._lookahead is None and self._state is not CursorState.EXHAUSTED:
            self._lookahead = self._pull()
        return self._lookahead is not None

    def next(self) -> Optional[Match]:
        """Return the next match, or ``None`` once the window is used up."""
        if not self.has_next():
            self._state = CursorState.EXHAUSTED
            return None
        item, self._lookahead = self._lookahead, None
        self._state = CursorState.POSITIONED
        self._position = 0 if self._position is None else self._position + 1
        return item

    def __iter__(self) -> Iterator[Match]:
        return self

    def __next__(self) -> Match:
        item = self.next()
        if item is None:
            raise StopIteration
        return item

    def _pull(self) -> Optional[Match]:
        raw = next(self._items, None)
        if raw is None:
            return None
        return Match(
            docid=raw.docid,
            rank=raw.rank,
            weight=raw.weight,
            percent=raw.percent,
            document=raw.document,
            engine=self._engine,
        )


class QueryExecutor:
    """Parse query text through a prefix registry and page through the results.

    Example::

        executor = QueryExecutor.open("/var/lib/catalog", registry=registry)
        executor.execute("S:bicycle", num_to_fetch=10)
        while (match := executor.get_next()) is not None:
            print(match.docid, match.data)
    """

    def __init__(self, handle: IndexHandle, registry: PrefixRegistry | None = None) -> None:
        self._handle = handle
        self._registry = registry
        self._parser: Any | None = None
        self._query: Any | None = None
        self._match_set: Any | None = None
        self._cursor: MatchCursor | None = None

    @classmethod
    def open(
        cls,
        path: str | Path,
        *,
        registry: PrefixRegistry | None = None,
        stem_language: str = DEFAULT_STEM_LANGUAGE,
        engine: str | ModuleType | None = None,
    ) -> "QueryExecutor":
        """Create an executor over a read-only handle for ``path``."""
        handle = IndexHandle(path, stem_language=stem_language, engine=engine)
        return cls(handle, registry)

    @property
    def handle(self) -> IndexHandle:
        """Return the index handle queries run against."""
        return self._handle

    @property
    def registry(self) -> PrefixRegistry:
        """Return the registry, falling back to the shared instance."""
        return self._registry if self._registry is not None else PrefixRegistry.get_instance()

    @property
    def parser(self) -> Any | None:
        """Return the query parser built by the last execution."""
        return self._parser

    @property
    def query(self) -> Any | None:
        """Return the parsed engine query from the last execution."""
        return self._query

    @property
    def cursor_state(self) -> CursorState | None:
        """Return the cursor position, or ``None`` when nothing has executed."""
        return self._cursor.state if self._cursor is not None else None

    def execute(
        self,
        query_text: str,
        num_to_fetch: int = DEFAULT_NUM_TO_FETCH,
        offset: int = 0,
        check_at_least: int | None = None,
    ) -> "QueryExecutor":
        """Run ``query_text`` and capture a window of matches.

        Args:
            query_text: Query in the engine's syntax using registered labels.
            num_to_fetch: Maximum number of matches in the window.
            offset: Number of leading matches to skip.
            check_at_least: Minimum number of candidates the engine should scan
                before estimating the total; tighter counts cost speed.

        Returns:
            QueryExecutor: This executor, positioned before the first match.

        Raises:
            EmptyQueryError: If ``query_text`` is empty.
            InvalidWindowError: If a window argument is negative.
        """

        if not query_text or not query_text.strip():
            raise EmptyQueryError("A search cannot be executed without a query.")
        for name, amount in (
            ("num_to_fetch", num_to_fetch),
            ("offset", offset),
            ("check_at_least", check_at_least or 0),
        ):
            if amount < 0:
                raise InvalidWindowError(f"{name} must not be negative, got {amount}.")

        handle = self._handle.connect()
        engine = handle.engine
        parser = engine.QueryParser()
        parser.set_database(handle.database)
        parser.set_stemmer(handle.stemmer())
        parser.set_stemming_strategy(engine.QueryParser.STEM_SOME)
        parser.set_stopper(handle.stopper)
        self.registry.configure(parser, engine)

        query = parser.parse_query(query_text)
        enquire = engine.Enquire(handle.database)
        enquire.set_query(query)
        match_set = enquire.get_mset(offset, num_to_fetch, check_at_least or 0)
        estimated = match_set.get_matches_estimated()

        self._parser = parser
        self._query = query
        self._match_set = match_set
        self._cursor = MatchCursor(match_set, estimated, engine)
        LOGGER.debug(
            "Query %r matched ~%s documents (offset=%s, fetch=%s)",
            query_text,
            estimated,
            offset,
            num_to_fetch,
        )
        return self

    def get_num_matches(self) -> int:
        """Return the estimated total match count from the last execution."""
        return self._require_cursor().total_estimated

    def get_next(self) -> Optional[Match]:
        """Return the next match in the window, or ``None`` once exhausted."""
        return self._require_cursor().next()

    def has_next(self) -> bool:
        """Return whether :meth:`get_next` would yield another match."""
        return self._require_cursor().has_next()

    def get_match_set(self) -> Any:
        """Return the raw engine match set for engine-native features."""
        self._require_cursor()
        return self._match_set

    def __iter__(self) -> Iterator[Match]:
        return iter(self._require_cursor())

    def reset(self) -> "QueryExecutor":
        """Forget the last query and its results while keeping the connection."""
        self._parser = None
        self._query = None
        self._match_set = None
        self._cursor = None
        return self

    def _require_cursor(self) -> MatchCursor:
        if self._cursor is None:
            raise NoResultSetError("No match set has been generated; call execute() first.")
        return self._cursor


__all__ = [
    "CursorState",
    "DEFAULT_NUM_TO_FETCH",
    "Match",
    "MatchCursor",
    "QueryExecutor",
]
