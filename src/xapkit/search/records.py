"""Build and commit documents into a Xapian index."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import ModuleType
from typing import Any, Optional

from .errors import EmptyRecordError, InvalidIdError, MissingIdError, UnsupportedAccessModeError
from .handle import AccessMode, DEFAULT_STEM_LANGUAGE, IndexHandle
from .prefixes import validate_slot

LOGGER = logging.getLogger(__name__)


class BuilderState(str, Enum):
    """Lifecycle of the record held by a :class:`DocumentBuilder`."""

    EMPTY = "empty"
    ACCUMULATING = "accumulating"


@dataclass(slots=True)
class PendingDocument:
    """Content accumulated for the next commit.

    Attributes:
        id: Document id the record will be stored under.
        text_fields: Text keyed by prefix; ``None`` holds unprefixed text.
        boolean_terms: Exact-match terms in insertion order, duplicates kept.
        slot_values: Sortable values keyed by slot number.
        payload: Opaque data stored alongside the document.
    """

    id: Optional[int] = None
    text_fields: dict[Optional[str], str] = field(default_factory=dict)
    boolean_terms: list[str] = field(default_factory=list)
    slot_values: dict[int, Any] = field(default_factory=dict)
    payload: str | bytes | None = None

    @property
    def has_content(self) -> bool:
        """Return whether any text, boolean term, or slot value is present."""
        return bool(self.text_fields or self.boolean_terms or self.slot_values)

    @property
    def is_empty(self) -> bool:
        """Return whether nothing at all has been recorded."""
        return self.id is None and not self.has_content and self.payload is None


class DocumentBuilder:
    """Accumulate one record at a time and upsert it by integer id.

    Example::

        DocumentBuilder.open("/var/lib/catalog") \\
            .set_id(42) \\
            .add_text("red bicycle", prefix="S") \\
            .add_boolean_term("XCred") \\
            .add_to_slot(0, 1999) \\
            .execute()

    The engine document is assembled completely before the connection is
    touched, so a failure while building leaves both the index and the
    pending record unchanged.
    """

    def __init__(self, handle: IndexHandle, *, auto_commit: bool = True) -> None:
        """Bind the builder to ``handle``, switching it to read-write mode.

        Raises:
            UnsupportedAccessModeError: If ``handle`` is already connected read-only.
        """
        if not handle.is_connected:
            handle.set_read_write()
        elif handle.access_mode is not AccessMode.READ_WRITE:
            raise UnsupportedAccessModeError(
                f"Cannot index records through the read-only connection to {handle.path}."
            )
        self._handle = handle
        self._auto_commit = auto_commit
        self._pending = PendingDocument()

    @classmethod
    def open(
        cls,
        path: str | Path,
        *,
        stem_language: str = DEFAULT_STEM_LANGUAGE,
        engine: str | ModuleType | None = None,
        auto_commit: bool = True,
    ) -> "DocumentBuilder":
        """Create a builder over a read-write handle for ``path``."""
        handle = IndexHandle(
            path,
            access_mode=AccessMode.READ_WRITE,
            stem_language=stem_language,
            engine=engine,
        )
        return cls(handle, auto_commit=auto_commit)

    @property
    def handle(self) -> IndexHandle:
        """Return the index handle records are committed through."""
        return self._handle

    @property
    def pending(self) -> PendingDocument:
        """Return a copy of the record accumulated so far."""
        current = self._pending
        return PendingDocument(
            id=current.id,
            text_fields=dict(current.text_fields),
            boolean_terms=list(current.boolean_terms),
            slot_values=dict(current.slot_values),
            payload=current.payload,
        )

    @property
    def state(self) -> BuilderState:
        """Return whether the builder currently holds any record data."""
        return BuilderState.EMPTY if self._pending.is_empty else BuilderState.ACCUMULATING

    def set_id(self, value: int) -> "DocumentBuilder":
        """Set the id the record is stored under.

        Raises:
            InvalidIdError: If ``value`` is not a positive integer.
        """
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise InvalidIdError(f"Record ids must be positive integers, got {value!r}.")
        self._pending.id = value
        return self

    def add_text(self, value: str, prefix: str | None = None) -> "DocumentBuilder":
        """Index ``value`` under ``prefix``, replacing earlier text for that prefix."""
        self._pending.text_fields[prefix or None] = value
        return self

    def add_boolean_term(self, term: str) -> "DocumentBuilder":
        """Append an exact-match term used for filtering."""
        self._pending.boolean_terms.append(term)
        return self

    def add_to_slot(self, slot: int, value: Any) -> "DocumentBuilder":
        """Store a sortable value in ``slot``, replacing any earlier value."""
        self._pending.slot_values[validate_slot(slot)] = value
        return self

    def set_data(self, payload: str | bytes) -> "DocumentBuilder":
        """Attach the opaque payload returned with search matches."""
        self._pending.payload = payload
        return self

    def reset(self) -> "DocumentBuilder":
        """Discard the pending record."""
        self._pending = PendingDocument()
        return self

    def execute(self) -> "DocumentBuilder":
        """Validate, build, and upsert the pending record, then reset the builder.

        Returns:
            DocumentBuilder: This builder, emptied and ready for the next record.

        Raises:
            MissingIdError: If no id has been set.
            EmptyRecordError: If no text, boolean term, or slot value was added.
        """

        pending = self._pending
        if pending.id is None:
            raise MissingIdError("A record cannot be indexed without an integer id.")
        if not pending.has_content:
            raise EmptyRecordError(
                "A record needs text, boolean terms, or slot values before it can be indexed."
            )

        document = self._build_document(pending)
        self._handle.connect()
        self._handle.database.replace_document(pending.id, document)
        if self._auto_commit:
            self._handle.commit()
        LOGGER.debug("Indexed record %s into %s", pending.id, self._handle.path)

        self._pending = PendingDocument()
        return self

    def _build_document(self, pending: PendingDocument) -> Any:
        engine = self._handle.engine
        document = engine.Document()
        generator = engine.TermGenerator()
        generator.set_document(document)
        generator.set_stemmer(self._handle.stemmer())

        for prefix, value in pending.text_fields.items():
            generator.index_text(value, 1, prefix or "")
        for term in pending.boolean_terms:
            document.add_boolean_term(term)
        for slot, value in pending.slot_values.items():
            document.add_value(slot, engine.sortable_serialise(value))
        if pending.payload is not None:
            document.set_data(pending.payload)
        return document


__all__ = ["BuilderState", "DocumentBuilder", "PendingDocument"]
