"""Application-wide mapping of query labels to Xapian prefixes and value slots.

A registry is built once at startup and handed to every
:class:`~xapkit.search.query.QueryExecutor`::

    registry = (
        PrefixRegistry()
        .add_boolean_prefix("gender", "XG")
        .add_text_prefix("keyword", "K")
        .add_slot_prefix(0, "year:", RangeProcessorKind.NUMERIC)
    )

Code that cannot thread a registry through may share the lazily created
default from :meth:`PrefixRegistry.get_instance`.
"""

from __future__ import annotations

from enum import Enum
from types import ModuleType
from typing import Any, ClassVar, Optional

from .errors import EmptyLabelError, InvalidRangeProcessorKind, InvalidSlotError, UnknownLabelError
from .handle import load_engine


class RangeProcessorKind(str, Enum):
    """Range processors that may be attached to a value slot."""

    NUMERIC = "numeric"


def validate_slot(slot: Any) -> int:
    """Return ``slot`` when it is a usable value slot number.

    Raises:
        InvalidSlotError: If ``slot`` is not a non-negative integer.
    """

    if isinstance(slot, bool) or not isinstance(slot, int) or slot < 0:
        raise InvalidSlotError(f"Value slots must be non-negative integers, got {slot!r}.")
    return slot


class PrefixRegistry:
    """Hold text, boolean, and slot prefix mappings and apply them to query parsers."""

    _instance: ClassVar[Optional["PrefixRegistry"]] = None

    def __init__(self) -> None:
        self._text: dict[str, str] = {}
        self._boolean: dict[str, str] = {}
        self._slots: dict[int, tuple[str, RangeProcessorKind]] = {}

    @classmethod
    def get_instance(cls) -> "PrefixRegistry":
        """Return the shared registry, creating an empty one on first use."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Discard the shared registry so the next lookup starts empty."""
        cls._instance = None

    def __len__(self) -> int:
        return len(self._text) + len(self._boolean) + len(self._slots)

    @property
    def is_empty(self) -> bool:
        """Return whether no mappings have been registered."""
        return len(self) == 0

    @property
    def text_prefixes(self) -> dict[str, str]:
        """Return a copy of the label to text-prefix mapping."""
        return dict(self._text)

    @property
    def boolean_prefixes(self) -> dict[str, str]:
        """Return a copy of the label to boolean-prefix mapping."""
        return dict(self._boolean)

    @property
    def slot_prefixes(self) -> dict[int, tuple[str, RangeProcessorKind]]:
        """Return a copy of the slot to (prefix, kind) mapping."""
        return dict(self._slots)

    def add_text_prefix(self, label: str, prefix: str) -> "PrefixRegistry":
        """Map ``label`` to a stemmed, positional text prefix."""
        self._text[_require_label(label)] = prefix
        return self

    def add_boolean_prefix(self, label: str, prefix: str) -> "PrefixRegistry":
        """Map ``label`` to an exact-match boolean filter prefix."""
        self._boolean[_require_label(label)] = prefix
        return self

    def add_slot_prefix(
        self,
        slot: int,
        prefix: str,
        kind: RangeProcessorKind | str = RangeProcessorKind.NUMERIC,
    ) -> "PrefixRegistry":
        """Attach a range processor for ``slot`` triggered by ``prefix``.

        Args:
            slot: Value slot holding sortable serialised numbers.
            prefix: Marker that introduces a range in query text (``"year:"``).
            kind: Range processor to use for the slot.

        Returns:
            PrefixRegistry: This registry, for chaining.

        Raises:
            InvalidRangeProcessorKind: If ``kind`` is not a supported processor.
            InvalidSlotError: If ``slot`` is not a non-negative integer.
        """

        resolved = _resolve_kind(kind)
        self._slots[validate_slot(slot)] = (prefix, resolved)
        return self

    def text_prefix(self, label: str) -> str:
        """Return the text prefix registered for ``label``."""
        try:
            return self._text[label]
        except KeyError:
            raise UnknownLabelError(f"No text prefix is registered for {label!r}.") from None

    def boolean_prefix(self, label: str) -> str:
        """Return the boolean prefix registered for ``label``."""
        try:
            return self._boolean[label]
        except KeyError:
            raise UnknownLabelError(f"No boolean prefix is registered for {label!r}.") from None

    def clear(self) -> "PrefixRegistry":
        """Remove every registered mapping."""
        self._text.clear()
        self._boolean.clear()
        self._slots.clear()
        return self

    def configure(self, parser: Any, engine: ModuleType | None = None) -> "PrefixRegistry":
        """Apply every mapping to ``parser``.

        Text prefixes are added first, then boolean prefixes, then range
        processors, each in registration order. Only ``parser`` is modified.

        Args:
            parser: Engine ``QueryParser`` to configure.
            engine: Engine module providing range processor classes; the Xapian
                bindings are imported when omitted and slot prefixes exist.

        Returns:
            PrefixRegistry: This registry, for chaining.
        """

        for label, prefix in self._text.items():
            parser.add_prefix(label, prefix)
        for label, prefix in self._boolean.items():
            parser.add_boolean_prefix(label, prefix)
        if self._slots:
            engine = load_engine(engine)
        for slot, (prefix, kind) in self._slots.items():
            if kind is RangeProcessorKind.NUMERIC:
                parser.add_rangeprocessor(engine.NumberRangeProcessor(slot, prefix))
        return self


def _require_label(label: str) -> str:
    if not label:
        raise EmptyLabelError("Prefix labels must be non-empty strings.")
    return label


def _resolve_kind(kind: Any) -> RangeProcessorKind:
    if isinstance(kind, RangeProcessorKind):
        return kind
    try:
        return RangeProcessorKind(kind)
    except ValueError:
        raise InvalidRangeProcessorKind(
            f"The range processor kind {kind!r} is not supported."
        ) from None


__all__ = ["PrefixRegistry", "RangeProcessorKind", "validate_slot"]
