"""Prefix registry, document builder, and query executor over Xapian."""

from .errors import (
    EmptyLabelError,
    EmptyQueryError,
    EmptyRecordError,
    EngineUnavailableError,
    HandleConnectedError,
    InvalidIdError,
    InvalidRangeProcessorKind,
    InvalidSlotError,
    InvalidWindowError,
    MissingIdError,
    NoResultSetError,
    UnknownLabelError,
    UnsupportedAccessModeError,
    XapkitError,
)
from .handle import AccessMode, IndexHandle, load_engine
from .lifecycle import drop_index, open_builder, open_executor, open_handle, registry_from_settings
from .prefixes import PrefixRegistry, RangeProcessorKind
from .query import CursorState, Match, MatchCursor, QueryExecutor
from .records import BuilderState, DocumentBuilder, PendingDocument
from .text import normalize_text

__all__ = [
    "AccessMode",
    "IndexHandle",
    "load_engine",
    "PrefixRegistry",
    "RangeProcessorKind",
    "DocumentBuilder",
    "PendingDocument",
    "BuilderState",
    "QueryExecutor",
    "Match",
    "MatchCursor",
    "CursorState",
    "normalize_text",
    "registry_from_settings",
    "open_handle",
    "open_builder",
    "open_executor",
    "drop_index",
    "XapkitError",
    "InvalidIdError",
    "MissingIdError",
    "EmptyRecordError",
    "InvalidSlotError",
    "EmptyLabelError",
    "UnknownLabelError",
    "InvalidRangeProcessorKind",
    "EmptyQueryError",
    "InvalidWindowError",
    "NoResultSetError",
    "UnsupportedAccessModeError",
    "HandleConnectedError",
    "EngineUnavailableError",
]
