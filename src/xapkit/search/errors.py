"""Errors raised by the xapkit search layer.

Engine-originated failures (missing databases, query syntax errors, I/O
problems) are not represented here; they propagate from the engine untouched.
"""


class XapkitError(Exception):
    """Base exception for validation failures detected before reaching the engine."""


class InvalidIdError(XapkitError):
    """Raised when a record id is not a positive integer."""


class MissingIdError(InvalidIdError):
    """Raised when a record is committed without an id."""


class EmptyRecordError(XapkitError):
    """Raised when a record has no text, boolean terms, or slot values."""


class InvalidSlotError(XapkitError):
    """Raised when a value slot number is not a non-negative integer."""


class EmptyLabelError(XapkitError):
    """Raised when a prefix label is empty."""


class UnknownLabelError(XapkitError):
    """Raised when a label is not present in the prefix registry."""


class InvalidRangeProcessorKind(XapkitError):
    """Raised when a slot prefix is registered with an unsupported range processor."""


class EmptyQueryError(XapkitError):
    """Raised when a search is executed without query text."""


class InvalidWindowError(XapkitError, ValueError):
    """Raised when a result window has a negative size, offset, or scan threshold."""


class NoResultSetError(XapkitError):
    """Raised when results are requested before any query has executed."""


class UnsupportedAccessModeError(XapkitError):
    """Raised when an index handle is configured with an unknown access mode."""


class HandleConnectedError(XapkitError):
    """Raised when reconfiguring an index handle after its connection is open."""


class EngineUnavailableError(XapkitError):
    """Raised when the configured engine module cannot be imported."""


__all__ = [
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
