"""Construct search components from configuration and manage index directories."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from xapkit.config.models import IndexSettings, PrefixSettings

from .handle import AccessMode, IndexHandle
from .prefixes import PrefixRegistry
from .query import QueryExecutor
from .records import DocumentBuilder

LOGGER = logging.getLogger(__name__)


def registry_from_settings(
    settings: PrefixSettings,
    registry: PrefixRegistry | None = None,
) -> PrefixRegistry:
    """Load configured label mappings into ``registry``.

    Args:
        settings: Prefix section of the configuration.
        registry: Registry to populate; a new one is created when omitted.

    Returns:
        PrefixRegistry: Registry holding the configured mappings.
    """

    target = registry if registry is not None else PrefixRegistry()
    for label, prefix in settings.text.items():
        target.add_text_prefix(label, prefix)
    for label, prefix in settings.boolean.items():
        target.add_boolean_prefix(label, prefix)
    for slot in settings.slots:
        target.add_slot_prefix(slot.slot, slot.prefix, slot.kind)
    return target


def open_handle(settings: IndexSettings, *, writable: bool = False) -> IndexHandle:
    """Return an unconnected handle configured from ``settings``."""
    handle = IndexHandle(
        settings.path,
        access_mode=AccessMode.READ_WRITE if writable else AccessMode.READ_ONLY,
        stem_language=settings.stem_language,
        engine=settings.engine,
    )
    if settings.stopwords:
        handle.set_stopwords(settings.stopwords)
    return handle


def open_builder(settings: IndexSettings) -> DocumentBuilder:
    """Return a document builder writing to the configured index."""
    return DocumentBuilder(open_handle(settings, writable=True), auto_commit=settings.auto_commit)


def open_executor(settings: IndexSettings, registry: PrefixRegistry) -> QueryExecutor:
    """Return a query executor reading the configured index through ``registry``."""
    return QueryExecutor(open_handle(settings), registry)


def drop_index(path: str | Path) -> bool:
    """Delete the index directory at ``path``.

    Returns:
        bool: ``True`` when a directory was removed.
    """

    target = Path(path).expanduser()
    if not target.exists():
        return False
    shutil.rmtree(target)
    LOGGER.info("Removed index at %s", target)
    return True


__all__ = [
    "registry_from_settings",
    "open_handle",
    "open_builder",
    "open_executor",
    "drop_index",
]
