"""Configuration models describing xapkit settings."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class XapkitBaseModel(BaseModel):
    """Shared configuration for xapkit Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class IndexSettings(XapkitBaseModel):
    """Location and engine options for the managed index.

    Attributes:
        path: Directory holding the Xapian database.
        engine: Dotted import path of the module exposing the Xapian API.
        stem_language: Stemmer language for indexing and query parsing.
        stopwords: Words ignored while parsing queries.
        auto_commit: Whether each indexed record is flushed immediately.
    """

    path: str = "~/.xapkit/index"
    engine: str = "xapian"
    stem_language: str = "english"
    stopwords: List[str] = Field(default_factory=list)
    auto_commit: bool = True


class SlotPrefixSettings(XapkitBaseModel):
    """Range processor bound to a value slot.

    Attributes:
        slot: Value slot number.
        prefix: Marker introducing a range in query text.
        kind: Range processor kind.
    """

    slot: int = Field(ge=0)
    prefix: str
    kind: Literal["numeric"] = "numeric"


class PrefixSettings(XapkitBaseModel):
    """Label mappings loaded into the prefix registry.

    Attributes:
        text: Labels mapped to stemmed text prefixes.
        boolean: Labels mapped to exact-match boolean prefixes.
        slots: Range processors keyed by value slot.
    """

    text: Dict[str, str] = Field(default_factory=dict)
    boolean: Dict[str, str] = Field(default_factory=dict)
    slots: List[SlotPrefixSettings] = Field(default_factory=list)


class QuerySettings(XapkitBaseModel):
    """Defaults applied when executing searches.

    Attributes:
        num_to_fetch: Number of matches requested per page.
        check_at_least: Minimum candidates scanned before estimating totals.
    """

    num_to_fetch: int = Field(default=100, ge=0)
    check_at_least: Optional[int] = Field(default=None, ge=0)


class LoggingSettings(XapkitBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"


class CLIOptions(XapkitBaseModel):
    """CLI presentation defaults.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
    """

    quiet_default: bool = False


class XapkitConfig(XapkitBaseModel):
    """Top-level configuration struct for xapkit.

    Attributes:
        index: Index location and engine options.
        prefixes: Label to prefix mappings.
        query: Search defaults.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    index: IndexSettings = Field(default_factory=IndexSettings)
    prefixes: PrefixSettings = Field(default_factory=PrefixSettings)
    query: QuerySettings = Field(default_factory=QuerySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "XapkitBaseModel",
    "IndexSettings",
    "SlotPrefixSettings",
    "PrefixSettings",
    "QuerySettings",
    "LoggingSettings",
    "CLIOptions",
    "XapkitConfig",
]
