"""Merge configuration sources into a validated :class:`XapkitConfig`."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Mapping

from pydantic import ValidationError

from .exceptions import ConfigError
from .models import XapkitConfig


def resolve_with_precedence(
    *,
    defaults: XapkitConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> XapkitConfig:
    """Layer file, environment, and CLI overrides over ``defaults``.

    Later sources win. Keys may be nested mappings or dotted paths such as
    ``"index.path"``.

    Raises:
        ConfigError: If a source is malformed or the merged values fail validation.
    """
    merged = defaults.model_dump(mode="python")
    for name, source in (
        ("file", file_overrides),
        ("environment", env_overrides),
        ("cli", cli_overrides),
    ):
        if source is not None:
            merged = deep_merge(merged, _expand_dotted(source, source_name=name))

    try:
        return XapkitConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def assign_path(target: dict[str, Any], path: list[str], value: Any) -> None:
    """Set ``value`` at the nested ``path`` inside ``target``, creating mappings.

    Raises:
        ConfigError: If a non-mapping value sits on the path.
    """
    node = target
    for segment in path[:-1]:
        child = node.setdefault(segment, {})
        if not isinstance(child, dict):
            raise ConfigError(f"Cannot assign {'.'.join(path)}: '{segment}' is not a mapping.")
        node = child
    node[path[-1]] = value


def deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``base`` recursively updated with ``overrides`` without mutating either."""
    merged = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


def _expand_dotted(source: Mapping[str, Any], *, source_name: str) -> dict[str, Any]:
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{source_name.capitalize()} overrides must be a mapping.")

    expanded: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{source_name.capitalize()} override keys must be strings.")
        if isinstance(value, MappingABC):
            value = _expand_dotted(value, source_name=source_name)
        path = key.split(".")
        nested: dict[str, Any] = {}
        assign_path(nested, path, value)
        expanded = deep_merge(expanded, nested)
    return expanded


__all__ = ["resolve_with_precedence", "assign_path", "deep_merge"]
