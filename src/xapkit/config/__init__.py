"""Configuration management for xapkit."""

from __future__ import annotations

import os
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import XapkitConfig
from .resolver import assign_path, resolve_with_precedence

DEFAULT_CONFIG_PATH = Path("~/.xapkit/config.yaml")
ENV_PREFIX = "XAPKIT__"
_CONFIG_HEADER = textwrap.dedent(
    """\
    # xapkit configuration file
    # Edit with `xapkit config edit` or update single keys with `xapkit config set`.
    # Environment variables named XAPKIT__SECTION__KEY override values below.
    """
)


class ConfigManager:
    """Read and write the YAML configuration file and resolve effective settings."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        """Return the resolved configuration path."""
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
    ) -> XapkitConfig:
        """Return the effective configuration.

        Args:
            cli_overrides: Dotted-key overrides supplied on the command line.
            include_env: Whether ``XAPKIT__`` environment variables are applied.
            ensure_file: Whether to write a default file when none exists.

        Returns:
            XapkitConfig: Validated configuration.

        Raises:
            ConfigError: If the file cannot be parsed or values are invalid.
        """
        if ensure_file:
            self.ensure_exists()

        return resolve_with_precedence(
            defaults=XapkitConfig(),
            file_overrides=self.load_file_overrides(),
            env_overrides=self._env_overrides() if include_env else None,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the raw mapping stored in the configuration file."""
        if not self._config_path.exists():
            return {}

        try:
            raw = yaml.safe_load(self._config_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        return raw

    def save(self, config: XapkitConfig | Mapping[str, Any]) -> None:
        """Write ``config`` to disk with a header and timestamp."""
        if isinstance(config, XapkitConfig):
            data = config.model_dump(mode="python")
        else:
            data = dict(config)

        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        body = yaml.safe_dump(data, sort_keys=False)
        self._config_path.write_text(
            f"{_CONFIG_HEADER}# Last updated: {stamp}\n{body}", encoding="utf-8"
        )

    def ensure_exists(self) -> Path:
        """Create the configuration file with defaults when it is missing."""
        if not self._config_path.exists():
            self.save(XapkitConfig())
        return self._config_path

    def read_text(self) -> str:
        """Return the current configuration file contents."""
        if not self._config_path.exists():
            return ""
        return self._config_path.read_text(encoding="utf-8")

    def _env_overrides(self) -> dict[str, Any]:
        overrides: dict[str, Any] = {}
        for key, raw_value in self._env.items():
            if not key.startswith(ENV_PREFIX) or len(key) == len(ENV_PREFIX):
                continue
            try:
                value = yaml.safe_load(raw_value)
            except yaml.YAMLError:
                value = raw_value
            path = [segment.lower() for segment in key[len(ENV_PREFIX) :].split("__")]
            assign_path(overrides, path, value)
        return overrides


__all__ = [
    "ConfigManager",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "XapkitConfig",
    "resolve_with_precedence",
]
