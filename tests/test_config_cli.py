"""CLI tests for configuration commands."""

import os
from pathlib import Path
from typing import Any

from click.testing import CliRunner

from xapkit.cli import cli
from xapkit.config import ConfigManager


def _env_with_home(tmp_path: Path) -> dict[str, Any]:
    env = dict(os.environ)
    env["HOME"] = str(tmp_path)
    return env


def _config_path(tmp_path: Path) -> Path:
    return tmp_path / ".xapkit" / "config.yaml"


def test_config_view_creates_and_displays_config(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["config", "view", "--no-env"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0
    assert "stem_language" in result.output
    assert _config_path(tmp_path).exists()


def test_config_set_updates_value_and_writes_diff(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["config", "set", "prefixes.text.title", "--value", "S"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0
    assert "Updated prefixes.text.title" in result.output

    config = ConfigManager(config_path=_config_path(tmp_path)).load(include_env=False)
    assert config.prefixes.text == {"title": "S"}


def test_config_set_rejects_invalid_value(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["config", "set", "query.num_to_fetch", "--value", "many"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code != 0
    assert "Invalid configuration values" in result.output


def test_config_edit_applies_changes(tmp_path: Path, monkeypatch) -> None:
    runner = CliRunner()
    manager = ConfigManager(config_path=_config_path(tmp_path))
    manager.ensure_exists()

    def _mock_edit(text: str, **_: Any) -> str:
        return text.replace("stem_language: english", "stem_language: french")

    monkeypatch.setattr("xapkit.cli.click.edit", _mock_edit)

    result = runner.invoke(cli, ["config", "edit"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0
    assert "updated" in result.output.lower()
    assert manager.load(include_env=False).index.stem_language == "french"


def test_config_edit_rejects_non_mapping(tmp_path: Path, monkeypatch) -> None:
    runner = CliRunner()
    monkeypatch.setattr("xapkit.cli.click.edit", lambda text, **_: "- a list")

    result = runner.invoke(cli, ["config", "edit"], env=_env_with_home(tmp_path))

    assert result.exit_code != 0
    assert "top-level mapping" in result.output
