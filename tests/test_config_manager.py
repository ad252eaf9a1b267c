"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from xapkit.config import ConfigError, ConfigManager, XapkitConfig, resolve_with_precedence
from xapkit.config.resolver import assign_path


def _fresh_manager(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigManager:
    monkeypatch.setenv("HOME", str(tmp_path))
    return ConfigManager()


def test_ensure_exists_creates_default_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    path = manager.ensure_exists()

    assert path == tmp_path / ".xapkit" / "config.yaml"
    text = path.read_text(encoding="utf-8")
    assert "xapkit configuration file" in text
    assert "Last updated:" in text

    config = manager.load(include_env=False)
    assert isinstance(config, XapkitConfig)
    assert config.index.engine == "xapian"
    assert config.query.num_to_fetch == 100


def test_resolve_with_precedence_respects_order(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = ConfigManager(
        tmp_path / "config.yaml",
        env={
            "XAPKIT__INDEX__STEM_LANGUAGE": "german",
            "XAPKIT__QUERY__NUM_TO_FETCH": "25",
            "UNRELATED": "1",
        },
    )
    manager.save({"index": {"path": "/srv/catalog", "stem_language": "french"}})

    config = manager.load(cli_overrides={"query.num_to_fetch": 10})

    assert config.index.path == "/srv/catalog"
    # Environment beats the file, CLI beats the environment
    assert config.index.stem_language == "german"
    assert config.query.num_to_fetch == 10


def test_env_overrides_parse_yaml_values(tmp_path: Path) -> None:
    manager = ConfigManager(
        tmp_path / "config.yaml",
        env={
            "XAPKIT__PREFIXES__TEXT": "{title: S, author: A}",
            "XAPKIT__INDEX__STOPWORDS": "[the, a]",
            "XAPKIT__INDEX__AUTO_COMMIT": "false",
        },
    )

    config = manager.load()

    assert config.prefixes.text == {"title": "S", "author": "A"}
    assert config.index.stopwords == ["the", "a"]
    assert config.index.auto_commit is False


def test_slot_prefixes_round_trip_through_file(tmp_path: Path) -> None:
    manager = ConfigManager(tmp_path / "config.yaml", env={})
    manager.save({"prefixes": {"slots": [{"slot": 0, "prefix": "year:"}]}})

    config = manager.load()

    assert config.prefixes.slots[0].slot == 0
    assert config.prefixes.slots[0].kind == "numeric"


def test_invalid_yaml_raises_config_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.config_path.write_text("- not-a-mapping", encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.load()


@pytest.mark.parametrize(
    "overrides",
    [
        {"query": {"num_to_fetch": -1}},
        {"prefixes": {"slots": [{"slot": 0, "prefix": "year:", "kind": "date"}]}},
        {"index": {"unknown": True}},
        {"logging": {"level": "LOUD"}},
    ],
)
def test_resolve_with_precedence_invalid_value_raises(overrides) -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(defaults=XapkitConfig(), file_overrides=overrides)


def test_assign_path_rejects_non_mapping_segments() -> None:
    target = {"index": "flat"}

    with pytest.raises(ConfigError):
        assign_path(target, ["index", "path"], "/tmp/x")
