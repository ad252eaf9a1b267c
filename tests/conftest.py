"""Shared fixtures for xapkit tests."""

from __future__ import annotations

from pathlib import Path
from types import ModuleType
from typing import Iterator

import pytest

from tests import fake_xapian
from xapkit.search import PrefixRegistry


@pytest.fixture
def engine() -> ModuleType:
    """Return the in-memory engine double."""
    return fake_xapian


@pytest.fixture
def index_path(tmp_path: Path) -> Path:
    return tmp_path / "index"


@pytest.fixture(autouse=True)
def _isolate_shared_registry() -> Iterator[None]:
    PrefixRegistry.reset_instance()
    yield
    PrefixRegistry.reset_instance()
