"""Document builder tests."""

from __future__ import annotations

from pathlib import Path
from types import ModuleType

import pytest

from xapkit.search import (
    AccessMode,
    BuilderState,
    DocumentBuilder,
    EmptyRecordError,
    IndexHandle,
    InvalidIdError,
    InvalidSlotError,
    MissingIdError,
    UnsupportedAccessModeError,
)


def _builder(index_path: Path, engine: ModuleType, **kwargs) -> DocumentBuilder:
    return DocumentBuilder.open(index_path, engine=engine, **kwargs)


def _terms(document) -> set[str]:
    return {item.term.decode("utf-8") for item in document.termlist()}


@pytest.mark.parametrize("value", [0, -4, "7", 2.0, True, None])
def test_set_id_rejects_non_positive_integers(
    index_path: Path, engine: ModuleType, value
) -> None:
    builder = _builder(index_path, engine)

    with pytest.raises(InvalidIdError):
        builder.set_id(value)
    assert builder.pending.id is None


def test_execute_without_id_fails(index_path: Path, engine: ModuleType) -> None:
    builder = _builder(index_path, engine).add_text("red bicycle")

    with pytest.raises(MissingIdError):
        builder.execute()
    with pytest.raises(InvalidIdError):
        builder.execute()
    assert not builder.handle.is_connected


def test_execute_without_content_fails(index_path: Path, engine: ModuleType) -> None:
    builder = _builder(index_path, engine).set_id(1).set_data("payload only")

    with pytest.raises(EmptyRecordError):
        builder.execute()
    assert not builder.handle.is_connected


def test_builder_state_transitions(index_path: Path, engine: ModuleType) -> None:
    builder = _builder(index_path, engine)
    assert builder.state is BuilderState.EMPTY

    builder.set_id(1).add_boolean_term("XCred")
    assert builder.state is BuilderState.ACCUMULATING

    assert builder.execute() is builder
    assert builder.state is BuilderState.EMPTY
    assert builder.pending.id is None


def test_accumulation_semantics(index_path: Path, engine: ModuleType) -> None:
    builder = (
        _builder(index_path, engine)
        .set_id(3)
        .add_text("first")
        .add_text("second")
        .add_text("blue", prefix="S")
        .add_boolean_term("XCred")
        .add_boolean_term("XCred")
        .add_to_slot(0, 10)
        .add_to_slot(0, 20)
        .set_data("one")
        .set_data("two")
    )

    pending = builder.pending

    assert pending.text_fields == {None: "second", "S": "blue"}
    assert pending.boolean_terms == ["XCred", "XCred"]
    assert pending.slot_values == {0: 20}
    assert pending.payload == "two"


def test_pending_snapshot_is_a_copy(index_path: Path, engine: ModuleType) -> None:
    builder = _builder(index_path, engine).set_id(1).add_boolean_term("XA")

    snapshot = builder.pending
    snapshot.boolean_terms.append("XB")

    assert builder.pending.boolean_terms == ["XA"]


def test_add_to_slot_rejects_negative_slot(index_path: Path, engine: ModuleType) -> None:
    with pytest.raises(InvalidSlotError):
        _builder(index_path, engine).add_to_slot(-1, 5)


def test_execute_indexes_all_content(index_path: Path, engine: ModuleType) -> None:
    builder = _builder(index_path, engine)

    builder.set_id(1).add_text("red bicycles", prefix="S").add_text("fast").add_boolean_term(
        "XCred"
    ).add_to_slot(2, 1999).set_data(b"\x00blob").execute()

    document = builder.handle.get_document(1)
    terms = _terms(document)
    assert {"Sred", "Sbicycles", "ZSbicycle", "fast", "Zfast", "XCred"} <= terms
    assert engine.sortable_unserialise(document.get_value(2)) == 1999
    assert document.get_data() == b"\x00blob"


def test_text_uses_handle_stem_language(index_path: Path, engine: ModuleType) -> None:
    handle = IndexHandle(index_path, engine=engine).set_read_write().set_stem_language("none")
    builder = DocumentBuilder(handle)

    builder.set_id(1).add_text("bicycles").execute()

    assert "Zbicycles" in _terms(handle.get_document(1))


def test_last_write_wins_in_committed_document(index_path: Path, engine: ModuleType) -> None:
    builder = _builder(index_path, engine)

    builder.set_id(5).add_text("apple", prefix="S").add_text("pear", prefix="S").add_to_slot(
        0, 1
    ).add_to_slot(0, 2).execute()

    document = builder.handle.get_document(5)
    terms = _terms(document)
    assert "Spear" in terms
    assert "Sapple" not in terms
    assert engine.sortable_unserialise(document.get_value(0)) == 2


def test_replacing_same_id_overwrites(index_path: Path, engine: ModuleType) -> None:
    builder = _builder(index_path, engine)

    builder.set_id(9).add_text("old words").execute()
    builder.set_id(9).add_text("new words").execute()

    assert builder.handle.doc_count == 1
    terms = _terms(builder.handle.get_document(9))
    assert "new" in terms
    assert "old" not in terms


def test_auto_commit_flushes_each_record(index_path: Path, engine: ModuleType) -> None:
    builder = _builder(index_path, engine)

    builder.set_id(1).add_text("alpha").execute()

    assert builder.handle.database.commits == 1
    assert 1 in engine.STORES[str(index_path)]


def test_manual_commit_defers_flush(index_path: Path, engine: ModuleType) -> None:
    builder = _builder(index_path, engine, auto_commit=False)

    builder.set_id(1).add_text("alpha").execute()
    builder.set_id(2).add_text("beta").execute()

    assert engine.STORES[str(index_path)] == {}
    builder.handle.commit()
    assert set(engine.STORES[str(index_path)]) == {1, 2}


def test_failed_build_leaves_index_and_pending_state_untouched(
    index_path: Path, engine: ModuleType
) -> None:
    builder = _builder(index_path, engine)
    builder.set_id(1).add_text("kept").execute()

    builder.set_id(2).add_text("broken").add_to_slot(0, "not a number")
    with pytest.raises(ValueError):
        builder.execute()

    assert builder.handle.doc_count == 1
    assert builder.pending.id == 2
    assert builder.pending.slot_values == {0: "not a number"}

    builder.add_to_slot(0, 42).execute()
    assert builder.handle.doc_count == 2


def test_reset_discards_pending_record(index_path: Path, engine: ModuleType) -> None:
    builder = _builder(index_path, engine).set_id(1).add_text("draft")

    builder.reset()

    assert builder.state is BuilderState.EMPTY
    with pytest.raises(MissingIdError):
        builder.execute()


def test_plain_handle_creates_missing_index(index_path: Path, engine: ModuleType) -> None:
    builder = DocumentBuilder(IndexHandle(index_path, engine=engine))

    builder.set_id(2).add_text("red bicycle").execute()

    assert builder.handle.access_mode is AccessMode.READ_WRITE
    assert builder.handle.doc_count == 1
    assert 2 in engine.STORES[str(index_path)]


def test_plain_handle_writes_to_existing_index(index_path: Path, engine: ModuleType) -> None:
    seeded = _builder(index_path, engine)
    seeded.set_id(1).add_text("blue bicycle").execute()
    seeded.handle.close()

    builder = DocumentBuilder(IndexHandle(index_path, engine=engine))
    builder.set_id(2).add_text("red bicycle").execute()

    assert builder.handle.doc_count == 2


def test_connected_read_only_handle_is_rejected(index_path: Path, engine: ModuleType) -> None:
    seeded = _builder(index_path, engine)
    seeded.set_id(1).add_text("blue bicycle").execute()
    seeded.handle.close()
    handle = IndexHandle(index_path, engine=engine).connect()

    with pytest.raises(UnsupportedAccessModeError):
        DocumentBuilder(handle)
