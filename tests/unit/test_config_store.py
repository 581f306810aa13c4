from __future__ import annotations

import pytest

from sheetmerge.models.workbook import SheetConfig
from sheetmerge.services.config_store import ConfigurationStore, build_file_entry, sheet_preview
from sheetmerge.services.grid_models import DecodedFile


@pytest.fixture
def store(make_entry) -> ConfigurationStore:
    store = ConfigurationStore()
    store.add_file(make_entry("f1", ["North", "South"], name="sales.xlsx"))
    store.add_file(make_entry("f2", ["Budget"], name="budget.csv"))
    return store


def test_toggle_sheet_flips_enabled_only(store: ConfigurationStore) -> None:
    store.set_header_row("f1", "North", 3)

    toggled = store.toggle_sheet("f1", "North")

    assert toggled.enabled is False
    assert toggled.header_row == 3
    assert toggled.data_start_row == 2
    assert store.toggle_sheet("f1", "North").enabled is True


def test_row_numbers_clamp_to_one(store: ConfigurationStore) -> None:
    assert store.set_header_row("f1", "South", 0).header_row == 1
    assert store.set_header_row("f1", "South", -4).header_row == 1
    assert store.set_data_start_row("f1", "South", -1).data_start_row == 1
    assert store.set_data_start_row("f1", "South", 250).data_start_row == 250


def test_header_and_data_rows_are_independent(store: ConfigurationStore) -> None:
    store.set_header_row("f1", "North", 7)
    sheet = store.set_data_start_row("f1", "North", 2)

    assert sheet.header_row == 7
    assert sheet.data_start_row == 2


def test_edits_replace_entries_instead_of_mutating(store: ConfigurationStore) -> None:
    before = store.get_file("f1")

    store.toggle_sheet("f1", "South")

    assert before.get_sheet("South").enabled is True
    assert store.get_file("f1").get_sheet("South").enabled is False


def test_unknown_file_or_sheet_raises_key_error(store: ConfigurationStore) -> None:
    with pytest.raises(KeyError):
        store.toggle_sheet("missing", "North")
    with pytest.raises(KeyError):
        store.set_header_row("f1", "West", 2)


def test_remove_file_returns_entry_and_keeps_order(store: ConfigurationStore, make_entry) -> None:
    store.add_file(make_entry("f3", ["Extra"]))

    removed = store.remove_file("f2")

    assert removed is not None and removed.id == "f2"
    assert [entry.id for entry in store.files] == ["f1", "f3"]
    assert store.remove_file("f2") is None


def test_add_file_rejects_duplicate_ids(store: ConfigurationStore, make_entry) -> None:
    with pytest.raises(ValueError):
        store.add_file(make_entry("f1", ["Other"]))


def test_selected_sheets_and_counts(store: ConfigurationStore) -> None:
    store.toggle_sheet("f1", "South")

    selected = store.selected_sheets()

    assert [(item.file_name, item.sheet_name) for item in selected] == [
        ("sales.xlsx", "North"),
        ("budget.csv", "Budget"),
    ]
    assert selected[0].key == "f1-North"
    assert store.sheet_count() == 3
    assert len(store) == 2


def test_build_file_entry_uses_defaults_and_bounded_preview() -> None:
    grid = tuple((f"r{index}",) for index in range(1, 16))
    decoded = DecodedFile(
        id="abc",
        name="report.xlsx",
        size=2048,
        sheets={"Data": grid, "Empty": ()},
    )

    entry = build_file_entry(decoded, preview_rows=10)

    assert entry.id == "abc"
    assert entry.size_kb == 2.0
    assert [sheet.name for sheet in entry.sheets] == ["Data", "Empty"]
    data = entry.get_sheet("Data")
    assert (data.enabled, data.header_row, data.data_start_row) == (True, 1, 2)
    assert len(data.preview_rows) == 10
    assert data.preview_rows[-1] == ("r10",)
    assert entry.get_sheet("Empty").preview_rows == ()


def test_sheet_preview_pairs_headers_with_first_data_row() -> None:
    sheet = SheetConfig(
        name="Data",
        preview_rows=[["Name", None, "City", "Zip"], ["Al", "", "Oslo", "0150"]],
    )

    assert sheet_preview(sheet) == [("Name", "Al"), ("COL", "-"), ("City", "Oslo")]


def test_sheet_preview_outside_preview_window() -> None:
    sheet = SheetConfig(name="Data", data_start_row=12, preview_rows=[["Name"], ["Al"]])
    assert sheet_preview(sheet) == []
