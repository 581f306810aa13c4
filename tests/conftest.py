from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pytest

from sheetmerge.models.workbook import FileEntry, SheetConfig
from sheetmerge.utils.config import MergeConfig
from tests.fixtures.sheet_sources.factory import (
    DEFAULT_SHEETS,
    SheetDefinition,
    build_workbook,
    csv_bytes,
    workbook_bytes,
)


@pytest.fixture
def temp_data_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    data_root = tmp_path / "data"
    data_root.mkdir()
    monkeypatch.setenv("DATA_ROOT", str(data_root))
    return data_root


@pytest.fixture
def merge_config() -> MergeConfig:
    return MergeConfig(
        max_bytes=1024 * 1024,
        allowed_types=("xlsx", "xlsm", "xls", "csv"),
        preview_rows=10,
        decode_concurrency=2,
        export_label="merged_report",
        export_sheet_name="MergedResults",
    )


@pytest.fixture
def make_entry():
    """Build a FileEntry whose sheets are given as (name, overrides) pairs."""

    def _builder(
        file_id: str,
        sheets: Sequence[tuple[str, dict[str, object]]] | Sequence[str],
        *,
        name: str | None = None,
    ) -> FileEntry:
        configs: list[SheetConfig] = []
        for item in sheets:
            if isinstance(item, str):
                configs.append(SheetConfig(name=item))
            else:
                sheet_name, overrides = item
                configs.append(SheetConfig(name=sheet_name, **overrides))
        return FileEntry(id=file_id, name=name or f"{file_id}.xlsx", sheets=tuple(configs))

    return _builder


@pytest.fixture
def sheet_fixture_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "sheet_sources"
    directory.mkdir(parents=True, exist_ok=True)
    return directory


@pytest.fixture
def sheet_definitions() -> list[SheetDefinition]:
    return list(DEFAULT_SHEETS)


@pytest.fixture
def workbook_builder(sheet_fixture_dir: Path):
    def _builder(
        *,
        sheets: Sequence[SheetDefinition] | None = None,
        filename: str = "multi_sheet.xlsx",
    ) -> Path:
        return build_workbook(sheet_fixture_dir / filename, sheets=sheets)

    return _builder


@pytest.fixture
def default_workbook_bytes() -> bytes:
    return workbook_bytes()


@pytest.fixture
def default_csv_bytes() -> bytes:
    return csv_bytes()
