from __future__ import annotations

from collections.abc import Mapping, Sequence

from sheetmerge.models.workbook import FileEntry, SheetConfig
from sheetmerge.services.grid_models import CellValue, Grid, GridBundle, MergeResult
from sheetmerge.services.row_filter import cell_to_text, is_empty_row
from sheetmerge.utils.logging import get_logger, log_debug_event, log_event

LOGGER = get_logger(__name__)


def _skip(file: FileEntry, sheet: SheetConfig, reason: str) -> None:
    log_debug_event(
        LOGGER,
        "merge.sheet_skipped",
        file_id=file.id,
        file_name=file.name,
        sheet=sheet.name,
        reason=reason,
    )


def header_values(grid: Grid, header_row: int) -> tuple[str, ...] | None:
    """Trimmed header cells at a 1-based row number, or None when out of range."""
    header_idx = header_row - 1
    if header_idx < 0 or header_idx >= len(grid):
        return None
    return tuple(cell_to_text(cell) for cell in grid[header_idx])


def data_rows(grid: Grid, data_start_row: int) -> list[tuple[CellValue, ...]]:
    """Non-empty rows from a 1-based start row through the end of the grid."""
    start_idx = max(data_start_row - 1, 0)
    return [tuple(row) for row in grid[start_idx:] if not is_empty_row(row)]


def merge_sheets(
    files: Sequence[FileEntry],
    grid_lookup: Mapping[str, GridBundle],
) -> MergeResult:
    """Concatenate the configured data rows of every enabled sheet.

    Files, sheets and rows keep their input order. Headers come from the first
    sheet whose header row is inside its grid; later header rows are ignored.
    Files without grids, unknown sheets and out-of-range header rows contribute
    nothing. Rows are copied as-is, so their width may differ from the headers.
    """
    headers: tuple[str, ...] = ()
    rows: list[tuple[CellValue, ...]] = []
    sheets_used = 0

    for file in files:
        bundle = grid_lookup.get(file.id)
        if bundle is None:
            log_debug_event(LOGGER, "merge.file_skipped", file_id=file.id, file_name=file.name)
            continue

        for sheet in file.sheets:
            if not sheet.enabled:
                _skip(file, sheet, "disabled")
                continue
            grid = bundle.get(sheet.name)
            if grid is None:
                _skip(file, sheet, "missing_sheet")
                continue

            sheet_headers = header_values(grid, sheet.header_row)
            if sheet_headers is None:
                _skip(file, sheet, "header_out_of_range")
                continue
            if not headers:
                headers = sheet_headers

            rows.extend(data_rows(grid, sheet.data_start_row))
            sheets_used += 1

    log_event(
        LOGGER,
        "merge.run",
        files=len(files),
        sheets=sheets_used,
        columns=len(headers),
        rows=len(rows),
    )
    return MergeResult(headers=headers, rows=tuple(rows))
