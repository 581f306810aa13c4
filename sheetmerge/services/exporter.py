"""
Export helpers for the unified table.

- encode_workbook: one worksheet, headers on row 1, data rows after, as xlsx bytes
- build_export_filename: ``<label>_<YYYYMMDD>_<HHmm>.xlsx`` from local time
- preview_frame: pandas view of the first rows for on-screen sampling
"""
from __future__ import annotations

import io
from datetime import date, datetime, time
from decimal import Decimal

import pandas as pd
from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.worksheet.worksheet import Worksheet

from sheetmerge.services.grid_models import CellValue, MergeResult
from sheetmerge.services.row_filter import cell_to_text
from sheetmerge.utils.logging import get_logger, log_event

LOGGER = get_logger(__name__)

MIME_XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
DEFAULT_SHEET_NAME = "MergedResults"
_NATIVE_TYPES = (int, float, bool, datetime, date, time, Decimal)


def _export_cell(value: CellValue) -> object:
    if value is None or isinstance(value, _NATIVE_TYPES):
        return value
    text = value if isinstance(value, str) else cell_to_text(value)
    return ILLEGAL_CHARACTERS_RE.sub("", text)


def _append_row(worksheet: Worksheet, row_number: int, values: list[object]) -> None:
    """Append one row, keeping text that starts with ``=`` as a string cell."""
    worksheet.append(values)
    for column, value in enumerate(values, start=1):
        if isinstance(value, str) and value.startswith("="):
            worksheet.cell(row=row_number, column=column).data_type = "s"


def build_export_filename(label: str, now: datetime | None = None) -> str:
    stamp = now or datetime.now()
    base = label.strip() or "merged_report"
    return f"{base}_{stamp:%Y%m%d}_{stamp:%H%M}.xlsx"


def encode_workbook(result: MergeResult, *, sheet_name: str = DEFAULT_SHEET_NAME) -> bytes:
    """Serialize the unified table; ragged rows are written with their own width.

    Text cells are always stored as text, never as formulas. Control characters
    that the xlsx format cannot hold are dropped.
    """
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = (sheet_name or DEFAULT_SHEET_NAME)[:31]
    _append_row(worksheet, 1, [_export_cell(value) for value in result.headers])
    for row_number, row in enumerate(result.rows, start=2):
        _append_row(worksheet, row_number, [_export_cell(value) for value in row])

    buffer = io.BytesIO()
    workbook.save(buffer)
    payload = buffer.getvalue()
    log_event(
        LOGGER,
        "export.workbook",
        sheet=worksheet.title,
        columns=len(result.headers),
        rows=result.row_count,
        size_bytes=len(payload),
    )
    return payload


def _display_labels(headers: tuple[str, ...]) -> list[str]:
    labels: list[str] = []
    seen: set[str] = set()
    for position, header in enumerate(headers, start=1):
        base = header or f"Column {position}"
        label, count = base, 1
        while label in seen:
            count += 1
            label = f"{base} ({count})"
        seen.add(label)
        labels.append(label)
    return labels


def preview_frame(
    result: MergeResult,
    *,
    max_rows: int = 10,
    max_columns: int | None = None,
) -> pd.DataFrame:
    """Text preview aligned to the headers; short rows read as blank cells."""
    headers = result.headers[:max_columns] if max_columns is not None else result.headers
    width = len(headers)
    records = [
        [cell_to_text(row[index]) if index < len(row) else "" for index in range(width)]
        for row in result.rows[:max_rows]
    ]
    return pd.DataFrame(records, columns=_display_labels(headers))
