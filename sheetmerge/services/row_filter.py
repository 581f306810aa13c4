from __future__ import annotations

from collections.abc import Sequence

from sheetmerge.services.grid_models import CellValue


def cell_to_text(value: CellValue) -> str:
    """Render a cell as trimmed text; missing cells become an empty string."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def is_empty_row(row: Sequence[CellValue] | None) -> bool:
    """Return True when a row has no cells or only blank cells.

    ``0`` and ``False`` count as content; whitespace-only text does not.
    """
    if not row:
        return True
    return all(cell_to_text(cell) == "" for cell in row)
