from __future__ import annotations

from dataclasses import dataclass

from sheetmerge.models.workbook import FileEntry, SheetConfig
from sheetmerge.services.grid_models import DecodedFile
from sheetmerge.services.row_filter import cell_to_text


@dataclass(frozen=True)
class SelectedSheet:
    file_id: str
    file_name: str
    sheet_name: str

    @property
    def key(self) -> str:
        return f"{self.file_id}-{self.sheet_name}"


def build_file_entry(decoded: DecodedFile, *, preview_rows: int = 10) -> FileEntry:
    """Default configuration for a freshly decoded file: every sheet enabled,
    headers on row 1, data from row 2."""
    sheets = tuple(
        SheetConfig(name=name, preview_rows=grid[:preview_rows])
        for name, grid in decoded.sheets.items()
    )
    return FileEntry(
        id=decoded.id,
        name=decoded.name,
        size=decoded.size,
        last_modified=decoded.last_modified,
        sheets=sheets,
    )


def sheet_preview(sheet: SheetConfig, *, columns: int = 3) -> list[tuple[str, str]]:
    """(column label, value) pairs for the first data row found in the preview.

    Labels come from the configured header row, falling back to ``COL``; blank
    values render as ``-``. Returns an empty list when the data start row lies
    outside the preview.
    """
    preview = sheet.preview_rows
    data_idx = sheet.data_start_row - 1
    if data_idx >= len(preview):
        return []
    header_idx = sheet.header_row - 1
    header = preview[header_idx] if header_idx < len(preview) else ()

    pairs: list[tuple[str, str]] = []
    for position, value in enumerate(preview[data_idx][:columns]):
        label = cell_to_text(header[position]) if position < len(header) else ""
        pairs.append((label or "COL", cell_to_text(value) or "-"))
    return pairs


class ConfigurationStore:
    """Ordered per-file sheet configuration edited by the user."""

    def __init__(self) -> None:
        self._files: list[FileEntry] = []

    @property
    def files(self) -> tuple[FileEntry, ...]:
        return tuple(self._files)

    def __len__(self) -> int:
        return len(self._files)

    def _index(self, file_id: str) -> int:
        for position, entry in enumerate(self._files):
            if entry.id == file_id:
                return position
        raise KeyError(f"File {file_id} is not loaded")

    def add_file(self, entry: FileEntry) -> FileEntry:
        if any(existing.id == entry.id for existing in self._files):
            raise ValueError(f"File {entry.id} is already loaded")
        self._files.append(entry)
        return entry

    def get_file(self, file_id: str) -> FileEntry:
        return self._files[self._index(file_id)]

    def _update_sheet(self, file_id: str, sheet_name: str, **updates: object) -> SheetConfig:
        position = self._index(file_id)
        updated = self._files[position].replace_sheet(sheet_name, **updates)
        self._files[position] = updated
        return updated.get_sheet(sheet_name)

    def toggle_sheet(self, file_id: str, sheet_name: str) -> SheetConfig:
        current = self.get_file(file_id).get_sheet(sheet_name)
        return self._update_sheet(file_id, sheet_name, enabled=not current.enabled)

    def set_sheet_enabled(self, file_id: str, sheet_name: str, enabled: bool) -> SheetConfig:
        return self._update_sheet(file_id, sheet_name, enabled=bool(enabled))

    def set_header_row(self, file_id: str, sheet_name: str, row_number: int) -> SheetConfig:
        return self._update_sheet(file_id, sheet_name, header_row=max(1, int(row_number)))

    def set_data_start_row(self, file_id: str, sheet_name: str, row_number: int) -> SheetConfig:
        return self._update_sheet(file_id, sheet_name, data_start_row=max(1, int(row_number)))

    def remove_file(self, file_id: str) -> FileEntry | None:
        try:
            position = self._index(file_id)
        except KeyError:
            return None
        return self._files.pop(position)

    def selected_sheets(self) -> list[SelectedSheet]:
        return [
            SelectedSheet(file_id=entry.id, file_name=entry.name, sheet_name=sheet.name)
            for entry in self._files
            for sheet in entry.enabled_sheets
        ]

    def sheet_count(self) -> int:
        return sum(len(entry.sheets) for entry in self._files)
