from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class SheetConfig(BaseModel):
    """Merge parameters for one sheet; row numbers are 1-based."""

    name: str
    enabled: bool = True
    header_row: int = Field(default=1, ge=1)
    data_start_row: int = Field(default=2, ge=1)
    preview_rows: tuple[tuple[Any, ...], ...] = Field(default_factory=tuple)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("preview_rows", mode="before")
    @classmethod
    def _freeze_rows(cls, rows: Any) -> tuple[tuple[Any, ...], ...]:
        if rows is None:
            return ()
        return tuple(tuple(row or ()) for row in rows)


class FileEntry(BaseModel):
    id: str
    name: str
    size: int = Field(default=0, ge=0)
    last_modified: datetime | None = None
    sheets: tuple[SheetConfig, ...] = Field(default_factory=tuple)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def _unique_sheet_names(self) -> "FileEntry":
        seen: set[str] = set()
        for sheet in self.sheets:
            if sheet.name in seen:
                raise ValueError(f"Duplicate sheet name '{sheet.name}' in {self.name}")
            seen.add(sheet.name)
        return self

    @property
    def size_kb(self) -> float:
        return round(self.size / 1024, 1)

    @property
    def enabled_sheets(self) -> tuple[SheetConfig, ...]:
        return tuple(sheet for sheet in self.sheets if sheet.enabled)

    def get_sheet(self, sheet_name: str) -> SheetConfig:
        for sheet in self.sheets:
            if sheet.name == sheet_name:
                return sheet
        raise KeyError(f"Sheet '{sheet_name}' not found in file {self.id}")

    def replace_sheet(self, sheet_name: str, **updates: Any) -> "FileEntry":
        """Return a copy of this entry with one sheet's fields updated."""
        self.get_sheet(sheet_name)
        sheets = tuple(
            sheet.model_copy(update=updates) if sheet.name == sheet_name else sheet
            for sheet in self.sheets
        )
        return self.model_copy(update={"sheets": sheets})
