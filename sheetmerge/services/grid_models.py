from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Union

CellValue = Union[str, int, float, bool, datetime, None]
Row = Sequence[CellValue]
Grid = Sequence[Row]
GridBundle = Mapping[str, Grid]


@dataclass(frozen=True)
class DecodedFile:
    """Full decode of one uploaded file: every sheet's grid in workbook order."""

    id: str
    name: str
    size: int
    sheets: dict[str, tuple[tuple[CellValue, ...], ...]]
    last_modified: datetime | None = None


@dataclass(frozen=True)
class DecodeFailure:
    filename: str
    reason: str


@dataclass(frozen=True)
class DecodeBatch:
    files: list[DecodedFile] = field(default_factory=list)
    failures: list[DecodeFailure] = field(default_factory=list)


@dataclass(frozen=True)
class MergeResult:
    headers: tuple[str, ...] = ()
    rows: tuple[tuple[CellValue, ...], ...] = ()

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows
