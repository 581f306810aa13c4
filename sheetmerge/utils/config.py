from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_DATA_ROOT = Path("./data")
MAX_BYTES_ENV = "SHEETMERGE_MAX_BYTES"
ALLOWED_TYPES_ENV = "SHEETMERGE_ALLOWED_TYPES"
PREVIEW_ROWS_ENV = "SHEETMERGE_PREVIEW_ROWS"
DECODE_CONCURRENCY_ENV = "SHEETMERGE_DECODE_CONCURRENCY"
EXPORT_LABEL_ENV = "SHEETMERGE_EXPORT_LABEL"
EXPORT_SHEET_ENV = "SHEETMERGE_EXPORT_SHEET"

DEFAULT_ALLOWED_TYPES: tuple[str, ...] = ("xlsx", "xlsm", "xls", "csv")


@dataclass(frozen=True)
class MergeConfig:
    max_bytes: int
    allowed_types: tuple[str, ...]
    preview_rows: int
    decode_concurrency: int
    export_label: str
    export_sheet_name: str


def get_data_root() -> Path:
    return Path(os.getenv("DATA_ROOT", DEFAULT_DATA_ROOT)).expanduser()


def _positive_int(name: str, default: int) -> int:
    value = int(os.getenv(name, default))
    if value < 1:
        raise ValueError(f"{name} must be a positive integer, got {value}")
    return value


def load_merge_config() -> MergeConfig:
    allowed_env = os.getenv(ALLOWED_TYPES_ENV)
    if allowed_env:
        allowed_types = tuple(
            part.strip().lower().lstrip(".") for part in allowed_env.split(",") if part.strip()
        )
    else:
        allowed_types = DEFAULT_ALLOWED_TYPES
    return MergeConfig(
        max_bytes=_positive_int(MAX_BYTES_ENV, 50 * 1024 * 1024),
        allowed_types=allowed_types,
        preview_rows=_positive_int(PREVIEW_ROWS_ENV, 10),
        decode_concurrency=_positive_int(DECODE_CONCURRENCY_ENV, 4),
        export_label=(os.getenv(EXPORT_LABEL_ENV) or "merged_report").strip(),
        # Excel caps worksheet titles at 31 characters.
        export_sheet_name=(os.getenv(EXPORT_SHEET_ENV) or "MergedResults").strip()[:31],
    )
