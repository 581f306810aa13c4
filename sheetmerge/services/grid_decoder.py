from __future__ import annotations

import csv
import io
import uuid
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import pandas as pd
from openpyxl import load_workbook

from sheetmerge.services.errors import DecodeError
from sheetmerge.services.grid_models import (
    CellValue,
    DecodeBatch,
    DecodedFile,
    DecodeFailure,
)
from sheetmerge.utils.config import MergeConfig, load_merge_config
from sheetmerge.utils.logging import get_logger, log_event, log_exception_event

LOGGER = get_logger(__name__)

SheetGrids = dict[str, tuple[tuple[CellValue, ...], ...]]


@dataclass(frozen=True)
class UploadedSource:
    """Raw bytes of one user-selected file."""

    name: str
    content: bytes
    last_modified: datetime | None = None


def _extension(filename: str) -> str:
    return Path(filename).suffix.lower().lstrip(".")


def _read_openpyxl(content: bytes) -> SheetGrids:
    workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    try:
        sheets: SheetGrids = {}
        for name in workbook.sheetnames:
            worksheet = workbook[name]
            sheets[name] = tuple(tuple(row) for row in worksheet.iter_rows(values_only=True))
        return sheets
    finally:
        workbook.close()


def _normalize_frame(frame: pd.DataFrame) -> tuple[tuple[CellValue, ...], ...]:
    values = frame.astype(object).where(pd.notna(frame), None)
    return tuple(tuple(row) for row in values.itertuples(index=False, name=None))


def _read_xls(content: bytes) -> SheetGrids:
    frames = pd.read_excel(io.BytesIO(content), sheet_name=None, header=None, engine="xlrd")
    return {str(name): _normalize_frame(frame) for name, frame in frames.items()}


def _read_csv(content: bytes, filename: str) -> SheetGrids:
    text = content.decode("utf-8-sig")
    reader = csv.reader(io.StringIO(text, newline=""))
    rows = tuple(tuple(row) for row in reader)
    return {Path(filename).stem or "Sheet1": rows}


def decode_grids(
    filename: str,
    content: bytes,
    *,
    config: MergeConfig | None = None,
) -> SheetGrids:
    """Decode file bytes into an ordered mapping of sheet name to grid.

    Raises DecodeError for oversized files, unsupported extensions and files the
    underlying reader rejects.
    """
    config = config or load_merge_config()
    size = len(content)
    if size > config.max_bytes:
        raise DecodeError(filename, f"file too large ({size} > {config.max_bytes} bytes)")

    extension = _extension(filename)
    if extension not in config.allowed_types:
        raise DecodeError(filename, f"unsupported file type '.{extension}'")

    try:
        if extension == "csv":
            return _read_csv(content, filename)
        if extension == "xls":
            return _read_xls(content)
        return _read_openpyxl(content)
    except Exception as error:
        raise DecodeError(filename, str(error) or type(error).__name__) from error


def decode_upload(upload: UploadedSource, *, config: MergeConfig | None = None) -> DecodedFile:
    sheets = decode_grids(upload.name, upload.content, config=config)
    decoded = DecodedFile(
        id=str(uuid.uuid4()),
        name=upload.name,
        size=len(upload.content),
        sheets=sheets,
        last_modified=upload.last_modified,
    )
    log_event(
        LOGGER,
        "decode.file",
        file_id=decoded.id,
        file_name=decoded.name,
        size_bytes=decoded.size,
        sheets=len(sheets),
    )
    return decoded


def decode_uploads(
    uploads: Sequence[UploadedSource],
    *,
    config: MergeConfig | None = None,
) -> DecodeBatch:
    """Decode several files in parallel; a failing file never blocks its siblings.

    Successful decodes are returned in upload order.
    """
    config = config or load_merge_config()
    batch = DecodeBatch()
    if not uploads:
        return batch

    workers = min(config.decode_concurrency, len(uploads))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sheet-decode") as pool:
        futures = [pool.submit(decode_upload, upload, config=config) for upload in uploads]

    for upload, future in zip(uploads, futures):
        try:
            batch.files.append(future.result())
        except DecodeError as error:
            log_exception_event(
                LOGGER, "decode.failed", file_name=upload.name, reason=error.reason
            )
            batch.failures.append(DecodeFailure(filename=upload.name, reason=error.reason))
    return batch
