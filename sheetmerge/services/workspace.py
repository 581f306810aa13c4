from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from sheetmerge.models.workbook import FileEntry, SheetConfig
from sheetmerge.services.config_store import ConfigurationStore, SelectedSheet, build_file_entry
from sheetmerge.services.errors import EmptyMergeResultError, MergeFailedError, SheetMergeError
from sheetmerge.services.exporter import MIME_XLSX, build_export_filename, encode_workbook
from sheetmerge.services.grid_decoder import UploadedSource, decode_uploads
from sheetmerge.services.grid_models import DecodeBatch, MergeResult
from sheetmerge.services.grid_repository import GridRepository
from sheetmerge.services.merge_engine import merge_sheets
from sheetmerge.utils.config import MergeConfig, load_merge_config
from sheetmerge.utils.logging import get_logger, log_event, log_timing, log_warning_event

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class ExportPayload:
    filename: str
    content: bytes
    mime_type: str = MIME_XLSX


class MergeWorkspace:
    """One user session: loaded files, their sheet settings and the last merge."""

    def __init__(
        self,
        config: MergeConfig | None = None,
        *,
        store: ConfigurationStore | None = None,
        grids: GridRepository | None = None,
    ) -> None:
        self.config = config or load_merge_config()
        self.store = store or ConfigurationStore()
        self.grids = grids or GridRepository()
        self._result: MergeResult | None = None

    # ---- state ----
    @property
    def files(self) -> tuple[FileEntry, ...]:
        return self.store.files

    @property
    def result(self) -> MergeResult | None:
        return self._result

    def selected_sheets(self) -> list[SelectedSheet]:
        return self.store.selected_sheets()

    @property
    def can_merge(self) -> bool:
        return bool(self.store.files) and bool(self.store.selected_sheets())

    # ---- loading ----
    def load(self, uploads: Sequence[UploadedSource]) -> DecodeBatch:
        batch = decode_uploads(uploads, config=self.config)
        for decoded in batch.files:
            self.grids.put(decoded)
            self.store.add_file(build_file_entry(decoded, preview_rows=self.config.preview_rows))
        log_event(
            LOGGER,
            "workspace.files_loaded",
            loaded=len(batch.files),
            failed=len(batch.failures),
            total=len(self.store),
        )
        return batch

    def remove_file(self, file_id: str) -> bool:
        removed = self.store.remove_file(file_id)
        self.grids.remove(file_id)
        if len(self.store) <= 1:
            self._result = None
        log_event(
            LOGGER,
            "workspace.file_removed",
            file_id=file_id,
            removed=removed is not None,
            remaining=len(self.store),
        )
        return removed is not None

    # ---- configuration edits ----
    def toggle_sheet(self, file_id: str, sheet_name: str) -> SheetConfig:
        return self.store.toggle_sheet(file_id, sheet_name)

    def set_sheet_enabled(self, file_id: str, sheet_name: str, enabled: bool) -> SheetConfig:
        return self.store.set_sheet_enabled(file_id, sheet_name, enabled)

    def set_header_row(self, file_id: str, sheet_name: str, row_number: int) -> SheetConfig:
        return self.store.set_header_row(file_id, sheet_name, row_number)

    def set_data_start_row(self, file_id: str, sheet_name: str, row_number: int) -> SheetConfig:
        return self.store.set_data_start_row(file_id, sheet_name, row_number)

    # ---- merge / export ----
    def run_merge(self) -> MergeResult:
        """Merge the current configuration, keeping the previous result on failure."""
        files = self.store.files
        with log_timing(LOGGER, "workspace.merge", files=len(files)):
            try:
                result = merge_sheets(files, self.grids)
            except Exception as error:
                raise MergeFailedError() from error

        if result.is_empty:
            log_warning_event(LOGGER, "merge.empty", files=len(files), columns=len(result.headers))
            raise EmptyMergeResultError()

        self._result = result
        return result

    def export(self, now: datetime | None = None) -> ExportPayload:
        if self._result is None:
            raise SheetMergeError("Run a merge before exporting.")
        return ExportPayload(
            filename=build_export_filename(self.config.export_label, now),
            content=encode_workbook(self._result, sheet_name=self.config.export_sheet_name),
        )
