from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st

# Ensure package imports work when launched as a file via `streamlit run sheetmerge/main.py`.
ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from sheetmerge.models.workbook import FileEntry, SheetConfig  # noqa: E402
from sheetmerge.services.config_store import sheet_preview  # noqa: E402
from sheetmerge.services.errors import SheetMergeError  # noqa: E402
from sheetmerge.services.exporter import preview_frame  # noqa: E402
from sheetmerge.services.grid_decoder import UploadedSource  # noqa: E402
from sheetmerge.services.workspace import MergeWorkspace  # noqa: E402
from sheetmerge.utils.config import get_data_root  # noqa: E402
from sheetmerge.utils.logging import get_logger  # noqa: E402
from sheetmerge.utils.session_state import (  # noqa: E402
    ensure_session_defaults,
    get_or_create,
    reset_uploader,
    update_session_state,
)

LOGGER = get_logger(__name__)

APP_TITLE = "Sheet Merge Workbench"
SAMPLE_ROWS = 10
SAMPLE_COLUMNS = 2


def _workspace() -> MergeWorkspace:
    return get_or_create(None, "workspace", MergeWorkspace)


def _widget_key(kind: str, file_id: str, sheet_name: str) -> str:
    return f"{kind}_{file_id}_{sheet_name}"


def _on_enabled_change(file_id: str, sheet_name: str) -> None:
    value = st.session_state[_widget_key("enabled", file_id, sheet_name)]
    _workspace().set_sheet_enabled(file_id, sheet_name, value)


def _on_header_change(file_id: str, sheet_name: str) -> None:
    value = st.session_state[_widget_key("header", file_id, sheet_name)]
    _workspace().set_header_row(file_id, sheet_name, int(value or 1))


def _on_data_start_change(file_id: str, sheet_name: str) -> None:
    value = st.session_state[_widget_key("data_start", file_id, sheet_name)]
    _workspace().set_data_start_row(file_id, sheet_name, int(value or 1))


def _render_uploader(workspace: MergeWorkspace) -> None:
    state = ensure_session_defaults()
    uploads = st.file_uploader(
        "Add data sources (Excel / CSV)",
        type=list(workspace.config.allowed_types),
        accept_multiple_files=True,
        key=f"merge_uploader_{state['uploader_key']}",
    )
    if not uploads:
        return

    sources = [UploadedSource(name=upload.name, content=upload.getvalue()) for upload in uploads]
    batch = workspace.load(sources)
    update_session_state(
        decode_failures=[f"{failure.filename}: {failure.reason}" for failure in batch.failures],
        merge_error=None,
    )
    reset_uploader()
    st.rerun()


def _render_sheet_row(file: FileEntry, sheet: SheetConfig) -> None:
    enabled_col, name_col, header_col, start_col, preview_col = st.columns([1, 3, 2, 2, 5])
    enabled_col.checkbox(
        "Enabled",
        value=sheet.enabled,
        key=_widget_key("enabled", file.id, sheet.name),
        on_change=_on_enabled_change,
        args=(file.id, sheet.name),
        label_visibility="collapsed",
    )
    name_col.markdown(sheet.name if sheet.enabled else f"~~{sheet.name}~~")
    header_col.number_input(
        "Header row",
        min_value=1,
        step=1,
        value=sheet.header_row,
        disabled=not sheet.enabled,
        key=_widget_key("header", file.id, sheet.name),
        on_change=_on_header_change,
        args=(file.id, sheet.name),
        label_visibility="collapsed",
    )
    start_col.number_input(
        "Data start row",
        min_value=1,
        step=1,
        value=sheet.data_start_row,
        disabled=not sheet.enabled,
        key=_widget_key("data_start", file.id, sheet.name),
        on_change=_on_data_start_change,
        args=(file.id, sheet.name),
        label_visibility="collapsed",
    )
    if not sheet.enabled:
        preview_col.caption("-")
        return
    pairs = sheet_preview(sheet)
    if pairs:
        preview_col.caption(" · ".join(f"**{label}**: {value}" for label, value in pairs))
    else:
        preview_col.caption("No preview data")


def _render_file_card(workspace: MergeWorkspace, file: FileEntry) -> None:
    with st.container(border=True):
        title_col, remove_col = st.columns([10, 1])
        title_col.markdown(f"**{file.name}**")
        title_col.caption(f"{file.size_kb} KB • {len(file.sheets)} sheets")
        if remove_col.button("Remove", key=f"remove_{file.id}"):
            workspace.remove_file(file.id)
            st.rerun()

        labels = st.columns([1, 3, 2, 2, 5])
        for column, label in zip(
            labels, ("On", "Sheet", "Header row", "Data start row", "Preview (first data row)")
        ):
            column.caption(label)
        for sheet in file.sheets:
            _render_sheet_row(file, sheet)


def _render_summary(workspace: MergeWorkspace) -> None:
    state = ensure_session_defaults()
    selected = workspace.selected_sheets()

    st.subheader("Task summary")
    files_metric, sheets_metric = st.columns(2)
    files_metric.metric("Loaded files", len(workspace.files))
    sheets_metric.metric("Total sheets", workspace.store.sheet_count())

    st.caption(f"Pending merge ({len(selected)})")
    if selected:
        for item in selected:
            st.markdown(f"- **{item.sheet_name}** · {item.file_name}")
    else:
        st.caption("Select the sheets to merge.")

    if st.button(
        "Build merged workbook",
        type="primary",
        disabled=not workspace.can_merge,
        use_container_width=True,
    ):
        try:
            with st.spinner("Merging..."):
                workspace.run_merge()
            update_session_state(merge_error=None)
        except SheetMergeError as error:
            LOGGER.warning("Merge rejected: %s", error)
            update_session_state(merge_error=str(error))

    if workspace.result is not None:
        payload = workspace.export()
        st.download_button(
            "Save to disk",
            data=payload.content,
            file_name=payload.filename,
            mime=payload.mime_type,
            use_container_width=True,
        )

    if state.get("merge_error"):
        st.error(state["merge_error"])


def _render_sample(workspace: MergeWorkspace) -> None:
    result = workspace.result
    if result is None:
        return
    st.subheader("Sample check")
    st.caption(f"{result.row_count} rows")
    st.dataframe(
        preview_frame(result, max_rows=SAMPLE_ROWS, max_columns=SAMPLE_COLUMNS),
        hide_index=True,
        width="stretch",
    )


def run() -> None:
    st.set_page_config(page_title=APP_TITLE, page_icon="📑", layout="wide")
    get_data_root().mkdir(parents=True, exist_ok=True)
    state = ensure_session_defaults()
    workspace = _workspace()

    st.title(APP_TITLE)
    st.caption("Combine sheets from several workbooks into one table.")

    config_col, action_col = st.columns([3, 1])
    with config_col:
        _render_uploader(workspace)
        for failure in state.get("decode_failures") or []:
            st.warning(f"Skipped {failure}")
        if workspace.files:
            for file in workspace.files:
                _render_file_card(workspace, file)
        else:
            st.info("Upload spreadsheets to configure how their sheets are merged.")

    with action_col:
        _render_summary(workspace)
        _render_sample(workspace)


if __name__ == "__main__":
    run()
