from __future__ import annotations

import io
from datetime import datetime

from openpyxl import load_workbook

from sheetmerge.services.exporter import build_export_filename, encode_workbook, preview_frame
from sheetmerge.services.grid_models import MergeResult


def test_export_filename_uses_local_timestamp() -> None:
    stamp = datetime(2024, 3, 7, 9, 5, 59)
    assert build_export_filename("merged_report", stamp) == "merged_report_20240307_0905.xlsx"


def test_export_filename_falls_back_for_blank_label() -> None:
    stamp = datetime(2024, 12, 31, 23, 59)
    assert build_export_filename("   ", stamp) == "merged_report_20241231_2359.xlsx"


def test_encode_workbook_writes_headers_then_rows() -> None:
    result = MergeResult(
        headers=("Name", "Age"),
        rows=(("Al", 30), ("Bo", 25, "extra"), (False,)),
    )

    payload = encode_workbook(result, sheet_name="MergedResults")

    workbook = load_workbook(io.BytesIO(payload))
    assert workbook.sheetnames == ["MergedResults"]
    worksheet = workbook["MergedResults"]
    assert [cell.value for cell in worksheet[1]][:2] == ["Name", "Age"]
    assert worksheet.cell(row=2, column=1).value == "Al"
    assert worksheet.cell(row=2, column=2).value == 30
    assert worksheet.cell(row=3, column=3).value == "extra"
    assert worksheet.cell(row=4, column=1).value is False
    assert worksheet.max_row == 4


def test_encode_workbook_truncates_long_sheet_names() -> None:
    result = MergeResult(headers=("A",), rows=(("1",),))

    payload = encode_workbook(result, sheet_name="x" * 40)

    workbook = load_workbook(io.BytesIO(payload))
    assert workbook.sheetnames == ["x" * 31]


def test_preview_frame_aligns_ragged_rows_to_headers() -> None:
    result = MergeResult(
        headers=("Name", "", "Name"),
        rows=(("Al",), (" Bo ", 25, "x", "dropped"), (None, True, 0)),
    )

    frame = preview_frame(result, max_rows=2)

    assert list(frame.columns) == ["Name", "Column 2", "Name (2)"]
    assert frame.values.tolist() == [["Al", "", ""], ["Bo", "25", "x"]]


def test_preview_frame_limits_columns() -> None:
    result = MergeResult(headers=("A", "B", "C"), rows=(("1", "2", "3"),))

    frame = preview_frame(result, max_columns=2)

    assert list(frame.columns) == ["A", "B"]
    assert frame.values.tolist() == [["1", "2"]]


def test_encode_workbook_keeps_equals_text_as_strings() -> None:
    result = MergeResult(headers=("=Total", "Note"), rows=(("=1+1", "plain"),))

    payload = encode_workbook(result)

    worksheet = load_workbook(io.BytesIO(payload))["MergedResults"]
    assert (worksheet["A1"].data_type, worksheet["A1"].value) == ("s", "=Total")
    assert (worksheet["A2"].data_type, worksheet["A2"].value) == ("s", "=1+1")
    assert worksheet["B2"].value == "plain"


def test_encode_workbook_drops_control_characters() -> None:
    result = MergeResult(headers=("Na\x02me",), rows=(("bad\x01text",), (7,)))

    payload = encode_workbook(result)

    worksheet = load_workbook(io.BytesIO(payload))["MergedResults"]
    assert worksheet["A1"].value == "Name"
    assert worksheet["A2"].value == "badtext"
    assert worksheet["A3"].value == 7


def test_preview_frame_labels_stay_unique_when_suffix_exists() -> None:
    result = MergeResult(headers=("a", "a", "a (2)", ""), rows=(("1", "2", "3", "4"),))

    frame = preview_frame(result)

    assert list(frame.columns) == ["a", "a (2)", "a (2) (2)", "Column 4"]
    assert frame.columns.is_unique
