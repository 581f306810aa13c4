from __future__ import annotations

from datetime import datetime

import pytest

from sheetmerge.services.row_filter import cell_to_text, is_empty_row


@pytest.mark.parametrize(
    "row",
    [
        [],
        None,
        [None, None, ""],
        ["  "],
        ["\t", None, " \n"],
    ],
)
def test_blank_rows_are_empty(row) -> None:
    assert is_empty_row(row) is True


@pytest.mark.parametrize(
    "row",
    [
        [0],
        [False],
        [None, "x"],
        ["", 0.0],
        [datetime(2024, 1, 5)],
    ],
)
def test_rows_with_content_are_not_empty(row) -> None:
    assert is_empty_row(row) is False


def test_cell_to_text_trims_and_renders_scalars() -> None:
    assert cell_to_text(None) == ""
    assert cell_to_text("  Name ") == "Name"
    assert cell_to_text(30) == "30"
    assert cell_to_text(2.5) == "2.5"
    assert cell_to_text(30.0) == "30"
    assert cell_to_text(-4.0) == "-4"
    assert cell_to_text(float("nan")) == "nan"
    assert cell_to_text(True) == "true"
    assert cell_to_text(False) == "false"
    assert cell_to_text(0) == "0"


def test_is_empty_row_does_not_modify_input() -> None:
    row = [" a ", None]
    is_empty_row(row)
    assert row == [" a ", None]
