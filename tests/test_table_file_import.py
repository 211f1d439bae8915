"""Tests for CSV/Excel readers and dataset import coordination."""

from __future__ import annotations

import io
import re
import uuid

import pytest
from django.contrib.sessions.backends.db import SessionStore
from openpyxl import Workbook

from analysis.dataset import DataFormatError, sample_dataset
from analysis.editor_state import EditorState
from core.parsers.table_file import (
    TOO_FEW_LINES_MESSAGE,
    UNSUPPORTED_FILE_MESSAGE,
    ImportIOError,
    is_supported_file,
    read_csv_table,
    read_table_file,
)
from core.services import ImportCoordinator, import_dataset_file, read_dataset_file


def _workbook_bytes(rows: list[list[object]]) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.mark.unit
def test_csv_reader_strips_quotes_and_blank_lines() -> None:
    """Quoted headers are unwrapped and blank lines are skipped."""

    table = read_csv_table('"Region", "Q1"\n\nNorth,10\n   \nSouth,"1,200"\n')

    assert table.headers == ("Region", "Q1")
    assert table.rows == (("North", "10"), ("South", "1,200"))


@pytest.mark.unit
def test_quoted_cell_may_span_blank_lines() -> None:
    """A blank line inside a quoted cell belongs to the cell, not the file layout."""

    table = read_csv_table('Region,Note,Q1\nNorth,"first\n\nsecond",10\nSouth,,7\n')

    assert table.rows == (("North", "first\n\nsecond", "10"), ("South", "", "7"))


@pytest.mark.unit
def test_csv_reader_requires_header_and_data_line() -> None:
    """A file with only a header line is rejected."""

    with pytest.raises(DataFormatError, match=TOO_FEW_LINES_MESSAGE):
        read_csv_table("Region,Q1\n\n")


@pytest.mark.unit
def test_multi_column_csv_normalizes_into_series() -> None:
    """Each value column becomes one named series; the BOM is ignored."""

    data = "\ufeffMonth,North,South\nJan,1,2\nFeb,3,oops\n".encode("utf-8")

    dataset = read_dataset_file("sales.CSV", data)

    assert dataset.labels == ("Jan", "Feb")
    assert dataset.series_names == ("North", "South")
    assert dataset.series[1].values == (2.0, 0.0)


@pytest.mark.unit
def test_duplicate_headers_are_rejected() -> None:
    """Duplicate column headers raise a data format error."""

    with pytest.raises(DataFormatError, match="duplicate column headers"):
        read_dataset_file("dup.csv", b"Day,Sales,Sales\nMon,1,2\n")


@pytest.mark.unit
@pytest.mark.parametrize("filename", ["data.txt", "data.json", "data"])
def test_unsupported_extensions_raise_import_error(filename: str) -> None:
    """Only CSV and Excel extensions are accepted."""

    assert is_supported_file(filename) is False
    with pytest.raises(ImportIOError, match=re.escape(UNSUPPORTED_FILE_MESSAGE)) as excinfo:
        read_table_file(filename, b"a,b\n1,2\n")
    assert excinfo.value.filename == filename
    assert excinfo.value.retryable is True


@pytest.mark.unit
def test_invalid_utf8_csv_raises_import_error() -> None:
    """Undecodable CSV bytes are reported as a read failure."""

    with pytest.raises(ImportIOError):
        read_table_file("latin.csv", b"Day,Sales\n\xff\xfe,1\n")


@pytest.mark.integration
def test_excel_reader_uses_first_sheet() -> None:
    """Excel workbooks are read from their first worksheet."""

    data = _workbook_bytes([["Region", "Q1", "Q2"], ["North", 10, 12.5], [None, None, None], ["South", 7, 3]])

    dataset = read_dataset_file("report.xlsx", data)

    assert dataset.labels == ("North", "South")
    assert dataset.series_names == ("Q1", "Q2")
    assert dataset.series[0].values == (10.0, 7.0)
    assert dataset.series[1].values == (12.5, 3.0)


@pytest.mark.integration
def test_corrupt_excel_raises_import_error() -> None:
    """Bytes that are not a workbook raise ImportIOError."""

    with pytest.raises(ImportIOError, match="Could not read the Excel file"):
        read_table_file("broken.xlsx", b"not a zip archive")


@pytest.mark.integration
def test_failed_import_leaves_state_unchanged() -> None:
    """A rejected file never touches the current dataset."""

    state = EditorState(dataset=sample_dataset())

    with pytest.raises(DataFormatError):
        import_dataset_file(
            state, filename="one.csv", data=b"Label\nA\n", coordinator=ImportCoordinator(uuid.uuid4().hex)
        )

    assert state.dataset == sample_dataset()


@pytest.mark.integration
def test_successful_import_replaces_dataset_and_resets_column() -> None:
    """A committed import swaps the dataset and resets the column index."""

    state = EditorState(chart_type="pie", selected_column_index=0)

    result = import_dataset_file(
        state,
        filename="q.csv",
        data=b"Q,A,B\nx,1,2\ny,3,4\n",
        coordinator=ImportCoordinator(uuid.uuid4().hex),
    )

    assert result.committed is True
    assert result.state.dataset == result.dataset
    assert result.state.navigation().available_columns == 2


@pytest.mark.integration
@pytest.mark.django_db
def test_older_request_cannot_commit_after_newer_import() -> None:
    """Two requests on one session: only the newest import commits."""

    session = SessionStore()
    session.save()
    first_request = SessionStore(session_key=session.session_key)
    second_request = SessionStore(session_key=session.session_key)
    state = EditorState()
    older_dataset = read_dataset_file("old.csv", b"k,v\na,1\n")

    older = ImportCoordinator(first_request.session_key)
    older_ticket = older.begin()
    newer = import_dataset_file(
        state,
        filename="new.csv",
        data=b"k,v\nb,2\n",
        coordinator=ImportCoordinator(second_request.session_key),
    )

    assert newer.committed is True
    assert older.commit(older_ticket, state, older_dataset) is None


@pytest.mark.integration
def test_imports_in_other_sessions_do_not_supersede() -> None:
    """Tickets are scoped to their own session."""

    dataset = read_dataset_file("a.csv", b"k,v\na,1\n")
    mine = ImportCoordinator(uuid.uuid4().hex)
    ticket = mine.begin()
    ImportCoordinator(uuid.uuid4().hex).begin()

    committed = mine.commit(ticket, EditorState(), dataset)

    assert committed is not None
    assert committed.dataset == dataset
