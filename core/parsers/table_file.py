"""Read uploaded CSV and Excel files into a raw header row plus data rows.

Readers only deal with file formats. They do not validate the table shape
beyond "a header and at least one data row"; column rules live in
`analysis.dataset.normalize_table`.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from pathlib import PurePath
from typing import Final, Sequence
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from analysis.dataset import DataFormatError

logger = logging.getLogger(__name__)

CSV_EXTENSIONS: Final[frozenset[str]] = frozenset({".csv"})
EXCEL_EXTENSIONS: Final[frozenset[str]] = frozenset({".xlsx", ".xls"})
SUPPORTED_EXTENSIONS: Final[tuple[str, ...]] = (".csv", ".xlsx", ".xls")

UNSUPPORTED_FILE_MESSAGE: Final[str] = "Please select a CSV or Excel file (.csv, .xlsx, .xls)."
TOO_FEW_LINES_MESSAGE: Final[str] = "File must contain at least a header row and one data row."


class ImportIOError(ValueError):
    """Raised when an uploaded file cannot be read."""

    def __init__(self, message: str, *, filename: str | None = None, retryable: bool = True) -> None:
        """Initialize the error.

        Args:
            message: User-facing message.
            filename: Uploaded file name, when known.
            retryable: Whether retrying with another file can succeed.
        """

        super().__init__(message)
        self.filename = filename
        self.retryable = retryable


@dataclass(frozen=True, slots=True)
class RawTable:
    """Untrusted table contents read from a file.

    Attributes:
        headers: Header cells with surrounding whitespace and quotes stripped.
        rows: Data rows in file order (fully blank rows removed).
    """

    headers: tuple[str, ...]
    rows: tuple[tuple[object, ...], ...]


def file_extension(filename: str) -> str:
    """Return the lower-cased extension of a file name, including the dot."""

    return PurePath(filename or "").suffix.lower()


def is_supported_file(filename: str) -> bool:
    """Return True when the file name has a supported table extension."""

    return file_extension(filename) in SUPPORTED_EXTENSIONS


def read_table_file(filename: str, data: bytes) -> RawTable:
    """Read an uploaded CSV or Excel file.

    Args:
        filename: Original upload name; the extension selects the reader.
        data: Raw file bytes.

    Returns:
        RawTable with a header row and at least one data row.

    Raises:
        ImportIOError: For unsupported extensions or unreadable content.
        DataFormatError: When fewer than two non-blank lines exist.
    """

    extension = file_extension(filename)
    if extension in CSV_EXTENSIONS:
        return read_csv_table(_decode_text(data, filename=filename))
    if extension in EXCEL_EXTENSIONS:
        return read_excel_table(data, filename=filename)
    raise ImportIOError(UNSUPPORTED_FILE_MESSAGE, filename=filename)


def read_csv_table(text: str) -> RawTable:
    """Read comma-separated text into a RawTable.

    Records whose cells are all blank are dropped after parsing, so quoted
    cells may span blank lines.
    """

    records = [
        record
        for record in csv.reader(io.StringIO(text), skipinitialspace=True)
        if any(cell.strip() for cell in record)
    ]
    if len(records) < 2:
        raise DataFormatError(TOO_FEW_LINES_MESSAGE)
    return _raw_table(records)


def read_excel_table(data: bytes, *, filename: str | None = None) -> RawTable:
    """Read the first worksheet of an Excel workbook into a RawTable."""

    try:
        workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile, KeyError, OSError, ValueError) as exc:
        logger.warning("Unreadable workbook %r: %s", filename, exc)
        raise ImportIOError(
            "Could not read the Excel file. Save it as .xlsx or .csv and try again.",
            filename=filename,
        ) from exc
    try:
        if not workbook.worksheets:
            raise ImportIOError("The Excel file has no worksheets.", filename=filename)
        sheet = workbook.worksheets[0]
        records = [
            ["" if cell is None else cell for cell in row]
            for row in sheet.iter_rows(values_only=True)
            if any(cell is not None and str(cell).strip() for cell in row)
        ]
    finally:
        workbook.close()

    if len(records) < 2:
        raise DataFormatError(TOO_FEW_LINES_MESSAGE)
    return _raw_table(records)


def _raw_table(records: Sequence[Sequence[object]]) -> RawTable:
    headers = tuple(str(cell).strip().strip("\"'").strip() for cell in records[0])
    rows = tuple(tuple(row) for row in records[1:])
    return RawTable(headers=headers, rows=rows)


def _decode_text(data: bytes, *, filename: str | None) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ImportIOError(
            "Could not read the file as UTF-8 text. Save it as UTF-8 CSV and try again.",
            filename=filename,
        ) from exc
