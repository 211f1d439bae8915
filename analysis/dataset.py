"""Dataset normalization for chart inputs.

Imported tables arrive as a header row plus untrusted string rows. This module
turns them into a canonical `TabularDataset`: column 0 becomes the category
labels and every further column becomes one numeric `Series`.

The module is Django-free. Structural problems raise `DataFormatError`; cell
level problems (missing or non-numeric values) are coerced to `0`.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Final, Mapping, Sequence

logger = logging.getLogger(__name__)

SAMPLE_LABELS: Final[tuple[str, ...]] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
SAMPLE_VALUES: Final[tuple[float, ...]] = (120.0, 200.0, 150.0, 80.0, 70.0, 110.0, 130.0)
SAMPLE_HEADERS: Final[tuple[str, str]] = ("Day", "Sales")
DEFAULT_SERIES_NAME: Final[str] = "Sales"


class DataFormatError(ValueError):
    """Raised when a table cannot be normalized into a TabularDataset."""


@dataclass(frozen=True, slots=True)
class Series:
    """One named numeric column aligned 1:1 with dataset labels.

    Args:
        name: Header the column was imported under, when known.
        values: Numeric values aligned to `TabularDataset.labels`.
    """

    name: str | None
    values: tuple[float, ...]


@dataclass(frozen=True, slots=True)
class TabularDataset:
    """Normalized labels plus one or more numeric series.

    Args:
        labels: Category labels taken from the first column.
        series: Value columns in their original order.
    """

    labels: tuple[str, ...]
    series: tuple[Series, ...]

    @property
    def is_multi_series(self) -> bool:
        """Return True when the dataset carries two or more value columns."""

        return len(self.series) > 1

    @property
    def series_names(self) -> tuple[str, ...]:
        """Return display names for every series, filling unnamed columns."""

        return tuple(_series_name(series, idx) for idx, series in enumerate(self.series))

    def as_payload(self) -> dict[str, Any]:
        """Return the dataset in the `{labels, values, seriesNames}` input shape.

        Single-series datasets expose a flat `values` list so older callers
        keep working; multi-series datasets expose a list of lists.
        """

        if not self.is_multi_series:
            values = list(self.series[0].values) if self.series else []
            payload: dict[str, Any] = {"labels": list(self.labels), "values": values}
            if self.series and self.series[0].name:
                payload["seriesNames"] = [self.series[0].name]
            return payload
        return {
            "labels": list(self.labels),
            "values": [list(series.values) for series in self.series],
            "seriesNames": list(self.series_names),
        }


def sample_dataset() -> TabularDataset:
    """Return the built-in weekly sales sample dataset."""

    return TabularDataset(
        labels=SAMPLE_LABELS,
        series=(Series(name=DEFAULT_SERIES_NAME, values=SAMPLE_VALUES),),
    )


def normalize_table(headers: Sequence[object], rows: Sequence[Sequence[object]]) -> TabularDataset:
    """Normalize a raw header row and data rows into a TabularDataset.

    Blank headers are dropped together with their column. Rows whose kept
    cells are all blank are discarded. Remaining cells in value columns are
    parsed as numbers, with unparseable cells coerced to `0`.

    Args:
        headers: Raw header cells.
        rows: Raw data rows; short rows are padded with blanks.

    Returns:
        TabularDataset with column 0 as labels and one Series per value column.

    Raises:
        DataFormatError: When no usable headers exist, a header is duplicated,
            no data rows survive, fewer than two columns remain, or no value
            cell parses as a number.
    """

    kept: list[tuple[int, str]] = []
    for idx, raw in enumerate(headers):
        header = _clean_header(raw)
        if header:
            kept.append((idx, header))

    if not kept:
        raise DataFormatError("File must contain valid column headers.")

    names = [header for _idx, header in kept]
    if len(set(names)) != len(names):
        raise DataFormatError("File contains duplicate column headers.")

    cleaned_rows: list[list[str]] = []
    for row in rows:
        cells = [_cell_text(row[idx]) if idx < len(row) else "" for idx, _header in kept]
        if any(cells):
            cleaned_rows.append(cells)

    if not cleaned_rows:
        raise DataFormatError("File must contain at least one data row.")
    if len(kept) < 2:
        raise DataFormatError("File must contain at least 2 columns: one for labels and one for values.")

    labels = tuple(cells[0] for cells in cleaned_rows)
    parsed_any = False
    columns: list[Series] = []
    for col in range(1, len(kept)):
        values: list[float] = []
        for cells in cleaned_rows:
            number = parse_number(cells[col])
            if number is None:
                values.append(0.0)
            else:
                parsed_any = True
                values.append(number)
        columns.append(Series(name=names[col], values=tuple(values)))

    if not parsed_any:
        raise DataFormatError("The values columns must contain numeric data.")

    dataset = TabularDataset(labels=labels, series=tuple(columns))
    logger.debug(
        "Normalized table with %d rows and %d value columns", len(dataset.labels), len(dataset.series)
    )
    return dataset


def dataset_from_payload(payload: Mapping[str, Any]) -> TabularDataset:
    """Decode the `{labels, values, seriesNames?}` input contract.

    A flat `values` list is a single-series dataset; a list of lists is a
    multi-series dataset whose series `i` is named `seriesNames[i]`, or
    `"Series i+1"` when no name is supplied. Every series is padded or cut to
    the label count, with missing and non-numeric values coerced to `0`.

    Args:
        payload: Mapping in the dataset input shape.

    Returns:
        TabularDataset equivalent to the payload.

    Raises:
        DataFormatError: When `labels` or `values` are not lists.
    """

    raw_labels = payload.get("labels")
    raw_values = payload.get("values")
    if not isinstance(raw_labels, (list, tuple)):
        raise DataFormatError("Dataset labels must be a list.")
    if not isinstance(raw_values, (list, tuple)):
        raise DataFormatError("Dataset values must be a list.")

    labels = tuple("" if label is None else str(label) for label in raw_labels)
    raw_names = payload.get("seriesNames")
    names = list(raw_names) if isinstance(raw_names, (list, tuple)) else []

    if raw_values and all(isinstance(column, (list, tuple)) for column in raw_values):
        series = tuple(
            Series(
                name=_payload_series_name(names, idx),
                values=_aligned_values(column, size=len(labels)),
            )
            for idx, column in enumerate(raw_values)
        )
    else:
        single_name = str(names[0]) if names and names[0] else DEFAULT_SERIES_NAME
        series = (Series(name=single_name, values=_aligned_values(raw_values, size=len(labels))),)
    return TabularDataset(labels=labels, series=series)


def with_implicit_series(dataset: TabularDataset | None) -> TabularDataset:
    """Return a dataset guaranteed to carry at least one series.

    A missing dataset becomes the sample data. A dataset with labels but no
    series gains one all-zero series so downstream compilation stays total.
    """

    if dataset is None:
        return sample_dataset()
    if dataset.series:
        return dataset
    labels = dataset.labels or SAMPLE_LABELS
    logger.debug("Dataset has no series; compiling %d zero values", len(labels))
    return TabularDataset(
        labels=labels,
        series=(Series(name=DEFAULT_SERIES_NAME, values=tuple(0.0 for _ in labels)),),
    )


def parse_number(value: object) -> float | None:
    """Parse a finite number from a cell, returning None when not numeric."""

    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    text = _cell_text(value).replace(",", "")
    if not text:
        return None
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _aligned_values(raw: Sequence[object], *, size: int) -> tuple[float, ...]:
    """Coerce raw values to numbers and align them to `size` entries."""

    values = [parse_number(item) for item in list(raw)[:size]]
    padded = [0.0 if value is None else value for value in values]
    padded.extend(0.0 for _ in range(size - len(padded)))
    return tuple(padded)


def _payload_series_name(names: list[object], idx: int) -> str:
    if idx < len(names) and names[idx]:
        return str(names[idx])
    return f"Series {idx + 1}"


def _series_name(series: Series, idx: int) -> str:
    if series.name:
        return series.name
    return DEFAULT_SERIES_NAME if idx == 0 else f"Series {idx + 1}"


def _clean_header(value: object) -> str:
    """Trim a header cell and strip surrounding quote characters."""

    return _cell_text(value).strip("\"'").strip()


def _cell_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()
