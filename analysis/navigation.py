"""Column navigation for single-series chart types.

Charts that show one column at a time (bar, pie, funnel, ...) let the user
cycle through the value columns of a multi-column dataset. The navigation
state is derived from the dataset shape and the chart type; the only stored
input is the selected index, which is always wrapped into range.
"""

from __future__ import annotations

from dataclasses import dataclass

from .chart_types import ChartTypeDescriptor, resolve_chart_type
from .dataset import TabularDataset


@dataclass(frozen=True, slots=True)
class ColumnNavigationState:
    """Which value column a single-series chart is displaying.

    Args:
        selected_column_index: Index into the dataset series, in `[0, available_columns)`.
        available_columns: Number of columns the user can step through (at least 1).
    """

    selected_column_index: int
    available_columns: int

    def __post_init__(self) -> None:
        if self.available_columns < 1:
            raise ValueError("available_columns must be at least 1.")
        if not 0 <= self.selected_column_index < self.available_columns:
            raise ValueError(
                f"selected_column_index={self.selected_column_index} is outside [0, {self.available_columns})."
            )

    @property
    def needs_navigation(self) -> bool:
        """Return True when there is more than one column to step through."""

        return self.available_columns > 1

    def as_json(self) -> dict[str, object]:
        """Return a JSON-serializable representation for API responses."""

        return {
            "selectedColumnIndex": self.selected_column_index,
            "availableColumns": self.available_columns,
            "needsNavigation": self.needs_navigation,
        }


def available_columns_for(dataset: TabularDataset | None, chart_type: ChartTypeDescriptor | str | None) -> int:
    """Return how many columns a chart type can step through for a dataset.

    Overlay chart types and single-series datasets expose exactly one column.
    """

    descriptor = chart_type if isinstance(chart_type, ChartTypeDescriptor) else resolve_chart_type(chart_type)
    series_count = len(dataset.series) if dataset is not None else 0
    if descriptor.supports_multi_series_overlay or series_count <= 1:
        return 1
    return series_count


def navigation_state(
    dataset: TabularDataset | None,
    chart_type: ChartTypeDescriptor | str | None,
    *,
    selected_column_index: int = 0,
) -> ColumnNavigationState:
    """Build a navigation state, wrapping the requested index into range.

    Args:
        dataset: Active dataset.
        chart_type: Active chart type descriptor or id.
        selected_column_index: Requested index; any integer is accepted.

    Returns:
        ColumnNavigationState with a valid index.
    """

    available = available_columns_for(dataset, chart_type)
    return ColumnNavigationState(
        selected_column_index=selected_column_index % available,
        available_columns=available,
    )


def next_column(state: ColumnNavigationState) -> ColumnNavigationState:
    """Advance to the next column, wrapping to the first."""

    return ColumnNavigationState(
        selected_column_index=(state.selected_column_index + 1) % state.available_columns,
        available_columns=state.available_columns,
    )


def previous_column(state: ColumnNavigationState) -> ColumnNavigationState:
    """Step back to the previous column, wrapping to the last."""

    return ColumnNavigationState(
        selected_column_index=(state.selected_column_index - 1 + state.available_columns) % state.available_columns,
        available_columns=state.available_columns,
    )


def select_column(state: ColumnNavigationState, index: int) -> ColumnNavigationState:
    """Select a column by index, wrapping out-of-range requests by modulo."""

    return ColumnNavigationState(
        selected_column_index=index % state.available_columns,
        available_columns=state.available_columns,
    )


def chart_type_changed(
    dataset: TabularDataset | None, chart_type: ChartTypeDescriptor | str | None
) -> ColumnNavigationState:
    """Return the navigation state after a chart-type change (index reset to 0)."""

    return navigation_state(dataset, chart_type, selected_column_index=0)
