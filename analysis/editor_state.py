"""Chart editor state and its transitions.

The editor holds the user's selections: chart type, theme, partial styling
overrides, the active dataset and the selected column. Transitions return a
new state; the column index stays wrapped into the navigation range of the
current dataset and chart type.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Mapping

from .chart_types import DEFAULT_CHART_TYPE, resolve_chart_type
from .dataset import TabularDataset, with_implicit_series
from .navigation import ColumnNavigationState, navigation_state, next_column, previous_column, select_column
from .styling import COMMON_OPTION_KEYS, STYLE_OPTION_SPECS, StyleValue, coerce_option, option_specs_for
from .themes import DEFAULT_THEME_ID, resolve_theme

EDITOR_STATE_VERSION = "editor_state_v1"

_KNOWN_OPTION_KEYS = frozenset(spec.key for spec in STYLE_OPTION_SPECS)


@dataclass(frozen=True, slots=True)
class EditorState:
    """Selections that drive one chart.

    Args:
        chart_type: Selected chart-type id.
        theme: Selected theme id.
        styling: User styling overrides (partial StylingOptions).
        dataset: Imported dataset, or None while the sample data is shown.
        selected_column_index: Selected column for single-series chart types.
    """

    chart_type: str = DEFAULT_CHART_TYPE
    theme: str = DEFAULT_THEME_ID
    styling: Mapping[str, StyleValue] = field(default_factory=dict)
    dataset: TabularDataset | None = None
    selected_column_index: int = 0

    @property
    def effective_dataset(self) -> TabularDataset:
        """Return the dataset the chart is compiled from."""

        return with_implicit_series(self.dataset)

    def navigation(self) -> ColumnNavigationState:
        """Return the column navigation state for this editor state."""

        return navigation_state(
            self.effective_dataset,
            self.chart_type,
            selected_column_index=self.selected_column_index,
        )


def select_chart_type(state: EditorState, chart_type: str | None) -> EditorState:
    """Switch chart type, resetting the column and type-specific overrides.

    Common styling overrides (visibility and font) survive the switch; all
    other overrides are dropped so the new type's defaults apply.
    """

    descriptor = resolve_chart_type(chart_type)
    kept = {key: value for key, value in state.styling.items() if key in COMMON_OPTION_KEYS}
    return replace(state, chart_type=descriptor.id, styling=kept, selected_column_index=0)


def select_theme(state: EditorState, theme: str | None) -> EditorState:
    """Select a theme; unknown ids resolve to the default theme."""

    return replace(state, theme=resolve_theme(theme).id)


def update_styling(state: EditorState, changes: Mapping[str, object]) -> EditorState:
    """Apply field-by-field styling edits.

    Unknown keys are ignored and values are coerced (clamped) against the
    current chart type's option specs before they are stored.
    """

    specs = {spec.key: spec for spec in option_specs_for(state.chart_type)}
    merged = dict(state.styling)
    for key, raw in changes.items():
        spec = specs.get(key)
        if spec is None:
            continue
        merged[key] = coerce_option(spec, raw)
    return replace(state, styling=merged)


def reset_styling(state: EditorState) -> EditorState:
    """Drop every styling override."""

    return replace(state, styling={})


def replace_dataset(state: EditorState, dataset: TabularDataset | None) -> EditorState:
    """Replace the dataset wholesale and reset the selected column."""

    return replace(state, dataset=dataset, selected_column_index=0)


def step_column(state: EditorState, *, forward: bool) -> EditorState:
    """Move to the next or previous column."""

    current = state.navigation()
    moved = next_column(current) if forward else previous_column(current)
    return replace(state, selected_column_index=moved.selected_column_index)


def choose_column(state: EditorState, index: int) -> EditorState:
    """Select a column by index, wrapping out-of-range requests."""

    return replace(state, selected_column_index=select_column(state.navigation(), index).selected_column_index)


def known_option_keys() -> frozenset[str]:
    """Return every recognized styling option key."""

    return _KNOWN_OPTION_KEYS
