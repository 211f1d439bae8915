"""Chart type catalogue with capability flags.

Each chart type is described once here; the compiler, the style resolver and
the column navigation controller read capabilities from the descriptor rather
than branching on chart-type ids.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final, Iterable, Literal

logger = logging.getLogger(__name__)

ChartTypeId = Literal[
    "bar",
    "line",
    "pie",
    "pie-rose",
    "area",
    "scatter",
    "radar",
    "funnel",
    "mixed",
    "bar-horizontal",
]

StyleGroup = Literal["common", "axis", "line", "area", "bar", "pie", "funnel", "scatter", "radar"]

DEFAULT_CHART_TYPE: Final[str] = "bar"

CHART_TYPE_ALIASES: Final[dict[str, str]] = {"pie-nightingale": "pie-rose"}


@dataclass(frozen=True, slots=True)
class ChartTypeDescriptor:
    """Describe a chart type and what it can render.

    Args:
        id: Stable chart-type id.
        label: Human-friendly name.
        has_axes: Whether the chart is drawn on cartesian axes.
        has_category_axis: Whether one axis is a category axis built from labels.
        supports_multi_series_overlay: Whether every series is drawn at once.
        style_groups: Styling option groups that apply to this chart type.
    """

    id: str
    label: str
    has_axes: bool
    has_category_axis: bool
    supports_multi_series_overlay: bool
    style_groups: frozenset[StyleGroup]

    @property
    def is_single_series_only(self) -> bool:
        """Return True when the chart shows exactly one column at a time."""

        return not self.supports_multi_series_overlay

    def as_json(self) -> dict[str, object]:
        """Return a JSON-serializable representation for API responses."""

        return {
            "id": self.id,
            "label": self.label,
            "hasAxes": self.has_axes,
            "hasCategoryAxis": self.has_category_axis,
            "supportsMultiSeriesOverlay": self.supports_multi_series_overlay,
            "isSingleSeriesOnly": self.is_single_series_only,
            "styleGroups": sorted(self.style_groups),
        }


def _groups(*groups: StyleGroup) -> frozenset[StyleGroup]:
    return frozenset(("common", *groups))


class ChartTypeRegistry:
    """Lookup helpers for chart type descriptors."""

    def __init__(self, descriptors: Iterable[ChartTypeDescriptor], *, default: str) -> None:
        """Initialize a registry and validate its default entry."""

        self._descriptors: dict[str, ChartTypeDescriptor] = {}
        for descriptor in descriptors:
            if descriptor.id in self._descriptors:
                raise ValueError(f"Duplicate ChartTypeDescriptor id: {descriptor.id!r}")
            self._descriptors[descriptor.id] = descriptor
        if default not in self._descriptors:
            raise ValueError(f"Default chart type {default!r} is not registered.")
        self._default = default

    def get(self, chart_type: str | None) -> ChartTypeDescriptor | None:
        """Return a descriptor by id or alias, or None when missing."""

        key = (chart_type or "").strip()
        return self._descriptors.get(CHART_TYPE_ALIASES.get(key, key))

    def resolve(self, chart_type: str | None) -> ChartTypeDescriptor:
        """Return a descriptor, falling back to the default chart type."""

        descriptor = self.get(chart_type)
        if descriptor is None:
            logger.debug("Unknown chart type %r; using %r", chart_type, self._default)
            return self._descriptors[self._default]
        return descriptor

    def list(self) -> tuple[ChartTypeDescriptor, ...]:
        """Return all descriptors in catalogue order."""

        return tuple(self._descriptors.values())


CHART_TYPES: Final[ChartTypeRegistry] = ChartTypeRegistry(
    (
        ChartTypeDescriptor(
            id="bar",
            label="Bar Chart",
            has_axes=True,
            has_category_axis=True,
            supports_multi_series_overlay=False,
            style_groups=_groups("axis", "bar"),
        ),
        ChartTypeDescriptor(
            id="line",
            label="Line Chart",
            has_axes=True,
            has_category_axis=True,
            supports_multi_series_overlay=True,
            style_groups=_groups("axis", "line"),
        ),
        ChartTypeDescriptor(
            id="pie",
            label="Pie Chart",
            has_axes=False,
            has_category_axis=False,
            supports_multi_series_overlay=False,
            style_groups=_groups("pie"),
        ),
        ChartTypeDescriptor(
            id="pie-rose",
            label="Nightingale Chart",
            has_axes=False,
            has_category_axis=False,
            supports_multi_series_overlay=False,
            style_groups=_groups("pie"),
        ),
        ChartTypeDescriptor(
            id="area",
            label="Area Chart",
            has_axes=True,
            has_category_axis=True,
            supports_multi_series_overlay=True,
            style_groups=_groups("axis", "line", "area"),
        ),
        ChartTypeDescriptor(
            id="scatter",
            label="Scatter Plot",
            has_axes=True,
            has_category_axis=False,
            supports_multi_series_overlay=True,
            style_groups=_groups("axis", "scatter"),
        ),
        ChartTypeDescriptor(
            id="radar",
            label="Radar Chart",
            has_axes=False,
            has_category_axis=False,
            supports_multi_series_overlay=True,
            style_groups=_groups("line", "radar"),
        ),
        ChartTypeDescriptor(
            id="funnel",
            label="Funnel Chart",
            has_axes=False,
            has_category_axis=False,
            supports_multi_series_overlay=False,
            style_groups=_groups("funnel"),
        ),
        ChartTypeDescriptor(
            id="mixed",
            label="Mixed Chart",
            has_axes=True,
            has_category_axis=True,
            supports_multi_series_overlay=False,
            style_groups=_groups("axis", "bar", "line"),
        ),
        ChartTypeDescriptor(
            id="bar-horizontal",
            label="Bar Chart (Horizontal)",
            has_axes=True,
            has_category_axis=True,
            supports_multi_series_overlay=False,
            style_groups=_groups("axis", "bar"),
        ),
    ),
    default=DEFAULT_CHART_TYPE,
)


def resolve_chart_type(chart_type: str | None) -> ChartTypeDescriptor:
    """Return the descriptor for a chart type id, falling back to bar."""

    return CHART_TYPES.resolve(chart_type)
