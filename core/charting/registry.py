"""Builder registry keyed by chart-type id."""

from __future__ import annotations

import logging
from typing import Final, Iterable

from analysis.chart_types import CHART_TYPE_ALIASES, CHART_TYPES, DEFAULT_CHART_TYPE

from .builders import (
    AreaChartBuilder,
    BarChartBuilder,
    ChartBuilder,
    FunnelChartBuilder,
    HorizontalBarChartBuilder,
    LineChartBuilder,
    MixedChartBuilder,
    PieChartBuilder,
    RadarChartBuilder,
    RoseChartBuilder,
    ScatterChartBuilder,
)

logger = logging.getLogger(__name__)


class ChartBuilderRegistry:
    """Map chart-type ids to builders, falling back to a default builder."""

    def __init__(self, builders: Iterable[ChartBuilder], *, fallback: str) -> None:
        """Initialize a registry from builder instances.

        Args:
            builders: Builder instances; each chart type may appear once.
            fallback: Chart-type id used for unknown ids.

        Raises:
            ValueError: On duplicate chart types or an unregistered fallback.
        """

        self._builders: dict[str, ChartBuilder] = {}
        for builder in builders:
            if builder.chart_type in self._builders:
                raise ValueError(f"Duplicate chart builder for chart type: {builder.chart_type!r}")
            self._builders[builder.chart_type] = builder
        if fallback not in self._builders:
            raise ValueError(f"Fallback chart type {fallback!r} has no builder.")
        self._fallback = fallback

    def get(self, chart_type: str | None) -> ChartBuilder:
        """Return the builder for a chart type, or the fallback builder."""

        key = (chart_type or "").strip()
        builder = self._builders.get(CHART_TYPE_ALIASES.get(key, key))
        if builder is None:
            logger.debug("No chart builder for %r; using %r", chart_type, self._fallback)
            return self._builders[self._fallback]
        return builder

    def chart_types(self) -> tuple[str, ...]:
        """Return registered chart-type ids."""

        return tuple(self._builders)


DEFAULT_BUILDERS: Final[ChartBuilderRegistry] = ChartBuilderRegistry(
    (
        BarChartBuilder(),
        HorizontalBarChartBuilder(),
        LineChartBuilder(),
        AreaChartBuilder(),
        ScatterChartBuilder(),
        PieChartBuilder(),
        RoseChartBuilder(),
        FunnelChartBuilder(),
        RadarChartBuilder(),
        MixedChartBuilder(),
    ),
    fallback=DEFAULT_CHART_TYPE,
)

_missing = {descriptor.id for descriptor in CHART_TYPES.list()} - set(DEFAULT_BUILDERS.chart_types())
if _missing:
    raise RuntimeError(f"Chart types without a builder: {sorted(_missing)}")
