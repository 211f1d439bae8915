"""Schema types for compiled chart specifications.

A ChartSpecification is the renderer-neutral handoff to the drawing surface.
It carries literal values only (colors, sizes, label text), never callables or
symbolic references, so it can be serialized to JSON as-is.

Keys use camelCase because the payload is consumed by a JavaScript renderer.
"""

from __future__ import annotations

from typing import Any, TypedDict

from analysis.styling import TextStyleBlock


class LabelSpec(TypedDict, total=False):
    """Series or datum label configuration."""

    show: bool
    position: str
    formatter: str
    text: str
    fontFamily: str
    fontSize: int
    fontWeight: int | str
    fontStyle: str
    color: str


class ItemStyleSpec(TypedDict, total=False):
    """Fill and border styling for a series or datum."""

    color: str
    borderColor: str
    borderWidth: int
    borderRadius: int | list[int]
    opacity: float


class AxisSpec(TypedDict, total=False):
    """A cartesian axis descriptor."""

    type: str
    name: str
    position: str
    data: list[str]
    boundaryGap: bool
    axisLabel: dict[str, Any]
    axisLine: dict[str, Any]
    splitLine: dict[str, Any]


class LegendSpec(TypedDict, total=False):
    """Legend descriptor."""

    show: bool
    data: list[str]
    top: int | str
    bottom: int | str
    textStyle: TextStyleBlock


class TooltipSpec(TypedDict, total=False):
    """Tooltip descriptor."""

    trigger: str
    formatter: str
    backgroundColor: str
    borderColor: str
    textStyle: TextStyleBlock


class GridSpec(TypedDict, total=False):
    """Plot-area placement for cartesian charts."""

    left: str
    right: str
    top: str | int
    bottom: str
    containLabel: bool
    borderColor: str


class RadarSpec(TypedDict, total=False):
    """Polar coordinate descriptor for radar charts."""

    indicator: list[dict[str, Any]]
    radius: str
    center: list[str]
    nameGap: int
    splitNumber: int
    shape: str
    axisName: dict[str, Any]
    axisLine: dict[str, Any]
    splitLine: dict[str, Any]
    splitArea: dict[str, Any]


class SeriesSpec(TypedDict, total=False):
    """One drawable series."""

    type: str
    name: str
    data: list[Any]
    itemStyle: ItemStyleSpec
    label: LabelSpec
    emphasis: dict[str, Any]
    barWidth: str
    barCategoryGap: str
    barGap: str
    smooth: bool
    showSymbol: bool
    symbol: str
    symbolSize: int
    lineStyle: dict[str, Any]
    areaStyle: dict[str, Any]
    labelLine: dict[str, Any]
    radius: list[str] | list[int]
    center: list[str]
    roseType: str
    left: str
    top: int
    bottom: int
    width: str
    min: float
    max: float
    sort: str
    gap: int
    yAxisIndex: int


class ChartSpecification(TypedDict, total=False):
    """The compiled chart payload handed to a rendering surface."""

    chartType: str
    backgroundColor: str
    textStyle: TextStyleBlock
    color: list[str]
    tooltip: TooltipSpec
    legend: LegendSpec
    grid: GridSpec
    xAxis: AxisSpec
    yAxis: AxisSpec | list[AxisSpec]
    radar: RadarSpec
    series: list[SeriesSpec]
