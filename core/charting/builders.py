"""Per chart-type builders for compiled chart specifications.

Every builder exposes the same `compile(dataset, palette, style, column_state)`
method and returns a fresh ChartSpecification. Builders are stateless and
pure, so instances are shared by the registry.

Multi-series overlay types (line, area, scatter, radar) draw every series of
the dataset and ignore the selected column. All other types draw exactly the
column at `column_state.selected_column_index`.
"""

from __future__ import annotations

from typing import Any, ClassVar, Final, Protocol

from analysis.dataset import Series, TabularDataset
from analysis.navigation import ColumnNavigationState
from analysis.styling import ResolvedStyle
from analysis.themes import ThemePalette

from .schema import AxisSpec, ChartSpecification, GridSpec, LabelSpec, LegendSpec, SeriesSpec, TooltipSpec

SCATTER_SERIES_SPACING: Final[int] = 20
RADAR_AXIS_HEADROOM: Final[float] = 1.2
MIXED_TARGET_SCALE: Final[float] = 1.2
MIXED_TARGET_NAME: Final[str] = "Target"
PIE_BORDER_RADIUS: Final[int] = 8
FUNNEL_VERTICAL_MARGIN: Final[int] = 60


class ChartBuilder(Protocol):
    """Interface implemented by every chart-type builder."""

    chart_type: str

    def compile(
        self,
        dataset: TabularDataset,
        palette: ThemePalette,
        style: ResolvedStyle,
        column_state: ColumnNavigationState,
    ) -> ChartSpecification:
        """Compile a chart specification for one chart type."""
        ...


class BaseChartBuilder:
    """Shared helpers for chart builders."""

    chart_type: ClassVar[str] = ""
    tooltip_trigger: ClassVar[str] = "item"
    tooltip_formatter: ClassVar[str | None] = None

    def _base_spec(self, palette: ThemePalette, style: ResolvedStyle) -> ChartSpecification:
        """Return the theme-driven fields shared by every chart type."""

        tooltip: TooltipSpec = {
            "trigger": self.tooltip_trigger,
            "backgroundColor": palette.background_color,
            "borderColor": palette.grid_color,
            "textStyle": dict(style.tooltip_text),  # type: ignore[typeddict-item]
        }
        if self.tooltip_formatter:
            tooltip["formatter"] = self.tooltip_formatter
        return {
            "chartType": self.chart_type,
            "backgroundColor": palette.background_color,
            "textStyle": dict(style.text),  # type: ignore[typeddict-item]
            "color": list(palette.colors),
            "tooltip": tooltip,
        }


class CartesianChartBuilder(BaseChartBuilder):
    """Helpers for charts drawn on x/y axes."""

    tooltip_trigger = "axis"
    grid_left: ClassVar[str] = "3%"

    def _grid(self, palette: ThemePalette) -> GridSpec:
        return {
            "left": self.grid_left,
            "right": "4%",
            "bottom": "3%",
            "containLabel": True,
            "borderColor": palette.grid_color,
        }

    def _axis_label(self, style: ResolvedStyle, rotation_key: str) -> dict[str, Any]:
        return {**style.axis_label, "rotate": int(style[rotation_key])}

    def _category_axis(
        self,
        dataset: TabularDataset,
        palette: ThemePalette,
        style: ResolvedStyle,
        *,
        rotation_key: str,
        boundary_gap: bool = True,
    ) -> AxisSpec:
        return {
            "type": "category",
            "data": list(dataset.labels),
            "boundaryGap": boundary_gap,
            "axisLabel": self._axis_label(style, rotation_key),
            "axisLine": {"lineStyle": {"color": palette.grid_color}},
        }

    def _value_axis(
        self,
        palette: ThemePalette,
        style: ResolvedStyle,
        *,
        rotation_key: str,
        name: str | None = None,
        position: str | None = None,
        split_line: bool = True,
    ) -> AxisSpec:
        axis: AxisSpec = {
            "type": "value",
            "axisLabel": self._axis_label(style, rotation_key),
            "axisLine": {"lineStyle": {"color": palette.grid_color}},
            "splitLine": {"show": split_line, "lineStyle": {"color": palette.grid_color}},
        }
        if name is not None:
            axis["name"] = name
        if position is not None:
            axis["position"] = position
        return axis


class BarChartBuilder(CartesianChartBuilder):
    """Vertical bars for the selected column."""

    chart_type = "bar"
    horizontal: ClassVar[bool] = False

    def compile(
        self,
        dataset: TabularDataset,
        palette: ThemePalette,
        style: ResolvedStyle,
        column_state: ColumnNavigationState,
    ) -> ChartSpecification:
        idx, series = _selected_series(dataset, column_state)
        spec = self._base_spec(palette, style)
        spec["grid"] = self._grid(palette)
        if self.horizontal:
            spec["xAxis"] = self._value_axis(palette, style, rotation_key="xAxisRotation")
            spec["yAxis"] = self._category_axis(dataset, palette, style, rotation_key="yAxisRotation")
        else:
            spec["xAxis"] = self._category_axis(dataset, palette, style, rotation_key="xAxisRotation")
            spec["yAxis"] = self._value_axis(palette, style, rotation_key="yAxisRotation")
        spec["series"] = [
            _bar_series(
                name=dataset.series_names[idx],
                series=series,
                palette=palette,
                style=style,
                horizontal=self.horizontal,
            )
        ]
        return spec


class HorizontalBarChartBuilder(BarChartBuilder):
    """Horizontal bars: category labels on the y axis."""

    chart_type = "bar-horizontal"
    horizontal = True
    grid_left = "15%"


class LineChartBuilder(CartesianChartBuilder):
    """One line per dataset series."""

    chart_type = "line"
    filled: ClassVar[bool] = False

    def compile(
        self,
        dataset: TabularDataset,
        palette: ThemePalette,
        style: ResolvedStyle,
        column_state: ColumnNavigationState,
    ) -> ChartSpecification:
        spec = self._base_spec(palette, style)
        spec["grid"] = self._grid(palette)
        spec["xAxis"] = self._category_axis(
            dataset, palette, style, rotation_key="xAxisRotation", boundary_gap=False
        )
        spec["yAxis"] = self._value_axis(palette, style, rotation_key="yAxisRotation")

        traces: list[SeriesSpec] = []
        for idx, series in enumerate(dataset.series):
            color = palette.color_at(idx)
            trace = _line_series(name=dataset.series_names[idx], values=series.values, color=color, style=style)
            if self.filled:
                trace["areaStyle"] = {"opacity": int(style["areaOpacity"]) / 100, "color": color}
            traces.append(trace)
        spec["series"] = traces
        if dataset.is_multi_series:
            spec["legend"] = _legend(list(dataset.series_names), style=style)
        return spec


class AreaChartBuilder(LineChartBuilder):
    """Lines with a filled area beneath each series."""

    chart_type = "area"
    filled = True


class ScatterChartBuilder(CartesianChartBuilder):
    """One point per row; every series drawn, offset along x when overlaid."""

    chart_type = "scatter"
    tooltip_trigger = "item"

    def compile(
        self,
        dataset: TabularDataset,
        palette: ThemePalette,
        style: ResolvedStyle,
        column_state: ColumnNavigationState,
    ) -> ChartSpecification:
        spacing = SCATTER_SERIES_SPACING if dataset.is_multi_series else 1
        y_name = dataset.series_names[0] if not dataset.is_multi_series else "Value"
        spec = self._base_spec(palette, style)
        spec["grid"] = self._grid(palette)
        spec["xAxis"] = self._value_axis(palette, style, rotation_key="xAxisRotation", name="Index")
        spec["yAxis"] = self._value_axis(palette, style, rotation_key="yAxisRotation", name=y_name)

        show_names = bool(style["labelVisible"])
        show_values = bool(style["valueVisible"])
        label_style = style.surface("label", font_size_delta=-2)
        traces: list[SeriesSpec] = []
        for idx, series in enumerate(dataset.series):
            points = [
                {"value": [row * spacing, value], "name": dataset.labels[row]}
                for row, value in enumerate(series.values)
            ]
            points = _sort_points(points, order=str(style["scatterSort"]))
            for point in points:
                x, y = point["value"]
                point["label"] = {
                    "formatter": _join_label(
                        point["name"] if show_names else None,
                        f"({format_number(x)}, {format_number(y)})" if show_values else None,
                    )
                }
            label: LabelSpec = {
                **label_style,  # type: ignore[typeddict-item]
                "show": bool(style["scatterShowLabels"]) and (show_names or show_values),
                "position": str(style["scatterLabelPosition"]),
            }
            traces.append(
                {
                    "type": "scatter",
                    "name": dataset.series_names[idx],
                    "data": points,
                    "symbol": str(style["scatterPointShape"]),
                    "symbolSize": int(style["scatterPointSize"]),
                    "itemStyle": {"color": palette.color_at(idx)},
                    "label": label,
                }
            )
        spec["series"] = traces
        if dataset.is_multi_series:
            spec["legend"] = _legend(list(dataset.series_names), style=style)
        return spec


class PieChartBuilder(BaseChartBuilder):
    """Pie/donut slices for the selected column."""

    chart_type = "pie"
    tooltip_formatter = "{a} <br/>{b}: {c} ({d}%)"
    rose: ClassVar[bool] = False

    def compile(
        self,
        dataset: TabularDataset,
        palette: ThemePalette,
        style: ResolvedStyle,
        column_state: ColumnNavigationState,
    ) -> ChartSpecification:
        idx, series = _selected_series(dataset, column_state)
        show_names = bool(style["labelVisible"])
        show_values = bool(style["valueVisible"])
        show_legend = bool(style["showLegend"])
        total = sum(series.values)

        data: list[dict[str, Any]] = []
        for row, (label, value) in enumerate(zip(dataset.labels, series.values)):
            percent = round(value / total * 100, 2) if total else 0.0
            data.append(
                {
                    "value": value,
                    "name": label,
                    "itemStyle": {"color": palette.color_at(row)},
                    "label": {
                        "formatter": _join_label(
                            label if show_names else None,
                            f"{format_number(percent)}%" if show_values else None,
                        )
                    },
                }
            )

        inner = int(style["innerRadius"])
        outer = int(style["outerRadius"])
        line_length = int(style["labelLineLength"])
        any_label = show_names or show_values
        trace: SeriesSpec = {
            "type": "pie",
            "name": dataset.series_names[idx],
            "center": ["50%", "50%"],
            "data": data,
            "itemStyle": {
                "color": palette.color_at(0),
                "borderRadius": PIE_BORDER_RADIUS,
                "borderColor": palette.background_color,
                "borderWidth": 2,
            },
            "label": {**style.series_label, "show": any_label, "position": "outside"},  # type: ignore[typeddict-item]
            "labelLine": {
                "show": any_label,
                "length": line_length,
                "length2": max(3, line_length // 3),
                "lineStyle": {"color": palette.grid_color},
            },
            "emphasis": {
                "label": {"show": any_label, "fontSize": int(style["fontSize"]) + 2, "fontWeight": "bold"}
            },
        }
        if self.rose:
            trace["roseType"] = "area"
            trace["radius"] = [inner, outer]
        else:
            trace["radius"] = [f"{inner}%", f"{outer}%"]

        spec = self._base_spec(palette, style)
        spec["legend"] = _legend(list(dataset.labels), style=style, show=show_legend, placement="bottom")
        spec["series"] = [trace]
        return spec


class RoseChartBuilder(PieChartBuilder):
    """Nightingale rose: slice radius follows the value."""

    chart_type = "pie-rose"
    rose = True


class FunnelChartBuilder(BaseChartBuilder):
    """Funnel stages for the selected column, ordered by `funnelSort`."""

    chart_type = "funnel"
    tooltip_formatter = "{a} <br/>{b}: {c}"

    def compile(
        self,
        dataset: TabularDataset,
        palette: ThemePalette,
        style: ResolvedStyle,
        column_state: ColumnNavigationState,
    ) -> ChartSpecification:
        idx, series = _selected_series(dataset, column_state)
        order = str(style["funnelSort"])
        show_names = bool(style["labelVisible"])
        show_values = bool(style["valueVisible"])

        stages = sorted(
            enumerate(zip(dataset.labels, series.values)),
            key=lambda item: item[1][1],
            reverse=order == "descending",
        )
        data = [
            {
                "value": value,
                "name": label,
                "itemStyle": {"color": palette.color_at(row)},
                "label": {
                    "formatter": _join_label(
                        label if show_names else None,
                        format_number(value) if show_values else None,
                    )
                },
            }
            for row, (label, value) in stages
        ]

        width = int(style["funnelWidth"])
        position = str(style["funnelLabelPosition"])
        any_label = show_names or show_values
        trace: SeriesSpec = {
            "type": "funnel",
            "name": dataset.series_names[idx],
            "left": f"{format_number((100 - width) / 2)}%",
            "top": FUNNEL_VERTICAL_MARGIN,
            "bottom": FUNNEL_VERTICAL_MARGIN,
            "width": f"{width}%",
            "min": 0,
            "max": max(series.values, default=0.0),
            "sort": order,
            "gap": int(style["funnelGap"]),
            "data": data,
            "itemStyle": {"color": palette.color_at(0), "borderColor": palette.background_color, "borderWidth": 1},
            "label": {**style.series_label, "show": any_label, "position": position},  # type: ignore[typeddict-item]
            "labelLine": {"show": any_label and position == "outside", "lineStyle": {"color": palette.grid_color}},
            "emphasis": {"label": {"fontSize": int(style["fontSize"]) + 2}},
        }
        spec = self._base_spec(palette, style)
        spec["legend"] = _legend(list(dataset.labels), style=style)
        spec["series"] = [trace]
        return spec


class RadarChartBuilder(BaseChartBuilder):
    """One polar axis per label; every series drawn as an overlapping trace."""

    chart_type = "radar"

    def compile(
        self,
        dataset: TabularDataset,
        palette: ThemePalette,
        style: ResolvedStyle,
        column_state: ColumnNavigationState,
    ) -> ChartSpecification:
        peak = max((value for series in dataset.series for value in series.values), default=0.0)
        axis_max = round(peak * RADAR_AXIS_HEADROOM, 6) if peak > 0 else 1.0
        show_area = bool(style["radarShowArea"])
        show_points = bool(style["showDataPoints"])
        area_opacity = int(style["radarAreaOpacity"]) / 100 if show_area else 0.0

        entries: list[dict[str, Any]] = []
        for idx, series in enumerate(dataset.series):
            color = palette.color_at(idx)
            entries.append(
                {
                    "value": list(series.values),
                    "name": dataset.series_names[idx],
                    "itemStyle": {"color": color},
                    "lineStyle": {"width": int(style["lineWidth"]), "color": color},
                    "areaStyle": {"opacity": area_opacity, "color": color},
                    "symbol": "circle" if show_points else "none",
                    "symbolSize": int(style["pointSize"]),
                    "label": _value_label(style, position="top"),
                }
            )

        spec = self._base_spec(palette, style)
        spec["radar"] = {
            "indicator": [{"name": label, "max": axis_max} for label in dataset.labels],
            "radius": f"{int(style['radarRadius'])}%",
            "center": ["50%", "50%"],
            "nameGap": int(style["radarNameGap"]),
            "splitNumber": int(style["radarSplitNumber"]),
            "shape": str(style["radarShape"]),
            "axisName": dict(style.axis_label),
            "axisLine": {"lineStyle": {"color": palette.grid_color}},
            "splitLine": {"lineStyle": {"color": palette.grid_color}},
            "splitArea": {
                "show": show_area,
                "areaStyle": {"color": [f"{palette.grid_color}20", f"{palette.grid_color}10"]},
            },
        }
        spec["series"] = [
            {
                "type": "radar",
                "name": " vs ".join(dataset.series_names) if dataset.is_multi_series else dataset.series_names[0],
                "data": entries,
                "itemStyle": {"color": palette.color_at(0)},
                "label": _value_label(style, position="top"),
            }
        ]
        if dataset.is_multi_series:
            spec["legend"] = _legend(list(dataset.series_names), style=style)
        return spec


class MixedChartBuilder(CartesianChartBuilder):
    """A bar series plus a line series on a secondary value axis.

    The bar shows the selected column. The line shows the next column (wrapping)
    for multi-series data, or a scaled target copy of the bar for single-series
    data.
    """

    chart_type = "mixed"

    def compile(
        self,
        dataset: TabularDataset,
        palette: ThemePalette,
        style: ResolvedStyle,
        column_state: ColumnNavigationState,
    ) -> ChartSpecification:
        idx, bar_source = _selected_series(dataset, column_state)
        bar_name = dataset.series_names[idx]
        if dataset.is_multi_series:
            line_idx = (idx + 1) % len(dataset.series)
            line_name = dataset.series_names[line_idx]
            line_values = dataset.series[line_idx].values
        else:
            line_name = MIXED_TARGET_NAME
            line_values = tuple(round(value * MIXED_TARGET_SCALE, 6) for value in bar_source.values)

        spec = self._base_spec(palette, style)
        spec["grid"] = self._grid(palette)
        spec["xAxis"] = self._category_axis(dataset, palette, style, rotation_key="xAxisRotation")
        spec["yAxis"] = [
            self._value_axis(palette, style, rotation_key="yAxisRotation", name=bar_name, position="left"),
            self._value_axis(
                palette,
                style,
                rotation_key="yAxisRotation",
                name=line_name,
                position="right",
                split_line=False,
            ),
        ]
        line = _line_series(name=line_name, values=line_values, color=palette.color_at(1), style=style)
        line["yAxisIndex"] = 1
        spec["series"] = [
            _bar_series(name=bar_name, series=bar_source, palette=palette, style=style, horizontal=False),
            line,
        ]
        spec["legend"] = _legend([bar_name, line_name], style=style)
        return spec


def format_number(value: float) -> str:
    """Format a number for label text without a trailing `.0`."""

    if float(value).is_integer():
        return str(int(value))
    return str(round(value, 6))


def _selected_series(dataset: TabularDataset, column_state: ColumnNavigationState) -> tuple[int, Series]:
    """Return the selected series, wrapping a stale index into range."""

    idx = column_state.selected_column_index % len(dataset.series)
    return idx, dataset.series[idx]


def _value_label(style: ResolvedStyle, *, position: str) -> LabelSpec:
    if not style.series_value["show"]:
        return {"show": False}
    return {**style.series_value, "position": position, "formatter": "{c}"}  # type: ignore[typeddict-item]


def _bar_series(
    *,
    name: str,
    series: Series,
    palette: ThemePalette,
    style: ResolvedStyle,
    horizontal: bool,
) -> SeriesSpec:
    radius = int(style["barBorderRadius"])
    return {
        "type": "bar",
        "name": name,
        "data": list(series.values),
        "barWidth": f"{int(style['barWidth'])}%",
        "barCategoryGap": f"{int(style['barSpacing'])}%",
        "barGap": "0%",
        "itemStyle": {
            "color": palette.color_at(0),
            "borderRadius": [0, radius, radius, 0] if horizontal else [radius, radius, 0, 0],
        },
        "label": _value_label(style, position="right" if horizontal else "top"),
    }


def _line_series(*, name: str, values: tuple[float, ...], color: str, style: ResolvedStyle) -> SeriesSpec:
    show_points = bool(style["showDataPoints"])
    return {
        "type": "line",
        "name": name,
        "data": list(values),
        "smooth": bool(style["lineSmooth"]),
        "showSymbol": show_points,
        "symbolSize": int(style["pointSize"]) if show_points else 0,
        "lineStyle": {"width": int(style["lineWidth"]), "color": color},
        "itemStyle": {"color": color},
        "label": _value_label(style, position="top"),
    }


def _legend(names: list[str], *, style: ResolvedStyle, show: bool = True, placement: str = "top") -> LegendSpec:
    return {  # type: ignore[misc]
        "show": show,
        "data": names,
        placement: 0,
        "textStyle": style.surface("label", default_show=show),
    }


def _sort_points(points: list[dict[str, Any]], *, order: str) -> list[dict[str, Any]]:
    """Order scatter points by their mapped y value."""

    if order == "ascending":
        return sorted(points, key=lambda point: point["value"][1])
    if order == "descending":
        return sorted(points, key=lambda point: point["value"][1], reverse=True)
    return points


def _join_label(*parts: str | None) -> str:
    return "\n".join(part for part in parts if part)
