"""Tests for chart specification compilation."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Mapping

import pytest

from analysis.dataset import Series, TabularDataset, dataset_from_payload
from analysis.navigation import ColumnNavigationState, navigation_state
from analysis.styling import resolve_style
from analysis.themes import resolve_theme
from core.charting.compiler import ChartCompiler, CompileRequest, compile_chart
from core.charting.registry import DEFAULT_BUILDERS
from core.charting.schema import ChartSpecification

pytestmark = pytest.mark.unit


def _compile(
    chart_type: str,
    dataset: TabularDataset | None,
    *,
    theme: str = "default",
    options: Mapping[str, Any] | None = None,
    column: int = 0,
) -> ChartSpecification:
    palette = resolve_theme(theme)
    style = resolve_style(chart_type, palette, options)
    state = navigation_state(dataset, chart_type, selected_column_index=column)
    return compile_chart(chart_type, palette, dataset, style, state)


def test_bar_chart_from_input_contract() -> None:
    """Compile a two-category bar chart with the default theme."""

    dataset = dataset_from_payload({"labels": ["Mon", "Tue"], "values": [10, 20]})

    spec = _compile("bar", dataset)

    assert len(spec["series"]) == 1
    assert spec["series"][0]["data"] == [10, 20]
    assert spec["backgroundColor"] == "#ffffff"
    assert spec["series"][0]["itemStyle"]["color"] == "#5470c6"
    assert spec["xAxis"]["data"] == ["Mon", "Tue"]
    assert spec["yAxis"]["type"] == "value"


def test_compilation_is_deterministic(three_column_dataset: TabularDataset) -> None:
    """Identical inputs produce deep-equal specifications for every chart type."""

    for chart_type in DEFAULT_BUILDERS.chart_types():
        first = _compile(chart_type, three_column_dataset, theme="walden", options={"barWidth": 40}, column=1)
        second = _compile(chart_type, three_column_dataset, theme="walden", options={"barWidth": 40}, column=1)
        assert first == second


@pytest.mark.parametrize("chart_type", ["pie", "pie-rose", "funnel"])
def test_category_colors_cycle_through_palette(chart_type: str) -> None:
    """Category i is colored `colors[i mod K]`, including after funnel sorting."""

    labels = [f"c{idx}" for idx in range(11)]
    dataset = dataset_from_payload({"labels": labels, "values": [idx * 3 % 7 for idx in range(11)]})
    palette = resolve_theme("default")

    spec = _compile(chart_type, dataset)

    for datum in spec["series"][0]["data"]:
        idx = labels.index(datum["name"])
        assert datum["itemStyle"]["color"] == palette.colors[idx % len(palette.colors)]


def test_overlay_types_emit_one_series_per_column(three_column_dataset: TabularDataset) -> None:
    """Line charts draw every series regardless of the selected column."""

    palette = resolve_theme("vintage")

    spec = _compile("line", three_column_dataset, theme="vintage", column=2)

    assert [series["name"] for series in spec["series"]] == ["North", "South", "East"]
    assert [series["itemStyle"]["color"] for series in spec["series"]] == list(palette.colors[:3])
    assert spec["legend"]["data"] == ["North", "South", "East"]


def test_single_series_types_use_selected_column(three_column_dataset: TabularDataset) -> None:
    """Bar charts draw only the column at the selected index."""

    spec = _compile("bar", three_column_dataset, column=1)

    assert len(spec["series"]) == 1
    assert spec["series"][0]["name"] == "South"
    assert spec["series"][0]["data"] == [2.0, 5.0, 8.0]


def test_unknown_chart_type_falls_back_to_bar(single_series_dataset: TabularDataset) -> None:
    """Unknown chart types compile with the bar builder."""

    spec = _compile("treemap", single_series_dataset)

    assert spec["chartType"] == "bar"
    assert spec["series"][0]["type"] == "bar"


def test_empty_series_compiles_with_zero_values() -> None:
    """A dataset without series compiles with implicit zeros instead of failing."""

    dataset = TabularDataset(labels=("a", "b"), series=())

    spec = _compile("pie", dataset)

    assert [datum["value"] for datum in spec["series"][0]["data"]] == [0.0, 0.0]


def test_stale_column_index_wraps_into_dataset(three_column_dataset: TabularDataset) -> None:
    """A column state from a wider dataset never indexes out of bounds."""

    palette = resolve_theme("default")
    style = resolve_style("bar", palette)
    stale = ColumnNavigationState(selected_column_index=4, available_columns=5)

    spec = compile_chart("bar", palette, three_column_dataset, style, stale)

    assert spec["series"][0]["name"] == "South"


def test_bar_visibility_toggles_are_independent(single_series_dataset: TabularDataset) -> None:
    """Hiding labels keeps value labels; hiding values keeps axis labels."""

    spec = _compile("bar", single_series_dataset, options={"labelVisible": False})
    assert spec["xAxis"]["axisLabel"]["show"] is False
    assert spec["series"][0]["label"]["show"] is True
    assert spec["series"][0]["label"]["formatter"] == "{c}"

    spec = _compile("bar", single_series_dataset, options={"valueVisible": False})
    assert spec["xAxis"]["axisLabel"]["show"] is True
    assert spec["series"][0]["label"] == {"show": False}


def test_pie_label_text_is_composed_from_visibility_flags() -> None:
    """Pie slice labels combine the name (labelVisible) and percentage (valueVisible)."""

    dataset = dataset_from_payload({"labels": ["A", "B"], "values": [1, 3]})

    both = _compile("pie", dataset)
    names_only = _compile("pie", dataset, options={"valueVisible": False})
    values_only = _compile("pie", dataset, options={"labelVisible": False})

    assert [d["label"]["formatter"] for d in both["series"][0]["data"]] == ["A\n25%", "B\n75%"]
    assert [d["label"]["formatter"] for d in names_only["series"][0]["data"]] == ["A", "B"]
    assert [d["label"]["formatter"] for d in values_only["series"][0]["data"]] == ["25%", "75%"]


def test_pie_and_rose_radius_and_legend(single_series_dataset: TabularDataset) -> None:
    """Pie radius is a percentage pair; the rose chart uses an area rose type."""

    pie = _compile("pie", single_series_dataset, options={"innerRadius": 30, "outerRadius": 70, "showLegend": False})
    assert pie["series"][0]["radius"] == ["30%", "70%"]
    assert pie["legend"]["show"] is False
    assert pie["legend"]["bottom"] == 0
    assert pie["series"][0]["labelLine"]["length2"] == 5

    rose = _compile("pie-rose", single_series_dataset, theme="dark")
    assert rose["series"][0]["roseType"] == "area"
    assert rose["series"][0]["radius"] == [20, 100]
    assert rose["series"][0]["itemStyle"]["borderColor"] == "#1e1e1e"


def test_funnel_orders_slices_by_sort_option() -> None:
    """Funnel slices are ordered by value before layout."""

    dataset = dataset_from_payload({"labels": ["a", "b", "c"], "values": [5, 10, 1]})

    descending = _compile("funnel", dataset)
    ascending = _compile("funnel", dataset, options={"funnelSort": "ascending", "funnelWidth": 60})

    assert [d["name"] for d in descending["series"][0]["data"]] == ["b", "a", "c"]
    assert [d["name"] for d in ascending["series"][0]["data"]] == ["c", "a", "b"]
    assert ascending["series"][0]["left"] == "20%"
    assert ascending["series"][0]["width"] == "60%"
    assert ascending["series"][0]["max"] == 10.0


def test_scatter_sorts_mapped_points() -> None:
    """Scatter sorting reorders points after mapping rows to (index, value)."""

    dataset = dataset_from_payload({"labels": ["a", "b", "c"], "values": [3, 1, 2]})

    spec = _compile("scatter", dataset, options={"scatterSort": "ascending"})

    points = spec["series"][0]["data"]
    assert [point["value"] for point in points] == [[1, 1.0], [2, 2.0], [0, 3.0]]
    assert [point["name"] for point in points] == ["b", "c", "a"]
    assert points[0]["label"]["formatter"] == "b\n(1, 1)"


def test_scatter_offsets_multi_series_points(three_column_dataset: TabularDataset) -> None:
    """Overlaid scatter series space their points along x."""

    spec = _compile("scatter", three_column_dataset)

    assert len(spec["series"]) == 3
    assert [point["value"][0] for point in spec["series"][0]["data"]] == [0, 20, 40]


def test_radar_axis_max_uses_every_series() -> None:
    """Radar axes scale to 1.2x the maximum across all series."""

    dataset = TabularDataset(
        labels=("X", "Y"),
        series=(Series(name="A", values=(1.0, 2.0)), Series(name="B", values=(5.0, 3.0))),
    )

    spec = _compile("radar", dataset)

    assert [indicator["max"] for indicator in spec["radar"]["indicator"]] == [6.0, 6.0]
    assert len(spec["series"]) == 1
    assert [entry["name"] for entry in spec["series"][0]["data"]] == ["A", "B"]


def test_mixed_single_series_pairs_bar_with_scaled_target(single_series_dataset: TabularDataset) -> None:
    """Single-series mixed charts draw the column and a 1.2x target line."""

    spec = _compile("mixed", single_series_dataset)

    bar, line = spec["series"]
    assert bar["type"] == "bar"
    assert bar["data"] == [10.0, 20.0]
    assert line["type"] == "line"
    assert line["name"] == "Target"
    assert line["data"] == [12.0, 24.0]
    assert line["yAxisIndex"] == 1
    assert len(spec["yAxis"]) == 2


def test_mixed_multi_series_pairs_with_next_column(three_column_dataset: TabularDataset) -> None:
    """Multi-series mixed charts pair the selected column with the next one, wrapping."""

    spec = _compile("mixed", three_column_dataset, column=2)

    assert [series["name"] for series in spec["series"]] == ["East", "North"]


def test_horizontal_bar_swaps_axes(single_series_dataset: TabularDataset) -> None:
    """Horizontal bars put categories on the y axis."""

    spec = _compile("bar-horizontal", single_series_dataset, options={"barBorderRadius": 6})

    assert spec["yAxis"]["type"] == "category"
    assert spec["xAxis"]["type"] == "value"
    assert spec["grid"]["left"] == "15%"
    assert spec["series"][0]["itemStyle"]["borderRadius"] == [0, 6, 6, 0]
    assert spec["series"][0]["label"]["position"] == "right"


def test_area_chart_applies_opacity(single_series_dataset: TabularDataset) -> None:
    """Area charts fill beneath the line with the configured opacity."""

    spec = _compile("area", single_series_dataset, options={"areaOpacity": 30})

    assert spec["series"][0]["areaStyle"]["opacity"] == 0.3
    assert spec["series"][0]["showSymbol"] is True


def test_compiler_memoizes_equal_inputs(single_series_dataset: TabularDataset) -> None:
    """Equal requests hit the cache and return independent copies."""

    compiler = ChartCompiler(max_entries=4)
    request = CompileRequest(chart_type="bar", theme="dark", dataset=single_series_dataset, styling={})

    first = compiler.compile_request(request).spec
    first["series"][0]["data"].append(99.0)
    second = compiler.compile_request(request).spec

    assert compiler.misses == 1
    assert compiler.hits == 1
    assert second["series"][0]["data"] == [10.0, 20.0]


def test_compiler_evicts_least_recently_used(single_series_dataset: TabularDataset) -> None:
    """The cache holds at most `max_entries` specifications."""

    compiler = ChartCompiler(max_entries=1)
    for theme in ("dark", "chalk", "dark"):
        compiler.compile_request(
            CompileRequest(chart_type="line", theme=theme, dataset=single_series_dataset, styling={})
        )

    assert compiler.misses == 3
    assert compiler.hits == 0


def test_shared_compiler_is_safe_across_threads(single_series_dataset: TabularDataset) -> None:
    """Concurrent callers evicting each other's entries never break the cache."""

    compiler = ChartCompiler(max_entries=1)
    requests = [
        CompileRequest(chart_type="bar", theme=theme, dataset=single_series_dataset, styling={})
        for theme in ("dark", "chalk")
    ]

    def work(offset: int) -> list[str]:
        backgrounds = []
        for idx in range(200):
            compiled = compiler.compile_request(requests[(idx + offset) % 2])
            backgrounds.append(compiled.spec["backgroundColor"])
        return backgrounds

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(work, range(4)))

    assert compiler.hits + compiler.misses == 800
    assert all(set(backgrounds) == {"#1e1e1e", "#293441"} for backgrounds in results)
