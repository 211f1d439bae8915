"""Compile chart inputs into a ChartSpecification.

`compile_chart` is the pure entry point: identical inputs always produce
deep-equal output and it never raises for a structurally valid dataset.
`ChartCompiler` adds memoization keyed on a structural hash of the input
tuple; repeated calls with equal inputs return equal copies of one result.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from hashlib import sha256
from typing import Mapping

from analysis.chart_types import resolve_chart_type
from analysis.dataset import TabularDataset, with_implicit_series
from analysis.navigation import ColumnNavigationState, navigation_state
from analysis.styling import ResolvedStyle, resolve_style
from analysis.themes import ThemePalette, resolve_theme

from .registry import DEFAULT_BUILDERS, ChartBuilderRegistry
from .schema import ChartSpecification

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SIZE = 128


def compile_chart(
    chart_type: str | None,
    palette: ThemePalette,
    dataset: TabularDataset | None,
    resolved_style: ResolvedStyle,
    column_state: ColumnNavigationState,
    *,
    registry: ChartBuilderRegistry = DEFAULT_BUILDERS,
) -> ChartSpecification:
    """Compile a chart specification.

    Args:
        chart_type: Chart-type id; unknown ids compile as a bar chart.
        palette: Resolved theme palette.
        dataset: Normalized dataset; a missing or series-less dataset compiles
            with implicit data instead of failing.
        resolved_style: Output of `analysis.styling.resolve_style`.
        column_state: Column navigation state for single-series chart types.
        registry: Builder registry used for dispatch.

    Returns:
        A freshly built ChartSpecification.
    """

    builder = registry.get(chart_type)
    return builder.compile(with_implicit_series(dataset), palette, resolved_style, column_state)


@dataclass(frozen=True, slots=True)
class CompileRequest:
    """Unresolved compiler inputs as stored by the editor.

    Args:
        chart_type: Chart-type id (may be unknown).
        theme: Theme id (may be unknown).
        dataset: Normalized dataset, or None for the sample data.
        styling: Partial user StylingOptions.
        selected_column_index: Requested column index (wrapped into range).
    """

    chart_type: str | None
    theme: str | None
    dataset: TabularDataset | None
    styling: Mapping[str, object]
    selected_column_index: int = 0


@dataclass(frozen=True, slots=True)
class CompiledChart:
    """A compiled specification together with the inputs it was resolved from."""

    chart_type: str
    palette: ThemePalette
    style: ResolvedStyle
    column_state: ColumnNavigationState
    spec: ChartSpecification


class ChartCompiler:
    """Memoizing front-end for `compile_chart`.

    One instance is shared by every request thread; cache reads and writes
    happen under an internal lock.
    """

    def __init__(self, *, registry: ChartBuilderRegistry = DEFAULT_BUILDERS, max_entries: int = DEFAULT_CACHE_SIZE):
        """Initialize an empty compiler cache.

        Args:
            registry: Builder registry used for dispatch.
            max_entries: Maximum number of cached specifications.
        """

        self._registry = registry
        self._max_entries = max(1, int(max_entries))
        self._cache: OrderedDict[str, ChartSpecification] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def compile(
        self,
        chart_type: str | None,
        palette: ThemePalette,
        dataset: TabularDataset | None,
        resolved_style: ResolvedStyle,
        column_state: ColumnNavigationState,
    ) -> ChartSpecification:
        """Compile with memoization; see `compile_chart`."""

        descriptor = resolve_chart_type(chart_type)
        key = _compile_cache_key(
            chart_type=descriptor.id,
            palette=palette,
            dataset=dataset,
            resolved_style=resolved_style,
            column_state=column_state,
        )
        with self._lock:
            cached = self._cache.pop(key, None)
            if cached is not None:
                self.hits += 1
                self._cache[key] = cached
                return copy.deepcopy(cached)
            self.misses += 1

        # Built outside the lock; a concurrent miss on the same key builds an equal spec.
        spec = compile_chart(
            descriptor.id, palette, dataset, resolved_style, column_state, registry=self._registry
        )
        with self._lock:
            self._cache[key] = spec
            self._cache.move_to_end(key)
            while len(self._cache) > self._max_entries:
                self._cache.popitem(last=False)
            size = len(self._cache)
        logger.debug("Compiled %s chart (cache size %d)", descriptor.id, size)
        return copy.deepcopy(spec)

    def compile_request(self, request: CompileRequest) -> CompiledChart:
        """Resolve theme, style and navigation for a request, then compile it."""

        descriptor = resolve_chart_type(request.chart_type)
        palette = resolve_theme(request.theme)
        style = resolve_style(descriptor.id, palette, request.styling)
        column_state = navigation_state(
            with_implicit_series(request.dataset),
            descriptor,
            selected_column_index=request.selected_column_index,
        )
        spec = self.compile(descriptor.id, palette, request.dataset, style, column_state)
        return CompiledChart(
            chart_type=descriptor.id,
            palette=palette,
            style=style,
            column_state=column_state,
            spec=spec,
        )

    def clear(self) -> None:
        """Drop every cached specification."""

        with self._lock:
            self._cache.clear()


def _compile_cache_key(
    *,
    chart_type: str,
    palette: ThemePalette,
    dataset: TabularDataset | None,
    resolved_style: ResolvedStyle,
    column_state: ColumnNavigationState,
) -> str:
    """Return a stable cache key for a compiler input tuple."""

    payload = {
        "chart_type": chart_type,
        "palette": palette.as_json(),
        "dataset": None
        if dataset is None
        else {
            "labels": list(dataset.labels),
            "series": [[series.name, list(series.values)] for series in dataset.series],
        },
        "style": dict(resolved_style.options),
        "style_palette": resolved_style.palette.id,
        "column": [column_state.selected_column_index, column_state.available_columns],
    }
    raw = json.dumps(payload, sort_keys=True, default=str).encode("utf-8")
    return sha256(raw).hexdigest()
