"""Session-backed chart editor state.

The editor state is stored in the Django session as an encoded snapshot. Views
load it, apply one transition from `analysis.editor_state`, save it and return
the recompiled chart.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Final

from django.conf import settings
from django.http import HttpRequest

from analysis.chart_types import CHART_TYPES
from analysis.editor_state import EditorState
from analysis.styling import applicable_option_specs
from core.charting.compiler import DEFAULT_CACHE_SIZE, ChartCompiler, CompileRequest
from core.charting.export import export_options
from core.charting.snapshot_codec import decode_editor_state, encode_editor_state
from core.feature_config import ConfigState, FeatureConfigProvider, Loaded, Unavailable, chart_type_enabled, export_enabled

EDITOR_SESSION_KEY: Final[str] = "charts_editor_state"


def load_editor_state(request: HttpRequest) -> EditorState:
    """Return the editor state stored in the current session."""

    return decode_editor_state(request.session.get(EDITOR_SESSION_KEY))


def save_editor_state(request: HttpRequest, state: EditorState) -> None:
    """Store the editor state in the current session.

    Args:
        request: Incoming request whose session will be updated.
        state: EditorState to store.
    """

    request.session[EDITOR_SESSION_KEY] = encode_editor_state(state)
    request.session.modified = True


@lru_cache(maxsize=1)
def get_compiler() -> ChartCompiler:
    """Return the process-wide memoizing chart compiler."""

    return ChartCompiler(max_entries=int(getattr(settings, "CHARTS_COMPILER_CACHE_SIZE", DEFAULT_CACHE_SIZE)))


@lru_cache(maxsize=1)
def get_feature_config_provider() -> FeatureConfigProvider:
    """Return the process-wide feature configuration provider."""

    return FeatureConfigProvider(getattr(settings, "CHARTS_FEATURE_CONFIG_PATH", None))


def feature_state() -> ConfigState:
    """Return the current feature configuration state."""

    return get_feature_config_provider().state


def describe_feature_state(state: ConfigState) -> dict[str, Any]:
    """Return a JSON-serializable summary of a ConfigState."""

    if isinstance(state, Loaded):
        return {
            "status": "loaded",
            "disabledChartTypes": sorted(state.config.disabled_chart_types),
            "exportEnabled": state.config.export_enabled,
        }
    if isinstance(state, Unavailable):
        return {"status": "unavailable", "reason": state.reason}
    return {"status": "loading"}


def chart_type_catalogue(state: ConfigState) -> list[dict[str, Any]]:
    """Return chart type descriptors annotated with their feature gate."""

    return [
        {**descriptor.as_json(), "enabled": chart_type_enabled(state, descriptor.id)}
        for descriptor in CHART_TYPES.list()
    ]


def editor_payload(state: EditorState) -> dict[str, Any]:
    """Compile the editor state and return the full API payload.

    Args:
        state: Current editor state.

    Returns:
        Dict with the selections, the compiled chart specification, the column
        navigation state, the applicable styling options and export options.
    """

    compiled = get_compiler().compile_request(
        CompileRequest(
            chart_type=state.chart_type,
            theme=state.theme,
            dataset=state.dataset,
            styling=state.styling,
            selected_column_index=state.selected_column_index,
        )
    )
    features = feature_state()
    dataset = state.effective_dataset
    return {
        "chartType": compiled.chart_type,
        "theme": compiled.palette.id,
        "styling": dict(state.styling),
        "resolvedStyling": dict(compiled.style.options),
        "stylingOptions": [spec.as_json() for spec in applicable_option_specs(compiled.chart_type)],
        "dataset": {**dataset.as_payload(), "isSample": state.dataset is None},
        "navigation": {
            **compiled.column_state.as_json(),
            "columnName": dataset.series_names[compiled.column_state.selected_column_index % len(dataset.series)],
        },
        "spec": compiled.spec,
        "export": export_options(compiled.spec) if export_enabled(features) else None,
    }
