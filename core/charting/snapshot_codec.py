"""Snapshot encoding/decoding helpers for chart editor state.

Snapshots are stored in the Django session, so they must be JSON-serializable
and decoding must tolerate payloads written by older versions or edited by
hand. Decoding is best-effort: malformed fields fall back to defaults instead
of raising.
"""

from __future__ import annotations

import logging
from typing import Any, cast

from analysis.chart_types import DEFAULT_CHART_TYPE, resolve_chart_type
from analysis.dataset import DataFormatError, TabularDataset, dataset_from_payload
from analysis.editor_state import EDITOR_STATE_VERSION, EditorState, known_option_keys
from analysis.styling import StyleValue
from analysis.themes import DEFAULT_THEME_ID, resolve_theme

logger = logging.getLogger(__name__)


def encode_editor_state(state: EditorState) -> dict[str, Any]:
    """Encode an EditorState into a JSON-serializable dictionary.

    Args:
        state: EditorState to encode.

    Returns:
        Dict payload safe for session storage.
    """

    return {
        "version": EDITOR_STATE_VERSION,
        "chart_type": state.chart_type,
        "theme": state.theme,
        "styling": dict(state.styling),
        "dataset": _encode_dataset(state.dataset),
        "selected_column_index": int(state.selected_column_index),
    }


def decode_editor_state(payload: dict[str, Any] | None) -> EditorState:
    """Decode an EditorState from a stored payload dictionary.

    Args:
        payload: Payload previously produced by `encode_editor_state`, or None.

    Returns:
        EditorState instance; missing or invalid fields take their defaults.
    """

    if not isinstance(payload, dict):
        return EditorState()

    chart_type = resolve_chart_type(str(payload.get("chart_type") or DEFAULT_CHART_TYPE)).id
    theme = resolve_theme(str(payload.get("theme") or DEFAULT_THEME_ID)).id
    styling_raw = payload.get("styling")
    styling: dict[str, StyleValue] = {}
    if isinstance(styling_raw, dict):
        keys = known_option_keys()
        styling = {
            str(key): cast(StyleValue, value)
            for key, value in styling_raw.items()
            if key in keys and isinstance(value, (bool, int, str))
        }
    return EditorState(
        chart_type=chart_type,
        theme=theme,
        styling=styling,
        dataset=_decode_dataset(payload.get("dataset")),
        selected_column_index=_parse_int(payload.get("selected_column_index")) or 0,
    )


def _encode_dataset(dataset: TabularDataset | None) -> dict[str, Any] | None:
    """Encode a dataset in the multi-series input shape."""

    if dataset is None:
        return None
    return {
        "labels": list(dataset.labels),
        "values": [list(series.values) for series in dataset.series],
        "seriesNames": list(dataset.series_names),
    }


def _decode_dataset(value: object) -> TabularDataset | None:
    """Best-effort dataset decoding for snapshot payloads."""

    if not isinstance(value, dict):
        return None
    try:
        return dataset_from_payload(value)
    except DataFormatError as exc:
        logger.warning("Discarding malformed dataset snapshot: %s", exc)
        return None


def _parse_int(value: object) -> int | None:
    """Best-effort int parsing for snapshot payloads."""

    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
