"""JSON views for the chart editor.

Every mutating endpoint loads the session editor state, applies one transition,
stores the result and responds with the recompiled editor payload. Only
`DataFormatError` and `ImportIOError` surface as user-facing errors, plus a
409 for an import superseded by a newer one on the same session.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from typing import Any

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.http import require_GET, require_POST

from analysis.chart_types import resolve_chart_type
from analysis.dataset import SAMPLE_HEADERS, DataFormatError, dataset_from_payload, sample_dataset
from analysis.editor_state import (
    EditorState,
    choose_column,
    replace_dataset,
    reset_styling,
    select_chart_type,
    select_theme,
    step_column,
    update_styling,
)
from analysis.styling import applicable_option_specs
from analysis.themes import THEMES
from core.feature_config import chart_type_enabled
from core.forms import ColumnSelectionForm, DatasetUploadForm
from core.parsers.table_file import ImportIOError
from core.services import ImportCoordinator, import_dataset_file
from core.studio import (
    chart_type_catalogue,
    describe_feature_state,
    editor_payload,
    feature_state,
    load_editor_state,
    save_editor_state,
)

logger = logging.getLogger(__name__)


@require_GET
def chart_types_api(request: HttpRequest) -> JsonResponse:
    """Return the chart type catalogue with feature gates applied."""

    state = feature_state()
    return JsonResponse({"chartTypes": chart_type_catalogue(state), "features": describe_feature_state(state)})


@require_GET
def themes_api(request: HttpRequest) -> JsonResponse:
    """Return the built-in theme palettes."""

    return JsonResponse({"themes": [theme.as_json() for theme in THEMES]})


@require_GET
def styling_options_api(request: HttpRequest) -> JsonResponse:
    """Return the styling options that apply to a chart type."""

    requested = (request.GET.get("chart_type") or "").strip() or load_editor_state(request).chart_type
    chart_type = resolve_chart_type(requested).id
    specs = applicable_option_specs(chart_type)
    return JsonResponse({"chartType": chart_type, "options": [spec.as_json() for spec in specs]})


@require_GET
def editor_api(request: HttpRequest) -> JsonResponse:
    """Return the current editor state and its compiled chart."""

    return JsonResponse(editor_payload(load_editor_state(request)))


@require_POST
def select_chart_type_api(request: HttpRequest) -> JsonResponse:
    """Switch the chart type; the selected column resets to the first."""

    body = _request_data(request)
    if body is None:
        return _bad_request("Request body must be a JSON object.")
    chart_type = str(body.get("chart_type") or "")
    if not chart_type_enabled(feature_state(), chart_type):
        return JsonResponse(
            {"error": "This chart type is not available.", "kind": "feature_disabled", "retryable": False},
            status=403,
        )
    return _store_and_respond(request, select_chart_type(load_editor_state(request), chart_type))


@require_POST
def select_theme_api(request: HttpRequest) -> JsonResponse:
    """Select a theme; unknown theme ids fall back to the default theme."""

    body = _request_data(request)
    if body is None:
        return _bad_request("Request body must be a JSON object.")
    return _store_and_respond(request, select_theme(load_editor_state(request), str(body.get("theme") or "")))


@require_POST
def update_styling_api(request: HttpRequest) -> JsonResponse:
    """Merge styling edits field-by-field (values are clamped, never rejected)."""

    body = _request_data(request)
    if body is None:
        return _bad_request("Request body must be a JSON object.")
    return _store_and_respond(request, update_styling(load_editor_state(request), body))


@require_POST
def reset_styling_api(request: HttpRequest) -> JsonResponse:
    """Drop every styling override."""

    return _store_and_respond(request, reset_styling(load_editor_state(request)))


@require_POST
def next_column_api(request: HttpRequest) -> JsonResponse:
    """Show the next data column."""

    return _store_and_respond(request, step_column(load_editor_state(request), forward=True))


@require_POST
def previous_column_api(request: HttpRequest) -> JsonResponse:
    """Show the previous data column."""

    return _store_and_respond(request, step_column(load_editor_state(request), forward=False))


@require_POST
def select_column_api(request: HttpRequest) -> JsonResponse:
    """Show a column by index; out-of-range indexes wrap around."""

    body = _request_data(request)
    form = ColumnSelectionForm(body or {})
    if not form.is_valid():
        return _bad_request("Column index must be an integer.")
    return _store_and_respond(request, choose_column(load_editor_state(request), form.cleaned_data["index"]))


@require_POST
def import_dataset_api(request: HttpRequest) -> JsonResponse:
    """Import an uploaded CSV/Excel file, replacing the current dataset."""

    form = DatasetUploadForm(request.POST, request.FILES)
    if not form.is_valid():
        messages = [str(error) for error in form.errors.get("file", [])] or ["Please choose a file to import."]
        return _import_error(messages[0], kind="import_io", retryable=True)

    if request.session.session_key is None:
        request.session.save()
    upload = form.cleaned_data["file"]
    state = load_editor_state(request)
    try:
        result = import_dataset_file(
            state,
            filename=upload.name or "",
            data=upload.read(),
            coordinator=ImportCoordinator(request.session.session_key),
        )
    except ImportIOError as exc:
        return _import_error(str(exc), kind="import_io", retryable=exc.retryable)
    except DataFormatError as exc:
        return _import_error(str(exc), kind="data_format", retryable=True)
    if not result.committed:
        # The newer import owns the session state; leave it untouched.
        return JsonResponse(
            {"error": "A newer import replaced this one.", "kind": "superseded", "retryable": False},
            status=409,
        )
    return _store_and_respond(request, result.state)


@require_POST
def load_dataset_api(request: HttpRequest) -> JsonResponse:
    """Replace the dataset from a `{labels, values, seriesNames?}` JSON body."""

    body = _request_data(request)
    if body is None:
        return _bad_request("Request body must be a JSON object.")
    try:
        dataset = dataset_from_payload(body)
    except DataFormatError as exc:
        return _import_error(str(exc), kind="data_format", retryable=True)
    return _store_and_respond(request, replace_dataset(load_editor_state(request), dataset))


@require_POST
def sample_data_api(request: HttpRequest) -> JsonResponse:
    """Install the built-in sample dataset."""

    return _store_and_respond(request, replace_dataset(load_editor_state(request), sample_dataset()))


@require_GET
def sample_csv(request: HttpRequest) -> HttpResponse:
    """Download the sample dataset as a CSV template."""

    dataset = sample_dataset()
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(SAMPLE_HEADERS)
    for label, value in zip(dataset.labels, dataset.series[0].values):
        writer.writerow([label, int(value) if value.is_integer() else value])
    response = HttpResponse(buffer.getvalue(), content_type="text/csv; charset=utf-8")
    response["Content-Disposition"] = 'attachment; filename="sample-chart-data.csv"'
    return response


def _store_and_respond(request: HttpRequest, state: EditorState) -> JsonResponse:
    save_editor_state(request, state)
    return JsonResponse(editor_payload(state))


def _request_data(request: HttpRequest) -> dict[str, Any] | None:
    """Return the JSON object body, or form data for non-JSON requests."""

    if request.content_type == "application/json":
        try:
            body = json.loads(request.body or b"{}")
        except (UnicodeDecodeError, ValueError):
            return None
        return body if isinstance(body, dict) else None
    return {key: request.POST.get(key) for key in request.POST}


def _bad_request(message: str) -> JsonResponse:
    return JsonResponse({"error": message, "kind": "bad_request", "retryable": False}, status=400)


def _import_error(message: str, *, kind: str, retryable: bool) -> JsonResponse:
    logger.info("Dataset import rejected (%s): %s", kind, message)
    return JsonResponse({"error": message, "kind": kind, "retryable": retryable}, status=400)
