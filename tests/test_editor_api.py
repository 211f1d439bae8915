"""Integration tests for the chart editor JSON API."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse

from core import services
from core.parsers.table_file import UNSUPPORTED_FILE_MESSAGE

pytestmark = pytest.mark.integration


def _post_json(client, name: str, body: dict[str, Any] | None = None):
    return client.post(reverse(name), data=body or {}, content_type="application/json")


def _upload(client, filename: str, content: bytes):
    upload = SimpleUploadedFile(filename, content, content_type="application/octet-stream")
    return client.post(reverse("core:import_dataset_api"), data={"file": upload})


def test_editor_starts_with_sample_bar_chart(editor_client) -> None:
    """A fresh session shows the sample data as a bar chart."""

    response = editor_client.get(reverse("core:editor_api"))

    assert response.status_code == 200
    payload = response.json()
    assert payload["chartType"] == "bar"
    assert payload["theme"] == "default"
    assert payload["dataset"]["isSample"] is True
    assert payload["dataset"]["labels"] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    assert payload["spec"]["series"][0]["data"] == [120.0, 200.0, 150.0, 80.0, 70.0, 110.0, 130.0]
    assert payload["navigation"] == {
        "selectedColumnIndex": 0,
        "availableColumns": 1,
        "needsNavigation": False,
        "columnName": "Sales",
    }
    assert payload["export"]["backgroundColor"] == "transparent"


def test_pie_navigation_wraps_through_imported_columns(editor_client) -> None:
    """Stepping through three columns on a pie chart returns to the first."""

    response = _upload(editor_client, "regions.csv", b"Month,North,South,East\nJan,1,2,3\nFeb,4,5,6\n")
    assert response.status_code == 200
    assert response.json()["dataset"]["seriesNames"] == ["North", "South", "East"]

    payload = _post_json(editor_client, "core:select_chart_type_api", {"chart_type": "pie"}).json()
    assert payload["navigation"]["availableColumns"] == 3

    names = []
    for _ in range(3):
        payload = _post_json(editor_client, "core:next_column_api").json()
        names.append(payload["navigation"]["columnName"])

    assert names == ["South", "East", "North"]
    assert payload["navigation"]["selectedColumnIndex"] == 0

    payload = _post_json(editor_client, "core:previous_column_api").json()
    assert payload["navigation"]["selectedColumnIndex"] == 2
    assert [datum["value"] for datum in payload["spec"]["series"][0]["data"]] == [3.0, 6.0]


def test_invalid_table_keeps_current_dataset(editor_client) -> None:
    """A duplicate-header file is rejected and the sample data stays in place."""

    response = _upload(editor_client, "dup.csv", b"Day,Sales,Sales\nMon,1,2\n")

    assert response.status_code == 400
    assert response.json() == {
        "error": "File contains duplicate column headers.",
        "kind": "data_format",
        "retryable": True,
    }
    assert editor_client.get(reverse("core:editor_api")).json()["dataset"]["isSample"] is True


def test_unsupported_extension_is_an_import_error(editor_client) -> None:
    """Files with other extensions never reach the parser."""

    response = _upload(editor_client, "notes.txt", b"a,b\n1,2\n")

    assert response.status_code == 400
    assert response.json()["kind"] == "import_io"
    assert response.json()["error"] == UNSUPPORTED_FILE_MESSAGE


def test_styling_edits_are_clamped(editor_client) -> None:
    """Out-of-range styling values are clamped rather than rejected."""

    payload = _post_json(editor_client, "core:update_styling_api", {"barWidth": 150}).json()

    assert payload["styling"] == {"barWidth": 100}
    assert payload["resolvedStyling"]["barWidth"] == 100
    assert payload["spec"]["series"][0]["barWidth"] == "100%"

    payload = _post_json(editor_client, "core:reset_styling_api").json()
    assert payload["styling"] == {}
    assert payload["spec"]["series"][0]["barWidth"] == "60%"


def test_theme_selection_falls_back_and_drives_export(editor_client) -> None:
    """Unknown themes resolve to the default; dark exports its own background."""

    payload = _post_json(editor_client, "core:select_theme_api", {"theme": "neon"}).json()
    assert payload["theme"] == "default"

    payload = _post_json(editor_client, "core:select_theme_api", {"theme": "dark"}).json()
    assert payload["theme"] == "dark"
    assert payload["spec"]["backgroundColor"] == "#1e1e1e"
    assert payload["export"]["backgroundColor"] == "#1e1e1e"


def test_select_column_wraps_out_of_range_index(editor_client) -> None:
    """Direct column selection wraps instead of failing."""

    _post_json(
        editor_client,
        "core:load_dataset_api",
        {"labels": ["a", "b"], "values": [[1, 2], [3, 4], [5, 6]], "seriesNames": ["x", "y", "z"]},
    )

    payload = _post_json(editor_client, "core:select_column_api", {"index": 5}).json()

    assert payload["navigation"]["selectedColumnIndex"] == 2
    assert payload["spec"]["series"][0]["name"] == "z"

    response = _post_json(editor_client, "core:select_column_api", {"index": "first"})
    assert response.status_code == 400


def test_json_dataset_load_and_sample_restore(editor_client) -> None:
    """JSON datasets replace the sample; the sample can be restored."""

    payload = _post_json(editor_client, "core:load_dataset_api", {"labels": ["Mon", "Tue"], "values": [10, 20]}).json()
    assert payload["dataset"]["isSample"] is False
    assert payload["spec"]["series"][0]["data"] == [10.0, 20.0]

    response = _post_json(editor_client, "core:load_dataset_api", {"labels": "Mon"})
    assert response.status_code == 400
    assert response.json()["kind"] == "data_format"

    payload = _post_json(editor_client, "core:sample_data_api").json()
    assert payload["dataset"]["labels"][0] == "Mon"
    assert len(payload["dataset"]["labels"]) == 7


def test_sample_csv_download(client) -> None:
    """The sample CSV template matches the built-in sample data."""

    response = client.get(reverse("core:sample_csv"))

    assert response.status_code == 200
    assert response["Content-Type"].startswith("text/csv")
    lines = response.content.decode("utf-8").splitlines()
    assert lines[:2] == ["Day,Sales", "Mon,120"]
    assert len(lines) == 8


def test_catalogue_endpoints(client) -> None:
    """Chart types, themes and styling options are listed."""

    chart_types = client.get(reverse("core:chart_types_api")).json()["chartTypes"]
    assert len(chart_types) == 10
    assert all(entry["enabled"] for entry in chart_types)

    themes = client.get(reverse("core:themes_api")).json()["themes"]
    assert [theme["id"] for theme in themes][0] == "default"
    assert len(themes) == 9

    options = client.get(reverse("core:styling_options_api"), {"chart_type": "funnel"}).json()["options"]
    keys = {option["key"] for option in options}
    assert "funnelSort" in keys
    assert "barWidth" not in keys


def test_disabled_features_are_enforced(editor_client, feature_config_file: Path) -> None:
    """Disabled chart types are refused and disabled export is omitted."""

    feature_config_file.write_text("disabled_chart_types: [radar]\nexport_enabled: false\n", encoding="utf-8")

    response = _post_json(editor_client, "core:select_chart_type_api", {"chart_type": "radar"})
    assert response.status_code == 403
    assert response.json()["kind"] == "feature_disabled"

    payload = _post_json(editor_client, "core:select_chart_type_api", {"chart_type": "line"}).json()
    assert payload["chartType"] == "line"
    assert payload["export"] is None

    catalogue = editor_client.get(reverse("core:chart_types_api")).json()
    assert catalogue["features"] == {"status": "loaded", "disabledChartTypes": ["radar"], "exportEnabled": False}
    assert {entry["id"]: entry["enabled"] for entry in catalogue["chartTypes"]}["radar"] is False


def test_import_superseded_mid_parse_keeps_session_state(editor_client, monkeypatch) -> None:
    """An import overtaken by a newer one is refused and does not overwrite the dataset."""

    _post_json(editor_client, "core:sample_data_api")
    session_key = editor_client.session.session_key
    original_read = services.read_dataset_file

    def read_then_newer_import_starts(filename: str, data: bytes):
        dataset = original_read(filename, data)
        services.ImportCoordinator(session_key).begin()
        return dataset

    monkeypatch.setattr(services, "read_dataset_file", read_then_newer_import_starts)

    response = _upload(editor_client, "slow.csv", b"City,Visits\nOslo,5\n")

    assert response.status_code == 409
    assert response.json()["kind"] == "superseded"
    assert editor_client.get(reverse("core:editor_api")).json()["dataset"]["labels"][0] == "Mon"


@pytest.mark.parametrize(("requested", "expected"), [("pie-nightingale", "pie-rose"), ("treemap", "bar"), ("radar", "radar")])
def test_styling_options_report_resolved_chart_type(client, requested: str, expected: str) -> None:
    """Aliases and unknown ids are reported as the chart type they resolve to."""

    payload = client.get(reverse("core:styling_options_api"), {"chart_type": requested}).json()

    assert payload["chartType"] == expected
