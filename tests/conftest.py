"""Pytest fixtures shared across chart editor tests."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from pathlib import Path

import pytest

from analysis.dataset import Series, TabularDataset


@pytest.fixture
def single_series_dataset() -> TabularDataset:
    """Return a two-category, single-series dataset."""

    return TabularDataset(labels=("Mon", "Tue"), series=(Series(name="Sales", values=(10.0, 20.0)),))


@pytest.fixture
def three_column_dataset() -> TabularDataset:
    """Return a dataset with three value columns."""

    return TabularDataset(
        labels=("Jan", "Feb", "Mar"),
        series=(
            Series(name="North", values=(1.0, 4.0, 7.0)),
            Series(name="South", values=(2.0, 5.0, 8.0)),
            Series(name="East", values=(3.0, 6.0, 9.0)),
        ),
    )


@pytest.fixture
def editor_client(client, db):
    """Return a Django test client with database-backed sessions available."""

    return client


@pytest.fixture
def feature_config_file(settings, tmp_path: Path) -> Iterator[Path]:
    """Point the feature configuration at a temporary YAML file."""

    from core.studio import get_feature_config_provider

    path = tmp_path / "features.yml"
    path.write_text("disabled_chart_types: []\nexport_enabled: true\n", encoding="utf-8")
    settings.CHARTS_FEATURE_CONFIG_PATH = str(path)
    get_feature_config_provider.cache_clear()
    yield path
    get_feature_config_provider.cache_clear()


def pytest_collection_modifyitems(items: Sequence[pytest.Item]) -> None:
    """Enforce that every test has exactly one speed marker.

    The suite is runnable by intent:
    - `unit`: pure, fast tests with no database access.
    - `integration`: tests touching Django, database, views, or IO.

    Each test must have exactly one of these markers.
    """

    invalid: list[str] = []
    for item in items:
        has_unit = item.get_closest_marker("unit") is not None
        has_integration = item.get_closest_marker("integration") is not None
        if has_unit == has_integration:
            markers = []
            if has_unit:
                markers.append("unit")
            if has_integration:
                markers.append("integration")
            invalid.append(f"{item.nodeid} (markers={markers or 'none'})")

    if invalid:
        joined = "\n".join(f"- {nodeid}" for nodeid in invalid)
        raise pytest.UsageError(
            "Each test must have exactly one speed marker: `@pytest.mark.unit` or "
            "`@pytest.mark.integration`.\n"
            f"Offending tests:\n{joined}"
        )
