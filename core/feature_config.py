"""Feature configuration state and the gates that consume it.

Feature configuration is loaded from an optional YAML file. Its lifecycle is
modelled explicitly so callers never infer availability from `None`:

- `Loading`: nothing has been read yet.
- `Loaded`: the file (or the built-in defaults) was read successfully.
- `Unavailable`: a configured file could not be read or parsed.

Gates treat `Loading` and `Unavailable` the same way: every chart type and
export stay enabled.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Union

import yaml

from analysis.chart_types import CHART_TYPES, resolve_chart_type

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FeatureConfig:
    """Feature switches read from the configuration file.

    Args:
        disabled_chart_types: Chart-type ids hidden from selection.
        export_enabled: Whether chart export is offered.
    """

    disabled_chart_types: frozenset[str] = field(default_factory=frozenset)
    export_enabled: bool = True


@dataclass(frozen=True, slots=True)
class Loading:
    """Configuration has not been read yet."""


@dataclass(frozen=True, slots=True)
class Loaded:
    """Configuration was read successfully."""

    config: FeatureConfig


@dataclass(frozen=True, slots=True)
class Unavailable:
    """Configuration could not be read."""

    reason: str


ConfigState = Union[Loading, Loaded, Unavailable]


def parse_feature_config(payload: Mapping[str, Any]) -> FeatureConfig:
    """Parse a FeatureConfig from a decoded YAML mapping.

    Args:
        payload: Mapping read from the configuration file.

    Returns:
        FeatureConfig with chart-type ids canonicalized.

    Raises:
        ValueError: When a field has the wrong type.
    """

    raw_disabled = payload.get("disabled_chart_types") or []
    if not isinstance(raw_disabled, list):
        raise ValueError("disabled_chart_types must be a list of chart type ids.")
    raw_export = payload.get("export_enabled", True)
    if not isinstance(raw_export, bool):
        raise ValueError("export_enabled must be a boolean.")

    disabled: set[str] = set()
    for item in raw_disabled:
        descriptor = CHART_TYPES.get(str(item))
        if descriptor is None:
            logger.warning("Ignoring unknown chart type in feature config: %r", item)
            continue
        disabled.add(descriptor.id)
    return FeatureConfig(disabled_chart_types=frozenset(disabled), export_enabled=raw_export)


def load_feature_config(path: str | Path | None) -> ConfigState:
    """Read feature configuration from a YAML file.

    Args:
        path: File path, or None/empty to use the built-in defaults.

    Returns:
        `Loaded` on success, `Unavailable` when the file is missing or invalid.
    """

    if not path:
        return Loaded(config=FeatureConfig())
    try:
        raw = Path(path).read_text(encoding="utf-8")
        payload = yaml.safe_load(raw) or {}
        if not isinstance(payload, dict):
            raise ValueError("feature config must be a mapping.")
        config = parse_feature_config(payload)
    except (OSError, yaml.YAMLError, ValueError) as exc:
        logger.warning("Feature config %s unavailable: %s", path, exc)
        return Unavailable(reason=str(exc))
    logger.info("Loaded feature config from %s", path)
    return Loaded(config=config)


def chart_type_enabled(state: ConfigState, chart_type: str | None) -> bool:
    """Return True when a chart type may be selected."""

    if isinstance(state, Loaded):
        return resolve_chart_type(chart_type).id not in state.config.disabled_chart_types
    return True


def export_enabled(state: ConfigState) -> bool:
    """Return True when chart export is offered."""

    if isinstance(state, Loaded):
        return state.config.export_enabled
    return True


class FeatureConfigProvider:
    """Hold the ConfigState for one configuration path."""

    def __init__(self, path: str | Path | None) -> None:
        """Initialize in the `Loading` state; nothing is read yet."""

        self._path = path
        self._state: ConfigState = Loading()

    @property
    def state(self) -> ConfigState:
        """Return the current state, loading on first access."""

        if isinstance(self._state, Loading):
            self._state = load_feature_config(self._path)
        return self._state

    def reload(self) -> ConfigState:
        """Re-read the configuration file."""

        self._state = load_feature_config(self._path)
        return self._state
