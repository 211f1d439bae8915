"""Styling option catalogue and the style resolver.

StylingOptions are a flat mapping of recognized keys to scalar values. Each key
belongs to an applicability group, carries a default (which may differ per
chart type) and, for numeric keys, a valid range. Resolution never rejects
input:

- unknown keys are ignored,
- out-of-range numbers are clamped to the nearest bound,
- invalid choices, unparseable numbers and unparseable booleans fall back to
  the default.

The resolver also produces the text style blocks consumed by every
style-bearing surface of a compiled chart.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Final, Literal, Mapping, TypedDict

from .chart_types import StyleGroup, resolve_chart_type
from .themes import ThemePalette

logger = logging.getLogger(__name__)

StyleValue = bool | int | str
OptionKind = Literal["bool", "int", "choice"]
TextSurface = Literal["label", "value"]

FONT_FAMILIES: Final[tuple[str, ...]] = (
    "Arial",
    "Helvetica",
    "Times New Roman",
    "Courier New",
    "Verdana",
    "Georgia",
    "Palatino",
    "Garamond",
    "Bookman",
    "Comic Sans MS",
    "Trebuchet MS",
    "Arial Black",
    "Impact",
    "Lucida Console",
    "Tahoma",
)
FONT_STYLES: Final[tuple[str, ...]] = ("normal", "bold", "italic")
AXIS_ROTATIONS: Final[tuple[int, ...]] = (0, 15, 30, 45, 90)
POINT_SHAPES: Final[tuple[str, ...]] = ("circle", "rect", "roundRect", "triangle", "diamond", "pin", "arrow")
LABEL_POSITIONS: Final[tuple[str, ...]] = ("top", "bottom", "left", "right", "inside")

_TRUE_STRINGS: Final[frozenset[str]] = frozenset({"1", "true", "t", "yes", "y", "on"})
_FALSE_STRINGS: Final[frozenset[str]] = frozenset({"0", "false", "f", "no", "n", "off", ""})


class TextStyleBlock(TypedDict):
    """Resolved text style for one chart surface."""

    show: bool
    fontFamily: str
    fontSize: int
    fontWeight: int | str
    fontStyle: str
    color: str


@dataclass(frozen=True, slots=True)
class StyleOptionSpec:
    """Describe one styling option.

    Args:
        key: Option key as used in StylingOptions payloads.
        group: Applicability group.
        kind: Value kind used for coercion.
        default: Default value.
        minimum: Lower bound for numeric options.
        maximum: Upper bound for numeric options.
        step: Snapping step for numeric options, when the range is stepped.
        choices: Allowed values for choice options.
    """

    key: str
    group: StyleGroup
    kind: OptionKind
    default: StyleValue
    minimum: int | None = None
    maximum: int | None = None
    step: int | None = None
    choices: tuple[str, ...] = ()

    def as_json(self) -> dict[str, Any]:
        """Return a JSON-serializable description for API responses."""

        payload: dict[str, Any] = {"key": self.key, "group": self.group, "kind": self.kind, "default": self.default}
        if self.kind == "int":
            payload["min"] = self.minimum
            payload["max"] = self.maximum
            if self.step is not None:
                payload["step"] = self.step
        if self.choices:
            payload["choices"] = list(self.choices)
        return payload


STYLE_OPTION_SPECS: Final[tuple[StyleOptionSpec, ...]] = (
    StyleOptionSpec("labelVisible", "common", "bool", True),
    StyleOptionSpec("valueVisible", "common", "bool", True),
    StyleOptionSpec("fontFamily", "common", "choice", "Arial", choices=FONT_FAMILIES),
    StyleOptionSpec("fontStyle", "common", "choice", "normal", choices=FONT_STYLES),
    StyleOptionSpec("fontWeight", "common", "int", 400, minimum=100, maximum=900, step=100),
    StyleOptionSpec("fontSize", "common", "int", 12, minimum=10, maximum=30),
    StyleOptionSpec("xAxisRotation", "axis", "int", 0, minimum=0, maximum=90),
    StyleOptionSpec("yAxisRotation", "axis", "int", 0, minimum=0, maximum=90),
    StyleOptionSpec("lineWidth", "line", "int", 3, minimum=1, maximum=10),
    StyleOptionSpec("lineSmooth", "line", "bool", True),
    StyleOptionSpec("showDataPoints", "line", "bool", False),
    StyleOptionSpec("pointSize", "line", "int", 8, minimum=5, maximum=20),
    StyleOptionSpec("areaOpacity", "area", "int", 50, minimum=0, maximum=100),
    StyleOptionSpec("barWidth", "bar", "int", 60, minimum=10, maximum=100, step=5),
    StyleOptionSpec("barBorderRadius", "bar", "int", 4, minimum=0, maximum=20),
    StyleOptionSpec("barSpacing", "bar", "int", 0, minimum=0, maximum=100),
    StyleOptionSpec("innerRadius", "pie", "int", 0, minimum=0, maximum=80),
    StyleOptionSpec("outerRadius", "pie", "int", 40, minimum=30, maximum=100),
    StyleOptionSpec("labelLineLength", "pie", "int", 15, minimum=5, maximum=50),
    StyleOptionSpec("showLegend", "pie", "bool", True),
    StyleOptionSpec("funnelWidth", "funnel", "int", 80, minimum=50, maximum=100),
    StyleOptionSpec("funnelGap", "funnel", "int", 2, minimum=0, maximum=10),
    StyleOptionSpec("funnelLabelPosition", "funnel", "choice", "inside", choices=("inside", "outside")),
    StyleOptionSpec("funnelSort", "funnel", "choice", "descending", choices=("descending", "ascending")),
    StyleOptionSpec("scatterPointSize", "scatter", "int", 20, minimum=5, maximum=50),
    StyleOptionSpec("scatterPointShape", "scatter", "choice", "circle", choices=POINT_SHAPES),
    StyleOptionSpec("scatterShowLabels", "scatter", "bool", True),
    StyleOptionSpec("scatterSort", "scatter", "choice", "none", choices=("none", "ascending", "descending")),
    StyleOptionSpec("scatterLabelPosition", "scatter", "choice", "top", choices=LABEL_POSITIONS),
    StyleOptionSpec("radarRadius", "radar", "int", 70, minimum=30, maximum=90),
    StyleOptionSpec("radarNameGap", "radar", "int", 5, minimum=0, maximum=30),
    StyleOptionSpec("radarSplitNumber", "radar", "int", 5, minimum=1, maximum=10),
    StyleOptionSpec("radarShape", "radar", "choice", "polygon", choices=("polygon", "circle")),
    StyleOptionSpec("radarShowArea", "radar", "bool", True),
    StyleOptionSpec("radarAreaOpacity", "radar", "int", 30, minimum=0, maximum=100),
)

# Per chart type default and range overrides, keyed by chart-type id then option key.
CHART_TYPE_OVERRIDES: Final[dict[str, dict[str, dict[str, StyleValue]]]] = {
    "line": {"showDataPoints": {"default": True}},
    "area": {"showDataPoints": {"default": True}},
    "pie-rose": {
        "innerRadius": {"default": 20, "minimum": 5, "maximum": 60},
        "outerRadius": {"default": 100, "minimum": 60, "maximum": 120},
    },
}

COMMON_OPTION_KEYS: Final[frozenset[str]] = frozenset(
    spec.key for spec in STYLE_OPTION_SPECS if spec.group == "common"
)


def option_specs_for(chart_type: str | None) -> tuple[StyleOptionSpec, ...]:
    """Return every option spec with chart-type overrides applied.

    Args:
        chart_type: Chart-type id; unknown ids resolve to the default type.

    Returns:
        Option specs in catalogue order.
    """

    descriptor = resolve_chart_type(chart_type)
    overrides = CHART_TYPE_OVERRIDES.get(descriptor.id, {})
    return tuple(
        replace(spec, **overrides[spec.key]) if spec.key in overrides else spec  # type: ignore[arg-type]
        for spec in STYLE_OPTION_SPECS
    )


def applicable_option_specs(chart_type: str | None) -> tuple[StyleOptionSpec, ...]:
    """Return only the option specs whose group applies to the chart type."""

    descriptor = resolve_chart_type(chart_type)
    return tuple(spec for spec in option_specs_for(descriptor.id) if spec.group in descriptor.style_groups)


def default_styling_options(chart_type: str | None) -> dict[str, StyleValue]:
    """Return the fully-populated default StylingOptions for a chart type."""

    return {spec.key: spec.default for spec in option_specs_for(chart_type)}


def resolve_styling_options(
    chart_type: str | None, options: Mapping[str, object] | None = None
) -> dict[str, StyleValue]:
    """Merge chart-type defaults with (possibly partial) user options.

    Args:
        chart_type: Chart-type id selecting defaults and ranges.
        options: User StylingOptions; may be partial or contain unknown keys.

    Returns:
        A mapping holding every recognized key with a valid value.
    """

    provided = dict(options or {})
    resolved: dict[str, StyleValue] = {}
    for spec in option_specs_for(chart_type):
        if spec.key in provided:
            resolved[spec.key] = coerce_option(spec, provided[spec.key])
        else:
            resolved[spec.key] = spec.default
    return resolved


def coerce_option(spec: StyleOptionSpec, raw: object) -> StyleValue:
    """Coerce a raw user value into a valid value for one option.

    Numeric values are clamped into `[minimum, maximum]` and, for stepped
    ranges, snapped to the nearest step. Coercing an already-coerced value
    returns it unchanged.
    """

    if spec.kind == "bool":
        parsed_bool = _parse_bool(raw)
        if parsed_bool is None:
            logger.debug("Invalid boolean for %s: %r", spec.key, raw)
            return spec.default
        return parsed_bool

    if spec.kind == "choice":
        text = str(raw).strip() if raw is not None else ""
        if text in spec.choices:
            return text
        logger.debug("Invalid choice for %s: %r", spec.key, raw)
        return spec.default

    number = _parse_float(raw)
    if number is None:
        logger.debug("Invalid number for %s: %r", spec.key, raw)
        return spec.default
    return clamp_number(number, minimum=spec.minimum, maximum=spec.maximum, step=spec.step)


def clamp_number(value: float, *, minimum: int | None, maximum: int | None, step: int | None = None) -> int:
    """Clamp a number into an integer range, snapping to `step` when given."""

    if step:
        base = minimum or 0
        value = base + round((value - base) / step) * step
    rounded = int(round(value))
    if minimum is not None and rounded < minimum:
        return minimum
    if maximum is not None and rounded > maximum:
        return maximum
    return rounded


def text_style_block(
    options: Mapping[str, StyleValue],
    palette: ThemePalette,
    *,
    surface: TextSurface = "label",
    default_show: bool = True,
    font_size_delta: int = 0,
) -> TextStyleBlock:
    """Resolve the text style for one surface.

    `show` for a label surface follows `labelVisible`, for a value surface
    `valueVisible`; a surface whose own default is hidden stays hidden. An
    explicit `bold` font style wins over the numeric weight.

    Args:
        options: Resolved StylingOptions.
        palette: Active theme palette supplying the text color.
        surface: Whether the surface shows name-derived or value-derived text.
        default_show: The surface's own visibility default.
        font_size_delta: Offset applied to the resolved font size.

    Returns:
        TextStyleBlock with literal values only.
    """

    visibility_key = "valueVisible" if surface == "value" else "labelVisible"
    font_style = str(options.get("fontStyle", "normal"))
    font_weight: int | str = int(options.get("fontWeight", 400))
    if font_style == "bold":
        font_weight = "bold"
        font_style = "normal"
    elif font_style != "italic":
        font_style = "normal"
    return {
        "show": options.get(visibility_key) is not False and default_show,
        "fontFamily": str(options.get("fontFamily", "Arial")),
        "fontSize": int(options.get("fontSize", 12)) + font_size_delta,
        "fontWeight": font_weight,
        "fontStyle": font_style,
        "color": palette.text_color,
    }


@dataclass(frozen=True, slots=True)
class ResolvedStyle:
    """Resolved options plus text style blocks for each chart surface.

    Args:
        chart_type: Chart-type id the options were resolved for.
        palette: Palette used for text colors.
        options: Fully-populated StylingOptions.
        text: Base chart text style.
        axis_label: Axis tick label style.
        legend_text: Legend entry style.
        series_label: Name-derived series label style.
        series_value: Value-derived series label style.
        tooltip_text: Tooltip text style.
    """

    chart_type: str
    palette: ThemePalette
    options: Mapping[str, StyleValue]
    text: TextStyleBlock
    axis_label: TextStyleBlock
    legend_text: TextStyleBlock
    series_label: TextStyleBlock
    series_value: TextStyleBlock
    tooltip_text: TextStyleBlock

    def __getitem__(self, key: str) -> StyleValue:
        return self.options[key]

    def surface(self, surface: TextSurface, *, default_show: bool = True, font_size_delta: int = 0) -> TextStyleBlock:
        """Return a custom text style block derived from these options."""

        return text_style_block(
            self.options,
            self.palette,
            surface=surface,
            default_show=default_show,
            font_size_delta=font_size_delta,
        )


def resolve_style(
    chart_type: str | None,
    palette: ThemePalette,
    options: Mapping[str, object] | None = None,
) -> ResolvedStyle:
    """Resolve StylingOptions and text style blocks for a chart type.

    Args:
        chart_type: Chart-type id; unknown ids resolve to the default type.
        palette: Active theme palette.
        options: Possibly partial user StylingOptions.

    Returns:
        ResolvedStyle ready for the chart compiler.
    """

    descriptor = resolve_chart_type(chart_type)
    resolved = resolve_styling_options(descriptor.id, options)

    def block(surface: TextSurface = "label") -> TextStyleBlock:
        return text_style_block(resolved, palette, surface=surface)

    return ResolvedStyle(
        chart_type=descriptor.id,
        palette=palette,
        options=resolved,
        text=block(),
        axis_label=block(),
        legend_text=block(),
        series_label=block(),
        series_value=block("value"),
        tooltip_text=block(),
    )


def _parse_bool(value: object) -> bool | None:
    """Best-effort boolean parsing for user-supplied options."""

    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    return None


def _parse_float(value: object) -> float | None:
    """Best-effort number parsing for user-supplied options."""

    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number
