"""Export-time rules derived from a compiled chart specification."""

from __future__ import annotations

from typing import Final, TypedDict

from analysis.themes import DEFAULT_THEME

from .schema import ChartSpecification

TRANSPARENT: Final[str] = "transparent"
EXPORT_PIXEL_RATIO: Final[int] = 2


class ExportOptions(TypedDict):
    """Raster export request for a rendering surface."""

    type: str
    pixelRatio: int
    backgroundColor: str


def export_background_color(spec: ChartSpecification) -> str:
    """Return the raster background for an exported chart.

    The decision reads the compiled `backgroundColor`, not the theme id: a
    chart compiled with the default palette's background exports transparent,
    any other background is kept as-is.
    """

    background = spec.get("backgroundColor") or DEFAULT_THEME.background_color
    if background.lower() == DEFAULT_THEME.background_color.lower():
        return TRANSPARENT
    return background


def export_options(spec: ChartSpecification) -> ExportOptions:
    """Return the PNG export request for a compiled chart."""

    return {
        "type": "png",
        "pixelRatio": EXPORT_PIXEL_RATIO,
        "backgroundColor": export_background_color(spec),
    }
