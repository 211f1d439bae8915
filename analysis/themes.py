"""Built-in chart themes and the theme resolver.

Themes are literal color tables. Resolution never fails: an unknown theme id
resolves to the default palette.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Final

logger = logging.getLogger(__name__)

DEFAULT_THEME_ID: Final[str] = "default"


@dataclass(frozen=True, slots=True)
class ThemePalette:
    """A named set of chart colors.

    Args:
        id: Stable theme identifier.
        label: Human-friendly theme name.
        background_color: Chart background color.
        text_color: Color for all chart text.
        grid_color: Color for grid lines, borders and tooltip outlines.
        colors: Cyclic series/category color sequence (at least one entry).
    """

    id: str
    label: str
    background_color: str
    text_color: str
    grid_color: str
    colors: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.colors:
            raise ValueError(f"ThemePalette[{self.id!r}] must define at least one color.")

    def color_at(self, index: int) -> str:
        """Return the palette color for a series or category index."""

        return self.colors[index % len(self.colors)]

    def as_json(self) -> dict[str, object]:
        """Return a JSON-serializable representation for API responses."""

        return {
            "id": self.id,
            "label": self.label,
            "backgroundColor": self.background_color,
            "textColor": self.text_color,
            "gridColor": self.grid_color,
            "colors": list(self.colors),
        }


THEMES: Final[tuple[ThemePalette, ...]] = (
    ThemePalette(
        id="default",
        label="Default",
        background_color="#ffffff",
        text_color="#333333",
        grid_color="#e0e0e0",
        colors=("#5470c6", "#91cc75", "#fac858", "#ee6666", "#73c0de", "#3ba272", "#fc8452", "#9a60b4"),
    ),
    ThemePalette(
        id="vintage",
        label="Vintage",
        background_color="#fef8ef",
        text_color="#6c5b4f",
        grid_color="#e8dcc6",
        colors=("#d87c7c", "#919e8b", "#d7ab82", "#6e7074", "#61a0a8", "#efa18d", "#787464", "#cc7e63"),
    ),
    ThemePalette(
        id="dark",
        label="Dark",
        background_color="#1e1e1e",
        text_color="#e0e0e0",
        grid_color="#404040",
        colors=(
            "#dd6b66",
            "#759aa0",
            "#e69d87",
            "#8dc1a9",
            "#ea7ccc",
            "#eedd78",
            "#73a373",
            "#73b9bc",
            "#7289ab",
            "#91ca8c",
            "#f49f42",
        ),
    ),
    ThemePalette(
        id="westeros",
        label="Westeros",
        background_color="#fffef0",
        text_color="#516b91",
        grid_color="#d3d3d3",
        colors=(
            "#516b91",
            "#59a4a3",
            "#84c7b0",
            "#a3d9b1",
            "#c7e89e",
            "#f0f9a4",
            "#f7d794",
            "#f5b87e",
            "#f29866",
            "#ee5a6f",
        ),
    ),
    ThemePalette(
        id="essos",
        label="Essos",
        background_color="#fffef0",
        text_color="#6e7079",
        grid_color="#d3d3d3",
        colors=("#893448", "#d95850", "#eb8146", "#ffb248", "#f2d643", "#ebdba4"),
    ),
    ThemePalette(
        id="wonderland",
        label="Wonderland",
        background_color="#fffef0",
        text_color="#516b91",
        grid_color="#d3d3d3",
        colors=(
            "#4ea397",
            "#22c3aa",
            "#7bd9a5",
            "#bff128",
            "#faff72",
            "#f9f26d",
            "#fad758",
            "#f9ca7b",
            "#f4a261",
            "#ee5a6f",
        ),
    ),
    ThemePalette(
        id="walden",
        label="Walden",
        background_color="#fffef0",
        text_color="#516b91",
        grid_color="#d3d3d3",
        colors=("#c12e34", "#e6b600", "#0098d9", "#2b821d", "#005eaa", "#339ca8", "#cda819", "#32a487"),
    ),
    ThemePalette(
        id="chalk",
        label="Chalk",
        background_color="#293441",
        text_color="#b9b8ce",
        grid_color="#3e4a5b",
        colors=("#fc97af", "#87f7cf", "#f7f494", "#72ccff", "#f7c5a0", "#d4a4eb", "#d2f5a6", "#76f2f2"),
    ),
    ThemePalette(
        id="infographic",
        label="Infographic",
        background_color="#ffffff",
        text_color="#333333",
        grid_color="#e0e0e0",
        colors=(
            "#C1232B",
            "#B5C334",
            "#FCCE10",
            "#E87C25",
            "#27727B",
            "#FE8463",
            "#9BCA63",
            "#FAD860",
            "#F3A43B",
            "#60C0DD",
            "#D7504B",
            "#C6E579",
            "#F4E001",
            "#F0805A",
            "#26C0C0",
        ),
    ),
)

THEMES_BY_ID: Final[dict[str, ThemePalette]] = {theme.id: theme for theme in THEMES}
DEFAULT_THEME: Final[ThemePalette] = THEMES_BY_ID[DEFAULT_THEME_ID]


def resolve_theme(theme_id: str | None) -> ThemePalette:
    """Return the palette for a theme id, falling back to the default palette.

    Args:
        theme_id: Theme identifier selected by the user.

    Returns:
        The matching ThemePalette, or the default palette for unknown ids.
    """

    key = (theme_id or "").strip()
    theme = THEMES_BY_ID.get(key)
    if theme is None:
        logger.debug("Unknown theme id %r; using %r", theme_id, DEFAULT_THEME_ID)
        return DEFAULT_THEME
    return theme
