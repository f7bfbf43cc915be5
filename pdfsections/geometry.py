from __future__ import annotations

# pdfsections/geometry.py

from typing import Callable, Dict, NamedTuple

from pdfsections.layout import Anchor, Horizontal, Orientation, Vertical


class Placement(NamedTuple):
    x: float
    y: float
    rotation: int


# (width, height, margin, text_width, text_height) -> coordinate
Coord = Callable[[float, float, float, float, float], float]


# ---------------------------------------------------------------------------
# Page orientation matches the requested orientation (or "auto")
# ---------------------------------------------------------------------------

_UPRIGHT_X: Dict[Horizontal, Coord] = {
    Horizontal.LEFT: lambda w, h, m, tw, th: m,
    Horizontal.CENTER: lambda w, h, m, tw, th: w / 2 - tw / 2,
    Horizontal.RIGHT: lambda w, h, m, tw, th: w - m - tw,
}

_UPRIGHT_Y: Dict[Vertical, Coord] = {
    Vertical.TOP: lambda w, h, m, tw, th: h - m - th,
    Vertical.CENTER: lambda w, h, m, tw, th: h / 2 - th / 2,
    Vertical.BOTTOM: lambda w, h, m, tw, th: m,
}

# ---------------------------------------------------------------------------
# Landscape page shown as portrait: text runs along the page's y axis
# ---------------------------------------------------------------------------

_WIDE_AS_PORTRAIT_X: Dict[Vertical, Coord] = {
    Vertical.TOP: lambda w, h, m, tw, th: w - m - th,
    Vertical.CENTER: lambda w, h, m, tw, th: w / 2 - th / 2,
    Vertical.BOTTOM: lambda w, h, m, tw, th: m,
}

_WIDE_AS_PORTRAIT_Y: Dict[Horizontal, Coord] = {
    Horizontal.RIGHT: lambda w, h, m, tw, th: m + tw,
    Horizontal.CENTER: lambda w, h, m, tw, th: h / 2 - tw / 2,
    Horizontal.LEFT: lambda w, h, m, tw, th: h - m,
}

# ---------------------------------------------------------------------------
# Portrait page shown as landscape
# ---------------------------------------------------------------------------

_TALL_AS_LANDSCAPE_X: Dict[Vertical, Coord] = {
    Vertical.BOTTOM: lambda w, h, m, tw, th: w - m,
    Vertical.CENTER: lambda w, h, m, tw, th: w / 2 + th / 2,
    Vertical.TOP: lambda w, h, m, tw, th: m + th,
}

_TALL_AS_LANDSCAPE_Y: Dict[Horizontal, Coord] = {
    Horizontal.LEFT: lambda w, h, m, tw, th: m,
    Horizontal.CENTER: lambda w, h, m, tw, th: h / 2 - tw / 2,
    Horizontal.RIGHT: lambda w, h, m, tw, th: h - m - tw,
}


def is_landscape(width: float, height: float) -> bool:
    """Square pages count as portrait."""
    return width > height


def resolve(
    page_width: float,
    page_height: float,
    orientation: Orientation,
    anchor: Anchor,
    margin: float,
    text_width: float,
    text_height: float,
) -> Placement:
    """
    Compute where a page-number string of the given size is drawn.

    When the page's physical orientation disagrees with the requested
    orientation the stamp is rotated (-90 for a wide page shown as portrait,
    +90 for a tall page shown as landscape) and the anchor is remapped so the
    number lands where the reader expects it once the page is turned.
    """
    orientation = Orientation(orientation)
    args = (page_width, page_height, margin, text_width, text_height)

    if is_landscape(page_width, page_height):
        if orientation == Orientation.PORTRAIT:
            return Placement(
                _WIDE_AS_PORTRAIT_X[anchor.vertical](*args),
                _WIDE_AS_PORTRAIT_Y[anchor.horizontal](*args),
                -90,
            )
    elif orientation == Orientation.LANDSCAPE:
        return Placement(
            _TALL_AS_LANDSCAPE_X[anchor.vertical](*args),
            _TALL_AS_LANDSCAPE_Y[anchor.horizontal](*args),
            90,
        )

    return Placement(
        _UPRIGHT_X[anchor.horizontal](*args),
        _UPRIGHT_Y[anchor.vertical](*args),
        0,
    )


def format_label(template: str, section_number: str, page_number: int) -> str:
    """Fill the first ``{section}`` and first ``{page}`` in *template*."""
    return (
        template
        .replace("{section}", str(section_number), 1)
        .replace("{page}", str(page_number), 1)
    )
