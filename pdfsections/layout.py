from __future__ import annotations

# pdfsections/layout.py

from dataclasses import dataclass, replace
from enum import Enum

from reportlab.pdfbase import pdfmetrics


class Orientation(str, Enum):
    AUTO = "auto"
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


class Horizontal(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class Vertical(str, Enum):
    TOP = "top"
    CENTER = "center"
    BOTTOM = "bottom"


class Anchor(Enum):
    """Where the page number sits on the page: vertical x horizontal."""

    TOP_LEFT = (Horizontal.LEFT, Vertical.TOP)
    TOP_CENTER = (Horizontal.CENTER, Vertical.TOP)
    TOP_RIGHT = (Horizontal.RIGHT, Vertical.TOP)
    CENTER_LEFT = (Horizontal.LEFT, Vertical.CENTER)
    CENTER = (Horizontal.CENTER, Vertical.CENTER)
    CENTER_RIGHT = (Horizontal.RIGHT, Vertical.CENTER)
    BOTTOM_LEFT = (Horizontal.LEFT, Vertical.BOTTOM)
    BOTTOM_CENTER = (Horizontal.CENTER, Vertical.BOTTOM)
    BOTTOM_RIGHT = (Horizontal.RIGHT, Vertical.BOTTOM)

    @property
    def horizontal(self) -> Horizontal:
        return self.value[0]

    @property
    def vertical(self) -> Vertical:
        return self.value[1]

    @classmethod
    def from_parts(cls, horizontal, vertical) -> "Anchor":
        """Look up an anchor from its two components (members or strings)."""
        return cls((Horizontal(horizontal), Vertical(vertical)))


DEFAULT_NUMBER_FORMAT = "{section}-{page}"


@dataclass(frozen=True)
class LayoutConfig:
    # Merging is always performed; the field exists so settings stay explicit.
    merge_pages: bool = True
    insert_blank_page: bool = True
    flatten_annotations: bool = True

    orientation: Orientation = Orientation.AUTO
    number_format: str = DEFAULT_NUMBER_FORMAT
    anchor: Anchor = Anchor.BOTTOM_CENTER
    margin: float = 10
    font_size: float = 9
    font_name: str = "Helvetica"

    auto_update: bool = True

    def __post_init__(self):
        if not self.merge_pages:
            raise ValueError("merge_pages cannot be disabled")

        object.__setattr__(self, "orientation", Orientation(self.orientation))

        if not isinstance(self.number_format, str):
            raise ValueError(f"Number format must be a string, not {type(self.number_format).__name__}")

        if not isinstance(self.anchor, Anchor):
            raise ValueError(f"Invalid anchor: {self.anchor!r}")

        if self.margin < 0:
            raise ValueError("Margin must not be negative")
        if self.font_size <= 0:
            raise ValueError("Font size must be positive")

        try:
            pdfmetrics.getFont(self.font_name)
        except KeyError:
            raise ValueError(f"Unknown font: {self.font_name}")

    def updated(self, **changes) -> "LayoutConfig":
        """Return a validated copy with *changes* applied."""
        return replace(self, **changes)
