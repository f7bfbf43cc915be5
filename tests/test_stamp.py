from __future__ import annotations

import pytest
from PyPDF2 import PdfWriter
from reportlab.pdfbase import pdfmetrics

from pdfsections.geometry import resolve
from pdfsections.layout import Anchor, LayoutConfig, Orientation
from pdfsections.stamp import measure_text, stamp_page


def _blank(width, height):
    return PdfWriter().add_blank_page(width=width, height=height)


def test_measure_text_uses_font_metrics():
    width, height = measure_text("A-12", "Helvetica", 9)
    assert width == pytest.approx(pdfmetrics.stringWidth("A-12", "Helvetica", 9))
    ascent, descent = pdfmetrics.getAscentDescent("Helvetica", 9)
    assert height == pytest.approx(ascent - descent)
    assert height > 0


def test_text_height_does_not_depend_on_content():
    assert measure_text("1", "Helvetica", 12)[1] == measure_text("Exhibit 12-300", "Helvetica", 12)[1]


def test_longer_text_is_wider():
    assert measure_text("A-100", "Helvetica", 9)[0] > measure_text("A-1", "Helvetica", 9)[0]


def test_stamp_page_places_label_where_resolver_says():
    config = LayoutConfig(anchor=Anchor.TOP_RIGHT, margin=20, font_size=11)
    page = _blank(612, 792)

    placement = stamp_page(page, "B-4", config)

    tw, th = measure_text("B-4", config.font_name, config.font_size)
    assert placement == resolve(612, 792, Orientation.AUTO, Anchor.TOP_RIGHT, 20, tw, th)
    assert "B-4" in page.extract_text()
    assert page.get("/Rotate") in (None, 0)


def test_stamp_page_turns_conflicting_page():
    config = LayoutConfig(orientation=Orientation.PORTRAIT)
    page = _blank(792, 612)

    placement = stamp_page(page, "A-1", config)

    assert placement.rotation == -90
    assert page["/Rotate"] == 270
