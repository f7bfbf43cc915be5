from __future__ import annotations
# pdfsections/stamp.py


import io
from typing import Tuple

from PyPDF2 import PdfReader
from PyPDF2.generic import NameObject, NumberObject
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from pdfsections.geometry import Placement, resolve
from pdfsections.layout import LayoutConfig


def measure_text(text: str, font_name: str, font_size: float) -> Tuple[float, float]:
    """
    Width and height of *text* as drawn by reportlab in the given font.
    Height spans ascent to descent, so it is the same for every string.
    """
    width = pdfmetrics.stringWidth(text, font_name, font_size)
    ascent, descent = pdfmetrics.getAscentDescent(font_name, font_size)
    return width, ascent - descent


def stamp_page(page, label: str, config: LayoutConfig) -> Placement:
    """
    Draw *label* onto a PDF page at the configured anchor.
    """
    box = page.mediabox
    width = float(box.width)
    height = float(box.height)

    text_width, text_height = measure_text(label, config.font_name, config.font_size)
    placement = resolve(
        width,
        height,
        config.orientation,
        config.anchor,
        config.margin,
        text_width,
        text_height,
    )

    # ------------------------------------------------------------------
    # Render the label into a one-page overlay
    # ------------------------------------------------------------------
    packet = io.BytesIO()
    c = canvas.Canvas(packet, pagesize=(width, height))
    c.setFont(config.font_name, config.font_size)
    c.setFillColorRGB(0, 0, 0)

    c.saveState()
    c.translate(placement.x, placement.y)
    c.rotate(placement.rotation)
    c.drawString(0, 0, label)
    c.restoreState()
    c.save()

    packet.seek(0)
    overlay = PdfReader(packet).pages[0]
    page.merge_page(overlay)

    # Turn the page so the stamp reads upright in the requested orientation
    if placement.rotation:
        page[NameObject("/Rotate")] = NumberObject(placement.rotation % 360)

    return placement
