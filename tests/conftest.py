from __future__ import annotations

from pathlib import Path
from typing import Iterable, Tuple

import pytest
from reportlab.pdfgen import canvas

from pdfsections.sections import Section

LETTER = (612.0, 792.0)
LETTER_WIDE = (792.0, 612.0)


def write_pdf(path: Path, sizes: Iterable[Tuple[float, float]], text: str = "Body") -> Path:
    """Write a PDF with one page per size, each carrying "<text> <n>"."""
    c = canvas.Canvas(str(path))
    for n, (width, height) in enumerate(sizes, start=1):
        c.setPageSize((width, height))
        c.setFont("Helvetica", 12)
        c.drawString(72, height / 2, f"{text} {n}")
        c.showPage()
    c.save()
    return path


@pytest.fixture
def make_section(tmp_path):
    counter = {"n": 0}

    def factory(section_number: str, pages: int = 1, size=LETTER, enabled: bool = True, sizes=None):
        counter["n"] += 1
        sizes = list(sizes) if sizes else [size] * pages
        path = write_pdf(tmp_path / f"source_{counter['n']}.pdf", sizes)
        return Section(
            section_number=section_number,
            path=path,
            page_count=len(sizes),
            enabled=enabled,
        )

    return factory
