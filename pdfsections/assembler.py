# pdfsections/assembler.py

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Callable, NamedTuple, Optional, Sequence

from PyPDF2 import PdfReader, PdfWriter
from PyPDF2.errors import PyPdfError

from pdfsections.errors import FlattenError, SourceLoadError
from pdfsections.flatten import Flattener
from pdfsections.geometry import format_label, is_landscape
from pdfsections.layout import LayoutConfig, Orientation
from pdfsections.sections import Section
from pdfsections.stamp import stamp_page

logger = logging.getLogger(__name__)


class Progress(NamedTuple):
    current: int
    total: int

    @property
    def fraction(self) -> float:
        return self.current / self.total if self.total else 0.0


ProgressCallback = Callable[[Progress], None]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def separator_size(width: float, height: float, orientation: Orientation):
    """
    Size of a blank separator following a page of *width* x *height*.
    """
    orientation = Orientation(orientation)
    if orientation == Orientation.LANDSCAPE:
        return (width, height) if is_landscape(width, height) else (height, width)
    if orientation == Orientation.PORTRAIT:
        return (height, width) if is_landscape(width, height) else (width, height)
    return width, height


def _source_bytes(
    section: Section,
    flattener: Optional[Flattener],
) -> bytes:
    try:
        data = section.read_bytes()
    except OSError as e:
        raise SourceLoadError(section, e)

    if flattener is None:
        return data

    try:
        return flattener.flatten(data)
    except FlattenError as e:
        logger.warning(
            "Flattening %s failed, using the original file: %s",
            section.display_name,
            e,
        )
        return data


def _load_reader(section: Section, data: bytes) -> PdfReader:
    try:
        reader = PdfReader(io.BytesIO(data))
        if reader.is_encrypted:
            raise SourceLoadError(section, ValueError("Encrypted PDF"))
        # Force the page tree to be parsed so broken files fail here
        len(reader.pages)
    except (PyPdfError, ValueError, KeyError, TypeError, OSError) as e:
        raise SourceLoadError(section, e)
    return reader


# ---------------------------------------------------------------------------
# Main assembly pipeline
# ---------------------------------------------------------------------------

def assemble(
    sections: Sequence[Section],
    config: LayoutConfig,
    flattener: Optional[Flattener] = None,
    progress: Optional[ProgressCallback] = None,
) -> bytes:
    """
    Merge *sections* into one PDF and return its bytes.

    Enabled sections get a page number on every page; disabled sections
    are still copied. Raises SourceLoadError if any source cannot be read,
    in which case nothing is produced.
    """
    sections = list(sections)
    total = sum(section.page_count for section in sections)
    current = 0

    def report():
        if progress:
            progress(Progress(current, total))

    report()

    if not (config.flatten_annotations and flattener and flattener.is_available()):
        flattener = None

    pdf_writer = PdfWriter()
    last_id = sections[-1].id if sections else None

    for section in sections:
        if section.path is None:
            continue

        logger.debug("Adding section %s (%s)", section.section_number, section.display_name)

        data = _source_bytes(section, flattener)
        pdf_reader = _load_reader(section, data)

        # --------------------------------------------------------------
        # Copy pages, numbering them when the section is enabled
        # --------------------------------------------------------------
        for i, page in enumerate(pdf_reader.pages):
            if section.enabled:
                label = format_label(config.number_format, section.section_number, i + 1)
                stamp_page(page, label, config)
            pdf_writer.add_page(page)
            current += 1
            report()

        # --------------------------------------------------------------
        # Blank separator between sections
        # --------------------------------------------------------------
        if config.insert_blank_page and section.id != last_id:
            page_total = len(pdf_writer.pages)
            if page_total == 0:
                continue
            box = pdf_writer.pages[page_total - 1].mediabox
            width, height = separator_size(
                float(box.width), float(box.height), config.orientation
            )
            pdf_writer.add_blank_page(width=width, height=height)

    output = io.BytesIO()
    pdf_writer.write(output)
    return output.getvalue()


def save_output(data: bytes, output_path) -> Path:
    """Write an assembled document to disk."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as out_file:
        out_file.write(data)
    logger.info("Saved %s", path)
    return path
