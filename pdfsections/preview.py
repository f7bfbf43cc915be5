from __future__ import annotations

# pdfsections/preview.py

import io
from typing import List

import fitz  # PyMuPDF
from PIL import Image


def page_count(pdf_bytes: bytes) -> int:
    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        return len(doc)


def render_pages(pdf_bytes: bytes, zoom: float = 1.0) -> List[Image.Image]:
    """
    Render every page of an in-memory PDF to a Pillow image.
    A zoom of 1.0 is 72 DPI; page rotation is honoured.
    """
    images = []
    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        matrix = fitz.Matrix(zoom, zoom)
        for page in doc:
            pix = page.get_pixmap(matrix=matrix)
            img = Image.open(io.BytesIO(pix.tobytes("ppm")))
            img.load()
            images.append(img)
    return images
