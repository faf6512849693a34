"""
First-page rendering for vector and paginated assets (PDF, SVG).

Every page is scaled so its longest side is exactly ``VECTOR_RENDER_SIZE``
pixels, which keeps digests of vector assets comparable regardless of the
page size declared in the file.
"""

from pathlib import Path

import fitz  # PyMuPDF
import numpy as np
from PIL import Image

from ..logging import get_logger

logger = get_logger(__name__)

VECTOR_RENDER_SIZE = 512


class RenderError(Exception):
    """Raised when a document has no page that can be rendered."""


def render_first_page(path: Path, size: int = VECTOR_RENDER_SIZE) -> Image.Image:
    """
    Render page 0 of a PDF or SVG document to an RGB image.

    Args:
        path: Path to the document
        size: Length in pixels of the longest side of the output

    Returns:
        PIL image in RGB mode

    Raises:
        RenderError: If the document cannot be opened, is encrypted or has no pages
    """
    try:
        doc = fitz.open(path)
    except Exception as exc:
        raise RenderError(f"Failed to open document: {path}") from exc

    try:
        if doc.needs_pass:
            raise RenderError(f"Document is encrypted: {path}")
        if doc.page_count < 1:
            raise RenderError(f"Document has no pages: {path}")

        page = doc.load_page(0)
        rect = page.rect
        longest = max(rect.width, rect.height)
        if longest <= 0:
            raise RenderError(f"First page has no area: {path}")

        zoom = size / longest
        pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), colorspace=fitz.csRGB, alpha=False)

        img = np.frombuffer(pix.samples, dtype=np.uint8)
        img = img.reshape(pix.height, pix.width, 3)
        logger.debug(f"Rendered {path} page 0 to {img.shape}")

        # Copy out of the pixmap buffer before the document is closed.
        return Image.fromarray(img.copy())
    finally:
        doc.close()
