"""
Input Reader Module

Turns PDF pages and raster images into PixelBuffers. Decoding is delegated
to PyMuPDF and Pillow; this module only validates and reshapes.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np
import pymupdf
from PIL import Image, UnidentifiedImageError

from ..constants import (
    DEFAULT_PDF_ZOOM,
    MAX_IMAGE_PIXELS,
    IMAGE_EXTENSIONS,
    PDF_EXTENSIONS,
)

logger = logging.getLogger(__name__)


class InputReadError(Exception):
    """Raised when an input file cannot be read."""
    pass


class PDFPasswordProtectedError(InputReadError):
    """Raised when a PDF is password protected."""
    pass


class NoImageError(InputReadError):
    """Raised when detection is requested without a loaded image."""
    pass


class UnsupportedImageError(Exception):
    """Raised for buffers with zero or unsupported dimensions."""
    pass


@dataclass(frozen=True)
class PixelBuffer:
    """
    Decoded raster: row-major samples with 1, 3 or 4 channels.

    RGBA is what the renderers hand over; grayscale and RGB are accepted
    so callers with already-decoded data don't need to pad.
    """
    width: int
    height: int
    data: bytes

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise UnsupportedImageError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.width * self.height > MAX_IMAGE_PIXELS:
            raise UnsupportedImageError(
                f"Image too large: {self.width}x{self.height} "
                f"exceeds {MAX_IMAGE_PIXELS} pixels"
            )
        pixels = self.width * self.height
        if len(self.data) % pixels != 0 or len(self.data) // pixels not in (1, 3, 4):
            raise InputReadError(
                f"Buffer of {len(self.data)} bytes does not match "
                f"{self.width}x{self.height} with 1, 3 or 4 channels"
            )

    @property
    def channels(self) -> int:
        return len(self.data) // (self.width * self.height)

    def as_array(self) -> np.ndarray:
        """
        View the samples as a numpy array.

        Returns:
            (H, W) array for grayscale, (H, W, C) otherwise; read-only
        """
        arr = np.frombuffer(self.data, dtype=np.uint8)
        if self.channels == 1:
            return arr.reshape(self.height, self.width)
        return arr.reshape(self.height, self.width, self.channels)

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """
        Build a buffer from an (H, W) or (H, W, C) uint8 array.

        Args:
            array: Image samples, RGB(A) channel order for colour input

        Returns:
            PixelBuffer holding a copy of the samples
        """
        if array.ndim not in (2, 3):
            raise UnsupportedImageError(f"Unsupported array shape: {array.shape}")
        height, width = array.shape[:2]
        data = np.ascontiguousarray(array, dtype=np.uint8).tobytes()
        return cls(width=int(width), height=int(height), data=data)


def open_pdf(filepath: str) -> pymupdf.Document:
    """
    Open a PDF file and return a document object.

    Args:
        filepath: Path to the PDF file

    Returns:
        pymupdf.Document object

    Raises:
        InputReadError: If the file is missing, corrupted or empty
        PDFPasswordProtectedError: If PDF is password protected
    """
    path = Path(filepath)

    if not path.exists():
        raise InputReadError(f"File not found: {filepath}")

    if not path.is_file():
        raise InputReadError(f"Path is not a file: {filepath}")

    try:
        doc = pymupdf.open(filepath)
    except Exception as e:
        error_msg = str(e).lower()
        if "password" in error_msg or "encrypted" in error_msg:
            raise PDFPasswordProtectedError(f"PDF is password protected: {filepath}")
        raise InputReadError(f"Cannot open PDF (may be corrupted): {filepath}. Error: {e}")

    if doc.needs_pass:
        doc.close()
        raise PDFPasswordProtectedError(f"PDF is password protected: {filepath}")

    if doc.page_count == 0:
        doc.close()
        raise InputReadError(f"PDF has no pages: {filepath}")

    logger.info(f"Opened PDF: {filepath} ({doc.page_count} pages)")
    return doc


def render_page_to_buffer(
    page: pymupdf.Page,
    zoom: float = DEFAULT_PDF_ZOOM
) -> PixelBuffer:
    """
    Render a PDF page to an RGB PixelBuffer (white background).

    Args:
        page: pymupdf.Page object
        zoom: Render zoom (1.0 = 72 DPI)

    Returns:
        PixelBuffer with 3 channels
    """
    mat = pymupdf.Matrix(zoom, zoom)
    pix = page.get_pixmap(matrix=mat, alpha=False)

    logger.debug(f"Rendered page to {pix.width}x{pix.height} at zoom {zoom}")
    return PixelBuffer(width=pix.width, height=pix.height, data=bytes(pix.samples))


def load_pdf_buffer(
    filepath: str,
    page_number: int = 0,
    zoom: float = DEFAULT_PDF_ZOOM
) -> PixelBuffer:
    """
    Render one page of a PDF file.

    Args:
        filepath: Path to the PDF file
        page_number: 0-indexed page to render
        zoom: Render zoom

    Returns:
        RGB PixelBuffer
    """
    doc = open_pdf(filepath)
    try:
        if page_number < 0 or page_number >= doc.page_count:
            raise InputReadError(
                f"Invalid page number: {page_number}. "
                f"Document has {doc.page_count} pages (0-{doc.page_count - 1})."
            )
        return render_page_to_buffer(doc.load_page(page_number), zoom)
    finally:
        doc.close()


def load_image_buffer(filepath: str) -> PixelBuffer:
    """
    Decode a raster image file to an RGBA PixelBuffer.

    Args:
        filepath: Path to the image

    Returns:
        RGBA PixelBuffer
    """
    path = Path(filepath)
    if not path.is_file():
        raise InputReadError(f"File not found: {filepath}")

    try:
        with Image.open(path) as img:
            rgba = img.convert("RGBA")
    except (UnidentifiedImageError, OSError) as e:
        raise InputReadError(f"Cannot decode image: {filepath}. Error: {e}")

    logger.info(f"Loaded image: {filepath} ({rgba.width}x{rgba.height})")
    return PixelBuffer(width=rgba.width, height=rgba.height, data=rgba.tobytes())


def load_pixel_buffer(
    filepath: str,
    page_number: int = 0,
    zoom: Optional[float] = None
) -> PixelBuffer:
    """
    Load a PDF page or raster image, choosing the decoder by extension.

    Args:
        filepath: Input file
        page_number: Page to render for PDFs
        zoom: PDF render zoom (default DEFAULT_PDF_ZOOM)

    Returns:
        RGB PixelBuffer for PDFs, RGBA for images
    """
    suffix = Path(filepath).suffix.lower()
    if suffix in PDF_EXTENSIONS:
        return load_pdf_buffer(filepath, page_number, zoom or DEFAULT_PDF_ZOOM)
    if suffix in IMAGE_EXTENSIONS:
        return load_image_buffer(filepath)
    raise InputReadError(f"Unsupported input type '{suffix}': {filepath}")
