# Input decoding (PDF pages and raster images to pixel buffers)

from .reader import (
    PixelBuffer,
    open_pdf,
    render_page_to_buffer,
    load_pdf_buffer,
    load_image_buffer,
    load_pixel_buffer,
    InputReadError,
    PDFPasswordProtectedError,
    NoImageError,
    UnsupportedImageError,
)

__all__ = [
    "PixelBuffer",
    # Reader functions
    "open_pdf",
    "render_page_to_buffer",
    "load_pdf_buffer",
    "load_image_buffer",
    "load_pixel_buffer",
    # Reader exceptions
    "InputReadError",
    "PDFPasswordProtectedError",
    "NoImageError",
    "UnsupportedImageError",
]
