"""
Phase 1 Tests: Input Loading

Tests for PixelBuffer validation and PDF/image decoding.
"""

import sys
import os
import tempfile
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import numpy as np
import pymupdf
import pytest
from PIL import Image

from tracecad.ingest import (
    PixelBuffer,
    InputReadError,
    NoImageError,
    UnsupportedImageError,
    load_image_buffer,
    load_pdf_buffer,
    load_pixel_buffer,
)
from tracecad.constants import MAX_IMAGE_PIXELS


def create_test_pdf(path: str, page_count: int = 1):
    """Create a PDF with a diagonal line on each page."""
    doc = pymupdf.open()
    for _ in range(page_count):
        page = doc.new_page(width=200, height=100)
        page.draw_line((10, 10), (190, 90))
    doc.save(path)
    doc.close()


class TestPixelBuffer:
    """Tests for PixelBuffer construction."""

    def test_rgba_buffer(self):
        buf = PixelBuffer(width=4, height=3, data=bytes(4 * 3 * 4))
        assert buf.channels == 4
        assert buf.as_array().shape == (3, 4, 4)
        print("  [PASS] RGBA buffer")

    def test_grayscale_buffer(self):
        buf = PixelBuffer(width=5, height=2, data=bytes(10))
        assert buf.channels == 1
        assert buf.as_array().shape == (2, 5)
        print("  [PASS] Grayscale buffer")

    def test_zero_dimension_rejected(self):
        with pytest.raises(UnsupportedImageError):
            PixelBuffer(width=0, height=10, data=b"")
        with pytest.raises(UnsupportedImageError):
            PixelBuffer(width=10, height=0, data=b"")
        print("  [PASS] Zero dimension rejected")

    def test_oversized_rejected(self):
        side = int(MAX_IMAGE_PIXELS ** 0.5) + 1
        with pytest.raises(UnsupportedImageError):
            PixelBuffer(width=side, height=side, data=b"")
        print("  [PASS] Oversized buffer rejected")

    def test_length_mismatch_rejected(self):
        with pytest.raises(InputReadError):
            PixelBuffer(width=4, height=4, data=bytes(4 * 4 * 2))
        with pytest.raises(InputReadError):
            PixelBuffer(width=4, height=4, data=bytes(7))
        print("  [PASS] Length mismatch rejected")

    def test_from_array_round_trip(self):
        array = np.arange(6 * 8 * 3, dtype=np.uint8).reshape(6, 8, 3)
        buf = PixelBuffer.from_array(array)
        assert (buf.width, buf.height, buf.channels) == (8, 6, 3)
        assert np.array_equal(buf.as_array(), array)
        print("  [PASS] from_array keeps samples")

    def test_buffer_is_immutable(self):
        buf = PixelBuffer(width=1, height=1, data=b"\x00")
        with pytest.raises(Exception):
            buf.width = 2
        print("  [PASS] Buffer is frozen")


class TestImageLoading:
    """Tests for raster image decoding."""

    def test_load_png_as_rgba(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "drawing.png")
            Image.new("RGB", (30, 20), (255, 255, 255)).save(path)

            buf = load_image_buffer(path)

            assert (buf.width, buf.height) == (30, 20)
            assert buf.channels == 4
            assert np.all(buf.as_array()[:, :, 3] == 255)
        print("  [PASS] PNG decoded to RGBA")

    def test_load_grayscale_jpeg(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "scan.jpg")
            Image.new("L", (16, 12), 200).save(path)

            buf = load_pixel_buffer(path)

            assert (buf.width, buf.height, buf.channels) == (16, 12, 4)
        print("  [PASS] Grayscale JPEG converted to RGBA")

    def test_missing_image(self):
        with pytest.raises(InputReadError):
            load_image_buffer("/nonexistent/drawing.png")
        print("  [PASS] Missing image raises InputReadError")

    def test_corrupt_image(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "broken.png")
            Path(path).write_bytes(b"not an image at all")
            with pytest.raises(InputReadError):
                load_image_buffer(path)
        print("  [PASS] Corrupt image raises InputReadError")

    def test_unsupported_extension(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "notes.txt")
            Path(path).write_text("hello")
            with pytest.raises(InputReadError):
                load_pixel_buffer(path)
        print("  [PASS] Unsupported extension rejected")


class TestPDFLoading:
    """Tests for PDF page rendering."""

    def test_render_first_page(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "plan.pdf")
            create_test_pdf(path)

            buf = load_pdf_buffer(path, page_number=0, zoom=2.0)

            assert (buf.width, buf.height) == (400, 200)
            assert buf.channels == 3
            # The drawn line leaves dark pixels on a white page
            arr = buf.as_array()
            assert arr.min() < 128
            assert arr.max() == 255
        print("  [PASS] PDF page rendered at zoom 2")

    def test_dispatch_by_extension(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "plan.pdf")
            create_test_pdf(path, page_count=2)

            buf = load_pixel_buffer(path, page_number=1, zoom=1.0)

            assert (buf.width, buf.height) == (200, 100)
        print("  [PASS] PDF dispatched by extension")

    def test_invalid_page(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "plan.pdf")
            create_test_pdf(path)
            with pytest.raises(InputReadError):
                load_pdf_buffer(path, page_number=5)
        print("  [PASS] Invalid page raises InputReadError")

    def test_missing_pdf(self):
        with pytest.raises(InputReadError):
            load_pdf_buffer("/nonexistent/plan.pdf")
        print("  [PASS] Missing PDF raises InputReadError")


def test_no_image_error_is_input_error():
    """NoImageError is caught by handlers of InputReadError."""
    assert issubclass(NoImageError, InputReadError)
    print("  [PASS] NoImageError hierarchy")
