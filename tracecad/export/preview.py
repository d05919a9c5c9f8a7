"""
Preview Module

Draws detected primitives over the source image for visual checking.
"""

import logging
from pathlib import Path
from typing import Tuple

import cv2
import numpy as np

from ..constants import (
    PREVIEW_COLOR_BGR,
    PREVIEW_LINE_WIDTH,
    ELLIPSE_POLYLINE_SEGMENTS,
)
from ..geometry.primitives import DetectionResult, Ellipse, Polyline
from ..ingest.reader import PixelBuffer
from ..raster.preprocessor import to_grayscale

logger = logging.getLogger(__name__)


def _pt(p: Tuple[float, float]) -> Tuple[int, int]:
    return (int(round(p[0])), int(round(p[1])))


def render_preview(
    buffer: PixelBuffer,
    result: DetectionResult,
    color: Tuple[int, int, int] = PREVIEW_COLOR_BGR,
    thickness: int = PREVIEW_LINE_WIDTH
) -> np.ndarray:
    """
    Overlay a detection result on its source image.

    Args:
        buffer: Source pixel buffer
        result: Detection result in the buffer's pixel space
        color: Stroke color (BGR)
        thickness: Stroke width in pixels

    Returns:
        BGR image
    """
    gray = to_grayscale(buffer.as_array())
    canvas = cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)

    for seg in result.lines:
        cv2.line(canvas, _pt(seg.start), _pt(seg.end), color, thickness, cv2.LINE_AA)

    for circle in result.circles:
        cv2.circle(
            canvas, _pt(circle.center), int(round(circle.radius)),
            color, thickness, cv2.LINE_AA
        )

    for shape in result.arcs:
        if isinstance(shape, Ellipse):
            points = shape.sample_points(ELLIPSE_POLYLINE_SEGMENTS)
            closed = True
        elif isinstance(shape, Polyline):
            points = shape.points
            closed = shape.closed
        else:
            continue
        pts = np.array([_pt(p) for p in points], dtype=np.int32).reshape(-1, 1, 2)
        cv2.polylines(canvas, [pts], closed, color, thickness, cv2.LINE_AA)

    return canvas


def encode_png(image: np.ndarray) -> bytes:
    """Encode an image as PNG bytes."""
    ok, encoded = cv2.imencode(".png", image)
    if not ok:
        raise ValueError("PNG encoding failed")
    return encoded.tobytes()


def write_preview(
    path: str,
    buffer: PixelBuffer,
    result: DetectionResult
) -> Path:
    """
    Render the overlay and save it as PNG.

    Args:
        path: Output file path
        buffer: Source pixel buffer
        result: Detection result

    Returns:
        Path of the written file
    """
    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(encode_png(render_preview(buffer, result)))

    logger.info(f"Preview written: {output_path}")
    return output_path
