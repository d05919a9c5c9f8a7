"""
DXF Writer Module

Writes detection results as DXF using ezdxf. Pixel coordinates are flipped
to CAD orientation (origin bottom-left, Y up) and scaled.
"""

import io
import logging
import math
from pathlib import Path
from typing import Any, List, Tuple

import ezdxf

from ..constants import (
    DXF_VERSION,
    DXF_LAYER_NAME,
    DXF_LAYER_COLOR,
    ELLIPSE_POLYLINE_SEGMENTS,
    DEFAULT_SCALE,
)
from ..geometry.primitives import DetectionResult, Ellipse, Polyline

logger = logging.getLogger(__name__)


class NothingToExportError(Exception):
    """Raised when export is requested for an empty detection result."""
    pass


def normalize_scale(scale: Any) -> float:
    """
    Coerce a user scale factor to a positive float.

    Unparseable, non-finite, zero or negative input falls back to 1.0.
    """
    try:
        value = float(scale)
    except (TypeError, ValueError):
        return DEFAULT_SCALE
    if not math.isfinite(value) or value <= 0:
        return DEFAULT_SCALE
    return value


def to_cad_point(
    x: float,
    y: float,
    image_height: float,
    scale: float = DEFAULT_SCALE
) -> Tuple[float, float]:
    """
    Convert a pixel coordinate to CAD coordinates.

    Args:
        x: Pixel x (left to right)
        y: Pixel y (top to bottom)
        image_height: Source image height in pixels
        scale: Units per pixel

    Returns:
        (x * scale, (image_height - y) * scale)
    """
    return (x * scale, (image_height - y) * scale)


def _cad_points(
    points: List[Tuple[float, float]],
    image_height: float,
    scale: float
) -> List[Tuple[float, float]]:
    return [to_cad_point(x, y, image_height, scale) for x, y in points]


def build_dxf_document(
    result: DetectionResult,
    image_height: float,
    scale: float = DEFAULT_SCALE,
    ellipse_segments: int = ELLIPSE_POLYLINE_SEGMENTS
) -> Any:
    """
    Build an ezdxf document holding every primitive of a result.

    Lines become LINE, circles CIRCLE, polylines LWPOLYLINE (closed flag
    kept) and ellipses closed LWPOLYLINEs with ellipse_segments vertices.
    Everything goes on the TRACED layer.

    Args:
        result: Detection result to export
        image_height: Source image height in pixels (for the Y flip)
        scale: Units per pixel
        ellipse_segments: Vertices per ellipse polyline

    Returns:
        ezdxf Drawing

    Raises:
        NothingToExportError: If the result holds no primitives
    """
    if result.is_empty:
        raise NothingToExportError("Nothing to export: detection result is empty")

    scale = normalize_scale(scale)

    doc = ezdxf.new(DXF_VERSION)
    doc.layers.new(DXF_LAYER_NAME, dxfattribs={"color": DXF_LAYER_COLOR})
    msp = doc.modelspace()
    attribs = {"layer": DXF_LAYER_NAME}

    for seg in result.lines:
        start = to_cad_point(seg.start[0], seg.start[1], image_height, scale)
        end = to_cad_point(seg.end[0], seg.end[1], image_height, scale)
        msp.add_line((start[0], start[1], 0.0), (end[0], end[1], 0.0), dxfattribs=attribs)

    for circle in result.circles:
        cx, cy = to_cad_point(circle.center[0], circle.center[1], image_height, scale)
        msp.add_circle((cx, cy, 0.0), circle.radius * scale, dxfattribs=attribs)

    for shape in result.arcs:
        if isinstance(shape, Ellipse):
            points = _cad_points(shape.sample_points(ellipse_segments), image_height, scale)
            msp.add_lwpolyline(points, close=True, dxfattribs=attribs)
        elif isinstance(shape, Polyline):
            points = _cad_points(shape.points, image_height, scale)
            msp.add_lwpolyline(points, close=shape.closed, dxfattribs=attribs)

    logger.debug(f"Built DXF document: {result.summary()}")
    return doc


def export_dxf(
    result: DetectionResult,
    image_height: float,
    scale: float = DEFAULT_SCALE,
    ellipse_segments: int = ELLIPSE_POLYLINE_SEGMENTS
) -> bytes:
    """
    Serialize a detection result to DXF.

    Args:
        result: Detection result to export
        image_height: Source image height in pixels
        scale: Units per pixel (invalid values fall back to 1.0)
        ellipse_segments: Vertices per ellipse polyline

    Returns:
        DXF file as bytes
    """
    doc = build_dxf_document(result, image_height, scale, ellipse_segments)

    # Write to string stream then encode to bytes
    stream = io.StringIO()
    doc.write(stream)
    data = stream.getvalue().encode("utf-8")

    logger.info(f"Exported DXF ({len(data)} bytes): {result.summary()}")
    return data


def write_dxf(
    path: str,
    result: DetectionResult,
    image_height: float,
    scale: float = DEFAULT_SCALE,
    ellipse_segments: int = ELLIPSE_POLYLINE_SEGMENTS
) -> Path:
    """
    Export a detection result to a DXF file.

    Nothing is written when the result is empty.

    Args:
        path: Output file path
        result: Detection result
        image_height: Source image height in pixels
        scale: Units per pixel
        ellipse_segments: Vertices per ellipse polyline

    Returns:
        Path of the written file
    """
    data = export_dxf(result, image_height, scale, ellipse_segments)

    output_path = Path(path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(data)

    logger.info(f"DXF written: {output_path}")
    return output_path
