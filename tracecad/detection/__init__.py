"""
Detection Module

Primitive detectors: Hough segments, Hough circles and contour shapes.
"""

from .line_detector import (
    HoughParams,
    auto_hough_tiers,
    detect_segments,
    detect_segments_tiered,
)

from .circle_detector import (
    CircleParams,
    detect_circles,
)

from .contour_detector import (
    find_contours,
    is_ellipse_like,
    fit_ellipse,
    approximate_polyline,
    classify_contour,
    detect_contour_shapes,
    trace_contour_polylines,
)

__all__ = [
    # Lines
    "HoughParams",
    "auto_hough_tiers",
    "detect_segments",
    "detect_segments_tiered",
    # Circles
    "CircleParams",
    "detect_circles",
    # Contours
    "find_contours",
    "is_ellipse_like",
    "fit_ellipse",
    "approximate_polyline",
    "classify_contour",
    "detect_contour_shapes",
    "trace_contour_polylines",
]
