"""
Contour Detector Module

Closed-contour classification into ellipses and polylines, plus the plain
contour tracer used by the contour-only strategy.
"""

import logging
import math
from typing import List, Optional, Tuple

import cv2
import numpy as np

from ..constants import (
    MIN_CONTOUR_AREA,
    ELLIPSE_MIN_POINTS,
    ELLIPSE_AXIS_RATIO_CUTOFF,
    POLY_EPSILON_LARGE,
    POLY_EPSILON_SMALL,
    MIN_POLYLINE_VERTICES,
    CONTOUR_CANNY_LOW,
    CONTOUR_CANNY_HIGH,
    CONTOUR_MIN_POINTS,
)
from ..geometry.primitives import ArcShape, Ellipse, Polyline
from ..raster.preprocessor import (
    adaptive_threshold_inverted,
    morphological_close,
    mask_to_image,
)

logger = logging.getLogger(__name__)


def find_contours(mask: np.ndarray) -> List[np.ndarray]:
    """
    All contours of a mask, no hierarchy, no point compression.

    Args:
        mask: Binary mask, nonzero = foreground

    Returns:
        List of (N, 1, 2) int32 contours
    """
    contours, _ = cv2.findContours(
        mask_to_image(mask),
        cv2.RETR_LIST,
        cv2.CHAIN_APPROX_NONE,
    )
    return list(contours)


def is_ellipse_like(
    axis_a: float,
    axis_b: float,
    cutoff: float = ELLIPSE_AXIS_RATIO_CUTOFF
) -> bool:
    """
    Whether fitted axes are round enough to keep the ellipse.

    The comparison is strict: a ratio equal to the cutoff is rejected.
    """
    longest = max(axis_a, axis_b)
    if longest <= 0:
        return False
    return min(axis_a, axis_b) / longest > cutoff


def fit_ellipse(contour: np.ndarray) -> Optional[Ellipse]:
    """
    Fit an ellipse to a contour.

    Args:
        contour: OpenCV contour with >= 5 points

    Returns:
        Ellipse with semi-axes, or None when the fit fails or degenerates
    """
    try:
        (cx, cy), (axis_w, axis_h), angle = cv2.fitEllipse(contour)
    except cv2.error as e:
        logger.debug(f"Ellipse fit failed: {e}")
        return None

    values = (cx, cy, axis_w, axis_h, angle)
    if not all(math.isfinite(v) for v in values):
        return None
    if axis_w <= 0 or axis_h <= 0:
        return None

    return Ellipse(
        center=(float(cx), float(cy)),
        rx=float(axis_w) / 2,
        ry=float(axis_h) / 2,
        rotation=float(angle),
    )


def approximate_polyline(
    contour: np.ndarray,
    epsilon: float,
    closed: bool = True
) -> Optional[Polyline]:
    """
    Douglas-Peucker simplification of a contour.

    Args:
        contour: OpenCV contour
        epsilon: Max deviation in pixels
        closed: Whether the source contour is closed

    Returns:
        Polyline, or None if fewer than MIN_POLYLINE_VERTICES remain
    """
    approx = cv2.approxPolyDP(contour, epsilon, closed)
    if len(approx) < MIN_POLYLINE_VERTICES:
        return None
    points = [(float(pt[0][0]), float(pt[0][1])) for pt in approx]
    return Polyline(points=points, closed=closed)


def classify_contour(
    contour: np.ndarray,
    ratio_cutoff: float = ELLIPSE_AXIS_RATIO_CUTOFF
) -> Optional[ArcShape]:
    """
    Turn one contour into an Ellipse or a Polyline.

    Contours with enough points get an ellipse fit first; eccentric or
    failed fits fall through to polygon approximation.

    Args:
        contour: OpenCV contour
        ratio_cutoff: Minimum (exclusive) axis ratio for an ellipse

    Returns:
        Ellipse, Polyline, or None if nothing usable remains
    """
    n_points = len(contour)

    if n_points >= ELLIPSE_MIN_POINTS:
        ellipse = fit_ellipse(contour)
        if ellipse is not None and is_ellipse_like(ellipse.rx, ellipse.ry, ratio_cutoff):
            return ellipse
        epsilon = POLY_EPSILON_LARGE
    else:
        epsilon = POLY_EPSILON_SMALL

    return approximate_polyline(contour, epsilon, closed=True)


def detect_contour_shapes(
    mask: np.ndarray,
    min_area: float = MIN_CONTOUR_AREA,
    ratio_cutoff: float = ELLIPSE_AXIS_RATIO_CUTOFF
) -> Tuple[List[ArcShape], List[str]]:
    """
    Extract ellipses and polylines from the closed contours of a mask.

    Args:
        mask: Binary or edge mask
        min_area: Contours with a smaller enclosed area are skipped
        ratio_cutoff: Ellipse axis ratio cutoff

    Returns:
        Tuple of (shapes, diagnostics)
    """
    diagnostics = []
    shapes: List[ArcShape] = []

    try:
        contours = find_contours(mask)
    except cv2.error as e:
        logger.warning(f"Contour extraction failed: {e}")
        diagnostics.append(f"Contour extraction failed: {e}")
        return shapes, diagnostics

    skipped = 0
    failed = 0
    for contour in contours:
        if cv2.contourArea(contour) < min_area:
            skipped += 1
            continue
        try:
            shape = classify_contour(contour, ratio_cutoff)
        except cv2.error as e:
            failed += 1
            logger.debug(f"Contour classification failed: {e}")
            continue
        if shape is not None:
            shapes.append(shape)

    if failed:
        diagnostics.append(f"{failed} contours could not be classified")

    n_ellipses = sum(1 for s in shapes if isinstance(s, Ellipse))
    logger.info(
        f"Contours: {len(contours)} found, {skipped} below area {min_area}, "
        f"{n_ellipses} ellipses, {len(shapes) - n_ellipses} polylines"
    )
    return shapes, diagnostics


def trace_contour_polylines(
    gray: np.ndarray,
    canny_low: int = CONTOUR_CANNY_LOW,
    canny_high: int = CONTOUR_CANNY_HIGH,
    min_points: int = CONTOUR_MIN_POINTS
) -> List[Polyline]:
    """
    Trace every edge contour of a drawing as an open polyline.

    Steps:
    1. Gaussian adaptive threshold (ink = white)
    2. 3x3 morphological close
    3. Canny edge detection
    4. Contour extraction without point compression

    Args:
        gray: Grayscale image
        canny_low: Canny low threshold
        canny_high: Canny high threshold
        min_points: Contours with fewer points are dropped

    Returns:
        List of open Polylines, one per contour
    """
    binary = adaptive_threshold_inverted(gray)
    closed = morphological_close(binary)
    edges = cv2.Canny(closed, canny_low, canny_high)

    contours = find_contours(edges)
    logger.debug(f"Contours found: {len(contours)}")

    polylines = []
    for contour in contours:
        if len(contour) < min_points:
            continue
        points = [(float(pt[0][0]), float(pt[0][1])) for pt in contour]
        polylines.append(Polyline(points=points, closed=False))

    logger.info(f"Final polyline count: {len(polylines)}")
    return polylines
