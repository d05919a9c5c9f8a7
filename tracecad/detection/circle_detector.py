"""
Circle Detector Module

Circle extraction with the Hough gradient transform. Failures on odd
input are reported, not raised.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import cv2
import numpy as np

from ..constants import (
    CIRCLE_DP,
    CIRCLE_MEDIAN_BLUR,
    CIRCLE_CANNY_HIGH,
    CIRCLE_ACCUMULATOR_THRESHOLD,
    CIRCLE_MIN_RADIUS,
    CIRCLE_MAX_RADIUS_DIVISOR,
    CIRCLE_MIN_DIST_DIVISOR,
)
from ..geometry.primitives import Circle
from ..raster.preprocessor import remove_noise

logger = logging.getLogger(__name__)


@dataclass
class CircleParams:
    """Hough circle parameters; None fields are derived from image size."""
    dp: float = CIRCLE_DP
    min_distance: Optional[float] = None
    canny_high: int = CIRCLE_CANNY_HIGH
    accumulator_threshold: int = CIRCLE_ACCUMULATOR_THRESHOLD
    min_radius: int = CIRCLE_MIN_RADIUS
    max_radius: Optional[int] = None

    def resolve(self, width: int, height: int) -> "CircleParams":
        """Fill size-derived fields for a width x height image."""
        min_dim = min(width, height)
        return CircleParams(
            dp=self.dp,
            min_distance=(
                self.min_distance if self.min_distance is not None
                else max(1.0, min_dim / CIRCLE_MIN_DIST_DIVISOR)
            ),
            canny_high=self.canny_high,
            accumulator_threshold=self.accumulator_threshold,
            min_radius=self.min_radius,
            max_radius=(
                self.max_radius if self.max_radius is not None
                else int(min_dim / CIRCLE_MAX_RADIUS_DIVISOR)
            ),
        )


def detect_circles(
    gray: np.ndarray,
    params: Optional[CircleParams] = None,
    denoise: bool = True
) -> Tuple[List[Circle], List[str]]:
    """
    Detect circles in a grayscale image.

    Args:
        gray: Grayscale image
        params: Hough parameters (defaults scaled to image size)
        denoise: Median-blur the image first

    Returns:
        Tuple of (circles, diagnostics). Any internal failure gives an
        empty circle list and a diagnostic message.
    """
    diagnostics = []
    h, w = gray.shape[:2]
    resolved = (params or CircleParams()).resolve(w, h)

    if resolved.max_radius <= resolved.min_radius:
        diagnostics.append(
            f"Circle detection skipped: image {w}x{h} too small for "
            f"radius range {resolved.min_radius}-{resolved.max_radius}"
        )
        return [], diagnostics

    try:
        source = remove_noise(gray, ksize=CIRCLE_MEDIAN_BLUR) if denoise else gray
        found = cv2.HoughCircles(
            source,
            cv2.HOUGH_GRADIENT,
            dp=resolved.dp,
            minDist=resolved.min_distance,
            param1=resolved.canny_high,
            param2=resolved.accumulator_threshold,
            minRadius=resolved.min_radius,
            maxRadius=resolved.max_radius,
        )
    except (cv2.error, ValueError) as e:
        logger.warning(f"Circle detection failed: {e}")
        diagnostics.append(f"Circle detection failed: {e}")
        return [], diagnostics

    circles = []
    if found is None:
        return circles, diagnostics

    for x, y, r in found[0]:
        if not (math.isfinite(x) and math.isfinite(y) and math.isfinite(r)) or r <= 0:
            continue
        circles.append(Circle(center=(float(x), float(y)), radius=float(r)))

    logger.info(f"Detected {len(circles)} circles")
    return circles, diagnostics
