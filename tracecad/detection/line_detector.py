"""
Line Detector Module

Straight segment extraction with the probabilistic Hough transform.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Sequence

import cv2
import numpy as np

from ..constants import (
    HOUGH_RHO,
    HOUGH_THETA_DEG,
    HOUGH_COARSE_THRESHOLD_DIVISOR,
    HOUGH_COARSE_MIN_LENGTH_DIVISOR,
    HOUGH_COARSE_MIN_THRESHOLD,
    HOUGH_COARSE_MIN_LENGTH,
    HOUGH_FINE_THRESHOLD_DIVISOR,
    HOUGH_FINE_MIN_LENGTH_DIVISOR,
    HOUGH_FINE_MIN_THRESHOLD,
    HOUGH_FINE_MIN_LENGTH,
    HOUGH_MAX_GAP_DIVISOR,
    HOUGH_MIN_MAX_GAP,
)
from ..geometry.primitives import Segment
from ..raster.preprocessor import mask_to_image

logger = logging.getLogger(__name__)


@dataclass
class HoughParams:
    """Parameters for one probabilistic Hough pass."""
    threshold: int
    min_length: float
    max_gap: float
    rho: float = HOUGH_RHO
    theta_deg: float = HOUGH_THETA_DEG


def auto_hough_tiers(min_dim: int) -> List[HoughParams]:
    """
    Derive a coarse and a fine Hough tier from the image size.

    The coarse tier only accepts long, well-supported strokes; the fine
    tier picks up short detail the coarse one rejects.

    Args:
        min_dim: min(width, height) of the image

    Returns:
        [coarse, fine]
    """
    max_gap = max(HOUGH_MIN_MAX_GAP, min_dim // HOUGH_MAX_GAP_DIVISOR)

    coarse = HoughParams(
        threshold=max(HOUGH_COARSE_MIN_THRESHOLD, min_dim // HOUGH_COARSE_THRESHOLD_DIVISOR),
        min_length=max(HOUGH_COARSE_MIN_LENGTH, min_dim // HOUGH_COARSE_MIN_LENGTH_DIVISOR),
        max_gap=max_gap,
    )
    fine = HoughParams(
        threshold=max(HOUGH_FINE_MIN_THRESHOLD, min_dim // HOUGH_FINE_THRESHOLD_DIVISOR),
        min_length=max(HOUGH_FINE_MIN_LENGTH, min_dim // HOUGH_FINE_MIN_LENGTH_DIVISOR),
        max_gap=max_gap,
    )
    return [coarse, fine]


def detect_segments(mask: np.ndarray, params: HoughParams) -> List[Segment]:
    """
    Run one probabilistic Hough pass over a binary mask.

    Args:
        mask: Binary or edge mask, nonzero = foreground
        params: Hough parameters

    Returns:
        List of Segments in detector output order
    """
    lines = cv2.HoughLinesP(
        mask_to_image(mask),
        rho=params.rho,
        theta=math.radians(params.theta_deg),
        threshold=int(params.threshold),
        minLineLength=params.min_length,
        maxLineGap=params.max_gap,
    )

    segments = []
    if lines is None:
        return segments

    # (N, 1, 4) on OpenCV 4.x, (N, 4) on 5.x
    for x1, y1, x2, y2 in np.asarray(lines).reshape(-1, 4):
        seg = Segment.from_coords(x1, y1, x2, y2)
        if seg.is_degenerate:
            continue
        segments.append(seg)

    return segments


def detect_segments_tiered(
    mask: np.ndarray,
    tiers: Sequence[HoughParams]
) -> List[Segment]:
    """
    Run several Hough passes and concatenate their results in tier order.

    Args:
        mask: Binary or edge mask
        tiers: Parameter tiers, coarse first

    Returns:
        Raw (unmerged) segments from every tier
    """
    all_segments = []
    for i, params in enumerate(tiers):
        segments = detect_segments(mask, params)
        logger.debug(
            f"Hough tier {i} (threshold={params.threshold}, "
            f"min_length={params.min_length}, max_gap={params.max_gap}): "
            f"{len(segments)} segments"
        )
        all_segments.extend(segments)

    logger.info(f"Detected {len(all_segments)} raw segments over {len(tiers)} tiers")
    return all_segments
