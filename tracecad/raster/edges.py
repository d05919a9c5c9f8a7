"""
Edge Extractor Module

Multi-scale edge detection: Canny at several blur levels, OR-combined.
"""

import logging
from typing import Sequence

import cv2
import numpy as np

from ..constants import (
    EDGE_SIGMAS,
    EDGE_CANNY_LOW,
    EDGE_CANNY_HIGH,
    EDGE_DILATE_SIZE,
)

logger = logging.getLogger(__name__)


def sigma_to_kernel_size(sigma: float) -> int:
    """Odd Gaussian kernel size (>= 3) for a blur sigma."""
    return max(3, 2 * int(round(sigma)) + 1)


def detect_edges(
    gray: np.ndarray,
    sigma: float,
    low: int = EDGE_CANNY_LOW,
    high: int = EDGE_CANNY_HIGH,
    dilate_size: int = EDGE_DILATE_SIZE
) -> np.ndarray:
    """
    Blur at one scale, run Canny, then dilate to bridge 1-pixel gaps.

    Args:
        gray: Grayscale image
        sigma: Gaussian sigma
        low: Canny low hysteresis threshold
        high: Canny high hysteresis threshold
        dilate_size: Square structuring element size (0 disables)

    Returns:
        Edge image, edges = 255
    """
    ksize = sigma_to_kernel_size(sigma)
    blurred = cv2.GaussianBlur(gray, (ksize, ksize), sigma)
    edges = cv2.Canny(blurred, low, high)

    if dilate_size > 0:
        kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (dilate_size, dilate_size))
        edges = cv2.dilate(edges, kernel)

    return edges


def extract_edges_multiscale(
    gray: np.ndarray,
    sigmas: Sequence[float] = EDGE_SIGMAS,
    low: int = EDGE_CANNY_LOW,
    high: int = EDGE_CANNY_HIGH,
    dilate_size: int = EDGE_DILATE_SIZE
) -> np.ndarray:
    """
    Union of edge maps over several blur scales.

    Fine scales keep thin detail, coarse scales keep the outline of thick
    strokes; the union keeps both.

    Args:
        gray: Grayscale image
        sigmas: Blur sigmas to run
        low: Canny low threshold
        high: Canny high threshold
        dilate_size: Dilation size per scale

    Returns:
        Binary edge mask (H, W) of uint8 {0, 1}
    """
    combined = np.zeros(gray.shape[:2], dtype=np.uint8)

    for sigma in sigmas:
        edges = detect_edges(gray, sigma, low, high, dilate_size)
        combined = cv2.bitwise_or(combined, edges)
        logger.debug(f"Edge scale sigma={sigma}: {int(np.count_nonzero(edges))} edge pixels")

    return (combined > 0).astype(np.uint8)
