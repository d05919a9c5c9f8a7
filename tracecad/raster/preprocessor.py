"""
Image Preprocessor Module

Grayscale conversion and binarization for scanned drawings.
"""

import logging
from typing import Tuple

import cv2
import numpy as np

from ..constants import (
    LUMA_WEIGHTS,
    DEFAULT_BLOCK_RADIUS,
    DEFAULT_CONTRAST_FACTOR,
    CONTOUR_THRESHOLD_BLOCK,
    CONTOUR_THRESHOLD_C,
    CONTOUR_CLOSE_KERNEL,
)

logger = logging.getLogger(__name__)


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """
    Convert image to grayscale using luminosity weights.

    RGBA input is composited over white first so transparent areas read
    as paper, not ink.

    Args:
        image: Grayscale, RGB or RGBA image (channel order R, G, B[, A])

    Returns:
        Grayscale image, uint8
    """
    if image.ndim == 2:
        return image.astype(np.uint8, copy=False)

    rgb = image[:, :, :3].astype(np.float64)
    if image.shape[2] == 4:
        alpha = image[:, :, 3:4].astype(np.float64) / 255.0
        rgb = rgb * alpha + 255.0 * (1.0 - alpha)

    wr, wg, wb = LUMA_WEIGHTS
    gray = wr * rgb[:, :, 0] + wg * rgb[:, :, 1] + wb * rgb[:, :, 2]
    return np.clip(np.rint(gray), 0, 255).astype(np.uint8)


def remove_noise(image: np.ndarray, ksize: int = 5) -> np.ndarray:
    """
    Median-filter salt-and-pepper noise out of a grayscale image.

    Args:
        image: Input image
        ksize: Aperture for the median filter (odd)

    Returns:
        Denoised image
    """
    return cv2.medianBlur(image, ksize)


def integral_image(gray: np.ndarray) -> np.ndarray:
    """
    Summed-area table with a leading zero row and column.

    Args:
        gray: Grayscale image (H, W)

    Returns:
        float64 array (H + 1, W + 1); entry [y, x] is the sum of gray[:y, :x]
    """
    return cv2.integral(gray, sdepth=cv2.CV_64F)


def window_bounds(size: int, radius: int) -> Tuple[np.ndarray, np.ndarray]:
    """Per-index [lo, hi) window limits clipped to [0, size]."""
    idx = np.arange(size)
    lo = np.clip(idx - radius, 0, size)
    hi = np.clip(idx + radius + 1, 0, size)
    return lo, hi


def local_mean(gray: np.ndarray, radius: int = DEFAULT_BLOCK_RADIUS) -> np.ndarray:
    """
    Mean over a (2r+1)x(2r+1) window around every pixel.

    Windows are clipped at the image border, never wrapped or padded, so
    edge pixels average over fewer samples.

    Args:
        gray: Grayscale image
        radius: Window radius

    Returns:
        float64 array of local means, same shape as gray
    """
    h, w = gray.shape[:2]
    table = integral_image(gray)

    y0, y1 = window_bounds(h, radius)
    x0, x1 = window_bounds(w, radius)

    sums = (
        table[np.ix_(y1, x1)]
        - table[np.ix_(y0, x1)]
        - table[np.ix_(y1, x0)]
        + table[np.ix_(y0, x0)]
    )
    counts = np.outer(y1 - y0, x1 - x0).astype(np.float64)
    return sums / counts


def binarize(
    gray: np.ndarray,
    block_radius: int = DEFAULT_BLOCK_RADIUS,
    contrast_factor: float = DEFAULT_CONTRAST_FACTOR
) -> np.ndarray:
    """
    Binarize image by comparing each pixel to its local mean.

    A pixel is foreground when it is darker than contrast_factor times the
    mean of its window, which tolerates uneven scan lighting without a
    global threshold.

    Args:
        gray: Grayscale image
        block_radius: Window radius (7 -> 15x15 window)
        contrast_factor: Fraction of the local mean a pixel must fall below

    Returns:
        Binary mask (H, W) of uint8 {0, 1}, 1 = ink
    """
    means = local_mean(gray, block_radius)
    mask = (gray.astype(np.float64) < means * contrast_factor).astype(np.uint8)

    logger.debug(
        f"Binarized {gray.shape[1]}x{gray.shape[0]} (radius={block_radius}, "
        f"k={contrast_factor}): {int(mask.sum())} foreground pixels"
    )
    return mask


def adaptive_threshold_inverted(
    gray: np.ndarray,
    block_size: int = CONTOUR_THRESHOLD_BLOCK,
    c: int = CONTOUR_THRESHOLD_C
) -> np.ndarray:
    """
    Gaussian adaptive threshold with ink as white (255).

    Args:
        gray: Grayscale image
        block_size: Odd neighbourhood size
        c: Constant subtracted from the weighted mean

    Returns:
        Binary image, ink = 255
    """
    return cv2.adaptiveThreshold(
        gray,
        255,
        cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
        cv2.THRESH_BINARY_INV,
        block_size,
        c
    )


def morphological_close(
    binary: np.ndarray,
    kernel_size: int = CONTOUR_CLOSE_KERNEL
) -> np.ndarray:
    """
    Close small gaps in strokes.

    Args:
        binary: Binary image
        kernel_size: Size of the rectangular kernel

    Returns:
        Closed binary image
    """
    kernel = cv2.getStructuringElement(
        cv2.MORPH_RECT,
        (kernel_size, kernel_size)
    )
    return cv2.morphologyEx(binary, cv2.MORPH_CLOSE, kernel)


def mask_to_image(mask: np.ndarray) -> np.ndarray:
    """Scale a {0, 1} mask to {0, 255} for OpenCV routines."""
    return (mask > 0).astype(np.uint8) * 255
