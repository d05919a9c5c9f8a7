"""
Skeletonizer Module

Zhang-Suen thinning of binary masks to one-pixel-wide centerlines.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class SkeletonResult:
    """Result of thinning a mask."""
    skeleton: np.ndarray
    iterations: int
    converged: bool


def max_thinning_iterations(width: int, height: int) -> int:
    """
    Upper bound on full thinning cycles for a mask of this size.

    Each productive cycle peels at least one pixel layer, and no stroke
    can be thicker than the image diagonal.
    """
    return int(math.ceil(math.hypot(width, height) / 2)) + 1


def _neighbours(img: np.ndarray) -> Tuple[np.ndarray, ...]:
    """
    Interior neighbour planes P2..P9, clockwise from North.

    Each plane has shape (H - 2, W - 2) and lines up with img[1:-1, 1:-1].
    """
    p2 = img[:-2, 1:-1]   # N
    p3 = img[:-2, 2:]     # NE
    p4 = img[1:-1, 2:]    # E
    p5 = img[2:, 2:]      # SE
    p6 = img[2:, 1:-1]    # S
    p7 = img[2:, :-2]     # SW
    p8 = img[1:-1, :-2]   # W
    p9 = img[:-2, :-2]    # NW
    return p2, p3, p4, p5, p6, p7, p8, p9


def _deletion_candidates(img: np.ndarray, first_pass: bool) -> np.ndarray:
    """
    Interior pixels removable in one Zhang-Suen sub-step.

    Evaluated against the mask as it stood at the start of the sub-step.
    """
    p2, p3, p4, p5, p6, p7, p8, p9 = _neighbours(img)
    center = img[1:-1, 1:-1]

    ring = (p2, p3, p4, p5, p6, p7, p8, p9, p2)
    b = p2 + p3 + p4 + p5 + p6 + p7 + p8 + p9
    a = np.zeros_like(b)
    for prev, nxt in zip(ring[:-1], ring[1:]):
        a += ((prev == 0) & (nxt == 1)).astype(b.dtype)

    if first_pass:
        guard = ((p2 * p4 * p6) == 0) & ((p4 * p6 * p8) == 0)
    else:
        guard = ((p2 * p4 * p8) == 0) & ((p2 * p6 * p8) == 0)

    return (center == 1) & (b >= 2) & (b <= 6) & (a == 1) & guard


def skeletonize(
    mask: np.ndarray,
    max_iterations: Optional[int] = None
) -> SkeletonResult:
    """
    Thin a binary mask to its centerlines (Zhang-Suen).

    Each cycle runs two sub-steps; a sub-step collects every deletable pixel
    first and only then clears them, so deletions never influence neighbour
    lookups within the same sub-step. The outermost pixel ring is never
    touched. Thinning stops at the first cycle that deletes nothing.

    Args:
        mask: Binary mask, nonzero = foreground
        max_iterations: Cycle cap (default max_thinning_iterations)

    Returns:
        SkeletonResult with a {0, 1} uint8 skeleton
    """
    img = (mask > 0).astype(np.uint8)
    h, w = img.shape[:2]

    if max_iterations is None:
        max_iterations = max_thinning_iterations(w, h)

    if h < 3 or w < 3:
        return SkeletonResult(skeleton=img, iterations=0, converged=True)

    interior = img[1:-1, 1:-1]
    iterations = 0
    converged = False

    while iterations < max_iterations:
        iterations += 1
        removed = 0

        for first_pass in (True, False):
            candidates = _deletion_candidates(img, first_pass)
            count = int(candidates.sum())
            if count:
                interior[candidates] = 0
                removed += count

        if removed == 0:
            converged = True
            break

    if not converged:
        logger.warning(
            f"Thinning stopped at iteration cap ({max_iterations}) before converging"
        )

    logger.debug(
        f"Skeletonized {w}x{h} in {iterations} cycles: "
        f"{int(img.sum())} centerline pixels"
    )
    return SkeletonResult(skeleton=img, iterations=iterations, converged=converged)
