"""
Segment Merger Module

Collapses fragmented, near-collinear Hough detections into one segment per
physical line.
"""

import logging
import math
from typing import List, Optional, Sequence, Tuple

from ..constants import (
    MERGE_ANGLE_TOLERANCE_DEG,
    MERGE_GAP_TOLERANCE_PX,
    MERGE_GAP_REFERENCE_DIM,
    MERGE_ENDPOINT_JITTER_PX,
    MERGE_MAX_JITTER_SLACK_DEG,
)
from ..geometry.primitives import Segment

logger = logging.getLogger(__name__)


def angle_difference(angle1: float, angle2: float) -> float:
    """
    Calculate the difference between two angles (0-180 range).

    Args:
        angle1: First angle in degrees
        angle2: Second angle in degrees

    Returns:
        Absolute difference in degrees (0-90)
    """
    diff = abs(angle1 - angle2) % 180
    # Handle wrap-around at 180 degrees
    if diff > 90:
        diff = 180 - diff
    return diff


def scaled_gap_tolerance(
    min_dim: int,
    base: float = MERGE_GAP_TOLERANCE_PX
) -> float:
    """Grow the gap tolerance linearly for rasters above the reference size."""
    return base * max(1.0, min_dim / MERGE_GAP_REFERENCE_DIM)


def jitter_slack(
    seg_a: Segment,
    seg_b: Segment,
    endpoint_jitter: float = MERGE_ENDPOINT_JITTER_PX
) -> float:
    """
    Angular error an endpoint shift of endpoint_jitter pixels can cause.

    Measured on the shorter segment as atan(jitter / length) and capped at
    MERGE_MAX_JITTER_SLACK_DEG, so two short segments never gain more than
    that on top of the angle tolerance.

    Args:
        seg_a: First segment
        seg_b: Second segment
        endpoint_jitter: Endpoint quantization in pixels (0 disables)

    Returns:
        Extra angle allowance in degrees
    """
    shorter = min(seg_a.length, seg_b.length)
    if endpoint_jitter <= 0 or shorter <= 0:
        return 0.0
    slack = math.degrees(math.atan2(endpoint_jitter, shorter))
    return min(slack, MERGE_MAX_JITTER_SLACK_DEG)


def angles_within_tolerance(
    seg_a: Segment,
    seg_b: Segment,
    angle_tolerance: float,
    endpoint_jitter: float = MERGE_ENDPOINT_JITTER_PX
) -> bool:
    """Axial angle difference within angle_tolerance plus jitter slack."""
    limit = angle_tolerance + jitter_slack(seg_a, seg_b, endpoint_jitter)
    return angle_difference(seg_a.angle, seg_b.angle) <= limit


def endpoints_within_gap(seg_a: Segment, seg_b: Segment, gap_tolerance: float) -> bool:
    return seg_a.endpoint_distance(seg_b) <= gap_tolerance


def segments_are_mergeable(
    seg_a: Segment,
    seg_b: Segment,
    angle_tolerance: float,
    gap_tolerance: float,
    endpoint_jitter: float = MERGE_ENDPOINT_JITTER_PX
) -> bool:
    """
    Check if two segments may belong to the same physical line.

    The effective angle tolerance is angle_tolerance plus
    min(atan(endpoint_jitter / shorter_length), MERGE_MAX_JITTER_SLACK_DEG),
    since detector endpoints are integer pixel positions.

    Args:
        seg_a: First segment
        seg_b: Second segment
        angle_tolerance: Max angle difference in degrees
        gap_tolerance: Max nearest-endpoint distance in pixels
        endpoint_jitter: Endpoint quantization in pixels (0 disables)

    Returns:
        True if angle and gap are both within tolerance
    """
    if not angles_within_tolerance(seg_a, seg_b, angle_tolerance, endpoint_jitter):
        return False
    return endpoints_within_gap(seg_a, seg_b, gap_tolerance)


def mean_direction(segments: Sequence[Segment]) -> Optional[Tuple[float, float]]:
    """
    Axial mean direction of a group of undirected segments.

    Angles are doubled before summing unit vectors so that 1 and 179
    degrees average to 0, not 90.

    Args:
        segments: Group members

    Returns:
        Unit vector (dx, dy), or None if the directions cancel out
    """
    sx = 0.0
    sy = 0.0
    for seg in segments:
        doubled = math.radians(2 * seg.angle)
        sx += math.cos(doubled)
        sy += math.sin(doubled)

    norm = math.hypot(sx, sy)
    if norm < 1e-9:
        return None

    half = math.atan2(sy, sx) / 2
    return (math.cos(half), math.sin(half))


def collapse_group(segments: Sequence[Segment]) -> Segment:
    """
    Replace a group with the segment spanning its extreme endpoints.

    Every endpoint is projected onto the group's mean direction; the two
    endpoints with the smallest and largest projection become the result.

    Args:
        segments: Non-empty group of segments

    Returns:
        Consolidated segment
    """
    if len(segments) == 1:
        return segments[0]

    direction = mean_direction(segments)
    if direction is None:
        longest = max(segments, key=lambda s: s.length)
        rad = math.radians(longest.angle)
        direction = (math.cos(rad), math.sin(rad))

    ux, uy = direction
    points = [p for seg in segments for p in (seg.start, seg.end)]
    projections = [p[0] * ux + p[1] * uy for p in points]

    lo = min(range(len(points)), key=lambda i: projections[i])
    hi = max(range(len(points)), key=lambda i: projections[i])

    return Segment(start=points[lo], end=points[hi])


def group_segments(
    segments: Sequence[Segment],
    angle_tolerance: float,
    gap_tolerance: float,
    endpoint_jitter: float = MERGE_ENDPOINT_JITTER_PX
) -> List[List[int]]:
    """
    Greedy transitive clustering of segments.

    Groups are seeded in input order. A segment joins the current group
    when its angle is within tolerance of some member and its nearest
    endpoint is within the gap of some member, not necessarily the same
    one; scanning repeats until a full pass adds nothing. A segment reachable from two groups therefore lands
    in the one seeded first (lowest seed index).

    Args:
        segments: Input segments
        angle_tolerance: Max angle difference in degrees
        gap_tolerance: Max endpoint gap in pixels
        endpoint_jitter: Endpoint quantization in pixels

    Returns:
        List of groups, each a list of input indices in join order
    """
    n = len(segments)
    used = [False] * n
    groups = []

    for seed in range(n):
        if used[seed]:
            continue

        used[seed] = True
        group = [seed]

        added = True
        while added:
            added = False
            for j in range(n):
                if used[j]:
                    continue
                candidate = segments[j]
                # Angle and gap may be satisfied by different members
                angle_ok = any(
                    angles_within_tolerance(candidate, segments[m], angle_tolerance, endpoint_jitter)
                    for m in group
                )
                if angle_ok and any(
                    endpoints_within_gap(candidate, segments[m], gap_tolerance)
                    for m in group
                ):
                    used[j] = True
                    group.append(j)
                    added = True

        groups.append(group)

    return groups


def merge_segments(
    segments: Sequence[Segment],
    angle_tolerance: float = MERGE_ANGLE_TOLERANCE_DEG,
    gap_tolerance: float = MERGE_GAP_TOLERANCE_PX,
    endpoint_jitter: float = MERGE_ENDPOINT_JITTER_PX
) -> List[Segment]:
    """
    Merge near-collinear, nearly touching segments.

    Args:
        segments: Raw detector output (order matters for ties)
        angle_tolerance: Max angle difference in degrees
        gap_tolerance: Max endpoint gap in pixels
        endpoint_jitter: Endpoint quantization in pixels

    Returns:
        One segment per group, in group seed order; zero-length results
        are dropped
    """
    valid = [s for s in segments if not s.is_degenerate]
    if len(valid) < len(segments):
        logger.debug(f"Dropped {len(segments) - len(valid)} zero-length input segments")

    groups = group_segments(valid, angle_tolerance, gap_tolerance, endpoint_jitter)

    merged = []
    for group in groups:
        seg = collapse_group([valid[i] for i in group])
        if seg.is_degenerate:
            continue
        merged.append(seg)

    logger.info(
        f"Segment merger: {len(segments)} -> {len(merged)} segments "
        f"(angle_tol={angle_tolerance}, gap_tol={gap_tolerance:.1f})"
    )
    return merged
