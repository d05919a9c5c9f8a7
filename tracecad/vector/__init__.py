# Vector post-processing (segment merging)

from .merger import (
    angle_difference,
    scaled_gap_tolerance,
    jitter_slack,
    angles_within_tolerance,
    endpoints_within_gap,
    segments_are_mergeable,
    mean_direction,
    collapse_group,
    group_segments,
    merge_segments,
)

__all__ = [
    "angle_difference",
    "scaled_gap_tolerance",
    "jitter_slack",
    "angles_within_tolerance",
    "endpoints_within_gap",
    "segments_are_mergeable",
    "mean_direction",
    "collapse_group",
    "group_segments",
    "merge_segments",
]
