# Raster processing module (binarization, thinning, edges)

from .preprocessor import (
    to_grayscale,
    remove_noise,
    integral_image,
    local_mean,
    binarize,
    adaptive_threshold_inverted,
    morphological_close,
    mask_to_image,
)

from .skeleton import (
    SkeletonResult,
    max_thinning_iterations,
    skeletonize,
)

from .edges import (
    sigma_to_kernel_size,
    detect_edges,
    extract_edges_multiscale,
)

__all__ = [
    # Preprocessor
    "to_grayscale",
    "remove_noise",
    "integral_image",
    "local_mean",
    "binarize",
    "adaptive_threshold_inverted",
    "morphological_close",
    "mask_to_image",
    # Skeleton
    "SkeletonResult",
    "max_thinning_iterations",
    "skeletonize",
    # Edges
    "sigma_to_kernel_size",
    "detect_edges",
    "extract_edges_multiscale",
]
