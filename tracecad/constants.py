"""
TraceCAD - Master Constants Reference

Default tuning values for every stage of the raster-to-vector pipeline.
PipelineConfig and the CLI read their defaults from here.
"""

# =============================================================================
# INPUT CONSTANTS
# =============================================================================

# Zoom used when rendering a PDF page (2.0 = 144 DPI)
DEFAULT_PDF_ZOOM = 2.0

# Refuse buffers larger than this (pixels)
MAX_IMAGE_PIXELS = 200_000_000

# Supported raster image extensions
IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff", ".webp")

# Supported document extensions
PDF_EXTENSIONS = (".pdf",)

# =============================================================================
# BINARIZATION CONSTANTS
# =============================================================================

# Luminosity weights (R, G, B)
LUMA_WEIGHTS = (0.299, 0.587, 0.114)

# Local mean window radius (7 -> 15x15 window)
DEFAULT_BLOCK_RADIUS = 7

# Foreground when pixel < local_mean * factor
DEFAULT_CONTRAST_FACTOR = 0.95

# =============================================================================
# CONTOUR-ONLY TRACING CONSTANTS
# =============================================================================

# Gaussian adaptive threshold block size / constant
CONTOUR_THRESHOLD_BLOCK = 25
CONTOUR_THRESHOLD_C = 7

# Morphological close kernel
CONTOUR_CLOSE_KERNEL = 3

# Canny thresholds for the contour-only path
CONTOUR_CANNY_LOW = 50
CONTOUR_CANNY_HIGH = 200

# Minimum contour points kept as a polyline
CONTOUR_MIN_POINTS = 3

# =============================================================================
# EDGE EXTRACTION CONSTANTS
# =============================================================================

# Gaussian sigmas for the multi-scale edge pass
EDGE_SIGMAS = (1.0, 2.0, 3.5)

# Canny hysteresis thresholds
EDGE_CANNY_LOW = 50
EDGE_CANNY_HIGH = 200

# Dilation structuring element size
EDGE_DILATE_SIZE = 2

# =============================================================================
# HOUGH LINE CONSTANTS
# =============================================================================

# Accumulator resolution
HOUGH_RHO = 1.0
HOUGH_THETA_DEG = 1.0

# Coarse tier: long dominant strokes
HOUGH_COARSE_THRESHOLD_DIVISOR = 20
HOUGH_COARSE_MIN_LENGTH_DIVISOR = 15
HOUGH_COARSE_MIN_THRESHOLD = 40
HOUGH_COARSE_MIN_LENGTH = 30

# Fine tier: short detail strokes
HOUGH_FINE_THRESHOLD_DIVISOR = 60
HOUGH_FINE_MIN_LENGTH_DIVISOR = 50
HOUGH_FINE_MIN_THRESHOLD = 15
HOUGH_FINE_MIN_LENGTH = 10

# Max gap bridged inside one Hough segment
HOUGH_MAX_GAP_DIVISOR = 200
HOUGH_MIN_MAX_GAP = 3

# =============================================================================
# HOUGH CIRCLE CONSTANTS
# =============================================================================

CIRCLE_DP = 1.5
CIRCLE_MEDIAN_BLUR = 5

# Canny high threshold used inside HoughCircles
CIRCLE_CANNY_HIGH = 100

# Accumulator vote threshold
CIRCLE_ACCUMULATOR_THRESHOLD = 30

CIRCLE_MIN_RADIUS = 6

# max_radius = min(W, H) / divisor
CIRCLE_MAX_RADIUS_DIVISOR = 10

# min_center_distance = min(W, H) / divisor
CIRCLE_MIN_DIST_DIVISOR = 20

# =============================================================================
# CONTOUR SHAPE CONSTANTS
# =============================================================================

# Contours smaller than this are noise (px^2)
MIN_CONTOUR_AREA = 18.0

# Points needed before an ellipse fit is attempted
ELLIPSE_MIN_POINTS = 6

# Ellipse when min(axis) / max(axis) > cutoff
ELLIPSE_AXIS_RATIO_CUTOFF = 0.5

# Douglas-Peucker epsilon for large / small contours
POLY_EPSILON_LARGE = 2.0
POLY_EPSILON_SMALL = 1.0

# Minimum polyline vertices
MIN_POLYLINE_VERTICES = 3

# =============================================================================
# SEGMENT MERGING CONSTANTS
# =============================================================================

# Max angle difference to merge (degrees)
MERGE_ANGLE_TOLERANCE_DEG = 2.5

# Max endpoint gap to merge (pixels) at 1000 px min-dimension
MERGE_GAP_TOLERANCE_PX = 6.0

# Reference raster size for gap scaling
MERGE_GAP_REFERENCE_DIM = 1000

# Endpoint quantization allowance for the angle test (pixels)
MERGE_ENDPOINT_JITTER_PX = 1.0

# Upper bound on the endpoint-jitter angle slack (degrees)
MERGE_MAX_JITTER_SLACK_DEG = 1.0

# =============================================================================
# EXPORT CONSTANTS
# =============================================================================

DXF_VERSION = "R2000"

DXF_LAYER_NAME = "TRACED"

# AutoCAD color index for the traced layer (7 = white/black)
DXF_LAYER_COLOR = 7

# Samples used to approximate an ellipse
ELLIPSE_POLYLINE_SEGMENTS = 60

DEFAULT_SCALE = 1.0

# Preview overlay stroke (BGR) and width
PREVIEW_COLOR_BGR = (136, 255, 0)
PREVIEW_LINE_WIDTH = 1

