"""
Pipeline Orchestration Module

Coordinates the full workflow from pixel buffer to DXF.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import cv2
import numpy as np

from .constants import (
    DEFAULT_BLOCK_RADIUS,
    DEFAULT_CONTRAST_FACTOR,
    EDGE_SIGMAS,
    EDGE_CANNY_LOW,
    EDGE_CANNY_HIGH,
    EDGE_DILATE_SIZE,
    MERGE_ANGLE_TOLERANCE_DEG,
    MERGE_ENDPOINT_JITTER_PX,
    MIN_CONTOUR_AREA,
    ELLIPSE_AXIS_RATIO_CUTOFF,
    ELLIPSE_POLYLINE_SEGMENTS,
    DEFAULT_SCALE,
)
from .ingest.reader import PixelBuffer, NoImageError, load_pixel_buffer
from .raster.preprocessor import to_grayscale, binarize
from .raster.skeleton import skeletonize
from .raster.edges import extract_edges_multiscale
from .detection.line_detector import HoughParams, auto_hough_tiers, detect_segments_tiered
from .detection.circle_detector import CircleParams, detect_circles
from .detection.contour_detector import detect_contour_shapes, trace_contour_polylines
from .vector.merger import merge_segments, scaled_gap_tolerance
from .geometry.primitives import DetectionResult
from .export.dxf_writer import normalize_scale, export_dxf, write_dxf
from .export.preview import render_preview, write_preview

logger = logging.getLogger(__name__)


class DetectionStrategy(Enum):
    """Which detectors a run uses."""
    CONTOUR_ONLY = "contour"          # Edge contours traced as polylines
    MULTI_PRIMITIVE = "multi"         # Edges -> lines, circles, contour shapes
    CENTERLINE = "centerline"         # Skeleton -> lines, circles, contour shapes


class VisionUnavailableError(Exception):
    """Raised when the OpenCV routines the pipeline needs are missing."""
    pass


class PipelineCancelled(Exception):
    """Raised when a run is cancelled between stages."""
    pass


@dataclass
class VisionCapabilities:
    """What the installed OpenCV build provides."""
    opencv_version: str
    hough_lines: bool
    hough_circles: bool
    contours: bool

    @property
    def ready(self) -> bool:
        return self.hough_lines and self.hough_circles and self.contours

    def missing(self) -> List[str]:
        names = []
        if not self.hough_lines:
            names.append("HoughLinesP")
        if not self.hough_circles:
            names.append("HoughCircles")
        if not self.contours:
            names.append("findContours")
        return names


def check_vision_capabilities() -> VisionCapabilities:
    """
    Probe the OpenCV build once at startup.

    Returns:
        VisionCapabilities to hand to TracePipeline
    """
    caps = VisionCapabilities(
        opencv_version=getattr(cv2, "__version__", "unknown"),
        hough_lines=hasattr(cv2, "HoughLinesP"),
        hough_circles=hasattr(cv2, "HoughCircles"),
        contours=hasattr(cv2, "findContours") and hasattr(cv2, "fitEllipse"),
    )
    logger.debug(f"OpenCV {caps.opencv_version}, ready={caps.ready}")
    return caps


@dataclass
class PipelineConfig:
    """
    Configuration for a detection run.

    hough_tiers and merge_gap_tolerance are derived from the image size
    when left as None.
    """
    strategy: DetectionStrategy = DetectionStrategy.MULTI_PRIMITIVE

    # Binarization
    block_radius: int = DEFAULT_BLOCK_RADIUS
    contrast_factor: float = DEFAULT_CONTRAST_FACTOR

    # Thinning
    max_thinning_iterations: Optional[int] = None

    # Edges
    edge_sigmas: Tuple[float, ...] = EDGE_SIGMAS
    canny_low: int = EDGE_CANNY_LOW
    canny_high: int = EDGE_CANNY_HIGH
    edge_dilate_size: int = EDGE_DILATE_SIZE

    # Lines
    hough_tiers: Optional[List[HoughParams]] = None
    merge_angle_tolerance: float = MERGE_ANGLE_TOLERANCE_DEG
    merge_gap_tolerance: Optional[float] = None
    endpoint_jitter: float = MERGE_ENDPOINT_JITTER_PX

    # Circles
    detect_circles: bool = True
    circle_params: CircleParams = field(default_factory=CircleParams)

    # Contours
    min_contour_area: float = MIN_CONTOUR_AREA
    ellipse_ratio_cutoff: float = ELLIPSE_AXIS_RATIO_CUTOFF

    # Export
    ellipse_segments: int = ELLIPSE_POLYLINE_SEGMENTS
    scale: float = DEFAULT_SCALE

    def tiers_for(self, min_dim: int) -> List[HoughParams]:
        if self.hough_tiers:
            return list(self.hough_tiers)
        return auto_hough_tiers(min_dim)

    def gap_tolerance_for(self, min_dim: int) -> float:
        if self.merge_gap_tolerance is not None:
            return self.merge_gap_tolerance
        return scaled_gap_tolerance(min_dim)


@dataclass
class PipelineResult:
    """Result from a full command-line run."""
    input_file: str
    dxf_path: Optional[str]
    preview_path: Optional[str]
    detection: DetectionResult
    warnings: List[str]
    processing_time: float


CancelCheck = Callable[[], bool]


def _check_cancel(cancel_check: Optional[CancelCheck], stage: str) -> None:
    if cancel_check is not None and cancel_check():
        logger.info(f"Cancelled before {stage}")
        raise PipelineCancelled(f"Cancelled before {stage}")


class TracePipeline:
    """
    Raster-to-vector pipeline.

    Stages run strictly in sequence; every call to detect() allocates its
    own intermediate buffers, so one instance can serve independent runs.
    """

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        capabilities: Optional[VisionCapabilities] = None
    ):
        self.config = config or PipelineConfig()
        self.capabilities = capabilities or check_vision_capabilities()

    def detect(
        self,
        buffer: Optional[PixelBuffer],
        cancel_check: Optional[CancelCheck] = None
    ) -> DetectionResult:
        """
        Detect vector primitives in a pixel buffer.

        Args:
            buffer: Decoded image
            cancel_check: Polled between stages; returning True cancels

        Returns:
            DetectionResult (may be empty)

        Raises:
            NoImageError: If no buffer was given
            VisionUnavailableError: If OpenCV lacks a required routine
            PipelineCancelled: If cancel_check fired
        """
        if buffer is None:
            raise NoImageError("No image loaded")
        if not self.capabilities.ready:
            raise VisionUnavailableError(
                f"OpenCV {self.capabilities.opencv_version} is missing: "
                f"{', '.join(self.capabilities.missing())}"
            )

        config = self.config
        strategy = config.strategy
        logger.info(
            f"Detecting on {buffer.width}x{buffer.height} image "
            f"(strategy={strategy.value})"
        )

        result = DetectionResult(
            image_width=buffer.width,
            image_height=buffer.height,
            strategy=strategy.value,
        )

        _check_cancel(cancel_check, "grayscale")
        gray = to_grayscale(buffer.as_array())

        if strategy == DetectionStrategy.CONTOUR_ONLY:
            _check_cancel(cancel_check, "contour tracing")
            result.arcs = list(trace_contour_polylines(gray))
            logger.info(f"Detection complete: {result.summary()}")
            return result

        min_dim = min(buffer.width, buffer.height)

        if strategy == DetectionStrategy.CENTERLINE:
            _check_cancel(cancel_check, "binarization")
            mask = binarize(gray, config.block_radius, config.contrast_factor)

            _check_cancel(cancel_check, "skeletonization")
            thinned = skeletonize(mask, config.max_thinning_iterations)
            if not thinned.converged:
                result.diagnostics.append(
                    f"Thinning hit the iteration cap after {thinned.iterations} cycles"
                )
            line_mask = thinned.skeleton
            shape_mask = mask
        else:
            _check_cancel(cancel_check, "edge extraction")
            line_mask = extract_edges_multiscale(
                gray,
                config.edge_sigmas,
                config.canny_low,
                config.canny_high,
                config.edge_dilate_size,
            )
            shape_mask = line_mask

        _check_cancel(cancel_check, "line detection")
        try:
            raw_segments = detect_segments_tiered(line_mask, config.tiers_for(min_dim))
        except (cv2.error, ValueError) as e:
            result.diagnostics.append(f"Line detection failed: {e}")
            raw_segments = []

        _check_cancel(cancel_check, "segment merging")
        result.lines = merge_segments(
            raw_segments,
            config.merge_angle_tolerance,
            config.gap_tolerance_for(min_dim),
            config.endpoint_jitter,
        )

        if config.detect_circles:
            _check_cancel(cancel_check, "circle detection")
            circles, circle_diagnostics = detect_circles(gray, config.circle_params)
            result.circles = circles
            result.diagnostics.extend(circle_diagnostics)

        _check_cancel(cancel_check, "contour classification")
        shapes, shape_diagnostics = detect_contour_shapes(
            shape_mask,
            config.min_contour_area,
            config.ellipse_ratio_cutoff,
        )
        result.arcs = shapes
        result.diagnostics.extend(shape_diagnostics)

        for message in result.diagnostics:
            logger.warning(message)

        logger.info(f"Detection complete: {result.summary()}")
        return result

    def export(self, result: DetectionResult) -> bytes:
        """
        Serialize a result to DXF with the configured scale.

        Raises:
            NothingToExportError: If the result is empty
        """
        return export_dxf(
            result,
            result.image_height,
            normalize_scale(self.config.scale),
            self.config.ellipse_segments,
        )

    def render_preview(self, buffer: PixelBuffer, result: DetectionResult) -> np.ndarray:
        """Overlay of the result on its source image (BGR)."""
        return render_preview(buffer, result)


def default_output_path(input_file: str, suffix: str = ".dxf") -> str:
    """Output path next to the input, e.g. plan.pdf -> plan.dxf."""
    return str(Path(input_file).with_suffix(suffix))


def config_from_args(args) -> PipelineConfig:
    """Build a PipelineConfig from parsed command-line arguments."""
    return PipelineConfig(
        strategy=DetectionStrategy(args.strategy),
        block_radius=args.block_radius,
        merge_angle_tolerance=args.merge_angle,
        merge_gap_tolerance=args.merge_gap,
        detect_circles=not args.no_circles,
        min_contour_area=args.min_area,
        scale=normalize_scale(args.scale),
    )


def run_pipeline(args) -> PipelineResult:
    """
    Run load -> detect -> export for one input file.

    Args:
        args: Parsed command-line arguments

    Returns:
        PipelineResult with output paths and the detection result
    """
    start_time = time.time()

    # Setup logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=log_level, format='%(message)s')

    config = config_from_args(args)
    warnings = []

    logger.info(f"Processing: {args.input}")

    buffer = load_pixel_buffer(args.input, page_number=args.page - 1, zoom=args.zoom)

    pipeline = TracePipeline(config, check_vision_capabilities())
    detection = pipeline.detect(buffer)
    warnings.extend(detection.diagnostics)

    dxf_path = None
    preview_path = None

    if detection.is_empty:
        warnings.append("Nothing to export")
        logger.warning("Nothing to export: no primitives detected")
    else:
        output = args.output or default_output_path(args.input)
        dxf_path = str(write_dxf(
            output,
            detection,
            buffer.height,
            config.scale,
            config.ellipse_segments,
        ))

    if args.preview:
        preview_path = str(write_preview(args.preview, buffer, detection))

    processing_time = time.time() - start_time

    # Summary
    logger.info(f"\nSummary:")
    logger.info(f"  Strategy: {config.strategy.value}")
    logger.info(f"  Primitives: {detection.summary()}")
    logger.info(f"  Scale: {config.scale}")
    logger.info(f"  Processing time: {processing_time:.1f}s")

    if warnings and args.verbose:
        logger.info(f"\nWarnings ({len(warnings)}):")
        for w in warnings[:10]:
            logger.info(f"  - {w}")
        if len(warnings) > 10:
            logger.info(f"  ... and {len(warnings) - 10} more")

    return PipelineResult(
        input_file=args.input,
        dxf_path=dxf_path,
        preview_path=preview_path,
        detection=detection,
        warnings=warnings,
        processing_time=processing_time,
    )
