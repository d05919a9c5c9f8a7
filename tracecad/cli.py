"""
Command Line Interface Module

Parses command-line arguments for the tracing pipeline.
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from .constants import (
    DEFAULT_PDF_ZOOM,
    DEFAULT_BLOCK_RADIUS,
    DEFAULT_SCALE,
    MERGE_ANGLE_TOLERANCE_DEG,
    MIN_CONTOUR_AREA,
    IMAGE_EXTENSIONS,
    PDF_EXTENSIONS,
)


STRATEGY_CHOICES = ["contour", "multi", "centerline"]


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for the pipeline."""
    parser = argparse.ArgumentParser(
        prog="tracecad",
        description="Trace raster drawings (PNG, JPEG, PDF) into DXF vector files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m tracecad.cli -i sketch.png
  python -m tracecad.cli -i plan.pdf -o plan.dxf --scale 0.5
  python -m tracecad.cli -i part.jpg --strategy centerline --preview part_preview.png
        """
    )

    # Required arguments
    parser.add_argument(
        "-i", "--input",
        required=True,
        help="Input image or PDF file path"
    )

    # Optional arguments
    parser.add_argument(
        "-o", "--output",
        help="Output DXF path (default: input path with .dxf suffix)"
    )

    parser.add_argument(
        "--strategy",
        choices=STRATEGY_CHOICES,
        default="multi",
        help="Detection strategy (default: multi)"
    )

    parser.add_argument(
        "--scale",
        default=str(DEFAULT_SCALE),
        help=f"Drawing units per pixel; invalid values fall back to {DEFAULT_SCALE}"
    )

    parser.add_argument(
        "--page",
        type=int,
        default=1,
        help="PDF page to trace, 1-indexed (default: 1)"
    )

    parser.add_argument(
        "--zoom",
        type=float,
        default=DEFAULT_PDF_ZOOM,
        help=f"PDF render zoom factor (default: {DEFAULT_PDF_ZOOM})"
    )

    parser.add_argument(
        "--preview",
        help="Also write a PNG overlay of the detected primitives"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )

    # Tuning options
    tuning_group = parser.add_argument_group('detection tuning')

    tuning_group.add_argument(
        "--block-radius",
        type=int,
        default=DEFAULT_BLOCK_RADIUS,
        help=f"Binarization window radius in pixels (default: {DEFAULT_BLOCK_RADIUS})"
    )

    tuning_group.add_argument(
        "--merge-angle",
        type=float,
        default=MERGE_ANGLE_TOLERANCE_DEG,
        help=f"Segment merge angle tolerance in degrees (default: {MERGE_ANGLE_TOLERANCE_DEG})"
    )

    tuning_group.add_argument(
        "--merge-gap",
        type=float,
        default=None,
        help="Segment merge gap in pixels (default: scaled to image size)"
    )

    tuning_group.add_argument(
        "--min-area",
        type=float,
        default=MIN_CONTOUR_AREA,
        help=f"Minimum contour area in pixels (default: {MIN_CONTOUR_AREA})"
    )

    tuning_group.add_argument(
        "--no-circles",
        action="store_true",
        help="Skip circle detection"
    )

    return parser


def validate_args(args: argparse.Namespace) -> Tuple[bool, str]:
    """
    Validate parsed arguments.

    Args:
        args: Parsed arguments

    Returns:
        Tuple of (is_valid, error_message)
    """
    # Check input file exists
    input_path = Path(args.input)
    if not input_path.exists():
        return False, f"Input file not found: {args.input}"

    suffix = input_path.suffix.lower()
    if suffix not in IMAGE_EXTENSIONS and suffix not in PDF_EXTENSIONS:
        return False, f"Input file must be an image or PDF: {args.input}"

    if args.output and Path(args.output).suffix.lower() != ".dxf":
        return False, f"Output file must have a .dxf suffix: {args.output}"

    if args.page < 1:
        return False, f"Page must be 1 or greater: {args.page}"

    if args.zoom <= 0 or args.zoom > 10:
        return False, f"Zoom must be between 0 and 10: {args.zoom}"

    if args.block_radius < 1:
        return False, f"Block radius must be at least 1: {args.block_radius}"

    if args.merge_angle < 0 or args.merge_angle > 90:
        return False, f"Merge angle must be between 0 and 90: {args.merge_angle}"

    if args.merge_gap is not None and args.merge_gap < 0:
        return False, f"Merge gap must not be negative: {args.merge_gap}"

    if args.min_area < 0:
        return False, f"Minimum area must not be negative: {args.min_area}"

    return True, ""


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse and validate command-line arguments.

    Args:
        args: Optional list of arguments (uses sys.argv if None)

    Returns:
        Parsed and validated arguments
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    is_valid, error_msg = validate_args(parsed)
    if not is_valid:
        parser.error(error_msg)

    return parsed


def main():
    """Main entry point for CLI."""
    args = parse_args()

    # Import pipeline and run
    from .pipeline import run_pipeline

    try:
        run_pipeline(args)
    except KeyboardInterrupt:
        print("\nProcessing cancelled by user")
        sys.exit(1)
    except Exception as e:
        print(f"\nError: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
