"""
Phase 8 Tests: Command Line Interface

Tests for argument parsing, validation and the config mapping.
"""

import sys
import os
import tempfile
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest
from PIL import Image

from tracecad.cli import (
    create_parser,
    validate_args,
    parse_args,
)
from tracecad.pipeline import DetectionStrategy, config_from_args
from tracecad.constants import (
    DEFAULT_PDF_ZOOM,
    DEFAULT_BLOCK_RADIUS,
    MERGE_ANGLE_TOLERANCE_DEG,
    MIN_CONTOUR_AREA,
)


@pytest.fixture
def image_path():
    """A small PNG on disk."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = os.path.join(tmpdir, "sketch.png")
        Image.new("RGB", (20, 20), (255, 255, 255)).save(path)
        yield path


def test_create_parser():
    """Test parser creation."""
    parser = create_parser()

    assert parser is not None
    assert parser.prog == "tracecad"

    print("  [PASS] Create parser")


def test_parser_required_args():
    """Test parser required arguments."""
    parser = create_parser()

    with pytest.raises(SystemExit):
        parser.parse_args([])

    print("  [PASS] Parser required args")


def test_parser_defaults():
    """Test parser default values."""
    args = create_parser().parse_args(["-i", "drawing.png"])

    assert args.output is None
    assert args.strategy == "multi"
    assert args.scale == "1.0"
    assert args.page == 1
    assert args.zoom == DEFAULT_PDF_ZOOM
    assert args.preview is None
    assert args.verbose is False
    assert args.block_radius == DEFAULT_BLOCK_RADIUS
    assert args.merge_angle == MERGE_ANGLE_TOLERANCE_DEG
    assert args.merge_gap is None
    assert args.min_area == MIN_CONTOUR_AREA
    assert args.no_circles is False

    print("  [PASS] Parser defaults")


def test_parser_full_args():
    """Test parser with all arguments."""
    args = create_parser().parse_args([
        "-i", "plan.pdf",
        "-o", "plan.dxf",
        "--strategy", "centerline",
        "--scale", "0.25",
        "--page", "3",
        "--zoom", "4",
        "--preview", "plan.png",
        "--block-radius", "10",
        "--merge-angle", "4",
        "--merge-gap", "8",
        "--min-area", "30",
        "--no-circles",
        "-v",
    ])

    assert args.input == "plan.pdf"
    assert args.output == "plan.dxf"
    assert args.strategy == "centerline"
    assert args.page == 3
    assert args.zoom == 4.0
    assert args.preview == "plan.png"
    assert args.block_radius == 10
    assert args.merge_gap == 8.0
    assert args.no_circles
    assert args.verbose

    print("  [PASS] Parser full args")


def test_unknown_strategy_rejected():
    """Strategy must be one of the known choices."""
    with pytest.raises(SystemExit):
        create_parser().parse_args(["-i", "a.png", "--strategy", "magic"])
    print("  [PASS] Unknown strategy rejected")


class TestValidateArgs:
    """Tests for argument validation."""

    def test_valid(self, image_path):
        args = create_parser().parse_args(["-i", image_path])
        is_valid, error = validate_args(args)
        assert is_valid, error
        assert error == ""
        print("  [PASS] Valid args accepted")

    def test_missing_input(self):
        args = create_parser().parse_args(["-i", "/nonexistent/sketch.png"])
        is_valid, error = validate_args(args)
        assert not is_valid
        assert "not found" in error
        print("  [PASS] Missing input rejected")

    def test_bad_extension(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "notes.txt")
            Path(path).write_text("hello")
            args = create_parser().parse_args(["-i", path])
            is_valid, error = validate_args(args)
        assert not is_valid
        assert "image or PDF" in error
        print("  [PASS] Bad extension rejected")

    def test_output_must_be_dxf(self, image_path):
        args = create_parser().parse_args(["-i", image_path, "-o", "out.svg"])
        is_valid, _ = validate_args(args)
        assert not is_valid
        print("  [PASS] Non-DXF output rejected")

    @pytest.mark.parametrize("flags", [
        ["--page", "0"],
        ["--zoom", "0"],
        ["--zoom", "50"],
        ["--block-radius", "0"],
        ["--merge-angle", "-1"],
        ["--merge-angle", "120"],
        ["--merge-gap", "-2"],
        ["--min-area", "-5"],
    ])
    def test_out_of_range(self, image_path, flags):
        args = create_parser().parse_args(["-i", image_path] + flags)
        is_valid, _ = validate_args(args)
        assert not is_valid, f"{flags} should be rejected"
        print(f"  [PASS] {' '.join(flags)} rejected")

    def test_bad_scale_is_not_an_error(self, image_path):
        args = create_parser().parse_args(["-i", image_path, "--scale", "abc"])
        is_valid, _ = validate_args(args)
        assert is_valid
        assert config_from_args(args).scale == 1.0
        print("  [PASS] Unparseable scale falls back instead of failing")


def test_parse_args_exits_on_invalid():
    """parse_args reports validation failures through the parser."""
    with pytest.raises(SystemExit):
        parse_args(["-i", "/nonexistent/sketch.png"])
    print("  [PASS] parse_args exits on invalid input")


def test_config_from_args(image_path):
    """Flags map onto PipelineConfig."""
    args = parse_args([
        "-i", image_path,
        "--strategy", "contour",
        "--scale", "2",
        "--block-radius", "5",
        "--merge-angle", "3",
        "--merge-gap", "4",
        "--min-area", "25",
        "--no-circles",
    ])
    config = config_from_args(args)

    assert config.strategy == DetectionStrategy.CONTOUR_ONLY
    assert config.scale == 2.0
    assert config.block_radius == 5
    assert config.merge_angle_tolerance == 3.0
    assert config.merge_gap_tolerance == 4.0
    assert config.min_contour_area == 25.0
    assert config.detect_circles is False
    print("  [PASS] Config from args")
