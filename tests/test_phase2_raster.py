"""
Phase 2 Tests: Raster Processing

Tests for grayscale conversion, local-mean binarization and multi-scale
edge extraction.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import numpy as np
import cv2

from tracecad.raster import (
    to_grayscale,
    remove_noise,
    integral_image,
    local_mean,
    binarize,
    adaptive_threshold_inverted,
    morphological_close,
    mask_to_image,
    sigma_to_kernel_size,
    detect_edges,
    extract_edges_multiscale,
)


def create_line_drawing(width: int = 120, height: int = 100) -> np.ndarray:
    """White grayscale page with one black horizontal stroke."""
    gray = np.full((height, width), 255, dtype=np.uint8)
    cv2.line(gray, (0, 50), (width - 1, 50), 0, 3)
    return gray


def create_rectangle_drawing(width: int = 200, height: int = 160) -> np.ndarray:
    """White grayscale page with a rectangle outline."""
    gray = np.full((height, width), 255, dtype=np.uint8)
    cv2.rectangle(gray, (40, 30), (160, 130), 0, 2)
    return gray


class TestGrayscale:
    """Tests for luminosity grayscale conversion."""

    def test_luminosity_weights(self):
        rgb = np.zeros((4, 4, 3), dtype=np.uint8)
        rgb[:, :, 0] = 200  # R
        rgb[:, :, 1] = 100  # G
        rgb[:, :, 2] = 50   # B

        gray = to_grayscale(rgb)

        expected = round(0.299 * 200 + 0.587 * 100 + 0.114 * 50)
        assert gray.dtype == np.uint8
        assert gray.shape == (4, 4)
        assert np.all(gray == expected)
        print("  [PASS] Luminosity weights")

    def test_transparent_reads_as_paper(self):
        rgba = np.zeros((5, 5, 4), dtype=np.uint8)  # black, fully transparent
        gray = to_grayscale(rgba)
        assert np.all(gray == 255)
        print("  [PASS] Transparent pixels composited over white")

    def test_opaque_rgba_matches_rgb(self):
        rgb = np.random.default_rng(0).integers(0, 256, (6, 7, 3), dtype=np.uint8)
        rgba = np.dstack([rgb, np.full((6, 7), 255, dtype=np.uint8)])
        assert np.array_equal(to_grayscale(rgba), to_grayscale(rgb))
        print("  [PASS] Opaque RGBA equals RGB")

    def test_grayscale_passthrough(self):
        gray = np.full((3, 3), 77, dtype=np.uint8)
        assert np.array_equal(to_grayscale(gray), gray)
        print("  [PASS] Grayscale passthrough")


class TestRemoveNoise:
    """Tests for the median denoiser."""

    def test_isolated_specks_removed(self):
        gray = create_line_drawing()
        noisy = gray.copy()
        noisy[10, 10] = 0
        noisy[80, 30] = 0

        cleaned = remove_noise(noisy, ksize=5)

        assert cleaned[10, 10] == 255
        assert cleaned[80, 30] == 255
        assert cleaned[50, 60] == 0
        print("  [PASS] Median filter removes specks, keeps strokes")


class TestLocalMean:
    """Tests for the summed-area table and clipped windows."""

    def test_integral_image_shape(self):
        gray = np.ones((10, 12), dtype=np.uint8)
        table = integral_image(gray)
        assert table.shape == (11, 13)
        assert table[-1, -1] == 120
        assert table[0, 0] == 0
        print("  [PASS] Integral image shape")

    def test_clipped_window_at_corner(self):
        gray = np.random.default_rng(1).integers(0, 256, (20, 20), dtype=np.uint8)
        means = local_mean(gray, radius=2)

        assert np.isclose(means[0, 0], gray[:3, :3].mean())
        assert np.isclose(means[10, 10], gray[8:13, 8:13].mean())
        assert np.isclose(means[19, 0], gray[17:, :3].mean())
        print("  [PASS] Windows clipped at image bounds")


class TestBinarize:
    """Tests for local-mean binarization."""

    def test_uniform_image_is_empty(self):
        for value in (0, 1, 128, 254, 255):
            gray = np.full((50, 60), value, dtype=np.uint8)
            mask = binarize(gray)
            assert mask.shape == (50, 60)
            assert mask.dtype == np.uint8
            assert mask.sum() == 0, f"Uniform {value} produced foreground"
        print("  [PASS] Uniform image gives all-zero mask")

    def test_dark_stroke_is_foreground(self):
        gray = create_line_drawing()
        mask = binarize(gray)

        assert set(np.unique(mask)) <= {0, 1}
        assert np.array_equal(mask == 1, gray == 0)
        print("  [PASS] Dark stroke is exactly the foreground")

    def test_gradient_background_ignored(self):
        # Smooth illumination gradient with a stroke on top
        ramp = np.tile(np.linspace(120, 250, 100), (80, 1)).astype(np.uint8)
        cv2.line(ramp, (10, 40), (90, 40), 20, 2)

        mask = binarize(ramp)

        assert mask[40, 50] == 1
        assert mask[10, 50] == 0
        assert mask[70, 20] == 0
        print("  [PASS] Uneven lighting tolerated")


class TestContourThreshold:
    """Tests for the contour-only preprocessing helpers."""

    def test_adaptive_threshold_marks_ink_white(self):
        gray = create_line_drawing()
        binary = adaptive_threshold_inverted(gray)
        assert binary[50, 60] == 255
        assert binary[10, 60] == 0
        print("  [PASS] Adaptive threshold inverts ink")

    def test_close_fills_small_gap(self):
        binary = np.zeros((20, 40), dtype=np.uint8)
        binary[8:12, 5:19] = 255
        binary[8:12, 20:35] = 255   # 1 px gap at column 19

        closed = morphological_close(binary)

        assert np.all(closed[8:12, 19] == 255)
        print("  [PASS] Close bridges 1 px gap")

    def test_mask_to_image(self):
        mask = np.array([[0, 1], [1, 0]], dtype=np.uint8)
        assert np.array_equal(mask_to_image(mask), np.array([[0, 255], [255, 0]]))
        print("  [PASS] Mask scaled to 0/255")


class TestEdges:
    """Tests for multi-scale edge extraction."""

    def test_kernel_size_is_odd(self):
        for sigma in (0.5, 1.0, 2.0, 3.5, 6.0):
            ksize = sigma_to_kernel_size(sigma)
            assert ksize % 2 == 1
            assert ksize >= 3
        print("  [PASS] Kernel sizes odd and >= 3")

    def test_uniform_image_has_no_edges(self):
        gray = np.full((80, 80), 200, dtype=np.uint8)
        edges = extract_edges_multiscale(gray)
        assert edges.sum() == 0
        print("  [PASS] Uniform image has no edges")

    def test_rectangle_edges(self):
        gray = create_rectangle_drawing()
        edges = extract_edges_multiscale(gray)

        assert set(np.unique(edges)) <= {0, 1}
        # Edges hug the outline, the interior and far background stay empty
        assert edges[28:34, 60:140].any()
        assert edges[60:100, 70:130].sum() == 0
        assert edges[:10, :].sum() == 0
        print("  [PASS] Rectangle outline found")

    def test_union_covers_every_scale(self):
        gray = create_rectangle_drawing()
        combined = extract_edges_multiscale(gray, sigmas=(1.0, 3.0))
        for sigma in (1.0, 3.0):
            single = detect_edges(gray, sigma) > 0
            assert np.all(combined[single] == 1)
        print("  [PASS] Union contains every scale")
