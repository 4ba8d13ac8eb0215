"""Unit tests for image export.

Tests cover:
- Gamma 2 correction of accumulated sums
- Clamping and quantization to 8-bit values
- ASCII PPM (P3) formatting and writing
- RMSE comparison
"""

import io

import numpy as np
import pytest


class TestGammaAndQuantize:
    """Tests for the color conversion steps."""

    def test_gamma_correct_averages_then_square_roots(self):
        from pathtracer.preview.export import gamma_correct

        accumulated = np.array([[[4.0, 1.0, 0.0]]])
        result = gamma_correct(accumulated, 4)
        assert result == pytest.approx(np.array([[[1.0, 0.5, 0.0]]]))

    def test_gamma_correct_rejects_zero_samples(self):
        from pathtracer.preview.export import gamma_correct

        with pytest.raises(ValueError, match="samples"):
            gamma_correct(np.zeros((1, 1, 3)), 0)

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(0.0, 0), (-0.5, 0), (0.5, 128), (0.999, 255), (1.0, 255), (7.3, 255), (0.25, 64)],
    )
    def test_quantize(self, value, expected):
        """Test clamp to [0, 0.999], scale by 256 and truncate."""
        from pathtracer.preview.export import quantize

        assert quantize(np.array([value]))[0] == expected

    @pytest.mark.parametrize("n", [1, 7, 500])
    def test_white_accumulation_is_255(self, n):
        """Test an accumulated (n, n, n) over n samples becomes 255 255 255."""
        from pathtracer.preview.export import to_pixels

        pixels = to_pixels(np.full((1, 1, 3), float(n)), n)
        assert pixels.tolist() == [[[255, 255, 255]]]

    def test_to_pixels_sky_blue(self):
        """Test the zenith sky color (0.5, 0.7, 1.0) quantizes as expected."""
        from pathtracer.preview.export import to_pixels

        pixels = to_pixels(np.array([[[0.5, 0.7, 1.0]]]), 1)
        # sqrt(0.5) * 256 = 181.02, sqrt(0.7) * 256 = 214.18
        assert pixels.tolist() == [[[181, 214, 255]]]


class TestPpmFormat:
    """Tests for ASCII PPM output."""

    def test_format_ppm(self):
        """Test header and row-major pixel lines."""
        from pathtracer.preview.export import format_ppm

        pixels = np.array(
            [
                [[255, 0, 0], [0, 255, 0], [0, 0, 255]],
                [[1, 2, 3], [4, 5, 6], [7, 8, 9]],
            ]
        )
        text = format_ppm(pixels)

        assert text == (
            "P3\n3 2\n255\n"
            "255 0 0\n0 255 0\n0 0 255\n"
            "1 2 3\n4 5 6\n7 8 9\n"
        )

    def test_format_ppm_rejects_bad_shape(self):
        from pathtracer.preview.export import format_ppm

        with pytest.raises(ValueError, match="height, width, 3"):
            format_ppm(np.zeros((2, 2), dtype=np.int64))

    def test_write_ppm_to_stream(self):
        from pathtracer.preview.export import write_ppm

        stream = io.StringIO()
        write_ppm(np.zeros((1, 2, 3), dtype=np.int64), stream)
        assert stream.getvalue() == "P3\n2 1\n255\n0 0 0\n0 0 0\n"

    def test_line_count(self):
        """Test a W x H image has 3 + W * H lines."""
        from pathtracer.preview.export import format_ppm

        text = format_ppm(np.zeros((4, 6, 3), dtype=np.int64))
        assert text.endswith("\n")
        assert len(text.splitlines()) == 3 + 24


class TestComputeRmse:
    """Tests for compute_rmse."""

    def test_identical_images(self):
        from pathtracer.preview.export import compute_rmse

        image = np.random.default_rng(0).random((4, 4, 3))
        assert compute_rmse(image, image) == 0.0

    def test_known_difference(self):
        from pathtracer.preview.export import compute_rmse

        a = np.zeros((2, 2, 3))
        b = np.full((2, 2, 3), 0.5)
        assert compute_rmse(a, b) == pytest.approx(0.5)

    def test_shape_mismatch(self):
        from pathtracer.preview.export import compute_rmse

        with pytest.raises(ValueError, match="shapes must match"):
            compute_rmse(np.zeros((2, 2, 3)), np.zeros((3, 2, 3)))
