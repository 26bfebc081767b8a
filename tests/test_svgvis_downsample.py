from __future__ import annotations

import unittest

import numpy as np

from svgvis_plot import PlotDataError
from svgvis_plot.downsample import bucket_average, rdp_epsilon, reduce_points, simplify_rdp


class BucketAverageTests(unittest.TestCase):
    def test_full_domain_output_is_bounded_by_target(self) -> None:
        x = np.linspace(0.0, 1.0, 100)
        y = np.sin(x * 12.0)
        bx, by = bucket_average(x, y, target_points=50)
        self.assertGreater(bx.size, 0)
        self.assertLessEqual(bx.size, 50)
        self.assertEqual(bx.size, by.size)

    def test_large_input_is_reduced_to_target(self) -> None:
        rng = np.random.default_rng(7)
        x = np.linspace(0.0, 1.0, 250_000)
        y = rng.normal(size=x.size).cumsum()
        bx, _ = bucket_average(x, y, target_points=50)
        self.assertLessEqual(bx.size, 50)
        self.assertTrue(np.all(np.diff(bx) > 0))

    def test_bucket_means_follow_a_linear_signal(self) -> None:
        x = np.linspace(0.0, 1.0, 101)
        bx, by = bucket_average(x, x.copy(), target_points=10)
        np.testing.assert_allclose(by, bx, atol=0.01)

    def test_point_on_upper_edge_is_kept(self) -> None:
        x = np.linspace(0.0, 1.0, 31)
        y = np.zeros_like(x)
        y[-1] = 300.0
        _, by = bucket_average(x, y, target_points=3)
        self.assertEqual(by.size, 3)
        self.assertGreater(by[-1], 0.0)
        self.assertEqual(float(by[:-1].sum()), 0.0)

    def test_partial_span_scales_bucket_count(self) -> None:
        x = np.linspace(0.2, 0.4, 100)
        bx, _ = bucket_average(x, np.cos(x), target_points=50)
        self.assertLessEqual(bx.size, 10)
        self.assertGreaterEqual(float(bx.min()), 0.2)
        self.assertLessEqual(float(bx.max()), 0.4)

    def test_narrow_span_is_returned_unchanged(self) -> None:
        x = np.asarray([0.5, 0.502, 0.505])
        y = np.asarray([1.0, 2.0, 3.0])
        bx, by = bucket_average(x, y)
        self.assertIs(bx, x)
        self.assertIs(by, y)

    def test_sparse_occupancy_returns_input(self) -> None:
        x = np.asarray([0.0, 0.001, 0.999, 1.0])
        y = np.asarray([1.0, 2.0, 3.0, 4.0])
        bx, by = bucket_average(x, y, target_points=50)
        self.assertIs(bx, x)
        self.assertIs(by, y)

    def test_invalid_target_is_rejected(self) -> None:
        with self.assertRaises(PlotDataError):
            bucket_average(np.zeros(3), np.zeros(3), target_points=0)


class SimplifyRdpTests(unittest.TestCase):
    def test_straight_line_collapses_to_endpoints(self) -> None:
        x = np.linspace(0.0, 1.0, 100)
        y = 2.0 * x + 1.0
        sx, sy = simplify_rdp(x, y, 0.001)
        self.assertEqual(sx.tolist(), [0.0, 1.0])
        self.assertEqual(sy.tolist(), [1.0, 3.0])

    def test_spike_survives_with_original_value(self) -> None:
        x = np.linspace(0.0, 1.0, 100)
        y = np.zeros_like(x)
        y[50] = 10.0
        sx, sy = simplify_rdp(x, y, 0.001)
        self.assertIn(10.0, sy.tolist())
        self.assertEqual(sx[0], 0.0)
        self.assertEqual(sx[-1], 1.0)
        self.assertLessEqual(sx.size, 5)

    def test_larger_epsilon_never_keeps_more_points(self) -> None:
        rng = np.random.default_rng(11)
        x = np.linspace(0.0, 1.0, 2_000)
        y = rng.normal(size=x.size).cumsum()
        sizes = [simplify_rdp(x, y, eps)[0].size for eps in (0.0005, 0.001, 0.01, 0.1)]
        self.assertEqual(sizes, sorted(sizes, reverse=True))
        self.assertLessEqual(sizes[0], x.size)

    def test_zero_epsilon_keeps_every_curved_point(self) -> None:
        x = np.linspace(0.0, 1.0, 2_001)
        sx, _ = simplify_rdp(x, x * x, 0.0)
        self.assertEqual(sx.size, x.size)

    def test_short_input_is_unchanged(self) -> None:
        x = np.asarray([0.0, 1.0])
        y = np.asarray([5.0, 6.0])
        sx, sy = simplify_rdp(x, y, 0.5)
        self.assertEqual(sx.tolist(), [0.0, 1.0])
        self.assertEqual(sy.tolist(), [5.0, 6.0])

    def test_coincident_endpoints_use_point_distance(self) -> None:
        x = np.asarray([0.0, 0.0, 0.0])
        y = np.asarray([0.0, 1.0, 0.0])
        sx, sy = simplify_rdp(x, y, 0.1)
        self.assertEqual(sy.tolist(), [0.0, 1.0, 0.0])

    def test_flat_values_do_not_divide_by_zero(self) -> None:
        x = np.linspace(0.0, 1.0, 50)
        y = np.full_like(x, 3.0)
        sx, sy = simplify_rdp(x, y, 0.001)
        self.assertEqual(sx.size, 2)
        self.assertTrue(np.all(sy == 3.0))


class ReducePointsTests(unittest.TestCase):
    def test_none_mode_passes_arrays_through(self) -> None:
        x = np.linspace(0.0, 1.0, 10)
        y = np.arange(10, dtype=np.float64)
        rx, ry = reduce_points(x, y, "none")
        self.assertIs(rx, x)
        self.assertIs(ry, y)

    def test_unsupported_mode_is_rejected(self) -> None:
        with self.assertRaises(PlotDataError):
            reduce_points(np.zeros(3), np.zeros(3), "median")  # type: ignore[arg-type]

    def test_length_mismatch_is_rejected(self) -> None:
        with self.assertRaises(PlotDataError):
            reduce_points(np.zeros(3), np.zeros(4), "rdp")

    def test_rdp_mode_keeps_endpoints(self) -> None:
        x = np.linspace(0.0, 1.0, 500)
        y = np.sin(x * 20.0)
        rx, ry = reduce_points(x, y, "rdp")
        self.assertEqual(rx[0], 0.0)
        self.assertEqual(rx[-1], 1.0)
        self.assertLess(rx.size, x.size)

    def test_rdp_epsilon_tracks_viewbox_width(self) -> None:
        self.assertAlmostEqual(rdp_epsilon(300), 0.01)
        self.assertAlmostEqual(rdp_epsilon(50), 0.02)
        self.assertAlmostEqual(rdp_epsilon(1000, fluid=True), 0.001)
        with self.assertRaises(ValueError):
            rdp_epsilon(0)


if __name__ == "__main__":
    unittest.main()
