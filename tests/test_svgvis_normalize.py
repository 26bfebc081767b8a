from __future__ import annotations

import datetime as dt
from decimal import Decimal
import unittest

import numpy as np

from svgvis_plot import DataPoint, PlotDataError
from svgvis_plot.adapters.normalize import normalize_domain, to_series


class NormalizeDomainTests(unittest.TestCase):
    def test_canonical_unit_domain_is_unchanged(self) -> None:
        x = np.linspace(0.0, 1.0, 11)
        y = np.asarray([3.0, 1.0, 4.0, 1.0, 5.0, 9.0, 2.0, 6.0, 5.0, 3.0, 5.0])
        normalized = normalize_domain(to_series(y, x=x))
        np.testing.assert_allclose(normalized.x, x)
        self.assertTrue(np.array_equal(normalized.y, y))

    def test_zero_width_domain_spreads_points_evenly(self) -> None:
        series = to_series([10.0, 20.0, 30.0, 40.0, 50.0], x=[7.0, 7.0, 7.0, 7.0, 7.0])
        normalized = normalize_domain(series)
        self.assertEqual(normalized.x.tolist(), [0.0, 0.25, 0.5, 0.75, 1.0])
        self.assertEqual(normalized.y.tolist(), [10.0, 20.0, 30.0, 40.0, 50.0])

    def test_degenerate_width_is_absolute(self) -> None:
        tiny = to_series([1.0, 2.0, 3.0], x=[0.0, 0.0002, 0.0005])
        self.assertEqual(normalize_domain(tiny).x.tolist(), [0.0, 0.5, 1.0])

        narrow = to_series([1.0, 2.0, 3.0], x=[0.0, 0.0005, 0.002])
        np.testing.assert_allclose(normalize_domain(narrow).x, [0.0, 0.25, 1.0])

        epoch = to_series([1.0, 2.0, 3.0], x=[1.7e12, 1.7e12 + 0.25, 1.7e12 + 1.0])
        np.testing.assert_allclose(normalize_domain(epoch).x, [0.0, 0.25, 1.0])

    def test_fixed_domain_allows_overflow(self) -> None:
        series = to_series([1.0, 2.0, 3.0], x=[0.0, 5.0, 15.0])
        normalized = normalize_domain(series, (0.0, 10.0))
        np.testing.assert_allclose(normalized.x, [0.0, 0.5, 1.5])

    def test_auto_fit_uses_first_and_last_sample(self) -> None:
        series = to_series([1.0, 2.0, 3.0], x=[100.0, 150.0, 300.0])
        normalized = normalize_domain(series)
        np.testing.assert_allclose(normalized.x, [0.0, 0.25, 1.0])

    def test_single_point_lands_on_origin(self) -> None:
        normalized = normalize_domain(to_series([42.0]))
        self.assertEqual(normalized.x.tolist(), [0.0])

    def test_empty_series_is_passed_through(self) -> None:
        normalized = normalize_domain(to_series([]))
        self.assertEqual(normalized.size, 0)


class ToSeriesTests(unittest.TestCase):
    def test_length_mismatch_is_rejected(self) -> None:
        with self.assertRaises(PlotDataError):
            to_series([1.0, 2.0, 3.0], x=[0.0, 1.0])

    def test_missing_x_uses_sample_index(self) -> None:
        series = to_series([5.0, 6.0, 7.0])
        self.assertEqual(series.x.tolist(), [0.0, 1.0, 2.0])

    def test_points_accept_datapoints_and_pairs(self) -> None:
        series = to_series(points=[DataPoint(0.0, 1.0), (2.0, 3.0)])
        self.assertEqual(series.x.tolist(), [0.0, 2.0])
        self.assertEqual(series.y.tolist(), [1.0, 3.0])

    def test_points_and_values_are_exclusive(self) -> None:
        with self.assertRaises(PlotDataError):
            to_series([1.0], points=[(0.0, 1.0)])

    def test_decimal_and_none_values_are_masked(self) -> None:
        series = to_series([Decimal("1.5"), None, Decimal("3.5")])
        self.assertEqual(series.y[0], 1.5)
        self.assertTrue(np.array_equal(series.mask, np.asarray([True, False, True])))
        fx, fy = series.finite()
        self.assertEqual(fy.tolist(), [1.5, 3.5])

    def test_non_numeric_value_is_rejected(self) -> None:
        with self.assertRaises(PlotDataError):
            to_series(["a", "b"])

    def test_datetime_positions_become_epoch_millis(self) -> None:
        t0 = dt.datetime(2024, 1, 1, tzinfo=dt.timezone.utc)
        series = to_series([1.0, 2.0], x=[t0, t0 + dt.timedelta(seconds=1)])
        self.assertEqual(series.x[1] - series.x[0], 1000.0)
        self.assertEqual(series.x[0], t0.timestamp() * 1000.0)

    def test_numpy_datetime64_positions(self) -> None:
        x = np.asarray(["2024-01-01T00:00:00", "2024-01-01T00:00:02"], dtype="datetime64[s]")
        series = to_series([1.0, 2.0], x=x)
        self.assertEqual(series.x[1] - series.x[0], 2000.0)

    def test_naive_datapoint_instant_is_utc(self) -> None:
        point = DataPoint.of(dt.datetime(1970, 1, 1, 0, 0, 1), 4.0)
        self.assertEqual(point.x, 1000.0)
        self.assertEqual(point.y, 4.0)

    def test_two_dimensional_input_is_rejected(self) -> None:
        with self.assertRaises(PlotDataError):
            to_series(np.zeros((2, 2)))

    def test_pandas_dataframe_single_numeric_column(self) -> None:
        try:
            import pandas as pd
        except Exception:
            self.skipTest("pandas is not installed")

        df = pd.DataFrame({"value": [1, 2, 3]})
        series = to_series(df)
        self.assertEqual(series.y.tolist(), [1.0, 2.0, 3.0])

    def test_pandas_columns_by_name(self) -> None:
        try:
            import pandas as pd
        except Exception:
            self.skipTest("pandas is not installed")

        df = pd.DataFrame({"t": [0.0, 10.0, 20.0], "temp": [1.5, 2.5, 3.5]})
        series = to_series("temp", x="t", data=df)
        self.assertEqual(series.x.tolist(), [0.0, 10.0, 20.0])
        self.assertEqual(series.y.tolist(), [1.5, 2.5, 3.5])

    def test_torch_tensor_values(self) -> None:
        try:
            import torch
        except Exception:
            self.skipTest("torch is not installed")

        series = to_series(torch.tensor([1, 2, 3], dtype=torch.int64))
        self.assertEqual(series.y.dtype, np.float64)
        self.assertEqual(series.y.tolist(), [1.0, 2.0, 3.0])


if __name__ == "__main__":
    unittest.main()
