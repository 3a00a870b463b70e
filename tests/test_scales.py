from __future__ import annotations

import math
import unittest

import numpy as np

from plotgeom.config import Margins, PlotType
from plotgeom.errors import InvalidAxisValueError, InvalidRangeError, MismatchedLengthError, PlotDataError
from plotgeom.scales import (
    AxisScale,
    AxisTransform,
    PlotArea,
    PlotTransform,
    build_plot_area,
    polar_to_cartesian,
    resolve_scales,
)


def _xy(x, y):
    return (np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64))


class ResolveScalesTests(unittest.TestCase):
    def test_linear_autoscale_reproduces_data_extent(self) -> None:
        scales = resolve_scales([_xy([1, 2, 3], [4, -2, 9])], PlotType.LINEAR)
        self.assertEqual(scales.x.bounds, (1.0, 3.0))
        self.assertEqual(scales.y.bounds, (-2.0, 9.0))
        self.assertTrue(scales.x.auto)
        self.assertIsNone(scales.y.log_min)

    def test_autoscale_spans_every_curve(self) -> None:
        scales = resolve_scales([_xy([0, 1], [0, 1]), _xy([-5, 2], [3, 8])], PlotType.LINEAR)
        self.assertEqual(scales.x.bounds, (-5.0, 2.0))
        self.assertEqual(scales.y.bounds, (0.0, 8.0))

    def test_non_finite_values_are_ignored(self) -> None:
        scales = resolve_scales([_xy([0, 1, 2], [1, np.nan, 3])], PlotType.LINEAR)
        self.assertEqual(scales.y.bounds, (1.0, 3.0))

    def test_degenerate_linear_range_is_widened(self) -> None:
        scales = resolve_scales([_xy([0, 1], [5, 5])], PlotType.LINEAR)
        self.assertAlmostEqual(scales.y.vmin, 5.0)
        self.assertAlmostEqual(scales.y.vmax, 5.05)
        scales = resolve_scales([_xy([0, 1], [0, 0])], PlotType.LINEAR)
        self.assertEqual(scales.y.bounds, (0.0, 1.0))

    def test_log_axis_snaps_to_decades(self) -> None:
        scales = resolve_scales([_xy([1, 2], [2, 300])], PlotType.SEMILOGY)
        self.assertEqual(scales.y.bounds, (1.0, 1000.0))
        self.assertAlmostEqual(scales.y.log_min, 0.0)
        self.assertAlmostEqual(scales.y.log_max, 3.0)
        self.assertFalse(scales.x.log)

    def test_degenerate_log_range_is_widened(self) -> None:
        scales = resolve_scales([_xy([1, 2], [10, 10])], PlotType.SEMILOGY)
        self.assertAlmostEqual(scales.y.vmin, 10.0)
        self.assertAlmostEqual(scales.y.vmax, 10.1)

    def test_log_axis_rejects_non_positive_data(self) -> None:
        with self.assertRaises(InvalidAxisValueError):
            resolve_scales([_xy([1, 2], [0, 5])], PlotType.SEMILOGY)
        with self.assertRaises(InvalidAxisValueError):
            resolve_scales([_xy([-1, 2], [1, 5])], PlotType.LOGLOG)

    def test_semilogx_allows_negative_y(self) -> None:
        scales = resolve_scales([_xy([1, 10], [-3, 5])], PlotType.SEMILOGX)
        self.assertEqual(scales.x.bounds, (1.0, 10.0))
        self.assertEqual(scales.y.bounds, (-3.0, 5.0))

    def test_manual_bounds_bypass_autoscale(self) -> None:
        scales = resolve_scales([_xy([1, 2], [1, 2])], PlotType.LINEAR, x_bounds=(0.0, 5.0))
        self.assertEqual(scales.x.bounds, (0.0, 5.0))
        self.assertFalse(scales.x.auto)
        self.assertTrue(scales.y.auto)

    def test_invalid_manual_bounds(self) -> None:
        with self.assertRaises(InvalidRangeError):
            resolve_scales([_xy([1, 2], [1, 2])], PlotType.LINEAR, x_bounds=(5.0, 0.0))
        with self.assertRaises(InvalidRangeError):
            resolve_scales([_xy([1, 2], [1, 2])], PlotType.LINEAR, y_bounds=(1.0, 2.0, 3.0))

    def test_manual_log_bounds_still_validate_data(self) -> None:
        with self.assertRaises(InvalidAxisValueError):
            resolve_scales([_xy([1, 2], [-1, 2])], PlotType.SEMILOGY, y_bounds=(1.0, 10.0))

    def test_bar_plot_pads_x_and_starts_y_at_zero(self) -> None:
        scales = resolve_scales([_xy([1, 2, 3], [1, 4, 2])], PlotType.BAR)
        self.assertEqual(scales.x.bounds, (0.5, 3.5))
        self.assertEqual(scales.y.bounds, (0.0, 4.0))

    def test_single_bar_pads_by_a_quarter(self) -> None:
        scales = resolve_scales([_xy([2], [3])], PlotType.BAR)
        self.assertEqual(scales.x.bounds, (1.75, 2.25))

    def test_bar_plot_rejects_negative_y(self) -> None:
        with self.assertRaises(InvalidAxisValueError):
            resolve_scales([_xy([1, 2], [1, -0.5])], PlotType.BAR)

    def test_polar_uses_radial_extent_for_both_axes(self) -> None:
        scales = resolve_scales([_xy([1, -3, 2], [0, 1, 2])], PlotType.POLAR)
        self.assertEqual(scales.x.bounds, (-3.0, 3.0))
        self.assertEqual(scales.y.bounds, (-3.0, 3.0))

    def test_polar_without_finite_radius_is_rejected(self) -> None:
        with self.assertRaises(PlotDataError):
            resolve_scales([_xy([np.nan, np.inf], [0, 1])], PlotType.POLAR)

    def test_no_curves(self) -> None:
        with self.assertRaises(PlotDataError):
            resolve_scales([], PlotType.LINEAR)

    def test_mismatched_lengths_are_rejected(self) -> None:
        with self.assertRaises(MismatchedLengthError):
            resolve_scales([([1, 2, 3], [1, 2])], PlotType.LINEAR)
        with self.assertRaises(MismatchedLengthError):
            resolve_scales([_xy([0, 1], [0, 1]), _xy([0, 1], [0])], PlotType.POLAR)


class PixelMappingTests(unittest.TestCase):
    def test_default_plot_area(self) -> None:
        area = build_plot_area(800, 600, Margins())
        self.assertEqual((area.x0, area.y0, area.width, area.height), (100.0, 45.0, 664.0, 510.0))
        self.assertEqual(area.right, 764.0)
        self.assertEqual(area.bottom, 555.0)

    def test_tiny_viewport_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            build_plot_area(1, 10, Margins())

    def test_linear_axis_transform(self) -> None:
        t = AxisTransform.for_axis(AxisScale(0.0, 10.0), 100.0, 500.0)
        self.assertAlmostEqual(float(t.to_pixel(0.0)), 100.0)
        self.assertAlmostEqual(float(t.to_pixel(10.0)), 600.0)

    def test_inverted_axis_transform(self) -> None:
        t = AxisTransform.for_axis(AxisScale(0.0, 10.0), 50.0, 400.0, inverted=True)
        self.assertAlmostEqual(float(t.to_pixel(10.0)), 50.0)
        self.assertAlmostEqual(float(t.to_pixel(0.0)), 450.0)

    def test_log_axis_transform(self) -> None:
        t = AxisTransform.for_axis(AxisScale(1.0, 100.0, log=True), 0.0, 200.0)
        self.assertAlmostEqual(float(t.to_pixel(10.0)), 100.0)
        np.testing.assert_allclose(t.to_pixel(np.array([1.0, 100.0])), [0.0, 200.0])

    def test_polar_to_cartesian_convention(self) -> None:
        x, y = polar_to_cartesian(1.0, 0.0)
        self.assertAlmostEqual(float(x), 1.0)
        self.assertAlmostEqual(float(y), 0.0)
        x, y = polar_to_cartesian(1.0, math.pi / 2.0)
        self.assertAlmostEqual(float(x), 0.0)
        self.assertAlmostEqual(float(y), -1.0)

    def test_polar_transform_uses_uniform_scale(self) -> None:
        t = PlotTransform.polar(PlotArea(0.0, 0.0, 200.0, 100.0), 2.0)
        self.assertTrue(t.is_polar)
        self.assertAlmostEqual(t.polar_scale, 25.0)
        px, py = t.map_points(2.0, 0.0)
        self.assertAlmostEqual(float(px), 150.0)
        self.assertAlmostEqual(float(py), 50.0)
        px, py = t.map_points(1.0, math.pi / 2.0)
        self.assertAlmostEqual(float(px), 100.0)
        self.assertAlmostEqual(float(py), 25.0)


if __name__ == "__main__":
    unittest.main()
