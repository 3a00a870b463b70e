from __future__ import annotations

from pathlib import Path
import tempfile
import unittest

import numpy as np
from PIL import Image

import plotgeom
from plotgeom.config import PlotType
from plotgeom.errors import EmptyInputError, IndexOutOfRangeError, InvalidAxisValueError, PlotDataError
from plotgeom.instructions import TAG_BAR, TAG_GRID, TAG_TITLE
from plotgeom.text import MonospaceTextMeasurer


class PlotTests(unittest.TestCase):
    def test_api_plot_builds_a_curve(self) -> None:
        p = plotgeom.plot([0, 1, 2], [1, 4, 9], title="squares", measurer=MonospaceTextMeasurer())
        self.assertEqual(p.store.total_curves, 1)
        self.assertEqual(p.config.title, "squares")
        self.assertEqual(p.y_scale().bounds, (1.0, 9.0))

    def test_api_plot_rejects_y_without_x(self) -> None:
        with self.assertRaises(ValueError):
            plotgeom.plot(y=[1, 2])

    def test_setters_chain(self) -> None:
        p = plotgeom.plot(measurer=MonospaceTextMeasurer())
        p.add_curve([1, 2, 3], [1, 2, 3])
        out = p.set_title("t").set_x_label("x").set_y_label("y").set_grid(x=False, y=False).set_tic_marks(x=False)
        self.assertIs(out, p)
        self.assertFalse(p.axis("x").grid)
        self.assertFalse(p.axis("y").grid)
        self.assertFalse(p.axis("x").tic_marks)
        self.assertTrue(p.axis("y").tic_marks)
        self.assertEqual(p.layout().tagged(TAG_GRID), ())
        with self.assertRaises(ValueError):
            p.axis("z")

    def test_manual_and_auto_scale(self) -> None:
        p = plotgeom.plot([0, 1], [0, 1], measurer=MonospaceTextMeasurer())
        p.set_x_scale(0.0, 7.5)
        self.assertEqual(p.x_scale().bounds, (0.0, 8.0))
        p.set_auto_scale()
        self.assertEqual(p.x_scale().bounds, (0.0, 1.0))
        self.assertTrue(p.x_scale().auto)

    def test_manual_tics(self) -> None:
        p = plotgeom.plot([0, 1], [0, 1], measurer=MonospaceTextMeasurer())
        p.set_x_tics([0.0, 0.25, 1.0])
        self.assertEqual(p.layout().x_tics.labels, ["0", "0.25", "1"])
        p.set_auto_tics()
        self.assertEqual(len(p.layout().x_tics), 11)

    def test_plot_type_changes(self) -> None:
        p = plotgeom.plot([1, 2], [1, 100], measurer=MonospaceTextMeasurer())
        self.assertIs(p.set_plot_type("loglog").plot_type, PlotType.LOGLOG)
        self.assertTrue(p.layout().y_scale.log)
        with self.assertRaises(IndexOutOfRangeError):
            p.set_plot_type(9)

    def test_layout_is_cached_until_something_changes(self) -> None:
        p = plotgeom.plot([0, 1], [0, 1], measurer=MonospaceTextMeasurer())
        first = p.layout()
        self.assertIs(p.layout(), first)
        self.assertFalse(p.store.changed)
        p.set_title("changed")
        second = p.layout()
        self.assertIsNot(second, first)
        self.assertEqual(len(second.tagged(TAG_TITLE)), 1)
        p.curve(0).line_color("red")
        self.assertIsNot(p.layout(), second)
        p.resize(400, 300)
        self.assertEqual(p.layout().area.width, 332.0)

    def test_failed_layout_keeps_previous_result(self) -> None:
        p = plotgeom.plot([0, 1], [0, 1], measurer=MonospaceTextMeasurer())
        good = p.layout()
        p.set_plot_type(PlotType.SEMILOGY)
        with self.assertRaises(InvalidAxisValueError):
            p.layout()
        self.assertIs(p.last_layout, good)
        p.set_plot_type(PlotType.LINEAR)
        self.assertIs(p.layout(), good)

    def test_empty_plot_cannot_be_laid_out(self) -> None:
        p = plotgeom.plot(measurer=MonospaceTextMeasurer())
        with self.assertRaises(PlotDataError):
            p.layout()
        p.add_curve([0, 1], [0, 1])
        p.remove_all()
        with self.assertRaises(PlotDataError):
            p.layout()

    def test_invalid_viewport(self) -> None:
        with self.assertRaises(ValueError):
            plotgeom.Plot(width=1, height=100)
        p = plotgeom.plot()
        with self.assertRaises(ValueError):
            p.resize(100, 0)

    def test_margins_and_colors(self) -> None:
        p = plotgeom.plot([0, 1], [0, 1], measurer=MonospaceTextMeasurer())
        p.set_margins(left=0.25).set_colors(background="black", grid="#102030")
        self.assertEqual(p.layout().area.x0, 200.0)
        self.assertEqual(p.config.colors.grid, (16, 32, 48, 255))
        with self.assertRaises(ValueError):
            p.set_colors(grid="plaid")

    def test_save_png(self) -> None:
        p = plotgeom.plot([0, 1, 2], [2, 0, 1], title="png", width=160, height=120)
        p.add_annotation("mid", 1.0, 1.0)
        with tempfile.TemporaryDirectory() as td:
            out = p.save_png(Path(td) / "plot.png")
            with Image.open(out) as image:
                self.assertEqual(image.size, (160, 120))
        rgba = p.to_rgba()
        self.assertEqual(rgba.shape, (120, 160, 4))
        self.assertTrue(np.any(rgba[:, :, 2] > rgba[:, :, 0]))


class HistogramPlotTests(unittest.TestCase):
    def test_hist_bins_samples(self) -> None:
        h = plotgeom.hist(np.arange(100), 10, title="counts", measurer=MonospaceTextMeasurer())
        self.assertIs(h.plot_type, PlotType.BAR)
        np.testing.assert_array_equal(h.bins(), [10] * 10)
        self.assertAlmostEqual(h.mode()[0], 4.95)
        self.assertEqual(len(h.layout().tagged(TAG_BAR)), 20)
        self.assertEqual(h.y_scale().vmin, 0.0)

    def test_rebinning(self) -> None:
        h = plotgeom.hist(np.arange(100), measurer=MonospaceTextMeasurer())
        h.set_n_bins(5)
        np.testing.assert_array_equal(h.bins(), [20] * 5)
        h.set_bin_centers([10.0, 50.0, 90.0])
        np.testing.assert_array_equal(h.bin_centers(), [10.0, 50.0, 90.0])
        self.assertEqual(int(h.bins().sum()), 100)
        np.testing.assert_array_equal(h.store.get(0).x, [10.0, 50.0, 90.0])

    def test_bad_update_keeps_previous_histogram(self) -> None:
        h = plotgeom.hist([1.0, 2.0, 3.0], 3, measurer=MonospaceTextMeasurer())
        with self.assertRaises(EmptyInputError):
            h.set_data([])
        with self.assertRaises(PlotDataError):
            h.set_bin_centers([3.0, 1.0])
        with self.assertRaises(ValueError):
            h.set_n_bins(0)
        np.testing.assert_array_equal(h.bins(), [1, 1, 1])
        self.assertEqual(h.store.total_curves, 1)

    def test_histogram_without_samples(self) -> None:
        h = plotgeom.hist(measurer=MonospaceTextMeasurer())
        with self.assertRaises(PlotDataError):
            h.histogram
        h.set_n_bins(2)
        h.set_data([0.0, 1.0, 1.0])
        np.testing.assert_array_equal(h.bins(), [1, 2])


if __name__ == "__main__":
    unittest.main()
