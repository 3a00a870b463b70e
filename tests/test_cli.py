from __future__ import annotations

from contextlib import redirect_stderr, redirect_stdout
import io
from pathlib import Path
import tempfile
import unittest

import numpy as np
from PIL import Image

from plotgeom.cli import build_job, main, read_samples
from plotgeom.config import PlotType
from plotgeom.errors import PlotDataError
from plotgeom.figure import HistogramPlot
from plotgeom.series import MarkerStyle

JOB = """
plot_type = "linear"
title = "Job"
width = 320
height = 240

[y_axis]
grid = false

[[curves]]
x = [0, 1, 2, 3]
y = [1, 3, 2, 4]
markers = true
marker_style = "circle"
line_color = "#ff0000"

[[annotations]]
text = "peak"
x = 3
y = 4
"""


class BuildJobTests(unittest.TestCase):
    def test_curves_and_annotations(self) -> None:
        plot = build_job(
            {
                "title": "Job",
                "curves": [{"x": [0, 1], "y": [1, 2], "line": False, "markers": True, "marker_style": "diamond"}],
                "annotations": [{"text": "a", "x": 0, "y": 1, "color": "red"}],
            },
            width=300,
            height=200,
        )
        self.assertEqual((plot.width, plot.height), (300, 200))
        self.assertEqual(plot.config.title, "Job")
        self.assertFalse(plot.store.line_state(0))
        self.assertEqual(plot.store.marker_style(0), MarkerStyle.DIAMOND)
        self.assertEqual(plot.store.annotation_text(0), "a")

    def test_histogram_job(self) -> None:
        plot = build_job({"title": "H", "histogram": {"samples": [1, 2, 3, 4], "bins": 2}})
        self.assertIsInstance(plot, HistogramPlot)
        self.assertIs(plot.plot_type, PlotType.BAR)
        self.assertEqual(plot.config.title, "H")
        np.testing.assert_array_equal(plot.bins(), [2, 2])

    def test_invalid_jobs(self) -> None:
        with self.assertRaises(ValueError):
            build_job({"curves": [{"y": [1, 2]}]})
        with self.assertRaises(ValueError):
            build_job({"curves": [{"x": [1, 2], "colour": "red"}]})
        with self.assertRaises(ValueError):
            build_job({"annotations": [{"text": "a", "x": 1}]})
        with self.assertRaises(ValueError):
            build_job({"histogram": {"samples": [1], "bins": 2, "centers": [1]}})
        with self.assertRaises(ValueError):
            build_job({"legend": True})


class CliTests(unittest.TestCase):
    def test_render(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            job = Path(td) / "job.toml"
            job.write_text(JOB, encoding="utf-8")
            out = Path(td) / "job.png"
            stdout = io.StringIO()
            with redirect_stdout(stdout):
                code = main(["render", str(job), "-o", str(out)])
            self.assertEqual(code, 0)
            self.assertIn("320x240", stdout.getvalue())
            with Image.open(out) as image:
                self.assertEqual(image.size, (320, 240))

    def test_render_size_override(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            job = Path(td) / "job.toml"
            job.write_text(JOB, encoding="utf-8")
            out = Path(td) / "job.png"
            with redirect_stdout(io.StringIO()):
                code = main(["render", str(job), "-o", str(out), "--width", "200", "--height", "100"])
            self.assertEqual(code, 0)
            with Image.open(out) as image:
                self.assertEqual(image.size, (200, 100))

    def test_hist_even_bins(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            samples = Path(td) / "samples.txt"
            samples.write_text("1, 2, 3\n4 5\n", encoding="utf-8")
            stdout = io.StringIO()
            with redirect_stdout(stdout):
                code = main(["hist", str(samples), "--bins", "2"])
        self.assertEqual(code, 0)
        self.assertEqual(stdout.getvalue().splitlines(), ["2\t2", "4\t3"])

    def test_hist_centers_and_png(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            samples = Path(td) / "samples.txt"
            samples.write_text("1 2 3 4 5", encoding="utf-8")
            out = Path(td) / "hist.png"
            stdout = io.StringIO()
            with redirect_stdout(stdout):
                code = main(["hist", str(samples), "--centers", "1,4", "-o", str(out), "--width", "160", "--height", "120"])
            self.assertEqual(code, 0)
            self.assertTrue(out.exists())
        lines = stdout.getvalue().splitlines()
        self.assertEqual(lines[:2], ["1\t2", "4\t3"])
        self.assertIn("160x120", lines[2])

    def test_errors_return_exit_code_two(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            samples = Path(td) / "samples.txt"
            samples.write_text("1 two 3", encoding="utf-8")
            stderr = io.StringIO()
            with redirect_stderr(stderr):
                code = main(["hist", str(samples)])
            self.assertEqual(code, 2)
            self.assertIn("plotgeom: error:", stderr.getvalue())
            with redirect_stderr(io.StringIO()):
                self.assertEqual(main(["render", str(Path(td) / "missing.toml"), "-o", "x.png"]), 2)

    def test_zero_bins_is_an_error(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            samples = Path(td) / "samples.txt"
            samples.write_text("1 2 3", encoding="utf-8")
            stdout = io.StringIO()
            stderr = io.StringIO()
            with redirect_stdout(stdout), redirect_stderr(stderr):
                code = main(["hist", str(samples), "--bins", "0"])
        self.assertEqual(code, 2)
        self.assertIn("plotgeom: error:", stderr.getvalue())
        self.assertEqual(stdout.getvalue(), "")

    def test_read_samples(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "s.txt"
            path.write_text("0.5,1.5\n\n2.5", encoding="utf-8")
            np.testing.assert_array_equal(read_samples(path), [0.5, 1.5, 2.5])
            path.write_text("nope", encoding="utf-8")
            with self.assertRaises(PlotDataError):
                read_samples(path)


if __name__ == "__main__":
    unittest.main()
