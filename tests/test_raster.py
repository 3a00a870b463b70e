from __future__ import annotations

from pathlib import Path
import tempfile
import unittest

import numpy as np
from PIL import Image

from plotgeom.instructions import GRID_STROKE, SOLID_STROKE, DrawLine, DrawRect, DrawText
from plotgeom.raster import (
    blend_coverage,
    PillowTextMeasurer,
    draw_instruction,
    draw_line,
    draw_text,
    fill_rect,
    new_canvas,
    render_instructions,
    save_png,
    text_size,
)
from plotgeom.series import BLACK, BLUE, RED, WHITE
from plotgeom.text import MonospaceTextMeasurer, TextMeasurer, fit_font


class CanvasTests(unittest.TestCase):
    def test_new_canvas_and_fill(self) -> None:
        canvas = new_canvas(4, 3, BLUE)
        self.assertEqual(canvas.shape, (3, 4, 4))
        self.assertEqual(tuple(canvas[0, 0]), BLUE)
        fill_rect(canvas, 1.0, 1.0, 2.0, 2.0, RED)
        self.assertEqual(tuple(canvas[1, 1]), RED)
        self.assertEqual(tuple(canvas[2, 2]), RED)
        self.assertEqual(tuple(canvas[0, 0]), BLUE)
        self.assertEqual(tuple(canvas[1, 3]), BLUE)
        with self.assertRaises(ValueError):
            new_canvas(0, 3)

    def test_blend_coverage_is_clipped_and_opaque(self) -> None:
        canvas = new_canvas(3, 3)
        blend_coverage(canvas, -1, -1, np.ones((2, 2), dtype=np.float32), (0, 0, 0, 128))
        self.assertEqual(tuple(canvas[0, 0]), (127, 127, 127, 255))
        self.assertEqual(tuple(canvas[1, 1]), WHITE)
        blend_coverage(canvas, 2, 2, np.full((1, 1), 0.5, dtype=np.float32), RED)
        self.assertEqual(tuple(canvas[2, 2]), (255, 128, 128, 255))

    def test_solid_and_dashed_lines(self) -> None:
        canvas = new_canvas(20, 10)
        draw_line(canvas, (0, 2), (19, 2), BLACK)
        self.assertTrue(np.all(canvas[2, :, :3] == 0))
        draw_line(canvas, (0, 5), (19, 5), RED, dash=(3.0, 6.0))
        self.assertEqual(tuple(canvas[5, 1]), RED)
        self.assertEqual(tuple(canvas[5, 5]), WHITE)
        self.assertEqual(tuple(canvas[5, 9]), RED)

    def test_wide_lines_use_a_square_brush(self) -> None:
        canvas = new_canvas(10, 10)
        draw_line(canvas, (2, 5), (7, 5), BLACK, width=3)
        self.assertEqual(tuple(canvas[4, 4]), BLACK)
        self.assertEqual(tuple(canvas[6, 4]), BLACK)
        self.assertEqual(tuple(canvas[3, 4]), WHITE)


class TextTests(unittest.TestCase):
    def test_draw_text_marks_pixels(self) -> None:
        canvas = new_canvas(80, 40)
        draw_text(canvas, 5, 5, "Hi", BLACK, font_size_px=20)
        self.assertTrue(np.any(canvas[:, :, 0] < 128))

    def test_rotation_must_be_a_quarter_turn(self) -> None:
        canvas = new_canvas(20, 20)
        with self.assertRaises(ValueError):
            draw_text(canvas, 0, 0, "x", BLACK, rotate_deg=45)

    def test_quarter_turn_swaps_size(self) -> None:
        w, h = text_size("label", font_size_px=14)
        self.assertEqual(text_size("label", font_size_px=14, rotate_deg=90), (h, w))
        self.assertEqual(text_size("", font_size_px=14)[0], 0)

    def test_pillow_measurer(self) -> None:
        measurer = PillowTextMeasurer()
        self.assertIsInstance(measurer, TextMeasurer)
        small = measurer.measure("12345", 8)
        large = measurer.measure("12345", 24)
        self.assertLess(small[0], large[0])
        self.assertLess(small[1], large[1])
        with self.assertRaises(ValueError):
            measurer.measure("x", 0)


class FitFontTests(unittest.TestCase):
    def test_monospace_metrics(self) -> None:
        measurer = MonospaceTextMeasurer()
        self.assertEqual(measurer.measure("abcd", 10), (24.0, 12.0))
        self.assertAlmostEqual(measurer.measure("abcd", 10, bold=True)[0], 26.0)

    def test_shrinks_until_it_fits(self) -> None:
        measurer = MonospaceTextMeasurer()
        self.assertEqual(measurer.fit_font("abcd", 20.0, 100.0, 5, start_size=12), 8)
        self.assertEqual(fit_font(measurer, "abcd", 1000.0, 1000.0, 5, start_size=12), 12)

    def test_stops_at_minimum(self) -> None:
        measurer = MonospaceTextMeasurer()
        self.assertEqual(measurer.fit_font("abcd", 1.0, 1.0, 5, start_size=12), 5)
        self.assertEqual(measurer.fit_font("abcd", 1.0, 1.0, 9, start_size=4), 9)
        with self.assertRaises(ValueError):
            fit_font(measurer, "abcd", 10.0, 10.0, 0)


class RenderTests(unittest.TestCase):
    def test_render_instructions_in_order(self) -> None:
        instructions = [
            DrawRect((0.0, 0.0), (10.0, 10.0), True, RED),
            DrawRect((0.0, 0.0), (9.0, 9.0), False, BLACK, SOLID_STROKE),
            DrawLine((0.0, 5.0), (9.0, 5.0), GRID_STROKE, BLUE),
        ]
        rgba = render_instructions(instructions, 12, 12)
        self.assertEqual(rgba.dtype, np.uint8)
        self.assertEqual(tuple(rgba[0, 0]), BLACK)
        self.assertEqual(tuple(rgba[3, 3]), RED)
        self.assertEqual(tuple(rgba[5, 1]), BLUE)
        self.assertEqual(tuple(rgba[11, 11]), WHITE)

    def test_off_quarter_rotation_is_snapped(self) -> None:
        canvas = new_canvas(60, 60)
        with self.assertLogs("plotgeom.raster.render", level="WARNING"):
            draw_instruction(canvas, DrawText("ab", (10.0, 10.0), 12, BLACK, rotation=80.0))

    def test_unknown_instruction(self) -> None:
        with self.assertRaises(TypeError):
            draw_instruction(new_canvas(2, 2), object())  # type: ignore[arg-type]

    def test_save_png(self) -> None:
        rgba = new_canvas(7, 5, RED)
        with tempfile.TemporaryDirectory() as td:
            out = save_png(rgba, Path(td) / "out.png")
            with Image.open(out) as image:
                self.assertEqual(image.size, (7, 5))
                self.assertEqual(image.getpixel((3, 2)), RED)
        with self.assertRaises(ValueError):
            save_png(np.zeros((5, 7, 3), dtype=np.uint8), "unused.png")


if __name__ == "__main__":
    unittest.main()
