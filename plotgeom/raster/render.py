from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

import numpy as np
from PIL import Image

from plotgeom.instructions import DrawEllipse, DrawLine, DrawPolygon, DrawRect, DrawText, Instruction
from plotgeom.raster.canvas import fill_rect, new_canvas
from plotgeom.raster.draw_lines import draw_line
from plotgeom.raster.draw_shapes import draw_ellipse_outline, draw_polygon_outline, draw_rect_outline
from plotgeom.raster.draw_text import DEFAULT_FONT_FAMILY, draw_text
from plotgeom.series import RGBA, WHITE


LOGGER = logging.getLogger(__name__)


def render_instructions(
    instructions: Iterable[Instruction],
    width: int,
    height: int,
    background: RGBA = WHITE,
    *,
    font_family: str = DEFAULT_FONT_FAMILY,
) -> np.ndarray:
    """Rasterise draw instructions, in order, onto a fresh uint8 (H, W, 4) canvas."""
    canvas = new_canvas(width, height, background)
    for ins in instructions:
        draw_instruction(canvas, ins, font_family=font_family)
    return canvas


def draw_instruction(canvas: np.ndarray, ins: Instruction, *, font_family: str = DEFAULT_FONT_FAMILY) -> None:
    if isinstance(ins, DrawLine):
        draw_line(canvas, ins.p1, ins.p2, ins.color, width=ins.stroke.width, dash=ins.stroke.dash)
    elif isinstance(ins, DrawRect):
        (x, y), (w, h) = ins.origin, ins.size
        if ins.fill:
            fill_rect(canvas, x, y, w, h, ins.color)
        else:
            draw_rect_outline(canvas, x, y, w, h, ins.color, stroke_width=ins.stroke.width, dash=ins.stroke.dash)
    elif isinstance(ins, DrawEllipse):
        (x, y), (w, h) = ins.origin, ins.size
        draw_ellipse_outline(canvas, x, y, w, h, ins.color, stroke_width=ins.stroke.width, dash=ins.stroke.dash)
    elif isinstance(ins, DrawPolygon):
        draw_polygon_outline(canvas, ins.points, ins.color, stroke_width=ins.stroke.width, dash=ins.stroke.dash)
    elif isinstance(ins, DrawText):
        rotation = int(round(ins.rotation))
        if rotation % 90 != 0:
            LOGGER.warning("text %r rotated %s degrees; snapping to a quarter turn", ins.text, ins.rotation)
            rotation = 90 * int(round(ins.rotation / 90.0))
        draw_text(
            canvas,
            int(round(ins.position[0])),
            int(round(ins.position[1])),
            ins.text,
            ins.color,
            font_family=font_family,
            font_size_px=ins.font_size,
            bold=ins.bold,
            rotate_deg=rotation,
        )
    else:
        raise TypeError(f"unsupported draw instruction: {type(ins).__name__}")


def save_png(rgba: np.ndarray, path: str | Path) -> Path:
    if rgba.ndim != 3 or rgba.shape[2] != 4 or rgba.dtype != np.uint8:
        raise ValueError("expected a uint8 (H, W, 4) RGBA array")
    out = Path(path)
    Image.fromarray(rgba).save(out, format="PNG")
    return out
