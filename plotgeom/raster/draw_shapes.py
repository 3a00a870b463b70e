from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from plotgeom.raster.draw_lines import draw_polyline
from plotgeom.series import RGBA


def draw_rect_outline(
    dst: np.ndarray,
    x: float,
    y: float,
    width: float,
    height: float,
    color: RGBA,
    *,
    stroke_width: float = 1.0,
    dash: Sequence[float] = (),
) -> None:
    corners = [(x, y), (x + width, y), (x + width, y + height), (x, y + height)]
    draw_polyline(dst, corners, color, width=stroke_width, dash=dash, closed=True)


def draw_ellipse_outline(
    dst: np.ndarray,
    x: float,
    y: float,
    width: float,
    height: float,
    color: RGBA,
    *,
    stroke_width: float = 1.0,
    dash: Sequence[float] = (),
) -> None:
    rx = width / 2.0
    ry = height / 2.0
    cx = x + rx
    cy = y + ry
    # Roughly one vertex per two pixels of circumference.
    steps = max(12, int(math.pi * (rx + ry) / 2.0))
    theta = np.linspace(0.0, 2.0 * math.pi, steps, endpoint=False)
    points = list(zip((cx + rx * np.cos(theta)).tolist(), (cy + ry * np.sin(theta)).tolist()))
    draw_polyline(dst, points, color, width=stroke_width, dash=dash, closed=True)


def draw_polygon_outline(
    dst: np.ndarray,
    points: Sequence[tuple[float, float]],
    color: RGBA,
    *,
    stroke_width: float = 1.0,
    dash: Sequence[float] = (),
) -> None:
    draw_polyline(dst, list(points), color, width=stroke_width, dash=dash, closed=True)
