from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from plotgeom.raster.canvas import draw_pixel
from plotgeom.series import RGBA


def draw_line(
    dst: np.ndarray,
    p1: tuple[float, float],
    p2: tuple[float, float],
    color: RGBA,
    *,
    width: float = 1.0,
    dash: Sequence[float] = (),
) -> None:
    x0, y0 = _to_int(p1)
    x1, y1 = _to_int(p2)
    pattern = _dash_pattern(dash)
    brush = max(1, int(round(width)))

    dx = abs(x1 - x0)
    sx = 1 if x0 < x1 else -1
    dy = -abs(y1 - y0)
    sy = 1 if y0 < y1 else -1
    err = dx + dy
    x, y = x0, y0

    while True:
        if pattern is None or _dash_on(math.hypot(x - x0, y - y0), pattern):
            _draw_square_brush(dst, x, y, color=color, width=brush)
        if x == x1 and y == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x += sx
        if e2 <= dx:
            err += dx
            y += sy


def draw_polyline(
    dst: np.ndarray,
    points: Sequence[tuple[float, float]],
    color: RGBA,
    *,
    width: float = 1.0,
    dash: Sequence[float] = (),
    closed: bool = False,
) -> None:
    if len(points) < 2:
        return
    pairs = list(zip(points[:-1], points[1:]))
    if closed:
        pairs.append((points[-1], points[0]))
    for a, b in pairs:
        draw_line(dst, a, b, color, width=width, dash=dash)


def _dash_pattern(dash: Sequence[float]) -> tuple[float, ...] | None:
    if len(dash) < 2 or all(v == 0 for v in dash[1::2]):
        return None
    if sum(dash) <= 0:
        return None
    return tuple(float(v) for v in dash)


def _dash_on(distance: float, pattern: tuple[float, ...]) -> bool:
    phase = distance % sum(pattern)
    for i, length in enumerate(pattern):
        if phase < length:
            return i % 2 == 0
        phase -= length
    return False


def _draw_square_brush(dst: np.ndarray, x: int, y: int, color: RGBA, width: int) -> None:
    radius = max(0, width // 2)
    for yy in range(y - radius, y + radius + 1):
        for xx in range(x - radius, x + radius + 1):
            draw_pixel(dst, xx, yy, color)


def _to_int(p: tuple[float, float]) -> tuple[int, int]:
    return int(math.floor(p[0] + 0.5)), int(math.floor(p[1] + 0.5))
