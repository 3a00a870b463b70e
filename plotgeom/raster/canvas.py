from __future__ import annotations

import numpy as np

from plotgeom.series import RGBA, WHITE


def new_canvas(width: int, height: int, color: RGBA = WHITE) -> np.ndarray:
    if width <= 0 or height <= 0:
        raise ValueError("canvas width/height must be > 0")
    canvas = np.empty((height, width, 4), dtype=np.uint8)
    canvas[:, :] = np.asarray(color, dtype=np.uint8)
    return canvas


def draw_pixel(dst: np.ndarray, x: int, y: int, color: RGBA) -> None:
    if 0 <= y < dst.shape[0] and 0 <= x < dst.shape[1]:
        blend_coverage(dst, x, y, np.ones((1, 1), dtype=np.float32), color)


def fill_rect(dst: np.ndarray, x: float, y: float, width: float, height: float, color: RGBA) -> None:
    """Blend ``color`` over every pixel whose center lies inside the rectangle."""
    xa = int(np.ceil(x - 0.5))
    ya = int(np.ceil(y - 0.5))
    xb = int(np.ceil(x + width - 0.5))
    yb = int(np.ceil(y + height - 0.5))
    if xa >= xb or ya >= yb:
        return
    blend_coverage(dst, xa, ya, np.ones((yb - ya, xb - xa), dtype=np.float32), color)


def blend_coverage(dst: np.ndarray, x: int, y: int, coverage: np.ndarray, color: RGBA) -> None:
    """Composite ``color`` over ``dst`` weighted by ``coverage`` in [0, 1].

    ``coverage`` is placed with its top-left corner at (x, y) and clipped to
    the canvas. The canvas stays opaque.
    """
    h, w = coverage.shape
    x0, y0 = max(0, x), max(0, y)
    x1, y1 = min(dst.shape[1], x + w), min(dst.shape[0], y + h)
    if x1 <= x0 or y1 <= y0:
        return
    alpha = coverage[y0 - y : y1 - y, x0 - x : x1 - x] * (color[3] / 255.0)
    if not np.any(alpha > 0):
        return
    region = dst[y0:y1, x0:x1]
    src = np.asarray(color[:3], dtype=np.float32)
    under = region[:, :, :3].astype(np.float32)
    mixed = src * alpha[:, :, None] + under * (1.0 - alpha[:, :, None])
    region[:, :, :3] = np.clip(np.round(mixed), 0, 255).astype(np.uint8)
    region[:, :, 3] = 255
