from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np

from plotgeom.errors import MismatchedLengthError

RGBA = tuple[int, int, int, int]

BLACK: RGBA = (0, 0, 0, 255)
WHITE: RGBA = (255, 255, 255, 255)
GRAY: RGBA = (128, 128, 128, 255)
BLUE: RGBA = (0, 0, 255, 255)
RED: RGBA = (255, 0, 0, 255)
GREEN: RGBA = (0, 255, 0, 255)
ORANGE: RGBA = (255, 200, 0, 255)
PINK: RGBA = (255, 175, 175, 255)
CYAN: RGBA = (0, 255, 255, 255)
YELLOW: RGBA = (255, 255, 0, 255)

NAMED_COLORS: dict[str, RGBA] = {
    "black": BLACK,
    "white": WHITE,
    "gray": GRAY,
    "grey": GRAY,
    "blue": BLUE,
    "red": RED,
    "green": GREEN,
    "orange": ORANGE,
    "pink": PINK,
    "cyan": CYAN,
    "yellow": YELLOW,
}

# Dash patterns as (on, off) pixel lengths; an off length of 0 is a solid line.
LINESTYLE_SOLID: tuple[float, float] = (6.0, 0.0)
LINESTYLE_DOT: tuple[float, float] = (3.0, 6.0)
LINESTYLE_LONGDASH: tuple[float, float] = (16.0, 6.0)
LINESTYLE_SHORTDASH: tuple[float, float] = (8.0, 6.0)

LINE_STYLES: tuple[tuple[float, float], ...] = (
    LINESTYLE_SOLID,
    LINESTYLE_DOT,
    LINESTYLE_LONGDASH,
    LINESTYLE_SHORTDASH,
)
LINE_COLORS: tuple[RGBA, ...] = (BLUE, RED, BLACK, ORANGE, GREEN, PINK, CYAN)
FILL_COLORS: tuple[RGBA, ...] = (CYAN, GREEN, RED, YELLOW, BLUE, PINK, ORANGE)
MARKER_COLORS: tuple[RGBA, ...] = LINE_COLORS


class MarkerStyle(IntEnum):
    SQUARE = 1
    CIRCLE = 2
    TRIANGLE = 3
    DIAMOND = 4
    DOWN_TRIANGLE = 5

    @classmethod
    def parse(cls, value: "MarkerStyle | int | str") -> "MarkerStyle":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper().replace("-", "_").replace(" ", "_")
            if key == "DOWNTRIANGLE":
                key = "DOWN_TRIANGLE"
            try:
                return cls[key]
            except KeyError as exc:
                raise ValueError(f"unknown marker style: {value!r}") from exc
        try:
            return cls(int(value))
        except ValueError as exc:
            raise ValueError(f"unknown marker style: {value!r}") from exc


MARKER_STYLES: tuple[MarkerStyle, ...] = tuple(MarkerStyle)


@dataclass(frozen=True)
class CurveStyle:
    line_on: bool = True
    marker_on: bool = False
    line_style: tuple[float, ...] = LINESTYLE_SOLID
    line_width: float = 1.0
    line_color: RGBA = BLUE
    fill_color: RGBA = CYAN
    marker_style: MarkerStyle = MarkerStyle.SQUARE
    marker_color: RGBA = BLUE

    def __post_init__(self) -> None:
        if self.line_width <= 0:
            raise ValueError("line_width must be > 0")
        if len(self.line_style) < 2 or any(v < 0 for v in self.line_style):
            raise ValueError("line_style must hold at least two non-negative lengths")


def default_style(index: int) -> CurveStyle:
    return CurveStyle(
        line_style=LINE_STYLES[index % len(LINE_STYLES)],
        line_color=LINE_COLORS[index % len(LINE_COLORS)],
        fill_color=FILL_COLORS[index % len(FILL_COLORS)],
        marker_style=MARKER_STYLES[index % len(MARKER_STYLES)],
        marker_color=MARKER_COLORS[index % len(MARKER_COLORS)],
    )


@dataclass(frozen=True, eq=False)
class Curve:
    x: np.ndarray
    y: np.ndarray
    style: CurveStyle = field(default_factory=CurveStyle)

    def __post_init__(self) -> None:
        # Curves are shared with layout passes; own and freeze the buffers.
        x = np.array(self.x, dtype=np.float64)
        y = np.array(self.y, dtype=np.float64)
        if x.shape != y.shape:
            raise MismatchedLengthError(f"x and y length mismatch: {x.size} != {y.size}")
        x.setflags(write=False)
        y.setflags(write=False)
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)

    def __len__(self) -> int:
        return int(self.x.size)

    @property
    def finite_mask(self) -> np.ndarray:
        return np.isfinite(self.x) & np.isfinite(self.y)


@dataclass(frozen=True)
class Annotation:
    text: str
    x: float
    y: float
    color: RGBA = BLACK
