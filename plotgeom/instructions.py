from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from plotgeom.series import LINESTYLE_DOT, LINESTYLE_SOLID, RGBA

Point = tuple[float, float]

TAG_BOX = "box"
TAG_GRID = "grid"
TAG_TIC = "tic"
TAG_TIC_LABEL = "tic_label"
TAG_CURVE = "curve"
TAG_MARKER = "marker"
TAG_BAR = "bar"
TAG_TITLE = "title"
TAG_X_LABEL = "x_label"
TAG_Y_LABEL = "y_label"
TAG_ANNOTATION = "annotation"


@dataclass(frozen=True)
class StrokeStyle:
    width: float = 1.0
    dash: tuple[float, ...] = LINESTYLE_SOLID

    @property
    def solid(self) -> bool:
        return len(self.dash) < 2 or all(v == 0 for v in self.dash[1::2])


SOLID_STROKE = StrokeStyle()
GRID_STROKE = StrokeStyle(width=1.0, dash=LINESTYLE_DOT)
MARKER_STROKE = StrokeStyle(width=2.0)


@dataclass(frozen=True)
class DrawLine:
    p1: Point
    p2: Point
    stroke: StrokeStyle
    color: RGBA
    tag: str = TAG_CURVE
    series: Optional[int] = None


@dataclass(frozen=True)
class DrawRect:
    origin: Point
    size: tuple[float, float]
    fill: bool
    color: RGBA
    stroke: StrokeStyle = SOLID_STROKE
    tag: str = TAG_BOX
    series: Optional[int] = None


@dataclass(frozen=True)
class DrawEllipse:
    origin: Point
    size: tuple[float, float]
    color: RGBA
    stroke: StrokeStyle = SOLID_STROKE
    tag: str = TAG_MARKER
    series: Optional[int] = None


@dataclass(frozen=True)
class DrawPolygon:
    points: tuple[Point, ...]
    color: RGBA
    stroke: StrokeStyle = SOLID_STROKE
    tag: str = TAG_MARKER
    series: Optional[int] = None


@dataclass(frozen=True)
class DrawText:
    text: str
    position: Point
    font_size: int
    color: RGBA
    rotation: float = 0.0
    bold: bool = False
    tag: str = TAG_TIC_LABEL
    series: Optional[int] = None


Instruction = Union[DrawLine, DrawRect, DrawEllipse, DrawPolygon, DrawText]
