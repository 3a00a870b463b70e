from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from typing import Any, Sequence

import numpy as np

from plotgeom.config import Margins, PlotType
from plotgeom.errors import InvalidAxisValueError, InvalidRangeError, MismatchedLengthError, PlotDataError


LOGGER = logging.getLogger(__name__)

DEGENERATE_WIDEN_RATIO = 0.01
SINGLE_BAR_HALF_SPACING = 0.25


@dataclass(frozen=True)
class AxisScale:
    vmin: float
    vmax: float
    auto: bool = True
    log: bool = False
    log_min: float | None = field(default=None, init=False)
    log_max: float | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        if self.log:
            if self.vmin <= 0.0:
                raise InvalidAxisValueError(f"min value <= 0 on logarithmic axis: {self.vmin}")
            object.__setattr__(self, "log_min", math.log10(self.vmin))
            object.__setattr__(self, "log_max", math.log10(self.vmax))

    @property
    def bounds(self) -> tuple[float, float]:
        return (self.vmin, self.vmax)

    @property
    def axis_bounds(self) -> tuple[float, float]:
        """Bounds in axis space: log10 of the bounds on a log axis."""
        if self.log:
            assert self.log_min is not None and self.log_max is not None
            return (self.log_min, self.log_max)
        return (self.vmin, self.vmax)

    def with_bounds(self, vmin: float, vmax: float) -> "AxisScale":
        return AxisScale(vmin=vmin, vmax=vmax, auto=self.auto, log=self.log)


@dataclass(frozen=True)
class ResolvedScales:
    x: AxisScale
    y: AxisScale


def resolve_scales(
    curves: Sequence[Any],
    plot_type: PlotType,
    *,
    x_bounds: Sequence[float] | None = None,
    y_bounds: Sequence[float] | None = None,
) -> ResolvedScales:
    """Compute the (min, max) bounds of both axes for ``curves``.

    ``curves`` holds ``Curve`` objects or ``(x, y)`` array pairs. Manual
    bounds bypass autoscaling on their axis but data are still validated
    against the axis type.
    """
    pairs = [_xy(c) for c in curves]
    if not pairs:
        raise PlotDataError("no curves to scale")
    manual_x = _check_manual(x_bounds, "x")
    manual_y = _check_manual(y_bounds, "y")

    if plot_type.polar:
        return _resolve_polar(pairs, manual_x, manual_y)

    if plot_type.log_x:
        _require_positive(pairs, axis=0, name="x")
    if plot_type.log_y:
        _require_positive(pairs, axis=1, name="y")
    if plot_type.bar:
        ymin_data = min(_finite_min(y) for _, y in pairs)
        if ymin_data < 0.0:
            raise InvalidAxisValueError(f"min y value < 0 in bar plot: {ymin_data}")

    if manual_x is not None:
        x_scale = _manual_axis(manual_x, log=plot_type.log_x, name="x")
    elif plot_type.bar:
        x_scale = _linear_axis(*_bar_x_extent(pairs))
    else:
        x_scale = _auto_axis(pairs, axis=0, log=plot_type.log_x)

    if manual_y is not None:
        y_scale = _manual_axis(manual_y, log=plot_type.log_y, name="y")
    else:
        y_scale = _auto_axis(pairs, axis=1, log=plot_type.log_y)

    if plot_type.bar:
        # Bars always grow from a zero baseline.
        if y_scale.vmax <= 0.0:
            if not y_scale.auto:
                raise InvalidRangeError(f"bar plot y max must be > 0: {y_scale.vmax}")
            y_scale = AxisScale(vmin=0.0, vmax=_widen(0.0, log=False), auto=True)
        else:
            y_scale = AxisScale(vmin=0.0, vmax=y_scale.vmax, auto=y_scale.auto)

    LOGGER.debug("resolved %s scales x=%s y=%s", plot_type.name.lower(), x_scale.bounds, y_scale.bounds)
    return ResolvedScales(x=x_scale, y=y_scale)


def widen_degenerate(vmin: float, vmax: float, *, log: bool = False) -> tuple[float, float]:
    if vmin != vmax:
        return vmin, vmax
    return vmin, _widen(vmin, log=log)


def _widen(value: float, *, log: bool) -> float:
    if log:
        return value * (1.0 + DEGENERATE_WIDEN_RATIO)
    if value == 0.0:
        return 1.0
    return value + abs(value) * DEGENERATE_WIDEN_RATIO


def _auto_axis(pairs: list[tuple[np.ndarray, np.ndarray]], *, axis: int, log: bool) -> AxisScale:
    vmin = min(_finite_min(p[axis]) for p in pairs)
    vmax = max(_finite_max(p[axis]) for p in pairs)
    if log:
        vmin = 10.0 ** math.floor(math.log10(vmin))
        vmax = 10.0 ** math.ceil(math.log10(vmax))
    vmin, vmax = widen_degenerate(vmin, vmax, log=log)
    return AxisScale(vmin=vmin, vmax=vmax, auto=True, log=log)


def _linear_axis(vmin: float, vmax: float) -> AxisScale:
    vmin, vmax = widen_degenerate(vmin, vmax)
    return AxisScale(vmin=vmin, vmax=vmax, auto=True)


def _manual_axis(bounds: tuple[float, float], *, log: bool, name: str) -> AxisScale:
    vmin, vmax = bounds
    if log and vmin <= 0.0:
        raise InvalidAxisValueError(f"min {name} value <= 0 on logarithmic axis: {vmin}")
    return AxisScale(vmin=vmin, vmax=vmax, auto=False, log=log)


def _bar_x_extent(pairs: list[tuple[np.ndarray, np.ndarray]]) -> tuple[float, float]:
    # Bar x values are bin centers; pad by half a bin so end bars stay inside.
    lows: list[float] = []
    highs: list[float] = []
    for x, _ in pairs:
        xs = np.unique(x[np.isfinite(x)])
        if xs.size > 1:
            pad_low = float(xs[1] - xs[0]) / 2.0
            pad_high = float(xs[-1] - xs[-2]) / 2.0
        else:
            pad_low = pad_high = SINGLE_BAR_HALF_SPACING
        lows.append(float(xs[0]) - pad_low)
        highs.append(float(xs[-1]) + pad_high)
    return min(lows), max(highs)


def _resolve_polar(
    pairs: list[tuple[np.ndarray, np.ndarray]],
    manual_x: tuple[float, float] | None,
    manual_y: tuple[float, float] | None,
) -> ResolvedScales:
    manual = manual_x if manual_x is not None else manual_y
    if manual is not None:
        radius = max(abs(manual[0]), abs(manual[1]))
        auto = False
    else:
        radius = max(_finite_max(np.abs(x)) for x, _ in pairs)
        auto = True
    if radius == 0.0:
        radius = 1.0
    scale = AxisScale(vmin=-radius, vmax=radius, auto=auto)
    return ResolvedScales(x=scale, y=scale)


def _require_positive(pairs: list[tuple[np.ndarray, np.ndarray]], *, axis: int, name: str) -> None:
    vmin = min(_finite_min(p[axis]) for p in pairs)
    if vmin <= 0.0:
        raise InvalidAxisValueError(f"min {name} plot value <= 0 in logarithmic plot: {vmin}")


def _check_manual(bounds: Sequence[float] | None, name: str) -> tuple[float, float] | None:
    if bounds is None:
        return None
    if len(bounds) != 2:
        raise InvalidRangeError(f"{name} bounds must have two values")
    vmin, vmax = float(bounds[0]), float(bounds[1])
    if not (math.isfinite(vmin) and math.isfinite(vmax)):
        raise InvalidRangeError(f"{name} bounds must be finite")
    if vmin >= vmax:
        raise InvalidRangeError(f"{name}max must be > {name}min: ({vmin}, {vmax})")
    return vmin, vmax


def _finite_min(values: np.ndarray) -> float:
    finite = values[np.isfinite(values)]
    if finite.size == 0:
        raise PlotDataError("series contains no finite points")
    return float(np.min(finite))


def _finite_max(values: np.ndarray) -> float:
    finite = values[np.isfinite(values)]
    if finite.size == 0:
        raise PlotDataError("series contains no finite points")
    return float(np.max(finite))


def _xy(curve: Any) -> tuple[np.ndarray, np.ndarray]:
    if hasattr(curve, "x") and hasattr(curve, "y"):
        x, y = curve.x, curve.y
    else:
        x, y = curve
    x_arr = np.asarray(x, dtype=np.float64)
    y_arr = np.asarray(y, dtype=np.float64)
    if x_arr.shape != y_arr.shape:
        raise MismatchedLengthError(f"x and y length mismatch: {x_arr.size} != {y_arr.size}")
    return x_arr, y_arr


@dataclass(frozen=True)
class PlotArea:
    x0: float
    y0: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x0 + self.width

    @property
    def bottom(self) -> float:
        return self.y0 + self.height

    @property
    def center(self) -> tuple[float, float]:
        return (self.x0 + self.width / 2.0, self.y0 + self.height / 2.0)


def build_plot_area(width: int, height: int, margins: Margins) -> PlotArea:
    if width <= 1 or height <= 1:
        raise ValueError("plot viewport width/height must be > 1")
    return PlotArea(
        x0=float(_round_half_up(width * margins.left)),
        y0=float(_round_half_up(height * margins.top)),
        width=float(_round_half_up(width * (1.0 - margins.left - margins.right))),
        height=float(_round_half_up(height * (1.0 - margins.top - margins.bottom))),
    )


@dataclass(frozen=True)
class AxisTransform:
    """Linear map from axis space onto a pixel span.

    ``inverted`` axes measure from ``vmax`` so larger values land nearer
    ``pixel_start`` (pixel y grows downward while data y grows upward).
    """

    vmin: float
    vmax: float
    pixel_start: float
    scale: float
    log: bool = False
    inverted: bool = False

    @classmethod
    def for_axis(cls, axis: AxisScale, pixel_start: float, pixel_extent: float, *, inverted: bool = False) -> "AxisTransform":
        vmin, vmax = axis.axis_bounds
        span = vmax - vmin
        scale = pixel_extent / span if abs(span) > 0 else 1.0
        return cls(vmin=vmin, vmax=vmax, pixel_start=pixel_start, scale=scale, log=axis.log, inverted=inverted)

    def to_axis(self, values: np.ndarray | float) -> np.ndarray:
        arr = np.asarray(values, dtype=np.float64)
        if not self.log:
            return arr
        with np.errstate(divide="ignore", invalid="ignore"):
            return np.log10(arr)

    def axis_to_pixel(self, axis_values: np.ndarray | float) -> np.ndarray:
        arr = np.asarray(axis_values, dtype=np.float64)
        if self.inverted:
            return -(arr - self.vmax) * self.scale + self.pixel_start
        return (arr - self.vmin) * self.scale + self.pixel_start

    def to_pixel(self, values: np.ndarray | float) -> np.ndarray:
        return self.axis_to_pixel(self.to_axis(values))


def polar_to_cartesian(r: np.ndarray | float, theta: np.ndarray | float) -> tuple[np.ndarray, np.ndarray]:
    """Map (r, theta) with theta in radians to (r cos(-theta), r sin(-theta))."""
    r_arr = np.asarray(r, dtype=np.float64)
    t_arr = np.asarray(theta, dtype=np.float64)
    return r_arr * np.cos(-t_arr), r_arr * np.sin(-t_arr)


@dataclass(frozen=True)
class PlotTransform:
    x: AxisTransform | None = None
    y: AxisTransform | None = None
    polar_center: tuple[float, float] | None = None
    polar_scale: float = 1.0

    @classmethod
    def cartesian(cls, area: PlotArea, x_scale: AxisScale, y_scale: AxisScale) -> "PlotTransform":
        return cls(
            x=AxisTransform.for_axis(x_scale, area.x0, area.width),
            y=AxisTransform.for_axis(y_scale, area.y0, area.height, inverted=True),
        )

    @classmethod
    def polar(cls, area: PlotArea, radius: float) -> "PlotTransform":
        scale = min(area.width, area.height) / (2.0 * radius) if radius > 0 else 1.0
        return cls(polar_center=area.center, polar_scale=scale)

    @property
    def is_polar(self) -> bool:
        return self.polar_center is not None

    def map_points(self, x: np.ndarray | float, y: np.ndarray | float) -> tuple[np.ndarray, np.ndarray]:
        if self.polar_center is not None:
            cx, cy = self.polar_center
            px, py = polar_to_cartesian(x, y)
            return cx + px * self.polar_scale, cy + py * self.polar_scale
        assert self.x is not None and self.y is not None
        return self.x.to_pixel(x), self.y.to_pixel(y)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
