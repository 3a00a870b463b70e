from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Iterable, Sequence

import numpy as np

from plotgeom.config import AxisConfig, PlotConfig, PlotType
from plotgeom.errors import PlotDataError
from plotgeom.instructions import (
    GRID_STROKE,
    MARKER_STROKE,
    SOLID_STROKE,
    TAG_ANNOTATION,
    TAG_BAR,
    TAG_BOX,
    TAG_CURVE,
    TAG_GRID,
    TAG_MARKER,
    TAG_TIC,
    TAG_TITLE,
    TAG_X_LABEL,
    TAG_Y_LABEL,
    DrawEllipse,
    DrawLine,
    DrawPolygon,
    DrawRect,
    DrawText,
    Instruction,
    StrokeStyle,
)
from plotgeom.scales import AxisScale, PlotArea, PlotTransform, build_plot_area, resolve_scales
from plotgeom.series import BLACK, RGBA, Annotation, Curve, MarkerStyle
from plotgeom.store import CurveStore
from plotgeom.text import MonospaceTextMeasurer, TextMeasurer
from plotgeom.ticks import (
    POLAR_SPOKES,
    TicSet,
    plan_linear,
    plan_log,
    plan_manual,
    plan_polar,
    polar_angle_tics,
)


LOGGER = logging.getLogger(__name__)

TIC_MARK_FRACTION = 0.025
TIC_LABEL_FONT = (12, 8)
TITLE_FONT = (18, 12)
AXIS_LABEL_FONT = (18, 12)
ANNOTATION_FONT = (12, 8)
ANNOTATION_MAX_HEIGHT = 26.0
TIC_LABEL_GAP = 6.0
RING_LABEL_ANGLE = 3.0 * math.pi / 8.0
MARKER_HALF = 3.0


@dataclass(frozen=True)
class PlotLayout:
    instructions: tuple[Instruction, ...]
    area: PlotArea
    x_scale: AxisScale
    y_scale: AxisScale
    x_tics: TicSet
    y_tics: TicSet
    plot_type: PlotType

    def __len__(self) -> int:
        return len(self.instructions)

    def tagged(self, tag: str, series: int | None = None) -> tuple[Instruction, ...]:
        return tuple(
            ins for ins in self.instructions if ins.tag == tag and (series is None or ins.series == series)
        )


class LayoutEngine:
    """Turns a plot configuration and its curves into draw instructions.

    All six plot types share one pipeline; the plot type only selects the
    tic source, the pixel mapping and whether bars, a polar grid or a box
    are emitted.
    """

    def __init__(self, measurer: TextMeasurer | None = None) -> None:
        self.measurer: TextMeasurer = measurer or MonospaceTextMeasurer()

    def layout(
        self,
        config: PlotConfig,
        store: CurveStore | Sequence[Curve],
        width: int,
        height: int,
    ) -> PlotLayout:
        area = build_plot_area(width, height, config.margins)
        curves, annotations = _unpack(store)
        if not curves:
            raise PlotDataError("no curves to plot")

        plot_type = config.plot_type
        scales = resolve_scales(
            curves,
            plot_type,
            x_bounds=config.x_axis.manual_bounds,
            y_bounds=config.y_axis.manual_bounds,
        )
        LOGGER.debug("layout %s plot with %d curve(s) in %dx%d", plot_type.name.lower(), len(curves), width, height)

        out: list[Instruction] = []
        if plot_type.polar:
            x_scale, y_scale, x_tics, y_tics, transform = self._polar_frame(config, area, scales.x, height, out)
        else:
            x_tics = _axis_tics(scales.x, config.x_axis, log=plot_type.log_x)
            y_tics = _axis_tics(scales.y, config.y_axis, log=plot_type.log_y)
            x_scale = _displayed(scales.x, x_tics, config.x_axis)
            y_scale = _displayed(scales.y, y_tics, config.y_axis)
            transform = PlotTransform.cartesian(area, x_scale, y_scale)
            self._cartesian_frame(config, area, transform, x_tics, y_tics, height, out)

        for index, curve in enumerate(curves):
            if plot_type.bar:
                _emit_bars(out, curve, index, len(curves), x_scale, transform)
            else:
                _emit_curve(out, curve, index, transform)

        self._emit_titles(config, area, out)
        self._emit_annotations(annotations, area, transform, out)
        return PlotLayout(
            instructions=tuple(out),
            area=area,
            x_scale=x_scale,
            y_scale=y_scale,
            x_tics=x_tics,
            y_tics=y_tics,
            plot_type=plot_type,
        )

    def _cartesian_frame(
        self,
        config: PlotConfig,
        area: PlotArea,
        transform: PlotTransform,
        x_tics: TicSet,
        y_tics: TicSet,
        height: int,
        out: list[Instruction],
    ) -> None:
        colors = config.colors
        assert transform.x is not None and transform.y is not None
        x_px = transform.x.axis_to_pixel(x_tics.positions)
        y_px = transform.y.axis_to_pixel(y_tics.positions)

        out.append(DrawRect((area.x0, area.y0), (area.width, area.height), False, colors.box, SOLID_STROKE, TAG_BOX))

        if config.x_axis.grid:
            for px in x_px[1:-1].tolist():
                out.append(DrawLine((px, area.y0), (px, area.bottom), GRID_STROKE, colors.grid, TAG_GRID))
        if config.y_axis.grid:
            for py in y_px[1:-1].tolist():
                out.append(DrawLine((area.x0, py), (area.right, py), GRID_STROKE, colors.grid, TAG_GRID))

        if config.x_axis.tic_marks:
            length = TIC_MARK_FRACTION * area.height
            for px in x_px[1:-1].tolist():
                out.append(DrawLine((px, area.y0), (px, area.y0 + length), SOLID_STROKE, colors.tic, TAG_TIC))
                out.append(DrawLine((px, area.bottom), (px, area.bottom - length), SOLID_STROKE, colors.tic, TAG_TIC))
        if config.y_axis.tic_marks:
            length = TIC_MARK_FRACTION * area.width
            for py in y_px[1:-1].tolist():
                out.append(DrawLine((area.x0, py), (area.x0 + length, py), SOLID_STROKE, colors.tic, TAG_TIC))
                out.append(DrawLine((area.right, py), (area.right - length, py), SOLID_STROKE, colors.tic, TAG_TIC))

        max_height = (height - area.height - area.y0) / 2.0
        size = self._fit_labels(x_tics.labels, area.width / (1.2 * len(x_tics)), max_height)
        for tic, px in zip(x_tics, x_px.tolist()):
            if not tic.label:
                continue
            w, _ = self.measurer.measure(tic.label, size)
            out.append(DrawText(tic.label, (px - w / 2.0, area.bottom + TIC_LABEL_GAP), size, colors.label))

        size = self._fit_labels(y_tics.labels, 0.5 * area.x0, max_height)
        for tic, py in zip(y_tics, y_px.tolist()):
            if not tic.label:
                continue
            w, h = self.measurer.measure(tic.label, size)
            out.append(DrawText(tic.label, (area.x0 - w - TIC_LABEL_GAP, py - h / 2.0), size, colors.label))

    def _polar_frame(
        self,
        config: PlotConfig,
        area: PlotArea,
        resolved: AxisScale,
        height: int,
        out: list[Instruction],
    ) -> tuple[AxisScale, AxisScale, TicSet, TicSet, PlotTransform]:
        colors = config.colors
        if config.y_axis.manual_tics is not None:
            rings = plan_manual(config.y_axis.manual_tics)
            radius = resolved.vmax
        else:
            rings = plan_polar(resolved.vmax)
            radius = rings.upper
        spokes = polar_angle_tics()
        scale = AxisScale(vmin=-radius, vmax=radius, auto=resolved.auto)
        transform = PlotTransform.polar(area, radius)
        cx, cy = area.center
        s = transform.polar_scale
        rs = radius * s

        out.append(DrawEllipse((cx - rs, cy - rs), (2.0 * rs, 2.0 * rs), colors.box, SOLID_STROKE, TAG_BOX))

        angles = [i * 2.0 * math.pi / POLAR_SPOKES for i in range(POLAR_SPOKES)]
        if config.x_axis.grid:
            for theta in angles:
                end = (cx + rs * math.cos(theta), cy - rs * math.sin(theta))
                out.append(DrawLine((cx, cy), end, GRID_STROKE, colors.grid, TAG_GRID))
        if config.y_axis.grid:
            for tic in rings.interior:
                r = tic.value * s
                out.append(DrawEllipse((cx - r, cy - r), (2.0 * r, 2.0 * r), colors.grid, GRID_STROKE, TAG_GRID))

        max_height = (height - area.height - area.y0) / 2.0
        size = self._fit_labels(rings.labels, 0.5 * area.x0, max_height)
        for tic, theta in zip(spokes, angles):
            w, h = self.measurer.measure(tic.label, size)
            px = cx + (rs + 4.0 + w / 2.0) * math.cos(theta) - w / 2.0
            py = cy - (rs + 4.0 + h / 2.0) * math.sin(theta) - h / 2.0
            out.append(DrawText(tic.label, (px, py), size, colors.label))
        for tic in rings.tics[1:]:
            if not tic.label:
                continue
            _, h = self.measurer.measure(tic.label, size)
            r = tic.value * s
            px = cx + r * math.cos(RING_LABEL_ANGLE) - 6.0
            py = cy - r * math.sin(RING_LABEL_ANGLE) - 4.0 - h
            out.append(DrawText(tic.label, (px, py), size, colors.label))
        return scale, scale, spokes, rings, transform

    def _fit_labels(self, labels: Iterable[str], max_width: float, max_height: float) -> int:
        start, minimum = TIC_LABEL_FONT
        shown = [label for label in labels if label]
        if not shown:
            return start
        widest = max(shown, key=lambda label: self.measurer.measure(label, start)[0])
        return self.measurer.fit_font(widest, max_width, max_height, minimum, start_size=start)

    def _emit_titles(self, config: PlotConfig, area: PlotArea, out: list[Instruction]) -> None:
        color = config.colors.label
        max_height = area.y0 - 15.0
        if config.title is not None:
            start, minimum = TITLE_FONT
            size = self.measurer.fit_font(config.title, 0.75 * area.width, max_height, minimum, start_size=start, bold=True)
            w, h = self.measurer.measure(config.title, size, True)
            position = (area.x0 + area.width / 2.0 - w / 2.0, area.y0 / 2.0 - h / 2.0)
            out.append(DrawText(config.title, position, size, color, bold=True, tag=TAG_TITLE))
        if config.x_label is not None:
            start, minimum = AXIS_LABEL_FONT
            size = self.measurer.fit_font(config.x_label, area.width, max_height, minimum, start_size=start)
            w, h = self.measurer.measure(config.x_label, size)
            position = (area.x0 + area.width / 2.0 - w / 2.0, area.bottom + area.y0 / 2.0 - h / 2.0)
            out.append(DrawText(config.x_label, position, size, color, tag=TAG_X_LABEL))
        if config.y_label is not None:
            start, minimum = AXIS_LABEL_FONT
            size = self.measurer.fit_font(config.y_label, area.height, max_height, minimum, start_size=start)
            w, h = self.measurer.measure(config.y_label, size)
            # Rotated a quarter turn: the box is h wide and w tall.
            position = (0.05 * h, area.y0 + area.height / 2.0 - w / 2.0)
            out.append(DrawText(config.y_label, position, size, color, rotation=90.0, tag=TAG_Y_LABEL))

    def _emit_annotations(
        self,
        annotations: Sequence[Annotation],
        area: PlotArea,
        transform: PlotTransform,
        out: list[Instruction],
    ) -> None:
        start, minimum = ANNOTATION_FONT
        for annotation in annotations:
            px, py = transform.map_points(annotation.x, annotation.y)
            px, py = float(px), float(py)
            if not (math.isfinite(px) and math.isfinite(py)):
                LOGGER.warning("skipping annotation %r: anchor (%s, %s) has no pixel position", annotation.text, annotation.x, annotation.y)
                continue
            size = self.measurer.fit_font(annotation.text, area.right - px, ANNOTATION_MAX_HEIGHT, minimum, start_size=start)
            out.append(DrawText(annotation.text, (px, py), size, annotation.color, tag=TAG_ANNOTATION))


def layout(
    config: PlotConfig,
    store: CurveStore | Sequence[Curve],
    width: int,
    height: int,
    measurer: TextMeasurer | None = None,
) -> PlotLayout:
    return LayoutEngine(measurer).layout(config, store, width, height)


def marker_instruction(style: MarkerStyle, px: float, py: float, color: RGBA, series: int | None = None) -> Instruction:
    if style is MarkerStyle.SQUARE:
        return DrawRect((px - MARKER_HALF, py - MARKER_HALF), (6.0, 6.0), False, color, MARKER_STROKE, TAG_MARKER, series)
    if style is MarkerStyle.CIRCLE:
        return DrawEllipse((px - MARKER_HALF, py - MARKER_HALF), (6.0, 6.0), color, MARKER_STROKE, TAG_MARKER, series)
    if style is MarkerStyle.TRIANGLE:
        points = ((px - 3.0, py + 2.0), (px + 3.0, py + 2.0), (px, py - 3.2))
    elif style is MarkerStyle.DIAMOND:
        points = ((px - 4.0, py), (px, py + 4.0), (px + 4.0, py), (px, py - 4.0))
    else:
        points = ((px - 3.0, py - 2.2), (px + 3.0, py - 2.2), (px, py + 3.0))
    return DrawPolygon(points, color, MARKER_STROKE, TAG_MARKER, series)


def _emit_curve(out: list[Instruction], curve: Curve, index: int, transform: PlotTransform) -> None:
    style = curve.style
    px, py = transform.map_points(curve.x, curve.y)
    ok = np.isfinite(px) & np.isfinite(py)
    if style.line_on and px.size > 1:
        stroke = StrokeStyle(width=style.line_width, dash=style.line_style)
        keep = ok[:-1] & ok[1:]
        for j in np.flatnonzero(keep).tolist():
            out.append(
                DrawLine(
                    (float(px[j]), float(py[j])),
                    (float(px[j + 1]), float(py[j + 1])),
                    stroke,
                    style.line_color,
                    TAG_CURVE,
                    index,
                )
            )
    if style.marker_on:
        for j in np.flatnonzero(ok).tolist():
            out.append(marker_instruction(style.marker_style, float(px[j]), float(py[j]), style.marker_color, index))


def bar_extents(x: np.ndarray, index: int, total: int, x_range: float) -> list[tuple[float, float]]:
    """Left edge and width of every bar of curve ``index`` in data units."""
    n = int(x.size)
    out: list[tuple[float, float]] = []
    for j in range(n):
        if n == 1:
            dx = x_range
            left = x[j] - dx / 2.0
        elif j == 0:
            dx = x[1] - x[0]
            left = x[0] - dx / 2.0
        elif j == n - 1:
            dx = x[j] - x[j - 1]
            left = x[j] - dx / 2.0
        else:
            dx = (x[j + 1] - x[j - 1]) / 2.0
            left = (x[j] + x[j - 1]) / 2.0
        width = dx
        if total > 1:
            ds = dx / (total + 1)
            left = x[j] - total * ds / 2.0 + index * ds
            width = ds
        out.append((float(left), float(width)))
    return out


def _emit_bars(
    out: list[Instruction],
    curve: Curve,
    index: int,
    total: int,
    x_scale: AxisScale,
    transform: PlotTransform,
) -> None:
    assert transform.x is not None and transform.y is not None
    base = float(transform.y.to_pixel(0.0))
    extents = bar_extents(curve.x, index, total, x_scale.vmax - x_scale.vmin)
    for (left, width), xv, yv in zip(extents, curve.x.tolist(), curve.y.tolist()):
        if not (math.isfinite(left) and math.isfinite(width) and math.isfinite(xv) and math.isfinite(yv)):
            continue
        x0 = float(transform.x.to_pixel(left))
        x1 = float(transform.x.to_pixel(left + width))
        top = float(transform.y.to_pixel(yv))
        origin = (min(x0, x1), top)
        size = (abs(x1 - x0), base - top)
        out.append(DrawRect(origin, size, True, curve.style.fill_color, SOLID_STROKE, TAG_BAR, index))
        out.append(DrawRect(origin, size, False, BLACK, SOLID_STROKE, TAG_BAR, index))


def _axis_tics(scale: AxisScale, axis: AxisConfig, *, log: bool) -> TicSet:
    if axis.manual_tics is not None:
        return plan_manual(axis.manual_tics, log=log)
    if log:
        return plan_log(scale.vmin, scale.vmax)
    return plan_linear(scale.vmin, scale.vmax)


def _displayed(scale: AxisScale, tics: TicSet, axis: AxisConfig) -> AxisScale:
    if axis.manual_tics is not None:
        return scale
    return AxisScale(vmin=tics.lower, vmax=tics.upper, auto=scale.auto, log=scale.log)


def _unpack(store: CurveStore | Sequence[Curve]) -> tuple[tuple[Curve, ...], tuple[Annotation, ...]]:
    if isinstance(store, CurveStore):
        return store.curves, store.annotations
    return tuple(store), ()
