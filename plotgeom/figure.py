from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
from pathlib import Path
from typing import Any, Sequence

import numpy as np

from plotgeom.config import AxisConfig, PlotConfig, PlotType, parse_color
from plotgeom.errors import PlotDataError
from plotgeom.hist import DEFAULT_BINS, BinSpec, Centers, EvenCount, Histogram, as_bin_spec, build_histogram
from plotgeom.layout import LayoutEngine, PlotLayout
from plotgeom.raster.draw_text import DEFAULT_FONT_FAMILY, PillowTextMeasurer
from plotgeom.raster.render import render_instructions, save_png
from plotgeom.scales import AxisScale
from plotgeom.store import AnnotationHandle, CurveHandle, CurveStore
from plotgeom.text import TextMeasurer


LOGGER = logging.getLogger(__name__)


@dataclass
class Plot:
    width: int = 800
    height: int = 600
    config: PlotConfig = field(default_factory=PlotConfig)
    store: CurveStore = field(default_factory=CurveStore)
    measurer: TextMeasurer | None = None
    font_family: str = DEFAULT_FONT_FAMILY

    def __post_init__(self) -> None:
        if self.width <= 1 or self.height <= 1:
            raise ValueError("plot width/height must be > 1")
        if self.measurer is None:
            self.measurer = PillowTextMeasurer(self.font_family)
        self._engine = LayoutEngine(self.measurer)
        self._layout_key: tuple[Any, ...] | None = None
        self._layout: PlotLayout | None = None

    def add_curve(self, x: Any, y: Any = None) -> CurveHandle:
        return self.store.add_curve(x, y)

    def set_values(self, x: Any, y: Any = None, *, curve: int | None = None) -> CurveHandle:
        return self.store.set_values(x, y, curve=curve)

    def curve(self, index: int) -> CurveHandle:
        return self.store.curve(index)

    def add_annotation(self, text: str, x: float, y: float, color: Any = (0, 0, 0, 255)) -> AnnotationHandle:
        return self.store.add_annotation(text, x, y, color)

    def remove_all(self) -> "Plot":
        self.store.remove_all()
        return self

    @property
    def plot_type(self) -> PlotType:
        return self.config.plot_type

    def set_plot_type(self, plot_type: PlotType | int | str) -> "Plot":
        self.config = replace(self.config, plot_type=PlotType.parse(plot_type))
        return self

    def set_title(self, title: str | None) -> "Plot":
        self.config = replace(self.config, title=title)
        return self

    def set_x_label(self, label: str | None) -> "Plot":
        self.config = replace(self.config, x_label=label)
        return self

    def set_y_label(self, label: str | None) -> "Plot":
        self.config = replace(self.config, y_label=label)
        return self

    def set_x_scale(self, vmin: float, vmax: float) -> "Plot":
        self.config = self.config.with_axis("x", manual_bounds=(vmin, vmax))
        return self

    def set_y_scale(self, vmin: float, vmax: float) -> "Plot":
        self.config = self.config.with_axis("y", manual_bounds=(vmin, vmax))
        return self

    def set_auto_x_scale(self) -> "Plot":
        self.config = self.config.with_axis("x", manual_bounds=None)
        return self

    def set_auto_y_scale(self) -> "Plot":
        self.config = self.config.with_axis("y", manual_bounds=None)
        return self

    def set_auto_scale(self) -> "Plot":
        return self.set_auto_x_scale().set_auto_y_scale()

    def set_x_tics(self, values: Sequence[float] | None) -> "Plot":
        self.config = self.config.with_axis("x", manual_tics=None if values is None else tuple(values))
        return self

    def set_y_tics(self, values: Sequence[float] | None) -> "Plot":
        self.config = self.config.with_axis("y", manual_tics=None if values is None else tuple(values))
        return self

    def set_auto_tics(self) -> "Plot":
        return self.set_x_tics(None).set_y_tics(None)

    def set_grid(self, *, x: bool | None = None, y: bool | None = None) -> "Plot":
        if x is not None:
            self.config = self.config.with_axis("x", grid=bool(x))
        if y is not None:
            self.config = self.config.with_axis("y", grid=bool(y))
        return self

    def set_tic_marks(self, *, x: bool | None = None, y: bool | None = None) -> "Plot":
        if x is not None:
            self.config = self.config.with_axis("x", tic_marks=bool(x))
        if y is not None:
            self.config = self.config.with_axis("y", tic_marks=bool(y))
        return self

    def set_margins(self, **margins: float) -> "Plot":
        self.config = replace(self.config, margins=replace(self.config.margins, **margins))
        return self

    def set_colors(self, **colors: Any) -> "Plot":
        parsed = {key: parse_color(value) for key, value in colors.items()}
        self.config = replace(self.config, colors=replace(self.config.colors, **parsed))
        return self

    def axis(self, name: str) -> AxisConfig:
        if name == "x":
            return self.config.x_axis
        if name == "y":
            return self.config.y_axis
        raise ValueError(f"unknown axis: {name!r}")

    def resize(self, width: int, height: int) -> "Plot":
        if width <= 1 or height <= 1:
            raise ValueError("plot width/height must be > 1")
        self.width = int(width)
        self.height = int(height)
        return self

    def layout(self) -> PlotLayout:
        """Lay out the plot, reusing the previous result while nothing changed.

        A failing layout raises and leaves the previously cached layout in place.
        """
        key = (self.store.revision, self.config, self.width, self.height)
        if self._layout is not None and key == self._layout_key:
            return self._layout
        result = self._engine.layout(self.config, self.store, self.width, self.height)
        self._layout = result
        self._layout_key = key
        self.store.mark_clean()
        return result

    @property
    def last_layout(self) -> PlotLayout | None:
        return self._layout

    def x_scale(self) -> AxisScale:
        return self.layout().x_scale

    def y_scale(self) -> AxisScale:
        return self.layout().y_scale

    def to_rgba(self) -> np.ndarray:
        result = self.layout()
        return render_instructions(
            result.instructions,
            self.width,
            self.height,
            self.config.colors.background,
            font_family=self.font_family,
        )

    def save_png(self, path: str | Path) -> Path:
        out = save_png(self.to_rgba(), path)
        LOGGER.info("wrote %dx%d plot to %s", self.width, self.height, out)
        return out


class HistogramPlot(Plot):
    """Bar plot of the histogram of one sample set."""

    def __init__(self, samples: Any = None, bins: BinSpec = DEFAULT_BINS, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.set_plot_type(PlotType.BAR)
        self._bins: EvenCount | Centers = as_bin_spec(bins)
        self._samples: Any = None
        self._histogram: Histogram | None = None
        if samples is not None:
            self.set_data(samples)

    @property
    def histogram(self) -> Histogram:
        if self._histogram is None:
            raise PlotDataError("histogram has no data")
        return self._histogram

    def set_data(self, samples: Any) -> "HistogramPlot":
        self._apply(samples, self._bins)
        return self

    def set_n_bins(self, n: int) -> "HistogramPlot":
        self._rebin(EvenCount(n))
        return self

    def set_bin_centers(self, centers: Sequence[float]) -> "HistogramPlot":
        self._rebin(Centers(tuple(centers)))
        return self

    def bin_centers(self) -> np.ndarray:
        return self.histogram.centers.copy()

    def bins(self) -> np.ndarray:
        return self.histogram.counts.copy()

    def mode(self) -> tuple[float, int]:
        return self.histogram.mode()

    def _rebin(self, spec: EvenCount | Centers) -> None:
        if self._samples is None:
            self._bins = spec
        else:
            self._apply(self._samples, spec)

    def _apply(self, samples: Any, spec: EvenCount | Centers) -> None:
        hist = build_histogram(samples, spec)
        self.store.set_values(hist.centers, hist.counts.astype(np.float64), curve=0)
        self._samples = samples
        self._bins = spec
        self._histogram = hist
        LOGGER.debug("histogram of %d samples into %d bins", hist.total, hist.n_bins)
