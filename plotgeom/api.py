from __future__ import annotations

from typing import Any

from plotgeom.config import PlotConfig, PlotType
from plotgeom.figure import HistogramPlot, Plot
from plotgeom.hist import DEFAULT_BINS, BinSpec
from plotgeom.text import TextMeasurer


def plot(
    x: Any = None,
    y: Any = None,
    *,
    plot_type: PlotType | int | str = PlotType.LINEAR,
    title: str | None = None,
    x_label: str | None = None,
    y_label: str | None = None,
    width: int = 800,
    height: int = 600,
    measurer: TextMeasurer | None = None,
) -> Plot:
    """Create a plot, optionally seeded with one curve."""
    config = PlotConfig(plot_type=PlotType.parse(plot_type), title=title, x_label=x_label, y_label=y_label)
    out = Plot(width=width, height=height, config=config, measurer=measurer)
    if x is not None:
        out.add_curve(x, y)
    elif y is not None:
        raise ValueError("y given without x")
    return out


def hist(
    samples: Any = None,
    bins: BinSpec = DEFAULT_BINS,
    *,
    title: str | None = None,
    width: int = 800,
    height: int = 600,
    measurer: TextMeasurer | None = None,
) -> HistogramPlot:
    out = HistogramPlot(samples, bins, width=width, height=height, measurer=measurer)
    if title is not None:
        out.set_title(title)
    return out
