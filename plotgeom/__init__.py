from plotgeom.api import hist, plot
from plotgeom.config import AxisConfig, Margins, PlotColors, PlotConfig, PlotType, load_plot_config
from plotgeom.errors import (
    EmptyInputError,
    IndexOutOfRangeError,
    InvalidAxisValueError,
    InvalidRangeError,
    MismatchedLengthError,
    PlotDataError,
    PlotError,
    TooManyAnnotationsError,
    TooManyCurvesError,
)
from plotgeom.figure import HistogramPlot, Plot
from plotgeom.hist import Centers, EvenCount, Histogram, HistogramBuilder, build_histogram
from plotgeom.layout import LayoutEngine, PlotLayout, layout
from plotgeom.scales import AxisScale, resolve_scales
from plotgeom.series import MarkerStyle
from plotgeom.store import CurveStore
from plotgeom.ticks import format_number, plan_linear, plan_log, plan_polar

__all__ = [
    "AxisConfig",
    "AxisScale",
    "Centers",
    "CurveStore",
    "EmptyInputError",
    "EvenCount",
    "Histogram",
    "HistogramBuilder",
    "HistogramPlot",
    "IndexOutOfRangeError",
    "InvalidAxisValueError",
    "InvalidRangeError",
    "LayoutEngine",
    "Margins",
    "MarkerStyle",
    "MismatchedLengthError",
    "Plot",
    "PlotColors",
    "PlotConfig",
    "PlotDataError",
    "PlotError",
    "PlotLayout",
    "PlotType",
    "TooManyAnnotationsError",
    "TooManyCurvesError",
    "build_histogram",
    "format_number",
    "hist",
    "layout",
    "load_plot_config",
    "plan_linear",
    "plan_log",
    "plan_polar",
    "plot",
    "resolve_scales",
]
