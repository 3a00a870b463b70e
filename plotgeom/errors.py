from __future__ import annotations


class PlotError(Exception):
    """Base class for every error raised by plotgeom."""


class PlotDataError(PlotError, ValueError):
    pass


class MismatchedLengthError(PlotDataError):
    pass


class InvalidAxisValueError(PlotDataError):
    """A value cannot be shown on its axis (<= 0 on a log axis, < 0 on a bar plot's y axis)."""


class InvalidRangeError(PlotDataError):
    pass


class EmptyInputError(PlotDataError):
    pass


class TooManyCurvesError(PlotError):
    pass


class TooManyAnnotationsError(PlotError):
    pass


class IndexOutOfRangeError(PlotError, IndexError):
    pass
