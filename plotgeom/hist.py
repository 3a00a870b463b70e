from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, Any, Sequence, Union

import numpy as np

from plotgeom.adapters import coerce_1d_numeric
from plotgeom.errors import EmptyInputError, PlotDataError

if TYPE_CHECKING:
    from plotgeom.store import CurveHandle, CurveStore


LOGGER = logging.getLogger(__name__)

DEFAULT_BINS = 10


@dataclass(frozen=True)
class EvenCount:
    n: int = DEFAULT_BINS

    def __post_init__(self) -> None:
        if int(self.n) != self.n or self.n < 1:
            raise ValueError(f"bin count must be a positive integer: {self.n!r}")


@dataclass(frozen=True)
class Centers:
    values: tuple[float, ...]

    def __post_init__(self) -> None:
        values = tuple(float(v) for v in self.values)
        if not values:
            raise PlotDataError("bin centers must not be empty")
        arr = np.asarray(values, dtype=np.float64)
        if not np.all(np.isfinite(arr)):
            raise PlotDataError("bin centers must be finite")
        if np.any(np.diff(arr) < 0):
            raise PlotDataError("bin centers must be sorted ascending")
        object.__setattr__(self, "values", values)


BinSpec = Union[int, EvenCount, Centers]


@dataclass(frozen=True, eq=False)
class Histogram:
    centers: np.ndarray
    counts: np.ndarray
    bin_width: float | None
    boundaries: np.ndarray | None
    data_min: float
    data_max: float

    @property
    def n_bins(self) -> int:
        return int(self.centers.size)

    @property
    def total(self) -> int:
        return int(self.counts.sum())

    def mode(self) -> tuple[float, int]:
        """Center and count of the fullest bin; ties go to the lowest bin."""
        index = int(np.argmax(self.counts))
        return float(self.centers[index]), int(self.counts[index])

    def add_to(self, store: "CurveStore") -> "CurveHandle":
        return store.add_curve(self.centers, self.counts.astype(np.float64))


def build_histogram(samples: Any, bins: BinSpec = DEFAULT_BINS) -> Histogram:
    data = coerce_1d_numeric(samples, label="samples")
    if data.size == 0:
        raise EmptyInputError("cannot build a histogram from an empty sample set")
    if not np.all(np.isfinite(data)):
        raise PlotDataError("histogram samples must be finite")

    spec = as_bin_spec(bins)
    data_min = float(np.min(data))
    data_max = float(np.max(data))
    if isinstance(spec, Centers):
        return _centers_histogram(data, spec, data_min, data_max)
    return _even_histogram(data, spec.n, data_min, data_max)


class HistogramBuilder:
    def __init__(self, bins: BinSpec = DEFAULT_BINS) -> None:
        self.bins = as_bin_spec(bins)

    def build(self, samples: Any) -> Histogram:
        return build_histogram(samples, self.bins)


def _even_histogram(data: np.ndarray, n: int, data_min: float, data_max: float) -> Histogram:
    width = (data_max - data_min) / n
    centers = data_min + (np.arange(n, dtype=np.float64) + 0.5) * width
    if width > 0:
        index = np.floor((data - data_min) / width).astype(np.int64)
        # The maximum sample lands exactly on the upper edge.
        index = np.clip(index, 0, n - 1)
    else:
        LOGGER.warning("all %d samples equal %s; placing them in bin 0", data.size, data_min)
        index = np.zeros(data.size, dtype=np.int64)
    counts = np.bincount(index, minlength=n).astype(np.int64)
    return Histogram(
        centers=centers,
        counts=counts,
        bin_width=float(width),
        boundaries=None,
        data_min=data_min,
        data_max=data_max,
    )


def _centers_histogram(data: np.ndarray, spec: Centers, data_min: float, data_max: float) -> Histogram:
    centers = np.asarray(spec.values, dtype=np.float64)
    n = centers.size
    boundaries = (centers[:-1] + centers[1:]) / 2.0
    if n == 1:
        index = np.zeros(data.size, dtype=np.int64)
    else:
        # boundaries[j] < s <= boundaries[j + 1] selects bin j + 1.
        index = np.searchsorted(boundaries, data, side="left").astype(np.int64)
    counts = np.bincount(index, minlength=n).astype(np.int64)
    return Histogram(
        centers=centers,
        counts=counts,
        bin_width=None,
        boundaries=boundaries,
        data_min=data_min,
        data_max=data_max,
    )


def as_bin_spec(bins: BinSpec | Sequence[float]) -> EvenCount | Centers:
    if isinstance(bins, (EvenCount, Centers)):
        return bins
    if isinstance(bins, (int, np.integer)) and not isinstance(bins, bool):
        return EvenCount(int(bins))
    if isinstance(bins, (Sequence, np.ndarray)) and not isinstance(bins, (str, bytes)):
        return Centers(tuple(bins))
    raise ValueError(f"unsupported bin specification: {bins!r}")
