from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import Any

import numpy as np

from plotgeom.errors import MismatchedLengthError, PlotDataError


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]


def normalize_xy(x: Any, y: Any = None) -> tuple[np.ndarray, np.ndarray]:
    """Coerce curve input into two equal-length float64 arrays.

    ``normalize_xy(y)`` plots ``y`` against its index and
    ``normalize_xy(c)`` with complex ``c`` plots the imaginary part against
    the real part.
    """
    if y is None:
        if _is_complex(x):
            c = np.asarray(x, dtype=np.complex128)
            if c.ndim != 1:
                raise PlotDataError("complex input must be 1-D")
            x_arr = np.array(c.real, dtype=np.float64)
            y_arr = np.array(c.imag, dtype=np.float64)
        else:
            y_arr = coerce_1d_numeric(x, label="y")
            x_arr = np.arange(y_arr.size, dtype=np.float64)
    else:
        x_arr = coerce_1d_numeric(x, label="x")
        y_arr = coerce_1d_numeric(y, label="y")

    if x_arr.shape != y_arr.shape:
        raise MismatchedLengthError(f"x and y length mismatch: {x_arr.size} != {y_arr.size}")
    if y_arr.size == 0:
        raise PlotDataError("empty series")
    if not np.any(np.isfinite(x_arr) & np.isfinite(y_arr)):
        raise PlotDataError("series contains no finite points")
    return x_arr, y_arr


def coerce_1d_numeric(value: Any, *, label: str) -> np.ndarray:
    if pd is not None and isinstance(value, pd.Series):
        return _coerce_ndarray(value.to_numpy(), label=label)

    if isinstance(value, np.ndarray):
        if value.ndim != 1:
            raise PlotDataError(f"{label} must be 1-D")
        return _coerce_ndarray(value, label=label)

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return _coerce_ndarray(np.asarray(value, dtype=object), label=label)

    raise PlotDataError(f"unsupported {label} input type: {type(value)!r}")


def _is_complex(value: Any) -> bool:
    if isinstance(value, np.ndarray):
        return value.dtype.kind == "c"
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return any(isinstance(v, complex) for v in value)
    return False


def _coerce_ndarray(arr: np.ndarray, *, label: str) -> np.ndarray:
    if arr.ndim != 1:
        raise PlotDataError(f"{label} must be 1-D")
    if arr.dtype.kind in {"i", "u", "f", "b"}:
        return np.array(arr, dtype=np.float64, copy=True)
    if arr.dtype.kind == "c":
        raise PlotDataError(f"{label} must be real-valued")

    out = np.empty(arr.shape[0], dtype=np.float64)
    for i, raw in enumerate(arr.tolist()):
        if raw is None:
            out[i] = np.nan
            continue
        if isinstance(raw, Decimal):
            out[i] = float(raw)
            continue
        if isinstance(raw, complex):
            raise PlotDataError(f"{label} must be real-valued")
        try:
            out[i] = float(raw)
        except (TypeError, ValueError) as exc:
            raise PlotDataError(f"{label} contains non-numeric value at index {i}: {raw!r}") from exc
    return out
