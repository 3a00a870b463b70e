from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Iterator, Sequence

import numpy as np

from plotgeom.errors import InvalidAxisValueError, InvalidRangeError


NICE_STEPS = (0.1, 0.2, 0.5, 1.0, 2.0, 5.0, 10.0, 20.0, 50.0)
MAX_TICS = 11
# Ring counts that read as clutter on a polar grid, mapped to a coarser count
# that still lands on the same outer ring.
POLAR_RING_COLLAPSE = {11: 6, 9: 5, 7: 4, 5: 3}
POLAR_SPOKES = 8
LOG_MANTISSA = tuple(math.log10(m) for m in range(1, 11))


@dataclass(frozen=True)
class Tic:
    value: float
    label: str
    log_value: float | None = None


@dataclass(frozen=True)
class TicSet:
    tics: tuple[Tic, ...]
    log: bool = False

    def __len__(self) -> int:
        return len(self.tics)

    def __iter__(self) -> Iterator[Tic]:
        return iter(self.tics)

    def __getitem__(self, index: int) -> Tic:
        return self.tics[index]

    @property
    def values(self) -> np.ndarray:
        return np.asarray([t.value for t in self.tics], dtype=np.float64)

    @property
    def positions(self) -> np.ndarray:
        """Tic coordinates in axis space (log10 of the value on log axes)."""
        if self.log:
            return np.asarray([t.log_value for t in self.tics], dtype=np.float64)
        return self.values

    @property
    def labels(self) -> list[str]:
        return [t.label for t in self.tics]

    @property
    def lower(self) -> float:
        return self.tics[0].value

    @property
    def upper(self) -> float:
        return self.tics[-1].value

    @property
    def interior(self) -> tuple[Tic, ...]:
        return self.tics[1:-1]


def format_number(value: float) -> str:
    """Compact tic label: precision follows the magnitude of ``value``."""
    xabs = abs(value)
    if xabs > 1e6:
        return f"{value:.2e}"
    if xabs > 9999.5:
        return f"{int(round(value))}"
    if xabs > 999.5:
        return f"{value:.4g}"
    if xabs > 99.95:
        return f"{value:.3g}"
    if xabs > 9.995:
        return f"{value:.2g}"
    if xabs > 0.0995:
        return f"{value:.3g}"
    if xabs > 0.00995:
        return f"{value:.4g}"
    if xabs == 0.0:
        return "0"
    return f"{value:.2e}"


def plan_linear(vmin: float, vmax: float) -> TicSet:
    _check_range(vmin, vmax)
    if vmin == vmax:
        return _tic_set([vmin, vmin + 1.0])
    low, high, count = _nice_fit(vmin, vmax)
    return _tic_set(_even_values(low, high, count))


def plan_polar(vmax: float) -> TicSet:
    """Concentric ring radii from 0 out to a nice radius covering ``vmax``."""
    _check_range(0.0, vmax)
    if vmax == 0.0:
        return _tic_set([0.0, 1.0])
    low, high, count = _nice_fit(0.0, vmax)
    count = POLAR_RING_COLLAPSE.get(count, count)
    return _tic_set(_even_values(low, high, count))


def plan_log(vmin: float, vmax: float) -> TicSet:
    if not (math.isfinite(vmin) and math.isfinite(vmax)):
        raise InvalidRangeError(f"log axis bounds must be finite: ({vmin}, {vmax})")
    if vmin <= 0.0:
        raise InvalidAxisValueError(f"min value <= 0 on logarithmic axis: {vmin}")
    if vmax < vmin:
        raise InvalidRangeError(f"max must be >= min: ({vmin}, {vmax})")

    lo_exp = math.floor(math.log10(vmin))
    hi_exp = math.ceil(math.log10(vmax))
    if hi_exp == lo_exp:
        hi_exp += 1

    tics: list[Tic] = []
    for decade in range(hi_exp - lo_exp):
        exponent = lo_exp + decade
        base = 10.0**exponent
        for j, mantissa in enumerate(LOG_MANTISSA):
            value = (j + 1) * base
            # Only decade boundaries are labelled.
            label = format_number(value) if j in (0, len(LOG_MANTISSA) - 1) else ""
            tics.append(Tic(value=value, label=label, log_value=exponent + mantissa))
    return TicSet(tics=tuple(tics), log=True)


def plan_manual(values: Sequence[float], *, log: bool = False) -> TicSet:
    arr = np.asarray(values, dtype=np.float64)
    if arr.ndim != 1 or arr.size == 0:
        raise InvalidRangeError("manual tics must be a non-empty 1-D sequence")
    if not np.all(np.isfinite(arr)):
        raise InvalidRangeError("manual tics must be finite")
    if not log:
        return _tic_set(arr.tolist())
    if np.any(arr <= 0.0):
        raise InvalidAxisValueError(f"tic value <= 0 on logarithmic axis: {float(np.min(arr))}")
    tics = tuple(Tic(value=float(v), label=format_number(float(v)), log_value=math.log10(v)) for v in arr.tolist())
    return TicSet(tics=tics, log=True)


def polar_angle_tics() -> TicSet:
    step = 360 // POLAR_SPOKES
    return TicSet(tics=tuple(Tic(value=float(i * step), label=f"{i * step}°") for i in range(POLAR_SPOKES)))


def _nice_fit(vmin: float, vmax: float) -> tuple[float, float, int]:
    power = 10.0 ** _round_half_up(math.log10(vmax - vmin) - 1.0)
    for multiplier in NICE_STEPS:
        step = power * multiplier
        high = step * math.ceil(vmax / step)
        low = step * math.floor(vmin / step)
        # Float division can land one ulp inside the data; widen by a step.
        if high < vmax:
            high += step
        if low > vmin:
            low -= step
        count = _round_half_up((high - low) / step) + 1
        if count <= MAX_TICS:
            return low, high, count
    raise InvalidRangeError(f"no tic spacing fits range ({vmin}, {vmax})")


def _even_values(low: float, high: float, count: int) -> list[float]:
    delta = (high - low) / (count - 1)
    values = [low + delta * j for j in range(count)]
    values[-1] = high
    atol = abs(delta) * 1e-9
    # Snap float drift such as -5.55e-17 onto zero.
    return [0.0 if abs(v) <= atol else v for v in values]


def _tic_set(values: Sequence[float]) -> TicSet:
    return TicSet(tics=tuple(Tic(value=float(v), label=format_number(float(v))) for v in values))


def _check_range(vmin: float, vmax: float) -> None:
    if not (math.isfinite(vmin) and math.isfinite(vmax)):
        raise InvalidRangeError(f"axis bounds must be finite: ({vmin}, {vmax})")
    if vmax < vmin:
        raise InvalidRangeError(f"max must be >= min: ({vmin}, {vmax})")


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
