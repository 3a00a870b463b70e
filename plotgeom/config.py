from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import IntEnum
import math
from pathlib import Path
import re
import tomllib
from typing import Any, Mapping, Sequence

from plotgeom.errors import IndexOutOfRangeError, InvalidRangeError
from plotgeom.series import BLACK, GRAY, NAMED_COLORS, RGBA, WHITE

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}([0-9a-fA-F]{2})?$")


class PlotType(IntEnum):
    LINEAR = 0
    SEMILOGX = 1
    SEMILOGY = 2
    LOGLOG = 3
    POLAR = 4
    BAR = 5

    @property
    def log_x(self) -> bool:
        return self in (PlotType.SEMILOGX, PlotType.LOGLOG)

    @property
    def log_y(self) -> bool:
        return self in (PlotType.SEMILOGY, PlotType.LOGLOG)

    @property
    def polar(self) -> bool:
        return self is PlotType.POLAR

    @property
    def bar(self) -> bool:
        return self is PlotType.BAR

    @classmethod
    def parse(cls, value: "PlotType | int | str") -> "PlotType":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper().replace("-", "").replace("_", "")
            try:
                return cls[key]
            except KeyError as exc:
                raise IndexOutOfRangeError(f"invalid plot type: {value!r}") from exc
        try:
            return cls(int(value))
        except ValueError as exc:
            raise IndexOutOfRangeError(f"invalid plot type: {value!r}") from exc


def parse_color(value: Any) -> RGBA:
    """Accept ``#RRGGBB``/``#RRGGBBAA``, a named color or an RGB(A) tuple."""
    if isinstance(value, str):
        text = value.strip()
        if _HEX_COLOR.match(text):
            r, g, b = int(text[1:3], 16), int(text[3:5], 16), int(text[5:7], 16)
            a = int(text[7:9], 16) if len(text) == 9 else 255
            return (r, g, b, a)
        named = NAMED_COLORS.get(text.lower())
        if named is None:
            raise ValueError(f"unknown color: {value!r}")
        return named
    if isinstance(value, Sequence) and len(value) in (3, 4):
        channels = [int(v) for v in value]
        if any(c < 0 or c > 255 for c in channels):
            raise ValueError(f"color channels must be in [0, 255]: {value!r}")
        if len(channels) == 3:
            channels.append(255)
        return (channels[0], channels[1], channels[2], channels[3])
    raise ValueError(f"unsupported color value: {value!r}")


@dataclass(frozen=True)
class AxisConfig:
    grid: bool = True
    tic_marks: bool = True
    manual_bounds: tuple[float, float] | None = None
    manual_tics: tuple[float, ...] | None = None

    def __post_init__(self) -> None:
        if self.manual_bounds is not None:
            if len(self.manual_bounds) != 2:
                raise InvalidRangeError("manual bounds must have two values")
            lo, hi = float(self.manual_bounds[0]), float(self.manual_bounds[1])
            if not (math.isfinite(lo) and math.isfinite(hi)):
                raise InvalidRangeError("manual bounds must be finite")
            if lo >= hi:
                raise InvalidRangeError(f"max must be > min: ({lo}, {hi})")
            object.__setattr__(self, "manual_bounds", (lo, hi))
        if self.manual_tics is not None:
            tics = tuple(float(v) for v in self.manual_tics)
            if not tics:
                raise InvalidRangeError("manual tics must not be empty")
            object.__setattr__(self, "manual_tics", tics)


@dataclass(frozen=True)
class Margins:
    left: float = 0.125
    right: float = 0.045
    top: float = 0.075
    bottom: float = 0.075

    def __post_init__(self) -> None:
        for name in ("left", "right", "top", "bottom"):
            value = getattr(self, name)
            if not (0.0 <= value < 1.0):
                raise ValueError(f"margin `{name}` must be in [0, 1)")
        if self.left + self.right >= 1.0 or self.top + self.bottom >= 1.0:
            raise ValueError("margins leave no room for the plot area")


@dataclass(frozen=True)
class PlotColors:
    background: RGBA = WHITE
    grid: RGBA = GRAY
    label: RGBA = BLACK
    box: RGBA = BLACK
    tic: RGBA = BLACK


@dataclass(frozen=True)
class PlotConfig:
    plot_type: PlotType = PlotType.LINEAR
    x_axis: AxisConfig = field(default_factory=AxisConfig)
    y_axis: AxisConfig = field(default_factory=AxisConfig)
    margins: Margins = field(default_factory=Margins)
    colors: PlotColors = field(default_factory=PlotColors)
    title: str | None = None
    x_label: str | None = None
    y_label: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "plot_type", PlotType.parse(self.plot_type))

    def with_axis(self, axis: str, **changes: Any) -> "PlotConfig":
        if axis == "x":
            return replace(self, x_axis=replace(self.x_axis, **changes))
        if axis == "y":
            return replace(self, y_axis=replace(self.y_axis, **changes))
        raise ValueError(f"unknown axis: {axis!r}")


_TOP_LEVEL_KEYS = {"plot_type", "title", "x_label", "y_label", "margins", "colors", "x_axis", "y_axis"}
_AXIS_KEYS = {"grid", "tic_marks", "bounds", "tics"}


def plot_config_from_mapping(raw: Mapping[str, Any], *, base: PlotConfig | None = None) -> PlotConfig:
    """Merge a plain mapping (e.g. parsed TOML) onto ``base`` or the defaults."""
    config = base or PlotConfig()
    for key in raw:
        if key not in _TOP_LEVEL_KEYS:
            raise ValueError(f"unknown plot config key: {key}")

    changes: dict[str, Any] = {}
    if "plot_type" in raw:
        changes["plot_type"] = PlotType.parse(raw["plot_type"])
    for key in ("title", "x_label", "y_label"):
        if key in raw:
            value = raw[key]
            if value is not None and not isinstance(value, str):
                raise ValueError(f"`{key}` must be a string")
            changes[key] = value
    if "margins" in raw:
        changes["margins"] = _merge_section(config.margins, raw["margins"], "margins", float)
    if "colors" in raw:
        changes["colors"] = _merge_section(config.colors, raw["colors"], "colors", parse_color)
    for name in ("x_axis", "y_axis"):
        if name in raw:
            changes[name] = _axis_from_mapping(getattr(config, name), raw[name], name)
    return replace(config, **changes)


def load_plot_config(path: str | Path) -> PlotConfig:
    with Path(path).open("rb") as f:
        raw = tomllib.load(f)
    return plot_config_from_mapping(raw)


def _axis_from_mapping(axis: AxisConfig, raw: Any, name: str) -> AxisConfig:
    if not isinstance(raw, Mapping):
        raise ValueError(f"`{name}` must be a table")
    for key in raw:
        if key not in _AXIS_KEYS:
            raise ValueError(f"unknown `{name}` key: {key}")
    changes: dict[str, Any] = {}
    for key in ("grid", "tic_marks"):
        if key in raw:
            if not isinstance(raw[key], bool):
                raise ValueError(f"`{name}.{key}` must be a boolean")
            changes[key] = raw[key]
    if "bounds" in raw:
        changes["manual_bounds"] = None if raw["bounds"] is None else tuple(raw["bounds"])
    if "tics" in raw:
        changes["manual_tics"] = None if raw["tics"] is None else tuple(raw["tics"])
    return replace(axis, **changes)


def _merge_section(current: Any, raw: Any, name: str, coerce: Any) -> Any:
    if not isinstance(raw, Mapping):
        raise ValueError(f"`{name}` must be a table")
    known = set(current.__dataclass_fields__)
    changes: dict[str, Any] = {}
    for key, value in raw.items():
        if key not in known:
            raise ValueError(f"unknown `{name}` key: {key}")
        changes[key] = coerce(value)
    return replace(current, **changes)
