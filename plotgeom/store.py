from __future__ import annotations

from dataclasses import dataclass, replace
import operator
from typing import Any, Sequence

from plotgeom.adapters import normalize_xy
from plotgeom.config import parse_color
from plotgeom.errors import IndexOutOfRangeError, TooManyAnnotationsError, TooManyCurvesError
from plotgeom.series import BLACK, RGBA, Annotation, Curve, CurveStyle, MarkerStyle, default_style

MAX_CURVES = 16
MAX_ANNOTATIONS = 16


class CurveStore:
    """Curves and annotations of one plot plus their selection cursors.

    Every style accessor takes an optional explicit index; without one it
    acts on the current curve (or annotation). ``curve(i)`` and the handles
    returned by ``add_curve``/``add_annotation`` are bound to a single index
    and never consult the cursor.
    """

    def __init__(self) -> None:
        self._curves: list[Curve] = []
        self._annotations: list[Annotation] = []
        self._current_curve = 0
        self._current_annotation = 0
        self.revision = 0
        self.changed = False

    @property
    def curves(self) -> tuple[Curve, ...]:
        return tuple(self._curves)

    @property
    def annotations(self) -> tuple[Annotation, ...]:
        return tuple(self._annotations)

    @property
    def total_curves(self) -> int:
        return len(self._curves)

    @property
    def total_annotations(self) -> int:
        return len(self._annotations)

    @property
    def current_curve(self) -> int:
        return self._current_curve

    @property
    def current_annotation(self) -> int:
        return self._current_annotation

    def __len__(self) -> int:
        return len(self._curves)

    def mark_clean(self) -> None:
        self.changed = False

    def add_curve(self, x: Any, y: Any = None) -> "CurveHandle":
        if len(self._curves) >= MAX_CURVES:
            raise TooManyCurvesError(f"maximum number of curves is {MAX_CURVES}")
        x_arr, y_arr = normalize_xy(x, y)
        index = len(self._curves)
        self._curves.append(Curve(x=x_arr, y=y_arr, style=default_style(index)))
        self._current_curve = index
        self._touch()
        return CurveHandle(self, index)

    def set_values(self, x: Any, y: Any = None, *, curve: int | None = None) -> "CurveHandle":
        if not self._curves and (curve is None or _as_index(curve, "curve") == 0):
            return self.add_curve(x, y)
        index = self._curve_index(curve)
        x_arr, y_arr = normalize_xy(x, y)
        self._curves[index] = Curve(x=x_arr, y=y_arr, style=self._curves[index].style)
        self._touch()
        return CurveHandle(self, index)

    def set_current_curve(self, index: int) -> None:
        self._current_curve = self._check_curve(index)

    def curve(self, index: int) -> "CurveHandle":
        return CurveHandle(self, self._check_curve(index))

    def get(self, index: int | None = None) -> Curve:
        return self._curves[self._curve_index(index)]

    def set_line_state(self, on: bool, *, curve: int | None = None) -> None:
        self._restyle(curve, line_on=bool(on))

    def set_marker_state(self, on: bool, *, curve: int | None = None) -> None:
        self._restyle(curve, marker_on=bool(on))

    def set_line_style(self, style: Sequence[float], *, curve: int | None = None) -> None:
        self._restyle(curve, line_style=tuple(float(v) for v in style))

    def set_line_width(self, width: float, *, curve: int | None = None) -> None:
        self._restyle(curve, line_width=float(width))

    def set_line_color(self, color: Any, *, curve: int | None = None) -> None:
        self._restyle(curve, line_color=parse_color(color))

    def set_marker_style(self, style: MarkerStyle | int | str, *, curve: int | None = None) -> None:
        self._restyle(curve, marker_style=MarkerStyle.parse(style))

    def set_marker_color(self, color: Any, *, curve: int | None = None) -> None:
        self._restyle(curve, marker_color=parse_color(color))

    def set_fill_color(self, color: Any, *, curve: int | None = None) -> None:
        self._restyle(curve, fill_color=parse_color(color))

    def style(self, curve: int | None = None) -> CurveStyle:
        return self.get(curve).style

    def line_state(self, curve: int | None = None) -> bool:
        return self.style(curve).line_on

    def marker_state(self, curve: int | None = None) -> bool:
        return self.style(curve).marker_on

    def line_style(self, curve: int | None = None) -> tuple[float, ...]:
        return self.style(curve).line_style

    def line_width(self, curve: int | None = None) -> float:
        return self.style(curve).line_width

    def line_color(self, curve: int | None = None) -> RGBA:
        return self.style(curve).line_color

    def marker_style(self, curve: int | None = None) -> MarkerStyle:
        return self.style(curve).marker_style

    def marker_color(self, curve: int | None = None) -> RGBA:
        return self.style(curve).marker_color

    def fill_color(self, curve: int | None = None) -> RGBA:
        return self.style(curve).fill_color

    def add_annotation(self, text: str, x: float, y: float, color: Any = BLACK) -> "AnnotationHandle":
        if len(self._annotations) >= MAX_ANNOTATIONS:
            raise TooManyAnnotationsError(f"maximum number of annotations is {MAX_ANNOTATIONS}")
        annotation = Annotation(text=str(text), x=float(x), y=float(y), color=parse_color(color))
        index = len(self._annotations)
        self._annotations.append(annotation)
        self._current_annotation = index
        self._touch()
        return AnnotationHandle(self, index)

    def set_current_annotation(self, index: int) -> None:
        self._current_annotation = self._check_annotation(index)

    def annotation(self, index: int) -> "AnnotationHandle":
        return AnnotationHandle(self, self._check_annotation(index))

    def set_annotation_color(self, color: Any, *, annotation: int | None = None) -> None:
        index = self._annotation_index(annotation)
        self._annotations[index] = replace(self._annotations[index], color=parse_color(color))
        self._touch()

    def set_annotation_text(self, text: str, *, annotation: int | None = None) -> None:
        index = self._annotation_index(annotation)
        self._annotations[index] = replace(self._annotations[index], text=str(text))
        self._touch()

    def annotation_text(self, annotation: int | None = None) -> str:
        return self._annotations[self._annotation_index(annotation)].text

    def annotation_color(self, annotation: int | None = None) -> RGBA:
        return self._annotations[self._annotation_index(annotation)].color

    def remove_all(self) -> None:
        self._curves.clear()
        self._annotations.clear()
        self._current_curve = 0
        self._current_annotation = 0
        self._touch()

    def _restyle(self, curve: int | None, **changes: Any) -> None:
        index = self._curve_index(curve)
        current = self._curves[index]
        # CurveStyle validates in __post_init__, so a bad value leaves the store as it was.
        style = replace(current.style, **changes)
        self._curves[index] = Curve(x=current.x, y=current.y, style=style)
        self._touch()

    def _curve_index(self, curve: int | None) -> int:
        return self._check_curve(self._current_curve if curve is None else curve)

    def _annotation_index(self, annotation: int | None) -> int:
        return self._check_annotation(self._current_annotation if annotation is None else annotation)

    def _check_curve(self, index: int) -> int:
        index = _as_index(index, "curve")
        if not 0 <= index < len(self._curves):
            raise IndexOutOfRangeError(f"curve index out of range: {index} (total {len(self._curves)})")
        return index

    def _check_annotation(self, index: int) -> int:
        index = _as_index(index, "annotation")
        if not 0 <= index < len(self._annotations):
            raise IndexOutOfRangeError(
                f"annotation index out of range: {index} (total {len(self._annotations)})"
            )
        return index

    def _touch(self) -> None:
        self.revision += 1
        self.changed = True


@dataclass(frozen=True)
class CurveHandle:
    """Setters scoped to one curve; each returns the handle for chaining."""

    store: CurveStore
    index: int

    @property
    def data(self) -> Curve:
        return self.store.get(self.index)

    @property
    def style(self) -> CurveStyle:
        return self.data.style

    def set_values(self, x: Any, y: Any = None) -> "CurveHandle":
        self.store.set_values(x, y, curve=self.index)
        return self

    def line(self, on: bool = True) -> "CurveHandle":
        self.store.set_line_state(on, curve=self.index)
        return self

    def markers(self, on: bool = True) -> "CurveHandle":
        self.store.set_marker_state(on, curve=self.index)
        return self

    def line_style(self, style: Sequence[float]) -> "CurveHandle":
        self.store.set_line_style(style, curve=self.index)
        return self

    def line_width(self, width: float) -> "CurveHandle":
        self.store.set_line_width(width, curve=self.index)
        return self

    def line_color(self, color: Any) -> "CurveHandle":
        self.store.set_line_color(color, curve=self.index)
        return self

    def marker_style(self, style: MarkerStyle | int | str) -> "CurveHandle":
        self.store.set_marker_style(style, curve=self.index)
        return self

    def marker_color(self, color: Any) -> "CurveHandle":
        self.store.set_marker_color(color, curve=self.index)
        return self

    def fill_color(self, color: Any) -> "CurveHandle":
        self.store.set_fill_color(color, curve=self.index)
        return self


@dataclass(frozen=True)
class AnnotationHandle:
    store: CurveStore
    index: int

    @property
    def text(self) -> str:
        return self.store.annotation_text(self.index)

    @property
    def color(self) -> RGBA:
        return self.store.annotation_color(self.index)

    def set_text(self, text: str) -> "AnnotationHandle":
        self.store.set_annotation_text(text, annotation=self.index)
        return self

    def set_color(self, color: Any) -> "AnnotationHandle":
        self.store.set_annotation_color(color, annotation=self.index)
        return self


def _as_index(index: Any, kind: str) -> int:
    if isinstance(index, bool):
        raise IndexOutOfRangeError(f"{kind} index must be an integer: {index!r}")
    try:
        return operator.index(index)
    except TypeError as exc:
        raise IndexOutOfRangeError(f"{kind} index must be an integer: {index!r}") from exc
