from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class TextMeasurer(Protocol):
    def measure(self, text: str, font_size: int, bold: bool = False) -> tuple[float, float]:
        ...

    def fit_font(
        self,
        text: str,
        max_width: float,
        max_height: float,
        min_size: int,
        start_size: int = 12,
        bold: bool = False,
    ) -> int:
        ...


def fit_font(
    measurer: TextMeasurer,
    text: str,
    max_width: float,
    max_height: float,
    min_size: int,
    start_size: int = 12,
    bold: bool = False,
) -> int:
    """Shrink one point at a time from ``start_size`` until ``text`` fits.

    Stops at ``min_size`` even when the text still overflows.
    """
    if min_size < 1:
        raise ValueError("min_size must be >= 1")
    size = max(int(start_size), int(min_size))
    while size > min_size:
        w, h = measurer.measure(text, size, bold)
        if w <= max_width and h <= max_height:
            break
        size -= 1
    return size


class BaseTextMeasurer:
    def measure(self, text: str, font_size: int, bold: bool = False) -> tuple[float, float]:
        raise NotImplementedError

    def fit_font(
        self,
        text: str,
        max_width: float,
        max_height: float,
        min_size: int,
        start_size: int = 12,
        bold: bool = False,
    ) -> int:
        return fit_font(self, text, max_width, max_height, min_size, start_size=start_size, bold=bold)


class MonospaceTextMeasurer(BaseTextMeasurer):
    """Font-free metrics: fixed advance per character, fixed line height."""

    def __init__(self, advance: float = 0.6, line_height: float = 1.2, bold_advance: float = 0.65) -> None:
        if advance <= 0 or line_height <= 0 or bold_advance <= 0:
            raise ValueError("text metrics must be > 0")
        self.advance = advance
        self.line_height = line_height
        self.bold_advance = bold_advance

    def measure(self, text: str, font_size: int, bold: bool = False) -> tuple[float, float]:
        if font_size <= 0:
            raise ValueError("font_size must be > 0")
        advance = self.bold_advance if bold else self.advance
        return (len(text) * advance * font_size, self.line_height * font_size)
