from __future__ import annotations

from functools import lru_cache
import logging
from pathlib import Path
from typing import Iterator

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from plotgeom.raster.canvas import blend_coverage
from plotgeom.series import RGBA
from plotgeom.text import BaseTextMeasurer


LOGGER = logging.getLogger(__name__)

DEFAULT_FONT_FAMILY = "Helvetica"
BOLD_EMBOLDEN_PX = 2
# Tried in order after the requested family.
SANS_FONT_FALLBACKS = ("helvetica", "arial", "liberationsans", "dejavusans", "freesans")
FONT_DIRS = (
    Path.home() / "Library" / "Fonts",
    Path("/Library/Fonts"),
    Path("/System/Library/Fonts"),
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
    Path("C:/Windows/Fonts"),
)
FONT_SUFFIXES = {".ttf", ".otf", ".ttc"}

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont


def draw_text(
    dst: np.ndarray,
    x: int,
    y: int,
    text: str,
    color: RGBA,
    *,
    font_family: str = DEFAULT_FONT_FAMILY,
    font_size_px: float = 12.0,
    bold: bool = False,
    rotate_deg: int = 0,
) -> None:
    """Blend ``text`` with the top-left corner of its (rotated) box at (x, y)."""
    turns = _quarter_turns(rotate_deg)
    if not text:
        return
    mask = _glyph_mask(text, _load_font(font_family, font_size_px), bold)
    if turns:
        mask = np.rot90(mask, k=turns)
    blend_coverage(dst, x, y, mask.astype(np.float32) / 255.0, color)


def text_size(
    text: str,
    *,
    font_family: str = DEFAULT_FONT_FAMILY,
    font_size_px: float = 12.0,
    bold: bool = False,
    rotate_deg: int = 0,
) -> tuple[int, int]:
    """Pixel (width, height) of the box ``draw_text`` would cover."""
    font = _load_font(font_family, font_size_px)
    height = _line_height(font)
    width = _advance(font, text, bold) if text else 0
    if _quarter_turns(rotate_deg) % 2:
        return (height, width)
    return (width, height)


class PillowTextMeasurer(BaseTextMeasurer):
    """Measures with the same fonts the raster adapter draws with."""

    def __init__(self, font_family: str = DEFAULT_FONT_FAMILY) -> None:
        self.font_family = font_family

    def measure(self, text: str, font_size: int, bold: bool = False) -> tuple[float, float]:
        if font_size <= 0:
            raise ValueError("font_size must be > 0")
        w, h = text_size(text, font_family=self.font_family, font_size_px=font_size, bold=bold)
        return (float(w), float(h))


def _line_height(font: Font) -> int:
    ascent, descent = font.getmetrics()
    return max(1, int(ascent + descent))


def _advance(font: Font, text: str, bold: bool) -> int:
    left, _, right, _ = font.getbbox(text)
    extra = BOLD_EMBOLDEN_PX - 1 if bold else 0
    return max(0, int(right - left)) + extra


@lru_cache(maxsize=256)
def _glyph_mask(text: str, font: Font, bold: bool) -> np.ndarray:
    left = font.getbbox(text)[0]
    image = Image.new("L", (max(1, _advance(font, text, False)), _line_height(font)), 0)
    ImageDraw.Draw(image).text((-left, 0), text, fill=255, font=font)
    mask = np.asarray(image, dtype=np.uint8)
    if not bold:
        return mask
    # Smear the glyphs sideways; the box grows by BOLD_EMBOLDEN_PX - 1 columns.
    wide = np.zeros((mask.shape[0], mask.shape[1] + BOLD_EMBOLDEN_PX - 1), dtype=np.uint8)
    for shift in range(BOLD_EMBOLDEN_PX):
        np.maximum(wide[:, shift : shift + mask.shape[1]], mask, out=wide[:, shift : shift + mask.shape[1]])
    return wide


@lru_cache(maxsize=64)
def _load_font(font_family: str, font_size_px: float) -> Font:
    size = max(1, int(round(font_size_px)))
    path = _find_font(font_family)
    if path is None:
        LOGGER.warning("no font matching %r found; using Pillow default", font_family)
        return ImageFont.load_default(size=size)
    try:
        return ImageFont.truetype(str(path), size=size)
    except OSError:
        LOGGER.warning("failed to load font %s; using Pillow default", path)
        return ImageFont.load_default(size=size)


@lru_cache(maxsize=16)
def _find_font(font_family: str) -> Path | None:
    wanted = _squash(font_family) or _squash(DEFAULT_FONT_FAMILY)
    files = list(_font_files())
    for pattern in (wanted,) + SANS_FONT_FALLBACKS:
        matches = [path for path in files if pattern in _squash(path.name)]
        if matches:
            # The shortest name is the regular face ("DejaVuSans" over "DejaVuSans-Bold").
            match = min(matches, key=lambda path: (len(path.name), str(path)))
            LOGGER.debug("font %r resolved to %s", font_family, match)
            return match
    return None


def _font_files() -> Iterator[Path]:
    for base in FONT_DIRS:
        if not base.is_dir():
            continue
        for path in sorted(base.rglob("*")):
            if path.suffix.lower() in FONT_SUFFIXES:
                yield path


def _squash(name: str) -> str:
    return name.strip().lower().replace(" ", "").replace("-", "")


def _quarter_turns(rotate_deg: int) -> int:
    if rotate_deg % 90 != 0:
        raise ValueError("rotate_deg must be a multiple of 90")
    return (rotate_deg // 90) % 4
