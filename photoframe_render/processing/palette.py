from __future__ import annotations

import logging
from typing import Iterable, List, Sequence, Tuple

from PIL import ImageColor

RGB = Tuple[int, int, int]
Palette = Tuple[RGB, ...]

LUMA_R = 0.299
LUMA_G = 0.587
LUMA_B = 0.114

log = logging.getLogger(__name__)


def luma(rgb: Sequence[float]) -> float:
    return LUMA_R * rgb[0] + LUMA_G * rgb[1] + LUMA_B * rgb[2]


def luma_distance(a: Sequence[float], b: Sequence[float]) -> float:
    dr = a[0] - b[0]
    dg = a[1] - b[1]
    db = a[2] - b[2]
    return dr * dr * LUMA_R + dg * dg * LUMA_G + db * db * LUMA_B


def rgb_distance(a: Sequence[float], b: Sequence[float]) -> float:
    dr = a[0] - b[0]
    dg = a[1] - b[1]
    db = a[2] - b[2]
    return dr * dr + dg * dg + db * db


def nearest_luma_index(rgb: Sequence[float], palette: Sequence[RGB]) -> int:
    best_index = 0
    best_distance = float("inf")
    for index, color in enumerate(palette):
        distance = luma_distance(rgb, color)
        if distance < best_distance:
            best_distance = distance
            best_index = index
    return best_index


def palette_lumas_scaled(palette: Iterable[RGB]) -> List[int]:
    """Integer lumas scaled by 1000, used to order Yliluoma mixing plans."""
    return [r * 299 + g * 587 + b * 114 for r, g, b in palette]


def parse_palette(colors: Iterable[str]) -> Palette:
    """Resolve CSS color strings (``#rrggbb``, ``rgb()``, names) to RGB triples.

    Entries Pillow cannot parse are skipped with a warning.
    """

    parsed: List[RGB] = []
    for color in colors:
        try:
            value = ImageColor.getrgb(color)
        except ValueError:
            log.warning("failed to parse supported color %r", color)
            continue
        r, g, b = value[:3]
        log.debug("resolved palette color %s -> #%02x%02x%02x", color, r, g, b)
        parsed.append((r, g, b))
    return tuple(parsed)
