"""Capture-date overlay.

The date is drawn either straight onto the photo (overlay mode) or into a
solid strip added above or below it (banner mode). Glyph coverage comes from
Pillow's FreeType rasteriser and is blended as
``(color * a + pixel * (255 - a)) // 255`` per channel.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

import numpy as np
from PIL import Image, ImageDraw

from ..assets import DEFAULT_ASSETS, AssetCache, FontType, font_metrics
from ..frame import Overscan, StrokeColor, TimestampColor, TimestampConfig, TimestampPosition
from ..raster import RasterImage
from .palette import luma

log = logging.getLogger(__name__)

Color = Tuple[int, int, int]

BLACK: Color = (0, 0, 0)
WHITE: Color = (255, 255, 255)

BANNER_PADDING = 8
BACKGROUND_PADDING = 4
AUTO_SAMPLE_PADDING = 5
MAX_STROKE = 16


@dataclass(frozen=True)
class TextLayout:
    """Rasterised text: coverage mask plus its offset from the pen origin on the baseline."""

    mask: np.ndarray
    left: int
    top: int
    width: int
    height: int
    ascent: int


def banner_height_for(config: TimestampConfig) -> int:
    if config.banner_height is not None:
        return max(0, config.banner_height)
    return int(config.font_size) + BANNER_PADDING * 2


def _round_half_away(value: float) -> int:
    return int(math.floor(abs(value) + 0.5)) * (1 if value >= 0 else -1)


def resolve_stroke(config: TimestampConfig, fill: Color) -> Tuple[bool, int, Color]:
    width = max(0, config.stroke_width)
    width = min(width, min(MAX_STROKE, max(1, _round_half_away(config.font_size * 0.3))))
    width = min(width, MAX_STROKE)
    if config.stroke_color is StrokeColor.WHITE:
        color = WHITE
    elif config.stroke_color is StrokeColor.BLACK:
        color = BLACK
    else:
        color = BLACK if int(luma(fill)) > 128 else WHITE
    return config.stroke_enabled, width, color


def layout_text(font: FontType, text: str) -> TextLayout:
    ascent, descent = font_metrics(font)
    width = int(math.ceil(font.getlength(text)))
    height = ascent + descent
    left, top, right, bottom = font.getbbox(text, anchor="ls")
    if right <= left or bottom <= top:
        mask = np.zeros((0, 0), dtype=np.uint8)
    else:
        img = Image.new("L", (right - left, bottom - top), 0)
        ImageDraw.Draw(img).text((-left, -top), text, fill=255, font=font, anchor="ls")
        mask = np.asarray(img, dtype=np.uint8)
    return TextLayout(mask, left, top, width, height, ascent)


def _insets(overscan: Optional[Overscan]) -> Tuple[int, int, int, int]:
    return (overscan or Overscan()).clamped()


def text_origin(
    position: TimestampPosition,
    text_width: int,
    area_width: int,
    overscan: Optional[Overscan],
    padding_horizontal: int,
) -> int:
    pad_left, pad_right, _, _ = _insets(overscan)
    effective_width = max(0, area_width - (pad_left + pad_right))
    horizontal = position.horizontal
    if horizontal == "left":
        return pad_left + padding_horizontal
    if horizontal == "center":
        return pad_left + max(0, effective_width - text_width) // 2
    return pad_left + max(0, effective_width - (text_width + padding_horizontal))


def text_box_top(
    position: TimestampPosition,
    text_height: int,
    area_height: int,
    overscan: Optional[Overscan],
    padding_vertical: int,
) -> int:
    """Top edge of the text box, used for the background box and colour sampling."""
    _, _, pad_top, pad_bottom = _insets(overscan)
    effective_height = max(0, area_height - (pad_top + pad_bottom))
    if position.is_top:
        return pad_top + padding_vertical
    return pad_top + max(0, effective_height - (text_height + padding_vertical))


def baseline(
    position: TimestampPosition,
    layout: TextLayout,
    area_y: int,
    area_height: int,
    overscan: Optional[Overscan],
    padding_vertical: int,
) -> int:
    _, _, pad_top, pad_bottom = _insets(overscan)
    effective_height = max(0, area_height - (pad_top + pad_bottom))
    if position.is_top:
        return area_y + pad_top + padding_vertical + layout.ascent
    return area_y + pad_top + (effective_height - padding_vertical) - (layout.height - layout.ascent)


def blend_mask(canvas: np.ndarray, mask: np.ndarray, x: int, y: int, color: Color) -> None:
    """Blend ``color`` into ``canvas`` (h, w, 4) through ``mask`` placed at ``(x, y)``, clipped."""
    if mask.size == 0:
        return
    height, width = canvas.shape[:2]
    x0, y0 = max(0, x), max(0, y)
    x1 = min(width, x + mask.shape[1])
    y1 = min(height, y + mask.shape[0])
    if x0 >= x1 or y0 >= y1:
        return
    alpha = mask[y0 - y : y1 - y, x0 - x : x1 - x].astype(np.uint32)[..., None]
    target = canvas[y0:y1, x0:x1, :3]
    fill = np.asarray(color, dtype=np.uint32)
    blended = (fill * alpha + target.astype(np.uint32) * (255 - alpha)) // 255
    canvas[y0:y1, x0:x1, :3] = blended.astype(np.uint8)


def draw_text(
    canvas: np.ndarray,
    layout: TextLayout,
    x: int,
    y_base: int,
    color: Color,
    stroke: Tuple[bool, int, Color],
) -> None:
    left = x + layout.left
    top = y_base + layout.top
    enabled, radius, stroke_color = stroke
    if enabled and radius > 0:
        for dy in range(-radius, radius + 1):
            for dx in range(-radius, radius + 1):
                if (dx == 0 and dy == 0) or dx * dx + dy * dy > radius * radius:
                    continue
                blend_mask(canvas, layout.mask, left + dx, top + dy, stroke_color)
    blend_mask(canvas, layout.mask, left, top, color)


def auto_text_color(
    canvas: np.ndarray,
    config: TimestampConfig,
    font: FontType,
    text: str,
    overscan: Optional[Overscan],
) -> Color:
    """Black text over bright regions, white over dark ones."""
    height, width = canvas.shape[:2]
    ascent, descent = font_metrics(font)
    text_width = int(font.getlength(text))
    text_height = ascent + descent
    x = text_origin(config.position, text_width, width, overscan, config.padding_horizontal)
    y = text_box_top(config.position, text_height, height, overscan, config.padding_vertical)

    x0 = max(0, x - AUTO_SAMPLE_PADDING)
    x1 = min(width, x + text_width + AUTO_SAMPLE_PADDING)
    y0 = max(0, y - AUTO_SAMPLE_PADDING)
    y1 = min(height, y + text_height + AUTO_SAMPLE_PADDING)
    if x0 >= x1 or y0 >= y1:
        return BLACK
    sample = canvas[y0:y1, x0:x1, :3].astype(np.float32)
    lumas = np.floor(
        np.float32(0.299) * sample[..., 0]
        + np.float32(0.587) * sample[..., 1]
        + np.float32(0.114) * sample[..., 2]
    ).astype(np.int64)
    average = int(lumas.sum()) // lumas.size
    return BLACK if average > 128 else WHITE


def _overlay_color(color: TimestampColor) -> Optional[Color]:
    if color in (TimestampColor.TRANSPARENT_WHITE_TEXT, TimestampColor.BLACK_BACKGROUND):
        return WHITE
    if color in (TimestampColor.TRANSPARENT_BLACK_TEXT, TimestampColor.WHITE_BACKGROUND):
        return BLACK
    return None


def render_overlay(
    canvas: np.ndarray,
    config: TimestampConfig,
    font: FontType,
    text: str,
    overscan: Optional[Overscan],
) -> None:
    height, width = canvas.shape[:2]
    fill = _overlay_color(config.color)
    if fill is None:
        fill = auto_text_color(canvas, config, font, text, overscan)
    stroke = resolve_stroke(config, fill)
    layout = layout_text(font, text)
    if layout.mask.size == 0:
        return

    if config.color.has_background:
        background = WHITE if config.color is TimestampColor.WHITE_BACKGROUND else BLACK
        pad = BACKGROUND_PADDING + (stroke[1] if stroke[0] else 0)
        x = text_origin(config.position, layout.width, width, overscan, config.padding_horizontal)
        y = text_box_top(config.position, layout.height, height, overscan, config.padding_vertical)
        bx, by = max(0, x - pad), max(0, y - pad)
        canvas[by : by + layout.height + pad * 2, bx : bx + layout.width + pad * 2] = background + (255,)

    x = text_origin(config.position, layout.width, width, overscan, config.padding_horizontal)
    y_base = baseline(config.position, layout, 0, height, overscan, config.padding_vertical)
    draw_text(canvas, layout, x, y_base, fill, stroke)


def render_banner(
    raster: RasterImage,
    config: TimestampConfig,
    font: FontType,
    text: str,
    overscan: Optional[Overscan],
    reduced_height: Optional[int],
) -> RasterImage:
    strip = banner_height_for(config)
    at_top = config.position.is_top
    width = raster.width
    photo_height = reduced_height if reduced_height is not None else raster.height

    photo = raster.to_image()
    if photo_height != raster.height:
        photo = photo.resize((width, max(1, photo_height)), Image.Resampling.BILINEAR)
        photo_height = photo.height

    out = Image.new("RGBA", (width, photo_height + strip), WHITE + (255,))
    out.alpha_composite(photo, (0, strip if at_top else 0))
    canvas = np.array(out, dtype=np.uint8)

    strip_y = 0 if at_top else photo_height
    black_strip = config.color is TimestampColor.BLACK_BACKGROUND
    canvas[strip_y : strip_y + strip, :] = (BLACK if black_strip else WHITE) + (255,)
    fill = WHITE if black_strip else BLACK
    if config.color is TimestampColor.TRANSPARENT_WHITE_TEXT:
        fill = WHITE

    # Only the strip's own edge of the panel is hidden by the bezel.
    base = overscan or Overscan()
    strip_overscan = Overscan(
        left=base.left,
        right=base.right,
        top=base.top if at_top else 0,
        bottom=0 if at_top else base.bottom,
    )
    layout = layout_text(font, text)
    x = text_origin(config.position, layout.width, width, strip_overscan, config.padding_horizontal)
    y_base = baseline(config.position, layout, strip_y, strip, strip_overscan, config.padding_vertical)
    draw_text(canvas, layout, x, y_base, fill, resolve_stroke(config, fill))
    return RasterImage(width, photo_height + strip, bytearray(canvas.tobytes()))


def render_timestamp(
    raster: RasterImage,
    config: Optional[TimestampConfig],
    date_taken: Optional[datetime],
    overscan: Optional[Overscan] = None,
    reduced_height: Optional[int] = None,
    assets: AssetCache = DEFAULT_ASSETS,
) -> RasterImage:
    """Draw ``date_taken`` onto a copy of ``raster``.

    Returns an unchanged copy when the timestamp is disabled or the date is
    unknown. In banner mode the result is taller than ``raster`` by the strip
    height.
    """

    if config is None or not config.enabled or date_taken is None:
        return raster.copy()

    text = date_taken.strftime(config.format)
    font = assets.font(config.font_size)
    if config.full_width_banner:
        log.debug("timestamp banner %r (%s)", text, config.position.value)
        return render_banner(raster, config, font, text, overscan, reduced_height)

    log.debug("timestamp overlay %r (%s)", text, config.position.value)
    canvas = np.frombuffer(raster.pixels, dtype=np.uint8).reshape(raster.height, raster.width, 4).copy()
    render_overlay(canvas, config, font, text, overscan)
    return RasterImage(raster.width, raster.height, bytearray(canvas.tobytes()))
