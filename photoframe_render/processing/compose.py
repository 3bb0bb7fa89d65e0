from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

from PIL import Image

from ..frame import PanelSpec, ScalingMode
from ..raster import WHITE, ContentRect, RasterImage

log = logging.getLogger(__name__)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def fit_dimensions(width: int, height: int, box_w: int, box_h: int, fill: bool = False) -> Tuple[int, int]:
    """Scaled size of a ``width x height`` image fitted into (or filling) a box.

    Aspect ratio is preserved and neither side drops below one pixel.
    """

    w_ratio = box_w / width
    h_ratio = box_h / height
    ratio = max(w_ratio, h_ratio) if fill else min(w_ratio, h_ratio)
    return max(1, _round_half_up(width * ratio)), max(1, _round_half_up(height * ratio))


def resize_contain(img: Image.Image, box_w: int, box_h: int) -> Image.Image:
    size = fit_dimensions(img.width, img.height, box_w, box_h)
    if size == img.size:
        return img.copy()
    return img.resize(size, Image.Resampling.BILINEAR)


def resize_cover(img: Image.Image, box_w: int, box_h: int) -> Image.Image:
    width, height = fit_dimensions(img.width, img.height, box_w, box_h, fill=True)
    scaled = img if (width, height) == img.size else img.resize((width, height), Image.Resampling.BILINEAR)
    left = max(0, (width - box_w) // 2)
    top = max(0, (height - box_h) // 2)
    return scaled.crop((left, top, left + min(box_w, width), top + min(box_h, height)))


def _clip_rect(x: int, y: int, width: int, height: int, canvas_w: int, canvas_h: int) -> ContentRect:
    # Overscan wider than the view pushes content off the canvas.
    x = min(x, canvas_w)
    y = min(y, canvas_h)
    return ContentRect(x, y, min(width, canvas_w - x), min(height, canvas_h - y))


def compose(
    source: RasterImage, panel: PanelSpec, reduced_height: Optional[int] = None
) -> Tuple[RasterImage, ContentRect]:
    """Scale ``source`` onto a white canvas the size of the panel view.

    ``reduced_height`` replaces the view height when part of the panel is
    reserved for a timestamp banner. Returns the canvas and the rectangle the
    photo occupies on it. Without panel dimensions the source is returned
    unchanged.
    """

    view = panel.view_size(reduced_height)
    if view is None:
        return source.copy(), ContentRect.whole(source)

    view_w, view_h = view
    pad_left, pad_right, pad_top, pad_bottom = panel.overscan.clamped()
    inner_w = max(1, view_w - (pad_left + pad_right))
    inner_h = max(1, view_h - (pad_top + pad_bottom))

    img = source.to_image()
    if panel.scaling is ScalingMode.COVER:
        resized = resize_cover(img, inner_w, inner_h)
    else:
        resized = resize_contain(img, inner_w, inner_h)

    off_x = max(0, (inner_w - resized.width) // 2)
    off_y = max(0, (inner_h - resized.height) // 2)

    inner = Image.new("RGBA", (inner_w, inner_h), WHITE)
    inner.alpha_composite(resized, (off_x, off_y))
    canvas = Image.new("RGBA", (view_w, view_h), WHITE)
    canvas.paste(inner, (pad_left, pad_top))

    rect = _clip_rect(pad_left + off_x, pad_top + off_y, resized.width, resized.height, view_w, view_h)
    log.debug(
        "composed %dx%d source onto %dx%d view (%s), content %s",
        source.width,
        source.height,
        view_w,
        view_h,
        panel.scaling.value,
        rect,
    )
    return RasterImage.from_image(canvas), rect


def limit_source_size(image: Image.Image, max_width: int, max_height: int) -> Image.Image:
    """Shrink ``image`` to fit within the limits; a zero limit leaves that side unbounded."""
    if max_width <= 0 and max_height <= 0:
        return image
    box_w = max_width if max_width > 0 else image.width
    box_h = max_height if max_height > 0 else image.height
    if image.width <= box_w and image.height <= box_h:
        return image
    size = fit_dimensions(image.width, image.height, box_w, box_h)
    log.debug("limiting source %dx%d to %dx%d", image.width, image.height, size[0], size[1])
    return image.resize(size, Image.Resampling.BICUBIC)
