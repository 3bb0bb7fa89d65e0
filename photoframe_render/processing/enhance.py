from __future__ import annotations

from typing import Optional

import numpy as np
from PIL import Image, ImageFilter

from ..frame import Adjustments
from ..raster import ContentRect, RasterImage


def contrast_factor(contrast: float) -> float:
    c = min(255.0, max(-255.0, contrast))
    if abs(c) < 0.01:
        return 1.0
    return (259.0 * (c + 255.0)) / (255.0 * (259.0 - c))


def adjust_colors(rgba: np.ndarray, adjustments: Adjustments) -> np.ndarray:
    """Brightness, contrast and saturation on an ``(h, w, 4)`` uint8 array; alpha untouched."""
    offset = np.float32(min(255.0, max(-255.0, adjustments.brightness)))
    factor = np.float32(contrast_factor(adjustments.contrast))
    saturation = np.float32(min(1.0, max(-1.0, adjustments.saturation * 4.0)))

    rgb = rgba[..., :3].astype(np.float32)
    rgb += offset
    rgb = (rgb - np.float32(128.0)) * factor + np.float32(128.0)
    if abs(saturation) > 0.001:
        luma = (
            np.float32(0.299) * rgb[..., 0]
            + np.float32(0.587) * rgb[..., 1]
            + np.float32(0.114) * rgb[..., 2]
        )[..., None]
        rgb = luma + (rgb - luma) * (np.float32(1.0) + saturation)

    out = rgba.copy()
    # Clamp first, then truncate toward zero.
    out[..., :3] = np.clip(rgb, 0.0, 255.0).astype(np.uint8)
    return out


def sharpen(img: Image.Image, sharpness: float) -> Image.Image:
    """Unsharp mask for positive ``sharpness``, Gaussian blur for negative; range -5..5."""
    if abs(sharpness) < 0.01:
        return img
    clamped = min(5.0, max(-5.0, sharpness))
    amount = min(1.0, abs(clamped) / 5.0)
    sigma = 0.8 + amount * 1.6
    if clamped > 0:
        return img.filter(ImageFilter.UnsharpMask(radius=sigma, percent=100, threshold=1))
    return img.filter(ImageFilter.GaussianBlur(radius=sigma))


def apply_adjustments(
    raster: RasterImage, adjustments: Optional[Adjustments], rect: Optional[ContentRect] = None
) -> RasterImage:
    """Return an adjusted copy of ``raster``.

    Colour changes are limited to ``rect`` (the whole image when omitted) so
    letterbox padding stays white; sharpness applies to the full canvas.
    """

    if adjustments is None:
        return raster.copy()
    rect = rect or ContentRect.whole(raster)

    pixels = np.frombuffer(raster.pixels, dtype=np.uint8).reshape(raster.height, raster.width, 4).copy()
    if rect.fits(raster.width, raster.height):
        left, top, right, bottom = rect.box
        region = (slice(top, bottom), slice(left, right))
        pixels[region] = adjust_colors(pixels[region], adjustments)

    out = RasterImage(raster.width, raster.height, bytearray(pixels.tobytes()))
    if abs(adjustments.sharpness) < 0.01:
        return out
    return RasterImage.from_image(sharpen(out.to_image(), adjustments.sharpness))
