"""Stage wiring: compose -> adjust -> timestamp -> quantize -> encode."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ..assets import DEFAULT_ASSETS, AssetCache
from ..config import SETTINGS
from ..frame import FrameConfig
from ..raster import RasterImage
from .compose import compose
from .dither import dither_image
from .encode import EncodedFrame, encode_frame
from .enhance import apply_adjustments
from .palette import Palette, parse_palette
from .timestamp import banner_height_for, render_timestamp

log = logging.getLogger(__name__)


def frame_palette(frame: FrameConfig) -> Palette:
    return parse_palette(frame.supported_colors)


def dithering_name(frame: FrameConfig) -> Optional[str]:
    return frame.dithering or SETTINGS.default_dithering or None


def banner_view_height(frame: FrameConfig, date_taken: Optional[datetime]) -> Optional[int]:
    """View height left for the photo when a banner timestamp will be drawn."""
    ts = frame.timestamp
    if ts is None or not ts.enabled or not ts.full_width_banner or date_taken is None:
        return None
    view = frame.panel.view_size()
    if view is None:
        return None
    return max(1, view[1] - banner_height_for(ts))


def _quantize(raster: RasterImage, frame: FrameConfig, assets: AssetCache) -> RasterImage:
    palette = frame_palette(frame)
    if not palette:
        return raster
    dither_image(raster.pixels, raster.width, raster.height, palette, dithering_name(frame), assets=assets)
    return raster


def render_intermediate(source: RasterImage, frame: FrameConfig) -> RasterImage:
    """Scaled and padded canvas, before any colour work."""
    composed, _ = compose(source, frame.panel)
    return composed


def render_prepared(
    source: RasterImage,
    frame: FrameConfig,
    date_taken: Optional[datetime] = None,
    assets: AssetCache = DEFAULT_ASSETS,
) -> RasterImage:
    """Final RGBA in view orientation, ready for the encoder."""
    reduced_height = banner_view_height(frame, date_taken)
    composed, rect = compose(source, frame.panel, reduced_height)
    log.debug(
        "render %dx%d -> %dx%d content=%s banner=%s dithering=%s",
        source.width,
        source.height,
        composed.width,
        composed.height,
        rect,
        reduced_height is not None,
        dithering_name(frame),
    )
    adjusted = apply_adjustments(composed, frame.adjustments, rect)
    stamped = render_timestamp(adjusted, frame.timestamp, date_taken, frame.panel.overscan, assets=assets)
    return _quantize(stamped, frame, assets)


def render_from_scaled(
    scaled: RasterImage,
    frame: FrameConfig,
    date_taken: Optional[datetime] = None,
    assets: AssetCache = DEFAULT_ASSETS,
) -> RasterImage:
    """Re-render from a saved intermediate; banner space is not reserved here."""
    log.debug(
        "render from scaled %dx%d dithering=%s", scaled.width, scaled.height, dithering_name(frame)
    )
    adjusted = apply_adjustments(scaled, frame.adjustments)
    stamped = render_timestamp(adjusted, frame.timestamp, date_taken, frame.panel.overscan, assets=assets)
    return _quantize(stamped, frame, assets)


def encode_prepared(prepared: RasterImage, frame: FrameConfig) -> EncodedFrame:
    palette = frame_palette(frame)
    return encode_frame(prepared, frame.panel, frame.output_format, palette or None, frame.packing)


def render_frame(
    source: RasterImage,
    frame: FrameConfig,
    date_taken: Optional[datetime] = None,
    assets: AssetCache = DEFAULT_ASSETS,
) -> EncodedFrame:
    prepared = render_prepared(source, frame, date_taken, assets)
    return encode_prepared(prepared, frame)
