"""Rendering stages for photo-frame panels."""

from .compose import compose, limit_source_size
from .dither import DitherAlgorithm, dither_image
from .encode import (
    EncodedFrame,
    effective_rotation,
    encode_frame,
    encode_packed4bpp,
    encode_png,
    fit_to_panel,
    rotate,
)
from .enhance import apply_adjustments
from .palette import parse_palette
from .pipeline import render_frame, render_from_scaled, render_intermediate, render_prepared
from .timestamp import banner_height_for, render_timestamp

__all__ = [
    "compose",
    "limit_source_size",
    "DitherAlgorithm",
    "dither_image",
    "EncodedFrame",
    "effective_rotation",
    "encode_frame",
    "encode_packed4bpp",
    "encode_png",
    "fit_to_panel",
    "rotate",
    "apply_adjustments",
    "parse_palette",
    "render_frame",
    "render_from_scaled",
    "render_intermediate",
    "render_prepared",
    "banner_height_for",
    "render_timestamp",
]
