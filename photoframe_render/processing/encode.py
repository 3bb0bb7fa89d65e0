from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
from PIL import Image

from ..config import DEVICE_COLORS
from ..errors import EncodeFailure, InvalidPalette
from ..frame import OutputFormat, PackingFlags, PanelSpec
from ..raster import WHITE, RasterImage
from .palette import RGB, rgb_distance

log = logging.getLogger(__name__)

MAX_PACKED_COLORS = 16

# Degrees clockwise -> Pillow transpose (which counts counter-clockwise).
_TRANSPOSE = {
    90: Image.Transpose.ROTATE_270,
    180: Image.Transpose.ROTATE_180,
    270: Image.Transpose.ROTATE_90,
}

_CONTENT_TYPES = {
    OutputFormat.PNG: ("image/png", "image.png"),
    OutputFormat.PACKED_4BPP: ("application/octet-stream", "image.bin"),
}


@dataclass(frozen=True)
class EncodedFrame:
    data: bytes
    content_type: str
    width: int
    height: int
    output_format: OutputFormat = OutputFormat.PNG

    @property
    def filename(self) -> str:
        return _CONTENT_TYPES[self.output_format][1]


def effective_rotation(view_size: Tuple[int, int], panel: PanelSpec) -> int:
    """Clockwise degrees that turn a ``view_size`` image into the panel's native layout."""
    rotation = 0
    native = panel.native_size
    if native is not None:
        width, height = view_size
        if (width, height) != native and (height, width) == native:
            rotation = 270
    if panel.flip:
        rotation = (rotation + 180) % 360
    return rotation


def rotate(raster: RasterImage, degrees: int) -> RasterImage:
    if degrees == 0:
        return raster.copy()
    method = _TRANSPOSE.get(degrees)
    if method is None:
        log.warning("unsupported rotation %s; skipping", degrees)
        return raster.copy()
    return RasterImage.from_image(raster.to_image().transpose(method))


def fit_to_panel(raster: RasterImage, panel: PanelSpec) -> RasterImage:
    """Centre ``raster`` on a white canvas of the native panel size; never scales."""
    native = panel.native_size
    if native is None or raster.size == native:
        return raster.copy()
    panel_w, panel_h = native
    canvas = Image.new("RGBA", native, WHITE)
    dx = max(0, (panel_w - raster.width) // 2)
    dy = max(0, (panel_h - raster.height) // 2)
    canvas.alpha_composite(raster.to_image(), (dx, dy))
    return RasterImage.from_image(canvas)


def encode_png(raster: RasterImage) -> bytes:
    buffer = io.BytesIO()
    try:
        raster.to_image().save(buffer, "PNG")
    except (OSError, ValueError) as exc:
        raise EncodeFailure(f"png encode failed: {exc}") from exc
    return buffer.getvalue()


def build_nibble_table(palette: Sequence[RGB]) -> List[int]:
    """Device nibble for each palette entry, from the nearest known panel colour."""
    if not palette:
        raise InvalidPalette("cannot map an empty palette to device colours")
    table = []
    for color in palette:
        best_nibble = DEVICE_COLORS[0][1]
        best_distance = None
        for known, nibble in DEVICE_COLORS:
            distance = rgb_distance(color, known)
            if best_distance is None or distance < best_distance:
                best_distance = distance
                best_nibble = nibble
        table.append(best_nibble)
    return table


def _palette_codes(rgb: np.ndarray, palette: Sequence[RGB]) -> np.ndarray:
    table = np.asarray(build_nibble_table(palette), dtype=np.uint8) & 0x0F
    colors = np.asarray(palette, dtype=np.int32)
    flat = rgb.reshape(-1, 3).astype(np.int32)
    # Exact matches have distance zero, so argmin also covers the short-circuit.
    best = np.empty(len(flat), dtype=np.intp)
    step = 1 << 16
    for start in range(0, len(flat), step):
        diff = flat[start : start + step, None, :] - colors[None, :, :]
        best[start : start + step] = np.argmin((diff * diff).sum(axis=-1), axis=-1)
    return table[best].reshape(rgb.shape[:2])


def _luma_codes(rgb: np.ndarray) -> np.ndarray:
    values = rgb.astype(np.float32)
    luma = np.float32(0.299) * values[..., 0] + np.float32(0.587) * values[..., 1] + np.float32(0.114) * values[..., 2]
    level = np.floor(luma + np.float32(0.5)).astype(np.uint16)
    return ((level * 15) // 255).astype(np.uint8) & 0x0F


def encode_packed4bpp(
    raster: RasterImage, palette: Optional[Sequence[RGB]], flags: PackingFlags = PackingFlags()
) -> bytes:
    """Two 4-bit codes per byte in traversal order, each row flushed on its own.

    With a palette every pixel becomes the device nibble of its nearest entry;
    without one it becomes a 16-level grey.
    """

    palette = list(palette or ())
    if len(palette) > MAX_PACKED_COLORS:
        log.warning(
            "%d supported colors configured; only the first %d are used for 4bpp",
            len(palette),
            MAX_PACKED_COLORS,
        )
        palette = palette[:MAX_PACKED_COLORS]

    rgb = np.frombuffer(raster.pixels, dtype=np.uint8).reshape(raster.height, raster.width, 4)[..., :3]
    if flags.reverse_rows:
        rgb = rgb[::-1]
    if flags.reverse_cols:
        rgb = rgb[:, ::-1]

    codes = _palette_codes(rgb, palette) if palette else _luma_codes(rgb)
    height, width = codes.shape
    even = width - (width % 2)
    pairs = codes[:, :even].reshape(height, even // 2, 2)
    if flags.swap_nibbles:
        packed = (pairs[..., 1] << 4) | pairs[..., 0]
    else:
        packed = (pairs[..., 0] << 4) | pairs[..., 1]

    if width % 2:
        last = codes[:, -1]
        tail = last & 0x0F if flags.swap_nibbles else last << 4
        packed = np.concatenate([packed, tail[:, None]], axis=1)
    return packed.astype(np.uint8).tobytes()


def encode_frame(
    raster: RasterImage,
    panel: PanelSpec,
    output_format: OutputFormat = OutputFormat.PNG,
    palette: Optional[Sequence[RGB]] = None,
    flags: PackingFlags = PackingFlags(),
) -> EncodedFrame:
    """Rotate to native orientation, pad to native size and serialise."""
    rotation = effective_rotation(raster.size, panel)
    native = fit_to_panel(rotate(raster, rotation), panel)
    log.debug(
        "encoding %s: view %dx%d, rotation %d, native %dx%d",
        output_format.value,
        raster.width,
        raster.height,
        rotation,
        native.width,
        native.height,
    )

    if output_format is OutputFormat.PACKED_4BPP:
        data = encode_packed4bpp(native, palette, flags)
    else:
        data = encode_png(native)
    content_type, _ = _CONTENT_TYPES[output_format]
    return EncodedFrame(data, content_type, native.width, native.height, output_format)

