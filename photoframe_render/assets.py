"""Read-only assets shared by every render: blue-noise mask and timestamp font."""

from __future__ import annotations

import io
import logging
import threading
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from PIL import Image, ImageFont

from .config import SETTINGS
from .errors import ConfigError

log = logging.getLogger(__name__)

FontType = ImageFont.FreeTypeFont


class BlueNoiseMask:
    """Grayscale threshold mask tiled over the image by modulo indexing."""

    __slots__ = ("width", "height", "values")

    def __init__(self, width: int, height: int, values: bytes) -> None:
        if len(values) != width * height:
            raise ValueError(f"mask holds {len(values)} values, expected {width * height}")
        self.width = width
        self.height = height
        self.values = values

    @classmethod
    def from_image(cls, img: Image.Image) -> "BlueNoiseMask":
        gray = img.convert("L")
        width, height = gray.size
        return cls(width, height, gray.tobytes())


class AssetCache:
    """Loads each asset on first use and reuses it for the life of the process.

    Loading is serialised by a lock; once an asset is present it is read
    without taking the lock.
    """

    def __init__(
        self,
        blue_noise_path: Union[str, Path, None] = None,
        font_path: Union[str, Path, None] = None,
        *,
        blue_noise: Optional[BlueNoiseMask] = None,
        font_data: Optional[bytes] = None,
    ) -> None:
        self._blue_noise_path = Path(blue_noise_path or SETTINGS.blue_noise_path)
        self._font_path = font_path if font_path is not None else SETTINGS.font_path
        self._blue_noise = blue_noise
        self._font_data = font_data
        self._font_data_loaded = font_data is not None
        self._fonts: Dict[float, FontType] = {}
        self._lock = threading.Lock()

    def blue_noise(self) -> BlueNoiseMask:
        mask = self._blue_noise
        if mask is not None:
            return mask
        with self._lock:
            if self._blue_noise is None:
                with Image.open(self._blue_noise_path) as img:
                    self._blue_noise = BlueNoiseMask.from_image(img)
                log.debug(
                    "loaded blue noise mask %s (%dx%d)",
                    self._blue_noise_path,
                    self._blue_noise.width,
                    self._blue_noise.height,
                )
            return self._blue_noise

    def font(self, size: float) -> FontType:
        if size <= 0:
            raise ConfigError(f"font size must be positive, got {size!r}")
        font = self._fonts.get(size)
        if font is not None:
            return font
        with self._lock:
            font = self._fonts.get(size)
            if font is None:
                font = self._load_font(size)
                self._fonts[size] = font
            return font

    def _load_font(self, size: float) -> FontType:
        if not self._font_data_loaded:
            if self._font_path:
                self._font_data = Path(self._font_path).read_bytes()
                log.debug("loaded timestamp font %s", self._font_path)
            self._font_data_loaded = True
        if self._font_data is not None:
            return ImageFont.truetype(io.BytesIO(self._font_data), size=size)
        # Pillow ships a FreeType build of its default font from 10.1 onwards.
        return ImageFont.load_default(size=size)


def font_metrics(font: FontType) -> Tuple[int, int]:
    """Return ``(ascent, descent)`` with descent as a positive distance below the baseline."""
    ascent, descent = font.getmetrics()
    return int(ascent), int(descent)


DEFAULT_ASSETS = AssetCache()
