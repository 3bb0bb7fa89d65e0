from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from PIL import Image

from .errors import InvalidBuffer

WHITE: Tuple[int, int, int, int] = (255, 255, 255, 255)


class RasterImage:
    """RGBA8 pixels in row-major order, four bytes per pixel.

    Every pipeline stage hands a fresh ``RasterImage`` to the next one, so the
    buffer is never shared between stages.
    """

    __slots__ = ("width", "height", "pixels")

    def __init__(self, width: int, height: int, pixels: bytearray) -> None:
        if len(pixels) != width * height * 4:
            raise InvalidBuffer(width, height, len(pixels))
        self.width = width
        self.height = height
        self.pixels = pixels if isinstance(pixels, bytearray) else bytearray(pixels)

    @classmethod
    def from_image(cls, img: Image.Image) -> "RasterImage":
        rgba = img if img.mode == "RGBA" else img.convert("RGBA")
        width, height = rgba.size
        return cls(width, height, bytearray(rgba.tobytes()))

    @classmethod
    def blank(cls, width: int, height: int, color: Tuple[int, int, int, int] = WHITE) -> "RasterImage":
        return cls(width, height, bytearray(bytes(color) * (width * height)))

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def to_image(self) -> Image.Image:
        return Image.frombytes("RGBA", (self.width, self.height), bytes(self.pixels))

    def copy(self) -> "RasterImage":
        return RasterImage(self.width, self.height, bytearray(self.pixels))

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        i = (y * self.width + x) * 4
        r, g, b, a = self.pixels[i : i + 4]
        return r, g, b, a

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RasterImage):
            return NotImplemented
        return self.size == other.size and self.pixels == other.pixels

    def __repr__(self) -> str:
        return f"RasterImage({self.width}x{self.height})"


@dataclass(frozen=True)
class ContentRect:
    """Part of a padded canvas that holds scaled photo content."""

    x: int
    y: int
    width: int
    height: int

    @classmethod
    def whole(cls, raster: RasterImage) -> "ContentRect":
        return cls(0, 0, raster.width, raster.height)

    @property
    def box(self) -> Tuple[int, int, int, int]:
        return self.x, self.y, self.x + self.width, self.y + self.height

    def fits(self, width: int, height: int) -> bool:
        return (
            self.width > 0
            and self.height > 0
            and self.x + self.width <= width
            and self.y + self.height <= height
        )
