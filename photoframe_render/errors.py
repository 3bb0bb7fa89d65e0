"""Exceptions raised by the rendering pipeline."""

from __future__ import annotations


class RenderError(Exception):
    """Base class for failures that abort a single render call."""


class InvalidBuffer(RenderError, ValueError):
    """Pixel buffer length does not match ``width * height * 4``."""

    def __init__(self, width: int, height: int, length: int) -> None:
        super().__init__(
            f"pixel buffer holds {length} bytes, expected {width}x{height}x4 = {width * height * 4}"
        )
        self.width = width
        self.height = height
        self.length = length


class EncodeFailure(RenderError):
    """The PNG or packed encoder could not serialise the frame."""


class InvalidPalette(RenderError, ValueError):
    """A palette-dependent step received an empty palette."""


class ConfigError(RenderError, ValueError):
    """Frame configuration could not be parsed."""
