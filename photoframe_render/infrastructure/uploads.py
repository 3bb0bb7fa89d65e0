"""Turn multipart form data into pipeline inputs."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Mapping, Optional

from PIL import Image, UnidentifiedImageError

from ..config import SETTINGS, RenderSettings
from ..errors import ConfigError, RenderError
from ..frame import FrameConfig
from ..processing.compose import limit_source_size
from ..raster import RasterImage


class UploadError(RenderError, ValueError):
    """The request did not carry a usable image or frame description."""


def read_source(stream, settings: RenderSettings = SETTINGS) -> RasterImage:
    try:
        with Image.open(stream) as img:
            img.load()
            limited = limit_source_size(img, settings.max_source_width, settings.max_source_height)
            return RasterImage.from_image(limited)
    except (UnidentifiedImageError, OSError) as exc:
        raise UploadError(f"could not decode image: {exc}") from exc


def read_frame(form: Mapping[str, Any], args: Mapping[str, Any]) -> FrameConfig:
    """Frame table from the JSON ``frame`` form field, falling back to query arguments."""
    raw = form.get("frame")
    if raw:
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise ConfigError(f"frame is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError("frame must be a JSON object")
        return FrameConfig.from_dict(data)
    return FrameConfig.from_dict(dict(args.items()))


def read_date_taken(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise UploadError(f"date_taken must be ISO 8601, got {value!r}") from exc
