"""Photo-frame rendering pipeline and device encoders."""

from .app import APP_VERSION, create_app
from .frame import FrameConfig
from .raster import ContentRect, RasterImage
from . import infrastructure, processing

__version__ = APP_VERSION

__all__ = [
    "APP_VERSION",
    "__version__",
    "create_app",
    "FrameConfig",
    "ContentRect",
    "RasterImage",
    "infrastructure",
    "processing",
]
