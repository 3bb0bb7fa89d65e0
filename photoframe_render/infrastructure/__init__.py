"""Flask-facing helpers for the preview service."""

from .responses import send_frame, send_png
from .uploads import UploadError, read_date_taken, read_frame, read_source

__all__ = [
    "send_frame",
    "send_png",
    "UploadError",
    "read_date_taken",
    "read_frame",
    "read_source",
]
