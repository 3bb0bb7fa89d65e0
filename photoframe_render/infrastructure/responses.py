from __future__ import annotations

import io

from flask import send_file

from ..processing.encode import EncodedFrame, encode_png
from ..raster import RasterImage


def send_png(raster: RasterImage):
    return send_file(io.BytesIO(encode_png(raster)), mimetype="image/png")


def send_frame(frame: EncodedFrame):
    response = send_file(
        io.BytesIO(frame.data),
        mimetype=frame.content_type,
        download_name=frame.filename,
    )
    response.headers["X-Frame-Width"] = str(frame.width)
    response.headers["X-Frame-Height"] = str(frame.height)
    return response
