from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from .assets import DEFAULT_ASSETS, AssetCache
from .config import SETTINGS, configure_logging
from .errors import RenderError
from .infrastructure.responses import send_frame, send_png
from .infrastructure.uploads import UploadError, read_date_taken, read_frame, read_source
from .processing.dither import ALIASES, DitherAlgorithm
from .processing.pipeline import encode_prepared, render_intermediate, render_prepared

APP_VERSION = "1.0.0"

log = logging.getLogger(__name__)


def _inputs():
    upload = request.files.get("file")
    if upload is None:
        raise UploadError("missing multipart part 'file'")
    source = read_source(upload.stream)
    frame = read_frame(request.form, request.args)
    date_taken = read_date_taken(request.form.get("date_taken") or request.args.get("date_taken"))
    return source, frame, date_taken


def create_app(assets: AssetCache = DEFAULT_ASSETS) -> Flask:
    configure_logging()
    app = Flask(__name__)

    @app.errorhandler(RenderError)
    def render_error(exc: RenderError):
        status = 400 if isinstance(exc, ValueError) else 500
        if status == 500:
            log.error("render failed: %s", exc)
        return jsonify(ok=False, error=str(exc)), status

    @app.route("/render", methods=["POST"])
    def render():
        source, frame, date_taken = _inputs()
        prepared = render_prepared(source, frame, date_taken, assets=assets)
        encoded = encode_prepared(prepared, frame)
        log.info(
            "rendered %s frame %dx%d (%d bytes)",
            encoded.output_format.value,
            encoded.width,
            encoded.height,
            len(encoded.data),
        )
        return send_frame(encoded)

    @app.route("/preview", methods=["POST"])
    def preview():
        source, frame, date_taken = _inputs()
        return send_png(render_prepared(source, frame, date_taken, assets=assets))

    @app.route("/intermediate", methods=["POST"])
    def intermediate():
        source, frame, _ = _inputs()
        return send_png(render_intermediate(source, frame))

    @app.route("/algorithms")
    def algorithms():
        aliases = {}
        for alias, algo in ALIASES.items():
            if alias != algo.value:
                aliases[alias] = algo.value
        return jsonify(algorithms=[algo.value for algo in DitherAlgorithm], aliases=aliases)

    @app.route("/health")
    def health():
        return jsonify(
            ok=True,
            version=APP_VERSION,
            default_dithering=SETTINGS.default_dithering or None,
            font=SETTINGS.font_path or "default",
        )

    return app
