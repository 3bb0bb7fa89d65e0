import io
import json

import pytest
from PIL import Image

from photoframe_render.app import create_app


@pytest.fixture()
def client():
    app = create_app()
    app.config.update(TESTING=True)
    return app.test_client()


def _upload(frame=None, size=(40, 30)):
    buffer = io.BytesIO()
    Image.new("RGB", size, (30, 120, 200)).save(buffer, "PNG")
    buffer.seek(0)
    data = {"file": (buffer, "photo.png")}
    if frame is not None:
        data["frame"] = json.dumps(frame)
    return data


def test_health(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.get_json()["ok"] is True


def test_algorithms_lists_names_and_aliases(client) -> None:
    payload = client.get("/algorithms").get_json()

    assert "floyd_steinberg" in payload["algorithms"]
    assert "yliluoma2" in payload["algorithms"]
    assert payload["aliases"]["fs"] == "floyd_steinberg"


def test_render_png(client) -> None:
    frame = {"panel_width": 16, "panel_height": 8, "supported_colors": ["black", "white"]}

    response = client.post("/render", data=_upload(frame), content_type="multipart/form-data")

    assert response.status_code == 200
    assert response.mimetype == "image/png"
    assert "image.png" in response.headers["Content-Disposition"]
    with Image.open(io.BytesIO(response.data)) as img:
        assert img.size == (16, 8)


def test_render_packed(client) -> None:
    frame = {
        "panel_width": 16,
        "panel_height": 8,
        "supported_colors": ["black", "white", "red"],
        "dithering": "stucki",
        "output_format": "packed4bpp",
    }

    response = client.post("/render", data=_upload(frame), content_type="multipart/form-data")

    assert response.status_code == 200
    assert response.mimetype == "application/octet-stream"
    assert len(response.data) == 64
    assert response.headers["X-Frame-Width"] == "16"


def test_preview_and_intermediate_return_png(client) -> None:
    frame = {"panel_width": 20, "panel_height": 10}

    for path in ("/preview", "/intermediate"):
        response = client.post(path, data=_upload(frame), content_type="multipart/form-data")
        assert response.status_code == 200
        with Image.open(io.BytesIO(response.data)) as img:
            assert img.size == (20, 10)


def test_missing_file_is_a_bad_request(client) -> None:
    response = client.post("/render", data={}, content_type="multipart/form-data")

    assert response.status_code == 400
    assert response.get_json()["ok"] is False


def test_invalid_frame_is_a_bad_request(client) -> None:
    response = client.post(
        "/render",
        data=_upload({"scaling": "stretch"}),
        content_type="multipart/form-data",
    )

    assert response.status_code == 400
    assert "stretch" in response.get_json()["error"]


def test_undecodable_upload_is_a_bad_request(client) -> None:
    data = {"file": (io.BytesIO(b"not an image"), "photo.png")}

    response = client.post("/render", data=data, content_type="multipart/form-data")

    assert response.status_code == 400


def test_zero_font_size_is_a_bad_request(client) -> None:
    frame = {"panel_width": 20, "panel_height": 10, "timestamp": {"enabled": True, "font_size": 0}}
    data = _upload(frame)
    data["date_taken"] = "2024-01-01T12:00:00"

    response = client.post("/render", data=data, content_type="multipart/form-data")

    assert response.status_code == 400
    assert "font_size" in response.get_json()["error"]
