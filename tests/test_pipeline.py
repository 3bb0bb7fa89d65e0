from datetime import datetime

from PIL import Image

from photoframe_render.assets import AssetCache
from photoframe_render.frame import FrameConfig
from photoframe_render.processing.pipeline import (
    banner_view_height,
    render_frame,
    render_from_scaled,
    render_intermediate,
    render_prepared,
)
from photoframe_render.raster import WHITE, RasterImage

PRIMARIES = ["black", "white", "yellow", "red", "blue", "#00ff00"]
TAKEN = datetime(2023, 12, 24, 9, 0)


def _photo(width: int, height: int) -> RasterImage:
    img = Image.new("RGBA", (width, height), (90, 140, 200, 255))
    img.paste((220, 180, 40, 255), (0, 0, width // 2, height // 2))
    return RasterImage.from_image(img)


def test_end_to_end_cover_packed() -> None:
    frame = FrameConfig.from_dict(
        {
            "panel_width": 800,
            "panel_height": 480,
            "orientation": "landscape",
            "scaling": "cover",
            "supported_colors": PRIMARIES,
            "dithering": "ordered_bayer_4",
            "output_format": "packed4bpp",
            "swap_nibbles": False,
        }
    )
    source = _photo(2048, 1536)

    intermediate = render_intermediate(source, frame)
    encoded = render_frame(source, frame)

    assert intermediate.size == (800, 480)
    for x, y in ((0, 0), (799, 0), (0, 479), (799, 479)):
        assert intermediate.pixel(x, y) != WHITE
    assert (encoded.width, encoded.height) == (800, 480)
    assert encoded.content_type == "application/octet-stream"
    assert len(encoded.data) == 192000
    assert {byte >> 4 for byte in encoded.data} <= {0x0, 0x1, 0x2, 0x3, 0x5, 0x6}


def test_prepared_frame_uses_palette_colors() -> None:
    frame = FrameConfig.from_dict(
        {
            "panel_width": 64,
            "panel_height": 48,
            "supported_colors": PRIMARIES,
            "dithering": "floyd_steinberg",
        }
    )
    palette = {(0, 0, 0), (255, 255, 255), (255, 255, 0), (255, 0, 0), (0, 0, 255), (0, 255, 0)}

    prepared = render_prepared(_photo(120, 90), frame)

    assert prepared.size == (64, 48)
    assert {prepared.pixel(x, y)[:3] for y in range(48) for x in range(64)} <= palette


def test_without_palette_prepared_matches_intermediate() -> None:
    frame = FrameConfig.from_dict({"panel_width": 64, "panel_height": 48})
    source = _photo(30, 30)

    assert render_prepared(source, frame) == render_intermediate(source, frame)


def test_banner_reserves_space_inside_panel() -> None:
    frame = FrameConfig.from_dict(
        {
            "panel_width": 480,
            "panel_height": 800,
            "orientation": "portrait",
            "scaling": "cover",
            "timestamp": {
                "enabled": True,
                "full_width_banner": True,
                "position": "bottom_left",
                "color": "black_background",
            },
        }
    )
    assets = AssetCache(font_path="")

    assert banner_view_height(frame, TAKEN) == 760
    assert banner_view_height(frame, None) is None

    prepared = render_prepared(_photo(300, 400), frame, TAKEN, assets=assets)

    assert prepared.size == (480, 800)
    assert prepared.pixel(0, 759)[:3] != (0, 0, 0)
    assert prepared.pixel(0, 760) == (0, 0, 0, 255)
    assert prepared.pixel(479, 799) == (0, 0, 0, 255)


def test_banner_without_date_uses_full_panel() -> None:
    frame = FrameConfig.from_dict(
        {
            "panel_width": 200,
            "panel_height": 100,
            "scaling": "cover",
            "timestamp": {"enabled": True, "full_width_banner": True},
        }
    )

    prepared = render_prepared(_photo(200, 100), frame, None)

    assert prepared.size == (200, 100)
    assert prepared.pixel(199, 99) != WHITE


def test_render_from_scaled_keeps_geometry() -> None:
    frame = FrameConfig.from_dict(
        {
            "panel_width": 64,
            "panel_height": 48,
            "adjustments": {"brightness": 20},
            "supported_colors": "black, white",
            "dithering": "atkinson",
        }
    )
    scaled = render_intermediate(_photo(64, 48), frame)

    out = render_from_scaled(scaled, frame)

    assert out.size == scaled.size
    assert {out.pixel(x, y)[:3] for y in range(48) for x in range(64)} <= {(0, 0, 0), (255, 255, 255)}


def test_png_output_for_native_portrait_panel() -> None:
    frame = FrameConfig.from_dict({"panel_width": 48, "panel_height": 64, "orientation": "landscape"})

    encoded = render_frame(_photo(64, 48), frame)

    assert encoded.content_type == "image/png"
    assert (encoded.width, encoded.height) == (48, 64)
