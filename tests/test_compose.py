import pytest
from PIL import Image

from photoframe_render.frame import Orientation, Overscan, PanelSpec, ScalingMode
from photoframe_render.processing.compose import compose, fit_dimensions, limit_source_size
from photoframe_render.raster import WHITE, ContentRect, RasterImage

RED = (200, 30, 40, 255)


def _source(width: int, height: int, color=RED) -> RasterImage:
    return RasterImage.from_image(Image.new("RGBA", (width, height), color))


def test_without_panel_dimensions_returns_source_unchanged() -> None:
    src = _source(30, 20)

    out, rect = compose(src, PanelSpec())

    assert out == src
    assert out.pixels is not src.pixels
    assert rect == ContentRect(0, 0, 30, 20)


def test_contain_letterboxes_with_white() -> None:
    panel = PanelSpec(panel_width=800, panel_height=480)

    out, rect = compose(_source(200, 100), panel)

    assert out.size == (800, 480)
    assert rect == ContentRect(0, 40, 800, 400)
    assert out.pixel(0, 0) == WHITE
    assert out.pixel(0, 479) == WHITE
    assert out.pixel(400, 240) == RED


def test_cover_fills_the_whole_canvas() -> None:
    panel = PanelSpec(panel_width=800, panel_height=480, scaling=ScalingMode.COVER)

    out, rect = compose(_source(2048, 1536), panel)

    assert out.size == (800, 480)
    assert rect == ContentRect(0, 0, 800, 480)
    for x, y in ((0, 0), (799, 0), (0, 479), (799, 479)):
        assert out.pixel(x, y) == RED


def test_portrait_orientation_builds_tall_view() -> None:
    panel = PanelSpec(panel_width=800, panel_height=480, orientation=Orientation.PORTRAIT)

    out, _ = compose(_source(100, 100), panel)

    assert out.size == (480, 800)


def test_overscan_offsets_inner_rectangle() -> None:
    panel = PanelSpec(
        panel_width=800,
        panel_height=480,
        overscan=Overscan(left=10, right=20, top=5, bottom=15),
    )

    out, rect = compose(_source(770, 460), panel)

    assert rect == ContentRect(10, 5, 770, 460)
    assert out.pixel(9, 5) == WHITE
    assert out.pixel(10, 5) == RED
    assert out.pixel(779, 464) == RED
    assert out.pixel(780, 464) == WHITE


def test_negative_overscan_is_ignored() -> None:
    panel = PanelSpec(panel_width=100, panel_height=50, overscan=Overscan(left=-10, top=-3))

    _, rect = compose(_source(100, 50), panel)

    assert rect == ContentRect(0, 0, 100, 50)


@pytest.mark.parametrize("size", [(13, 97), (640, 480), (3000, 200), (1, 1)])
@pytest.mark.parametrize("scaling", list(ScalingMode))
def test_content_rect_stays_inside_canvas(size, scaling) -> None:
    panel = PanelSpec(
        panel_width=300,
        panel_height=200,
        scaling=scaling,
        overscan=Overscan(left=7, right=3, top=11, bottom=2),
    )

    out, rect = compose(_source(*size), panel)

    assert rect.x + rect.width <= out.width
    assert rect.y + rect.height <= out.height
    inner_w, inner_h = 300 - 10, 200 - 13
    assert rect.width <= inner_w and rect.height <= inner_h
    if scaling is ScalingMode.CONTAIN:
        assert rect.width == inner_w or rect.height == inner_h


def test_reduced_height_shrinks_view() -> None:
    panel = PanelSpec(panel_width=800, panel_height=480, scaling=ScalingMode.COVER)

    out, rect = compose(_source(400, 300), panel, reduced_height=440)

    assert out.size == (800, 440)
    assert rect == ContentRect(0, 0, 800, 440)


def test_transparent_source_is_blended_onto_white() -> None:
    panel = PanelSpec(panel_width=10, panel_height=10)

    out, _ = compose(_source(10, 10, color=(0, 0, 0, 0)), panel)

    assert out.pixel(5, 5) == WHITE


def test_fit_dimensions() -> None:
    assert fit_dimensions(200, 100, 800, 480) == (800, 400)
    assert fit_dimensions(2048, 1536, 800, 480, fill=True) == (800, 600)
    assert fit_dimensions(1000, 1, 10, 10) == (10, 1)


def test_limit_source_size() -> None:
    big = Image.new("RGBA", (4000, 3000))

    assert limit_source_size(big, 1000, 1000).size == (1000, 750)
    assert limit_source_size(big, 0, 0) is big
    assert limit_source_size(big, 0, 1500).size == (2000, 1500)
    assert limit_source_size(big, 5000, 5000) is big
