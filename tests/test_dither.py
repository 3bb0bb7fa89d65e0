import numpy as np
import pytest

from photoframe_render.assets import AssetCache, BlueNoiseMask
from photoframe_render.errors import InvalidBuffer
from photoframe_render.processing.dither import (
    BAYER_2,
    BAYER_4,
    BAYER_8,
    DitherAlgorithm,
    dither_image,
    to_u8_clamped,
    yliluoma2_plan,
    yliluoma2_plans,
)
from photoframe_render.processing.palette import palette_lumas_scaled

PALETTE = [(0, 0, 0), (255, 255, 255), (255, 0, 0), (0, 255, 0), (0, 0, 255)]
BLACK_WHITE = [(0, 0, 0), (255, 255, 255)]


@pytest.fixture(scope="module")
def assets() -> AssetCache:
    values = bytes((x * 16 + y * 4) % 256 for y in range(16) for x in range(16))
    return AssetCache(blue_noise=BlueNoiseMask(16, 16, values))


def _gradient(width: int = 16, height: int = 16) -> bytearray:
    pixels = bytearray()
    for y in range(height):
        for x in range(width):
            pixels += bytes((x * 16, y * 16, (x + y) * 8, 255 - x - y))
    return pixels


def _rgb_set(pixels: bytearray):
    return {tuple(pixels[i : i + 3]) for i in range(0, len(pixels), 4)}


@pytest.mark.parametrize("algorithm", [algo.value for algo in DitherAlgorithm] + [None, "unknown"])
def test_output_uses_only_palette_colors(algorithm, assets) -> None:
    pixels = _gradient()
    alphas = pixels[3::4]

    dither_image(pixels, 16, 16, PALETTE, algorithm, assets=assets)

    assert _rgb_set(pixels) <= set(PALETTE)
    assert pixels[3::4] == alphas


def test_blue_noise_with_packaged_mask() -> None:
    pixels = _gradient()

    dither_image(pixels, 16, 16, PALETTE, "blue_noise_256")

    assert _rgb_set(pixels) <= set(PALETTE)


def test_empty_palette_or_buffer_is_a_no_op() -> None:
    pixels = _gradient()
    original = bytes(pixels)

    dither_image(pixels, 16, 16, [], "floyd_steinberg")
    assert bytes(pixels) == original

    empty = bytearray()
    dither_image(empty, 0, 0, PALETTE, "floyd_steinberg")
    assert empty == bytearray()


def test_length_mismatch_raises() -> None:
    with pytest.raises(InvalidBuffer):
        dither_image(bytearray(15), 2, 2, PALETTE, "stucki")


@pytest.mark.parametrize(
    "name, expected",
    [
        ("floyd_steinberg", DitherAlgorithm.FLOYD_STEINBERG),
        ("Floyd-Steinberg", DitherAlgorithm.FLOYD_STEINBERG),
        ("fs", DitherAlgorithm.FLOYD_STEINBERG),
        ("jarvis", DitherAlgorithm.JARVIS_JUDICE_NINKE),
        ("sierra lite", DitherAlgorithm.SIERRA_1),
        ("bayer-4", DitherAlgorithm.ORDERED_BAYER_4),
        ("ORDERED_BAYER_8", DitherAlgorithm.ORDERED_BAYER_8),
        ("blue_noise_256", DitherAlgorithm.ORDERED_BLUE_256),
        ("stark_8", DitherAlgorithm.STARK),
        ("yliluoma2_8", DitherAlgorithm.YLILUOMA2),
        ("nope", None),
        ("", None),
        (None, None),
    ],
)
def test_resolve(name, expected) -> None:
    assert DitherAlgorithm.resolve(name) is expected


def test_to_u8_clamped_rounds_half_to_even() -> None:
    values = np.array([0.5, 1.5, 2.5, 3.5, -3.0, 254.5, 300.0], dtype=np.float32)

    assert to_u8_clamped(values).tolist() == [0, 2, 2, 4, 0, 254, 255]


@pytest.mark.parametrize("matrix", [BAYER_2, BAYER_4, BAYER_8])
def test_bayer_thresholds_are_normalized(matrix) -> None:
    assert matrix.min() == pytest.approx(-0.5)
    assert matrix.max() == pytest.approx(0.5)
    assert len(np.unique(matrix)) == matrix.size


@pytest.mark.parametrize(
    "algorithm", ["floyd_steinberg", "atkinson", "stark", "yliluoma1", "yliluoma2", None]
)
def test_palette_colored_image_is_a_fixed_point(algorithm, assets) -> None:
    pixels = bytearray()
    for i in range(64):
        pixels += bytes(PALETTE[i % len(PALETTE)]) + b"\xff"
    original = bytes(pixels)

    dither_image(pixels, 8, 8, PALETTE, algorithm, assets=assets)

    assert bytes(pixels) == original


@pytest.mark.parametrize("algorithm", ["floyd_steinberg", "stucki", "ordered_bayer_4", "yliluoma2"])
def test_mid_gray_mixes_black_and_white(algorithm, assets) -> None:
    pixels = bytearray(bytes((128, 128, 128, 255)) * 64)

    dither_image(pixels, 8, 8, BLACK_WHITE, algorithm, assets=assets)

    counts = {color: 0 for color in BLACK_WHITE}
    for i in range(0, len(pixels), 4):
        counts[tuple(pixels[i : i + 3])] += 1
    assert counts[(0, 0, 0)] > 0
    assert counts[(255, 255, 255)] > 0


def test_nearest_mapping_without_algorithm() -> None:
    pixels = bytearray((100, 100, 100, 7, 200, 200, 200, 9))

    dither_image(pixels, 2, 1, BLACK_WHITE)

    assert pixels == bytearray((0, 0, 0, 7, 255, 255, 255, 9))


def test_nearest_mapping_breaks_luma_ties_by_rgb_distance() -> None:
    # Lumas 100.0 and 100.003 fall inside the dead zone, so RGB distance decides.
    palette = [(100, 100, 100), (112, 97, 84)]
    pixels = bytearray((111, 97, 84, 255))

    dither_image(pixels, 1, 1, palette)

    assert tuple(pixels[:3]) == (112, 97, 84)


def test_yliluoma2_plan_is_full_and_sorted() -> None:
    lumas = palette_lumas_scaled(PALETTE)

    plan = yliluoma2_plan((128, 64, 32), PALETTE, lumas)

    assert len(plan) == len(PALETTE)
    assert [lumas[i] for i in plan] == sorted(lumas[i] for i in plan)
    assert yliluoma2_plan((255, 255, 255), BLACK_WHITE, palette_lumas_scaled(BLACK_WHITE)) == [1, 1]


def _greedy_plan(color, palette, lumas):
    """One-colour-at-a-time Yliluoma 2 search, used as the reference for the batched one."""
    size = len(palette)
    plan = []
    so_far = [0, 0, 0]
    while len(plan) < size:
        total = len(plan)
        chosen, chosen_amount, least = 0, 1, float("inf")
        for index, entry in enumerate(palette):
            sums = list(so_far)
            add = list(entry)
            p = 1
            while p <= max(1, total):
                sums = [s + a for s, a in zip(sums, add)]
                add = [a * 2 for a in add]
                mixed = [min(255, s // (total + p)) for s in sums]
                d = [c - m for c, m in zip(color, mixed)]
                penalty = d[0] * d[0] * 0.299 + d[1] * d[1] * 0.587 + d[2] * d[2] * 0.114
                if penalty < least:
                    least, chosen, chosen_amount = penalty, index, p
                p *= 2
        plan.extend([chosen] * min(chosen_amount, size - total))
        so_far = [s + c * chosen_amount for s, c in zip(so_far, palette[chosen])]
    return sorted(plan, key=lambda idx: lumas[idx])


@pytest.mark.parametrize(
    "palette",
    [
        PALETTE,
        [(0, 0, 0), (255, 255, 255), (255, 255, 0), (255, 0, 0), (0, 0, 255), (0, 255, 0)],
        [(v * 17, (v * 53) % 256, 255 - v * 17) for v in range(16)],
    ],
)
def test_batched_yliluoma2_plans_match_per_color_search(palette) -> None:
    lumas = palette_lumas_scaled(palette)
    rng = np.random.default_rng(7)
    colors = rng.integers(0, 256, size=(40, 3), dtype=np.int64)
    colors[:3] = [(0, 0, 0), (255, 255, 255), (128, 128, 128)]

    plans = yliluoma2_plans(colors, palette, lumas)

    assert plans.shape == (len(colors), len(palette))
    for color, plan in zip(colors.tolist(), plans.tolist()):
        assert plan == _greedy_plan(color, palette, lumas)
