"""Palette reduction for RGBA8 buffers.

Error diffusion and ordered dithering work in a luma colour mode: identity RGB
values, distance is the luma-weighted squared RGB distance and error is the
raw per-channel delta. The ordered variants follow dithermark's arithmetic in
float32 (including Uint8ClampedArray half-to-even rounding) so results match
the reference renderer pixel for pixel.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from ..assets import DEFAULT_ASSETS, AssetCache
from ..errors import InvalidBuffer
from .palette import RGB, nearest_luma_index, palette_lumas_scaled

_WR = np.float32(0.299)
_WG = np.float32(0.587)
_WB = np.float32(0.114)

# Pixels handled per numpy batch; keeps (pixels x palette x 3) temporaries small.
_BAND_PIXELS = 1 << 16


class DitherAlgorithm(Enum):
    FLOYD_STEINBERG = "floyd_steinberg"
    JARVIS_JUDICE_NINKE = "jarvis_judice_ninke"
    STUCKI = "stucki"
    BURKES = "burkes"
    SIERRA_3 = "sierra_3"
    SIERRA_2 = "sierra_2"
    SIERRA_1 = "sierra_1"
    ATKINSON = "atkinson"
    REDUCED_ATKINSON = "reduced_atkinson"
    ORDERED_BAYER_2 = "ordered_bayer_2"
    ORDERED_BAYER_4 = "ordered_bayer_4"
    ORDERED_BAYER_8 = "ordered_bayer_8"
    ORDERED_BLUE_256 = "ordered_blue_256"
    STARK = "stark"
    YLILUOMA1 = "yliluoma1"
    YLILUOMA2 = "yliluoma2"

    @classmethod
    def resolve(cls, name: Optional[str]) -> Optional["DitherAlgorithm"]:
        """Map a configured name to an algorithm; ``None`` means plain nearest mapping."""
        if not name:
            return None
        normalized = name.strip().lower().replace("-", "_").replace(" ", "_")
        return ALIASES.get(normalized)


ALIASES: Dict[str, DitherAlgorithm] = {algo.value: algo for algo in DitherAlgorithm}
ALIASES.update(
    {
        "fs": DitherAlgorithm.FLOYD_STEINBERG,
        "jarvis": DitherAlgorithm.JARVIS_JUDICE_NINKE,
        "sierra_lite": DitherAlgorithm.SIERRA_1,
        "bayer_2": DitherAlgorithm.ORDERED_BAYER_2,
        "bayer_4": DitherAlgorithm.ORDERED_BAYER_4,
        "bayer_8": DitherAlgorithm.ORDERED_BAYER_8,
        "blue_256": DitherAlgorithm.ORDERED_BLUE_256,
        "blue_noise_256": DitherAlgorithm.ORDERED_BLUE_256,
        "stark_8": DitherAlgorithm.STARK,
        "yliluoma1_8": DitherAlgorithm.YLILUOMA1,
        "yliluoma2_8": DitherAlgorithm.YLILUOMA2,
    }
)


# --- error diffusion -------------------------------------------------------


@dataclass(frozen=True)
class DiffusionKernel:
    """Propagation targets ``(dx, dy, fraction)`` relative to the current pixel.

    ``length_offset`` is the widest horizontal reach, ``rows`` the number of
    error rows kept in the ring buffer (current row included).
    """

    entries: Tuple[Tuple[int, int, float], ...]
    length_offset: int
    rows: int


FLOYD_STEINBERG = DiffusionKernel(
    ((1, 0, 7 / 16), (1, 1, 1 / 16), (0, 1, 5 / 16), (-1, 1, 3 / 16)),
    length_offset=1,
    rows=2,
)
JARVIS_JUDICE_NINKE = DiffusionKernel(
    (
        (1, 0, 7 / 48), (2, 0, 5 / 48),
        (-2, 1, 3 / 48), (-1, 1, 5 / 48), (0, 1, 7 / 48), (1, 1, 5 / 48), (2, 1, 3 / 48),
        (-2, 2, 1 / 48), (-1, 2, 3 / 48), (0, 2, 5 / 48), (1, 2, 3 / 48), (2, 2, 1 / 48),
    ),
    length_offset=2,
    rows=3,
)
STUCKI = DiffusionKernel(
    (
        (1, 0, 8 / 42), (2, 0, 4 / 42),
        (-2, 1, 2 / 42), (-1, 1, 4 / 42), (0, 1, 8 / 42), (1, 1, 4 / 42), (2, 1, 2 / 42),
        (-2, 2, 1 / 42), (-1, 2, 2 / 42), (0, 2, 4 / 42), (1, 2, 2 / 42), (2, 2, 1 / 42),
    ),
    length_offset=2,
    rows=3,
)
BURKES = DiffusionKernel(
    (
        (1, 0, 8 / 32), (2, 0, 4 / 32),
        (-2, 1, 2 / 32), (-1, 1, 4 / 32), (0, 1, 8 / 32), (1, 1, 4 / 32), (2, 1, 2 / 32),
    ),
    length_offset=2,
    rows=2,
)
SIERRA_3 = DiffusionKernel(
    (
        (1, 0, 5 / 32), (2, 0, 3 / 32),
        (-2, 1, 2 / 32), (-1, 1, 4 / 32), (0, 1, 5 / 32), (1, 1, 4 / 32), (2, 1, 2 / 32),
        (-1, 2, 2 / 32), (0, 2, 3 / 32), (1, 2, 2 / 32),
    ),
    length_offset=2,
    rows=3,
)
SIERRA_2 = DiffusionKernel(
    (
        (1, 0, 4 / 16), (2, 0, 3 / 16),
        (-2, 1, 1 / 16), (-1, 1, 2 / 16), (0, 1, 3 / 16), (1, 1, 2 / 16), (2, 1, 1 / 16),
    ),
    length_offset=2,
    rows=2,
)
SIERRA_1 = DiffusionKernel(
    ((1, 0, 2 / 4), (-1, 1, 1 / 4), (0, 1, 1 / 4)),
    length_offset=1,
    rows=2,
)
# Atkinson deliberately diffuses only 6/8 of the error.
ATKINSON = DiffusionKernel(
    ((1, 0, 1 / 8), (2, 0, 1 / 8), (-1, 1, 1 / 8), (0, 1, 1 / 8), (1, 1, 1 / 8), (0, 2, 1 / 8)),
    length_offset=2,
    rows=3,
)
REDUCED_ATKINSON = DiffusionKernel(
    ((1, 0, 2 / 16), (2, 0, 1 / 16), (0, 1, 2 / 16), (1, 1, 1 / 16)),
    length_offset=2,
    rows=2,
)


def error_diffusion(
    pixels: bytearray, width: int, height: int, palette: Sequence[RGB], kernel: DiffusionKernel
) -> None:
    offset = kernel.length_offset
    stride = (width + offset * 2) * 3
    # Error rows live outside the pixel buffer; row 0 is the row being written.
    rows: List[List[float]] = [[0.0] * stride for _ in range(kernel.rows)]
    targets = [(dx * 3, dy, fraction) for dx, dy, fraction in kernel.entries if dy < kernel.rows]

    i = 0
    for _ in range(height):
        current = rows[0]
        base = offset * 3
        for _ in range(width):
            r = min(255.0, max(0.0, pixels[i] + current[base]))
            g = min(255.0, max(0.0, pixels[i + 1] + current[base + 1]))
            b = min(255.0, max(0.0, pixels[i + 2] + current[base + 2]))

            cr, cg, cb = palette[nearest_luma_index((r, g, b), palette)]
            pixels[i] = cr
            pixels[i + 1] = cg
            pixels[i + 2] = cb

            er = r - cr
            eg = g - cg
            eb = b - cb
            if er != 0.0 or eg != 0.0 or eb != 0.0:
                for dx3, dy, fraction in targets:
                    nx = base + dx3
                    if nx < 0 or nx >= stride:
                        continue
                    row = rows[dy]
                    row[nx] += er * fraction
                    row[nx + 1] += eg * fraction
                    row[nx + 2] += eb * fraction
            base += 3
            i += 4

        finished = rows.pop(0)
        finished[:] = [0.0] * stride
        rows.append(finished)


def _diffusion(kernel: DiffusionKernel) -> Callable[..., None]:
    def run(pixels: bytearray, width: int, height: int, palette: Sequence[RGB], assets: AssetCache) -> None:
        error_diffusion(pixels, width, height, palette, kernel)

    return run


# --- shared numpy helpers --------------------------------------------------


def to_u8_clamped(values: np.ndarray) -> np.ndarray:
    """Clamp to 0..255 and round halves to even, like a Uint8ClampedArray store."""
    return np.clip(np.rint(values), 0, 255)


def _rgba_view(pixels: bytearray, width: int, height: int) -> np.ndarray:
    return np.frombuffer(pixels, dtype=np.uint8).reshape(height, width, 4)


def _bands(height: int, width: int) -> Iterator[slice]:
    step = max(1, _BAND_PIXELS // max(1, width))
    for top in range(0, height, step):
        yield slice(top, min(height, top + step))


def _luma_distances(rgb: np.ndarray, palette_f32: np.ndarray) -> np.ndarray:
    """Luma-weighted squared distances, shape ``rgb.shape[:-1] + (len(palette),)``."""
    diff = rgb[..., None, :] - palette_f32
    sq = diff * diff
    return sq[..., 0] * _WR + sq[..., 1] * _WG + sq[..., 2] * _WB


def _palette_arrays(palette: Sequence[RGB]) -> Tuple[np.ndarray, np.ndarray]:
    palette_u8 = np.asarray(palette, dtype=np.uint8).reshape(-1, 3)
    return palette_u8, palette_u8.astype(np.float32)


def _tile(matrix: np.ndarray, height: int, width: int) -> np.ndarray:
    mh, mw = matrix.shape
    reps = (-(-height // mh), -(-width // mw))
    return np.tile(matrix, reps)[:height, :width]


def _unique_colors(rgb: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Distinct RGB triples (as uint8 rows) and the per-pixel index into them."""
    flat = rgb.reshape(-1, 3).astype(np.uint32)
    packed = (flat[:, 0] << 16) | (flat[:, 1] << 8) | flat[:, 2]
    unique, inverse = np.unique(packed, return_inverse=True)
    colors = np.stack(((unique >> 16) & 0xFF, (unique >> 8) & 0xFF, unique & 0xFF), axis=1)
    return colors.astype(np.uint8), inverse.reshape(-1)


# --- ordered: Bayer and blue noise -----------------------------------------

BAYER_2_INDEX = np.array([[0, 2], [3, 1]], dtype=np.uint8)
BAYER_4_INDEX = np.array(
    [
        [0, 8, 2, 10],
        [12, 4, 14, 6],
        [3, 11, 1, 9],
        [15, 7, 13, 5],
    ],
    dtype=np.uint8,
)
BAYER_8_INDEX = np.array(
    [
        [0, 32, 8, 40, 2, 34, 10, 42],
        [48, 16, 56, 24, 50, 18, 58, 26],
        [12, 44, 4, 36, 14, 46, 6, 38],
        [60, 28, 52, 20, 62, 30, 54, 22],
        [3, 35, 11, 43, 1, 33, 9, 41],
        [51, 19, 59, 27, 49, 17, 57, 25],
        [15, 47, 7, 39, 13, 45, 5, 37],
        [63, 31, 55, 23, 61, 29, 53, 21],
    ],
    dtype=np.uint8,
)


def normalized_bayer(index: np.ndarray) -> np.ndarray:
    """Thresholds in [-0.5, 0.5]: ``v / (n*n - 1) - 0.5``."""
    last = np.float32(index.size - 1)
    return index.astype(np.float32) / last - np.float32(0.5)


BAYER_2 = normalized_bayer(BAYER_2_INDEX)
BAYER_4 = normalized_bayer(BAYER_4_INDEX)
BAYER_8 = normalized_bayer(BAYER_8_INDEX)


def ordered_threshold(
    pixels: bytearray, width: int, height: int, palette: Sequence[RGB], thresholds: np.ndarray
) -> None:
    """Offset every channel by ``threshold * 256 / cbrt(len(palette))`` then snap to the palette."""
    view = _rgba_view(pixels, width, height)
    palette_u8, palette_f32 = _palette_arrays(palette)
    spread = np.float32(256.0) / np.cbrt(np.float32(max(1, len(palette))))
    tiled = _tile(thresholds, height, width)
    for rows in _bands(height, width):
        band = view[rows]
        offset = (tiled[rows] * spread)[..., None]
        probe = to_u8_clamped(band[..., :3].astype(np.float32) + offset)
        best = np.argmin(_luma_distances(probe, palette_f32), axis=-1)
        band[..., :3] = palette_u8[best]


def _bayer(matrix: np.ndarray) -> Callable[..., None]:
    def run(pixels: bytearray, width: int, height: int, palette: Sequence[RGB], assets: AssetCache) -> None:
        ordered_threshold(pixels, width, height, palette, matrix)

    return run


def ordered_blue_noise(
    pixels: bytearray, width: int, height: int, palette: Sequence[RGB], assets: AssetCache
) -> None:
    mask = assets.blue_noise()
    gray = np.frombuffer(mask.values, dtype=np.uint8).reshape(mask.height, mask.width)
    thresholds = gray.astype(np.float32) / np.float32(255.0) - np.float32(0.5)
    ordered_threshold(pixels, width, height, palette, thresholds)


# --- ordered: Stark and Yliluoma -------------------------------------------

_MIX_DIM = 8


def _bayer_index(dim: int) -> np.ndarray:
    return {2: BAYER_2_INDEX, 4: BAYER_4_INDEX}.get(dim, BAYER_8_INDEX)


def ordered_stark(
    pixels: bytearray, width: int, height: int, palette: Sequence[RGB], assets: AssetCache
) -> None:
    view = _rgba_view(pixels, width, height)
    palette_u8, palette_f32 = _palette_arrays(palette)
    index = _bayer_index(_MIX_DIM)
    coefficient = np.float32(1.0) / np.cbrt(np.float32(max(1, len(palette))))
    fraction = np.float32(1.0) / np.float32(index.size - 1)
    stark = np.float32(1.0) - index.astype(np.float32) * fraction * coefficient
    tiled = _tile(stark, height, width)

    for rows in _bands(height, width):
        band = view[rows]
        distances = _luma_distances(band[..., :3].astype(np.float32), palette_f32)
        nearest = np.argmin(distances, axis=-1)
        shortest = np.take_along_axis(distances, nearest[..., None], axis=-1)
        bayer_value = tiled[rows][..., None]
        with np.errstate(divide="ignore", invalid="ignore"):
            allowed = (distances / shortest) * bayer_value < 1.0
        # Farthest colour still inside the threshold-scaled ratio; first index wins ties.
        farthest = np.argmax(np.where(allowed, distances, -np.inf), axis=-1)
        use_farthest = allowed.any(axis=-1) & (tiled[rows] < 1.0)
        choice = np.where(use_farthest, farthest, nearest)
        band[..., :3] = palette_u8[choice]


def _yliluoma1_candidates(palette_f32: np.ndarray, matrix_len: int):
    first: List[int] = []
    second: List[int] = []
    ratios: List[int] = []
    count = len(palette_f32)
    for i1 in range(count):
        for i2 in range(i1, count):
            for ratio in range(matrix_len if i1 != i2 else 1):
                first.append(i1)
                second.append(i2)
                ratios.append(ratio)
    first_a = np.asarray(first, dtype=np.intp)
    second_a = np.asarray(second, dtype=np.intp)
    ratio_a = np.asarray(ratios, dtype=np.float32)

    c1 = palette_f32[first_a]
    c2 = palette_f32[second_a]
    length = np.float32(matrix_len)
    mixed = np.clip(np.floor(c1 + ratio_a[:, None] * (c2 - c1) / length), 0, 255)
    pair = c1 - c2
    pair_sq = pair * pair
    pair_distance = pair_sq[:, 0] * _WR + pair_sq[:, 1] * _WG + pair_sq[:, 2] * _WB
    imbalance = np.abs(ratio_a / length - np.float32(0.5)) + np.float32(0.5)
    ratio_penalty = pair_distance * np.float32(0.1) * imbalance
    return first_a, second_a, ratio_a, mixed.astype(np.float32), ratio_penalty.astype(np.float32)


def ordered_yliluoma1(
    pixels: bytearray, width: int, height: int, palette: Sequence[RGB], assets: AssetCache
) -> None:
    """Yliluoma's algorithm 1: best two-colour mix per pixel, picked by Bayer index."""
    view = _rgba_view(pixels, width, height)
    palette_u8, palette_f32 = _palette_arrays(palette)
    index = _bayer_index(_MIX_DIM)
    first, second, ratios, mixed, ratio_penalty = _yliluoma1_candidates(palette_f32, index.size)

    colors, inverse = _unique_colors(view[..., :3])
    best = np.empty(len(colors), dtype=np.intp)
    chunk = max(1, (_BAND_PIXELS * 16) // len(mixed))
    for start in range(0, len(colors), chunk):
        probe = colors[start : start + chunk].astype(np.float32)
        penalty = _luma_distances(probe, mixed) + ratio_penalty
        best[start : start + chunk] = np.argmin(penalty, axis=-1)

    pixel_best = best[inverse].reshape(height, width)
    bayer = _tile(index, height, width).astype(np.float32)
    choice = np.where(bayer < ratios[pixel_best], second[pixel_best], first[pixel_best])
    view[..., :3] = palette_u8[choice]


def yliluoma2_plans(colors: np.ndarray, palette: Sequence[RGB], palette_lumas: Sequence[int]) -> np.ndarray:
    """Mixing plans for many colours at once, shape ``(len(colors), len(palette))``.

    Every colour advances one greedy step per pass; only the palette and
    test-count loops run in Python. Each plan is sorted by luma.
    """
    size = len(palette)
    target = np.asarray(colors, dtype=np.int64).reshape(-1, 3)
    count = len(target)
    pal = np.asarray(palette, dtype=np.int64).reshape(-1, 3)
    plans = np.zeros((count, size), dtype=np.intp)
    so_far = np.zeros((count, 3), dtype=np.int64)
    total = np.zeros(count, dtype=np.int64)
    slots = np.arange(size)

    while True:
        active = total < size
        if not active.any():
            break
        max_test_count = np.maximum(1, total)
        limit = int(max_test_count[active].max())
        chosen = np.zeros(count, dtype=np.intp)
        chosen_amount = np.ones(count, dtype=np.int64)
        least_penalty = np.full(count, np.inf)
        for index in range(size):
            p = 1
            while p <= limit:
                # The addend doubles every step, so a run of p tests carries
                # 2p-1 copies; kept for parity with dithermark.
                mixed = np.minimum(255, (so_far + pal[index] * (2 * p - 1)) // (total + p)[:, None])
                diff = target - mixed
                sq = diff * diff
                penalty = sq[:, 0] * 0.299 + sq[:, 1] * 0.587 + sq[:, 2] * 0.114
                better = active & (p <= max_test_count) & (penalty < least_penalty)
                least_penalty = np.where(better, penalty, least_penalty)
                chosen = np.where(better, index, chosen)
                chosen_amount = np.where(better, p, chosen_amount)
                p *= 2
        added = np.where(active, np.minimum(chosen_amount, size - total), 0)
        fill = (slots >= total[:, None]) & (slots < (total + added)[:, None])
        plans = np.where(fill, chosen[:, None], plans)
        so_far += np.where(active[:, None], pal[chosen] * chosen_amount[:, None], 0)
        total += added

    keys = np.asarray(palette_lumas, dtype=np.int64)[plans]
    return np.take_along_axis(plans, np.argsort(keys, axis=1, kind="stable"), axis=1)


def yliluoma2_plan(color: Sequence[int], palette: Sequence[RGB], palette_lumas: Sequence[int]) -> List[int]:
    """Mixing plan of ``len(palette)`` palette indices, sorted by luma."""
    plans = yliluoma2_plans(np.asarray([color], dtype=np.int64), palette, palette_lumas)
    return [int(index) for index in plans[0]]


def ordered_yliluoma2(
    pixels: bytearray, width: int, height: int, palette: Sequence[RGB], assets: AssetCache
) -> None:
    view = _rgba_view(pixels, width, height)
    palette_u8, _ = _palette_arrays(palette)
    lumas = palette_lumas_scaled(palette)
    index = _bayer_index(_MIX_DIM)

    colors, inverse = _unique_colors(view[..., :3])
    plans = np.empty((len(colors), len(palette)), dtype=np.intp)
    for start in range(0, len(colors), _BAND_PIXELS):
        stop = start + _BAND_PIXELS
        plans[start:stop] = yliluoma2_plans(colors[start:stop], palette, lumas)
    plan_index = (_tile(index, height, width).astype(np.intp) * len(palette)) // index.size
    choice = plans[inverse, plan_index.reshape(-1)].reshape(height, width)
    view[..., :3] = palette_u8[choice]


# --- nearest mapping fallback ----------------------------------------------


def nearest_map(pixels: bytearray, width: int, height: int, palette: Sequence[RGB]) -> None:
    """Nearest colour by luma proximity; within a 0.01 luma dead zone, by RGB distance."""
    view = _rgba_view(pixels, width, height)
    palette_u8, palette_f32 = _palette_arrays(palette)
    palette_lumas = palette_f32[:, 0] * _WR + palette_f32[:, 1] * _WG + palette_f32[:, 2] * _WB
    dead_zone = np.float32(0.01)

    for rows in _bands(height, width):
        band = view[rows]
        rgb = band[..., :3].astype(np.float32)
        target = rgb[..., 0] * _WR + rgb[..., 1] * _WG + rgb[..., 2] * _WB
        best = np.zeros(target.shape, dtype=np.intp)
        best_luma = np.full(target.shape, np.inf, dtype=np.float32)
        best_distance = np.full(target.shape, np.inf, dtype=np.float32)
        for index in range(len(palette_f32)):
            delta = np.abs(target - palette_lumas[index])
            diff = rgb - palette_f32[index]
            sq = diff * diff
            distance = sq[..., 0] + sq[..., 1] + sq[..., 2]
            closer = delta < best_luma - dead_zone
            tied = ~closer & (np.abs(delta - best_luma) <= dead_zone) & (distance < best_distance)
            take = closer | tied
            best_luma = np.where(closer, delta, best_luma)
            best_distance = np.where(take, distance, best_distance)
            best = np.where(take, index, best)
        band[..., :3] = palette_u8[best]


# --- dispatch ----------------------------------------------------------------

_DISPATCH: Dict[DitherAlgorithm, Callable[..., None]] = {
    DitherAlgorithm.FLOYD_STEINBERG: _diffusion(FLOYD_STEINBERG),
    DitherAlgorithm.JARVIS_JUDICE_NINKE: _diffusion(JARVIS_JUDICE_NINKE),
    DitherAlgorithm.STUCKI: _diffusion(STUCKI),
    DitherAlgorithm.BURKES: _diffusion(BURKES),
    DitherAlgorithm.SIERRA_3: _diffusion(SIERRA_3),
    DitherAlgorithm.SIERRA_2: _diffusion(SIERRA_2),
    DitherAlgorithm.SIERRA_1: _diffusion(SIERRA_1),
    DitherAlgorithm.ATKINSON: _diffusion(ATKINSON),
    DitherAlgorithm.REDUCED_ATKINSON: _diffusion(REDUCED_ATKINSON),
    DitherAlgorithm.ORDERED_BAYER_2: _bayer(BAYER_2),
    DitherAlgorithm.ORDERED_BAYER_4: _bayer(BAYER_4),
    DitherAlgorithm.ORDERED_BAYER_8: _bayer(BAYER_8),
    DitherAlgorithm.ORDERED_BLUE_256: ordered_blue_noise,
    DitherAlgorithm.STARK: ordered_stark,
    DitherAlgorithm.YLILUOMA1: ordered_yliluoma1,
    DitherAlgorithm.YLILUOMA2: ordered_yliluoma2,
}


def dither_image(
    pixels: bytearray,
    width: int,
    height: int,
    palette: Sequence[RGB],
    algorithm: Optional[str] = None,
    assets: AssetCache = DEFAULT_ASSETS,
) -> None:
    """Reduce ``pixels`` (RGBA8, modified in place) to ``palette``.

    Alpha is preserved. An empty palette or buffer leaves the pixels untouched;
    an unknown or missing ``algorithm`` maps each pixel to its nearest colour
    without diffusion.
    """

    if len(pixels) != width * height * 4:
        raise InvalidBuffer(width, height, len(pixels))
    if not palette or not pixels:
        return
    palette = [tuple(int(c) for c in color[:3]) for color in palette]
    kind = DitherAlgorithm.resolve(algorithm)
    if kind is None:
        nearest_map(pixels, width, height, palette)
        return
    _DISPATCH[kind](pixels, width, height, palette, assets)
