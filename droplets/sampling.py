from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .errors import InvalidInput


@dataclass(frozen=True)
class HeightAndGradient:
    height: float
    gradient_x: float
    gradient_y: float


def flat_heights(heights: np.ndarray, map_size: int) -> np.ndarray:
    """Return a flat, writable view of ``heights`` indexed as ``y * map_size + x``.

    Accepts a 1-D array of ``map_size**2`` floats or a C-contiguous
    ``(map_size, map_size)`` array. The returned view aliases the caller's
    buffer, so writes through it mutate the original.
    """

    if not isinstance(heights, np.ndarray):
        raise InvalidInput("heights must be a numpy array")
    if not np.issubdtype(heights.dtype, np.floating):
        raise InvalidInput("heights must have a floating dtype")
    if not heights.flags.writeable:
        raise InvalidInput("heights must be writable")

    map_size = int(map_size)
    if heights.size != map_size * map_size:
        raise InvalidInput(
            f"heights has {heights.size} elements, expected {map_size * map_size}"
        )
    if heights.ndim == 1:
        return heights
    if heights.ndim != 2 or heights.shape != (map_size, map_size):
        raise InvalidInput("heights must be flat or shaped (map_size, map_size)")
    if not heights.flags.c_contiguous:
        raise InvalidInput("2D heights must be C-contiguous to be eroded in place")
    return heights.reshape(-1)


def bilinear_weights(offset_x: float, offset_y: float) -> tuple[float, float, float, float]:
    """Weights of the NW, NE, SW and SE nodes for an offset inside a cell."""

    return (
        (1.0 - offset_x) * (1.0 - offset_y),
        offset_x * (1.0 - offset_y),
        (1.0 - offset_x) * offset_y,
        offset_x * offset_y,
    )


def height_and_gradient(
    heights: np.ndarray, map_size: int, x: float, y: float
) -> HeightAndGradient:
    """Bilinearly sample height and flow gradient at a continuous position.

    The position must satisfy ``0 <= x < map_size - 1`` and
    ``0 <= y < map_size - 1``; ``heights`` is the flat view.
    The gradient blends the edge differences of the cell, so a positive
    component points uphill along that axis.
    """

    cx = int(x)
    cy = int(y)
    ox = x - cx
    oy = y - cy

    nw = cy * map_size + cx
    h_nw = float(heights[nw])
    h_ne = float(heights[nw + 1])
    h_sw = float(heights[nw + map_size])
    h_se = float(heights[nw + map_size + 1])

    gx = (h_ne - h_nw) * (1.0 - oy) + (h_se - h_sw) * oy
    gy = (h_sw - h_nw) * (1.0 - ox) + (h_se - h_ne) * ox

    w_nw, w_ne, w_sw, w_se = bilinear_weights(ox, oy)
    h = h_nw * w_nw + h_ne * w_ne + h_sw * w_sw + h_se * w_se
    return HeightAndGradient(h, gx, gy)
