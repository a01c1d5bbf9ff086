from __future__ import annotations

import logging
import threading
from dataclasses import dataclass

import numpy as np

from .errors import InvalidConfiguration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ErosionBrush:
    """Weighted circular neighborhoods for every node of a square grid.

    Neighbors of cell ``i`` are ``indices[starts[i]:starts[i + 1]]`` with the
    matching ``weights``; weights of each cell sum to 1.
    """

    map_size: int
    radius: int
    starts: np.ndarray
    indices: np.ndarray
    weights: np.ndarray

    def __len__(self) -> int:
        return int(self.starts.shape[0]) - 1

    def neighbors(self, index: int) -> tuple[np.ndarray, np.ndarray]:
        a = int(self.starts[index])
        b = int(self.starts[index + 1])
        return self.indices[a:b], self.weights[a:b]


def brush_offsets(radius: int) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Offsets strictly inside a circle of ``radius`` and their raw falloff weights.

    Offsets are ordered row by row (dy outer, dx inner).
    """

    r = np.arange(-radius, radius + 1, dtype=np.int64)
    dy, dx = np.meshgrid(r, r, indexing="ij")
    dy = dy.reshape(-1)
    dx = dx.reshape(-1)
    sqr = dx * dx + dy * dy
    keep = sqr < radius * radius
    raw = 1.0 - np.sqrt(sqr[keep].astype(np.float64)) / float(radius)
    return dx[keep], dy[keep], raw


def build_brush(map_size: int, radius: int) -> ErosionBrush:
    """Precompute erosion brush indices and weights for every node.

    Cells near the border keep only the in-grid part of their circle, so
    border brushes have fewer entries instead of wrapping.
    """

    map_size = int(map_size)
    radius = int(radius)
    if radius < 1:
        raise InvalidConfiguration("radius must be >= 1")
    if map_size <= 2 * radius:
        raise InvalidConfiguration(
            f"map_size must exceed 2 * radius ({2 * radius}), got {map_size}"
        )

    dx, dy, raw = brush_offsets(radius)

    n = map_size * map_size
    cells = np.arange(n, dtype=np.int64)
    xs = (cells % map_size)[:, None] + dx[None, :]
    ys = (cells // map_size)[:, None] + dy[None, :]

    valid = (xs >= 0) & (xs < map_size) & (ys >= 0) & (ys < map_size)
    w = np.where(valid, raw[None, :], 0.0)
    w /= np.sum(w, axis=1, keepdims=True)

    counts = np.sum(valid, axis=1)
    starts = np.zeros(n + 1, dtype=np.int64)
    np.cumsum(counts, out=starts[1:])

    indices = (ys * map_size + xs)[valid]
    weights = w[valid]

    for a in (starts, indices, weights):
        a.setflags(write=False)

    logger.debug(
        "built erosion brush map_size=%d radius=%d entries=%d",
        map_size,
        radius,
        int(indices.shape[0]),
    )
    return ErosionBrush(
        map_size=map_size, radius=radius, starts=starts, indices=indices, weights=weights
    )


class BrushCache:
    """Builds each (map_size, radius) brush once and hands out the shared table."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._brushes: dict[tuple[int, int], ErosionBrush] = {}

    def __len__(self) -> int:
        return len(self._brushes)

    def __contains__(self, key: object) -> bool:
        return key in self._brushes

    def get(self, map_size: int, radius: int) -> ErosionBrush:
        key = (int(map_size), int(radius))
        with self._lock:
            brush = self._brushes.get(key)
            if brush is None:
                brush = build_brush(*key)
                self._brushes[key] = brush
            else:
                logger.debug("erosion brush cache hit map_size=%d radius=%d", *key)
            return brush

    def clear(self) -> None:
        with self._lock:
            self._brushes.clear()
