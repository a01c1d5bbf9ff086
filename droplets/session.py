from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from .brush import BrushCache, ErosionBrush, build_brush
from .errors import InvalidConfiguration
from .params import ErosionParams
from .sampling import flat_heights
from .simulate import DropletStats, simulate_droplet

logger = logging.getLogger(__name__)


@dataclass
class ErosionStats:
    """Running totals over a batch of droplets."""

    droplets: int = 0
    amount_eroded: float = 0.0
    amount_deposited: float = 0.0
    steps: int = 0
    left_map: int = 0

    @property
    def delta_sediment(self) -> float:
        return self.amount_deposited - self.amount_eroded

    def add(self, stats: DropletStats) -> ErosionStats:
        self.droplets += 1
        self.amount_eroded += stats.amount_eroded
        self.amount_deposited += stats.amount_deposited
        self.steps += stats.steps
        self.left_map += int(stats.left_map)
        return self


class ErosionSession:
    """Seeded erosion state for one grid size and parameter set.

    The brush is resolved when the session is created, and a single generator
    is shared by every droplet, so two sessions with the same seed, params and
    input heights produce the same result.
    """

    def __init__(
        self,
        map_size: int,
        params: ErosionParams | None = None,
        *,
        seed: int = 0,
        cache: BrushCache | None = None,
    ):
        self.map_size = int(map_size)
        self.params = params if params is not None else ErosionParams()
        self.seed = int(seed)
        self.rng = np.random.default_rng(self.seed)
        if cache is None:
            self.brush: ErosionBrush = build_brush(self.map_size, self.params.radius)
        else:
            self.brush = cache.get(self.map_size, self.params.radius)

    def simulate(self, heights: np.ndarray) -> DropletStats:
        return simulate_droplet(heights, self.map_size, self.brush, self.rng, self.params)

    def erode(self, heights: np.ndarray, droplets: int = 1) -> ErosionStats:
        droplets = int(droplets)
        if droplets < 0:
            raise InvalidConfiguration("droplets must be >= 0")

        h = flat_heights(heights, self.map_size)
        stats = ErosionStats()
        for _ in range(droplets):
            stats.add(simulate_droplet(h, self.map_size, self.brush, self.rng, self.params))

        logger.info(
            "eroded %d droplets on %dx%d map: eroded=%.6g deposited=%.6g",
            stats.droplets,
            self.map_size,
            self.map_size,
            stats.amount_eroded,
            stats.amount_deposited,
        )
        return stats


def erode(
    heights: np.ndarray,
    map_size: int,
    *,
    droplets: int,
    seed: int = 0,
    params: ErosionParams | None = None,
    cache: BrushCache | None = None,
) -> ErosionStats:
    """Erode ``heights`` in place with ``droplets`` droplets from a fresh session."""

    session = ErosionSession(map_size, params, seed=seed, cache=cache)
    return session.erode(heights, droplets)


def erode_frames(
    heights: np.ndarray,
    map_size: int,
    *,
    droplets: int,
    every: int = 1,
    seed: int = 0,
    params: ErosionParams | None = None,
    cache: BrushCache | None = None,
) -> tuple[np.ndarray, ErosionStats]:
    """Return intermediate height frames of a droplet erosion run.

    Works on a copy; the input is left untouched. Frames include the initial
    heights at frame 0 and the final heights last.
    Output shape: (frames, map_size, map_size)
    """

    map_size = int(map_size)
    h = flat_heights(np.array(heights, dtype=np.float64), map_size)

    droplets = int(droplets)
    if droplets < 0:
        raise InvalidConfiguration("droplets must be >= 0")
    every = int(every)
    if every <= 0:
        raise InvalidConfiguration("every must be >= 1")

    session = ErosionSession(map_size, params, seed=seed, cache=cache)
    frames: list[np.ndarray] = [h.reshape(map_size, map_size).copy()]
    stats = ErosionStats()

    for i in range(droplets):
        stats.add(session.simulate(h))
        if ((i + 1) % every) == 0 or (i + 1) == droplets:
            frames.append(h.reshape(map_size, map_size).copy())

    return np.stack(frames, axis=0), stats
