from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from .brush import ErosionBrush
from .errors import InvalidConfiguration, InvalidInput
from .params import ErosionParams
from .sampling import bilinear_weights, flat_heights, height_and_gradient

# Directions shorter than this count as no flow at all.
_MIN_DIRECTION = 1e-5


@dataclass
class Droplet:
    x: float
    y: float
    dir_x: float = 0.0
    dir_y: float = 0.0
    speed: float = 1.0
    water: float = 1.0
    sediment: float = 0.0


@dataclass(frozen=True)
class DropletStats:
    amount_eroded: float = 0.0
    amount_deposited: float = 0.0
    steps: int = 0
    left_map: bool = False

    @property
    def delta_sediment(self) -> float:
        return self.amount_deposited - self.amount_eroded


def spawn_droplet(
    map_size: int, rng: np.random.Generator, params: ErosionParams
) -> Droplet:
    """Place a droplet at the center of a uniformly random cell."""

    x = int(rng.integers(0, map_size - 1))
    y = int(rng.integers(0, map_size - 1))
    return Droplet(
        x=x + 0.5,
        y=y + 0.5,
        speed=float(params.initial_speed),
        water=float(params.initial_water_volume),
    )


def simulate_droplet(
    heights: np.ndarray,
    map_size: int,
    brush: ErosionBrush,
    rng: np.random.Generator,
    params: ErosionParams,
    *,
    droplet: Droplet | None = None,
) -> DropletStats:
    """Flow one droplet over ``heights`` until it leaves the map or its lifetime ends.

    ``heights`` is eroded and filled in place. ``droplet`` overrides the random
    spawn; it is mutated as the simulation advances.
    """

    map_size = int(map_size)
    h = flat_heights(heights, map_size)
    if brush.map_size != map_size:
        raise InvalidConfiguration(
            f"brush was built for map_size={brush.map_size}, got {map_size}"
        )

    limit = float(map_size - 1)
    if droplet is None:
        droplet = spawn_droplet(map_size, rng, params)
    elif not (0.0 <= droplet.x < limit and 0.0 <= droplet.y < limit):
        raise InvalidInput(
            f"droplet position ({droplet.x}, {droplet.y}) must lie in [0, {map_size - 1})"
        )
    d = droplet

    inertia = float(params.inertia)
    capacity_factor = float(params.sediment_capacity_factor)
    min_capacity = float(params.min_sediment_capacity)
    erode_speed = float(params.erode_speed)
    deposit_speed = float(params.deposit_speed)
    evaporate_speed = float(params.evaporate_speed)
    gravity = float(params.gravity)

    eroded = 0.0
    deposited = 0.0
    steps = 0
    left_map = False

    for _ in range(int(params.max_droplet_lifetime)):
        cx = int(d.x)
        cy = int(d.y)
        index = cy * map_size + cx
        old_x = d.x
        old_y = d.y
        point = height_and_gradient(h, map_size, d.x, d.y)

        dir_x = d.dir_x * inertia - point.gradient_x * (1.0 - inertia)
        dir_y = d.dir_y * inertia - point.gradient_y * (1.0 - inertia)
        length = math.hypot(dir_x, dir_y)
        if length > _MIN_DIRECTION:
            d.dir_x = dir_x / length
            d.dir_y = dir_y / length
        else:
            angle = float(rng.random()) * 2.0 * math.pi
            d.dir_x = math.sin(angle)
            d.dir_y = math.cos(angle)

        d.x += d.dir_x
        d.y += d.dir_y
        steps += 1

        if d.x < 0.0 or d.y < 0.0 or d.x >= limit or d.y >= limit:
            left_map = True
            break

        new_height = height_and_gradient(h, map_size, d.x, d.y).height
        delta_height = new_height - point.height

        capacity = max(
            -delta_height * d.speed * d.water * capacity_factor, min_capacity
        )

        if d.sediment > capacity or delta_height > 0.0:
            if delta_height > 0.0:
                # Moving uphill: fill the pit just left.
                amount = min(delta_height, d.sediment)
            else:
                amount = (d.sediment - capacity) * deposit_speed

            # Deposition stays on the four nodes of the cell so small pits fill up.
            w_nw, w_ne, w_sw, w_se = bilinear_weights(old_x - cx, old_y - cy)
            h[index] += amount * w_nw
            h[index + 1] += amount * w_ne
            h[index + map_size] += amount * w_sw
            h[index + map_size + 1] += amount * w_se

            d.sediment -= amount
            deposited += amount
        else:
            # Never erode more than the drop, so no new pits are dug.
            amount = min((capacity - d.sediment) * erode_speed, -delta_height)
            idx, weights = brush.neighbors(index)
            removed = np.minimum(h[idx], amount * weights)
            h[idx] -= removed
            total = float(np.sum(removed))
            d.sediment += total
            eroded += total

        d.speed = math.sqrt(max(0.0, d.speed * d.speed + delta_height * gravity))
        d.water *= 1.0 - evaporate_speed

    return DropletStats(
        amount_eroded=eroded, amount_deposited=deposited, steps=steps, left_map=left_map
    )
