from __future__ import annotations

import time

import numpy as np

from droplets import BrushCache, ErosionParams, ErosionSession, build_brush


def _timeit(label: str, fn) -> float:
    t0 = time.perf_counter()
    fn()
    t1 = time.perf_counter()
    ms = (t1 - t0) * 1000.0
    print(f"{label}: {ms:.2f} ms")
    return ms


def _terrain(n: int, seed: int) -> np.ndarray:
    rng = np.random.default_rng(int(seed))
    ys, xs = np.mgrid[0:n, 0:n].astype(np.float64) / float(n)
    z = 0.5 + 0.3 * np.sin(xs * 9.0) * np.cos(ys * 7.0) + 0.05 * rng.random((n, n))
    return np.clip(z, 0.0, None)


def main() -> None:
    """Quick CPU benchmark.

    Brush builds run once per (map_size, radius); droplet throughput is what
    dominates a full erosion pass.
    """

    seed = 0
    map_size = 256
    params = ErosionParams()

    _timeit(
        f"Brush: build_brush {map_size}x{map_size} r={params.radius}",
        lambda: build_brush(map_size, params.radius),
    )

    cache = BrushCache()
    cache.get(map_size, params.radius)
    heights = _terrain(map_size, seed)

    def run(droplets: int) -> None:
        session = ErosionSession(map_size, params, seed=seed, cache=cache)
        stats = session.erode(heights, droplets)
        print(
            f"  eroded={stats.amount_eroded:.4f} deposited={stats.amount_deposited:.4f}"
            f" steps={stats.steps}"
        )

    _timeit("Droplets: 1000 on 256x256", lambda: run(1000))
    _timeit("Droplets: 10000 on 256x256", lambda: run(10000))


if __name__ == "__main__":
    main()
