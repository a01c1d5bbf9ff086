from __future__ import annotations

import logging

import numpy as np
import pytest

from droplets.brush import BrushCache
from droplets.errors import InvalidConfiguration, InvalidInput
from droplets.params import ErosionParams
from droplets.session import ErosionSession, erode, erode_frames


def _terrain(n: int) -> np.ndarray:
    rng = np.random.default_rng(3)
    ys, xs = np.mgrid[0:n, 0:n].astype(np.float64)
    z = 0.6 + 0.25 * np.sin(xs * 0.3 + ys * 0.1) + 0.02 * rng.random((n, n))
    return z


def test_session_erodes_2d_heights_in_place() -> None:
    n = 32
    h = _terrain(n)
    before = h.copy()
    stats = ErosionSession(n, seed=1).erode(h, droplets=300)

    assert stats.droplets == 300
    assert stats.steps > 0
    assert stats.amount_eroded > 0.0
    assert not np.array_equal(h, before)
    assert np.isclose(
        float(np.sum(before) - np.sum(h)),
        stats.amount_eroded - stats.amount_deposited,
        atol=1e-8,
    )
    assert float(np.min(h)) >= 0.0


def test_session_deterministic_for_seed() -> None:
    n = 24
    a = _terrain(n)
    b = _terrain(n)
    sa = erode(a, n, droplets=150, seed=42)
    sb = erode(b, n, droplets=150, seed=42)
    assert np.array_equal(a, b)
    assert sa == sb


def test_session_changes_with_seed() -> None:
    n = 24
    a = _terrain(n)
    b = _terrain(n)
    erode(a, n, droplets=150, seed=1)
    erode(b, n, droplets=150, seed=2)
    assert not np.allclose(a, b)


def test_session_shares_cached_brush() -> None:
    cache = BrushCache()
    s1 = ErosionSession(20, ErosionParams(radius=2), seed=0, cache=cache)
    s2 = ErosionSession(20, ErosionParams(radius=2), seed=1, cache=cache)
    assert s1.brush is s2.brush
    assert len(cache) == 1


def test_session_rejects_bad_config() -> None:
    with pytest.raises(InvalidConfiguration):
        ErosionSession(6, ErosionParams(radius=3))
    with pytest.raises(InvalidConfiguration):
        ErosionSession(32, ErosionParams(inertia=1.5))
    with pytest.raises(InvalidConfiguration):
        ErosionSession(32).erode(_terrain(32), droplets=-1)


def test_session_rejects_wrong_size_heights() -> None:
    with pytest.raises(InvalidInput):
        ErosionSession(32).erode(_terrain(16), droplets=1)


def test_session_logs_summary(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.INFO, logger="droplets.session"):
        erode(_terrain(16), 16, droplets=5, seed=0)
    assert any("eroded 5 droplets" in r.getMessage() for r in caplog.records)


def test_erode_frames_shape_and_input_untouched() -> None:
    n = 20
    h = _terrain(n)
    before = h.copy()
    frames, stats = erode_frames(h, n, droplets=25, every=10, seed=0)

    assert frames.shape == (4, n, n)
    assert np.array_equal(frames[0], before)
    assert np.array_equal(h, before)
    assert stats.droplets == 25
    assert np.isclose(
        float(np.sum(frames[0]) - np.sum(frames[-1])),
        stats.amount_eroded - stats.amount_deposited,
        atol=1e-8,
    )


def test_erode_frames_matches_erode() -> None:
    n = 20
    h = _terrain(n)
    frames, _ = erode_frames(h, n, droplets=40, every=7, seed=9)
    erode(h, n, droplets=40, seed=9)
    assert np.array_equal(frames[-1], h)


def test_erode_frames_rejects_bad_every() -> None:
    with pytest.raises(InvalidConfiguration):
        erode_frames(_terrain(16), 16, droplets=3, every=0)
