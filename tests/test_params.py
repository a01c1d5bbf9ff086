from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from droplets.errors import ErosionError, InvalidConfiguration
from droplets.params import ErosionParams, load_params


def test_default_params() -> None:
    p = ErosionParams()
    assert p.radius == 3
    assert p.inertia == 0.05
    assert p.max_droplet_lifetime == 30


@pytest.mark.parametrize(
    "overrides",
    [
        {"radius": 0},
        {"inertia": -0.1},
        {"erode_speed": 1.5},
        {"deposit_speed": 2.0},
        {"evaporate_speed": -1.0},
        {"sediment_capacity_factor": 0.0},
        {"min_sediment_capacity": 0.0},
        {"initial_water_volume": 0.0},
        {"initial_speed": -1.0},
    ],
)
def test_params_reject_out_of_range(overrides: dict[str, float]) -> None:
    with pytest.raises(InvalidConfiguration):
        ErosionParams(**overrides)


def test_non_positive_lifetime_is_allowed() -> None:
    assert ErosionParams(max_droplet_lifetime=0).max_droplet_lifetime == 0


def test_params_are_frozen() -> None:
    p = ErosionParams()
    with pytest.raises(ValidationError):
        p.radius = 5  # type: ignore[misc]


def test_from_mapping_round_trip() -> None:
    p = ErosionParams(radius=4, inertia=0.3, gravity=2.0)
    assert ErosionParams.from_mapping(p.to_dict()) == p


def test_from_mapping_rejects_bad_values() -> None:
    p = ErosionParams.from_mapping({"radius": 5, "erode_speed": "0.25"})
    assert p.radius == 5
    assert p.erode_speed == 0.25

    for bad in [
        {"radius": 3, "rain": 1.0},
        {"gravity": "fast"},
        {"radius": 2.9},
        {"radius": "4"},
        {"max_droplet_lifetime": True},
    ]:
        with pytest.raises(InvalidConfiguration):
            ErosionParams.from_mapping(bad)


def test_errors_are_value_errors() -> None:
    assert issubclass(InvalidConfiguration, ErosionError)
    assert issubclass(ErosionError, ValueError)


def test_load_params(tmp_path: Path) -> None:
    path = tmp_path / "erosion.json"
    path.write_text(json.dumps({"radius": 2, "evaporate_speed": 0.05}), encoding="utf-8")
    p = load_params(path)
    assert p.radius == 2
    assert p.evaporate_speed == 0.05
    assert p.inertia == ErosionParams().inertia

    for text in ["[1, 2]", '{"radius": 2.5}', "{not json"]:
        path.write_text(text, encoding="utf-8")
        with pytest.raises(InvalidConfiguration):
            load_params(path)
