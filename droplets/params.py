from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import InvalidConfiguration


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "params"
        parts.append(f"{loc}: {err.get('msg', 'invalid value')}")
    return "; ".join(parts)


class ErosionParams(BaseModel):
    """Tuning knobs shared by every droplet of a session.

    Out-of-range values raise InvalidConfiguration on construction.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    radius: int = Field(3, ge=1, strict=True, description="Erosion brush radius in cells")
    inertia: float = Field(
        0.05,
        ge=0.0,
        le=1.0,
        description="0 turns water straight downhill, 1 never changes heading",
    )
    sediment_capacity_factor: float = Field(
        4.0, gt=0.0, description="Multiplier on how much sediment a droplet carries"
    )
    min_sediment_capacity: float = Field(
        0.01, gt=0.0, description="Capacity floor on flat ground"
    )
    erode_speed: float = Field(0.1, ge=0.0, le=1.0)
    deposit_speed: float = Field(0.1, ge=0.0, le=1.0)
    evaporate_speed: float = Field(0.1, ge=0.0, le=1.0)
    gravity: float = 1.0
    max_droplet_lifetime: int = Field(
        30, strict=True, description="Steps per droplet; <= 0 simulates nothing"
    )
    initial_water_volume: float = Field(1.0, gt=0.0)
    initial_speed: float = Field(1.0, ge=0.0)

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise InvalidConfiguration(_describe(exc)) from exc

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump()

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> ErosionParams:
        """Build params from a plain mapping; missing keys keep their defaults."""

        try:
            return cls.model_validate(dict(mapping))
        except ValidationError as exc:
            raise InvalidConfiguration(_describe(exc)) from exc


def load_params(path: str | Path) -> ErosionParams:
    """Read ErosionParams from a JSON object stored at ``path``."""

    text = Path(path).read_text(encoding="utf-8")
    try:
        return ErosionParams.model_validate_json(text)
    except ValidationError as exc:
        raise InvalidConfiguration(_describe(exc)) from exc
