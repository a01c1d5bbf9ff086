from __future__ import annotations

from .brush import BrushCache, ErosionBrush, build_brush
from .errors import ErosionError, InvalidConfiguration, InvalidInput
from .params import ErosionParams, load_params
from .sampling import HeightAndGradient, bilinear_weights, height_and_gradient
from .session import ErosionSession, ErosionStats, erode, erode_frames
from .simulate import Droplet, DropletStats, simulate_droplet

__all__ = [
    "BrushCache",
    "Droplet",
    "DropletStats",
    "ErosionBrush",
    "ErosionError",
    "ErosionParams",
    "ErosionSession",
    "ErosionStats",
    "HeightAndGradient",
    "InvalidConfiguration",
    "InvalidInput",
    "bilinear_weights",
    "build_brush",
    "erode",
    "erode_frames",
    "height_and_gradient",
    "load_params",
    "simulate_droplet",
]
