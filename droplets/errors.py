from __future__ import annotations


class ErosionError(ValueError):
    """Base class for contract violations raised by the erosion kernel."""


class InvalidInput(ErosionError):
    """The height field handed in cannot be eroded in place."""


class InvalidConfiguration(ErosionError):
    """Grid size, brush radius or erosion parameters are out of range."""
