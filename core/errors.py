"""
Configuration errors raised during spray setup.

All of these are unrecoverable: the driver logs them and aborts the run.
They subclass ValueError so callers can catch the whole family at once.
"""

from __future__ import annotations


class SprayConfigError(ValueError):
    """Base class for invalid spray configuration."""


class MissingParameterError(SprayConfigError):
    """A required parameter has no usable value."""

    def __init__(self, key: str, detail: str | None = None):
        self.key = key
        msg = f"Missing required parameter '{key}'"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)


class InvalidParameterError(SprayConfigError):
    """A parameter value cannot be interpreted as the requested type."""


class FuelCountMismatchError(SprayConfigError):
    """Number of configured fuels does not match the fixed fuel count."""


class ParameterRangeError(SprayConfigError):
    """A parameter lies outside its allowed range."""


class UnimplementedFeatureError(SprayConfigError):
    """A switch requests a model that is not implemented."""


class SpeciesNotFoundError(SprayConfigError):
    """A fuel name does not appear in the gas-phase species table."""

    def __init__(self, fuel_name: str):
        self.fuel_name = fuel_name
        super().__init__(f"Fuel {fuel_name} not found in species list")
