from __future__ import annotations

from dataclasses import dataclass

from core.errors import InvalidParameterError

# J/kg -> record energy unit
_ENG_CONV = {
    "cgs": 1.0e4,  # erg/g
    "mks": 1.0,  # J/kg
}


@dataclass(frozen=True, slots=True)
class SprayUnits:
    """Unit system of the spray record (species tables report SI enthalpies)."""

    system: str = "cgs"

    def __post_init__(self) -> None:
        if self.system not in _ENG_CONV:
            raise InvalidParameterError(
                f"Unknown spray unit system '{self.system}' (allowed: {sorted(_ENG_CONV)})"
            )

    @property
    def eng_conv(self) -> float:
        return _ENG_CONV[self.system]
