"""
Gas-phase species table backed by a Cantera mechanism.

Provides the species ordering used to resolve spray fuel indices and the
per-species specific enthalpy [J/kg] used for the latent-heat baseline.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List

import cantera as ct
import numpy as np

FloatArray = np.ndarray


@dataclass(slots=True)
class GasSpeciesTable:
    gas: ct.Solution
    pressure: float = ct.one_atm

    @property
    def species_names(self) -> List[str]:
        return list(self.gas.species_names)

    def enthalpies_mass(self, T: float) -> FloatArray:
        """Pure-species specific enthalpies [J/kg] at T and the table pressure."""
        saved = self.gas.state
        try:
            self.gas.TP = float(T), float(self.pressure)
            h_molar = self.gas.standard_enthalpies_RT * ct.gas_constant * float(T)  # J/kmol
            return np.asarray(h_molar / self.gas.molecular_weights, dtype=np.float64)
        finally:
            self.gas.state = saved


def build_species_table(mech: str | Path, phase: str = "", pressure: float = ct.one_atm) -> GasSpeciesTable:
    """Load a Cantera mechanism (file path or a Cantera data-directory name); empty phase picks the first."""
    gas = ct.Solution(str(mech), phase)
    return GasSpeciesTable(gas=gas, pressure=pressure)
