"""
Core data types for spray fuel setup.

- ConstantFit / PolynomialFit: tagged form of a scalar-or-polynomial property.
- FuelPropertyRecord: per-fuel liquid properties and gas species indices.
- SprayControls: run switches read alongside the fuel properties.
- SprayConfig: owner of the record, controls and derived-variable names.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Protocol, Sequence, Tuple, Union

import numpy as np

FloatArray = np.ndarray
IntArray = np.ndarray

# Number of liquid fuels the particle kernels are built for.
SPRAY_FUEL_NUM = int(os.environ.get("SPRAY_FUEL_NUM", "1"))

UNRESOLVED_INDEX = -1
N_FIT_COEF = 4

FIT_PROPERTIES = ("lambda", "psat", "rho", "mu")


@dataclass(frozen=True, slots=True)
class ConstantFit:
    value: float

    @property
    def is_constant(self) -> bool:
        return True

    def coefficients(self) -> FloatArray:
        coef = np.zeros(N_FIT_COEF, dtype=np.float64)
        coef[0] = float(self.value)
        return coef


@dataclass(frozen=True, slots=True)
class PolynomialFit:
    coeffs: Tuple[float, float, float, float]

    def __post_init__(self) -> None:
        if len(self.coeffs) != N_FIT_COEF:
            raise ValueError(f"PolynomialFit needs {N_FIT_COEF} coefficients, got {len(self.coeffs)}")

    @property
    def is_constant(self) -> bool:
        return False

    def coefficients(self) -> FloatArray:
        return np.asarray(self.coeffs, dtype=np.float64)


PropertyFit = Union[ConstantFit, PolynomialFit]


def _zero_fits(n: int) -> List[PropertyFit]:
    return [ConstantFit(0.0) for _ in range(n)]


@dataclass(slots=True)
class FuelPropertyRecord:
    """
    Liquid fuel properties consumed by the spray kernels.

    Per-fuel arrays have length num_fuels. Species indices stay at
    UNRESOLVED_INDEX until the species resolver runs; latent starts equal
    to ref_latent and is corrected by the reference-temperature enthalpy.
    """

    num_fuels: int
    space_dim: int = 3

    fuel_names: List[str] = field(default_factory=list)
    dep_names: List[str] = field(default_factory=list)

    crit_T: FloatArray = field(default_factory=lambda: np.zeros(0))
    boil_T: FloatArray = field(default_factory=lambda: np.zeros(0))
    cp: FloatArray = field(default_factory=lambda: np.zeros(0))
    ref_latent: FloatArray = field(default_factory=lambda: np.zeros(0))
    latent: FloatArray = field(default_factory=lambda: np.zeros(0))
    indx: IntArray = field(default_factory=lambda: np.zeros(0, dtype=np.int64))
    dep_indx: IntArray = field(default_factory=lambda: np.zeros(0, dtype=np.int64))

    lambda_fit: List[PropertyFit] = field(default_factory=list)
    psat_fit: List[PropertyFit] = field(default_factory=list)
    rho_fit: List[PropertyFit] = field(default_factory=list)
    mu_fit: List[PropertyFit] = field(default_factory=list)

    num_ppp: float = 1.0
    ref_T: float = 300.0
    body_force: FloatArray = field(default_factory=lambda: np.zeros(3))
    mass_trans: bool = True
    mom_trans: bool = True
    fixed_parts: bool = False
    min_eb_vfrac: float = 0.1

    @classmethod
    def empty(cls, num_fuels: int, space_dim: int = 3) -> "FuelPropertyRecord":
        n = int(num_fuels)
        return cls(
            num_fuels=n,
            space_dim=int(space_dim),
            fuel_names=[""] * n,
            dep_names=[""] * n,
            crit_T=np.zeros(n, dtype=np.float64),
            boil_T=np.zeros(n, dtype=np.float64),
            cp=np.zeros(n, dtype=np.float64),
            ref_latent=np.zeros(n, dtype=np.float64),
            latent=np.zeros(n, dtype=np.float64),
            indx=np.full(n, UNRESOLVED_INDEX, dtype=np.int64),
            dep_indx=np.full(n, UNRESOLVED_INDEX, dtype=np.int64),
            lambda_fit=_zero_fits(n),
            psat_fit=_zero_fits(n),
            rho_fit=_zero_fits(n),
            mu_fit=_zero_fits(n),
            body_force=np.zeros(int(space_dim), dtype=np.float64),
        )

    def fits(self, prop: str) -> List[PropertyFit]:
        if prop not in FIT_PROPERTIES:
            raise KeyError(f"Unknown fitted property '{prop}' (known: {FIT_PROPERTIES})")
        return getattr(self, f"{prop}_fit")

    def coef_array(self, prop: str) -> FloatArray:
        """Flat (4 * num_fuels,) coefficient table, fuel-major."""
        fits = self.fits(prop)
        if not fits:
            return np.zeros(0, dtype=np.float64)
        return np.concatenate([f.coefficients() for f in fits])

    @property
    def lambda_coef(self) -> FloatArray:
        return self.coef_array("lambda")

    @property
    def psat_coef(self) -> FloatArray:
        return self.coef_array("psat")

    @property
    def rho_coef(self) -> FloatArray:
        return self.coef_array("rho")

    @property
    def mu_coef(self) -> FloatArray:
        return self.coef_array("mu")

    def is_resolved(self) -> bool:
        return bool(np.all(self.indx >= 0) and np.all(self.dep_indx >= 0))


@dataclass(slots=True)
class SprayControls:
    verbose: int = 0
    cfl: float = 0.5
    write_ascii_files: bool = False
    plot_src: bool = False
    init_file: str = ""
    init_function: bool = True
    derive_plot_vars: bool = True
    derive_plot_species: bool = True


@dataclass(slots=True)
class SprayConfig:
    """Spray setup result handed to particle initialization and diagnostics."""

    record: FuelPropertyRecord
    controls: SprayControls = field(default_factory=SprayControls)
    derive_vars: List[str] = field(default_factory=list)

    @property
    def fuel_names(self) -> List[str]:
        return self.record.fuel_names

    @property
    def dep_names(self) -> List[str]:
        return self.record.dep_names


class SpeciesTable(Protocol):
    """Gas-phase species list plus per-species enthalpy [J/kg]."""

    @property
    def species_names(self) -> Sequence[str]: ...

    def enthalpies_mass(self, T: float) -> FloatArray: ...
