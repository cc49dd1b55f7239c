"""
Spray fuel property loader.

Responsibilities:
- Read run switches and the fuel name lists from the 'particles' parameters.
- Read per-fuel scalars and scalar-or-polynomial properties into a FuelPropertyRecord.
- Build the derived-variable name list used by diagnostics output.
- Synchronize all ranks before returning.

Per-fuel keys follow '<fuel>_<property>'. A scalar-or-polynomial property
given with 4 values is a fitted polynomial; with 1 value it is a constant.
Any other count counts as absent.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from core.errors import (
    FuelCountMismatchError,
    InvalidParameterError,
    MissingParameterError,
    ParameterRangeError,
    UnimplementedFeatureError,
)
from core.params import ParamStore
from core.types import (
    N_FIT_COEF,
    ConstantFit,
    FuelPropertyRecord,
    PolynomialFit,
    PropertyFit,
    SprayConfig,
    SprayControls,
)
from parallel.mpi_bootstrap import barrier, get_comm, is_io_rank

logger = logging.getLogger(__name__)

PARTICLES_PREFIX = "particles"

BASE_DERIVE_VARS = (
    "spray_mass",  # total liquid mass in a cell
    "spray_density",  # liquid mass / cell volume
    "spray_num",  # number of droplets in a cell
    "spray_vol",  # total liquid volume in a cell
    "spray_surf_area",  # total liquid surface area in a cell
    "spray_vol_frac",  # liquid volume fraction
    "d10",  # mean diameter
    "d32",  # Sauter mean diameter
    "spray_temp",  # mass-weighted mean temperature
)
VELOCITY_DERIVE_VARS = ("spray_x_vel", "spray_y_vel", "spray_z_vel")

# (record attribute, key suffix); all required
_SCALAR_PROPS = (
    ("crit_T", "crit_temp"),
    ("boil_T", "boil_temp"),
    ("cp", "cp"),
    ("ref_latent", "latent"),
)
# (property, required)
_FIT_PROPS = (
    ("lambda", False),
    ("psat", False),
    ("rho", True),
    ("mu", False),
)


def _fuel_key(fuel_name: str, prop: str) -> str:
    return f"{fuel_name}_{prop}"


def resolve_scalar_or_polynomial(
    source: ParamStore,
    fuel_name: str,
    prop: str,
    current: PropertyFit,
    *,
    required: bool = False,
) -> PropertyFit:
    """
    Read '<fuel>_<prop>' as a constant (1 value) or 4-coefficient fit (4 values).

    Other counts are treated as absent: required -> MissingParameterError,
    optional -> ``current`` is returned unchanged.
    """
    key = _fuel_key(fuel_name, prop)
    nvals = source.countval(key)
    if nvals == N_FIT_COEF:
        return PolynomialFit(tuple(source.getarr(key, float)))
    if nvals == 1:
        return ConstantFit(source.get(key, float))
    if required:
        detail = None
        if nvals:
            detail = f"expected 1 or {N_FIT_COEF} values, got {nvals}"
        raise MissingParameterError(source.full_key(key), detail)
    return current


def resolve_scalar(source: ParamStore, fuel_name: str, prop: str) -> float:
    """Read the required single value '<fuel>_<prop>'."""
    key = _fuel_key(fuel_name, prop)
    nvals = source.countval(key)
    if nvals > 1:
        raise InvalidParameterError(f"Parameter '{source.full_key(key)}': expected a single value, got {nvals}")
    return source.get(key, float)


def build_derive_vars(
    fuel_names: Sequence[str], *, space_dim: int = 3, derive_plot_species: bool = True
) -> List[str]:
    """Derived spray quantities, followed by per-fuel mass when several fuels are tracked."""
    if not 1 <= int(space_dim) <= 3:
        raise ValueError(f"space_dim must be 1, 2 or 3 (got {space_dim})")
    names = list(BASE_DERIVE_VARS) + list(VELOCITY_DERIVE_VARS[: int(space_dim)])
    if derive_plot_species and len(fuel_names) > 1:
        names.extend(f"spray_mass_{fuel}" for fuel in fuel_names)
    return names


def _read_names(pp: ParamStore, fuel_count: int) -> tuple[List[str], List[str]]:
    nfuel = pp.countval("fuel_species")
    if nfuel != fuel_count:
        raise FuelCountMismatchError(
            f"Number of fuel species in input ({nfuel}) must match SPRAY_FUEL_NUM ({fuel_count})"
        )
    fuel_names = pp.getarr("fuel_species", str)

    if pp.contains("dep_fuel_species"):
        dep_names = pp.getarr("dep_fuel_species", str)
        if len(dep_names) != fuel_count:
            raise FuelCountMismatchError(
                f"particles.dep_fuel_species has {len(dep_names)} entries; expected {fuel_count}"
            )
    else:
        dep_names = list(fuel_names)
    return fuel_names, dep_names


def load_spray_params(
    store: ParamStore,
    *,
    fuel_count: int,
    max_cfl: float,
    space_dim: int = 3,
    use_eb: bool = False,
    comm=None,
) -> SprayConfig:
    """
    Build a SprayConfig from the 'particles' parameters.

    ``store`` may be the root store or already scoped to 'particles'.
    Species indices are left unresolved; see properties.species_resolver.
    """
    pp = store if store.prefix.split(".")[-1] == PARTICLES_PREFIX else store.scope(PARTICLES_PREFIX)
    if comm is None:
        comm = get_comm()

    controls = SprayControls()
    controls.verbose = pp.query("v", controls.verbose, int)

    record = FuelPropertyRecord.empty(fuel_count, space_dim=space_dim)
    record.mass_trans = pp.query("mass_transfer", record.mass_trans, bool)
    record.mom_trans = pp.query("mom_transfer", record.mom_trans, bool)
    record.fixed_parts = pp.query("fixed_parts", record.fixed_parts, bool)

    controls.cfl = pp.query("cfl", controls.cfl, float)
    if controls.cfl > float(max_cfl):
        raise ParameterRangeError(f"particles.cfl must be <= {max_cfl} (got {controls.cfl})")

    fuel_names, dep_names = _read_names(pp, int(fuel_count))
    record.fuel_names = fuel_names
    record.dep_names = dep_names

    for i, fuel in enumerate(fuel_names):
        for attr, prop in _SCALAR_PROPS:
            getattr(record, attr)[i] = resolve_scalar(pp, fuel, prop)
        for prop, required in _FIT_PROPS:
            fits = record.fits(prop)
            fits[i] = resolve_scalar_or_polynomial(pp, fuel, prop, fits[i], required=required)
    record.latent = record.ref_latent.copy()

    record.num_ppp = pp.query("parcel_size", record.num_ppp, float)
    if pp.query("use_splash_model", False, bool):
        raise UnimplementedFeatureError("Splash model is not fully implemented")
    # one reference temperature shared by all fuels
    record.ref_T = pp.get("fuel_ref_temp", float)

    controls.write_ascii_files = pp.query("write_ascii_files", controls.write_ascii_files, bool)
    controls.plot_src = pp.query("plot_src", controls.plot_src, bool)
    controls.init_file = pp.query("init_file", controls.init_file, str)
    controls.init_function = pp.query("init_function", controls.init_function, bool)
    if use_eb:
        record.min_eb_vfrac = pp.query("min_eb_vfrac", record.min_eb_vfrac, float)

    controls.derive_plot_vars = pp.query("derive_plot_vars", controls.derive_plot_vars, bool)
    controls.derive_plot_species = pp.query("derive_plot_species", controls.derive_plot_species, bool)
    derive_vars = build_derive_vars(
        fuel_names, space_dim=space_dim, derive_plot_species=controls.derive_plot_species
    )

    if controls.verbose >= 1 and is_io_rank(comm):
        logger.info("Spray fuel species %s", ", ".join(fuel_names))
        logger.info("Number of particles per parcel %s", record.num_ppp)

    barrier(comm)
    return SprayConfig(record=record, controls=controls, derive_vars=derive_vars)
