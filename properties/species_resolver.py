"""
Map spray fuels onto the gas-phase species table.

- Fuel and deposition names are looked up independently (first match wins).
- With a single gas species both indices are 0 for every fuel.
- Latent heat is shifted by the fuel-species enthalpy at the reference
  temperature: latent = ref_latent - h_k(ref_T) * eng_conv.
"""

from __future__ import annotations

import logging
from typing import Sequence, Union

import numpy as np

from core.errors import InvalidParameterError, SpeciesNotFoundError
from core.types import UNRESOLVED_INDEX, FuelPropertyRecord, SpeciesTable, SprayConfig
from core.units import SprayUnits
from parallel.mpi_bootstrap import barrier, get_comm

logger = logging.getLogger(__name__)


def _find_species(names: Sequence[str], target: str) -> int:
    for k, name in enumerate(names):
        if name == target:
            return k
    return UNRESOLVED_INDEX


def resolve_species_indices(record: FuelPropertyRecord, species_names: Sequence[str]) -> None:
    """Fill record.indx / record.dep_indx from the gas species list."""
    names = list(species_names)
    if len(names) == 0:
        raise InvalidParameterError("Gas species table is empty")
    if len(names) == 1:
        record.indx[:] = 0
        record.dep_indx[:] = 0
        return

    for i in range(record.num_fuels):
        record.indx[i] = _find_species(names, record.fuel_names[i])
        record.dep_indx[i] = _find_species(names, record.dep_names[i])
        if record.indx[i] < 0:
            raise SpeciesNotFoundError(record.fuel_names[i])
        if record.dep_indx[i] < 0:
            raise SpeciesNotFoundError(record.dep_names[i])


def correct_latent_heat(
    record: FuelPropertyRecord, species_table: SpeciesTable, units: SprayUnits
) -> None:
    """Subtract the reference-temperature enthalpy of each fuel species from its latent heat."""
    h = np.asarray(species_table.enthalpies_mass(record.ref_T), dtype=np.float64)
    n_species = len(species_table.species_names)
    if h.shape != (n_species,):
        raise ValueError(f"Species enthalpy shape {h.shape} != ({n_species},)")
    record.latent = record.ref_latent - h[record.indx] * units.eng_conv


def resolve_spray_species(
    config: Union[SprayConfig, FuelPropertyRecord],
    species_table: SpeciesTable,
    body_force: Sequence[float],
    *,
    units: SprayUnits | None = None,
    comm=None,
) -> FuelPropertyRecord:
    """
    Resolve species indices, correct latent heats and store the body force.

    Mutates and returns the record. Raises SpeciesNotFoundError naming the
    first fuel (or deposition target) missing from the species table.
    """
    record = config.record if isinstance(config, SprayConfig) else config
    if units is None:
        units = SprayUnits()
    if comm is None:
        comm = get_comm()

    force = np.asarray(body_force, dtype=np.float64).ravel()
    if force.shape != (record.space_dim,):
        raise InvalidParameterError(
            f"body_force must have {record.space_dim} components (got {force.size})"
        )

    resolve_species_indices(record, species_table.species_names)
    correct_latent_heat(record, species_table, units)
    record.body_force = force.copy()

    logger.debug(
        "Resolved spray species: indx=%s dep_indx=%s latent=%s",
        record.indx.tolist(),
        record.dep_indx.tolist(),
        record.latent.tolist(),
    )
    barrier(comm)
    return record
