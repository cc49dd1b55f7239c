"""
Driver for spray fuel setup.

Responsibilities:
- Load the case parameters (YAML or AMReX-style inputs file).
- Build the gas species table from the configured Cantera mechanism.
- Run the property loader, then the species resolver.
- Log the resolved fuel table; abort every rank on a configuration error.
"""

from __future__ import annotations

import argparse
import logging
import sys
import traceback
from pathlib import Path
from typing import Optional, Sequence

import numpy as np

from core.errors import SprayConfigError
from core.params import ParamStore
from core.types import SPRAY_FUEL_NUM, SpeciesTable, SprayConfig
from core.units import SprayUnits
from parallel.mpi_bootstrap import abort, get_comm, is_io_rank
from properties.fuel_loader import load_spray_params
from properties.species_resolver import resolve_spray_species

logger = logging.getLogger(__name__)

DEFAULT_MAX_CFL = 0.5
DEFAULT_MECHANISM = "gri30.yaml"


# -----------------------------------------------------------------------------
# Setup
# -----------------------------------------------------------------------------
def setup_spray(
    store: ParamStore,
    species_table: SpeciesTable,
    *,
    fuel_count: int = SPRAY_FUEL_NUM,
    max_cfl: float = DEFAULT_MAX_CFL,
    space_dim: int = 3,
    use_eb: bool = False,
    body_force: Optional[Sequence[float]] = None,
    units: Optional[SprayUnits] = None,
    comm=None,
) -> SprayConfig:
    """Load fuel properties and resolve them against the gas species table."""
    if comm is None:
        comm = get_comm()
    if body_force is None:
        body_force = np.zeros(space_dim)
    cfg = load_spray_params(
        store,
        fuel_count=fuel_count,
        max_cfl=max_cfl,
        space_dim=space_dim,
        use_eb=use_eb,
        comm=comm,
    )
    resolve_spray_species(cfg, species_table, body_force, units=units, comm=comm)
    return cfg


def _resolve_mechanism(base: Path, value: str) -> str:
    """Prefer a file next to the case; otherwise let Cantera search its data path."""
    path = Path(value)
    if not path.is_absolute():
        local = (base / path).resolve()
        if local.exists():
            return str(local)
    return str(path)


def _build_species_table(store: ParamStore, base: Path) -> SpeciesTable:
    from properties.gas_species import build_species_table

    mech = store.query("mechanism.file", DEFAULT_MECHANISM, str)
    phase = store.query("mechanism.phase", "", str)
    return build_species_table(_resolve_mechanism(base, mech), phase)


def _log_fuel_table(cfg: SprayConfig) -> None:
    rec = cfg.record
    for i, name in enumerate(rec.fuel_names):
        logger.info(
            "fuel[%d]=%s dep=%s indx=%d dep_indx=%d Tcrit=%.2f Tboil=%.2f cp=%.4e latent=%.6e (ref %.6e)",
            i,
            name,
            rec.dep_names[i],
            int(rec.indx[i]),
            int(rec.dep_indx[i]),
            rec.crit_T[i],
            rec.boil_T[i],
            rec.cp[i],
            rec.latent[i],
            rec.ref_latent[i],
        )
    logger.info("Derived spray variables: %s", ", ".join(cfg.derive_vars))


# -----------------------------------------------------------------------------
# Main driver
# -----------------------------------------------------------------------------
def run_setup(
    cfg_path: str,
    *,
    fuel_count: int = SPRAY_FUEL_NUM,
    species_table: Optional[SpeciesTable] = None,
    comm=None,
    log_level: int | str = logging.INFO,
) -> int:
    """Run spray setup for one case file. Return 0 on success, non-zero on failure."""
    level = log_level
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    if comm is None:
        comm = get_comm()

    cfg_file = Path(cfg_path).expanduser().resolve()
    try:
        store = ParamStore.from_file(cfg_file)
        run = store.scope("run")
        space_dim = run.query("space_dim", 3, int)
        body_force = run.queryarr("body_force", [0.0] * space_dim, float)
        units = SprayUnits(run.query("units", "cgs", str))

        if species_table is None:
            species_table = _build_species_table(store, cfg_file.parent)

        cfg = setup_spray(
            store,
            species_table,
            fuel_count=fuel_count,
            max_cfl=run.query("max_cfl", DEFAULT_MAX_CFL, float),
            space_dim=space_dim,
            use_eb=run.query("use_eb", False, bool),
            body_force=body_force,
            units=units,
            comm=comm,
        )
        if is_io_rank(comm):
            _log_fuel_table(cfg)
        return 0
    except SprayConfigError as exc:
        logger.error("Spray setup failed: %s", exc)
        abort(comm, 2)
        return 2
    except Exception as exc:
        tb = traceback.format_exc()
        logger.error("Unhandled exception:\n%s", tb)
        print(f"UNHANDLED EXCEPTION IN run_setup: {type(exc).__name__}: {exc}", file=sys.stderr)
        abort(comm, 99)
        return 99


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Load and resolve spray fuel properties.")
    parser.add_argument("cfg_path", help="Path to case YAML or inputs file.")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (e.g., INFO, DEBUG).",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    lvl = getattr(logging, str(args.log_level).upper(), None)
    if not isinstance(lvl, int):
        lvl = logging.INFO
    return run_setup(args.cfg_path, log_level=lvl)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
