from __future__ import annotations

import sys
from pathlib import Path
from types import SimpleNamespace

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.errors import InvalidParameterError, SpeciesNotFoundError  # noqa: E402
from core.types import FuelPropertyRecord, SprayConfig  # noqa: E402
from core.units import SprayUnits  # noqa: E402
from properties.species_resolver import (  # noqa: E402
    resolve_species_indices,
    resolve_spray_species,
)


def _table(names, enthalpies=None):
    names = list(names)
    h = np.zeros(len(names)) if enthalpies is None else np.asarray(enthalpies, dtype=float)
    calls = []

    def enthalpies_mass(T):
        calls.append(T)
        return h.copy()

    return SimpleNamespace(species_names=names, enthalpies_mass=enthalpies_mass, calls=calls)


def _record(fuels, deps=None, ref_latent=None, ref_T=300.0, space_dim=3):
    rec = FuelPropertyRecord.empty(len(fuels), space_dim=space_dim)
    rec.fuel_names = list(fuels)
    rec.dep_names = list(deps) if deps is not None else list(fuels)
    if ref_latent is not None:
        rec.ref_latent = np.asarray(ref_latent, dtype=float)
        rec.latent = rec.ref_latent.copy()
    rec.ref_T = ref_T
    return rec


def test_multi_species_resolves_exact_positions(fake_comm):
    rec = _record(["NC12H26", "NC10H22"], deps=["NC10H22", "NC12H26"])
    table = _table(["N2", "O2", "NC10H22", "CO2", "NC12H26"])
    out = resolve_spray_species(rec, table, [0.0, 0.0, 0.0], comm=fake_comm)
    assert out is rec
    assert rec.indx.tolist() == [4, 2]
    assert rec.dep_indx.tolist() == [2, 4]
    assert rec.is_resolved()
    assert fake_comm.n_barrier == 1


def test_missing_fuel_aborts_naming_the_fuel(fake_comm):
    rec = _record(["NC10H22", "NC16H34"])
    table = _table(["N2", "O2", "NC10H22"])
    with pytest.raises(SpeciesNotFoundError, match="Fuel NC16H34 not found in species list") as info:
        resolve_spray_species(rec, table, [0.0, 0.0, 0.0], comm=fake_comm)
    assert info.value.fuel_name == "NC16H34"
    assert fake_comm.n_barrier == 0


def test_missing_deposition_target_aborts(fake_comm):
    rec = _record(["NC10H22"], deps=["C7H16"])
    table = _table(["N2", "NC10H22"])
    with pytest.raises(SpeciesNotFoundError, match="C7H16"):
        resolve_spray_species(rec, table, [0.0, 0.0, 0.0], comm=fake_comm)


def test_single_species_shortcut_ignores_names(fake_comm):
    rec = _record(["anything", "else"], deps=["x", "y"])
    resolve_spray_species(rec, _table(["AIR"]), [0.0, 0.0, 0.0], comm=fake_comm)
    assert rec.indx.tolist() == [0, 0]
    assert rec.dep_indx.tolist() == [0, 0]


def test_empty_species_table_is_rejected():
    rec = _record(["A"])
    with pytest.raises(InvalidParameterError):
        resolve_species_indices(rec, [])


def test_latent_heat_corrected_by_reference_enthalpy(fake_comm):
    # two species, known enthalpies [J/kg]
    rec = _record(["FA", "FB"], ref_latent=[3.6e5, 4.0e5], ref_T=350.0)
    table = _table(["FB", "FA"], enthalpies=[-2.0e5, 1.5e5])

    resolve_spray_species(rec, table, [0.0, 0.0, 0.0], units=SprayUnits("mks"), comm=fake_comm)
    assert table.calls == [350.0]
    np.testing.assert_allclose(rec.latent, [3.6e5 - 1.5e5, 4.0e5 + 2.0e5])
    np.testing.assert_allclose(rec.ref_latent, [3.6e5, 4.0e5])


def test_latent_heat_uses_cgs_energy_conversion(fake_comm):
    rec = _record(["FA", "FB"], ref_latent=[3.6e9, 4.0e9])
    table = _table(["FA", "FB"], enthalpies=[1.0e5, -1.0e5])
    resolve_spray_species(rec, table, [0.0, 0.0, 0.0], comm=fake_comm)
    np.testing.assert_allclose(rec.latent, [3.6e9 - 1.0e9, 4.0e9 + 1.0e9])


def test_body_force_copied_and_checked(fake_comm):
    rec = _record(["A"], space_dim=2)
    force = np.array([0.0, -981.0])
    resolve_spray_species(rec, _table(["A", "N2"]), force, comm=fake_comm)
    np.testing.assert_array_equal(rec.body_force, [0.0, -981.0])
    force[1] = 0.0
    assert rec.body_force[1] == -981.0

    with pytest.raises(InvalidParameterError, match="body_force"):
        resolve_spray_species(rec, _table(["A", "N2"]), [0.0, 0.0, 0.0], comm=fake_comm)


def test_bad_body_force_leaves_record_untouched(fake_comm):
    rec = _record(["FA"], ref_latent=[3.6e9])
    table = _table(["N2", "FA"], enthalpies=[0.0, 1.0e5])
    with pytest.raises(InvalidParameterError, match="body_force"):
        resolve_spray_species(rec, table, [0.0, -981.0], comm=fake_comm)
    assert not rec.is_resolved()
    np.testing.assert_array_equal(rec.latent, [3.6e9])
    np.testing.assert_array_equal(rec.body_force, [0.0, 0.0, 0.0])
    assert table.calls == []
    assert fake_comm.n_barrier == 0


def test_accepts_spray_config(fake_comm):
    cfg = SprayConfig(record=_record(["A"]))
    resolve_spray_species(cfg, _table(["N2", "A"]), [0.0, 0.0, 0.0], comm=fake_comm)
    assert cfg.record.indx.tolist() == [1]


def test_unknown_unit_system_rejected():
    with pytest.raises(InvalidParameterError, match="unit system"):
        SprayUnits("imperial")
    assert SprayUnits().eng_conv == pytest.approx(1.0e4)
    assert SprayUnits("mks").eng_conv == pytest.approx(1.0)
