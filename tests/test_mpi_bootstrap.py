from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from parallel.mpi_bootstrap import abort, barrier, is_io_rank  # noqa: E402


def test_io_rank_is_rank_zero(make_comm):
    assert is_io_rank(make_comm(rank=0, size=2))
    assert not is_io_rank(make_comm(rank=1, size=2))


def test_barrier_calls_comm(fake_comm):
    barrier(fake_comm)
    barrier(fake_comm)
    assert fake_comm.n_barrier == 2


def test_abort_is_noop_on_single_rank(fake_comm):
    abort(fake_comm, 3)
    assert fake_comm.aborted_with is None


def test_abort_tears_down_multi_rank_runs(make_comm):
    comm = make_comm(rank=1, size=3)
    abort(comm, 3)
    assert comm.aborted_with == 3


def test_get_comm_returns_world():
    pytest.importorskip("mpi4py.MPI")
    from mpi4py import MPI

    from parallel.mpi_bootstrap import get_comm

    assert get_comm() is MPI.COMM_WORLD
