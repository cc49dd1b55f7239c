from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

_BOOTSTRAPPED = False


def bootstrap_mpi() -> None:
    """
    Ensure mpi4py initializes MPI once per process.
    """
    global _BOOTSTRAPPED
    if _BOOTSTRAPPED:
        return
    from mpi4py import MPI  # noqa: F401

    _BOOTSTRAPPED = True


def get_comm():
    """Return the world communicator used for spray setup."""
    bootstrap_mpi()
    from mpi4py import MPI

    return MPI.COMM_WORLD


def is_io_rank(comm) -> bool:
    return int(comm.Get_rank()) == 0


def barrier(comm) -> None:
    comm.barrier()


def abort(comm, errorcode: int = 1) -> None:
    """
    Tear down every rank when more than one is running.

    A configuration error found on one rank must not leave the others
    blocked in the next barrier.
    """
    if int(comm.Get_size()) <= 1:
        return
    logger.error("Aborting all %d ranks (errorcode=%d).", comm.Get_size(), errorcode)
    comm.Abort(errorcode)
