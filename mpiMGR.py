# Author      : Tyson Limato
# Date        : 2025-6-18
# File Name   : mpiMGR.py
import logging
import numbers
from dataclasses import dataclass
from typing import Optional

from mpi4py import MPI

from errors import CollectiveMismatchError, GroupInitializationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkerGroup:
    """
    Immutable identity of one worker inside the group.

    Parameters:
    -----------
    rank : int
        This worker's rank, 0 <= rank < size.
    size : int
        Total number of workers in the group.
    root : int
        Rank of the coordinator that drives every round (default 0).
    """
    rank: int
    size: int
    root: int = 0

    def __post_init__(self):
        if self.size < 1:
            raise GroupInitializationError(f"group size must be >= 1, got {self.size}")
        if not 0 <= self.rank < self.size:
            raise GroupInitializationError(
                f"rank {self.rank} outside of group of size {self.size}")
        if not 0 <= self.root < self.size:
            raise GroupInitializationError(
                f"coordinator rank {self.root} outside of group of size {self.size}")

    @property
    def is_coordinator(self) -> bool:
        return self.rank == self.root


class ControlBroadcaster:
    """
    Fans the per-round granularity out from the coordinator to every rank.

    Every rank must call `broadcast` in the same round. The call blocks until
    the coordinator's value has reached all ranks; a value of 0 means stop.
    """

    def __init__(self, comm, group: WorkerGroup):
        self.comm = comm
        self.group = group

    def broadcast(self, value=None) -> int:
        """
        Broadcast `value` from the coordinator rank.

        Parameters:
        -----------
        value : int or None
            The granularity on the coordinator; ignored on every other rank.

        Returns:
        --------
        int
            The coordinator's value, identical on every rank.
        """
        if not self.group.is_coordinator:
            value = None
        try:
            received = self.comm.bcast(value, root=self.group.root)
        except MPI.Exception as exc:
            raise CollectiveMismatchError(
                f"broadcast from rank {self.group.root} failed: {exc}", self) from exc

        if isinstance(received, bool) or not isinstance(received, numbers.Integral):
            raise CollectiveMismatchError(
                f"broadcast delivered {received!r}, expected an integer granularity", self)
        logger.debug("Received granularity %d from rank %d", received, self.group.root)
        return int(received)


class ReductionCombiner:
    """
    Combines one partial value per rank into a total held by the coordinator.
    """

    def __init__(self, comm, group: WorkerGroup):
        self.comm = comm
        self.group = group

    def reduce(self, partial: float, op=MPI.SUM) -> Optional[float]:
        """
        Reduce every rank's `partial` onto the coordinator rank.

        Parameters:
        -----------
        partial : float
            This rank's contribution for the current round.
        op : MPI.Op
            Associative reduction operator (default MPI.SUM).

        Returns:
        --------
        float or None
            The combined value on the coordinator, None on every other rank.
        """
        try:
            total = self.comm.reduce(float(partial), op=op, root=self.group.root)
        except MPI.Exception as exc:
            raise CollectiveMismatchError(
                f"reduce onto rank {self.group.root} failed: {exc}", self) from exc

        if not self.group.is_coordinator:
            return None
        if isinstance(total, bool) or not isinstance(total, numbers.Real):
            raise CollectiveMismatchError(
                f"reduce delivered {total!r}, expected a floating point total", self)
        return float(total)


class MPIManager:
    """
    Bootstraps the worker group on top of `mpi4py` and owns its communicator.

    The manager works on a private duplicate of the given communicator so that
    releasing it never touches MPI.COMM_WORLD itself.

    Methods:
    --------
    broadcaster()
        ControlBroadcaster bound to this group's communicator.

    combiner()
        ReductionCombiner bound to this group's communicator.

    abort(errorcode=1)
        Terminate every rank of the group.

    close()
        Release the duplicated communicator.
    """

    def __init__(self, comm=None, root: int = 0):
        base = comm if comm is not None else MPI.COMM_WORLD
        try:
            # Private communication context for this run
            self.comm = base.Dup()
            # Get the rank (ID) of the current process
            rank = self.comm.Get_rank()
            # Get the total number of processes
            size = self.comm.Get_size()
            # Every rank has to see the same group size
            sizes = self.comm.allgather(size)
        except MPI.Exception as exc:
            raise GroupInitializationError(f"could not establish worker group: {exc}") from exc

        if any(s != size for s in sizes):
            raise GroupInitializationError(
                f"ranks disagree on group size: {sorted(set(sizes))}", self)

        self.group = WorkerGroup(rank=rank, size=size, root=root)
        logger.debug("Rank %d of %d joined the group (coordinator %d)", rank, size, root)

    @property
    def rank(self) -> int:
        return self.group.rank

    @property
    def size(self) -> int:
        return self.group.size

    def broadcaster(self) -> ControlBroadcaster:
        return ControlBroadcaster(self.comm, self.group)

    def combiner(self) -> ReductionCombiner:
        return ReductionCombiner(self.comm, self.group)

    def abort(self, errorcode: int = 1):
        logger.error("Aborting the whole group with error code %d", errorcode)
        self.comm.Abort(errorcode)

    def close(self):
        if self.comm is not None and self.comm != MPI.COMM_NULL:
            self.comm.Free()
        self.comm = None
