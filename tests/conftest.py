"""
Shared test helpers: an in-memory communicator that lets several ranks run as
threads of the test process, exposing the subset of the mpi4py communicator
API the group uses (bcast, reduce, allgather).
"""

import threading

from mpi4py import MPI


class ThreadHub:
    """Shared slots and a barrier standing in for the MPI runtime."""

    def __init__(self, size: int, timeout: float = 10.0):
        self.size = size
        self.barrier = threading.Barrier(size, timeout=timeout)
        self.slots = [None] * size
        self.calls = [[] for _ in range(size)]

    def comm(self, rank: int) -> 'ThreadComm':
        return ThreadComm(self, rank)


class ThreadComm:
    def __init__(self, hub: ThreadHub, rank: int):
        self.hub = hub
        self.rank = rank

    def Get_rank(self):
        return self.rank

    def Get_size(self):
        return self.hub.size

    def _exchange(self, obj):
        self.hub.slots[self.rank] = obj
        self.hub.barrier.wait()
        values = list(self.hub.slots)
        self.hub.barrier.wait()
        return values

    def bcast(self, obj=None, root=0):
        self.hub.calls[self.rank].append(('bcast', obj))
        return self._exchange(obj)[root]

    def reduce(self, sendobj, op=MPI.SUM, root=0):
        self.hub.calls[self.rank].append(('reduce', sendobj))
        values = self._exchange(sendobj)
        if self.rank != root:
            return None
        if op == MPI.SUM:
            total = values[0]
            for v in values[1:]:
                total = total + v
            return total
        if op == MPI.MAX:
            return max(values)
        if op == MPI.MIN:
            return min(values)
        raise NotImplementedError(op)

    def allgather(self, sendobj):
        return self._exchange(sendobj)


def run_ranks(size, target, hub=None):
    """
    Run `target(comm)` once per rank in its own thread.

    Returns the per-rank results in rank order; re-raises the first
    exception raised by any rank.
    """
    hub = hub or ThreadHub(size)
    results = [None] * size
    errors = [None] * size

    def worker(rank):
        try:
            results[rank] = target(hub.comm(rank))
        except BaseException as exc:
            errors[rank] = exc
            hub.barrier.abort()

    threads = [threading.Thread(target=worker, args=(r,)) for r in range(size)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    for exc in errors:
        if exc is not None and not isinstance(exc, threading.BrokenBarrierError):
            raise exc
    for exc in errors:
        if exc is not None:
            raise exc
    return results
