# Author      : Tyson Limato
# Date        : 2025-7-2
# File Name   : integrator.py
import logging

import numpy as np

from mpiMGR import WorkerGroup

logger = logging.getLogger(__name__)

# Largest number of sample points evaluated in one numpy block
DEFAULT_CHUNK_SIZE = 1_000_000


def kernel(x):
    """Integrand whose integral over [0, 1] is pi: f(x) = 4 / (1 + x^2)."""
    return 4.0 / (1.0 + x * x)


def owned_indices(n: int, rank: int, size: int) -> range:
    """
    Sample indices (1-based) assigned to `rank` under the strided partition.

    Rank r owns r+1, r+1+size, r+1+2*size, ... up to and including n, so the
    ranks of a group cover 1..n exactly once without talking to each other.
    """
    return range(rank + 1, n + 1, size)


def partial_sum(n: int, rank: int, size: int, chunk_size: int = DEFAULT_CHUNK_SIZE) -> float:
    """
    Midpoint-rule contribution of one rank to the integral of `kernel`.

    Parameters:
    -----------
    n : int
        Granularity, the number of subintervals of [0, 1].
    rank : int
        Rank of the worker computing the sum.
    size : int
        Number of workers in the group.
    chunk_size : int
        Maximum number of sample points evaluated per numpy block.

    Returns:
    --------
    float
        Sum of h * f(h * (i - 0.5)) over the owned indices i, with h = 1 / n.
        Exactly 0.0 when the rank owns no index.
    """
    indices = owned_indices(n, rank, size)
    if len(indices) == 0:
        return 0.0

    h = 1.0 / n
    total = 0.0
    # Walk the owned range block by block so memory stays bounded for huge n
    for start in range(0, len(indices), chunk_size):
        block = indices[start:start + chunk_size]
        i = np.arange(block.start, block.stop, block.step, dtype=np.float64)
        x = h * (i - 0.5)
        total += float(np.sum(h * kernel(x)))
    return total


class PartitionedIntegrator:
    """
    Binds the strided midpoint sum to one worker of the group.

    Parameters:
    -----------
    group : WorkerGroup
        Identity of the worker; only `rank` and `size` are read.
    chunk_size : int
        Maximum number of sample points evaluated per numpy block.
    """

    def __init__(self, group: WorkerGroup, chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
        self.group = group
        self.chunk_size = chunk_size

    def partial_sum(self, n: int) -> float:
        mine = partial_sum(n, self.group.rank, self.group.size, self.chunk_size)
        logger.debug("Partial sum for n=%d over %d samples: %.16f",
                     n, len(owned_indices(n, self.group.rank, self.group.size)), mine)
        return mine
