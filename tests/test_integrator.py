"""
Tests for the strided midpoint-rule partial sums.
"""

import math

import pytest

from integrator import PartitionedIntegrator, kernel, owned_indices, partial_sum
from mpiMGR import WorkerGroup


class TestKernel:
    """Test the fixed integrand."""

    def test_kernel_endpoints(self):
        assert kernel(0.0) == 4.0
        assert kernel(1.0) == 2.0

    def test_kernel_is_vectorized(self):
        import numpy as np
        values = kernel(np.array([0.0, 1.0]))
        assert values.tolist() == [4.0, 2.0]


class TestStridedPartition:
    """Test ownership of sample indices across ranks."""

    @pytest.mark.parametrize("n", [1, 2, 7, 100, 1001])
    @pytest.mark.parametrize("size", [1, 2, 3, 4, 6])
    def test_partition_is_complete_and_disjoint(self, n, size):
        seen = []
        for rank in range(size):
            seen.extend(owned_indices(n, rank, size))

        assert sorted(seen) == list(range(1, n + 1))
        assert len(seen) == len(set(seen))

    def test_owned_indices_stride(self):
        assert list(owned_indices(10, 1, 4)) == [2, 6, 10]
        assert list(owned_indices(10, 3, 4)) == [4, 8]

    def test_rank_beyond_n_owns_nothing(self):
        assert list(owned_indices(2, 4, 5)) == []


class TestPartialSum:
    """Test partial sums and their combination."""

    def test_single_rank_matches_pi(self):
        approx = partial_sum(100000, 0, 1)
        assert abs(approx - math.pi) < 5e-5
        assert f"{approx:.4f}" == f"{math.pi:.4f}"

    def test_four_ranks_match_one_rank(self):
        combined = sum(partial_sum(1000, rank, 4) for rank in range(4))
        sequential = partial_sum(1000, 0, 1)
        assert abs(combined - sequential) < 1e-9

    def test_matches_plain_loop(self):
        n, size, rank = 37, 3, 1
        h = 1.0 / n
        expected = 0.0
        for i in range(rank + 1, n + 1, size):
            expected += h * (4.0 / (1.0 + (h * (i - 0.5)) ** 2))
        assert partial_sum(n, rank, size) == pytest.approx(expected, abs=1e-12)

    @pytest.mark.parametrize("rank", [2, 3, 4])
    def test_idle_ranks_contribute_exactly_zero(self, rank):
        value = partial_sum(2, rank, 5)
        assert value == 0.0
        assert isinstance(value, float)

    def test_small_chunks_agree_with_single_block(self):
        whole = partial_sum(10007, 1, 3)
        chunked = partial_sum(10007, 1, 3, chunk_size=17)
        assert chunked == pytest.approx(whole, abs=1e-12)

    @pytest.mark.parametrize("n", [0, -1, -50])
    def test_non_positive_granularity_gives_empty_sum(self, n):
        assert partial_sum(n, 0, 1) == 0.0


class TestPartitionedIntegrator:
    """Test the integrator bound to a worker group."""

    def test_uses_group_rank_and_size(self):
        group = WorkerGroup(rank=1, size=3)
        integrator = PartitionedIntegrator(group)
        assert integrator.partial_sum(50) == partial_sum(50, 1, 3)

    def test_invalid_chunk_size(self):
        with pytest.raises(ValueError):
            PartitionedIntegrator(WorkerGroup(rank=0, size=1), chunk_size=0)
