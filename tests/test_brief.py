import numpy as np
import pytest

from grid.bitset import BitSet
from grid.byte_grid import ByteGrid
from features.brief import Descriptor, constrained_random, random_bounded_normal_value


class TestDescriptorConstruction:
    def test_classic_gaussian_in_bounds(self):
        descriptor = Descriptor.classic_gaussian(64, 8, 8, seed=1)
        assert len(descriptor.pairs) == 64
        for p1, p2 in descriptor.pairs:
            for x, y in (p1, p2):
                assert 0 <= x < 8 and 0 <= y < 8

    def test_seed_is_reproducible(self):
        assert Descriptor.classic_uniform(16, 5, 5, seed=3) == Descriptor.classic_uniform(16, 5, 5, seed=3)

    def test_uniform_neighbor(self):
        descriptor = Descriptor.uniform_neighbor(2, 4, 4, seed=0)
        assert len(descriptor.pairs) == 32
        assert descriptor.pairs[2][0] == (1, 0)

    def test_gaussian_neighbor_in_bounds(self):
        descriptor = Descriptor.gaussian_neighbor(3, 2.0, 4, 4, seed=0)
        assert len(descriptor.pairs) == 48
        for _, (x, y) in descriptor.pairs:
            assert 0 <= x < 4 and 0 <= y < 4

    def test_equidistant_wraps(self):
        descriptor = Descriptor.equidistant(3, 3, 1, 0)
        assert descriptor.pairs[2] == ((2, 0), (0, 0))


class TestRandomHelpers:
    def test_constrained_random_clamps(self):
        rng = np.random.default_rng(0)
        values = [constrained_random(rng, 5.0, 100.0, 10) for _ in range(100)]
        assert all(0 <= v <= 9 for v in values)

    def test_bounded_normal_value(self):
        rng = np.random.default_rng(0)
        values = [random_bounded_normal_value(rng, 50.0, 3, 0, 8) for _ in range(100)]
        assert all(0 <= v < 8 for v in values)


class TestDescriptorApply:
    def test_apply_to(self, grid_1_to_9):
        bits = Descriptor.equidistant(3, 3, 1, 0).apply_to(grid_1_to_9)
        assert bits == BitSet.from_bools([True, True, False] * 3)

    def test_apply_kernel_single_pixel_matches_apply_to(self, grid_1_to_9):
        descriptor = Descriptor.equidistant(3, 3, 1, 0)
        assert descriptor.apply_kernel(grid_1_to_9, 1) == descriptor.apply_to(grid_1_to_9)

    def test_majority_image(self, grid_1_to_9):
        result = Descriptor.equidistant(3, 3, 1, 0).majority_image(grid_1_to_9)
        assert result.is_frozen
        assert result.side == 3
        assert result == BitSet.from_bools([True, True, False] * 3)

    def test_size_mismatch(self):
        with pytest.raises(ValueError):
            Descriptor.equidistant(3, 3, 1, 0).apply_to(ByteGrid.from_cells([0] * 4))
