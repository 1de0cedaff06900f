import pytest

from grid.bitset import BitSet
from grid.byte_grid import ByteGrid
from grid.metrics import (
    bitset_majority,
    byte_mean,
    euclidean_distance,
    hamming_distance,
    index_mode,
    mismatch_count,
)


def _bits(values):
    return BitSet.from_bools(values).freeze()


class TestDistances:
    def test_euclidean_distance(self, grid_1_to_9):
        reversed_grid = ByteGrid.from_cells(range(9, 0, -1))
        assert euclidean_distance(grid_1_to_9, reversed_grid) == 240
        assert euclidean_distance(grid_1_to_9, grid_1_to_9) == 0

    def test_euclidean_no_overflow(self):
        zeros = ByteGrid.from_cells([0] * 4)
        full = ByteGrid.from_cells([255] * 4)
        assert euclidean_distance(zeros, full) == 4 * 255**2

    def test_euclidean_shape_mismatch(self, grid_1_to_9):
        with pytest.raises(ValueError):
            euclidean_distance(grid_1_to_9, ByteGrid.from_cells([0] * 4))

    def test_mismatch_count(self):
        a = ByteGrid.from_cells([0, 1, 2, 3])
        b = ByteGrid.from_cells([0, 1, 5, 7])
        assert mismatch_count(a, b) == 2
        assert mismatch_count(a, a) == 0

    def test_mismatch_count_on_bits(self):
        assert mismatch_count(_bits([True, False, True, True]), _bits([True] * 4)) == 1

    def test_hamming_distance(self):
        assert hamming_distance(_bits([True, False, True, True]), _bits([False] * 4)) == 3


class TestMeans:
    def test_byte_mean_floors(self):
        a = ByteGrid.from_cells([1, 2, 3, 4])
        b = ByteGrid.from_cells([3, 4, 5, 7])
        assert byte_mean([a, b]) == ByteGrid.from_cells([2, 3, 4, 5])

    def test_byte_mean_single(self, grid_1_to_9):
        assert byte_mean([grid_1_to_9]) == grid_1_to_9

    def test_index_mode(self):
        images = [
            ByteGrid.from_cells([1, 2, 3, 4]),
            ByteGrid.from_cells([2, 2, 3, 0]),
            ByteGrid.from_cells([2, 5, 1, 0]),
        ]
        assert index_mode(images) == ByteGrid.from_cells([2, 2, 3, 0])

    def test_index_mode_tie_picks_smallest(self):
        images = [ByteGrid.from_cells([7, 0, 0, 0]), ByteGrid.from_cells([3, 0, 0, 0])]
        assert index_mode(images).get(0, 0) == 3

    def test_bitset_majority(self):
        images = [
            _bits([True, False, True, False]),
            _bits([True, False, True, False]),
            _bits([True, False, False, False]),
            _bits([False, True, False, False]),
        ]
        result = bitset_majority(images)
        assert result == _bits([True, False, True, False])
        assert result.is_frozen

    @pytest.mark.parametrize("mean", [byte_mean, index_mode, bitset_majority])
    def test_empty_input(self, mean):
        with pytest.raises(ValueError):
            mean([])

    def test_length_mismatch(self, grid_1_to_9):
        with pytest.raises(ValueError):
            byte_mean([grid_1_to_9, ByteGrid.from_cells([0] * 4)])
