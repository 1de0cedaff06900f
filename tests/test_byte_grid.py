import numpy as np
import pytest

from grid.byte_grid import ByteGrid


def _build(values):
    grid = ByteGrid()
    for v in values:
        grid.add(v)
    return grid


class TestByteGridConstruction:
    def test_incremental_side(self):
        img = ByteGrid()
        assert img.side == 0
        img.add(10)
        assert img.side == 1
        assert img.get(0, 0) == 10
        img.add(20)
        assert img.side == 2
        assert img.get(1, 0) == 20
        img.add(30)
        assert img.side == 2
        assert img.get(0, 1) == 30
        img.add(40)
        assert img.side == 2
        assert img.get(1, 1) == 40
        img.add(50)
        assert img.side == 3
        assert img.get(2, 0) == 30
        assert img.get(0, 1) == 40
        assert img.get(1, 1) == 50

    def test_get_unfilled_cell_raises(self):
        img = _build([1, 2, 3, 4, 5])
        with pytest.raises(IndexError):
            img.get(2, 2)

    def test_get_out_of_bounds_raises(self, grid_1_to_9):
        with pytest.raises(IndexError):
            grid_1_to_9.get(3, 0)
        with pytest.raises(IndexError):
            grid_1_to_9.get(-1, 0)

    def test_freeze_requires_square(self):
        with pytest.raises(ValueError):
            _build([1, 2, 3]).freeze()

    def test_frozen_rejects_add(self, grid_1_to_9):
        assert grid_1_to_9.is_frozen
        with pytest.raises(RuntimeError):
            grid_1_to_9.add(1)

    def test_pixel_range(self):
        with pytest.raises(ValueError):
            ByteGrid().add(256)

    def test_from_array(self):
        arr = np.arange(16, dtype=np.uint8).reshape(4, 4)
        grid = ByteGrid.from_array(arr)
        assert grid.side == 4
        assert grid.get(1, 2) == 9
        np.testing.assert_array_equal(grid.to_array(), arr)

    def test_from_array_rejects_non_square(self):
        with pytest.raises(ValueError):
            ByteGrid.from_array(np.zeros((2, 3), dtype=np.uint8))

    def test_from_array_rejects_float(self):
        with pytest.raises(ValueError):
            ByteGrid.from_array(np.full((2, 2), 3.7))

    def test_from_array_accepts_wider_ints(self):
        grid = ByteGrid.from_array(np.array([[0, 255], [7, 9]], dtype=np.int64))
        assert grid.get(0, 1) == 7


class TestByteGridAccess:
    def test_in_bounds_accepts_signed(self, grid_1_to_9):
        assert grid_1_to_9.in_bounds(0, 0)
        assert not grid_1_to_9.in_bounds(-1, 0)
        assert not grid_1_to_9.in_bounds(0, 3)

    def test_option_get(self, grid_1_to_9):
        assert grid_1_to_9.option_get(2, 2) == 9
        assert grid_1_to_9.option_get(-1, 5) is None
        assert grid_1_to_9.option_get(-1, 5, 0) == 0

    def test_subimage(self):
        img = _build(range(1, 16))
        sub = img.subimage(1, 1, 3)
        assert sub == ByteGrid.from_cells([1, 2, 3, 5, 6, 7, 9, 10, 11])

    def test_subimage_zero_pads_edges(self, grid_1_to_9):
        sub = grid_1_to_9.subimage(0, 0, 3)
        assert list(sub.cells()) == [0, 0, 0, 0, 1, 2, 0, 4, 5]

    def test_subimage_always_full_size(self, grid_1_to_9):
        sub = grid_1_to_9.subimage(2, 2, 5)
        assert sub.side == 5
        assert len(sub) == 25

    def test_subimage_center_alignment(self):
        img = ByteGrid.from_cells(range(25))
        for x, y in img.x_y_iter():
            for window in (1, 3, 5):
                assert img.subimage(x, y, window).get(window // 2, window // 2) == img.get(x, y)

    def test_x_y_step_iter(self, grid_1_to_9):
        assert list(grid_1_to_9.x_y_step_iter(2)) == [(0, 0), (2, 0), (0, 2), (2, 2)]


class TestByteGridPixelize:
    def test_zero_distance(self, grid_1_to_9):
        assert grid_1_to_9.pixelize(0, 3) == 0

    def test_max_distance(self, grid_1_to_9):
        assert grid_1_to_9.pixelize(255**2 * 9, 3) == 255

    def test_scaled_value(self, grid_1_to_9):
        # sqrt(900) = 30, scale = 1/3
        assert grid_1_to_9.pixelize(900, 3) == 10


class TestByteGridTransforms:
    def test_permuted(self):
        img = ByteGrid.from_cells([1, 2, 3, 4])
        assert img.permuted([3, 2, 1, 0]) == ByteGrid.from_cells([4, 3, 2, 1])
        with pytest.raises(ValueError):
            img.permuted([0, 1])

    def test_shrunken(self):
        img = ByteGrid.from_cells(range(16))
        assert img.shrunken(2) == ByteGrid.from_cells([2, 4, 10, 12])

    def test_pixel_mean(self, grid_1_to_9):
        assert grid_1_to_9.pixel_mean() == 5

    def test_equality_and_hash(self):
        a = ByteGrid.from_cells([1, 2, 3, 4])
        b = ByteGrid.from_cells([1, 2, 3, 4])
        c = ByteGrid.from_cells([1, 2, 3, 5])
        assert a == b
        assert a != c
        assert hash(a) == hash(b)
        assert len({a, b, c}) == 2

    def test_mutable_grid_unhashable(self):
        with pytest.raises(TypeError):
            hash(_build([1, 2]))
