import pytest

from grid.iterator import ImageIterator


class TestImageIterator:
    def test_row_major_scan(self):
        assert list(ImageIterator(0, 0, 2, 3, 1)) == [(0, 0), (1, 0), (0, 1), (1, 1), (0, 2), (1, 2)]

    def test_negative_start(self):
        assert list(ImageIterator(-1, -1, 2, 2, 1)) == [(-1, -1), (0, -1), (-1, 0), (0, 0)]

    def test_strided_scan(self):
        it = ImageIterator(0, 0, 5, 5, 2)
        points = list(it)
        assert points == [(0, 0), (2, 0), (4, 0), (0, 2), (2, 2), (4, 2), (0, 4), (2, 4), (4, 4)]
        assert len(it) == len(points)

    def test_restartable(self):
        it = ImageIterator(0, 0, 3, 2, 1)
        assert list(it) == list(it)

    def test_centered_odd(self):
        assert list(ImageIterator.centered(1, 1, 3, 3))[0] == (0, 0)
        assert list(ImageIterator.centered(1, 1, 3, 3))[-1] == (2, 2)

    def test_centered_even_is_asymmetric(self):
        assert list(ImageIterator.centered(0, 0, 2, 2)) == [(-1, -1), (0, -1), (-1, 0), (0, 0)]

    def test_empty_area(self):
        assert list(ImageIterator(0, 0, 0, 3)) == []
        assert list(ImageIterator(0, 0, 3, 0)) == []
        assert len(ImageIterator(0, 0, 0, 3)) == 0

    def test_invalid_stride(self):
        with pytest.raises(ValueError):
            ImageIterator(0, 0, 2, 2, 0)
