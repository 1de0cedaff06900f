import numpy as np

from grid.byte_grid import ByteGrid
from grid.sobel import edge_image


class TestEdgeImage:
    def test_single_bright_pixel(self):
        img = ByteGrid.from_cells([0, 0, 0, 0, 10, 0, 0, 0, 0])
        edges = edge_image(img)
        assert edges == ByteGrid.from_cells([20, 20, 20, 20, 0, 20, 20, 20, 20])
        assert edges.is_frozen

    def test_clamps_to_255(self):
        img = ByteGrid.from_cells([0, 0, 0, 0, 255, 0, 0, 0, 0])
        edges = edge_image(img)
        assert edges.get(0, 0) == 255
        assert edges.get(1, 1) == 0

    def test_zero_padding_at_border(self):
        img = ByteGrid.from_cells([100] * 16)
        edges = edge_image(img)
        # 내부는 응답이 0, 가장자리는 padding 때문에 응답이 생긴다
        assert edges.get(1, 1) == 0
        assert edges.get(2, 2) == 0
        # (0, 1): gx = 2*100 + 100 + 100 = 400, gy = 0
        assert edges.get(0, 1) == 255
        # (1, 0): gx = 0, gy = 100 + 200 + 100 = 400
        assert edges.get(1, 0) == 255

    def test_ramp(self):
        img = ByteGrid.from_array(np.array([[0, 10, 20]] * 3, dtype=np.uint8))
        edges = edge_image(img)
        # 가운데 픽셀: gx = (20 - 0) * (1 + 2 + 1) = 80, gy = 0
        assert edges.get(1, 1) == 80

    def test_flat_image(self):
        assert edge_image(ByteGrid.from_cells([0] * 4)) == ByteGrid.from_cells([0] * 4)
