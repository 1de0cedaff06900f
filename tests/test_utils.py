import json
import logging

import cv2
import numpy as np
import pytest

from grid.bitset import BitSet
from grid.byte_grid import ByteGrid
from kernels.pyramid import PyramidImage
from utils.io import grid_to_image, load_gray_grid, load_labeled_grids, save_grid, save_json
from utils.logger import get_logger
from utils.paths import Paths
from utils.visualize import codebook_montage, montage, save_codebook_montage, save_pyramid_figure


class TestLogger:
    def test_handlers_not_duplicated(self, tmp_path):
        logger = get_logger(tmp_path, "kernel_pyramid_test")
        try:
            assert len(logger.handlers) == 2
            assert get_logger(tmp_path, "kernel_pyramid_test") is logger
            assert len(logger.handlers) == 2
            logger.info("hello")
            assert len(list(tmp_path.glob("kernel_pyramid_test_*.log"))) == 1
        finally:
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)

    def test_level(self, tmp_path):
        logger = get_logger(tmp_path, "kernel_pyramid_debug", level=logging.DEBUG)
        try:
            assert logger.level == logging.DEBUG
        finally:
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)


class TestIO:
    def test_round_trip(self, tmp_path, grid_1_to_9):
        path = tmp_path / "nested" / "grid.png"
        save_grid(path, grid_1_to_9)
        assert load_gray_grid(path) == grid_1_to_9

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_gray_grid(tmp_path / "missing.png")

    def test_non_square(self, tmp_path):
        path = tmp_path / "wide.png"
        cv2.imwrite(str(path), np.zeros((2, 3), dtype=np.uint8))
        with pytest.raises(ValueError):
            load_gray_grid(path)

    def test_bitset_image(self):
        bits = BitSet.from_bools([True, False, False, True]).freeze()
        np.testing.assert_array_equal(grid_to_image(bits), np.array([[255, 0], [0, 255]], dtype=np.uint8))

    def test_load_labeled_grids(self, tmp_path, grid_1_to_9):
        save_grid(tmp_path / "b" / "0.png", grid_1_to_9)
        save_grid(tmp_path / "a" / "1.png", grid_1_to_9)
        save_grid(tmp_path / "a" / "0.png", ByteGrid.from_cells([0] * 9))
        labeled = load_labeled_grids(tmp_path)
        assert [label for label, _ in labeled] == ["a", "a", "b"]
        assert labeled[0][1] == ByteGrid.from_cells([0] * 9)

    def test_save_json(self, tmp_path):
        path = tmp_path / "out" / "result.json"
        save_json({"count": np.int64(3), "where": tmp_path}, path)
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data == {"count": 3, "where": str(tmp_path)}

    def test_paths(self, tmp_path):
        paths = Paths.from_root(tmp_path)
        assert paths.log_dir.is_dir()
        assert paths.data_dir.is_dir()
        assert paths.result_dir == tmp_path.resolve() / "result" / "pyramid"


class TestVisualize:
    def test_montage_layout(self):
        tiles = [np.zeros((4, 4), dtype=np.uint8)] * 3
        canvas = montage(tiles, cols=2, gap=1)
        assert canvas.shape == (9, 9)
        assert canvas[4, 0] == 255

    def test_codebook_montage_shape(self):
        kernels = [ByteGrid.from_cells([v] * 9) for v in (0, 80, 160, 240)]
        canvas = codebook_montage(kernels, cols=2, gap=2, scale=8)
        assert canvas.shape == (50, 50)
        assert canvas[0, 0] == 0
        assert canvas[0, 26] == 80

    def test_save_codebook_montage(self, tmp_path, grid_1_to_9):
        path = tmp_path / "codebook.png"
        save_codebook_montage([grid_1_to_9], path)
        assert path.exists()

    def test_save_pyramid_figure(self, tmp_path):
        pyramid = PyramidImage(
            (ByteGrid.from_cells(range(16)), ByteGrid.from_cells([0, 1, 1, 0]), ByteGrid.from_cells([1]))
        )
        path = tmp_path / "fig" / "pyramid.png"
        save_pyramid_figure(pyramid, path)
        assert path.exists()
