from __future__ import annotations

import math
from typing import Iterable, Sequence

import numpy as np

from grid.base import GridBase
from grid.iterator import ImageIterator

PIXEL_MAX = 255


class ByteGrid(GridBase[int]):
    """
    0~255 픽셀 값을 갖는 정사각형 grayscale Grid.

    레벨 0(원본 이미지)과 kernel index 이미지(레벨 1 이상)를 모두 표현한다.
    """

    fill_value = 0

    def __init__(self) -> None:
        super().__init__()
        self._pixels = bytearray()

    # ----------------------------------------------------------------------
    # 생성 헬퍼
    # ----------------------------------------------------------------------
    @classmethod
    def from_cells(cls, cells: Iterable[int]) -> "ByteGrid":
        """
        row-major 셀 목록으로 frozen ByteGrid를 만든다.

        Args:
            cells (Iterable[int]): 0~255 정수 목록. 길이는 완전제곱수여야 한다.

        Returns:
            ByteGrid: frozen Grid.
        """
        grid = cls()
        for cell in cells:
            grid.add(cell)
        return grid.freeze()

    @classmethod
    def from_array(cls, array: np.ndarray) -> "ByteGrid":
        """
        (N, N) numpy 배열로 frozen ByteGrid를 만든다.

        Raises:
            ValueError: 2D 정사각 정수 배열이 아니거나 값이 0~255 범위를 벗어난 경우.
        """
        if array.ndim != 2 or array.shape[0] != array.shape[1]:
            raise ValueError(f"array must be a square 2D array, got shape {array.shape}")
        if not np.issubdtype(array.dtype, np.integer):
            raise ValueError(f"array must have an integer dtype, got {array.dtype}")
        if array.size and (array.min() < 0 or array.max() > PIXEL_MAX):
            raise ValueError("array values must lie in [0, 255]")

        grid = cls()
        grid._pixels = bytearray(np.ascontiguousarray(array, dtype=np.uint8).tobytes())
        grid._side = array.shape[0]
        return grid.freeze()

    # ----------------------------------------------------------------------
    # GridBase 구현
    # ----------------------------------------------------------------------
    def _append(self, cell: int) -> None:
        value = int(cell)
        if not 0 <= value <= PIXEL_MAX:
            raise ValueError(f"pixel value must lie in [0, 255], got {value}")
        self._pixels.append(value)

    def _cell(self, index: int) -> int:
        return self._pixels[index]

    def __len__(self) -> int:
        return len(self._pixels)

    def as_vector(self) -> np.ndarray:
        return np.frombuffer(bytes(self._pixels), dtype=np.uint8)

    def pixelize(self, distance: float, window_side: int) -> int:
        """
        squared Euclidean 거리를 0~255 픽셀 값으로 변환한다.

        Args:
            distance (float): 윈도우와 kernel 사이의 squared Euclidean 거리.
            window_side (int): 윈도우 한 변의 길이.

        Returns:
            int: round(sqrt(distance) * scale), scale = 255 / sqrt(255² · W²).

        Notes:
            - 두 윈도우의 최대 거리(모든 픽셀이 255 차이)가 정확히 255로 매핑된다.
            - 동일한 윈도우(distance=0)는 0.
        """
        max_distance = math.sqrt(PIXEL_MAX**2 * window_side**2)
        scale = PIXEL_MAX / max_distance
        return min(PIXEL_MAX, int(round(math.sqrt(distance) * scale)))

    # ----------------------------------------------------------------------
    # 이미지 변형
    # ----------------------------------------------------------------------
    @property
    def pixels(self) -> bytes:
        return bytes(self._pixels)

    def permuted(self, permutation: Sequence[int]) -> "ByteGrid":
        """permutation[i] 위치의 픽셀을 i번째로 옮긴 새 Grid."""
        if len(permutation) != len(self):
            raise ValueError(
                f"permutation length {len(permutation)} does not match grid length {len(self)}"
            )
        return ByteGrid.from_cells(self._pixels[index] for index in permutation)

    def shrunken(self, factor: int) -> "ByteGrid":
        """
        factor × factor 블록 평균으로 다운샘플링한다.

        Args:
            factor (int): 축소 배율. 결과 side = side // factor.

        Returns:
            ByteGrid: 블록 평균(내림)으로 채운 frozen Grid.
        """
        if factor <= 0:
            raise ValueError(f"factor must be positive, got {factor}")
        target_side = self.side // factor
        result = ByteGrid()
        for x, y in ImageIterator(0, 0, target_side, target_side):
            block = [
                self.get(bx, by)
                for bx, by in ImageIterator(x * factor, y * factor, factor, factor)
            ]
            result.add(sum(block) // len(block))
        return result.freeze()

    def pixel_mean(self) -> int:
        if len(self) == 0:
            raise ValueError("pixel_mean() of an empty grid")
        return sum(self._pixels) // len(self)

    # ----------------------------------------------------------------------
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ByteGrid):
            return NotImplemented
        return self.side == other.side and self._pixels == other._pixels

    __hash__ = GridBase.__hash__

    def __repr__(self) -> str:
        return f"ByteGrid(side={self.side}, len={len(self)}, frozen={self.is_frozen})"
