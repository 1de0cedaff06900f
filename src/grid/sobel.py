"""
Sobel edge 필터.

- 각 픽셀에서 3×3 Sobel x/y 응답의 절댓값 합을 구해 255로 clamp한다.
- 이미지 밖 픽셀은 0으로 취급한다 (subimage와 같은 zero padding).
"""

from __future__ import annotations

import numpy as np

from grid.byte_grid import PIXEL_MAX, ByteGrid

SOBEL_X = np.array(
    [
        [-1, 0, 1],
        [-2, 0, 2],
        [-1, 0, 1],
    ],
    dtype=np.int32,
)
SOBEL_Y = SOBEL_X.T


def _correlate(padded: np.ndarray, kernel: np.ndarray, side: int) -> np.ndarray:
    total = np.zeros((side, side), dtype=np.int32)
    for dy in range(3):
        for dx in range(3):
            total += kernel[dy, dx] * padded[dy : dy + side, dx : dx + side]
    return total


def edge_image(img: ByteGrid) -> ByteGrid:
    """
    Sobel edge 이미지를 만든다.

    Args:
        img (ByteGrid): 입력 grayscale 이미지.

    Returns:
        ByteGrid: 같은 크기의 frozen 이미지. 픽셀 = min(255, |gx| + |gy|).
    """
    side = img.side
    padded = np.pad(img.to_array().astype(np.int32), 1, mode="constant", constant_values=0)
    gx = _correlate(padded, SOBEL_X, side)
    gy = _correlate(padded, SOBEL_Y, side)
    edges = np.minimum(np.abs(gx) + np.abs(gy), PIXEL_MAX).astype(np.uint8)
    return ByteGrid.from_array(edges)
