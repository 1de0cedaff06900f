"""
Grid 거리 / 평균 함수 모음.

Codebook 추출과 projection 단계에 전략 함수로 주입된다.

    - euclidean_distance : ByteGrid 간 squared Euclidean 거리 (레벨 0)
    - mismatch_count     : 값이 다른 셀의 수 (kernel index 이미지, 레벨 1 이상)
    - hamming_distance   : BitSet XOR popcount
    - byte_mean          : 셀별 평균(내림)
    - index_mode         : 셀별 최빈값 (동률이면 작은 값)
    - bitset_majority    : 셀별 다수결 (ones >= zeros)
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from grid.base import GridBase
from grid.bitset import BitSet, hamming_distance
from grid.byte_grid import ByteGrid

__all__ = [
    "euclidean_distance",
    "mismatch_count",
    "hamming_distance",
    "byte_mean",
    "index_mode",
    "bitset_majority",
]


def _check_same_shape(a: GridBase, b: GridBase) -> None:
    if a.side != b.side or len(a) != len(b):
        raise ValueError(
            f"grid shape mismatch: side {a.side} vs {b.side}, len {len(a)} vs {len(b)}"
        )


def _stack(grids: Sequence[GridBase]) -> np.ndarray:
    if len(grids) == 0:
        raise ValueError("at least one grid is required")
    length = len(grids[0])
    if any(len(g) != length for g in grids):
        raise ValueError("all grids must have the same length")
    return np.vstack([g.as_vector() for g in grids])


def euclidean_distance(img1: ByteGrid, img2: ByteGrid) -> int:
    """
    두 ByteGrid의 squared Euclidean 거리.

    Args:
        img1 (ByteGrid): 첫 번째 Grid.
        img2 (ByteGrid): 두 번째 Grid.

    Returns:
        int: Σ (p1 - p2)².

    Raises:
        ValueError: side 또는 길이가 다른 경우.
    """
    _check_same_shape(img1, img2)
    diff = img1.as_vector().astype(np.int64) - img2.as_vector().astype(np.int64)
    return int(np.dot(diff, diff))


def mismatch_count(img1: GridBase, img2: GridBase) -> int:
    """값이 서로 다른 셀의 수. 셀 타입과 무관하게 동작한다."""
    _check_same_shape(img1, img2)
    return int(np.count_nonzero(img1.as_vector() != img2.as_vector()))


def byte_mean(images: Sequence[ByteGrid]) -> ByteGrid:
    """셀별 정수 평균(내림)으로 centroid Grid를 만든다."""
    stacked = _stack(images).astype(np.int64)
    means = stacked.sum(axis=0) // stacked.shape[0]
    return ByteGrid.from_cells(int(v) for v in means)


def index_mode(images: Sequence[ByteGrid]) -> ByteGrid:
    """
    셀별 최빈값으로 centroid Grid를 만든다.

    kernel index 이미지는 값의 크기에 의미가 없으므로 평균 대신 최빈값을 쓴다.
    동률이면 가장 작은 index가 선택된다 (np.argmax는 첫 최댓값을 반환).
    """
    stacked = _stack(images)
    modes = [int(np.bincount(column, minlength=1).argmax()) for column in stacked.T]
    return ByteGrid.from_cells(modes)


def bitset_majority(images: Sequence[BitSet]) -> BitSet:
    """셀별 다수결. 켜진 수가 꺼진 수 이상이면 True (동률은 True)."""
    stacked = _stack(images)
    ones = stacked.sum(axis=0)
    zeros = stacked.shape[0] - ones
    result = BitSet.from_bools(bool(v) for v in ones >= zeros)
    if len(result) == result.side * result.side:
        result.freeze()
    return result
