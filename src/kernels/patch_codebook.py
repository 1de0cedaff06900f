"""
이미지 한 장 단위의 codebook 유틸리티.

- kernelize_single_image: 한 이미지의 윈도우만으로 codebook을 학습
- best_match_distance: 두 codebook 사이의 양방향 nearest-kernel 거리 합
- find_keypoints: 자기 codebook과 가장 잘 맞는 위치(keypoint) 선택
- closest_for_all: 두 keypoint 집합 사이의 양방향 nearest-point 거리 합
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from grid.byte_grid import ByteGrid
from grid.metrics import byte_mean, euclidean_distance
from kernels.codebook import ClusterFn, extract_kernels

Point = Tuple[int, int]


def kernelize_single_image(
    img: ByteGrid,
    num_kernels: int,
    window_side: int,
    cluster: Optional[ClusterFn] = None,
) -> List[ByteGrid]:
    """img 한 장의 모든 윈도우에서 num_kernels개의 kernel을 추출한다."""
    return extract_kernels([img], num_kernels, window_side, euclidean_distance, byte_mean, cluster=cluster)


def _best_match_one_way(k1: Sequence[ByteGrid], k2: Sequence[ByteGrid]) -> int:
    if not k2:
        raise ValueError("kernel set must not be empty")
    return sum(min(euclidean_distance(a, b) for b in k2) for a in k1)


def best_match_distance(k1: Sequence[ByteGrid], k2: Sequence[ByteGrid]) -> int:
    """
    두 kernel 집합의 거리.

    각 kernel에 대해 상대 집합에서 가장 가까운 kernel까지의 거리를 더하며,
    양방향 합이므로 대칭이다.

    Raises:
        ValueError: 두 집합의 크기가 다르거나 비어 있는 경우.
    """
    if len(k1) != len(k2):
        raise ValueError(f"kernel set size mismatch: {len(k1)} != {len(k2)}")
    return _best_match_one_way(k1, k2) + _best_match_one_way(k2, k1)


def best_matching_kernel_distance(kernels: Sequence[ByteGrid], img: ByteGrid, x: int, y: int) -> int:
    """(x, y) 윈도우와 가장 가까운 kernel까지의 거리."""
    return min(euclidean_distance(img.subimage(x, y, k.side), k) for k in kernels)


def find_keypoints(
    img: ByteGrid,
    num_kernels: int,
    window_side: int,
    num_keypoints: int,
    cluster: Optional[ClusterFn] = None,
) -> List[Point]:
    """
    이미지 자신의 codebook과 가장 잘 맞는 위치 num_keypoints개를 고른다.

    Args:
        img (ByteGrid): 입력 이미지.
        num_kernels (int): codebook 크기.
        window_side (int): 윈도우 크기.
        num_keypoints (int): 반환할 좌표 수.
        cluster (ClusterFn, optional): clustering 백엔드.

    Returns:
        List[Point]: 거리 오름차순 (x, y) 목록. 거리가 같으면 (y, x) 스캔 순서.
    """
    kernels = kernelize_single_image(img, num_kernels, window_side, cluster=cluster)
    scored = [
        (best_matching_kernel_distance(kernels, img, x, y), y, x)
        for x, y in img.x_y_iter()
    ]
    scored.sort()
    return [(x, y) for _, y, x in scored[:num_keypoints]]


def _squared_diff(a: int, b: int) -> int:
    return (a - b) ** 2


def best_matching_distance(candidate: Point, references: Sequence[Point]) -> int:
    """candidate에서 가장 가까운 reference까지의 squared 거리."""
    if not references:
        raise ValueError("references must not be empty")
    cx, cy = candidate
    return min(_squared_diff(x, cx) + _squared_diff(y, cy) for x, y in references)


def closest_for_all_one_way(group1: Sequence[Point], group2: Sequence[Point]) -> int:
    return sum(best_matching_distance(p, group2) for p in group1)


def closest_for_all(group1: Sequence[Point], group2: Sequence[Point]) -> int:
    """두 keypoint 집합의 양방향 nearest-point 거리 합."""
    return closest_for_all_one_way(group1, group2) + closest_for_all_one_way(group2, group1)
