from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from grid.base import GridBase
from grid.byte_grid import ByteGrid
from kernels.config import MAX_INDEXED_KERNELS, STRIDE

DistanceFn = Callable[[GridBase, GridBase], float]

# ---------------------------------------------------------------------------
# 🔵 1. Fan-out projection (kernel마다 출력 이미지 하나)
# ---------------------------------------------------------------------------


def apply_kernel(
    img: GridBase,
    kernel: GridBase,
    distance: DistanceFn,
    stride: int = STRIDE,
    window_side: Optional[int] = None,
) -> GridBase:
    """
    이미지를 stride 간격으로 훑으며 kernel과의 거리를 셀 하나로 pixelize한다.

    Args:
        img (GridBase): 입력 이미지.
        kernel (GridBase): W×W kernel.
        distance (DistanceFn): 윈도우-kernel 거리 함수.
        stride (int): 스캔 간격.
        window_side (int, optional): 윈도우 크기. None이면 kernel.side.

    Returns:
        GridBase: img와 같은 셀 타입의 frozen 출력 이미지.
            side = ceil(img.side / stride).
    """
    window_side = window_side or kernel.side
    result = img.default()
    for x, y in img.x_y_step_iter(stride):
        window = img.subimage(x, y, window_side)
        result.add(window.pixelize(distance(window, kernel), window_side))
    return result.freeze()


def project_image(
    img: GridBase,
    kernels: Sequence[GridBase],
    distance: DistanceFn,
    stride: int = STRIDE,
) -> List[GridBase]:
    """kernel 하나당 출력 이미지 하나 (길이 = len(kernels))."""
    return [apply_kernel(img, kernel, distance, stride=stride) for kernel in kernels]


def project_all(
    images: Sequence[GridBase],
    kernels: Sequence[GridBase],
    distance: DistanceFn,
    stride: int = STRIDE,
) -> List[GridBase]:
    """여러 이미지(channel)를 모두 projection한 뒤 하나의 목록으로 이어 붙인다."""
    result: List[GridBase] = []
    for img in images:
        result.extend(project_image(img, kernels, distance, stride=stride))
    return result


# ---------------------------------------------------------------------------
# 🔵 2. Index projection (pyramid 모드)
# ---------------------------------------------------------------------------


def nearest_index(candidate: GridBase, representatives: Sequence[GridBase], distance: DistanceFn) -> int:
    """distance 기준으로 가장 가까운 대표의 index (동률이면 작은 index)."""
    best_index = 0
    best_distance = distance(candidate, representatives[0])
    for index in range(1, len(representatives)):
        d = distance(candidate, representatives[index])
        if d < best_distance:
            best_index, best_distance = index, d
    return best_index


def classify_pixel(
    img: GridBase,
    x: int,
    y: int,
    kernels: Sequence[GridBase],
    distance: DistanceFn,
) -> int:
    """
    (x, y) 중심 윈도우와 가장 가까운 kernel의 index를 반환한다.

    Notes:
        - 거리가 같으면 index가 가장 작은 kernel을 선택한다.
        - 윈도우 크기는 kernel.side 를 따른다.
    """
    if not kernels:
        raise ValueError("kernels must not be empty")

    window = img.subimage(x, y, kernels[0].side)
    return nearest_index(window, kernels, distance)


def indexed_kernel_image(
    img: GridBase,
    kernels: Sequence[GridBase],
    distance: DistanceFn,
    stride: int = STRIDE,
) -> ByteGrid:
    """
    stride 간격으로 훑으며 각 위치의 best kernel index를 기록한 이미지를 만든다.

    Args:
        img (GridBase): 입력 이미지 (이전 pyramid 레벨).
        kernels (Sequence[GridBase]): 이 레벨의 codebook.
        distance (DistanceFn): 거리 함수.
        stride (int): 스캔 간격. 1보다 크면 결과는 입력보다 작아진다.

    Returns:
        ByteGrid: 셀 값이 kernel index(0~K-1)인 frozen 이미지.

    Raises:
        ValueError: kernel 수가 256을 넘어 byte에 담을 수 없는 경우.
    """
    if len(kernels) > MAX_INDEXED_KERNELS:
        raise ValueError(f"at most {MAX_INDEXED_KERNELS} kernels fit in a byte index image")

    result = ByteGrid()
    for x, y in img.x_y_step_iter(stride):
        result.add(classify_pixel(img, x, y, kernels, distance))
    return result.freeze()
