"""
Fan-out(다채널) 인코딩 모듈.

- 원본 corpus에서 codebook을 한 번 추출하고, 매 레벨마다 모든 channel을
  모든 kernel로 projection한다. (레벨 L에서 channel 수 = K^L)
- 계층 구조가 아닌 평면적인 multi-channel 인코딩이며,
  두 인코딩 사이의 거리는 channel별 거리의 합이다.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple, TypeVar

from grid.base import GridBase
from grid.metrics import euclidean_distance
from kernels.codebook import ClusterFn, DistanceFn, KMeansClusterer, MeanFn, extract_kernels
from kernels.config import KernelConfig
from kernels.projection import project_all

logger = logging.getLogger("kernel_pyramid")

L = TypeVar("L")


def kernelize_all(
    labeled_images: Sequence[Tuple[L, GridBase]],
    levels: int,
    distance: DistanceFn,
    mean: MeanFn,
    config: Optional[KernelConfig] = None,
    cluster: Optional[ClusterFn] = None,
) -> List[Tuple[L, List[GridBase]]]:
    """
    라벨이 붙은 이미지 전체를 fan-out 인코딩한다.

    Args:
        labeled_images (Sequence[Tuple[L, GridBase]]): (label, image) 목록.
        levels (int): projection 반복 횟수.
        distance (DistanceFn): 거리 함수 (byte → euclidean, bit → hamming).
        mean (MeanFn): centroid 함수.
        config (KernelConfig, optional): num_kernels / window_side / stride / seed.
        cluster (ClusterFn, optional): clustering 백엔드.

    Returns:
        List[Tuple[L, List[GridBase]]]: (label, channel 이미지 목록).
    """
    config = config or KernelConfig()
    if cluster is None:
        cluster = KMeansClusterer(seed=config.seed)

    images = [img for _, img in labeled_images]
    kernels = extract_kernels(
        images,
        config.num_kernels,
        config.window_side,
        distance,
        mean,
        cluster=cluster,
    )

    kernelized: List[Tuple[L, List[GridBase]]] = [(label, [img]) for label, img in labeled_images]
    for level in range(levels):
        kernelized = [
            (label, project_all(channels, kernels, distance, stride=config.stride))
            for label, channels in kernelized
        ]
        logger.info(
            "[fanout] level %d: channels/image=%d",
            level + 1,
            len(kernelized[0][1]) if kernelized else 0,
        )

    return kernelized


def kernelized_distance(
    k1: Sequence[GridBase],
    k2: Sequence[GridBase],
    distance: DistanceFn = euclidean_distance,
) -> float:
    """
    두 fan-out 인코딩의 거리 = channel별 distance의 합.

    Raises:
        ValueError: channel 수가 다른 경우.
    """
    if len(k1) != len(k2):
        raise ValueError(f"channel count mismatch: {len(k1)} != {len(k2)}")
    return sum(distance(a, b) for a, b in zip(k1, k2))
