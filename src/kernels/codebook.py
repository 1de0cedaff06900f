# -*- coding: utf-8 -*-

"""
Kernel Codebook 모듈.

- 학습 이미지 전체에서 W×W 윈도우(candidate)를 모아 K개의 대표 윈도우(kernel)를 뽑는다.
- clustering 자체는 외부 기능으로 취급한다:
    cluster(candidates, k, distance, mean) -> K개의 대표 Grid
- 기본 clustering 백엔드는 k-means++ 초기화(sklearn) + 주입된 distance 기반 k-means (KMeansClusterer).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Protocol, Sequence, Tuple

import numpy as np
from sklearn.cluster import kmeans_plusplus

from grid.base import GridBase
from grid.byte_grid import ByteGrid
from kernels.config import SEED, KernelConfig
from kernels.projection import classify_pixel, indexed_kernel_image, nearest_index, project_image

logger = logging.getLogger("kernel_pyramid")

DistanceFn = Callable[[GridBase, GridBase], float]
MeanFn = Callable[[Sequence[GridBase]], GridBase]


class ClusterFn(Protocol):
    """외부 clustering 기능의 호출 규약."""

    def __call__(
        self,
        candidates: Sequence[GridBase],
        k: int,
        distance: DistanceFn,
        mean: MeanFn,
    ) -> List[GridBase]: ...


# ----------------------------------------------------------------------
# 기본 clustering 백엔드
# ----------------------------------------------------------------------
@dataclass
class KMeansClusterer:
    """
    k-means clustering 백엔드 (주입된 distance / mean 사용).

    Attributes:
        seed (int): k-means++ 초기화의 random_state.
        max_iter (int): 할당/갱신 반복 최대 횟수.

    Notes:
        - 초기 대표는 sklearn kmeans_plusplus 가 고른 candidate 윈도우들이다.
        - 할당: 각 candidate를 distance가 가장 작은 대표에 배정한다.
        - 갱신: 대표 = mean(군집 멤버) (byte → 평균, index → 최빈값, bit → 다수결).
        - 멤버가 없는 군집은 이전 대표를 그대로 유지하므로 항상 k개가 반환된다.
        - 할당이 더 이상 바뀌지 않거나 max_iter에 도달하면 종료.

    Raises:
        ValueError: candidate 수가 k보다 적은 경우.
    """

    seed: int = SEED
    max_iter: int = 50

    def __post_init__(self) -> None:
        if self.max_iter < 1:
            raise ValueError(f"max_iter must be >= 1, got {self.max_iter}")

    def _seed_representatives(self, candidates: Sequence[GridBase], k: int) -> List[GridBase]:
        X = np.vstack([c.as_vector() for c in candidates]).astype(np.float64)
        _, indices = kmeans_plusplus(X, n_clusters=k, random_state=self.seed)
        return [candidates[int(i)] for i in indices]

    def __call__(
        self,
        candidates: Sequence[GridBase],
        k: int,
        distance: DistanceFn,
        mean: MeanFn,
    ) -> List[GridBase]:
        if len(candidates) < k:
            raise ValueError(f"n_samples={len(candidates)} should be >= n_clusters={k}")

        representatives = self._seed_representatives(candidates, k)
        labels: Optional[List[int]] = None

        for iteration in range(self.max_iter):
            new_labels = [nearest_index(c, representatives, distance) for c in candidates]
            if new_labels == labels:
                break
            labels = new_labels

            for cid in range(k):
                members = [c for c, label in zip(candidates, labels) if label == cid]
                if members:
                    representatives[cid] = mean(members)

        logger.debug("[codebook] k-means stopped after %d iterations", iteration + 1)
        return representatives


# ----------------------------------------------------------------------
# Candidate 수집 / kernel 추출
# ----------------------------------------------------------------------
def collect_windows(images: Sequence[GridBase], window_side: int) -> List[GridBase]:
    """
    모든 이미지의 모든 좌표를 중심으로 W×W 윈도우를 잘라 하나의 목록으로 모은다.

    Args:
        images (Sequence[GridBase]): corpus 이미지 목록.
        window_side (int): 윈도우 한 변의 길이.

    Returns:
        List[GridBase]: candidate 윈도우 목록 (가장자리는 zero/False padding).
    """
    candidates: List[GridBase] = []
    for img in images:
        for x, y in img.x_y_iter():
            candidates.append(img.subimage(x, y, window_side))
    return candidates


def extract_kernels(
    images: Sequence[GridBase],
    num_kernels: int,
    window_side: int,
    distance: DistanceFn,
    mean: MeanFn,
    cluster: Optional[ClusterFn] = None,
) -> List[GridBase]:
    """
    corpus에서 K개의 대표 윈도우(kernel)를 추출한다.

    Args:
        images (Sequence[GridBase]): corpus 이미지 목록.
        num_kernels (int): kernel 개수 K.
        window_side (int): 윈도우 한 변의 길이 W.
        distance (DistanceFn): 윈도우 간 거리 함수.
        mean (MeanFn): 윈도우 목록의 centroid 함수.
        cluster (ClusterFn, optional): clustering 백엔드. None이면 KMeansClusterer.

    Returns:
        List[GridBase]: clustering 결과 K개 윈도우 (후처리 없음).

    Raises:
        ValueError: candidate 윈도우가 하나도 없는 경우.
    """
    candidates = collect_windows(images, window_side)
    if not candidates:
        raise ValueError("No candidate windows to cluster: corpus is empty.")

    if cluster is None:
        cluster = KMeansClusterer()

    logger.info(
        "[codebook] candidates=%d, k=%d, window=%dx%d",
        len(candidates),
        num_kernels,
        window_side,
        window_side,
    )
    return list(cluster(candidates, num_kernels, distance, mean))


# ----------------------------------------------------------------------
# Codebook (immutable)
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class Codebook:
    """
    학습이 끝난 kernel 집합. 생성 이후 변경되지 않으므로 여러 인코딩 작업이
    동시에 읽어도 안전하다.

    Attributes:
        kernels (Tuple[GridBase, ...]): K개의 frozen W×W kernel.
        window_side (int): kernel 한 변의 길이.
        distance (DistanceFn): 윈도우와 kernel 사이 거리 함수.
    """

    kernels: Tuple[GridBase, ...]
    window_side: int
    distance: DistanceFn

    def __post_init__(self) -> None:
        if not self.kernels:
            raise ValueError("Codebook requires at least one kernel.")
        expected = self.window_side * self.window_side
        for index, kernel in enumerate(self.kernels):
            if len(kernel) != expected:
                raise ValueError(
                    f"kernel {index} has length {len(kernel)}, expected {expected}"
                )
            if not kernel.is_frozen:
                raise ValueError(f"kernel {index} must be frozen before building a Codebook")

    @classmethod
    def fit(
        cls,
        images: Sequence[GridBase],
        distance: DistanceFn,
        mean: MeanFn,
        config: Optional[KernelConfig] = None,
        cluster: Optional[ClusterFn] = None,
    ) -> "Codebook":
        """
        corpus로부터 Codebook을 학습한다.

        Args:
            images (Sequence[GridBase]): corpus 이미지 목록.
            distance (DistanceFn): 거리 함수.
            mean (MeanFn): centroid 함수.
            config (KernelConfig, optional): num_kernels / window_side / seed.
            cluster (ClusterFn, optional): clustering 백엔드.

        Returns:
            Codebook: 학습된 Codebook.
        """
        config = config or KernelConfig()
        if cluster is None:
            cluster = KMeansClusterer(seed=config.seed)

        kernels = extract_kernels(
            images,
            config.num_kernels,
            config.window_side,
            distance,
            mean,
            cluster=cluster,
        )
        return cls(kernels=tuple(kernels), window_side=config.window_side, distance=distance)

    # ----------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self.kernels)

    def __iter__(self) -> Iterator[GridBase]:
        return iter(self.kernels)

    def __getitem__(self, index: int) -> GridBase:
        return self.kernels[index]

    # ----------------------------------------------------------------------
    # projection 단축 메서드
    # ----------------------------------------------------------------------
    def classify(self, img: GridBase, x: int, y: int) -> int:
        """(x, y) 윈도우와 가장 가까운 kernel의 index."""
        return classify_pixel(img, x, y, self.kernels, self.distance)

    def index_image(self, img: GridBase, stride: int) -> ByteGrid:
        """stride 간격으로 스캔한 kernel index 이미지 (다음 pyramid 레벨)."""
        return indexed_kernel_image(img, self.kernels, self.distance, stride=stride)

    def project(self, img: GridBase, stride: int) -> List[GridBase]:
        """kernel마다 하나씩, pixelize된 거리 이미지 목록."""
        return project_image(img, self.kernels, self.distance, stride=stride)
