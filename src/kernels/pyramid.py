# -*- coding: utf-8 -*-

"""
Kernel Pyramid 모듈.

- 원본 이미지(레벨 0) 위에 kernel index 이미지를 레벨마다 한 장씩 쌓는다.
  레벨 1은 항상 만들어지고, num_levels는 그 위에 추가로 쌓는 레벨 수다
  (파생 레벨 수 = num_levels + 1).
    • 레벨 1: 원본 corpus의 3×3 윈도우로 codebook 추출 (Euclidean 거리 / 평균)
    • 레벨 n ≥ 2: 레벨 n-1 index 이미지들의 3×3 윈도우로 새 codebook 추출
      (셀 불일치 수 거리 / 최빈값)
- stride > 1 이므로 레벨이 올라갈수록 이미지가 작아진다 (top = 가장 작은 레벨).
- 두 pyramid의 거리는 top부터 내려오며 처음으로 달라지는 레벨에서 결정된다.

거리 순서:
    PyramidDistance는 "작을수록 가깝다".
    동일한 레벨 수가 많을수록 작고, 같으면 residual이 작을수록 작다.
"""

from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple, TypeVar

from grid.byte_grid import ByteGrid
from grid.metrics import byte_mean, euclidean_distance, index_mode, mismatch_count
from kernels.codebook import ClusterFn, Codebook, KMeansClusterer
from kernels.config import KernelConfig

logger = logging.getLogger("kernel_pyramid")

L = TypeVar("L")


# ---------------------------------------------------------------------------
# 🔵 Pyramid 거리 값
# ---------------------------------------------------------------------------


@functools.total_ordering
@dataclass(frozen=True)
class PyramidDistance:
    """
    두 pyramid 사이의 거리.

    Attributes:
        levels_identical (int): top부터 연속으로 완전히 일치한 레벨 수.
        residual (float): 처음 달라진 레벨의 불일치 셀 수.
            모든 레벨이 같으면 원본끼리의 squared Euclidean 거리.
    """

    levels_identical: int
    residual: float

    def sort_key(self) -> Tuple[int, float]:
        return -self.levels_identical, self.residual

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, PyramidDistance):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def as_tuple(self) -> Tuple[int, float]:
        return self.levels_identical, self.residual


# ---------------------------------------------------------------------------
# 🔵 Pyramid 이미지
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PyramidImage:
    """
    이미지 한 장의 레벨 스택. levels[0] = 원본, levels[-1] = top.

    Attributes:
        levels (Tuple[ByteGrid, ...]): 원본 + 파생 레벨들.
    """

    levels: Tuple[ByteGrid, ...]

    def __post_init__(self) -> None:
        if not self.levels:
            raise ValueError("PyramidImage requires at least the original level.")
        for index, level in enumerate(self.levels):
            if not level.is_frozen:
                raise ValueError(f"level {index} must be frozen before building a PyramidImage")

    @property
    def original(self) -> ByteGrid:
        return self.levels[0]

    @property
    def num_levels(self) -> int:
        """원본을 제외한 파생 레벨 수."""
        return len(self.levels) - 1

    @property
    def top(self) -> ByteGrid:
        return self.nth(0)

    def nth(self, n: int) -> ByteGrid:
        """top에서 n번째 레벨 (n=0 이 top, n=num_levels 이 원본)."""
        if not 0 <= n <= self.num_levels:
            raise IndexError(f"level {n} out of range for {self.num_levels} levels")
        return self.levels[self.num_levels - n]

    def with_level(self, level: ByteGrid) -> "PyramidImage":
        """level을 새 top으로 쌓은 새 PyramidImage."""
        return PyramidImage(self.levels + (level,))

    def __len__(self) -> int:
        return len(self.levels)

    def __iter__(self) -> Iterator[ByteGrid]:
        return iter(self.levels)

    def __getitem__(self, index: int) -> ByteGrid:
        return self.levels[index]


def pyramid_distance(img1: PyramidImage, img2: PyramidImage) -> PyramidDistance:
    """
    top부터 원본 방향으로 레벨을 비교한다.

    Args:
        img1 (PyramidImage): 첫 번째 pyramid.
        img2 (PyramidImage): 두 번째 pyramid.

    Returns:
        PyramidDistance:
            - 레벨 n에서 처음 불일치가 나오면 (일치한 레벨 수, 레벨 n 불일치 셀 수)
            - 모든 파생 레벨이 같으면 (num_levels, 원본 squared Euclidean 거리)

    Raises:
        ValueError: 원본 side 또는 레벨 수가 다른 경우.
    """
    if img1.original.side != img2.original.side:
        raise ValueError(
            f"original side mismatch: {img1.original.side} != {img2.original.side}"
        )
    if img1.num_levels != img2.num_levels:
        raise ValueError(f"level count mismatch: {img1.num_levels} != {img2.num_levels}")

    num_levels_identical = 0
    while num_levels_identical < img1.num_levels:
        current = mismatch_count(img1.nth(num_levels_identical), img2.nth(num_levels_identical))
        if current != 0:
            return PyramidDistance(num_levels_identical, current)
        num_levels_identical += 1

    return PyramidDistance(num_levels_identical, euclidean_distance(img1.original, img2.original))


# ---------------------------------------------------------------------------
# 🔵 Pyramid Encoder (레벨별 codebook 학습 + 인코딩)
# ---------------------------------------------------------------------------


@dataclass
class PyramidEncoder:
    """
    레벨별 codebook을 학습하고 이미지를 PyramidImage로 인코딩한다.

    Attributes:
        config (KernelConfig): num_kernels / window_side / stride / num_levels / seed.
        cluster (ClusterFn, optional): clustering 백엔드. None이면 KMeansClusterer.
        codebooks (List[Codebook]): 레벨 1..num_levels+1 의 codebook (fit 이후).
    """

    config: KernelConfig = field(default_factory=KernelConfig)
    cluster: Optional[ClusterFn] = None
    codebooks: List[Codebook] = field(default_factory=list)

    # ----------------------------------------------------------------------
    # Codebook 학습
    # ----------------------------------------------------------------------
    def _fit_levels(self, images: Sequence[ByteGrid]) -> List[List[ByteGrid]]:
        if len(images) == 0:
            raise ValueError("PyramidEncoder.fit() requires at least one image.")
        side = images[0].side
        if any(img.side != side for img in images):
            raise ValueError("all corpus images must share the same side")

        cluster = self.cluster or KMeansClusterer(seed=self.config.seed)
        stacks: List[List[ByteGrid]] = [[img] for img in images]
        codebooks: List[Codebook] = []

        # 레벨 1은 항상 만들고, 그 위로 num_levels개를 더 쌓는다
        for level in range(1, self.config.num_levels + 2):
            # 레벨 1은 원본 픽셀, 그 위는 kernel index 이미지
            if level == 1:
                distance, mean = euclidean_distance, byte_mean
            else:
                distance, mean = mismatch_count, index_mode

            codebook = Codebook.fit(
                [stack[-1] for stack in stacks],
                distance,
                mean,
                config=self.config,
                cluster=cluster,
            )
            codebooks.append(codebook)

            for stack in stacks:
                stack.append(codebook.index_image(stack[-1], self.config.stride))

            logger.info(
                "[pyramid] level %d: kernels=%d, side=%d",
                level,
                len(codebook),
                stacks[0][-1].side,
            )

        self.codebooks = codebooks
        return stacks

    def fit(self, images: Sequence[ByteGrid]) -> "PyramidEncoder":
        """
        학습 이미지 전체로부터 레벨별 codebook을 학습한다.

        Args:
            images (Sequence[ByteGrid]): 같은 크기의 정사각 원본 이미지 목록.

        Returns:
            PyramidEncoder: self.
        """
        self._fit_levels(images)
        return self

    def fit_encode(self, images: Sequence[ByteGrid]) -> List[PyramidImage]:
        """fit()과 동시에 학습 이미지들의 PyramidImage를 반환한다."""
        return [PyramidImage(tuple(stack)) for stack in self._fit_levels(images)]

    # ----------------------------------------------------------------------
    # 인코딩
    # ----------------------------------------------------------------------
    def encode(self, img: ByteGrid) -> PyramidImage:
        """
        학습된 codebook으로 이미지 한 장을 인코딩한다 (학습/질의 이미지 공통).

        Raises:
            RuntimeError: fit() 이전에 호출한 경우.
        """
        if not self.codebooks:
            raise RuntimeError("PyramidEncoder is not trained. Call fit() first.")

        levels = [img]
        for codebook in self.codebooks:
            levels.append(codebook.index_image(levels[-1], self.config.stride))
        logger.debug("[pyramid] encoded side=%d -> top side=%d", img.side, levels[-1].side)
        return PyramidImage(tuple(levels))

    def encode_batch(self, images: Sequence[ByteGrid]) -> List[PyramidImage]:
        return [self.encode(img) for img in images]


# ---------------------------------------------------------------------------
# 🔵 편의 함수
# ---------------------------------------------------------------------------


def build_pyramid(
    images: Sequence[ByteGrid],
    num_levels: int,
    num_kernels: int,
    config: Optional[KernelConfig] = None,
    cluster: Optional[ClusterFn] = None,
) -> List[PyramidImage]:
    """
    학습 pool 전체의 pyramid를 만든다.

    Args:
        images (Sequence[ByteGrid]): 학습 pool.
        num_levels (int): 레벨 1 위에 추가로 쌓을 레벨 수 (파생 레벨 수 = num_levels + 1).
        num_kernels (int): 레벨별 codebook 크기.
        config (KernelConfig, optional): window_side / stride / seed 기본값 제공.
        cluster (ClusterFn, optional): clustering 백엔드.

    Returns:
        List[PyramidImage]: images와 같은 순서의 pyramid 목록.
    """
    base = config or KernelConfig()
    config = KernelConfig(
        num_kernels=num_kernels,
        window_side=base.window_side,
        stride=base.stride,
        num_levels=num_levels,
        seed=base.seed,
    )
    return PyramidEncoder(config=config, cluster=cluster).fit_encode(images)


def kernel_stack_all(
    labeled_images: Sequence[Tuple[L, ByteGrid]],
    num_kernels: int,
    num_levels: int,
    config: Optional[KernelConfig] = None,
    cluster: Optional[ClusterFn] = None,
) -> List[Tuple[L, PyramidImage]]:
    """(label, image) 목록을 (label, PyramidImage) 목록으로 변환한다."""
    pyramids = build_pyramid(
        [img for _, img in labeled_images],
        num_levels,
        num_kernels,
        config=config,
        cluster=cluster,
    )
    return [(label, pyramid) for (label, _), pyramid in zip(labeled_images, pyramids)]
