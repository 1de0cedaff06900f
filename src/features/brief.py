"""
BRIEF 계열 bit descriptor 모듈.

- descriptor = 고정된 픽셀 쌍 ((x1, y1), (x2, y2)) 목록.
- 이미지에 적용하면 쌍마다 img[p1] < img[p2] 비교 결과 한 비트씩 BitSet이 만들어진다.
- 결과 BitSet은 hamming_distance / bitset_majority 와 함께 bit Grid 파이프라인의 입력이 된다.

지원 생성 방식:
    - classic_gaussian   : 두 점 모두 N(side/2, side/6) (이미지 범위로 clamp)
    - classic_uniform    : 두 점 모두 균등 분포
    - uniform_neighbor   : 모든 픽셀마다 균등 분포 상대점 neighbors개
    - gaussian_neighbor  : 모든 픽셀마다 정규 분포 offset 상대점 neighbors개
    - equidistant        : 모든 픽셀마다 고정 offset(wrap-around) 상대점 1개
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import numpy as np

from grid.bitset import BitSet
from grid.byte_grid import ByteGrid
from grid.iterator import ImageIterator

Point = Tuple[int, int]
Pair = Tuple[Point, Point]


def _rng(seed: Optional[int | np.random.Generator]) -> np.random.Generator:
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def constrained_random(rng: np.random.Generator, mean: float, stdev: float, max_value: int) -> int:
    """정규 분포 샘플을 [0, max_value - 1] 범위로 clamp한 정수."""
    value = rng.normal(mean, stdev)
    value = min(max(value, 0.0), float(max_value - 1))
    return int(value)


def random_bounded_normal_value(
    rng: np.random.Generator,
    stdev: float,
    start_value: int,
    min_value: int,
    max_value: int,
) -> int:
    """
    start_value에서 |N(0, stdev)| 만큼 떨어진 좌표를 [min_value, max_value) 범위에서 고른다.

    Notes:
        - 양쪽 모두 가능하면 방향을 무작위로 고른다.
        - 어느 쪽으로도 범위를 벗어나면 min_value 또는 max_value - 1 로 붙인다.
    """
    sample = int(abs(rng.normal(0.0, stdev)))
    min_diff = start_value - min_value
    max_diff = max_value - start_value

    if sample < min_diff and sample < max_diff:
        return start_value + sample if rng.random() < 0.5 else start_value - sample
    if sample < min_diff:
        return start_value - sample
    if sample < max_diff:
        return start_value + sample
    return min_value if rng.random() < 0.5 else max_value - 1


@dataclass
class Descriptor:
    """
    BRIEF descriptor.

    Attributes:
        pairs (List[Pair]): 비교할 픽셀 쌍 목록.
        width (int): 대상 이미지 너비.
        height (int): 대상 이미지 높이.
    """

    pairs: List[Pair]
    width: int
    height: int

    # ----------------------------------------------------------------------
    # 생성자
    # ----------------------------------------------------------------------
    @classmethod
    def classic_gaussian(cls, n: int, width: int, height: int, seed=None) -> "Descriptor":
        rng = _rng(seed)
        x_mean, x_std = width // 2, width // 6
        y_mean, y_std = height // 2, height // 6
        pairs: List[Pair] = []
        for _ in range(n):
            p1 = (
                constrained_random(rng, x_mean, x_std, width),
                constrained_random(rng, y_mean, y_std, height),
            )
            p2 = (
                constrained_random(rng, x_mean, x_std, width),
                constrained_random(rng, y_mean, y_std, height),
            )
            pairs.append((p1, p2))
        return cls(pairs, width, height)

    @classmethod
    def classic_uniform(cls, n: int, width: int, height: int, seed=None) -> "Descriptor":
        rng = _rng(seed)
        xs = rng.integers(0, width, size=(n, 2))
        ys = rng.integers(0, height, size=(n, 2))
        pairs = [
            ((int(xs[i, 0]), int(ys[i, 0])), (int(xs[i, 1]), int(ys[i, 1])))
            for i in range(n)
        ]
        return cls(pairs, width, height)

    @classmethod
    def uniform_neighbor(cls, neighbors: int, width: int, height: int, seed=None) -> "Descriptor":
        rng = _rng(seed)
        pairs: List[Pair] = []
        for x, y in ImageIterator(0, 0, width, height):
            for _ in range(neighbors):
                other = (int(rng.integers(0, width)), int(rng.integers(0, height)))
                pairs.append(((x, y), other))
        return cls(pairs, width, height)

    @classmethod
    def gaussian_neighbor(
        cls,
        neighbors: int,
        stdev: float,
        width: int,
        height: int,
        seed=None,
    ) -> "Descriptor":
        rng = _rng(seed)
        pairs: List[Pair] = []
        for x, y in ImageIterator(0, 0, width, height):
            for _ in range(neighbors):
                x_other = random_bounded_normal_value(rng, stdev, x, 0, width)
                y_other = random_bounded_normal_value(rng, stdev, y, 0, height)
                pairs.append(((x, y), (x_other, y_other)))
        return cls(pairs, width, height)

    @classmethod
    def equidistant(cls, width: int, height: int, x_offset: int, y_offset: int) -> "Descriptor":
        pairs = [
            ((x, y), ((x + x_offset) % width, (y + y_offset) % height))
            for x, y in ImageIterator(0, 0, width, height)
        ]
        return cls(pairs, width, height)

    # ----------------------------------------------------------------------
    # 적용
    # ----------------------------------------------------------------------
    def _check_image(self, img: ByteGrid) -> None:
        if img.side != self.width or img.side != self.height:
            raise ValueError(
                f"image side {img.side} does not match descriptor {self.width}x{self.height}"
            )

    def _apply(self, img: ByteGrid, evaluate: Callable[[ByteGrid, int, int, int, int], bool]) -> BitSet:
        self._check_image(img)
        bits = BitSet()
        for (x1, y1), (x2, y2) in self.pairs:
            bits.add(evaluate(img, x1, y1, x2, y2))
        return bits

    def apply_to(self, img: ByteGrid) -> BitSet:
        """쌍마다 img[p1] < img[p2] 한 비트."""
        return self._apply(img, lambda im, x1, y1, x2, y2: im.get(x1, y1) < im.get(x2, y2))

    def apply_kernel(self, img: ByteGrid, window_side: int) -> BitSet:
        """
        점 대신 윈도우끼리 비교한다.

        두 점 중심의 W×W 윈도우에서 p1 쪽 셀이 더 작은 위치가 W²/2 보다 많으면 True.
        """
        target = window_side * window_side // 2

        def evaluate(im: ByteGrid, x1: int, y1: int, x2: int, y2: int) -> bool:
            patch_1 = im.subimage(x1, y1, window_side).as_vector()
            patch_2 = im.subimage(x2, y2, window_side).as_vector()
            return int(np.count_nonzero(patch_1 < patch_2)) > target

        return self._apply(img, evaluate)

    def majority_image(self, img: ByteGrid) -> BitSet:
        """
        픽셀별 다수결 이미지.

        각 픽셀이 첫 번째 점으로 등장한 비교 중 True가 False보다 많으면 True.
        결과는 img와 같은 크기의 frozen bool Grid.
        """
        self._check_image(img)
        counts: Counter = Counter()
        for (x1, y1), (x2, y2) in self.pairs:
            counts[(x1, y1, img.get(x1, y1) < img.get(x2, y2))] += 1

        bits = BitSet()
        for x, y in img.x_y_iter():
            bits.add(counts[(x, y, True)] > counts[(x, y, False)])
        return bits.freeze()
