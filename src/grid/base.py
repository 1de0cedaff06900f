"""
Grid 공통 인터페이스 모듈.

- ByteGrid(0~255 픽셀)와 BitSet(bool 셀)이 공통으로 상속하는 추상 Grid 클래스.
- bounds 검사, 가장자리 zero-padding 윈도우 추출(subimage), 좌표 iterator 등
  셀 타입과 무관한 기능은 모두 여기서 제공한다.
- 셀 저장 방식, pixelize 규칙 등 셀 타입에 종속된 부분만 하위 클래스가 구현.

Grid는 두 단계로 사용된다.
    1) 빌드 단계: add()로 row-major 순서대로 셀을 하나씩 추가 (append-only)
    2) 사용 단계: freeze() 이후에는 셀이 변하지 않으며, 길이는 반드시 side² 이다.
"""

from __future__ import annotations

import abc
import math
from typing import Generic, Iterator, Optional, Tuple, TypeVar

import numpy as np

from grid.iterator import ImageIterator

T = TypeVar("T")


def side_for_length(length: int) -> int:
    """길이 length를 담을 수 있는 가장 작은 정사각형 한 변(ceil(sqrt(length)))."""
    root = math.isqrt(length)
    return root if root * root == length else root + 1


class GridBase(abc.ABC, Generic[T]):
    """
    정사각형 2D Grid의 공통 base class.

    Attributes:
        fill_value: 범위 밖 좌표를 읽을 때 대신 쓰이는 기본 셀 값.

    Notes:
        - side는 셀이 추가될 때마다 ceil(sqrt(len))로 갱신된다.
        - 길이가 완전제곱수가 아닌 "빌드 중" 상태에서도 get()은 동작하지만,
          y * side + x 가 실제 길이를 넘으면 IndexError.
    """

    fill_value: T

    def __init__(self) -> None:
        self._side = 0
        self._frozen = False

    # ----------------------------------------------------------------------
    # 하위 클래스 구현 메서드
    # ----------------------------------------------------------------------
    @abc.abstractmethod
    def _append(self, cell: T) -> None:
        """저장소 끝에 셀 하나를 추가한다."""

    @abc.abstractmethod
    def _cell(self, index: int) -> T:
        """row-major index 위치의 셀을 반환한다."""

    @abc.abstractmethod
    def __len__(self) -> int:
        pass

    @abc.abstractmethod
    def as_vector(self) -> np.ndarray:
        """셀 전체를 1D numpy 배열로 반환한다 (길이 = len)."""

    @abc.abstractmethod
    def pixelize(self, distance: float, window_side: int) -> T:
        """거리 값 하나를 출력 Grid의 셀 하나로 변환한다."""

    # ----------------------------------------------------------------------
    # 빌드 / freeze
    # ----------------------------------------------------------------------
    def add(self, cell: T) -> None:
        """
        row-major 순서로 셀을 하나 추가하고 side를 갱신한다.

        Raises:
            RuntimeError: 이미 freeze()된 Grid에 추가하려는 경우.
        """
        self._check_mutable()
        self._append(cell)
        if len(self) > self._side * self._side:
            self._side += 1

    def freeze(self):
        """
        Grid를 읽기 전용으로 고정하고 자기 자신을 반환한다.

        Raises:
            ValueError: 길이가 side² 가 아닌 경우(정사각형이 아님).
        """
        if len(self) != self._side * self._side:
            raise ValueError(
                f"Grid length {len(self)} is not a perfect square (side={self._side})."
            )
        self._frozen = True
        return self

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RuntimeError(f"{type(self).__name__} is frozen and cannot be modified.")

    def default(self):
        """같은 셀 타입의 빈 Grid를 새로 만든다."""
        return type(self)()

    # ----------------------------------------------------------------------
    # 좌표 접근
    # ----------------------------------------------------------------------
    @property
    def side(self) -> int:
        return self._side

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self._side and 0 <= y < self._side

    def get(self, x: int, y: int) -> T:
        """
        (x, y) 셀을 반환한다.

        Raises:
            IndexError: 좌표가 [0, side) 범위를 벗어나거나 아직 추가되지 않은 셀인 경우.
        """
        if not self.in_bounds(x, y):
            raise IndexError(f"({x}, {y}) is out of bounds for side {self._side}")
        index = y * self._side + x
        if index >= len(self):
            raise IndexError(f"({x}, {y}) has not been added yet (len={len(self)})")
        return self._cell(index)

    def option_get(self, x: int, y: int, default: Optional[T] = None) -> Optional[T]:
        """범위 밖이면 예외 대신 default를 반환하는 get()."""
        if self.in_bounds(x, y):
            return self.get(x, y)
        return default

    def cells(self) -> Iterator[T]:
        for index in range(len(self)):
            yield self._cell(index)

    # ----------------------------------------------------------------------
    # 좌표 iterator / 윈도우 추출
    # ----------------------------------------------------------------------
    def x_y_iter(self) -> ImageIterator:
        return ImageIterator(0, 0, self._side, self._side, 1)

    def x_y_step_iter(self, stride: int) -> ImageIterator:
        return ImageIterator(0, 0, self._side, self._side, stride)

    def subimage(self, x_center: int, y_center: int, window_side: int):
        """
        (x_center, y_center)를 중심으로 window_side × window_side 윈도우를 잘라낸다.

        Args:
            x_center (int): 중심 x 좌표.
            y_center (int): 중심 y 좌표.
            window_side (int): 윈도우 한 변의 길이.

        Returns:
            같은 타입의 frozen Grid (길이는 항상 window_side²).

        Notes:
            - 원본 밖으로 나가는 좌표는 잘라내지 않고 fill_value로 채운다.
            - 짝수 window_side는 중심 기준 왼쪽/위쪽으로 한 칸 더 치우친다.
        """
        result = self.default()
        for x, y in ImageIterator.centered(x_center, y_center, window_side, window_side):
            result.add(self.option_get(x, y, self.fill_value))
        return result.freeze()

    def to_array(self) -> np.ndarray:
        """(side, side) 형태의 numpy 배열로 변환한다."""
        if len(self) != self._side * self._side:
            raise ValueError(f"Grid length {len(self)} is not a perfect square.")
        return self.as_vector().reshape(self._side, self._side)

    @property
    def shape(self) -> Tuple[int, int]:
        return self._side, self._side

    def __hash__(self) -> int:
        if not self._frozen:
            raise TypeError(f"unhashable type: mutable {type(self).__name__}")
        return hash((type(self).__name__, len(self), self.as_vector().tobytes()))
