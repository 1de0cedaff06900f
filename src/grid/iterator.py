from __future__ import annotations

from typing import Iterator, Tuple


class ImageIterator:
    """
    사각 영역을 row-major 순서로 훑는 (x, y) 좌표 iterator.

    Attributes:
        x_start (int): 시작 x 좌표 (음수 허용).
        y_start (int): 시작 y 좌표 (음수 허용).
        width (int): 스캔 영역 너비.
        height (int): 스캔 영역 높이.
        stride (int): x, y 모두에 적용되는 이동 간격.

    Notes:
        - x는 stride만큼 증가하다가 x_start + width 에 도달하면 x_start로 돌아가고
          y가 stride만큼 증가한다. y가 y_start + height 에 도달하면 종료.
        - 같은 객체를 여러 번 순회할 수 있다(매 순회마다 처음부터 다시 시작).
        - 가장자리 근처의 centered 윈도우는 음수 좌표를 만들 수 있으며,
          범위 밖 좌표의 처리는 호출 측(option_get)이 담당한다.
    """

    def __init__(self, x: int, y: int, width: int, height: int, stride: int = 1) -> None:
        if stride <= 0:
            raise ValueError(f"stride must be positive, got {stride}")
        self.x_start = x
        self.y_start = y
        self.width = width
        self.height = height
        self.stride = stride

    @classmethod
    def centered(cls, x: int, y: int, width: int, height: int, stride: int = 1) -> "ImageIterator":
        """
        (x, y)를 중심으로 하는 iterator를 만든다.

        짝수 크기 윈도우는 정수 나눗셈 때문에 비대칭으로 나뉜다.
        (예: width=2 이면 x-1, x 두 칸)
        """
        return cls(x - width // 2, y - height // 2, width, height, stride)

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        x, y = self.x_start, self.y_start
        x_end = self.x_start + self.width
        y_end = self.y_start + self.height
        if self.width <= 0:
            return
        while y < y_end:
            yield x, y
            x += self.stride
            if x >= x_end:
                x = self.x_start
                y += self.stride

    def __len__(self) -> int:
        if self.width <= 0 or self.height <= 0:
            return 0
        per_row = -(-self.width // self.stride)
        rows = -(-self.height // self.stride)
        return per_row * rows

    def __repr__(self) -> str:
        return (
            f"ImageIterator(x={self.x_start}, y={self.y_start}, "
            f"width={self.width}, height={self.height}, stride={self.stride})"
        )
