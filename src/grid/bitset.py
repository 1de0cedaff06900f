"""
BitSet 모듈.

- bool 값을 64bit word 단위로 packing하여 저장하는 append-only 비트 배열.
- XOR + population count로 Hamming 거리를 계산한다.
- GridBase를 상속하므로 길이가 완전제곱수일 때는 정사각형 bool Grid로도 사용된다.
"""

from __future__ import annotations

from typing import Iterable, List

import numpy as np

from grid.base import GridBase

WORD_BITS = 64


def _word(index: int) -> int:
    return index // WORD_BITS


def _mask(index: int) -> int:
    return 1 << (index % WORD_BITS)


class BitSet(GridBase[bool]):
    """
    64bit word 기반 bool 시퀀스.

    Attributes:
        _words (List[int]): backing word 목록 (각 원소는 64bit 정수로 취급).
        _size (int): 논리적 비트 수. 항상 len(_words) * 64 이하.

    Notes:
        - 새 word는 비트 수가 64의 배수일 때만 할당된다 (append amortized O(1)).
        - 마지막 word의 사용되지 않는 상위 비트는 항상 0으로 유지된다.
    """

    fill_value = False

    def __init__(self) -> None:
        super().__init__()
        self._words: List[int] = []
        self._size = 0

    @staticmethod
    def word_size() -> int:
        return WORD_BITS

    @classmethod
    def from_bools(cls, values: Iterable[bool]) -> "BitSet":
        """bool 목록으로 BitSet을 만든다 (freeze는 하지 않는다)."""
        bits = cls()
        for value in values:
            bits.add(value)
        return bits

    # ----------------------------------------------------------------------
    # 비트 연산
    # ----------------------------------------------------------------------
    def _append(self, cell: bool) -> None:
        if self._size % WORD_BITS == 0:
            self._words.append(0)
        self._size += 1
        self._write(self._size - 1, bool(cell))

    def append(self, value: bool) -> None:
        self.add(value)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self._size:
            raise IndexError(f"bit index {index} out of range for length {self._size}")

    def _write(self, index: int, value: bool) -> None:
        if value:
            self._words[_word(index)] |= _mask(index)
        else:
            self._words[_word(index)] &= ~_mask(index)

    def set(self, index: int, value: bool) -> None:
        """
        index 위치의 비트를 value로 설정한다.

        Raises:
            IndexError: index >= len 인 경우.
            RuntimeError: freeze()된 BitSet인 경우.
        """
        self._check_mutable()
        self._check_index(index)
        self._write(index, value)

    def is_set(self, index: int) -> bool:
        self._check_index(index)
        return self._words[_word(index)] & _mask(index) != 0

    def population_count(self) -> int:
        """켜진 비트 수 (O(word 수))."""
        return sum(word.bit_count() for word in self._words)

    def xor(self, other: "BitSet") -> "BitSet":
        """
        word 단위 XOR 결과를 새 BitSet으로 반환한다.

        Raises:
            ValueError: 두 BitSet의 길이가 다른 경우.
        """
        if len(self) != len(other):
            raise ValueError(f"BitSet length mismatch: {len(self)} != {len(other)}")
        result = BitSet()
        result._words = [a ^ b for a, b in zip(self._words, other._words)]
        result._size = self._size
        result._side = self._side
        return result

    __xor__ = xor

    # ----------------------------------------------------------------------
    # GridBase 구현
    # ----------------------------------------------------------------------
    def _cell(self, index: int) -> bool:
        return self.is_set(index)

    def __len__(self) -> int:
        return self._size

    def as_vector(self) -> np.ndarray:
        return np.fromiter((self.is_set(i) for i in range(self._size)), dtype=bool, count=self._size)

    def pixelize(self, distance: float, window_side: int) -> bool:
        """다수결 형태의 threshold: 켜진 비트 수 < distance 이면 True."""
        return self.population_count() < distance

    # ----------------------------------------------------------------------
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BitSet):
            return NotImplemented
        return self._size == other._size and self._words == other._words

    __hash__ = GridBase.__hash__

    def __repr__(self) -> str:
        bits = "".join("1" if self.is_set(i) else "0" for i in range(min(self._size, 64)))
        suffix = "..." if self._size > 64 else ""
        return f"BitSet(len={self._size}, bits={bits}{suffix})"


def hamming_distance(b1: BitSet, b2: BitSet) -> int:
    """두 BitSet에서 값이 다른 위치의 수 = popcount(b1 XOR b2)."""
    return b1.xor(b2).population_count()
