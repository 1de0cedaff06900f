from __future__ import annotations

from typing import Any, List, Sequence

import matplotlib
import pytest

matplotlib.use("Agg")

from grid.base import GridBase
from grid.byte_grid import ByteGrid


class FirstCandidatesClusterer:
    """
    테스트용 clustering: 순서대로 처음 나온 서로 다른 candidate k개를 반환한다.

    distinct candidate가 k개보다 적으면 앞에서부터 반복해서 채운다.
    호출 인자는 calls에 기록된다.
    """

    def __init__(self) -> None:
        self.calls: List[dict] = []

    def __call__(self, candidates: Sequence[GridBase], k: int, distance: Any, mean: Any) -> List[GridBase]:
        self.calls.append({"num_candidates": len(candidates), "k": k, "distance": distance, "mean": mean})
        distinct: List[GridBase] = []
        for candidate in candidates:
            if candidate not in distinct:
                distinct.append(candidate)
            if len(distinct) == k:
                break
        return [distinct[i % len(distinct)] for i in range(k)]


@pytest.fixture
def first_clusterer() -> FirstCandidatesClusterer:
    return FirstCandidatesClusterer()


@pytest.fixture
def grid_1_to_9() -> ByteGrid:
    return ByteGrid.from_cells(range(1, 10))


@pytest.fixture
def corpus_4x4() -> List[ByteGrid]:
    return [
        ByteGrid.from_cells([0, 0, 255, 255] * 4),
        ByteGrid.from_cells([10 * i for i in range(16)]),
        ByteGrid.from_cells([255, 0] * 8),
    ]
