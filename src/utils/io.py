from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple

import cv2
import numpy as np

from grid.base import GridBase
from grid.byte_grid import ByteGrid


def load_gray_grid(path: str | Path) -> ByteGrid:
    """
    grayscale 이미지를 읽어 ByteGrid로 변환한다.

    Args:
        path (str | Path): 이미지 파일 경로.

    Returns:
        ByteGrid: frozen 정사각 Grid.

    Raises:
        FileNotFoundError: 이미지 로딩 실패 시.
        ValueError: 정사각형 이미지가 아닌 경우.

    Note:
        - cv2.imread는 실패 시 None을 반환하므로 직접 예외로 바꾼다.
    """
    img = cv2.imread(str(path), cv2.IMREAD_GRAYSCALE)
    if img is None:
        raise FileNotFoundError(f"이미지 로드 실패: {path}")
    if img.shape[0] != img.shape[1]:
        raise ValueError(f"정사각형 이미지만 지원합니다: {path} ({img.shape[1]}x{img.shape[0]})")
    return ByteGrid.from_array(img)


def grid_to_image(grid: GridBase) -> np.ndarray:
    """Grid를 uint8 이미지 배열로 변환한다. bool Grid는 0/255로 확장."""
    array = grid.to_array()
    if array.dtype == bool:
        return array.astype(np.uint8) * 255
    return array.astype(np.uint8)


def save_grid(path: str | Path, grid: GridBase) -> None:
    """
    Grid를 PNG 등 이미지 파일로 저장한다. 상위 디렉토리를 자동 생성한다.

    Args:
        path (str | Path): 저장할 파일 경로.
        grid (GridBase): 저장할 Grid.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    cv2.imwrite(str(path), grid_to_image(grid))


def load_labeled_grids(
    root: str | Path,
    patterns: Sequence[str] = ("*.png", "*.jpg", "*.jpeg"),
) -> List[Tuple[str, ByteGrid]]:
    """
    root/<label>/*.png 구조의 폴더에서 (label, ByteGrid) 목록을 읽는다.

    Args:
        root (str | Path): 라벨별 하위 폴더를 가진 루트 디렉토리.
        patterns (Sequence[str]): 이미지 glob 패턴.

    Returns:
        List[Tuple[str, ByteGrid]]: 라벨 이름 순, 파일명 순으로 정렬된 목록.
    """
    root = Path(root)
    labeled: List[Tuple[str, ByteGrid]] = []
    for label_dir in sorted(p for p in root.iterdir() if p.is_dir()):
        files = sorted({f for pattern in patterns for f in label_dir.glob(pattern)})
        for img_path in files:
            labeled.append((label_dir.name, load_gray_grid(img_path)))
    return labeled


def _json_default(obj: Any) -> Any:
    """json.dump 에서 처리하지 못하는 객체를 문자열/리스트로 변환한다."""
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, (np.integer, np.floating)):
        return obj.item()
    if isinstance(obj, GridBase):
        return grid_to_image(obj).tolist()
    if isinstance(obj, Path):
        return str(obj)
    return str(obj)


def save_json(data: Dict[str, Any], path: str | Path) -> None:
    """dict 객체를 JSON 파일로 저장한다.

    Args:
        data (Dict[str, Any]): 저장할 데이터.
        path (str | Path): JSON 파일 경로.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, sort_keys=True, ensure_ascii=False, default=_json_default)
