from __future__ import annotations

from pathlib import Path
from typing import Sequence, Tuple

import cv2
import matplotlib.pyplot as plt
import numpy as np

from grid.base import GridBase
from kernels.pyramid import PyramidImage
from utils.io import grid_to_image


def montage(
    images: Sequence[np.ndarray],
    cols: int = 8,
    gap: int = 2,
    bg_value: int = 255,
) -> np.ndarray:
    """
    grayscale 이미지 목록을 타일 형태의 몽타주로 합친다.

    Args:
        images (Sequence[np.ndarray]): 같은 크기의 2D uint8 이미지 리스트.
        cols (int): 한 줄에 놓을 이미지 수.
        gap (int): 이미지 간 간격(픽셀).
        bg_value (int): 배경 밝기.

    Returns:
        np.ndarray: 몽타주 이미지 (2D uint8).
    """
    if len(images) == 0:
        return np.zeros((32, 32), dtype=np.uint8)

    h, w = images[0].shape[:2]
    cols = min(cols, len(images))
    rows = (len(images) + cols - 1) // cols

    canvas_h = rows * h + (rows - 1) * gap
    canvas_w = cols * w + (cols - 1) * gap

    canvas = np.full((canvas_h, canvas_w), bg_value, dtype=np.uint8)

    for idx, img in enumerate(images):
        r = idx // cols
        c = idx % cols
        y = r * (h + gap)
        x = c * (w + gap)
        canvas[y : y + h, x : x + w] = img

    return canvas


def codebook_montage(
    kernels: Sequence[GridBase],
    cols: int = 8,
    gap: int = 2,
    scale: int = 8,
) -> np.ndarray:
    """
    kernel 목록을 확대해서 한 장의 몽타주로 만든다.

    Args:
        kernels (Sequence[GridBase]): codebook kernel 목록.
        cols (int): 한 줄당 kernel 수.
        gap (int): 간격(픽셀).
        scale (int): 셀 하나를 scale × scale 픽셀로 확대 (nearest).

    Note:
        - 3×3 kernel은 그대로 저장하면 너무 작아서 확대 후 배치한다.
    """
    tiles = [
        cv2.resize(
            grid_to_image(kernel),
            (kernel.side * scale, kernel.side * scale),
            interpolation=cv2.INTER_NEAREST,
        )
        for kernel in kernels
    ]
    return montage(tiles, cols=cols, gap=gap)


def save_codebook_montage(
    kernels: Sequence[GridBase],
    save_path: str | Path,
    cols: int = 8,
    scale: int = 8,
) -> None:
    """codebook 몽타주를 이미지 파일로 저장한다."""
    save_path = Path(save_path)
    save_path.parent.mkdir(parents=True, exist_ok=True)
    cv2.imwrite(str(save_path), codebook_montage(kernels, cols=cols, scale=scale))


def save_pyramid_figure(
    pyramid: PyramidImage,
    save_path: str | Path,
    title: str = "Kernel Pyramid",
    panel_size: Tuple[float, float] = (3.0, 3.0),
) -> None:
    """
    pyramid 레벨을 한 줄로 나란히 그려 저장한다 (왼쪽 원본 → 오른쪽 top).

    Args:
        pyramid (PyramidImage): 시각화할 pyramid.
        save_path (str | Path): 저장 경로.
        title (str): 그림 제목.
        panel_size (Tuple[float, float]): 레벨 패널 하나의 크기(inch).
    """
    save_path = Path(save_path)
    save_path.parent.mkdir(parents=True, exist_ok=True)

    n = len(pyramid)
    fig, axes = plt.subplots(1, n, figsize=(panel_size[0] * n, panel_size[1]), squeeze=False)
    for level, (ax, grid) in enumerate(zip(axes[0], pyramid)):
        if level == 0:
            ax.imshow(grid.to_array(), cmap="gray", vmin=0, vmax=255)
            ax.set_title(f"L0 original ({grid.side}x{grid.side})")
        else:
            # index 이미지는 값의 크기보다 구분이 중요하므로 범주형 colormap 사용
            ax.imshow(grid.to_array(), cmap="tab20", interpolation="nearest")
            ax.set_title(f"L{level} ({grid.side}x{grid.side})")
        ax.axis("off")

    fig.suptitle(title)
    fig.tight_layout()
    fig.savefig(save_path)
    plt.close(fig)
