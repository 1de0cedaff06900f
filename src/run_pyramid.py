"""Kernel Pyramid 실행 스크립트.

전체 실행 흐름
    1) Paths/logger/seed 초기화
    2) data/images/<label>/*.png 에서 정사각 grayscale 이미지 로드
    3) PyramidEncoder 학습 (레벨별 codebook) 및 전체 이미지 인코딩
    4) 레벨별 codebook 몽타주, 첫 이미지의 pyramid 그림 저장
    5) leave-one-out으로 이미지마다 가장 가까운 pyramid를 찾아 로그/JSON으로 저장
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np

from kernels.config import KernelConfig
from kernels.pyramid import PyramidEncoder, pyramid_distance
from utils.io import load_labeled_grids, save_json
from utils.logger import get_logger
from utils.paths import Paths
from utils.visualize import save_codebook_montage, save_pyramid_figure

# Main Logger
logger: Optional[logging.Logger] = None


if __name__ == "__main__":
    st_time = datetime.now()

    # ------------------------------------------------------------------
    # 0. 경로/로거/시드 설정
    # ------------------------------------------------------------------
    project_root = Path(os.path.join(os.path.dirname(__file__), "..")).resolve()
    paths = Paths.from_root(project_root)
    image_root = paths.data_dir / "images"
    result_dir = paths.result_dir

    logger = get_logger(paths.log_dir, "kernel_pyramid")
    logger.info("Project Root: %s", project_root)
    logger.info("Result Root: %s", result_dir)

    np.random.seed(2025)

    # ------------------------------------------------------------------
    # 1. 이미지 로드
    # ------------------------------------------------------------------
    if not image_root.exists():
        logger.error("이미지 폴더가 없습니다: %s (data/images/<label>/*.png 구조 필요)", image_root)
        raise SystemExit(1)

    labeled = load_labeled_grids(image_root)
    if len(labeled) < 2:
        logger.error("최소 2장의 이미지가 필요합니다. (현재 %d장)", len(labeled))
        raise SystemExit(1)

    labels = [label for label, _ in labeled]
    images = [img for _, img in labeled]
    logger.info("Images=%d, Labels=%d, Side=%d", len(images), len(set(labels)), images[0].side)

    # ------------------------------------------------------------------
    # 2. Pyramid 학습 / 인코딩
    # ------------------------------------------------------------------
    config = KernelConfig(num_kernels=8, window_side=3, stride=2, num_levels=2)
    encoder = PyramidEncoder(config=config)
    pyramids = encoder.fit_encode(images)

    for level, codebook in enumerate(encoder.codebooks, start=1):
        save_codebook_montage(codebook.kernels, result_dir / f"codebook_L{level}.png")
    save_pyramid_figure(pyramids[0], result_dir / f"pyramid_{labels[0]}_0.png", title=f"Pyramid ({labels[0]})")

    # ------------------------------------------------------------------
    # 3. Leave-one-out nearest pyramid
    # ------------------------------------------------------------------
    records: List[Dict[str, Any]] = []
    for i, query in enumerate(pyramids):
        candidates = [(pyramid_distance(query, other), j) for j, other in enumerate(pyramids) if j != i]
        best, j = min(candidates)
        logger.info(
            "[%03d][%s] nearest=%03d[%s] levels_identical=%d residual=%s",
            i,
            labels[i],
            j,
            labels[j],
            best.levels_identical,
            best.residual,
        )
        records.append(
            {
                "index": i,
                "label": labels[i],
                "nearest_index": j,
                "nearest_label": labels[j],
                "levels_identical": best.levels_identical,
                "residual": best.residual,
            }
        )

    save_json({"config": vars(config), "nearest": records}, result_dir / "nearest_pyramids.json")
    logger.info("Elapsed: %s", datetime.now() - st_time)
