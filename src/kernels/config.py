from __future__ import annotations

from dataclasses import dataclass

NUM_KERNELS = 8
KERNEL_SIZE = 3
STRIDE = 2
NUM_LEVELS = 1
SEED = 2025

# kernel index 이미지는 ByteGrid에 저장되므로 index는 0~255 범위여야 한다.
MAX_INDEXED_KERNELS = 256


@dataclass
class KernelConfig:
    """
    Codebook 추출 / projection / pyramid 구성 설정 값.

    Attributes:
        num_kernels (int): codebook 크기 K (시각 단어 수).
        window_side (int): kernel 윈도우 한 변의 길이 W.
        stride (int): projection 스캔 간격. W=3, stride=2 이면 인접 윈도우가
            중심 픽셀을 공유하지 않는다.
        num_levels (int): 레벨 1 위에 추가로 쌓을 pyramid 레벨 수 (0 이상).
            파생 레벨 수는 num_levels + 1.
        seed (int): 기본 clustering(k-means++ seeding)의 random_state.
    """

    num_kernels: int = NUM_KERNELS
    window_side: int = KERNEL_SIZE
    stride: int = STRIDE
    num_levels: int = NUM_LEVELS
    seed: int = SEED

    def __post_init__(self) -> None:
        if self.num_kernels <= 0:
            raise ValueError(f"num_kernels must be positive, got {self.num_kernels}")
        if self.num_kernels > MAX_INDEXED_KERNELS:
            raise ValueError(
                f"num_kernels must be <= {MAX_INDEXED_KERNELS} for byte-indexed levels, "
                f"got {self.num_kernels}"
            )
        if self.window_side <= 0:
            raise ValueError(f"window_side must be positive, got {self.window_side}")
        if self.stride <= 0:
            raise ValueError(f"stride must be positive, got {self.stride}")
        if self.num_levels < 0:
            raise ValueError(f"num_levels must be >= 0, got {self.num_levels}")
