import pytest

from kernels.config import KERNEL_SIZE, NUM_KERNELS, STRIDE, KernelConfig


class TestKernelConfig:
    def test_defaults(self):
        config = KernelConfig()
        assert config.num_kernels == NUM_KERNELS
        assert config.window_side == KERNEL_SIZE
        assert config.stride == STRIDE
        assert config.num_levels == 1

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"num_kernels": 0},
            {"num_kernels": 257},
            {"window_side": 0},
            {"stride": 0},
            {"num_levels": -1},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            KernelConfig(**kwargs)

    def test_max_kernels_allowed(self):
        assert KernelConfig(num_kernels=256).num_kernels == 256

    def test_zero_extra_levels_allowed(self):
        assert KernelConfig(num_levels=0).num_levels == 0
