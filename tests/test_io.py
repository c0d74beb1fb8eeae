"""
IO 模块单元测试
"""

import sys
from pathlib import Path

# 添加项目根目录到路径
sys.path.insert(0, str(Path(__file__).parent.parent))

import numpy as np
import pytest

from cutout.errors import ImageLoadFailure
from cutout.io import load_image, save_image, to_gray, to_rgb, validate_image


@pytest.fixture
def sample_image():
    """随机 RGB 图像 (30x40)"""
    return np.random.default_rng(5).integers(0, 256, (30, 40, 3)).astype(np.uint8)


class TestValidateImage:
    """validate_image 测试类"""

    def test_none(self):
        """测试空输入"""
        with pytest.raises(ImageLoadFailure):
            validate_image(None)

    def test_empty(self):
        """测试零尺寸图像"""
        with pytest.raises(ImageLoadFailure):
            validate_image(np.zeros((0, 10, 3), dtype=np.uint8))

    def test_bad_rank(self):
        """测试维度错误"""
        with pytest.raises(ImageLoadFailure):
            validate_image(np.zeros((4, 4, 3, 1), dtype=np.uint8))

    def test_bad_channels(self):
        """测试不支持的通道数"""
        with pytest.raises(ImageLoadFailure):
            validate_image(np.zeros((4, 4, 2), dtype=np.uint8))

    def test_float_converted(self):
        """测试非 uint8 输入被 clip 后转换"""
        out = validate_image(np.array([[-5.0, 300.0]]))
        assert out.dtype == np.uint8
        assert out.tolist() == [[0, 255]]


class TestChannelConversion:
    """通道转换测试"""

    def test_to_rgb_from_gray(self):
        gray = np.full((5, 6), 42, dtype=np.uint8)
        rgb = to_rgb(gray)
        assert rgb.shape == (5, 6, 3)
        assert (rgb == 42).all()

    def test_to_rgb_from_rgba(self, sample_image):
        rgba = np.dstack([sample_image, np.zeros((30, 40), dtype=np.uint8)])
        assert np.array_equal(to_rgb(rgba), sample_image)

    def test_to_rgb_returns_copy(self, sample_image):
        out = to_rgb(sample_image)
        assert out is not sample_image
        assert np.array_equal(out, sample_image)

    def test_to_gray(self, sample_image):
        assert to_gray(sample_image).shape == (30, 40)
        single = sample_image[:, :, :1]
        assert np.array_equal(to_gray(single), sample_image[:, :, 0])


class TestLoadSave:
    """读写测试"""

    def test_roundtrip_rgb(self, tmp_path, sample_image):
        """测试 PNG 无损读写"""
        path = save_image(tmp_path / "out" / "rgb.png", sample_image)
        assert path.is_file()
        assert np.array_equal(load_image(path), sample_image)

    def test_save_rgba_and_alpha(self, tmp_path, sample_image):
        """测试 4 通道与单通道保存"""
        rgba = np.dstack([sample_image, np.full((30, 40), 200, dtype=np.uint8)])
        loaded = load_image(save_image(tmp_path / "rgba.png", rgba), mode="RGBA")
        assert np.array_equal(loaded, rgba)

        alpha = sample_image[:, :, 0].copy()
        loaded = load_image(save_image(tmp_path / "alpha.png", alpha), mode="L")
        assert np.array_equal(loaded, alpha)

    def test_missing_file(self, tmp_path):
        """测试文件不存在"""
        with pytest.raises(ImageLoadFailure):
            load_image(tmp_path / "missing.jpg")

    def test_corrupt_file(self, tmp_path):
        """测试无法解码的文件"""
        bad = tmp_path / "bad.png"
        bad.write_bytes(b"not an image")
        with pytest.raises(ImageLoadFailure):
            load_image(bad)
