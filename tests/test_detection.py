"""
Detection 模块单元测试
"""

import sys
from pathlib import Path

# 添加项目根目录到路径
sys.path.insert(0, str(Path(__file__).parent.parent))

import numpy as np
import pytest
from omegaconf import OmegaConf

from cutout.context import Rect
from cutout.detection import (
    FaceLocator,
    HaarCascadeLocator,
    StaticLocator,
    create_face_locator,
    default_cascade_path,
)
from cutout.errors import ModelLoadFailure


@pytest.fixture
def config():
    """测试配置"""
    return OmegaConf.create({
        "detection": {
            "backend": "haar",
            "model_path": None,
            "scale_factor": 1.2,
            "min_neighbors": 4,
            "min_size": [20, 20]
        }
    })


@pytest.fixture
def blank_image():
    """纯色图像"""
    return np.full((200, 200, 3), 128, dtype=np.uint8)


class TestStaticLocator:
    """StaticLocator 测试类"""

    def test_returns_given_faces(self, blank_image):
        """测试返回固定候选"""
        locator = StaticLocator([Rect(1, 2, 3, 4), (5, 6, 7, 8)])
        faces = locator.detect_faces(blank_image)
        assert faces == [Rect(1, 2, 3, 4), Rect(5, 6, 7, 8)]
        assert isinstance(locator, FaceLocator)

    def test_returns_new_list(self, blank_image):
        """测试返回列表的副本"""
        locator = StaticLocator([Rect(1, 2, 3, 4)])
        locator.detect_faces(blank_image).clear()
        assert len(locator.detect_faces(blank_image)) == 1


class TestHaarCascadeLocator:
    """HaarCascadeLocator 测试类"""

    def test_default_model_exists(self):
        """测试 OpenCV 自带模型存在"""
        assert default_cascade_path().is_file()

    def test_lazy_load(self):
        """测试初始化时不加载模型"""
        locator = HaarCascadeLocator()
        assert not locator.is_loaded

    def test_no_face_on_blank(self, blank_image):
        """测试纯色图像检测不到人脸"""
        locator = HaarCascadeLocator()
        assert locator.detect_faces(blank_image) == []
        assert locator.is_loaded

    def test_grayscale_and_rgba_input(self, blank_image):
        """测试灰度与 RGBA 输入"""
        locator = HaarCascadeLocator()
        gray = blank_image[:, :, 0].copy()
        rgba = np.dstack([blank_image, np.full((200, 200), 255, dtype=np.uint8)])
        assert locator.detect_faces(gray) == []
        assert locator.detect_faces(rgba) == []

    def test_does_not_mutate_input(self):
        """测试不修改输入图像"""
        image = np.random.default_rng(0).integers(0, 256, (120, 120, 3)).astype(np.uint8)
        before = image.copy()
        HaarCascadeLocator().detect_faces(image)
        assert np.array_equal(image, before)

    def test_missing_model(self, tmp_path, blank_image):
        """测试模型文件缺失时抛出 ModelLoadFailure"""
        locator = HaarCascadeLocator(model_path=tmp_path / "missing.xml")
        with pytest.raises(ModelLoadFailure):
            locator.detect_faces(blank_image)

    def test_corrupt_model(self, tmp_path, blank_image):
        """测试模型文件损坏时抛出 ModelLoadFailure"""
        bad = tmp_path / "bad.xml"
        bad.write_text("not a cascade")
        locator = HaarCascadeLocator(model_path=bad)
        with pytest.raises(ModelLoadFailure):
            locator.detect_faces(blank_image)

    def test_context_manager_releases(self, blank_image):
        """测试 with 语句结束时释放模型"""
        with HaarCascadeLocator() as locator:
            locator.detect_faces(blank_image)
            assert locator.is_loaded
        assert not locator.is_loaded

    def test_from_config(self, config):
        """测试从配置创建"""
        locator = create_face_locator(config)
        assert isinstance(locator, HaarCascadeLocator)
        assert locator.scale_factor == 1.2
        assert locator.min_neighbors == 4
        assert locator.min_size == (20, 20)
        assert locator.model_path == default_cascade_path()

    def test_min_neighbors_override(self, config):
        """测试覆盖最少邻居数"""
        locator = create_face_locator(config, min_neighbors=10)
        assert locator.min_neighbors == 10

    def test_unknown_backend(self):
        """测试未知后端"""
        cfg = OmegaConf.create({"detection": {"backend": "unknown"}})
        with pytest.raises(ValueError):
            create_face_locator(cfg)

    def test_mediapipe_backend_is_lazy(self):
        """测试 MediaPipe 后端创建时不加载模型"""
        cfg = OmegaConf.create({"detection": {"backend": "mediapipe"}})
        locator = create_face_locator(cfg)
        assert locator.name == "mediapipe"
        assert locator._detector is None
