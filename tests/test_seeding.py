"""
Seeding 模块单元测试
"""

import sys
from pathlib import Path

# 添加项目根目录到路径
sys.path.insert(0, str(Path(__file__).parent.parent))

import numpy as np
import pytest
from omegaconf import OmegaConf

from cutout.context import Rect
from cutout.seeding import (
    RegionSeeder,
    create_region_seeder,
    fallback_rect,
    pad_rect,
    select_largest,
)


def _random_candidates(rng, width, height, count):
    """生成随机候选框（允许部分越界）"""
    faces = []
    for _ in range(count):
        w = int(rng.integers(1, max(2, width)))
        h = int(rng.integers(1, max(2, height)))
        x = int(rng.integers(-w // 2, width))
        y = int(rng.integers(-h // 2, height))
        faces.append(Rect(x, y, w, h))
    return faces


class TestRect:
    """Rect 测试类"""

    def test_area_and_edges(self):
        """测试面积与右下边界"""
        r = Rect(2, 3, 10, 20)
        assert r.area == 200
        assert r.right == 12
        assert r.bottom == 23
        assert r.as_tuple() == (2, 3, 10, 20)

    def test_clamp_inside(self):
        """测试范围内的矩形保持不变"""
        r = Rect(5, 5, 10, 10)
        assert r.clamp(100, 100) == r

    def test_clamp_shrinks(self):
        """测试越界时收缩宽高"""
        r = Rect(90, 95, 30, 30).clamp(100, 100)
        assert r == Rect(90, 95, 10, 5)
        assert r.contains(100, 100)

    def test_clamp_negative_origin(self):
        """测试负原点被截到 0"""
        r = Rect(-5, -5, 10, 10).clamp(100, 100)
        assert r.x == 0 and r.y == 0
        assert r.contains(100, 100)


class TestSelectLargest:
    """最大人脸选择测试"""

    def test_empty(self):
        """测试空候选返回 None"""
        assert select_largest([]) is None

    def test_picks_max_area(self):
        """测试选取面积最大的候选"""
        small = Rect(10, 10, 20, 20)
        large = Rect(15, 15, 30, 30)
        assert select_largest([small, large]) == large
        assert select_largest([large, small]) == large

    def test_tie_keeps_first(self):
        """测试面积相同时保留先出现的"""
        a = Rect(0, 0, 10, 20)
        b = Rect(50, 50, 20, 10)
        assert select_largest([a, b]) is a
        assert select_largest([b, a]) is b


class TestPadRect:
    """人脸框扩展测试"""

    def test_padding_formula(self):
        """测试横向 0.5、纵向 0.9 的扩展"""
        face = Rect(100, 100, 40, 40)
        # pad_x = 20, pad_y = 36
        assert pad_rect(face, 400, 400) == Rect(90, 82, 60, 76)

    def test_clamp_at_top_left(self):
        """测试左上角截断后只收缩不平移"""
        face = Rect(2, 2, 40, 40)
        r = pad_rect(face, 400, 400)
        assert r.x == 0 and r.y == 0
        assert r.width == 60
        assert r.height == 76

    def test_clamp_at_bottom_right(self):
        """测试右下角裁剪"""
        face = Rect(80, 80, 20, 20)
        r = pad_rect(face, 100, 100)
        assert r == Rect(75, 71, 25, 29)

    def test_custom_ratios(self):
        """测试自定义比例"""
        face = Rect(50, 50, 10, 10)
        assert pad_rect(face, 200, 200, 0.0, 0.0) == face


class TestFallbackRect:
    """降级矩形测试"""

    def test_100x100(self):
        """测试 100x100 图像得到 (15, 15, 70, 70)"""
        assert fallback_rect(100, 100) == Rect(15, 15, 70, 70)

    def test_non_square(self):
        """测试非方形图像"""
        r = fallback_rect(200, 100)
        assert r == Rect(30, 15, 140, 70)

    def test_tiny_image_positive(self):
        """测试极小图像仍有正面积"""
        r = fallback_rect(1, 1)
        assert r == Rect(0, 0, 1, 1)


class TestRegionSeeder:
    """RegionSeeder 测试类"""

    def test_fallback_when_no_faces(self):
        """测试无人脸时使用居中矩形"""
        seeder = RegionSeeder()
        seed = seeder.seed([], (100, 100, 3))
        assert seed.rect == Rect(15, 15, 70, 70)
        assert seed.used_fallback
        assert seed.face is None

    def test_fallback_ignores_content(self):
        """测试降级矩形与图像内容无关"""
        seeder = RegionSeeder()
        assert seeder.fallback((100, 100)).rect == seeder.seed([], (100, 100, 4)).rect

    def test_largest_face_determines_seed(self):
        """测试两个重叠候选时由较大者决定种子"""
        seeder = RegionSeeder()
        small = Rect(10, 10, 20, 20)
        large = Rect(15, 15, 30, 30)

        seed = seeder.seed([small, large], (200, 200, 3))

        assert seed.face == large
        assert not seed.used_fallback
        # pad_x = 15, pad_y = 27
        assert seed.rect == Rect(8, 2, 45, 57)
        assert seed.rect == pad_rect(large, 200, 200)

    @pytest.mark.parametrize("seed_value", range(20))
    def test_rect_always_in_bounds(self, seed_value):
        """测试任意候选下种子矩形都在图像范围内且面积为正"""
        rng = np.random.default_rng(seed_value)
        width = int(rng.integers(1, 300))
        height = int(rng.integers(1, 300))
        candidates = _random_candidates(rng, width, height, int(rng.integers(0, 5)))

        rect = RegionSeeder().seed(candidates, (height, width, 3)).rect

        assert 0 <= rect.x and 0 <= rect.y
        assert rect.right <= width and rect.bottom <= height
        assert rect.width > 0 and rect.height > 0

    def test_from_config(self):
        """测试从配置创建"""
        cfg = OmegaConf.create({
            "seeding": {"pad_x_ratio": 0.2, "pad_y_ratio": 0.4, "fallback_ratio": 0.5}
        })
        seeder = create_region_seeder(cfg)
        assert seeder.pad_x_ratio == 0.2
        assert seeder.pad_y_ratio == 0.4
        assert seeder.seed([], (100, 100)).rect == Rect(25, 25, 50, 50)

    def test_from_empty_config_uses_defaults(self):
        """测试空配置使用默认比例"""
        seeder = create_region_seeder(OmegaConf.create({}))
        assert seeder.pad_x_ratio == 0.5
        assert seeder.pad_y_ratio == 0.9
        assert seeder.fallback_ratio == 0.7
