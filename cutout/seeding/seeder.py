"""
RegionSeeder - 种子矩形选择

把人脸检测结果转换为一个包含主体的种子矩形：
- 选取面积最大的人脸，按比例向四周扩展（纵向多于横向，覆盖脸下方的身体）
- 没有人脸时退化为居中的 70% x 70% 矩形
"""

from typing import Sequence

from omegaconf import DictConfig

from ..context import Rect, SeedResult


def select_largest(candidates: Sequence[Rect]) -> Rect | None:
    """
    选取面积最大的候选框

    面积相同时保留先出现的一个。

    Args:
        candidates: 候选框序列

    Returns:
        最大候选框，序列为空时返回 None
    """
    if not candidates:
        return None
    return max(candidates, key=lambda r: r.area)


def pad_rect(
    face: Rect,
    image_width: int,
    image_height: int,
    pad_x_ratio: float = 0.5,
    pad_y_ratio: float = 0.9
) -> Rect:
    """
    扩展人脸框并裁剪到图像范围

    原点向左上移动 padding 的一半，宽高增加完整的 padding；
    原点截到 0 之后只收缩宽高，不再平移。

    Args:
        face: 人脸框
        image_width: 图像宽度 W
        image_height: 图像高度 H
        pad_x_ratio: 横向 padding 比例
        pad_y_ratio: 纵向 padding 比例

    Returns:
        图像范围内、宽高为正的矩形
    """
    pad_x = int(face.width * pad_x_ratio)
    pad_y = int(face.height * pad_y_ratio)

    x = max(0, face.x - pad_x // 2)
    y = max(0, face.y - pad_y // 2)
    width = min(image_width - x, face.width + pad_x)
    height = min(image_height - y, face.height + pad_y)

    # 越界的候选框也要落回图像内
    return Rect(x, y, width, height).clamp(image_width, image_height)


def fallback_rect(image_width: int, image_height: int, ratio: float = 0.7) -> Rect:
    """
    居中的默认矩形

    Args:
        image_width: 图像宽度 W
        image_height: 图像高度 H
        ratio: 覆盖比例

    Returns:
        居中矩形，例如 100x100 图像得到 Rect(15, 15, 70, 70)
    """
    w = max(1, int(image_width * ratio))
    h = max(1, int(image_height * ratio))
    return Rect((image_width - w) // 2, (image_height - h) // 2, w, h)


class RegionSeeder:
    """种子矩形选择器"""

    def __init__(
        self,
        pad_x_ratio: float = 0.5,
        pad_y_ratio: float = 0.9,
        fallback_ratio: float = 0.7
    ):
        self.pad_x_ratio = pad_x_ratio
        self.pad_y_ratio = pad_y_ratio
        self.fallback_ratio = fallback_ratio

    def seed(self, candidates: Sequence[Rect], image_shape: tuple[int, ...]) -> SeedResult:
        """
        选择种子矩形

        Args:
            candidates: 人脸候选框（可以为空）
            image_shape: 图像 shape，(H, W) 或 (H, W, C)

        Returns:
            SeedResult
        """
        height, width = image_shape[:2]

        face = select_largest(candidates)
        if face is None:
            rect = fallback_rect(width, height, self.fallback_ratio)
            print(f"[RegionSeeder] No face, using centered fallback {rect.as_tuple()}")
            return SeedResult(rect=rect, face=None, used_fallback=True)

        rect = pad_rect(face, width, height, self.pad_x_ratio, self.pad_y_ratio)
        return SeedResult(rect=rect, face=face, used_fallback=False)

    def fallback(self, image_shape: tuple[int, ...]) -> SeedResult:
        """直接走降级路径（不依赖人脸检测）"""
        return self.seed([], image_shape)


def create_region_seeder(cfg: DictConfig) -> RegionSeeder:
    """
    便捷函数：按配置创建种子选择器

    Args:
        cfg: 配置对象，读取 seeding 段

    Returns:
        RegionSeeder 实例
    """
    seed_cfg = cfg.get("seeding", {})
    return RegionSeeder(
        pad_x_ratio=seed_cfg.get("pad_x_ratio", 0.5),
        pad_y_ratio=seed_cfg.get("pad_y_ratio", 0.9),
        fallback_ratio=seed_cfg.get("fallback_ratio", 0.7)
    )
