"""
Context - 核心数据结构

贯穿抠图 Pipeline 的矩形、标签与输出结构。
"""

from dataclasses import dataclass, field
from enum import IntEnum

import numpy as np


@dataclass(frozen=True)
class Rect:
    """像素坐标矩形 (x, y, width, height)"""

    x: int
    y: int
    width: int
    height: int

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    def as_tuple(self) -> tuple[int, int, int, int]:
        """转换为 OpenCV 风格的 (x, y, w, h) 元组"""
        return (self.x, self.y, self.width, self.height)

    def clamp(self, width: int, height: int) -> "Rect":
        """
        裁剪到图像范围内

        原点先截到 [0, W-1]，再收缩宽高，保证宽高至少为 1。

        Args:
            width: 图像宽度 W
            height: 图像高度 H

        Returns:
            图像范围内的新 Rect
        """
        x = min(max(0, self.x), width - 1)
        y = min(max(0, self.y), height - 1)
        w = max(1, min(width - x, self.width))
        h = max(1, min(height - y, self.height))
        return Rect(x, y, w, h)

    def contains(self, width: int, height: int) -> bool:
        """检查矩形是否完整落在 W x H 图像内且面积为正"""
        return (
            self.x >= 0 and self.y >= 0
            and self.width > 0 and self.height > 0
            and self.right <= width and self.bottom <= height
        )


class TrimapLabel(IntEnum):
    """四类像素标签，数值与 OpenCV 的 GC_* 常量一致"""
    BACKGROUND = 0
    FOREGROUND = 1
    PROBABLE_BACKGROUND = 2
    PROBABLE_FOREGROUND = 3


# 分类用的标签集合
FOREGROUND_LABELS = (TrimapLabel.FOREGROUND, TrimapLabel.PROBABLE_FOREGROUND)
LOCKED_LABELS = (TrimapLabel.BACKGROUND, TrimapLabel.FOREGROUND)


@dataclass
class SeedResult:
    """种子矩形选择结果"""

    rect: Rect                    # 最终种子矩形（已 padding + clamp）
    face: Rect | None = None      # 被选中的人脸框，fallback 时为 None
    used_fallback: bool = False


@dataclass
class CompositeOutput:
    """合成模块输出"""

    alpha: np.ndarray    # uint8 (H,W) - 仅 alpha
    rgba: np.ndarray     # uint8 (H,W,4) - 原图颜色 + alpha
    matted: np.ndarray   # uint8 (H,W,3) - 前景叠加到纯色背景


@dataclass
class CutoutResult:
    """背景移除 Pipeline 的完整输出"""

    seed: SeedResult
    trimap: np.ndarray             # uint8 (H,W) - TrimapLabel 值
    mask: np.ndarray               # uint8 (H,W) - {0, 255}
    composite: CompositeOutput
    faces: list[Rect] = field(default_factory=list)

    @property
    def seed_rect(self) -> Rect:
        return self.seed.rect

    @property
    def used_fallback(self) -> bool:
        return self.seed.used_fallback
