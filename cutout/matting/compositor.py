"""
Compositor - 输出合成

由原图和二值 mask 生成三种产物：
- alpha_only: 单通道 alpha 图
- with_alpha: 原图颜色 + alpha 的 4 通道图
- matte: 前景叠加到纯色背景
"""

import numpy as np
from omegaconf import DictConfig

from ..context import CompositeOutput
from ..io import to_rgb, validate_image


WHITE = (255, 255, 255)


def _check_shapes(image_u8: np.ndarray, mask: np.ndarray) -> None:
    if mask.ndim != 2:
        raise ValueError(f"mask 必须是 (H,W) 格式，当前: {mask.shape}")
    if image_u8.shape[:2] != mask.shape:
        raise ValueError(f"图像 {image_u8.shape[:2]} 与 mask {mask.shape} 尺寸不一致")


def alpha_only(mask: np.ndarray) -> np.ndarray:
    """单通道 alpha 图（mask 的副本）"""
    return np.asarray(mask, dtype=np.uint8).copy()


def with_alpha(image_u8: np.ndarray, mask: np.ndarray) -> np.ndarray:
    """
    原图颜色通道 + mask 作为 alpha

    灰度图复制为三通道；RGBA 原有的 alpha 被替换。

    Returns:
        uint8 (H,W,4)
    """
    image_u8 = validate_image(image_u8)
    _check_shapes(image_u8, mask)

    rgb = to_rgb(image_u8)
    return np.dstack([rgb, mask.astype(np.uint8)])


def matte(
    image_u8: np.ndarray,
    mask: np.ndarray,
    background_color: tuple[int, int, int] = WHITE
) -> np.ndarray:
    """
    前景叠加到纯色背景

    Args:
        image_u8: 原图
        mask: 二值 mask
        background_color: 背景颜色 (R, G, B)

    Returns:
        uint8 (H,W,3)，mask=255 处为原图像素，其余为背景色
    """
    image_u8 = validate_image(image_u8)
    _check_shapes(image_u8, mask)

    rgb = to_rgb(image_u8)
    composited = np.empty_like(rgb)
    composited[:] = np.asarray(background_color, dtype=np.uint8)

    fg = mask == 255
    composited[fg] = rgb[fg]
    return composited


class Compositor:
    """输出合成器"""

    def __init__(self, background_color: tuple[int, int, int] = WHITE):
        self.background_color = tuple(int(c) for c in background_color)

    def composite(self, image_u8: np.ndarray, mask: np.ndarray) -> CompositeOutput:
        """
        生成全部三种产物

        Args:
            image_u8: 原图（不会被修改）
            mask: uint8 (H,W) {0, 255}（不会被修改）

        Returns:
            CompositeOutput
        """
        return CompositeOutput(
            alpha=alpha_only(mask),
            rgba=with_alpha(image_u8, mask),
            matted=matte(image_u8, mask, self.background_color)
        )


def create_compositor(cfg: DictConfig) -> Compositor:
    """便捷函数：按配置创建合成器"""
    comp_cfg = cfg.get("compositing", {})
    return Compositor(background_color=tuple(comp_cfg.get("background_color", WHITE)))
