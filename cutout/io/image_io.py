"""
Image I/O - 图像读写与格式校验

核心功能：
- load_image: 使用 Pillow 解码为 uint8 RGB/RGBA/L 数组
- save_image: 按通道数选择保存模式
- validate_image / to_rgb: 统一输入格式
"""

from pathlib import Path

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from ..errors import ImageLoadFailure


# 支持的通道数
_SUPPORTED_CHANNELS = (1, 3, 4)


def load_image(path: str | Path, mode: str = "RGB") -> np.ndarray:
    """
    读取图像文件

    Args:
        path: 图像路径
        mode: Pillow 转换模式，"RGB" | "RGBA" | "L"

    Returns:
        uint8 图像数组

    Raises:
        ImageLoadFailure: 文件不存在、无法解码或解码结果为空
    """
    path = Path(path)
    if not path.is_file():
        raise ImageLoadFailure(f"找不到图像文件: {path}")

    try:
        with Image.open(path) as img:
            image_u8 = np.asarray(img.convert(mode), dtype=np.uint8).copy()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageLoadFailure(f"无法解码图像 {path}: {e}") from e

    return validate_image(image_u8)


def save_image(path: str | Path, image_u8: np.ndarray) -> Path:
    """
    保存图像，按通道数选择 L / RGB / RGBA

    Args:
        path: 输出路径（父目录不存在时自动创建）
        image_u8: uint8 图像

    Returns:
        实际写入的路径
    """
    image_u8 = validate_image(image_u8)
    if image_u8.ndim == 3 and image_u8.shape[2] == 1:
        image_u8 = image_u8[:, :, 0]

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    # Pillow 按形状推断 L / RGB / RGBA
    Image.fromarray(np.ascontiguousarray(image_u8)).save(path)
    return path


def validate_image(image: np.ndarray | None) -> np.ndarray:
    """
    校验输入图像

    Args:
        image: (H,W) / (H,W,1) / (H,W,3) / (H,W,4) 数组

    Returns:
        uint8 图像（非 uint8 输入会 clip 后转换）

    Raises:
        ImageLoadFailure: 图像为空或维度不合法
    """
    if image is None:
        raise ImageLoadFailure("输入图像不能为空")

    image = np.asarray(image)
    if image.size == 0:
        raise ImageLoadFailure(f"输入图像为空: {image.shape}")
    if image.ndim not in (2, 3):
        raise ImageLoadFailure(f"输入图像必须是 (H,W) 或 (H,W,C) 格式，当前: {image.shape}")
    if image.ndim == 3 and image.shape[2] not in _SUPPORTED_CHANNELS:
        raise ImageLoadFailure(f"不支持的通道数: {image.shape[2]}")

    if image.dtype != np.uint8:
        image = np.clip(image, 0, 255).astype(np.uint8)

    return image


def to_rgb(image_u8: np.ndarray) -> np.ndarray:
    """
    转换为 3 通道 RGB 副本

    灰度图复制到三个通道，RGBA 丢弃 alpha。
    """
    if image_u8.ndim == 2:
        return cv2.cvtColor(image_u8, cv2.COLOR_GRAY2RGB)

    channels = image_u8.shape[2]
    if channels == 1:
        return cv2.cvtColor(image_u8[:, :, 0], cv2.COLOR_GRAY2RGB)
    if channels == 4:
        return cv2.cvtColor(image_u8, cv2.COLOR_RGBA2RGB)
    return image_u8.copy()


def to_gray(image_u8: np.ndarray) -> np.ndarray:
    """转换为单通道灰度副本（检测在灰度上效果更好）"""
    if image_u8.ndim == 2:
        return image_u8.copy()

    channels = image_u8.shape[2]
    if channels == 1:
        return image_u8[:, :, 0].copy()
    if channels == 4:
        return cv2.cvtColor(image_u8, cv2.COLOR_RGBA2GRAY)
    return cv2.cvtColor(image_u8, cv2.COLOR_RGB2GRAY)
