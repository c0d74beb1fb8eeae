"""
IO 模块 - 图像读写

职责：
- 文件解码为 uint8 数组，失败时抛出 ImageLoadFailure
- 输出产物写盘
- 统一输入的通道格式
"""

from .image_io import load_image, save_image, validate_image, to_rgb, to_gray

__all__ = ["load_image", "save_image", "validate_image", "to_rgb", "to_gray"]
