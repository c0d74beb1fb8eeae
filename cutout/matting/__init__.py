"""
Matting 模块 - mask 后处理与合成

职责：
- 四类 trimap 折叠为二值 alpha mask
- 生成 alpha / RGBA / 纯色背景合成三种产物
"""

from .mask import foreground_mask
from .compositor import Compositor, alpha_only, create_compositor, matte, with_alpha

__all__ = ["foreground_mask", "Compositor", "alpha_only", "create_compositor", "matte", "with_alpha"]
