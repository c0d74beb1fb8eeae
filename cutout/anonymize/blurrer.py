"""
FaceBlurrer - 人脸匿名化

对每个人脸框：
- 对框内子图做强高斯模糊
- 生成内接椭圆 mask（可选羽化）
- 用椭圆 mask 把模糊子图混合回原图，框外像素保持不变
"""

from typing import Sequence

import cv2
import numpy as np
from omegaconf import DictConfig

from ..context import Rect
from ..io import validate_image


def _odd(size: int) -> int:
    """确保核大小为正奇数"""
    size = max(1, int(size))
    return size if size % 2 == 1 else size + 1


def ellipse_mask(width: int, height: int, feather: int = 0) -> np.ndarray:
    """
    生成内接于 width x height 矩形的椭圆 mask

    Args:
        width: 矩形宽
        height: 矩形高
        feather: 羽化核大小，0 表示硬边

    Returns:
        float32 (height, width)，椭圆内 1，椭圆外 0
    """
    mask = np.zeros((height, width), dtype=np.float32)
    center = (width // 2, height // 2)
    axes = (width // 2, height // 2)
    cv2.ellipse(mask, center, axes, 0, 0, 360, 1.0, -1)

    if feather > 0:
        k = _odd(feather)
        # 羽化限制在矩形内部，不影响框外像素
        mask = cv2.GaussianBlur(mask, (k, k), 0, borderType=cv2.BORDER_CONSTANT)

    return mask


class FaceBlurrer:
    """人脸模糊器"""

    def __init__(self, kernel_size: int | None = 101, feather: int = 0):
        """
        初始化模糊器

        Args:
            kernel_size: 高斯核大小（奇数），None 或 0 时按人脸框尺寸自动选择
            feather: 椭圆边缘羽化核大小，0 为硬边
        """
        self.kernel_size = kernel_size
        self.feather = feather

    def _kernel_for(self, rect: Rect) -> int:
        if self.kernel_size:
            return _odd(self.kernel_size)
        return _odd(max(rect.width, rect.height))

    def blur_faces(self, image_u8: np.ndarray, faces: Sequence[Rect]) -> np.ndarray:
        """
        依次模糊所有人脸，叠加在同一张图上

        Args:
            image_u8: uint8 图像（不会被修改）
            faces: 人脸框列表，为空时返回原图副本

        Returns:
            新图像
        """
        result = validate_image(image_u8).copy()
        for face in faces:
            self._blend_into(result, face)
        return result

    def _blend_into(self, image: np.ndarray, rect: Rect) -> None:
        """把单个区域的模糊结果写回 image（原地）"""
        h, w = image.shape[:2]
        rect = rect.clamp(w, h)

        roi = image[rect.y:rect.bottom, rect.x:rect.right]
        k = self._kernel_for(rect)
        blurred = cv2.GaussianBlur(np.ascontiguousarray(roi), (k, k), 0)
        if blurred.ndim < roi.ndim:
            # (H,W,1) 输入会被 OpenCV 压成 (H,W)
            blurred = blurred[:, :, np.newaxis]

        alpha = ellipse_mask(rect.width, rect.height, self.feather)
        if roi.ndim == 3:
            alpha = alpha[:, :, np.newaxis]

        mixed = roi.astype(np.float32) * (1 - alpha) + blurred.astype(np.float32) * alpha
        image[rect.y:rect.bottom, rect.x:rect.right] = np.clip(np.rint(mixed), 0, 255).astype(np.uint8)


def create_face_blurrer(cfg: DictConfig) -> FaceBlurrer:
    """
    便捷函数：按配置创建人脸模糊器

    Args:
        cfg: 配置对象，读取 blur 段

    Returns:
        FaceBlurrer 实例
    """
    blur_cfg = cfg.get("blur", {})
    return FaceBlurrer(
        kernel_size=blur_cfg.get("kernel_size", 101),
        feather=blur_cfg.get("feather", 0)
    )
