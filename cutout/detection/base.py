"""
FaceLocator - 人脸定位器基类

定义人脸检测能力接口，种子选择与后续模块只依赖该接口。
"""

from abc import ABC, abstractmethod
from typing import Iterable

import numpy as np

from ..context import Rect


class FaceLocator(ABC):
    """人脸定位器基类"""

    name = "base"

    @abstractmethod
    def detect_faces(self, image_u8: np.ndarray) -> list[Rect]:
        """
        检测人脸

        Args:
            image_u8: 输入图像，uint8 灰度或 RGB(A)，不会被修改

        Returns:
            人脸矩形列表，无人脸时返回空列表
        """
        pass

    def release(self) -> None:
        """释放模型句柄（默认无资源）"""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False


class StaticLocator(FaceLocator):
    """返回固定候选框的定位器，用于测试或外部已知人脸位置"""

    name = "static"

    def __init__(self, faces: Iterable[Rect | tuple[int, int, int, int]] = ()):
        self.faces = [f if isinstance(f, Rect) else Rect(*f) for f in faces]

    def detect_faces(self, image_u8: np.ndarray) -> list[Rect]:
        return list(self.faces)
