"""
HaarCascadeLocator - 基于 OpenCV Haar 级联的人脸定位

在灰度图上运行 detectMultiScale，返回人脸矩形。
模型句柄由调用方持有：懒加载，release() 或 with 语句结束时释放。
"""

from pathlib import Path

import cv2
import numpy as np
from omegaconf import DictConfig

from ..context import Rect
from ..errors import ModelLoadFailure
from ..io import to_gray
from .base import FaceLocator


DEFAULT_CASCADE = "haarcascade_frontalface_default.xml"


def default_cascade_path() -> Path:
    """OpenCV 自带的正脸级联模型路径"""
    return Path(cv2.data.haarcascades) / DEFAULT_CASCADE


class HaarCascadeLocator(FaceLocator):
    """基于 Haar 级联的人脸定位器"""

    name = "haar"

    def __init__(
        self,
        model_path: str | Path | None = None,
        scale_factor: float = 1.1,
        min_neighbors: int = 6,
        min_size: tuple[int, int] = (0, 0)
    ):
        """
        初始化定位器（不加载模型）

        Args:
            model_path: 级联模型 XML 路径，默认使用 OpenCV 自带模型
            scale_factor: 多尺度扫描的缩放步长
            min_neighbors: 最少邻居数（置信度阈值）
            min_size: 最小人脸尺寸 (w, h)
        """
        self.model_path = Path(model_path) if model_path else default_cascade_path()
        self.scale_factor = scale_factor
        self.min_neighbors = min_neighbors
        self.min_size = tuple(min_size)

        # 延迟加载
        self._cascade = None

    @property
    def cascade(self) -> cv2.CascadeClassifier:
        """懒加载级联分类器"""
        if self._cascade is None:
            self._load_cascade()
        return self._cascade

    def _load_cascade(self) -> None:
        """
        加载级联模型

        Raises:
            ModelLoadFailure: 文件不存在或无法解析
        """
        print(f"[HaarCascade] Loading cascade: {self.model_path.name}")

        if not self.model_path.is_file():
            raise ModelLoadFailure(f"级联模型文件不存在: {self.model_path}")

        cascade = cv2.CascadeClassifier()
        try:
            loaded = cascade.load(str(self.model_path))
        except cv2.error as e:
            raise ModelLoadFailure(f"级联模型加载失败: {self.model_path}: {e}") from e
        if not loaded or cascade.empty():
            raise ModelLoadFailure(f"级联模型加载失败: {self.model_path}")

        self._cascade = cascade
        print("[HaarCascade] Loaded successfully")

    @property
    def is_loaded(self) -> bool:
        return self._cascade is not None

    def release(self) -> None:
        """释放模型句柄，下次检测时重新加载"""
        self._cascade = None

    def detect_faces(self, image_u8: np.ndarray) -> list[Rect]:
        """
        检测人脸

        Args:
            image_u8: uint8 灰度或 RGB(A) 图像

        Returns:
            人脸矩形列表

        Raises:
            ModelLoadFailure: 模型无法加载
        """
        gray = to_gray(image_u8)

        faces = self.cascade.detectMultiScale(
            gray,
            scaleFactor=self.scale_factor,
            minNeighbors=self.min_neighbors,
            minSize=self.min_size
        )

        return [Rect(int(x), int(y), int(w), int(h)) for (x, y, w, h) in faces]


def create_haar_locator(cfg: DictConfig, min_neighbors: int | None = None) -> HaarCascadeLocator:
    """
    便捷函数：按配置创建 Haar 定位器

    Args:
        cfg: 配置对象，读取 detection 段
        min_neighbors: 覆盖配置中的最少邻居数

    Returns:
        HaarCascadeLocator 实例
    """
    det_cfg = cfg.get("detection", {})
    return HaarCascadeLocator(
        model_path=det_cfg.get("model_path"),
        scale_factor=det_cfg.get("scale_factor", 1.1),
        min_neighbors=min_neighbors if min_neighbors is not None else det_cfg.get("min_neighbors", 6),
        min_size=tuple(det_cfg.get("min_size", (0, 0)))
    )
