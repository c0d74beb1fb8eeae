"""
MediaPipeLocator - 基于 MediaPipe 的人脸定位

与 Haar 级联同接口的替代检测器，返回绝对像素坐标矩形。
"""

import numpy as np

from ..context import Rect
from ..errors import ModelLoadFailure
from ..io import to_rgb
from .base import FaceLocator


class MediaPipeLocator(FaceLocator):
    """基于 MediaPipe Face Detection 的人脸定位器"""

    name = "mediapipe"

    def __init__(self, model_selection: int = 1, min_detection_confidence: float = 0.5):
        """
        初始化定位器

        Args:
            model_selection: 0 = 近距离模型，1 = 全范围模型
            min_detection_confidence: 最低检测置信度
        """
        self.model_selection = model_selection
        self.min_detection_confidence = min_detection_confidence

        # 延迟加载检测器
        self._detector = None

    @property
    def detector(self):
        """懒加载 MediaPipe 检测器"""
        if self._detector is None:
            self._load_detector()
        return self._detector

    def _load_detector(self) -> None:
        """加载 MediaPipe Face Detection"""
        print("[MediaPipeLocator] Loading MediaPipe Face Detection...")

        try:
            import mediapipe as mp
            mp_face_detection = mp.solutions.face_detection
            self._detector = mp_face_detection.FaceDetection(
                model_selection=self.model_selection,
                min_detection_confidence=self.min_detection_confidence
            )
        except (ImportError, AttributeError, RuntimeError) as e:
            raise ModelLoadFailure(f"MediaPipe 人脸检测不可用: {e}") from e

        print("[MediaPipeLocator] Loaded successfully")

    def release(self) -> None:
        """关闭检测器"""
        if self._detector is not None:
            self._detector.close()
            self._detector = None

    def detect_faces(self, image_u8: np.ndarray) -> list[Rect]:
        """
        检测人脸

        Args:
            image_u8: uint8 图像（内部转换为 RGB）

        Returns:
            人脸矩形列表（已裁剪到图像范围）
        """
        rgb = to_rgb(image_u8)
        h, w = rgb.shape[:2]

        results = self.detector.process(rgb)
        if not results.detections:
            return []

        faces = []
        for detection in results.detections:
            bbox = detection.location_data.relative_bounding_box

            # 相对坐标 -> 绝对坐标
            x = int(bbox.xmin * w)
            y = int(bbox.ymin * h)
            box_w = int(bbox.width * w)
            box_h = int(bbox.height * h)
            if box_w <= 0 or box_h <= 0:
                continue

            faces.append(Rect(x, y, box_w, box_h).clamp(w, h))

        return faces
