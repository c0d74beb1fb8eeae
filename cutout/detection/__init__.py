"""
Detection 模块 - 人脸定位

职责：
- 提供统一的人脸检测接口 FaceLocator
- Haar 级联（默认）与 MediaPipe（可选）两种实现
"""

from omegaconf import DictConfig

from .base import FaceLocator, StaticLocator
from .haar import HaarCascadeLocator, create_haar_locator, default_cascade_path


def create_face_locator(cfg: DictConfig, min_neighbors: int | None = None) -> FaceLocator:
    """
    按配置创建人脸定位器

    Args:
        cfg: 配置对象，detection.backend 为 "haar" | "mediapipe"
        min_neighbors: 覆盖 Haar 的最少邻居数

    Returns:
        FaceLocator 实例
    """
    det_cfg = cfg.get("detection", {})
    backend = det_cfg.get("backend", "haar")

    if backend == "mediapipe":
        from .mediapipe_locator import MediaPipeLocator
        return MediaPipeLocator(
            model_selection=det_cfg.get("mediapipe_model_selection", 1),
            min_detection_confidence=det_cfg.get("min_detection_confidence", 0.5)
        )

    if backend != "haar":
        raise ValueError(f"未知的检测后端: {backend}")

    return create_haar_locator(cfg, min_neighbors=min_neighbors)


__all__ = [
    "FaceLocator",
    "StaticLocator",
    "HaarCascadeLocator",
    "create_face_locator",
    "create_haar_locator",
    "default_cascade_path",
]
