"""
SegmentationEngine - 种子矩形驱动的前景/背景分割

根据配置选择分割后端：
- opencv: cv2.grabCut
- graphcut: sklearn GMM + scipy 最小割
"""

import numpy as np
from omegaconf import DictConfig

from ..context import Rect
from ..io import to_rgb, validate_image
from .grabcut import run_grabcut
from .graphcut import GraphCutSegmenter
from .trimap import bootstrap_trimap, count_classes, init_trimap


BACKENDS = ("opencv", "graphcut")


class SegmentationEngine:
    """分割引擎"""

    def __init__(
        self,
        backend: str = "opencv",
        iterations: int = 5,
        graphcut: GraphCutSegmenter | None = None
    ):
        """
        初始化分割引擎

        Args:
            backend: "opencv" | "graphcut"
            iterations: 固定迭代次数（不做收敛检测）
            graphcut: graphcut 后端实例，默认按默认参数创建
        """
        if backend not in BACKENDS:
            raise ValueError(f"未知的分割后端: {backend}，可选: {BACKENDS}")

        self.backend = backend
        self.iterations = iterations
        self.graphcut = graphcut or GraphCutSegmenter()

    def segment(self, image_u8: np.ndarray, rect: Rect) -> np.ndarray:
        """
        分割图像

        Args:
            image_u8: uint8 灰度或 RGB(A) 图像
            rect: 种子矩形，必须在图像范围内

        Returns:
            uint8 (H,W) trimap，取值为 TrimapLabel
        """
        image_rgb = to_rgb(validate_image(image_u8))
        h, w = image_rgb.shape[:2]
        if not rect.contains(w, h):
            raise ValueError(f"种子矩形 {rect.as_tuple()} 超出图像范围 {w}x{h}")

        trimap = init_trimap(image_rgb.shape, rect)
        trimap = bootstrap_trimap(image_rgb, trimap)

        fg_count, bg_count = count_classes(trimap)
        if fg_count == 0 or bg_count == 0:
            print("[SegmentationEngine] Degenerate trimap (single class), returning as-is")
            return trimap

        backend = self.backend
        if backend == "opencv" and min(fg_count, bg_count) < self.graphcut.n_components:
            # cv2.grabCut 的 GMM 初始化要求每类至少有分量数个样本
            print(
                f"[SegmentationEngine] Too few samples for grabCut "
                f"(fg={fg_count}, bg={bg_count}), using graphcut backend"
            )
            backend = "graphcut"

        if backend == "opencv":
            return run_grabcut(image_rgb, trimap, self.iterations)
        return self.graphcut.segment(image_rgb, trimap, self.iterations)


def create_segmentation_engine(cfg: DictConfig, backend: str | None = None) -> SegmentationEngine:
    """
    便捷函数：按配置创建分割引擎

    Args:
        cfg: 配置对象，读取 segmentation 段
        backend: 覆盖配置中的后端

    Returns:
        SegmentationEngine 实例
    """
    seg_cfg = cfg.get("segmentation", {})
    gc_cfg = seg_cfg.get("graphcut", {})

    graphcut = GraphCutSegmenter(
        n_components=seg_cfg.get("gmm_components", 5),
        gamma=gc_cfg.get("gamma", 50.0),
        neighborhood=gc_cfg.get("neighborhood", 8),
        reg_covar=gc_cfg.get("reg_covar", 1.0),
        max_samples=gc_cfg.get("max_samples", 20000),
        max_unary=gc_cfg.get("max_unary", 1000.0),
        capacity_scale=gc_cfg.get("capacity_scale", 10.0),
        random_state=gc_cfg.get("random_state", 0)
    )

    return SegmentationEngine(
        backend=backend or seg_cfg.get("backend", "opencv"),
        iterations=seg_cfg.get("iterations", 5),
        graphcut=graphcut
    )
