"""
Segmentation 模块 - 前景/背景分割

职责：
- 由种子矩形初始化四类 trimap
- 迭代拟合前景/背景颜色模型并求最小割
"""

from .engine import SegmentationEngine, create_segmentation_engine
from .graphcut import GraphCutSegmenter, grid_edges
from .trimap import bootstrap_trimap, init_trimap

__all__ = [
    "SegmentationEngine",
    "create_segmentation_engine",
    "GraphCutSegmenter",
    "grid_edges",
    "bootstrap_trimap",
    "init_trimap",
]
