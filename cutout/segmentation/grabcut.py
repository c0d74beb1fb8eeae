"""
OpenCV GrabCut 后端
"""

import cv2
import numpy as np


def run_grabcut(image_rgb: np.ndarray, trimap: np.ndarray, iterations: int = 5) -> np.ndarray:
    """
    以 trimap 初始化运行 cv2.grabCut

    Args:
        image_rgb: uint8 (H,W,3)
        trimap: uint8 (H,W)，TrimapLabel 值与 GC_* 一致（不会被修改）
        iterations: 迭代次数

    Returns:
        新的 trimap
    """
    mask = np.ascontiguousarray(trimap, dtype=np.uint8).copy()
    bgd_model = np.zeros((1, 65), np.float64)
    fgd_model = np.zeros((1, 65), np.float64)

    cv2.grabCut(
        np.ascontiguousarray(image_rgb),
        mask,
        None,
        bgd_model,
        fgd_model,
        iterations,
        cv2.GC_INIT_WITH_MASK
    )

    return mask
