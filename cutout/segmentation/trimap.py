"""
Trimap - 四类标签图的初始化与引导

- init_trimap: 矩形外为确定背景（锁定），矩形内为可能前景
- bootstrap_trimap: 没有锁定背景时按颜色二分初始化
"""

import numpy as np
from sklearn.cluster import MiniBatchKMeans

from ..context import FOREGROUND_LABELS, LOCKED_LABELS, Rect, TrimapLabel


def init_trimap(shape: tuple[int, ...], rect: Rect) -> np.ndarray:
    """
    由种子矩形创建初始 trimap

    没有任何像素初始为确定前景，矩形只是先验。

    Args:
        shape: 图像 shape，(H, W) 或 (H, W, C)
        rect: 种子矩形（已在图像范围内）

    Returns:
        uint8 (H,W) trimap
    """
    h, w = shape[:2]
    trimap = np.full((h, w), TrimapLabel.BACKGROUND, dtype=np.uint8)
    trimap[rect.y:rect.bottom, rect.x:rect.right] = TrimapLabel.PROBABLE_FOREGROUND
    return trimap


def count_classes(trimap: np.ndarray) -> tuple[int, int]:
    """返回 (前景类像素数, 背景类像素数)"""
    fg = int(np.isin(trimap, FOREGROUND_LABELS).sum())
    return fg, trimap.size - fg


def bootstrap_trimap(
    image_rgb: np.ndarray,
    trimap: np.ndarray,
    random_state: int = 42
) -> np.ndarray:
    """
    前景或背景为空时，对未锁定像素做颜色二分

    边界像素占多数的一簇作为可能背景，另一簇作为可能前景。
    颜色无法二分（例如纯色图）时原样返回。

    Args:
        image_rgb: uint8 (H,W,3)
        trimap: 当前 trimap

    Returns:
        新的 trimap
    """
    fg_count, bg_count = count_classes(trimap)
    if fg_count > 0 and bg_count > 0:
        return trimap

    free = ~np.isin(trimap, LOCKED_LABELS)
    pixels = image_rgb[free].astype(np.float32)
    if len(pixels) < 2 or len(np.unique(pixels, axis=0)) < 2:
        return trimap

    print("[Trimap] No locked background, bootstrapping with a 2-cluster color split")

    kmeans = MiniBatchKMeans(n_clusters=2, random_state=random_state, batch_size=1024, n_init=3, max_iter=100)
    labels = kmeans.fit_predict(pixels)

    cluster_map = np.full(trimap.shape, -1, dtype=np.int32)
    cluster_map[free] = labels

    border = np.zeros(trimap.shape, dtype=bool)
    border[0, :] = border[-1, :] = True
    border[:, 0] = border[:, -1] = True
    border_labels = cluster_map[border & free]
    bg_cluster = int(np.bincount(border_labels, minlength=2).argmax()) if len(border_labels) else 1

    result = trimap.copy()
    result[free] = np.where(
        labels == bg_cluster,
        TrimapLabel.PROBABLE_BACKGROUND,
        TrimapLabel.PROBABLE_FOREGROUND
    ).astype(np.uint8)
    return result
