"""
MaskPostProcessor - trimap 转二值 alpha mask
"""

import numpy as np

from ..context import FOREGROUND_LABELS


def foreground_mask(trimap: np.ndarray) -> np.ndarray:
    """
    四类标签折叠为二值 mask

    确定前景与可能前景为 255，其余为 0。

    Args:
        trimap: uint8 (H,W)，TrimapLabel 值

    Returns:
        uint8 (H,W) mask，取值 {0, 255}
    """
    is_fg = np.isin(trimap, FOREGROUND_LABELS)
    return np.where(is_fg, 255, 0).astype(np.uint8)
