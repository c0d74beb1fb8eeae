"""
GraphCutSegmenter - GMM + 最小割的前景提取

每轮迭代：
1. 分别在前景类、背景类像素上拟合高斯混合颜色模型
2. 数据项 D(p) = -log p(z_p | model)
3. 平滑项 V(p,q) = gamma / dist(p,q) * exp(-beta * |z_p - z_q|^2)
4. 在网格图上求最小割（节点索引 = row * W + col，另加 source/sink 两个终端）

锁定标签（确定前景/确定背景）在所有迭代中保持不变。
"""

import numpy as np
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import breadth_first_order, maximum_flow
from sklearn.mixture import GaussianMixture

from ..context import FOREGROUND_LABELS, TrimapLabel


# maximum_flow 只接受 int32 容量
_INT32_BUDGET = 2 ** 31 - 1


def grid_edges(height: int, width: int, neighborhood: int = 8) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    生成网格图的邻接边（每对邻居只出现一次）

    Args:
        height: 图像高度
        width: 图像宽度
        neighborhood: 4 或 8 邻域

    Returns:
        (src, dst, dist) 三个一维数组，src/dst 为节点索引
    """
    if neighborhood not in (4, 8):
        raise ValueError(f"neighborhood 必须是 4 或 8，当前: {neighborhood}")

    idx = np.arange(height * width).reshape(height, width)
    offsets = [(0, 1), (1, 0)]
    if neighborhood == 8:
        offsets += [(1, 1), (1, -1)]

    srcs, dsts, dists = [], [], []
    for dy, dx in offsets:
        xs, xe = (0, width - dx) if dx >= 0 else (-dx, width)
        src = idx[0:height - dy, xs:xe]
        dst = idx[dy:height, xs + dx:xe + dx]
        srcs.append(src.ravel())
        dsts.append(dst.ravel())
        dists.append(np.full(src.size, np.hypot(dy, dx)))

    return np.concatenate(srcs), np.concatenate(dsts), np.concatenate(dists)


class GraphCutSegmenter:
    """GMM 颜色模型 + 网格最小割的迭代分割器"""

    def __init__(
        self,
        n_components: int = 5,
        gamma: float = 50.0,
        neighborhood: int = 8,
        reg_covar: float = 1.0,
        max_samples: int = 20000,
        max_unary: float = 1000.0,
        capacity_scale: float = 10.0,
        random_state: int = 0
    ):
        """
        初始化分割器

        Args:
            n_components: 每个 GMM 的分量数上限
            gamma: 平滑项权重
            neighborhood: 4 或 8 邻域
            reg_covar: 协方差对角正则（8-bit 颜色单位）
            max_samples: 拟合 GMM 时的最大采样像素数
            max_unary: 数据项截断上限
            capacity_scale: 浮点代价转整数容量的缩放
            random_state: 采样与 GMM 初始化的随机种子
        """
        self.n_components = n_components
        self.gamma = gamma
        self.neighborhood = neighborhood
        self.reg_covar = reg_covar
        self.max_samples = max_samples
        self.max_unary = max_unary
        self.capacity_scale = capacity_scale
        self.random_state = random_state

    def segment(self, image_rgb: np.ndarray, trimap: np.ndarray, iterations: int = 5) -> np.ndarray:
        """
        迭代分割

        Args:
            image_rgb: uint8 (H,W,3)
            trimap: 初始 trimap（不会被修改）
            iterations: 迭代次数

        Returns:
            新的 trimap
        """
        h, w = trimap.shape
        trimap = trimap.copy()
        flat = trimap.reshape(-1)
        pixels = image_rgb.reshape(-1, 3).astype(np.float64)

        locked_bg = flat == TrimapLabel.BACKGROUND
        locked_fg = flat == TrimapLabel.FOREGROUND
        free = ~(locked_bg | locked_fg)

        # 平滑项只依赖图像，整个迭代过程只算一次
        src, dst, pair_w = self._pairwise_weights(pixels, h, w)

        for it in range(iterations):
            fg_sel = np.isin(flat, FOREGROUND_LABELS)
            if not fg_sel.any() or fg_sel.all():
                print(f"[GraphCut] Iteration {it}: one class is empty, stopping early")
                break

            fg_model = self._fit_model(pixels[fg_sel])
            bg_model = self._fit_model(pixels[~fg_sel])

            cost_fg = -fg_model.score_samples(pixels)
            cost_bg = -bg_model.score_samples(pixels)

            source_side = self._min_cut(cost_fg, cost_bg, locked_fg, locked_bg, src, dst, pair_w)

            flat[free] = np.where(
                source_side[free],
                TrimapLabel.PROBABLE_FOREGROUND,
                TrimapLabel.PROBABLE_BACKGROUND
            )

        return trimap

    def _fit_model(self, samples: np.ndarray) -> GaussianMixture:
        """在样本上拟合 GMM，分量数不超过不同颜色的数量"""
        if len(samples) > self.max_samples:
            rng = np.random.default_rng(self.random_state)
            samples = samples[rng.choice(len(samples), self.max_samples, replace=False)]

        n_distinct = len(np.unique(samples, axis=0))
        k = max(1, min(self.n_components, n_distinct))

        # GaussianMixture 至少需要 2 个样本
        if len(samples) < 2:
            samples = np.repeat(samples, 2, axis=0)

        gmm = GaussianMixture(
            n_components=k,
            covariance_type="full",
            reg_covar=self.reg_covar,
            random_state=self.random_state
        )
        gmm.fit(samples)
        return gmm

    def _pairwise_weights(self, pixels: np.ndarray, h: int, w: int):
        """计算相邻像素的对比度敏感平滑权重"""
        src, dst, dist = grid_edges(h, w, self.neighborhood)
        if len(src) == 0:
            return src, dst, np.zeros(0)

        diff2 = np.sum((pixels[src] - pixels[dst]) ** 2, axis=1)
        mean_diff2 = diff2.mean()
        beta = 1.0 / (2.0 * mean_diff2) if mean_diff2 > 0 else 0.0

        weights = self.gamma / dist * np.exp(-beta * diff2)
        return src, dst, weights

    def _min_cut(
        self,
        cost_fg: np.ndarray,
        cost_bg: np.ndarray,
        locked_fg: np.ndarray,
        locked_bg: np.ndarray,
        src: np.ndarray,
        dst: np.ndarray,
        pair_w: np.ndarray
    ) -> np.ndarray:
        """
        求解最小割

        source = 前景，sink = 背景。像素留在 source 一侧时切断 p->sink，
        付出前景代价；反之付出背景代价。

        Returns:
            bool 数组，True 表示像素在 source（前景）一侧
        """
        n = len(cost_fg)
        source, sink = n, n + 1

        # 每个像素减去较小的代价，只保留差值
        base = np.minimum(cost_fg, cost_bg)
        cap_source = np.clip(cost_bg - base, 0, self.max_unary)
        cap_sink = np.clip(cost_fg - base, 0, self.max_unary)

        lock = self.max_unary + 8 * self.gamma + 1
        cap_source[locked_bg] = 0
        cap_sink[locked_bg] = lock
        cap_source[locked_fg] = lock
        cap_sink[locked_fg] = 0

        total = cap_source.sum() + cap_sink.sum() + 2 * pair_w.sum()
        scale = min(self.capacity_scale, _INT32_BUDGET / (total + 1.0))

        nodes = np.arange(n)
        rows = np.concatenate([src, dst, np.full(n, source), nodes])
        cols = np.concatenate([dst, src, nodes, np.full(n, sink)])
        data = np.rint(np.concatenate([pair_w, pair_w, cap_source, cap_sink]) * scale).astype(np.int32)

        keep = data > 0
        graph = csr_matrix((data[keep], (rows[keep], cols[keep])), shape=(n + 2, n + 2), dtype=np.int32)

        result = maximum_flow(graph, source, sink, method="dinic")

        # 残量图上从 source 可达的节点即前景
        residual = (graph - result.flow).tocsr()
        residual.data[residual.data < 0] = 0
        residual.eliminate_zeros()
        reached = breadth_first_order(residual, source, directed=True, return_predecessors=False)

        source_side = np.zeros(n + 2, dtype=bool)
        source_side[reached] = True
        return source_side[:n]
