"""
CutoutPipeline - 主处理流水线

人脸引导的主体抠图与人脸匿名化的核心入口：
FaceLocator -> RegionSeeder -> SegmentationEngine -> MaskPostProcessor -> Compositor
"""

from pathlib import Path

import numpy as np
from omegaconf import OmegaConf, DictConfig

from .context import CutoutResult
from .errors import ModelLoadFailure
from .io import save_image, validate_image


DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "default.yaml"

# 输出文件名
ALPHA_FILENAME = "output_with_alpha.png"
RGBA_FILENAME = "output_4_channel.png"
COMPOSITED_FILENAME = "output_composited.png"
BLURRED_FILENAME = "output_blurred.jpg"


def load_config(config: str | Path | DictConfig | None = None) -> DictConfig:
    """
    加载配置

    Args:
        config: 配置文件路径或 DictConfig，默认使用 config/default.yaml；
                默认文件不存在时使用各模块的内置默认值

    Returns:
        DictConfig
    """
    if isinstance(config, DictConfig):
        return config
    if config is not None:
        return OmegaConf.load(config)
    if DEFAULT_CONFIG_PATH.is_file():
        return OmegaConf.load(DEFAULT_CONFIG_PATH)
    return OmegaConf.create({})


class CutoutPipeline:
    """人脸引导抠图主 Pipeline"""

    def __init__(
        self,
        config: str | Path | DictConfig | None = None,
        locator=None,
        blur_locator=None
    ):
        """
        初始化 Pipeline

        Args:
            config: 配置文件路径或 DictConfig
            locator: 背景移除使用的 FaceLocator，默认按配置创建
            blur_locator: 人脸模糊使用的 FaceLocator，默认按配置创建
        """
        self.cfg: DictConfig = load_config(config)

        # 初始化各模块（延迟加载）
        self._locator = locator
        self._blur_locator = blur_locator
        self._seeder = None
        self._segmenter = None
        self._compositor = None
        self._blurrer = None

    # ==================== 模块懒加载 ====================

    @property
    def locator(self):
        """背景移除的人脸定位器（懒加载）"""
        if self._locator is None:
            from .detection import create_face_locator
            self._locator = create_face_locator(self.cfg)
        return self._locator

    @property
    def blur_locator(self):
        """人脸模糊的定位器（懒加载，使用更严格的邻居阈值）"""
        if self._blur_locator is None:
            from .detection import create_face_locator
            min_neighbors = self.cfg.get("blur", {}).get("min_neighbors", 10)
            self._blur_locator = create_face_locator(self.cfg, min_neighbors=min_neighbors)
        return self._blur_locator

    @property
    def seeder(self):
        """种子矩形选择器（懒加载）"""
        if self._seeder is None:
            from .seeding import create_region_seeder
            self._seeder = create_region_seeder(self.cfg)
        return self._seeder

    @property
    def segmenter(self):
        """分割引擎（懒加载）"""
        if self._segmenter is None:
            from .segmentation import create_segmentation_engine
            self._segmenter = create_segmentation_engine(self.cfg)
        return self._segmenter

    @property
    def compositor(self):
        """合成器（懒加载）"""
        if self._compositor is None:
            from .matting import create_compositor
            self._compositor = create_compositor(self.cfg)
        return self._compositor

    @property
    def blurrer(self):
        """人脸模糊器（懒加载）"""
        if self._blurrer is None:
            from .anonymize import create_face_blurrer
            self._blurrer = create_face_blurrer(self.cfg)
        return self._blurrer

    # ==================== 主处理流程 ====================

    def remove_background(self, image_u8: np.ndarray) -> CutoutResult:
        """
        移除背景

        Args:
            image_u8: 输入图像，uint8 灰度或 RGB(A)

        Returns:
            CutoutResult，包含种子矩形、trimap、mask 和三种合成产物

        Raises:
            ImageLoadFailure: 输入图像为空或格式不合法
        """
        from .matting import foreground_mask

        image_u8 = validate_image(image_u8)

        # A. 人脸定位（模型不可用时走降级路径）
        try:
            faces = self.locator.detect_faces(image_u8)
        except ModelLoadFailure as e:
            print(f"[Pipeline] Face locator unavailable, using fallback seed: {e}")
            faces = []

        # B. 种子矩形
        seed = self.seeder.seed(faces, image_u8.shape)

        # C. 迭代分割
        trimap = self.segmenter.segment(image_u8, seed.rect)

        # D. 二值 mask
        mask = foreground_mask(trimap)

        # E. 合成
        composite = self.compositor.composite(image_u8, mask)

        coverage = float((mask == 255).mean())
        print(
            f"[Pipeline] faces={len(faces)} seed={seed.rect.as_tuple()} "
            f"fallback={seed.used_fallback} foreground={coverage:.1%}"
        )

        return CutoutResult(
            seed=seed,
            trimap=trimap,
            mask=mask,
            composite=composite,
            faces=faces
        )

    def blur_faces(self, image_u8: np.ndarray) -> np.ndarray:
        """
        模糊所有检测到的人脸

        没有检测到人脸时返回原图副本。

        Args:
            image_u8: 输入图像

        Returns:
            模糊后的新图像

        Raises:
            ImageLoadFailure: 输入图像为空或格式不合法
            ModelLoadFailure: 人脸模型不可用（无法匿名化，不做降级）
        """
        image_u8 = validate_image(image_u8)
        faces = self.blur_locator.detect_faces(image_u8)
        print(f"[Pipeline] Blurring {len(faces)} face(s)")
        return self.blurrer.blur_faces(image_u8, faces)

    # ==================== 资源管理 ====================

    def close(self) -> None:
        """释放人脸模型句柄"""
        for locator in (self._locator, self._blur_locator):
            if locator is not None:
                locator.release()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


def save_cutout(result: CutoutResult, output_dir: str | Path) -> dict[str, Path]:
    """
    保存背景移除的三种产物

    Args:
        result: remove_background 的输出
        output_dir: 输出目录

    Returns:
        {产物名: 路径}
    """
    output_dir = Path(output_dir)
    return {
        "alpha": save_image(output_dir / ALPHA_FILENAME, result.composite.alpha),
        "rgba": save_image(output_dir / RGBA_FILENAME, result.composite.rgba),
        "matted": save_image(output_dir / COMPOSITED_FILENAME, result.composite.matted),
    }


def load_pipeline(config: str | Path | DictConfig | None = None) -> CutoutPipeline:
    """
    便捷函数：加载 Pipeline

    Args:
        config: 配置文件路径或 DictConfig

    Returns:
        CutoutPipeline 实例
    """
    return CutoutPipeline(config)
