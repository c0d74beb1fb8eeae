#!/usr/bin/env python
"""
Cutout Demo - 命令行演示脚本

使用方法:
    python examples/demo.py [input_image] [--output-dir DIR] [--mode remove|blur|both]

示例:
    python examples/demo.py fixtures/input.jpg --output-dir fixtures --mode both
"""

import sys
from pathlib import Path

# 添加项目根目录到路径
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import argparse
import numpy as np
from omegaconf import OmegaConf

from cutout.errors import CutoutError
from cutout.io import load_image, save_image
from cutout.pipeline import BLURRED_FILENAME, load_pipeline, save_cutout


def create_sample_image(width: int = 320, height: int = 240) -> np.ndarray:
    """
    创建一个示例图像（浅色背景上的人形色块）

    Returns:
        uint8 RGB 图像
    """
    img = np.zeros((height, width, 3), dtype=np.uint8)

    # 背景 - 浅蓝灰渐变
    for y in range(height):
        ratio = y / height
        img[y, :, 0] = int(200 - 30 * ratio)
        img[y, :, 1] = int(210 - 20 * ratio)
        img[y, :, 2] = int(225 - 10 * ratio)

    # 躯干 - 深红色
    torso_top = int(height * 0.55)
    torso_left = int(width * 0.3)
    torso_right = int(width * 0.7)
    img[torso_top:, torso_left:torso_right] = (150, 30, 40)

    # 头部 - 肤色椭圆
    yy, xx = np.mgrid[0:height, 0:width]
    cy, cx = int(height * 0.35), width // 2
    ry, rx = int(height * 0.18), int(width * 0.1)
    head = ((yy - cy) / ry) ** 2 + ((xx - cx) / rx) ** 2 <= 1.0
    img[head] = (225, 180, 150)

    # 添加随机噪声使图像更自然
    noise = np.random.randint(-10, 10, img.shape, dtype=np.int16)
    img = np.clip(img.astype(np.int16) + noise, 0, 255).astype(np.uint8)

    return img


def main():
    parser = argparse.ArgumentParser(description="Cutout Demo")
    parser.add_argument("input", nargs="?", help="输入图像路径")
    parser.add_argument("--output-dir", default=str(project_root / "examples" / "output"), help="输出目录")
    parser.add_argument("--mode", choices=["remove", "blur", "both"], default="both", help="处理模式")
    parser.add_argument("--config", default=None, help="配置文件路径")
    parser.add_argument("--backend", choices=["opencv", "graphcut"], default=None, help="分割后端")

    args = parser.parse_args()

    # 加载输入图像
    if args.input is None:
        print("创建示例图像...")
        input_image = create_sample_image()
    else:
        print(f"加载图像: {args.input}")
        try:
            input_image = load_image(args.input)
        except CutoutError as e:
            print(f"错误: {e}")
            return 1

    print(f"图像尺寸: {input_image.shape}")

    pipe = load_pipeline(args.config)
    if args.backend is not None:
        OmegaConf.update(pipe.cfg, "segmentation.backend", args.backend)

    output_dir = Path(args.output_dir)

    with pipe:
        if args.mode in ("remove", "both"):
            print("移除背景...")
            result = pipe.remove_background(input_image)
            for name, path in save_cutout(result, output_dir).items():
                print(f"{name} 已保存到: {path}")

        if args.mode in ("blur", "both"):
            print("模糊人脸...")
            try:
                blurred = pipe.blur_faces(input_image)
            except CutoutError as e:
                print(f"错误: {e}")
                return 1
            path = save_image(output_dir / BLURRED_FILENAME, blurred)
            print(f"blurred 已保存到: {path}")

    print("完成!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
