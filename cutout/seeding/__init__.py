"""
Seeding 模块 - 种子矩形

职责：
- 从人脸候选框中选出主体所在的种子矩形
- 无可用人脸信息时提供居中降级矩形
"""

from .seeder import RegionSeeder, create_region_seeder, fallback_rect, pad_rect, select_largest

__all__ = ["RegionSeeder", "create_region_seeder", "fallback_rect", "pad_rect", "select_largest"]
