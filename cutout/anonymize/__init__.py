"""
Anonymize 模块 - 人脸匿名化

职责：
- 复用人脸定位结果，对人脸区域做椭圆软 mask 模糊
"""

from .blurrer import FaceBlurrer, create_face_blurrer, ellipse_mask

__all__ = ["FaceBlurrer", "create_face_blurrer", "ellipse_mask"]
