"""
错误类型定义
"""


class CutoutError(Exception):
    """抠图流程的基础异常"""


class ImageLoadFailure(CutoutError):
    """图像为空、无法解码或格式不合法（致命，Pipeline 直接中止）"""


class ModelLoadFailure(CutoutError):
    """人脸检测模型缺失或损坏"""
