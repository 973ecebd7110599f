"""Python 图像处理工具库。

基于 Pillow 的图像缩放、重新编码和格式转换，支持并发批量处理。
"""

__version__ = "0.1.0"
__description__ = "图像缩放、优化与格式转换工具，提供 MCP 服务"

# 核心功能导出
from .core.processor import ImageProcessor
from .engine.batch import BatchProcessor
from .exceptions import ImageToolError
from .models import BatchStats, ImageInfo, ProcessingConfig, ProcessingStats
from .toolkit import ImageToolkit


__all__ = [
    "BatchProcessor",
    "BatchStats",
    "ImageInfo",
    "ImageProcessor",
    "ImageToolError",
    "ImageToolkit",
    "ProcessingConfig",
    "ProcessingStats",
    "get_version",
]


def get_version() -> str:
    """获取版本号。"""
    return __version__
