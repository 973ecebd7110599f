"""核心模块包。

单文件处理流水线的各个阶段: 加载、元数据、缩放、格式与编码。
"""

from .encoder import ImageEncoder
from .formats import FormatProcessor, get_save_parameters
from .image_info import ImageInfoExtractor
from .loader import RasterLoader
from .metadata import MetadataHandler
from .processor import ImageProcessor
from .resizer import ImageResizer, compute_target_dimensions


__all__ = [
    "FormatProcessor",
    "ImageEncoder",
    "ImageInfoExtractor",
    "ImageProcessor",
    "ImageResizer",
    "MetadataHandler",
    "RasterLoader",
    "compute_target_dimensions",
    "get_save_parameters",
]
