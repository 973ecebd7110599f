"""数据模型包。

定义图片处理相关的数据结构和模型。
"""

from .constants import (
    ErrorKind,
    ImageFormats,
    QualityDefaults,
    ValidationLimits,
    format_from_extension,
    get_extension,
    get_format_alias,
    is_supported_extension,
)
from .image_metadata import BasicImageInfo, ImageInfo, MetadataBlock
from .processing_config import (
    AbsoluteResize,
    OutputFormat,
    ProcessingConfig,
    ResizeAlgorithm,
    ResizeMode,
    ScaleResize,
)
from .processing_stats import (
    BatchStats,
    FileError,
    FileOutcome,
    FileTask,
    ProcessingStats,
    calculate_savings,
    format_size,
)


__all__ = [
    # 核心模型
    "AbsoluteResize",
    "BasicImageInfo",
    "BatchStats",
    "ErrorKind",
    "FileError",
    "FileOutcome",
    "FileTask",
    "ImageInfo",
    "MetadataBlock",
    "OutputFormat",
    "ProcessingConfig",
    "ProcessingStats",
    "ResizeAlgorithm",
    "ResizeMode",
    "ScaleResize",
    # 常量和工具
    "ImageFormats",
    "QualityDefaults",
    "ValidationLimits",
    "calculate_savings",
    "format_from_extension",
    "format_size",
    "get_extension",
    "get_format_alias",
    "is_supported_extension",
]
