"""图像处理相关常量定义。

集中管理支持的格式、扩展名映射和参数限制。
"""

from enum import Enum
from typing import Final


class ErrorKind(str, Enum):
    """错误类别枚举"""

    INVALID_PARAMETER = "invalid_parameter"
    DECODE = "decode"
    ENCODE = "encode"
    IO = "io"
    METADATA = "metadata"
    PROCESSING = "processing"


class ImageFormats:
    """图像格式管理"""

    # 用户友好的别名
    ALIASES: Final[dict[str, str]] = {
        "JPG": "JPEG",
        "TIF": "TIFF",
        # 部分相机 JPEG 被 Pillow 识别为多图格式
        "MPO": "JPEG",
    }

    # 批量处理时识别的输入扩展名（不区分大小写）
    SUPPORTED_EXTENSIONS: Final[frozenset[str]] = frozenset(
        {".jpg", ".jpeg", ".png", ".gif", ".bmp", ".tiff", ".tif", ".webp"}
    )

    # 扩展名到 Pillow 格式名
    EXTENSION_FORMATS: Final[dict[str, str]] = {
        ".jpg": "JPEG",
        ".jpeg": "JPEG",
        ".png": "PNG",
        ".gif": "GIF",
        ".bmp": "BMP",
        ".webp": "WEBP",
        ".tiff": "TIFF",
        ".tif": "TIFF",
    }

    # 首选扩展名（当一个格式有多个扩展名时）
    PREFERRED_EXTENSIONS: Final[dict[str, str]] = {
        "JPEG": ".jpg",
        "PNG": ".png",
        "GIF": ".gif",
        "BMP": ".bmp",
        "WEBP": ".webp",
        "TIFF": ".tiff",
    }

    # 无法从目标路径推断格式时的默认值
    DEFAULT_FORMAT: Final[str] = "JPEG"


class QualityDefaults:
    """质量相关默认值"""

    DEFAULT: Final[int] = 85
    MIN_QUALITY: Final[int] = 1
    MAX_QUALITY: Final[int] = 100

    # PNG 优化时使用的 zlib 压缩级别
    PNG_OPTIMIZED_LEVEL: Final[int] = 9
    PNG_DEFAULT_LEVEL: Final[int] = 6


class ValidationLimits:
    """验证相关限制"""

    # 目标尺寸上限（像素）
    MAX_DIMENSION: Final[int] = 100_000


def get_format_alias(format_str: str) -> str:
    """获取格式的标准名称"""
    format_upper = format_str.strip().upper()
    return ImageFormats.ALIASES.get(format_upper, format_upper)


def get_extension(format_str: str) -> str:
    """获取格式的首选扩展名"""
    standard_format = get_format_alias(format_str)
    return ImageFormats.PREFERRED_EXTENSIONS.get(
        standard_format, f".{standard_format.lower()}"
    )


def format_from_extension(suffix: str) -> str | None:
    """根据扩展名推断格式，未知扩展名返回 None"""
    return ImageFormats.EXTENSION_FORMATS.get(suffix.lower())


def is_supported_extension(suffix: str) -> bool:
    """检查扩展名是否在批量处理支持的集合中"""
    return suffix.lower() in ImageFormats.SUPPORTED_EXTENSIONS
