"""格式处理器模块。

解析输出格式，为目标格式准备颜色模式，并生成编码参数。
"""

from pathlib import Path
from typing import Any

from PIL import Image

from ..exceptions import UnsupportedFormatError
from ..models.constants import (
    ImageFormats,
    QualityDefaults,
    format_from_extension,
    get_format_alias,
)
from ..models.processing_config import OutputFormat
from ..utils.logging_helpers import get_logger


logger = get_logger()

# 编码器会写入 EXIF / ICC 的格式
METADATA_CARRYING_FORMATS = frozenset({"JPEG", "PNG", "WEBP", "TIFF"})

# JPEG APP1 段的最大负载
_JPEG_MAX_EXIF_SIZE = 65533

_PNG_MODES = frozenset({"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"})
_BMP_MODES = frozenset({"1", "L", "P", "RGB", "RGBA"})


def _has_alpha(img: Image.Image) -> bool:
    return img.mode in ("RGBA", "LA", "PA") or "transparency" in img.info


class FormatProcessor:
    """格式处理器"""

    def resolve_format(
        self,
        requested: OutputFormat | None,
        destination: Path | None = None,
        source_format: str | None = None,
    ) -> str:
        """确定实际输出格式

        优先级: 显式指定的格式（same 表示沿用源格式）> 目标路径扩展名 > JPEG

        Raises:
            UnsupportedFormatError: 要求沿用源格式但源格式无法写出时
        """
        if requested is OutputFormat.SAME_AS_INPUT:
            fmt = get_format_alias(source_format) if source_format else None
            if fmt not in ImageFormats.PREFERRED_EXTENSIONS:
                raise UnsupportedFormatError(
                    f"无法沿用源格式输出: {source_format or '未知'}", destination
                )
            return fmt

        if requested is not None:
            return requested.pillow_format

        if destination is not None and (fmt := format_from_extension(destination.suffix)):
            return fmt

        return ImageFormats.DEFAULT_FORMAT

    def prepare_for_format(self, img: Image.Image, target_format: str) -> Image.Image:
        """为目标格式准备图片的颜色模式

        Args:
            img: PIL图片对象
            target_format: 目标格式

        Returns:
            Image.Image: 处理后的图片对象
        """
        match target_format:
            case "JPEG":
                return self._prepare_for_jpeg(img)
            case "PNG":
                return self._prepare_for_png(img)
            case "WEBP":
                return self._prepare_for_webp(img)
            case "BMP":
                return self._prepare_for_bmp(img)
            case _:
                return img

    def _prepare_for_jpeg(self, img: Image.Image) -> Image.Image:
        """JPEG 不支持透明度，合成到白色背景上"""
        if img.mode in ("RGB", "L", "CMYK"):
            return img

        if img.mode == "P" and "transparency" not in img.info:
            return img.convert("RGB")

        if _has_alpha(img):
            rgba = img.convert("RGBA")
            background = Image.new("RGB", img.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.getchannel("A"))
            return background

        return img.convert("RGB")

    def _prepare_for_png(self, img: Image.Image) -> Image.Image:
        """PNG 支持大部分模式，其余转换为 RGB / RGBA"""
        if img.mode in _PNG_MODES:
            return img
        return img.convert("RGBA" if _has_alpha(img) else "RGB")

    def _prepare_for_webp(self, img: Image.Image) -> Image.Image:
        """WebP 只支持 RGB 和 RGBA"""
        if img.mode in ("RGB", "RGBA"):
            return img
        return img.convert("RGBA" if _has_alpha(img) else "RGB")

    def _prepare_for_bmp(self, img: Image.Image) -> Image.Image:
        if img.mode in _BMP_MODES:
            return img
        return img.convert("RGBA" if _has_alpha(img) else "RGB")


def get_save_parameters(
    format_name: str,
    quality: int = QualityDefaults.DEFAULT,
    progressive: bool = False,
    png_optimize: bool = True,
    info: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """获取保存参数

    质量只作用于有损格式，无损格式忽略质量参数。
    info 中仍保留的 EXIF 和 ICC 数据会被写入输出。

    Returns:
        dict: 保存参数字典，不包含 format，由调用方处理
    """
    params: dict[str, Any] = {}

    match format_name:
        case "JPEG":
            params.update(get_jpeg_params(quality, progressive))
        case "PNG":
            params.update(get_png_params(png_optimize))
        case "WEBP":
            params.update(get_webp_params(quality))

    if format_name in METADATA_CARRYING_FORMATS and info:
        params.update(_get_metadata_params(format_name, info))

    return params


def get_jpeg_params(quality: int, progressive: bool = False) -> dict[str, Any]:
    """获取JPEG压缩参数

    - optimize: 额外处理以找到最优霍夫曼表
    - progressive: 渐进式JPEG，适合网络传输
    - subsampling: 色度子采样，高质量时使用 4:2:2
    """
    return {
        "quality": quality,
        "optimize": True,
        "progressive": progressive,
        "subsampling": 1 if quality >= 85 else 2,
    }


def get_png_params(optimize: bool) -> dict[str, Any]:
    """获取PNG压缩参数

    PNG 是无损格式，优化时使用最高 zlib 压缩级别并启用 optimize。
    """
    if optimize:
        return {"optimize": True, "compress_level": QualityDefaults.PNG_OPTIMIZED_LEVEL}
    return {"compress_level": QualityDefaults.PNG_DEFAULT_LEVEL}


def get_webp_params(quality: int) -> dict[str, Any]:
    """获取WebP压缩参数

    - method: 0=快速，6=最慢但压缩最好
    - alpha_quality: 透明通道质量，高质量时保持无损
    """
    params: dict[str, Any] = {"quality": quality, "method": 6}

    if quality >= 85:
        params["alpha_quality"] = 100
    elif quality >= 70:
        params["alpha_quality"] = min(100, quality + 10)
    else:
        params["alpha_quality"] = quality

    return params


def _get_metadata_params(format_name: str, info: dict[str, Any]) -> dict[str, Any]:
    params: dict[str, Any] = {}

    if icc_profile := info.get("icc_profile"):
        params["icc_profile"] = icc_profile

    if exif := info.get("exif"):
        if format_name == "JPEG" and len(exif) > _JPEG_MAX_EXIF_SIZE:
            logger.warning(f"EXIF 数据过大 ({len(exif):,} 字节)，JPEG 输出中已跳过")
        else:
            params["exif"] = exif

    return params
