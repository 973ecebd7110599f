"""编码模块。

把图像编码为目标格式的字节，并原子地写入目标文件。
"""

from io import BytesIO
from pathlib import Path

from PIL import Image

from ..exceptions import EncodeError, handle_image_errors
from ..models.constants import QualityDefaults
from ..models.processing_stats import calculate_savings
from ..utils.cleanup_helpers import write_bytes_atomic
from ..utils.logging_helpers import get_logger
from .formats import FormatProcessor, get_save_parameters


logger = get_logger()


class ImageEncoder:
    """图像编码器

    编码在内存中完成，只有编码成功后才会创建目标文件。
    """

    def __init__(self, format_processor: FormatProcessor | None = None):
        self.format_processor = format_processor or FormatProcessor()

    @handle_image_errors("图像编码", stage_error=EncodeError)
    def encode(
        self,
        img: Image.Image,
        target_format: str,
        quality: int = QualityDefaults.DEFAULT,
        progressive: bool = False,
        png_optimize: bool = True,
    ) -> bytes:
        """编码图像

        Args:
            img: 待编码图像
            target_format: Pillow 格式名
            quality: 质量，仅对有损格式生效
            progressive: 是否生成渐进式 JPEG
            png_optimize: 是否启用 PNG 优化

        Returns:
            bytes: 编码后的数据

        Raises:
            EncodeError: 编码失败时
        """
        prepared = self.format_processor.prepare_for_format(img, target_format)
        params = get_save_parameters(
            target_format,
            quality=quality,
            progressive=progressive,
            png_optimize=png_optimize,
            info=img.info,
        )
        shown = {k: v for k, v in params.items() if k not in ("exif", "icc_profile")}
        logger.debug(f"编码参数: 格式={target_format}, 模式={prepared.mode}, {shown}")

        buffer = BytesIO()
        prepared.save(buffer, format=target_format, **params)
        return buffer.getvalue()

    def save(
        self,
        img: Image.Image,
        destination: str | Path,
        target_format: str,
        quality: int = QualityDefaults.DEFAULT,
        progressive: bool = False,
        png_optimize: bool = True,
    ) -> int:
        """编码并写入文件

        Returns:
            int: 写入的字节数
        """
        destination = Path(destination)
        data = self.encode(
            img,
            target_format,
            quality=quality,
            progressive=progressive,
            png_optimize=png_optimize,
        )
        written = self._write(destination, data)
        logger.debug(f"已写入 {destination} ({written:,} 字节)")
        return written

    @handle_image_errors("写入文件")
    def _write(self, destination: Path, data: bytes) -> int:
        return write_bytes_atomic(destination, data)

    @staticmethod
    def calculate_savings(before: int, after: int) -> float:
        """节省比例（百分比），输出变大时为 0"""
        return calculate_savings(before, after)
