"""单文件处理流水线。

按顺序执行 读取 → （可选）移除元数据 → 解码 → （可选）缩放 → 编码并保存，
任一阶段失败都会中止整个流水线，且不会留下残缺的目标文件。
"""

from pathlib import Path

from ..exceptions import ValidationError, handle_image_errors
from ..models.constants import get_format_alias
from ..models.processing_config import ProcessingConfig
from ..models.processing_stats import ProcessingStats, format_size
from ..utils.logging_helpers import get_logger
from .encoder import ImageEncoder
from .formats import FormatProcessor
from .loader import RasterLoader
from .metadata import MetadataHandler
from .resizer import ImageResizer


logger = get_logger()


class ImageProcessor:
    """图像处理器

    配置在构造时验证，之后只读；同一实例可被多个工作线程并发使用。
    """

    def __init__(self, config: ProcessingConfig):
        config.validate()
        self.config = config

        self.loader = RasterLoader()
        self.metadata = MetadataHandler(self.loader)
        self.resizer = ImageResizer(config.algorithm, config.keep_aspect)
        self.format_processor = FormatProcessor()
        self.encoder = ImageEncoder(self.format_processor)

    @handle_image_errors("图像处理")
    def process(
        self, source_path: str | Path, destination_path: str | Path
    ) -> ProcessingStats:
        """处理单个文件

        Args:
            source_path: 源文件路径
            destination_path: 目标文件路径，编码成功后才会被创建或覆盖

        Returns:
            ProcessingStats: 处理统计，大小取自源文件和写入后的目标文件

        Raises:
            ImageToolError: 任一阶段失败时，原样向调用方传播
        """
        source_path = Path(source_path)
        destination_path = Path(destination_path)
        config = self.config

        self._check_file_size(source_path)
        data = self.loader.read_source(source_path)
        input_size = len(data)

        if config.strip_metadata:
            data = self.metadata.strip_bytes(data)

        img = self.loader.load_from_bytes(data, source=source_path)
        # 缩放后的图像不再携带 format，需要提前记录
        source_format = get_format_alias(img.format) if img.format else None
        width_before, height_before = img.size

        if config.strip_metadata:
            img = self.metadata.strip(img)

        if (mode := config.resize_mode) is not None:
            img = self.resizer.resize(img, mode)

        target_format = self.format_processor.resolve_format(
            config.format, destination_path, source_format
        )
        output_size = self.encoder.save(
            img,
            destination_path,
            target_format,
            quality=config.quality,
            progressive=config.progressive,
            png_optimize=config.png_optimize,
        )

        width_after, height_after = img.size
        stats = ProcessingStats(
            input_size=input_size,
            output_size=output_size,
            width_before=width_before,
            height_before=height_before,
            width_after=width_after,
            height_after=height_after,
            format_used=target_format,
            output_path=destination_path,
        )
        logger.info(f"✓ {source_path.name} → {destination_path}: {stats.get_summary()}")
        return stats

    def _check_file_size(self, source_path: Path) -> None:
        """在读取内容之前按文件系统报告的大小检查限制"""
        limit = self.config.max_file_size
        # 路径无效时交给加载阶段报告
        if limit is None or not source_path.is_file():
            return
        size = source_path.stat().st_size
        if size > limit:
            raise ValidationError(
                f"文件大小 {format_size(size)} 超过限制 {format_size(limit)}",
                source_path,
            )
