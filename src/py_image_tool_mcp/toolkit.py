"""图像工具接口。

基于处理流水线的简洁用户接口，提供缩放、优化、格式转换、批量处理和信息查询。
单文件操作的错误原样传播给调用方；批量操作只在运行级错误时抛出异常。
"""

from pathlib import Path
from typing import Any

from .config import get_config
from .core.image_info import ImageInfoExtractor
from .core.processor import ImageProcessor
from .engine.batch import BatchProcessor
from .engine.concurrent_executor import ProgressCallback
from .engine.config import ConfigBuilder
from .exceptions import FileIOError, ValidationError
from .models import BatchStats, ImageInfo, ProcessingConfig, ProcessingStats
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter
from .utils.naming_helpers import PathResolver


logger = get_logger()


class ImageToolkit:
    """图像工具集。

    Examples:
        >>> toolkit = ImageToolkit()
        >>> stats = toolkit.resize("photo.jpg", width=800)
        >>> print(stats.get_summary())
    """

    def __init__(
        self,
        max_workers: int | None = None,
        executor_type: str | None = None,
    ):
        """初始化工具集。

        Args:
            max_workers: 批量处理时的最大并发数，0 表示使用 CPU 核心数，None 使用应用默认值
            executor_type: 执行器类型 ('thread'/'process')，None 使用应用默认值
        """
        defaults = get_config().processing
        self.max_workers = defaults.MAX_WORKERS if max_workers is None else max_workers
        self.executor_type = executor_type or defaults.EXECUTOR_TYPE

        if self.max_workers < 0:
            raise ValidationError("max_workers 不能为负数")
        if self.executor_type not in {"thread", "process"}:
            raise ValidationError("executor_type 必须是 'thread' 或 'process'")

        self.config_builder = ConfigBuilder()
        self.info_extractor = ImageInfoExtractor()

    def resize(
        self,
        input_path: str | Path,
        output_path: str | Path | None = None,
        width: int | None = None,
        height: int | None = None,
        scale: float | None = None,
        **options: Any,
    ) -> ProcessingStats:
        """调整单个图像的尺寸。

        至少需要指定 width、height、scale 中的一项。
        keep_aspect=False 时只给出 width 或 height，未给出的一边保持原尺寸。

        Args:
            input_path: 输入文件路径
            output_path: 输出文件路径，默认在输入文件旁生成 <名称>_resized<扩展名>
            width: 目标宽度
            height: 目标高度
            scale: 缩放比例，非零时优先于宽高
            **options: keep_aspect、algorithm、quality、format、strip_metadata 等配置

        Returns:
            ProcessingStats: 处理统计
        """
        config = self.config_builder.build(
            require_resize=True, width=width, height=height, scale=scale, **options
        )
        return self._process_single(input_path, output_path, config, "resized")

    def optimize(
        self,
        input_path: str | Path,
        output_path: str | Path | None = None,
        quality: int | None = None,
        **options: Any,
    ) -> ProcessingStats:
        """重新编码单个图像以减小文件大小，不改变尺寸。

        Args:
            input_path: 输入文件路径
            output_path: 输出文件路径，默认 <名称>_optimized<扩展名>
            quality: 有损格式的压缩质量
            **options: strip_metadata、progressive、png_optimize 等配置

        Returns:
            ProcessingStats: 处理统计
        """
        self._reject_resize_options(options)
        config = self.config_builder.build(quality=quality, **options)
        return self._process_single(input_path, output_path, config, "optimized")

    def convert(
        self,
        input_path: str | Path,
        format: str,
        output_path: str | Path | None = None,
        **options: Any,
    ) -> ProcessingStats:
        """转换单个图像的格式。

        Args:
            input_path: 输入文件路径
            format: 目标格式 jpeg/png/webp
            output_path: 输出文件路径，默认 <名称>_converted<目标扩展名>
            **options: quality、strip_metadata 等配置

        Returns:
            ProcessingStats: 处理统计
        """
        if not format:
            raise ValidationError("必须指定目标格式")
        self._reject_resize_options(options)
        config = self.config_builder.build(format=format, **options)
        return self._process_single(input_path, output_path, config, "converted")

    def batch(
        self,
        input_dir: str | Path,
        output_dir: str | Path,
        width: int | None = None,
        height: int | None = None,
        scale: float | None = None,
        recursive: bool = False,
        progress_callback: ProgressCallback | None = None,
        **options: Any,
    ) -> BatchStats:
        """批量调整目录中图像的尺寸。

        未指定任何尺寸时使用默认宽度。

        Args:
            input_dir: 输入目录
            output_dir: 输出目录
            width: 目标宽度
            height: 目标高度
            scale: 缩放比例
            recursive: 是否递归处理子目录
            progress_callback: 每完成一个文件调用一次 (已完成数, 总数)
            **options: 其他配置

        Returns:
            BatchStats: 汇总统计
        """
        if not (width or height or scale):
            width = get_config().processing.BATCH_WIDTH

        config = self.config_builder.build(
            require_resize=True, width=width, height=height, scale=scale, **options
        )
        processor = BatchProcessor(
            config,
            max_workers=self.max_workers,
            executor_type=self.executor_type,
            progress_callback=progress_callback,
        )
        return processor.process_directory(input_dir, output_dir, recursive=recursive)

    def info(self, input_path: str | Path, include_exif: bool = False) -> ImageInfo:
        """查询图像信息。

        Args:
            input_path: 图像文件路径
            include_exif: 是否包含完整的 EXIF 标签

        Returns:
            ImageInfo: 图像信息
        """
        return self.info_extractor.extract(input_path, include_exif=include_exif)

    def _process_single(
        self,
        input_path: str | Path,
        output_path: str | Path | None,
        config: ProcessingConfig,
        operation: str,
    ) -> ProcessingStats:
        """处理单个文件，解析输出路径后执行流水线"""
        input_path = Path(input_path)
        target_format = config.format.pillow_format if config.format else None
        destination = PathResolver.resolve_output_path(
            input_path,
            Path(output_path) if output_path else None,
            operation=operation,
            target_format=target_format,
        )

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileIOError(
                MessageFormatter.operation_failed("创建输出目录", destination.parent, e),
                destination.parent,
            ) from e

        logger.debug(f"{operation}: {input_path} → {destination}")
        return ImageProcessor(config).process(input_path, destination)

    @staticmethod
    def _reject_resize_options(options: dict[str, Any]) -> None:
        for key in ("width", "height", "scale"):
            if options.get(key):
                raise ValidationError(f"该操作不支持尺寸参数: {key}")
