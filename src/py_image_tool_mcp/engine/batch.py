"""批量处理器模块。

发现目录中的图像文件，在有界工作池中并发处理，并把单文件结果合并为汇总统计。
"""

from enum import Enum
from pathlib import Path

from ..config import AppConfig
from ..core.processor import ImageProcessor
from ..exceptions import FileIOError, ValidationError
from ..models.processing_config import ProcessingConfig
from ..models.processing_stats import BatchStats, FileOutcome, FileTask
from ..utils.file_helpers import find_image_files
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter
from ..utils.naming_helpers import DestinationPlanner
from .concurrent_executor import ConcurrentExecutor, ProgressCallback


logger = get_logger()


class BatchState(str, Enum):
    """批量运行状态"""

    IDLE = "idle"
    DISCOVERING = "discovering"
    PROCESSING = "processing"
    FINALIZING = "finalizing"
    DONE = "done"


class BatchProcessor:
    """批量图像处理器

    单个文件的失败不会中止运行；只有输入输出目录无效或无法创建输出目录时，
    整个运行才会在处理任何文件之前失败。
    """

    def __init__(
        self,
        config: ProcessingConfig,
        max_workers: int = 0,
        executor_type: str = "thread",
        progress_callback: ProgressCallback | None = None,
    ):
        """初始化批量处理器

        Args:
            config: 所有文件共享的处理配置
            max_workers: 最大并发数，0 表示使用 CPU 核心数
            executor_type: 执行器类型 ('thread'/'process')
            progress_callback: 每完成一个文件调用一次 (已完成数, 总数)
        """
        if max_workers < 0:
            raise ValidationError(f"并发数不能为负数: {max_workers}")

        self.config = config
        self.processor = ImageProcessor(config)
        self.max_workers = AppConfig.resolve_worker_count(max_workers)
        try:
            self.concurrent_executor = ConcurrentExecutor(self.max_workers, executor_type)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        self.progress_callback = progress_callback
        self.state = BatchState.IDLE

    def validate_paths(
        self, input_dir: str | Path, output_dir: str | Path
    ) -> tuple[Path, Path]:
        """验证输入输出目录

        Raises:
            ValidationError: 输入不存在或不是目录，输出已存在但不是目录，
                或输出目录与输入目录相同时
        """
        input_dir = Path(input_dir)
        output_dir = Path(output_dir)

        if not input_dir.exists():
            raise ValidationError(MessageFormatter.directory_not_found(input_dir), input_dir)
        if not input_dir.is_dir():
            raise ValidationError(MessageFormatter.path_not_directory(input_dir), input_dir)
        if output_dir.exists() and not output_dir.is_dir():
            raise ValidationError(
                MessageFormatter.path_not_directory(output_dir), output_dir
            )
        if output_dir.resolve() == input_dir.resolve():
            # 扁平输出会覆盖源文件
            raise ValidationError(f"输出目录不能与输入目录相同: {output_dir}", output_dir)

        return input_dir, output_dir

    def discover(
        self, input_dir: Path, output_dir: Path, recursive: bool = False
    ) -> list[FileTask]:
        """发现待处理文件并分配目标路径

        结果按遍历顺序排列；位于输入目录内的输出目录不参与遍历。
        """
        target_format = self.config.format.pillow_format if self.config.format else None
        planner = DestinationPlanner(output_dir, target_format)

        return [
            FileTask(source_path=source, destination_path=planner.plan(source))
            for source in find_image_files(
                input_dir, recursive=recursive, exclude_dirs=[output_dir]
            )
        ]

    def process_directory(
        self,
        input_dir: str | Path,
        output_dir: str | Path,
        recursive: bool = False,
    ) -> BatchStats:
        """处理目录中的所有图像文件

        Args:
            input_dir: 输入目录
            output_dir: 输出目录，不存在时创建
            recursive: 是否递归处理子目录，输出始终扁平化

        Returns:
            BatchStats: 汇总统计，包含每个失败文件的错误记录

        Raises:
            ValidationError: 目录无效时
            FileIOError: 无法创建输出目录时
        """
        self.state = BatchState.IDLE
        input_dir, output_dir = self.validate_paths(input_dir, output_dir)

        # 在并发开始前创建一次输出目录
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileIOError(
                MessageFormatter.operation_failed("创建输出目录", output_dir, e), output_dir
            ) from e

        self.state = BatchState.DISCOVERING
        tasks = self.discover(input_dir, output_dir, recursive)

        stats = BatchStats()
        if not tasks:
            logger.warning(f"未找到图像文件: {input_dir}")
            self.state = BatchState.DONE
            return stats

        logger.info(
            f"开始批量处理 {len(tasks)} 个文件: {input_dir} → {output_dir} "
            f"(并发数 {self.max_workers})"
        )

        self.state = BatchState.PROCESSING
        outcomes = self.concurrent_executor.execute_tasks(
            tasks, self.processor, progress_callback=self._report_progress
        )

        self.state = BatchState.FINALIZING
        stats = self._aggregate(outcomes)

        self.state = BatchState.DONE
        logger.info(MessageFormatter.batch_report(stats.get_summary(), stats.get_error_lines()))
        return stats

    def _report_progress(self, completed: int, total: int) -> None:
        logger.debug(MessageFormatter.progress(completed, total))
        if self.progress_callback is not None:
            self.progress_callback(completed, total)

    @staticmethod
    def _aggregate(outcomes: list[FileOutcome]) -> BatchStats:
        stats = BatchStats()
        for outcome in outcomes:
            stats.record(outcome)
        return stats
