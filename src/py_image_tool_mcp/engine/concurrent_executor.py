"""并发执行器模块。

在有界工作池中执行单文件任务，每个任务的失败被隔离为一个失败结果。
"""

from collections.abc import Callable, Sequence
from concurrent.futures import (
    Executor,
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    as_completed,
)
from functools import partial

from ..core.processor import ImageProcessor
from ..exceptions import ErrorHandler
from ..models.processing_stats import FileOutcome, FileTask
from ..utils.logging_helpers import get_logger


logger = get_logger()

ProgressCallback = Callable[[int, int], None]

EXECUTOR_TYPES: dict[str, type[Executor]] = {
    "thread": ThreadPoolExecutor,
    "process": ProcessPoolExecutor,
}


def run_file_task(processor: ImageProcessor, task: FileTask) -> FileOutcome:
    """执行单个文件任务，异常在任务边界转换为失败结果

    定义在模块级别，以便进程池能够序列化。
    """
    try:
        stats = processor.process(task.source_path, task.destination_path)
    except Exception as e:
        return ErrorHandler.capture(e, task.source_path)
    return FileOutcome(source_path=task.source_path, stats=stats)


class ConcurrentExecutor:
    """并发执行器

    工作池大小由实例参数决定，只作用于本次运行，不修改任何全局状态。
    """

    def __init__(self, max_workers: int, executor_type: str = "thread"):
        """初始化并发执行器

        Args:
            max_workers: 最大并发数，必须大于 0
            executor_type: 执行器类型 ('thread'/'process')
        """
        if executor_type not in EXECUTOR_TYPES:
            raise ValueError(f"未知的执行器类型: {executor_type}")
        self.max_workers = max_workers
        self.executor_type = executor_type

    def execute_tasks(
        self,
        tasks: Sequence[FileTask],
        processor: ImageProcessor,
        progress_callback: ProgressCallback | None = None,
    ) -> list[FileOutcome]:
        """并发执行任务

        Args:
            tasks: 文件任务列表
            processor: 所有任务共享的只读处理器
            progress_callback: 每完成一个文件调用一次 (已完成数, 总数)

        Returns:
            list[FileOutcome]: 任务结果，按完成顺序排列
        """
        if not tasks:
            return []

        outcomes: list[FileOutcome] = []
        executor_class = EXECUTOR_TYPES[self.executor_type]
        task_function = partial(run_file_task, processor)
        workers = min(self.max_workers, len(tasks))

        logger.debug(f"使用 {executor_class.__name__}: 任务数={len(tasks)}, 并发数={workers}")

        with executor_class(max_workers=workers) as executor:
            future_to_task = self._submit_tasks(executor, tasks, task_function, outcomes)
            self._collect_results(future_to_task, outcomes, len(tasks), progress_callback)

        return outcomes

    def _submit_tasks(
        self,
        executor: Executor,
        tasks: Sequence[FileTask],
        task_function: Callable[[FileTask], FileOutcome],
        outcomes: list[FileOutcome],
    ) -> dict[Future[FileOutcome], FileTask]:
        """提交任务到执行器"""
        future_to_task = {}

        for task in tasks:
            try:
                future = executor.submit(task_function, task)
                future_to_task[future] = task
            except RuntimeError as e:
                # 执行器已关闭或进程池已损坏
                outcomes.append(
                    ErrorHandler.capture(e, task.source_path, "任务提交", log_level="error")
                )

        return future_to_task

    def _collect_results(
        self,
        future_to_task: dict[Future[FileOutcome], FileTask],
        outcomes: list[FileOutcome],
        total: int,
        progress_callback: ProgressCallback | None,
    ) -> None:
        """按完成顺序收集结果，进度回调只在当前线程中调用"""
        for future in as_completed(future_to_task):
            task = future_to_task[future]

            try:
                outcome = future.result()
            except Exception as e:
                # 任务函数自身已隔离异常，这里只会遇到进程崩溃或序列化失败
                outcome = ErrorHandler.capture(
                    e, task.source_path, "并发任务处理", log_level="error"
                )

            outcomes.append(outcome)
            if outcome.success:
                logger.debug(f"处理成功: {task.source_path}")

            if progress_callback is not None:
                progress_callback(len(outcomes), total)
