"""图像处理引擎模块。

包含批量处理、并发执行和配置构建逻辑。
"""

from .batch import BatchProcessor, BatchState
from .concurrent_executor import ConcurrentExecutor, run_file_task
from .config import ConfigBuilder


__all__ = [
    "BatchProcessor",
    "BatchState",
    "ConcurrentExecutor",
    "ConfigBuilder",
    "run_file_task",
]
