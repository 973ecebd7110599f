"""工具模块包。

提供纯工具函数，不包含业务逻辑。
"""

from .cleanup_helpers import TempFileManager, write_bytes_atomic
from .file_helpers import find_image_files
from .logging_helpers import configure_logging, get_logger
from .message_formatter import MessageFormatter
from .naming_helpers import DestinationPlanner, FileNamingStrategy, PathResolver


__all__ = [
    "DestinationPlanner",
    "FileNamingStrategy",
    "MessageFormatter",
    "PathResolver",
    "TempFileManager",
    "configure_logging",
    "find_image_files",
    "get_logger",
    "write_bytes_atomic",
]
