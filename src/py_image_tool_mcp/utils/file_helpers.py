"""工具函数模块。

提供图像文件发现等文件系统工具函数。
"""

from collections.abc import Iterator
from pathlib import Path

from ..models.constants import is_supported_extension
from .logging_helpers import get_logger
from .message_formatter import MessageFormatter


logger = get_logger()


def find_image_files(
    directory: str | Path,
    recursive: bool = False,
    exclude_dirs: list[Path] | None = None,
) -> Iterator[Path]:
    """查找目录中的图像文件。

    按名称排序的深度优先遍历，同一目录列表下结果顺序稳定。
    扩展名匹配不区分大小写，只返回普通文件。

    Args:
        directory: 搜索目录
        recursive: 是否递归搜索子目录，否则只搜索第一层
        exclude_dirs: 要跳过的目录（例如位于输入目录内的输出目录）

    Yields:
        Path: 图像文件路径
    """
    directory = Path(directory)

    if not directory.exists():
        logger.warning(MessageFormatter.directory_not_found(directory))
        return

    if not directory.is_dir():
        logger.warning(MessageFormatter.path_not_directory(directory))
        return

    excluded = {Path(d).resolve() for d in exclude_dirs or []}
    yield from _walk(directory, recursive, excluded)


def _walk(directory: Path, recursive: bool, excluded: set[Path]) -> Iterator[Path]:
    try:
        entries = sorted(directory.iterdir(), key=lambda p: p.name)
    except PermissionError:
        logger.warning(MessageFormatter.permission_error(directory, "访问目录"))
        return
    except OSError as e:
        logger.warning(MessageFormatter.operation_failed("读取目录", directory, e))
        return

    for entry in entries:
        if entry.is_dir():
            # 不跟随符号链接目录，避免循环
            if recursive and not entry.is_symlink() and entry.resolve() not in excluded:
                yield from _walk(entry, recursive, excluded)
        elif entry.is_file() and is_supported_extension(entry.suffix):
            yield entry
