"""文件命名工具模块。

提供统一的输出文件命名策略和路径生成功能。
"""

import itertools
from functools import lru_cache
from pathlib import Path

from ..models.constants import get_extension


class FileNamingStrategy:
    """文件命名策略类"""

    @staticmethod
    def generate_output_name(
        input_path: Path,
        operation: str | None = None,
        target_format: str | None = None,
    ) -> str:
        """生成输出文件名

        Args:
            input_path: 输入文件路径
            operation: 操作名称，作为文件名后缀（如 resized、optimized）
            target_format: 目标格式，决定扩展名

        Returns:
            str: 生成的文件名（不含路径）
        """
        base_name = input_path.stem
        if operation:
            base_name += f"_{operation}"

        ext = FileNamingStrategy._get_extension(input_path.suffix, target_format)
        return f"{base_name}{ext}"

    @staticmethod
    @lru_cache(maxsize=128)
    def _get_extension(input_path_suffix: str, target_format: str | None = None) -> str:
        """获取文件扩展名，未指定格式时保留原扩展名"""
        if target_format:
            return get_extension(target_format)
        return input_path_suffix or ".jpg"


class PathResolver:
    """路径解析器"""

    @staticmethod
    def resolve_output_path(
        input_path: Path,
        output_path: Path | None = None,
        operation: str | None = None,
        target_format: str | None = None,
    ) -> Path:
        """解析单文件操作的输出路径

        Args:
            input_path: 输入文件路径
            output_path: 用户指定的输出路径
            operation: 操作名称
            target_format: 目标格式

        Returns:
            Path: 解析后的输出路径
        """
        # 优先使用用户指定的输出路径
        if output_path:
            return output_path

        filename = FileNamingStrategy.generate_output_name(
            input_path, operation, target_format
        )
        return PathResolver.ensure_unique_path(input_path.parent / filename)

    @staticmethod
    def ensure_unique_path(path: Path, taken: set[Path] | None = None) -> Path:
        """确保路径唯一，如果已存在则添加数字后缀

        Args:
            path: 原始路径
            taken: 额外视为已占用的路径集合；提供时不检查文件系统

        Returns:
            Path: 唯一的路径
        """

        def is_taken(candidate: Path) -> bool:
            if taken is not None:
                return candidate in taken
            return candidate.exists()

        if not is_taken(path):
            return path

        base = path.stem
        suffix = path.suffix
        parent = path.parent

        for counter in itertools.count(1):
            new_path = parent / f"{base}_{counter}{suffix}"
            if not is_taken(new_path):
                return new_path

        return path  # pragma: no cover


class DestinationPlanner:
    """批量处理的目标路径规划

    输出目录扁平化，只保留源文件名；同一次运行内的重名文件追加数字后缀，
    保证每个工作线程写入不同的目标文件。
    """

    def __init__(self, output_dir: Path, target_format: str | None = None):
        self.output_dir = output_dir
        self.target_format = target_format
        self._claimed: set[Path] = set()

    def plan(self, source_path: Path) -> Path:
        """为源文件分配目标路径"""
        if self.target_format:
            filename = f"{source_path.stem}{get_extension(self.target_format)}"
        else:
            filename = source_path.name

        destination = PathResolver.ensure_unique_path(
            self.output_dir / filename, taken=self._claimed
        )
        self._claimed.add(destination)
        return destination
