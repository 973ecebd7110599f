"""清理工具模块。

提供临时文件管理和原子写入功能，确保失败时不留下残缺的输出文件。
"""

import os
import tempfile
from pathlib import Path
from typing import Any

from .logging_helpers import get_logger


logger = get_logger()


class TempFileManager:
    """临时文件管理器"""

    def __init__(self):
        self.temp_files: set[Path] = set()

    def register_temp_file(self, file_path: Path) -> None:
        """注册临时文件"""
        self.temp_files.add(file_path)

    def release(self, file_path: Path) -> None:
        """文件已被正式使用，不再需要清理"""
        self.temp_files.discard(file_path)

    def cleanup_temp_files(self) -> int:
        """清理所有注册的临时文件"""
        cleaned_count = 0
        for file_path in self.temp_files:
            try:
                if file_path.exists():
                    file_path.unlink()
                    cleaned_count += 1
                    logger.debug(f"已清理临时文件: {file_path}")
            except OSError as e:
                logger.warning(f"清理临时文件失败 {file_path}: {e}")

        self.temp_files.clear()
        return cleaned_count

    def __enter__(self):
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """上下文管理器退出时清理临时文件"""
        del exc_type, exc_val, exc_tb
        self.cleanup_temp_files()


def write_bytes_atomic(destination: Path, data: bytes) -> int:
    """原子写入文件

    先写入同目录下的临时文件，成功后再替换目标文件。

    Args:
        destination: 目标文件路径
        data: 文件内容

    Returns:
        int: 写入的字节数
    """
    with TempFileManager() as temp_files:
        fd, temp_name = tempfile.mkstemp(
            prefix=f".{destination.name}.", suffix=".tmp", dir=destination.parent
        )
        temp_path = Path(temp_name)
        temp_files.register_temp_file(temp_path)

        with os.fdopen(fd, "wb") as f:
            f.write(data)

        # mkstemp 创建的文件权限为 0600
        os.chmod(temp_path, 0o644)
        os.replace(temp_path, destination)
        temp_files.release(temp_path)

    return destination.stat().st_size
