"""消息格式化工具模块。

提供统一的错误消息、成功消息格式化功能。
"""

from pathlib import Path


class MessageFormatter:
    """统一的消息格式化器"""

    @staticmethod
    def file_not_found(file_path: str | Path) -> str:
        """文件不存在错误消息"""
        return f"文件不存在: {file_path}"

    @staticmethod
    def directory_not_found(directory: str | Path) -> str:
        """目录不存在错误消息"""
        return f"目录不存在: {directory}"

    @staticmethod
    def path_not_directory(path: str | Path) -> str:
        """路径不是目录错误消息"""
        return f"路径不是目录: {path}"

    @staticmethod
    def permission_error(path: str | Path, operation: str = "访问") -> str:
        """权限错误消息"""
        return f"权限错误，无法{operation}: {path}"

    @staticmethod
    def operation_failed(
        operation: str, target: str | Path, error: Exception | None = None
    ) -> str:
        """操作失败消息"""
        msg = f"{operation}失败: {target}"
        if error:
            msg += f" - {error}"
        return msg

    @staticmethod
    def format_error(operation: str, path: str | Path, error: Exception) -> str:
        """格式化通用错误消息"""
        return f"{operation}失败 [{path}]: {error}"

    @staticmethod
    def progress(completed: int, total: int, path: str | Path | None = None) -> str:
        """批量进度消息"""
        msg = f"批量处理进度 [{completed}/{total}]"
        if path:
            msg += f" {path}"
        return msg

    @staticmethod
    def batch_report(summary: str, error_lines: list[str]) -> str:
        """批量处理报告：先输出摘要，再逐行输出失败文件"""
        lines = [f"✓ 批量处理完成: {summary}"]
        if error_lines:
            lines.append("")
            lines.append("⚠ 处理失败的文件:")
            lines.extend(f"  - {line}" for line in error_lines)
        return "\n".join(lines)
