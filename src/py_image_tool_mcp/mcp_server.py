"""图像处理 MCP 服务器。

把缩放、优化、格式转换、批量处理和信息查询作为 MCP 工具暴露，
每个工具返回可 JSON 序列化的字典。
"""

from collections.abc import Callable
from pathlib import Path
from typing import Any

from fastmcp import FastMCP

from .exceptions import ImageToolError
from .models import BatchStats, ImageInfo, ProcessingStats
from .toolkit import ImageToolkit
from .utils.logging_helpers import configure_logging, get_logger
from .utils.message_formatter import MessageFormatter


# MCP 服务器响应类型定义
MCPResponse = dict[str, Any]


class MCPResponseBuilder:
    """MCP 服务器响应构建器，专门用于构建符合 MCP 协议的响应格式。"""

    @staticmethod
    def error(
        message: str,
        error_type: str = "processing",
        details: dict[str, Any] | None = None,
    ) -> MCPResponse:
        """构建错误结果。

        Args:
            message: 错误消息
            error_type: 错误类型
            details: 额外的错误详情

        Returns:
            dict: 标准化的错误响应
        """
        result: MCPResponse = {
            "success": False,
            "error": message,
            "error_type": error_type,
        }

        if details:
            result["details"] = details

        return result

    @staticmethod
    def from_exception(error: Exception, operation: str) -> MCPResponse:
        """根据异常类别构建错误结果"""
        if isinstance(error, ImageToolError):
            details = {"operation": operation}
            if error.path is not None:
                details["file_path"] = str(error.path)
            return MCPResponseBuilder.error(error.message, error.kind.value, details)

        return MCPResponseBuilder.error(
            MessageFormatter.operation_failed(operation, "", error),
            "processing",
            {"operation": operation},
        )

    @staticmethod
    def stats(stats: ProcessingStats, input_path: str) -> MCPResponse:
        """单文件处理结果"""
        return {
            "success": True,
            "input_path": input_path,
            "output_path": str(stats.output_path) if stats.output_path else None,
            "input_size": stats.input_size,
            "output_size": stats.output_size,
            "width_before": stats.width_before,
            "height_before": stats.height_before,
            "width_after": stats.width_after,
            "height_after": stats.height_after,
            "format_used": stats.format_used,
            "savings_percent": round(stats.savings_percent, 2),
            "summary": stats.get_summary(),
        }

    @staticmethod
    def batch(stats: BatchStats) -> MCPResponse:
        """批量处理结果，失败文件以列表形式返回"""
        return {
            "success": True,
            "processed_count": stats.processed_count,
            "failed_count": stats.failed_count,
            "total_size_before": stats.total_size_before,
            "total_size_after": stats.total_size_after,
            "savings_percent": round(stats.savings_percent, 2),
            "summary": stats.get_summary(),
            "errors": [
                {"file": error.context, "kind": error.kind.value, "message": error.message}
                for error in stats.errors
            ],
        }

    @staticmethod
    def info(info: ImageInfo) -> MCPResponse:
        """图片信息结果"""
        basic = info.basic_info
        result: MCPResponse = {
            "success": True,
            "file_path": str(basic.file_path),
            "file_size": basic.file_size,
            "file_size_human": basic.get_file_size_human(),
            "format": basic.format,
            "mode": basic.mode,
            "width": basic.width,
            "height": basic.height,
            "aspect_ratio": round(basic.aspect_ratio, 4),
            "has_exif": basic.has_exif,
        }

        if info.metadata:
            result["exif"] = {
                "camera_make": info.metadata.camera_make,
                "camera_model": info.metadata.camera_model,
                "datetime": info.metadata.datetime,
                "orientation": info.metadata.orientation,
                "software": info.metadata.software,
                "tags": {key: str(value) for key, value in info.metadata.tags.items()},
            }

        return result


logger = get_logger()

# 创建MCP应用
mcp: FastMCP[Any] = FastMCP("图像处理服务")

# 全局工具集实例，并发设置取自应用配置
toolkit = ImageToolkit()


def _run_tool(
    operation: str, input_path: str, action: Callable[[], MCPResponse]
) -> MCPResponse:
    """执行工具并把异常转换为错误响应"""
    try:
        return action()
    except Exception as e:
        logger.error(MessageFormatter.format_error(operation, input_path, e))
        return MCPResponseBuilder.from_exception(e, operation)


@mcp.tool()
def resize_image(
    input_path: str,
    output_path: str | None = None,
    width: int | None = None,
    height: int | None = None,
    scale: float | None = None,
    keep_aspect: bool = True,
    algorithm: str | None = None,
    quality: int | None = None,
    format: str | None = None,
    strip_metadata: bool = False,
) -> MCPResponse:
    """调整图像尺寸

    Args:
        input_path: 输入图像文件路径
        output_path: 输出路径（可选，默认 <名称>_resized<扩展名>）
        width: 目标宽度（像素）
        height: 目标高度（像素）
        scale: 缩放比例，如 0.5
        keep_aspect: 是否保持宽高比；同时给出宽高时缩放到刚好放入该区域，
            为 False 且只给出一边时另一边保持原尺寸
        algorithm: 重采样算法 nearest/bilinear/bicubic/lanczos3
        quality: 有损格式的压缩质量 1-100
        format: 输出格式 jpeg/png/webp/same
        strip_metadata: 是否移除 EXIF 等元数据
    """
    return _run_tool(
        "调整尺寸",
        input_path,
        lambda: MCPResponseBuilder.stats(
            toolkit.resize(
                input_path,
                output_path,
                width=width,
                height=height,
                scale=scale,
                keep_aspect=keep_aspect,
                algorithm=algorithm,
                quality=quality,
                format=format,
                strip_metadata=strip_metadata,
            ),
            input_path,
        ),
    )


@mcp.tool()
def optimize_image(
    input_path: str,
    output_path: str | None = None,
    quality: int | None = None,
    strip_metadata: bool = False,
    progressive: bool = False,
) -> MCPResponse:
    """重新编码图像以减小文件大小，不改变尺寸

    Args:
        input_path: 输入图像文件路径
        output_path: 输出路径（可选，默认 <名称>_optimized<扩展名>）
        quality: 有损格式的压缩质量 1-100
        strip_metadata: 是否移除 EXIF 等元数据
        progressive: 是否生成渐进式 JPEG
    """
    return _run_tool(
        "优化图像",
        input_path,
        lambda: MCPResponseBuilder.stats(
            toolkit.optimize(
                input_path,
                output_path,
                quality=quality,
                strip_metadata=strip_metadata,
                progressive=progressive,
            ),
            input_path,
        ),
    )


@mcp.tool()
def convert_image(
    input_path: str,
    format: str,
    output_path: str | None = None,
    quality: int | None = None,
    strip_metadata: bool = False,
) -> MCPResponse:
    """转换图像格式

    Args:
        input_path: 输入图像文件路径
        format: 目标格式 jpeg/png/webp
        output_path: 输出路径（可选，默认 <名称>_converted<目标扩展名>）
        quality: 有损格式的压缩质量 1-100
        strip_metadata: 是否移除 EXIF 等元数据
    """
    return _run_tool(
        "格式转换",
        input_path,
        lambda: MCPResponseBuilder.stats(
            toolkit.convert(
                input_path,
                format,
                output_path,
                quality=quality,
                strip_metadata=strip_metadata,
            ),
            input_path,
        ),
    )


@mcp.tool()
def batch_process(
    input_dir: str,
    output_dir: str,
    width: int | None = None,
    height: int | None = None,
    scale: float | None = None,
    recursive: bool = False,
    quality: int | None = None,
    format: str | None = None,
    strip_metadata: bool = False,
) -> MCPResponse:
    """批量调整目录中图像的尺寸

    单个文件失败不会中止处理，失败文件在 errors 中逐个列出。
    未指定任何尺寸时使用默认宽度 800。

    Args:
        input_dir: 输入目录
        output_dir: 输出目录（扁平化输出）
        width: 目标宽度（像素）
        height: 目标高度（像素）
        scale: 缩放比例
        recursive: 是否递归处理子目录
        quality: 有损格式的压缩质量 1-100
        format: 输出格式 jpeg/png/webp/same
        strip_metadata: 是否移除 EXIF 等元数据
    """
    return _run_tool(
        "批量处理",
        input_dir,
        lambda: MCPResponseBuilder.batch(
            toolkit.batch(
                input_dir,
                output_dir,
                width=width,
                height=height,
                scale=scale,
                recursive=recursive,
                quality=quality,
                format=format,
                strip_metadata=strip_metadata,
            )
        ),
    )


@mcp.tool()
def get_image_info(input_path: str, include_exif: bool = False) -> MCPResponse:
    """获取图片的尺寸、格式、文件大小和 EXIF 信息

    Args:
        input_path: 输入图像文件路径
        include_exif: 是否返回完整的 EXIF 标签
    """
    return _run_tool(
        "获取图片信息",
        input_path,
        lambda: MCPResponseBuilder.info(
            toolkit.info(Path(input_path), include_exif=include_exif)
        ),
    )


# ============================================================================
# 应用入口
# ============================================================================


def main() -> None:
    """启动 MCP 服务器"""
    configure_logging()
    logger.info("启动图像处理 MCP 服务器")
    mcp.run()


if __name__ == "__main__":
    main()
