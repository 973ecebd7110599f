"""图像处理异常模块。

定义统一的异常类型和错误处理机制，包含阶段边界的异常转换装饰器。
"""

from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import TypeVar

from PIL.Image import DecompressionBombError, UnidentifiedImageError

from .models.constants import ErrorKind
from .models.processing_stats import FileError, FileOutcome
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()
T = TypeVar("T")

# 这些 OSError 子类属于文件系统问题，而不是数据损坏
_FILESYSTEM_ERRORS = (
    FileNotFoundError,
    PermissionError,
    IsADirectoryError,
    NotADirectoryError,
)


# 统一的异常类型
class ImageToolError(Exception):
    """图像处理错误基类"""

    kind: ErrorKind = ErrorKind.PROCESSING

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.message = message
        self.path = path


class ValidationError(ImageToolError):
    """参数验证错误 - 配置或路径无效，不可重试"""

    kind = ErrorKind.INVALID_PARAMETER


class UnsupportedFormatError(ValidationError):
    """不支持的格式错误"""

    pass


class SourceNotFoundError(ValidationError):
    """输入文件不存在"""

    pass


class DecodeError(ImageToolError):
    """图像数据无法解码"""

    kind = ErrorKind.DECODE


class EncodeError(ImageToolError):
    """图像编码失败"""

    kind = ErrorKind.ENCODE


class FileIOError(ImageToolError):
    """文件系统操作失败"""

    kind = ErrorKind.IO


class MetadataReadError(ImageToolError):
    """元数据容器损坏或格式错误"""

    kind = ErrorKind.METADATA


class ProcessingError(ImageToolError):
    """处理过程错误"""

    kind = ErrorKind.PROCESSING


def handle_image_errors(
    operation_name: str = "图像处理",
    stage_error: type[ImageToolError] = ProcessingError,
):
    """统一的阶段异常转换装饰器

    项目自身的异常原样抛出，第三方异常转换为对应的项目异常。

    Args:
        operation_name: 操作名称，用于日志记录
        stage_error: 图像数据无法识别时使用的异常类型
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except ImageToolError:
                raise
            except (UnidentifiedImageError, SyntaxError) as e:
                logger.debug(f"{operation_name} - 无法识别图像数据: {e}")
                raise stage_error(f"{operation_name}失败，无法识别图像数据: {e}") from e
            except DecompressionBombError as e:
                logger.debug(f"{operation_name} - 图像过大: {e}")
                raise stage_error(f"图像像素过多，拒绝处理: {e}") from e
            except _FILESYSTEM_ERRORS as e:
                logger.debug(f"{operation_name} - 文件操作失败: {e}")
                raise FileIOError(f"文件操作失败: {e}") from e
            except OSError as e:
                # Pillow 对截断或损坏的数据同样抛出 OSError
                logger.debug(f"{operation_name} - 数据损坏或读写失败: {e}")
                if stage_error is ProcessingError:
                    raise FileIOError(f"文件操作失败: {e}") from e
                raise stage_error(f"{operation_name}失败: {e}") from e
            except (ValueError, TypeError) as e:
                logger.debug(f"{operation_name} - 参数错误: {e}")
                raise stage_error(f"{operation_name}参数错误: {e}") from e
            except Exception as e:
                logger.debug(f"{operation_name} - 未知错误: {e}")
                raise ProcessingError(f"{operation_name}失败: {e}") from e

        return wrapper

    return decorator


class ErrorHandler:
    """统一错误处理器

    在批量任务边界把异常转换为单文件失败结果，并进行标准化日志记录。
    """

    @staticmethod
    def _log_error(
        operation: str, path: Path, error: Exception, level: str = "error"
    ) -> None:
        """标准化的错误日志记录

        Args:
            operation: 操作名称（如"图像处理"、"任务提交"等）
            path: 相关文件路径
            error: 异常对象
            level: 日志级别 ("error", "warning", "debug")
        """
        log_msg = MessageFormatter.format_error(operation, path, error)
        getattr(logger, level, logger.error)(log_msg)

    @staticmethod
    def kind_of(error: BaseException) -> ErrorKind:
        """获取异常对应的错误类别"""
        match error:
            case ImageToolError():
                return error.kind
            case OSError():
                return ErrorKind.IO
            case ValueError() | TypeError():
                return ErrorKind.INVALID_PARAMETER
            case _:
                return ErrorKind.PROCESSING

    @staticmethod
    def capture(
        error: BaseException,
        path: Path,
        operation: str = "图像处理",
        log_level: str = "warning",
    ) -> FileOutcome:
        """捕获单个文件的异常，生成失败结果

        Args:
            error: 异常对象
            path: 出错的源文件路径（作为错误上下文）
            operation: 操作名称
            log_level: 日志级别

        Returns:
            FileOutcome: 带上下文的失败结果
        """
        ErrorHandler._log_error(operation, path, error, log_level)
        message = error.message if isinstance(error, ImageToolError) else str(error)
        return FileOutcome(
            source_path=path,
            error=FileError(
                context=str(path),
                kind=ErrorHandler.kind_of(error),
                message=message or type(error).__name__,
            ),
        )
