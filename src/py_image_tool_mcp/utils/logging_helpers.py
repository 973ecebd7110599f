"""日志工具模块。

提供统一的日志记录功能，标准化日志格式和配置。
"""

import inspect
import logging
from logging.handlers import RotatingFileHandler


_PACKAGE_LOGGER = "py_image_tool_mcp"


def get_logger(name: str | None = None) -> logging.Logger:
    """获取标准化配置的日志记录器。

    Args:
        name: 日志记录器名称，默认使用调用模块的 __name__

    Returns:
        logging.Logger: 配置好的日志记录器
    """
    if name is None:
        # 获取调用者的模块名
        frame = inspect.currentframe()
        if frame and frame.f_back:
            name = frame.f_back.f_globals.get("__name__", "unknown")
        else:
            name = "unknown"

    return logging.getLogger(name)


def configure_logging(level: str | None = None) -> None:
    """根据应用配置初始化日志，只应由程序入口调用一次。

    Args:
        level: 覆盖配置中的日志级别
    """
    from ..config import get_config

    settings = get_config().logging
    log_level = (level or settings.LOG_LEVEL).upper()

    logging.basicConfig(level=log_level, format=settings.LOG_FORMAT)

    if settings.ENABLE_FILE_LOGGING:
        handler = RotatingFileHandler(
            settings.LOG_FILE_PATH,
            maxBytes=settings.LOG_FILE_MAX_SIZE,
            backupCount=settings.LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter(settings.LOG_FORMAT))
        logging.getLogger(_PACKAGE_LOGGER).addHandler(handler)
