"""统一配置管理模块。

提供应用程序的全局默认值管理，支持环境变量覆盖。
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class ProcessingDefaults:
    """处理相关的默认配置"""

    # 质量设置
    QUALITY: int = 85

    # 缩放设置
    ALGORITHM: str = "lanczos3"
    KEEP_ASPECT: bool = True
    BATCH_WIDTH: int = 800  # 批量处理未指定尺寸时的默认宽度

    # 并发设置，0 表示使用 CPU 核心数
    MAX_WORKERS: int = 0
    EXECUTOR_TYPE: str = "thread"

    # 编码设置
    PROGRESSIVE: bool = False
    PNG_OPTIMIZE: bool = True


@dataclass(frozen=True)
class LoggingDefaults:
    """日志相关的默认配置"""

    # 日志级别
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # 文件日志
    ENABLE_FILE_LOGGING: bool = False
    LOG_FILE_PATH: str = "py_image_tool.log"
    LOG_FILE_MAX_SIZE: int = 10 * 1024 * 1024  # 10MB
    LOG_FILE_BACKUP_COUNT: int = 5


class AppConfig:
    """应用程序配置管理器

    支持环境变量覆盖默认配置
    """

    def __init__(self):
        self.processing = ProcessingDefaults()
        self.logging = LoggingDefaults()

        # 从环境变量加载配置
        self._load_from_env()

    def _load_from_env(self):
        """从环境变量加载配置"""
        # 处理配置
        if quality := os.getenv("PIT_DEFAULT_QUALITY"):
            object.__setattr__(self.processing, "QUALITY", int(quality))

        if max_workers := os.getenv("PIT_MAX_WORKERS"):
            object.__setattr__(self.processing, "MAX_WORKERS", int(max_workers))

        if executor_type := os.getenv("PIT_EXECUTOR_TYPE"):
            object.__setattr__(
                self.processing, "EXECUTOR_TYPE", executor_type.lower()
            )

        # 日志配置
        if log_level := os.getenv("PIT_LOG_LEVEL"):
            object.__setattr__(self.logging, "LOG_LEVEL", log_level.upper())

        if enable_file_log := os.getenv("PIT_ENABLE_FILE_LOGGING"):
            object.__setattr__(
                self.logging,
                "ENABLE_FILE_LOGGING",
                enable_file_log.lower() in ("true", "1", "yes"),
            )

    @staticmethod
    def resolve_worker_count(max_workers: int) -> int:
        """解析工作线程数，0 表示使用可用的硬件并行度"""
        if max_workers > 0:
            return max_workers
        return os.cpu_count() or 1


# 全局配置实例
config = AppConfig()


def get_config() -> AppConfig:
    """获取全局配置实例"""
    return config


def reset_config():
    """重置配置（主要用于测试）"""
    global config
    config = AppConfig()
