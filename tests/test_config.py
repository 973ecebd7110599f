"""配置测试。

测试处理配置的验证规则、配置构建器和环境变量覆盖。
"""

import os

import pytest
from pydantic import ValidationError as PydanticValidationError

from py_image_tool_mcp.config import AppConfig, get_config, reset_config
from py_image_tool_mcp.engine.config import ConfigBuilder
from py_image_tool_mcp.exceptions import ValidationError
from py_image_tool_mcp.models import (
    AbsoluteResize,
    OutputFormat,
    ProcessingConfig,
    ResizeAlgorithm,
    ScaleResize,
)


class TestProcessingConfigValidation:
    """处理配置验证测试"""

    @pytest.mark.parametrize(
        ("params", "require_resize", "valid"),
        [
            ({"quality": 1, "width": 100}, True, True),
            ({"quality": 100, "height": 100}, True, True),
            ({"quality": 0, "width": 100}, True, False),
            ({"quality": 101, "width": 100}, True, False),
            ({"width": 100_000}, True, True),
            ({"width": 100_001}, True, False),
            ({"height": 100_001}, False, False),
            ({"scale": 0.5}, True, True),
            ({}, True, False),
            ({}, False, True),
        ],
    )
    def test_validate_accepts_iff_rules_hold(self, params, require_resize, valid):
        """validate 仅在质量、尺寸上限和尺寸要求都满足时通过"""
        # 绕过 pydantic 字段约束，直接检查 validate 本身的规则
        config = ProcessingConfig.model_construct(**params)

        if valid:
            config.validate(require_resize=require_resize)
        else:
            with pytest.raises(ValidationError):
                config.validate(require_resize=require_resize)

    def test_field_constraints_reject_out_of_range(self):
        """字段约束在构造时拒绝越界值"""
        with pytest.raises(PydanticValidationError):
            ProcessingConfig(quality=0)
        with pytest.raises(PydanticValidationError):
            ProcessingConfig(width=100_001)
        with pytest.raises(PydanticValidationError):
            ProcessingConfig(scale=-1.0)

    def test_config_is_immutable(self):
        """配置构造后不可修改"""
        config = ProcessingConfig(width=100)
        with pytest.raises(PydanticValidationError):
            config.width = 200

    def test_defaults(self):
        """默认值"""
        config = ProcessingConfig()
        assert config.quality == 85
        assert config.keep_aspect is True
        assert config.algorithm is ResizeAlgorithm.LANCZOS3
        assert config.format is None
        assert config.strip_metadata is False
        assert config.max_file_size is None
        assert config.resize_mode is None


class TestProcessingConfigParsing:
    """配置字段解析测试"""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("jpeg", OutputFormat.JPEG),
            ("JPG", OutputFormat.JPEG),
            ("png", OutputFormat.PNG),
            ("WebP", OutputFormat.WEBP),
            ("same", OutputFormat.SAME_AS_INPUT),
            ("same_as_input", OutputFormat.SAME_AS_INPUT),
        ],
    )
    def test_format_aliases(self, value, expected):
        """格式别名"""
        assert ProcessingConfig(format=value).format is expected

    def test_unknown_format_rejected(self):
        """不支持的输出格式"""
        with pytest.raises(PydanticValidationError, match="不支持的输出格式"):
            ProcessingConfig(format="gif")

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("nearest", ResizeAlgorithm.NEAREST),
            ("Bilinear", ResizeAlgorithm.BILINEAR),
            ("bicubic", ResizeAlgorithm.BICUBIC),
            ("lanczos", ResizeAlgorithm.LANCZOS3),
            ("LANCZOS3", ResizeAlgorithm.LANCZOS3),
        ],
    )
    def test_algorithm_names(self, value, expected):
        """算法名称不区分大小写"""
        assert ProcessingConfig(algorithm=value).algorithm is expected

    def test_resize_mode_prefers_scale(self):
        """比例优先于宽高"""
        config = ProcessingConfig(width=100, height=50, scale=0.5)
        assert config.resize_mode == ScaleResize(factor=0.5)

    def test_resize_mode_absolute(self):
        """只指定宽度"""
        config = ProcessingConfig(width=200)
        assert config.resize_mode == AbsoluteResize(width=200, height=0)
        assert config.requests_resize


class TestConfigBuilder:
    """配置构建器测试"""

    def test_build_ignores_none_values(self):
        """None 视为未提供"""
        config = ConfigBuilder().build(width=300, height=None, quality=None)
        assert config.width == 300
        assert config.height == 0
        assert config.quality == 85

    def test_build_wraps_pydantic_errors(self):
        """pydantic 错误转换为项目的 ValidationError，并带上字段名"""
        with pytest.raises(ValidationError, match="quality"):
            ConfigBuilder().build(quality=150)

    def test_build_requires_resize(self):
        """要求尺寸参数时缺少尺寸"""
        with pytest.raises(ValidationError, match="宽度、高度或缩放比例"):
            ConfigBuilder().build(require_resize=True)

    def test_build_uses_env_defaults(self, monkeypatch):
        """环境变量覆盖默认质量"""
        monkeypatch.setenv("PIT_DEFAULT_QUALITY", "70")
        reset_config()

        assert ConfigBuilder().build().quality == 70


class TestAppConfig:
    """应用配置测试"""

    def test_env_overrides(self, monkeypatch):
        """环境变量覆盖"""
        monkeypatch.setenv("PIT_MAX_WORKERS", "3")
        monkeypatch.setenv("PIT_EXECUTOR_TYPE", "PROCESS")
        monkeypatch.setenv("PIT_LOG_LEVEL", "debug")
        monkeypatch.setenv("PIT_ENABLE_FILE_LOGGING", "yes")
        reset_config()

        config = get_config()
        assert config.processing.MAX_WORKERS == 3
        assert config.processing.EXECUTOR_TYPE == "process"
        assert config.logging.LOG_LEVEL == "DEBUG"
        assert config.logging.ENABLE_FILE_LOGGING is True

    def test_resolve_worker_count(self):
        """0 表示使用硬件并行度"""
        assert AppConfig.resolve_worker_count(3) == 3
        assert AppConfig.resolve_worker_count(0) == (os.cpu_count() or 1)
