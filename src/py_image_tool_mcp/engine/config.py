"""配置构建器模块。

把用户输入规范化为 ProcessingConfig，并统一转换验证错误。
"""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..config import get_config
from ..exceptions import ValidationError as CustomValidationError
from ..models.processing_config import ProcessingConfig


class ConfigBuilder:
    """处理配置构建器

    未提供的参数使用应用默认值（可由环境变量覆盖）。
    """

    def build(self, require_resize: bool = False, **params: Any) -> ProcessingConfig:
        """构建并验证处理配置

        值为 None 的参数视为未提供。

        Args:
            require_resize: 是否要求至少指定一项尺寸参数
            **params: ProcessingConfig 的字段

        Returns:
            ProcessingConfig: 已验证的配置对象

        Raises:
            CustomValidationError: 参数验证失败
        """
        defaults = get_config().processing
        values: dict[str, Any] = {
            "quality": defaults.QUALITY,
            "algorithm": defaults.ALGORITHM,
            "keep_aspect": defaults.KEEP_ASPECT,
            "progressive": defaults.PROGRESSIVE,
            "png_optimize": defaults.PNG_OPTIMIZE,
        }
        values.update({key: value for key, value in params.items() if value is not None})

        try:
            config = ProcessingConfig(**values)
        except PydanticValidationError as e:
            raise CustomValidationError(self._format_validation_error(e)) from e

        config.validate(require_resize=require_resize)
        return config

    def _format_validation_error(self, error: PydanticValidationError) -> str:
        """格式化验证错误"""
        messages = []
        for err in error.errors():
            field = ".".join(str(loc) for loc in err["loc"])
            msg = err["msg"]
            if field:
                messages.append(f"{field}: {msg}")
            else:
                messages.append(msg)
        return "; ".join(messages)
