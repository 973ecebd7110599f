"""处理配置模型。

定义单次图像变换的配置参数、缩放模式和算法选项。
"""

import math
from enum import Enum
from typing import Any, Literal

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import QualityDefaults, ValidationLimits, get_format_alias


class ResizeAlgorithm(str, Enum):
    """缩放重采样算法"""

    NEAREST = "nearest"
    BILINEAR = "bilinear"
    BICUBIC = "bicubic"
    LANCZOS3 = "lanczos3"

    @property
    def resample_filter(self) -> Image.Resampling:
        """对应的 Pillow 重采样滤波器"""
        return _RESAMPLE_FILTERS[self]


_RESAMPLE_FILTERS: dict[ResizeAlgorithm, Image.Resampling] = {
    ResizeAlgorithm.NEAREST: Image.Resampling.NEAREST,
    ResizeAlgorithm.BILINEAR: Image.Resampling.BILINEAR,
    ResizeAlgorithm.BICUBIC: Image.Resampling.BICUBIC,
    ResizeAlgorithm.LANCZOS3: Image.Resampling.LANCZOS,
}


class OutputFormat(str, Enum):
    """输出格式"""

    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"
    SAME_AS_INPUT = "same"

    @property
    def pillow_format(self) -> str | None:
        """Pillow 格式名，保持原格式时为 None"""
        if self is OutputFormat.SAME_AS_INPUT:
            return None
        return self.value.upper()

    @classmethod
    def parse(cls, value: "str | OutputFormat") -> "OutputFormat":
        """解析格式名称，支持 jpg、same_as_input 等别名"""
        if isinstance(value, OutputFormat):
            return value
        normalized = get_format_alias(value).lower()
        if normalized in {"same", "same_as_input", "original", "keep"}:
            return cls.SAME_AS_INPUT
        return cls(normalized)


class AbsoluteResize(BaseModel):
    """按绝对尺寸缩放，0 表示该方向未指定"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["absolute"] = "absolute"
    width: int = Field(ge=0)
    height: int = Field(ge=0)


class ScaleResize(BaseModel):
    """按比例缩放"""

    model_config = ConfigDict(frozen=True)

    kind: Literal["scale"] = "scale"
    factor: float = Field(gt=0, allow_inf_nan=False)


ResizeMode = AbsoluteResize | ScaleResize


class ProcessingConfig(BaseModel):
    """单次图像变换配置

    构造后不可变，批量处理时在所有工作线程之间只读共享。
    """

    model_config = ConfigDict(frozen=True)

    # 尺寸设置
    width: int = Field(
        0, ge=0, le=ValidationLimits.MAX_DIMENSION, description="目标宽度，0为自动"
    )
    height: int = Field(
        0, ge=0, le=ValidationLimits.MAX_DIMENSION, description="目标高度，0为自动"
    )
    scale: float = Field(
        0.0, ge=0.0, allow_inf_nan=False, description="缩放比例，非零时优先于宽高"
    )
    keep_aspect: bool = Field(True, description="保持宽高比")
    algorithm: ResizeAlgorithm = Field(
        ResizeAlgorithm.LANCZOS3, description="重采样算法"
    )

    # 质量和格式设置
    quality: int = Field(
        QualityDefaults.DEFAULT,
        ge=QualityDefaults.MIN_QUALITY,
        le=QualityDefaults.MAX_QUALITY,
        description="有损格式的压缩质量",
    )
    format: OutputFormat | None = Field(None, description="输出格式，None为按目标路径推断")

    # 优化选项
    strip_metadata: bool = Field(False, description="移除元数据")
    progressive: bool = Field(False, description="渐进式JPEG")
    png_optimize: bool = Field(True, description="PNG 优化编码")

    # 输入限制
    max_file_size: int | None = Field(None, gt=0, description="允许处理的最大文件字节数")

    @field_validator("format", mode="before")
    @classmethod
    def parse_format(cls, v: Any) -> Any:
        if v is None or isinstance(v, OutputFormat):
            return v
        if isinstance(v, str):
            try:
                return OutputFormat.parse(v)
            except ValueError:
                supported = ", ".join(f.value for f in OutputFormat)
                raise ValueError(
                    f"不支持的输出格式: {v}，支持的格式: {supported}"
                ) from None
        return v

    @field_validator("algorithm", mode="before")
    @classmethod
    def parse_algorithm(cls, v: Any) -> Any:
        if isinstance(v, str) and not isinstance(v, ResizeAlgorithm):
            normalized = v.strip().lower()
            # 兼容 "lanczos" 写法
            return "lanczos3" if normalized == "lanczos" else normalized
        return v

    @property
    def requests_resize(self) -> bool:
        """是否请求了尺寸调整"""
        return self.width > 0 or self.height > 0 or self.scale > 0

    @property
    def resize_mode(self) -> ResizeMode | None:
        """由配置推导缩放模式，比例优先"""
        if self.scale > 0:
            return ScaleResize(factor=self.scale)
        if self.width > 0 or self.height > 0:
            return AbsoluteResize(width=self.width, height=self.height)
        return None

    def validate(self, require_resize: bool = False) -> None:  # type: ignore[override]
        """检查配置是否有效，无副作用

        质量超出 [1, 100] 时直接拒绝而不是静默截断。

        Args:
            require_resize: 调用路径是否要求指定尺寸（resize、batch 命令）

        Raises:
            ValidationError: 配置无效时
        """
        from ..exceptions import ValidationError

        if not (
            QualityDefaults.MIN_QUALITY <= self.quality <= QualityDefaults.MAX_QUALITY
        ):
            raise ValidationError(f"质量参数必须在 1-100 之间，当前值: {self.quality}")

        limit = ValidationLimits.MAX_DIMENSION
        if self.width > limit or self.height > limit:
            raise ValidationError(
                f"尺寸超过限制 {limit:,} 像素: {self.width}x{self.height}"
            )

        if self.width < 0 or self.height < 0:
            raise ValidationError(f"尺寸不能为负数: {self.width}x{self.height}")

        if self.scale < 0 or not math.isfinite(self.scale):
            raise ValidationError(f"缩放比例无效: {self.scale}")

        if require_resize and not self.requests_resize:
            raise ValidationError("必须至少指定宽度、高度或缩放比例中的一项")
