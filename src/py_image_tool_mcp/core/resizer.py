"""尺寸调整模块。

计算目标尺寸并按所选重采样算法缩放图像。
"""

import math

from PIL import Image

from ..exceptions import ValidationError
from ..models.constants import ValidationLimits
from ..models.processing_config import (
    AbsoluteResize,
    ResizeAlgorithm,
    ResizeMode,
    ScaleResize,
)
from ..utils.logging_helpers import get_logger


logger = get_logger()


def _round(value: float) -> int:
    """四舍五入（0.5 远离零方向），与 Python 内置的银行家舍入不同"""
    return int(math.floor(value + 0.5))


def compute_target_dimensions(
    src_width: int,
    src_height: int,
    mode: ResizeMode,
    keep_aspect: bool = True,
) -> tuple[int, int]:
    """计算目标尺寸

    规则:
    - 按比例: 宽高同时乘以比例，天然保持宽高比
    - 绝对尺寸且保持宽高比: 只给出一边时按原比例推导另一边；
      两边都给出时缩放到刚好放入该区域（取两个比例中较小者）
    - 绝对尺寸且不保持宽高比: 拉伸到指定尺寸，未指定的一边保持原值

    Args:
        src_width: 原始宽度
        src_height: 原始高度
        mode: 缩放模式
        keep_aspect: 是否保持宽高比

    Returns:
        tuple[int, int]: 目标宽度和高度

    Raises:
        ValidationError: 原始尺寸无效，或结果尺寸为 0 或超出上限时
    """
    if src_width <= 0 or src_height <= 0:
        raise ValidationError(f"原始尺寸无效: {src_width}x{src_height}")

    match mode:
        case ScaleResize(factor=factor):
            target = (_round(src_width * factor), _round(src_height * factor))

        case AbsoluteResize(width=0, height=0):
            target = (src_width, src_height)

        case AbsoluteResize(width=width, height=height) if not keep_aspect:
            target = (width or src_width, height or src_height)

        case AbsoluteResize(width=width, height=0):
            target = (width, _round(src_height * (width / src_width)))

        case AbsoluteResize(width=0, height=height):
            target = (_round(src_width * (height / src_height)), height)

        case AbsoluteResize(width=width, height=height):
            ratio = min(width / src_width, height / src_height)
            target = (_round(src_width * ratio), _round(src_height * ratio))

        case _:
            raise ValidationError(f"未知的缩放模式: {mode!r}")

    new_width, new_height = target
    if new_width <= 0 or new_height <= 0:
        raise ValidationError(
            f"缩放后尺寸无效: {src_width}x{src_height} → {new_width}x{new_height}"
        )

    limit = ValidationLimits.MAX_DIMENSION
    if new_width > limit or new_height > limit:
        raise ValidationError(
            f"缩放后尺寸超过限制 {limit:,} 像素: {new_width}x{new_height}"
        )

    return new_width, new_height


class ImageResizer:
    """图像缩放器

    滤波器只影响速度和质量的取舍，不影响几何计算。
    """

    def __init__(
        self,
        algorithm: ResizeAlgorithm = ResizeAlgorithm.LANCZOS3,
        keep_aspect: bool = True,
    ):
        self.algorithm = algorithm
        self.keep_aspect = keep_aspect

    def compute_target_dimensions(
        self, src_width: int, src_height: int, mode: ResizeMode
    ) -> tuple[int, int]:
        """使用本缩放器的宽高比设置计算目标尺寸"""
        return compute_target_dimensions(src_width, src_height, mode, self.keep_aspect)

    def resize(self, img: Image.Image, mode: ResizeMode) -> Image.Image:
        """按缩放模式调整图像尺寸

        目标尺寸与原尺寸相同时原样返回，不做重采样。

        Args:
            img: 原始图像
            mode: 缩放模式

        Returns:
            Image.Image: 缩放后的图像
        """
        current_size = img.size
        target_size = self.compute_target_dimensions(*current_size, mode)

        if target_size == current_size:
            logger.debug(f"目标尺寸与原尺寸相同 {current_size}，跳过缩放")
            return img

        logger.debug(
            f"缩放图像: {current_size[0]}x{current_size[1]} → "
            f"{target_size[0]}x{target_size[1]}，算法: {self.algorithm.value}"
        )
        return img.resize(target_size, self.algorithm.resample_filter)
