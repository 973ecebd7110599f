"""图像加载模块。

把文件或内存中的字节解码为 Pillow 图像对象。
"""

from io import BytesIO
from pathlib import Path

from PIL import Image

from ..exceptions import DecodeError, SourceNotFoundError, handle_image_errors
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter


logger = get_logger()


class RasterLoader:
    """图像加载器

    解码失败是永久性的，不做重试。
    """

    def read_source(self, path: str | Path) -> bytes:
        """读取源文件字节

        Raises:
            SourceNotFoundError: 文件不存在时
            FileIOError: 读取失败时
        """
        path = Path(path)
        if not path.exists():
            raise SourceNotFoundError(MessageFormatter.file_not_found(path), path)
        if not path.is_file():
            raise SourceNotFoundError(f"输入路径不是文件: {path}", path)

        return self._read_bytes(path)

    @handle_image_errors("读取文件")
    def _read_bytes(self, path: Path) -> bytes:
        return path.read_bytes()

    def load(self, path: str | Path) -> Image.Image:
        """从文件加载图像

        Args:
            path: 图像文件路径

        Returns:
            Image.Image: 已完成解码的图像

        Raises:
            SourceNotFoundError: 文件不存在时
            DecodeError: 数据无法解码时
        """
        path = Path(path)
        logger.debug(f"加载图像: {path}")
        data = self.read_source(path)
        return self.load_from_bytes(data, source=path)

    @handle_image_errors("图像解码", stage_error=DecodeError)
    def load_from_bytes(self, data: bytes, source: Path | None = None) -> Image.Image:
        """从内存字节解码图像

        Args:
            data: 编码后的图像数据
            source: 数据来源，仅用于日志

        Returns:
            Image.Image: 已完成解码的图像
        """
        if not data:
            raise DecodeError("图像数据为空", source)

        img = Image.open(BytesIO(data))
        # Image.open 是惰性的，强制解码以便在加载阶段暴露损坏的数据
        img.load()

        width, height = img.size
        logger.info(
            f"已加载图像{f' {source}' if source else ''}: "
            f"{width}x{height} 像素, 格式: {img.format}, 颜色模式: {img.mode}"
        )
        return img
