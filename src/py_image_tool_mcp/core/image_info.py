"""图片信息提取器。

只读取文件头，获取尺寸、格式、颜色模式和 EXIF 信息，不解码像素。
"""

from io import BytesIO
from pathlib import Path

from PIL import Image

from ..exceptions import DecodeError, handle_image_errors
from ..models.constants import format_from_extension
from ..models.image_metadata import BasicImageInfo, ImageInfo
from ..utils.logging_helpers import get_logger
from .loader import RasterLoader
from .metadata import MetadataHandler, has_exif_data


logger = get_logger()


class ImageInfoExtractor:
    """图片信息提取器"""

    def __init__(self, loader: RasterLoader | None = None) -> None:
        self.loader = loader or RasterLoader()
        self.metadata = MetadataHandler(self.loader)

    def extract(self, file_path: str | Path, include_exif: bool = False) -> ImageInfo:
        """提取图片信息

        Args:
            file_path: 图片文件路径
            include_exif: 是否解析完整的 EXIF 标签

        Returns:
            ImageInfo: 基础信息，以及按需解析的元数据块

        Raises:
            SourceNotFoundError: 文件不存在时
            DecodeError: 文件不是可识别的图像时
            MetadataReadError: 要求解析 EXIF 且 EXIF 损坏时
        """
        file_path = Path(file_path)
        data = self.loader.read_source(file_path)
        basic_info = self._extract_basic_info(data, file_path)

        metadata = None
        if include_exif and basic_info.has_exif:
            metadata = self.metadata.read_bytes(data, source=file_path)

        return ImageInfo(basic_info=basic_info, metadata=metadata)

    @handle_image_errors("读取图片信息", stage_error=DecodeError)
    def _extract_basic_info(self, data: bytes, file_path: Path) -> BasicImageInfo:
        """提取基础图片信息"""
        with Image.open(BytesIO(data)) as img:
            width, height = img.size
            detected_format = (
                img.format or format_from_extension(file_path.suffix) or "UNKNOWN"
            )
            has_exif = has_exif_data(img)

            logger.debug(f"{file_path}: {width}x{height} {detected_format} {img.mode}")
            return BasicImageInfo(
                file_path=file_path,
                file_size=len(data),
                format=detected_format,
                mode=img.mode,
                width=width,
                height=height,
                has_exif=has_exif,
            )
