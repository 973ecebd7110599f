"""图像元数据模型。

定义图像文件的基础信息和 EXIF 元数据块结构。
"""

from pathlib import Path
from typing import Any

from humanize import naturalsize
from pydantic import BaseModel, Field, computed_field


class BasicImageInfo(BaseModel):
    """基础图片信息"""

    file_path: Path
    file_size: int = Field(description="文件大小（字节）")
    format: str = Field(description="图片格式")
    mode: str = Field(description="颜色模式")
    width: int = Field(description="图片宽度")
    height: int = Field(description="图片高度")
    has_exif: bool = Field(default=False, description="是否包含EXIF元数据")

    @computed_field
    def aspect_ratio(self) -> float:
        """宽高比"""
        return self.width / self.height if self.height > 0 else 0.0

    def get_file_size_human(self) -> str:
        """人性化显示文件大小"""
        return naturalsize(self.file_size, binary=True)


class MetadataBlock(BaseModel):
    """EXIF 元数据块"""

    raw_size: int = Field(ge=0, description="原始 EXIF 数据字节数")
    tags: dict[str, Any] = Field(default_factory=dict, description="标签名到值的映射")

    # 常用字段
    camera_make: str | None = None
    camera_model: str | None = None
    datetime: str | None = None
    orientation: int | None = None
    software: str | None = None

    @computed_field
    def tag_count(self) -> int:
        """标签数量"""
        return len(self.tags)


class ImageInfo(BaseModel):
    """图片信息查询结果"""

    basic_info: BasicImageInfo
    metadata: MetadataBlock | None = None
