"""元数据处理模块。

读取 EXIF 元数据，并在解码前于字节层面移除 JPEG、PNG、WebP 容器中的元数据段。
"""

import struct
from io import BytesIO
from pathlib import Path
from typing import Any

from PIL import ExifTags, Image, TiffImagePlugin
from PIL.ExifTags import TAGS

from ..exceptions import DecodeError, MetadataReadError, handle_image_errors
from ..models.image_metadata import MetadataBlock
from ..utils.logging_helpers import get_logger
from .loader import RasterLoader


logger = get_logger()

# 解码后图像 info 中属于元数据的键，ICC 色彩配置决定像素含义，予以保留
METADATA_INFO_KEYS = frozenset(
    {"exif", "xmp", "XML:com.adobe.xmp", "comment", "photoshop", "iptc"}
)

# Exif.load 解析损坏数据时可能抛出的异常
_EXIF_PARSE_ERRORS = (SyntaxError, ValueError, EOFError, KeyError, struct.error)

# TIFF 的图像文件目录同时保存尺寸、条带偏移等结构性标签，
# 只有出现以下描述性标签或子目录时才视为携带元数据
_DESCRIPTIVE_TAGS = frozenset(
    {
        ExifTags.Base.ImageDescription,
        ExifTags.Base.Make,
        ExifTags.Base.Model,
        ExifTags.Base.DateTime,
        ExifTags.Base.Software,
        ExifTags.Base.Artist,
        ExifTags.Base.Copyright,
        ExifTags.Base.XMLPacket,
        ExifTags.Base.IPTCNAA,
        ExifTags.IFD.Exif,
        ExifTags.IFD.GPSInfo,
    }
)

# JPEG
_JPEG_SOI = b"\xff\xd8"
_JPEG_STANDALONE_MARKERS = frozenset({0x01, *range(0xD0, 0xD8)})
_JPEG_EOI = 0xD9
_JPEG_SOS = 0xDA
_JPEG_APP1 = 0xE1
_JPEG_APP13 = 0xED
_JPEG_COM = 0xFE
_JPEG_APP1_METADATA_PREFIXES = (
    b"Exif\x00",
    b"http://ns.adobe.com/xap/1.0/\x00",
    b"http://ns.adobe.com/xmp/extension/\x00",
)

# PNG
_PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
_PNG_METADATA_CHUNKS = frozenset({b"eXIf", b"tEXt", b"zTXt", b"iTXt", b"tIME"})

# WebP
_WEBP_METADATA_CHUNKS = frozenset({b"EXIF", b"XMP "})
_VP8X_EXIF_FLAG = 0x08
_VP8X_XMP_FLAG = 0x04


class MalformedContainerError(ValueError):
    """容器结构损坏，无法逐段解析"""


def has_exif_data(img: Image.Image) -> bool:
    """图像是否携带 EXIF，只有结构性标签的 TIFF 不算"""
    if img.info.get("exif"):
        return True
    exif = img.getexif()
    return any(tag in exif for tag in _DESCRIPTIVE_TAGS)


def _strip_jpeg(data: bytes) -> bytes:
    out = bytearray(_JPEG_SOI)
    pos, size = 2, len(data)

    while pos < size:
        if data[pos] != 0xFF or pos + 1 >= size:
            raise MalformedContainerError(f"JPEG 标记错误，偏移 {pos}")

        marker = data[pos + 1]
        if marker == 0xFF:
            # 填充字节
            pos += 1
            continue
        if marker in _JPEG_STANDALONE_MARKERS:
            out += data[pos : pos + 2]
            pos += 2
            continue
        if marker == _JPEG_EOI:
            out += data[pos:]
            break

        if pos + 4 > size:
            raise MalformedContainerError("JPEG 段长度被截断")
        length = int.from_bytes(data[pos + 2 : pos + 4], "big")
        end = pos + 2 + length
        if length < 2 or end > size:
            raise MalformedContainerError(f"JPEG 段长度无效: {length}")

        if marker == _JPEG_SOS:
            # 扫描数据之后不再逐段解析
            out += data[pos:]
            break

        payload = data[pos + 4 : end]
        is_metadata = (
            (marker == _JPEG_APP1 and payload.startswith(_JPEG_APP1_METADATA_PREFIXES))
            or marker == _JPEG_APP13
            or marker == _JPEG_COM
        )
        if not is_metadata:
            out += data[pos:end]
        pos = end

    return bytes(out)


def _strip_png(data: bytes) -> bytes:
    out = bytearray(_PNG_SIGNATURE)
    pos, size = len(_PNG_SIGNATURE), len(data)

    while pos < size:
        if pos + 8 > size:
            raise MalformedContainerError("PNG 数据块头被截断")
        length = int.from_bytes(data[pos : pos + 4], "big")
        chunk_type = data[pos + 4 : pos + 8]
        # 长度 + 类型 + 数据 + CRC
        end = pos + 12 + length
        if end > size:
            raise MalformedContainerError(f"PNG 数据块 {chunk_type!r} 被截断")

        if chunk_type not in _PNG_METADATA_CHUNKS:
            out += data[pos:end]
        pos = end
        if chunk_type == b"IEND":
            break

    return bytes(out)


def _strip_webp(data: bytes) -> bytes:
    body = bytearray(b"WEBP")
    pos, size = 12, len(data)

    while pos < size:
        if pos + 8 > size:
            raise MalformedContainerError("WebP 数据块头被截断")
        fourcc = data[pos : pos + 4]
        length = int.from_bytes(data[pos + 4 : pos + 8], "little")
        # 数据块按偶数字节对齐
        end = pos + 8 + length + (length & 1)
        if pos + 8 + length > size:
            raise MalformedContainerError(f"WebP 数据块 {fourcc!r} 被截断")

        chunk = bytearray(data[pos : min(end, size)])
        if fourcc == b"VP8X" and length >= 1:
            chunk[8] &= ~(_VP8X_EXIF_FLAG | _VP8X_XMP_FLAG) & 0xFF
        if fourcc not in _WEBP_METADATA_CHUNKS:
            body += chunk
        pos = end

    return b"RIFF" + len(body).to_bytes(4, "little") + bytes(body)


def _to_plain_value(value: Any) -> Any:
    """把 EXIF 值转换为可序列化的普通类型"""
    match value:
        case TiffImagePlugin.IFDRational():
            return float(value) if value.denominator else None
        case bytes():
            return value.decode("ascii", errors="replace").rstrip("\x00")
        case str():
            return value.rstrip("\x00")
        case tuple() | list():
            return [_to_plain_value(item) for item in value]
        case _:
            return value


class MetadataHandler:
    """元数据处理器

    读取永不修改输入；移除是尽力而为的，未识别的容器原样通过。
    """

    def __init__(self, loader: RasterLoader | None = None):
        self.loader = loader or RasterLoader()

    # 移除

    def strip_bytes(self, data: bytes) -> bytes:
        """在解码前移除容器中的元数据段

        支持 JPEG（APP1 EXIF/XMP、APP13、COM）、PNG（eXIf、tEXt、zTXt、iTXt、tIME）
        与 WebP（EXIF、XMP 数据块及 VP8X 标志位）。其他格式原样返回，
        由编码器保证不再写入元数据。

        Args:
            data: 编码后的图像数据

        Returns:
            bytes: 移除元数据后的数据
        """
        try:
            if data.startswith(_JPEG_SOI):
                stripped = _strip_jpeg(data)
            elif data.startswith(_PNG_SIGNATURE):
                stripped = _strip_png(data)
            elif data[:4] == b"RIFF" and data[8:12] == b"WEBP":
                stripped = _strip_webp(data)
            else:
                logger.debug("容器格式不支持字节级元数据移除，原样通过")
                return data
        except MalformedContainerError as e:
            # 交由解码阶段报告数据损坏
            logger.warning(f"元数据移除已跳过，容器结构无法解析: {e}")
            return data

        removed = len(data) - len(stripped)
        if removed:
            logger.debug(f"已移除 {removed:,} 字节元数据")
        return stripped

    def strip(self, img: Image.Image) -> Image.Image:
        """移除解码后图像携带的元数据

        返回副本，不修改输入图像；颜色配置文件保留。
        """
        stripped = img.copy()
        stripped.info = {
            key: value
            for key, value in img.info.items()
            if key not in METADATA_INFO_KEYS
        }
        return stripped

    @staticmethod
    def has_metadata(img: Image.Image) -> bool:
        """图像是否携带 EXIF 或 XMP 等元数据"""
        return any(key in img.info for key in METADATA_INFO_KEYS)

    # 读取

    def read(self, path: str | Path) -> MetadataBlock | None:
        """读取文件的 EXIF 元数据

        Returns:
            MetadataBlock | None: 没有元数据段时返回 None

        Raises:
            SourceNotFoundError: 文件不存在时
            DecodeError: 文件不是可识别的图像时
            MetadataReadError: 元数据段损坏时
        """
        data = self.loader.read_source(path)
        return self.read_bytes(data, source=Path(path))

    @handle_image_errors("读取元数据", stage_error=DecodeError)
    def read_bytes(self, data: bytes, source: Path | None = None) -> MetadataBlock | None:
        """从内存字节读取 EXIF 元数据，只解析文件头，不解码像素"""
        with Image.open(BytesIO(data)) as img:
            raw = img.info.get("exif")
            if raw:
                exif = self._parse_exif(raw, source)
                raw_size = len(raw)
            elif has_exif_data(img):
                # TIFF 的 EXIF 标签直接位于图像文件目录中
                exif = img.getexif()
                raw_size = len(exif.tobytes())
            else:
                return None

        return self._build_block(exif, raw_size)

    def _parse_exif(self, raw: bytes, source: Path | None) -> Image.Exif:
        exif = Image.Exif()
        try:
            exif.load(raw)
            # 子目录延迟解析，这里强制读取以暴露损坏数据
            exif.get_ifd(ExifTags.IFD.Exif)
        except _EXIF_PARSE_ERRORS as e:
            raise MetadataReadError(f"EXIF 数据损坏: {e}", source) from e
        return exif

    def _build_block(self, exif: Image.Exif, raw_size: int) -> MetadataBlock:
        tags: dict[str, Any] = {}
        entries = {**exif, **exif.get_ifd(ExifTags.IFD.Exif)}
        for tag_id, value in entries.items():
            if tag_id in (ExifTags.IFD.Exif, ExifTags.IFD.GPSInfo):
                continue
            tags[str(TAGS.get(tag_id, tag_id))] = _to_plain_value(value)

        def text(key: str) -> str | None:
            value = tags.get(key)
            return str(value) if value is not None else None

        orientation = tags.get("Orientation")
        return MetadataBlock(
            raw_size=raw_size,
            tags=tags,
            camera_make=text("Make"),
            camera_model=text("Model"),
            datetime=text("DateTime"),
            orientation=orientation if isinstance(orientation, int) else None,
            software=text("Software"),
        )
