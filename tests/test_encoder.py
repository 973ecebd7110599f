"""编码与格式处理测试。"""

from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from py_image_tool_mcp.core.encoder import ImageEncoder
from py_image_tool_mcp.core.formats import FormatProcessor, get_save_parameters
from py_image_tool_mcp.exceptions import UnsupportedFormatError
from py_image_tool_mcp.models import OutputFormat, calculate_savings


def _decode(data: bytes) -> Image.Image:
    img = Image.open(BytesIO(data))
    img.load()
    return img


class TestFormatResolution:
    """输出格式解析测试"""

    def test_explicit_format_wins(self):
        """显式格式优先于扩展名"""
        fmt = FormatProcessor().resolve_format(OutputFormat.WEBP, Path("out.png"), "PNG")
        assert fmt == "WEBP"

    def test_destination_extension(self):
        """未指定格式时按目标扩展名推断"""
        processor = FormatProcessor()
        assert processor.resolve_format(None, Path("out.PNG"), "JPEG") == "PNG"
        assert processor.resolve_format(None, Path("out.tif"), "JPEG") == "TIFF"

    def test_default_is_jpeg(self):
        """无法推断时默认 JPEG"""
        processor = FormatProcessor()
        assert processor.resolve_format(None, Path("out.unknown"), "PNG") == "JPEG"
        assert processor.resolve_format(None, None, None) == "JPEG"

    def test_same_as_input(self):
        """沿用源格式"""
        processor = FormatProcessor()
        assert processor.resolve_format(OutputFormat.SAME_AS_INPUT, None, "GIF") == "GIF"
        assert processor.resolve_format(OutputFormat.SAME_AS_INPUT, None, "MPO") == "JPEG"

    def test_same_as_unknown_input(self):
        """源格式无法写出"""
        with pytest.raises(UnsupportedFormatError):
            FormatProcessor().resolve_format(OutputFormat.SAME_AS_INPUT, None, None)


class TestSaveParameters:
    """编码参数测试"""

    def test_quality_ignored_for_png(self):
        """无损格式忽略质量"""
        params = get_save_parameters("PNG", quality=10)
        assert "quality" not in params
        assert params["compress_level"] == 9
        assert params["optimize"] is True

    def test_png_without_optimize(self):
        """关闭 PNG 优化时使用默认压缩级别"""
        params = get_save_parameters("PNG", png_optimize=False)
        assert params == {"compress_level": 6}

    def test_jpeg_params(self):
        """JPEG 质量与渐进式"""
        params = get_save_parameters("JPEG", quality=60, progressive=True)
        assert params["quality"] == 60
        assert params["progressive"] is True
        assert params["subsampling"] == 2

    def test_metadata_carried_from_info(self):
        """info 中的 EXIF 和 ICC 数据写入输出"""
        info = {"exif": b"Exif\x00\x00data", "icc_profile": b"icc"}
        params = get_save_parameters("WEBP", info=info)
        assert params["exif"] == info["exif"]
        assert params["icc_profile"] == b"icc"

    def test_metadata_not_passed_to_bmp(self):
        """BMP 不写入元数据"""
        params = get_save_parameters("BMP", info={"exif": b"Exif\x00\x00data"})
        assert "exif" not in params


class TestImageEncoder:
    """编码器测试"""

    @pytest.mark.parametrize("fmt", ["JPEG", "PNG", "WEBP", "GIF", "BMP", "TIFF"])
    def test_round_trip_keeps_dimensions(self, fmt):
        """编码后再解码，尺寸保持不变"""
        img = Image.new("RGB", (123, 45), "purple")

        decoded = _decode(ImageEncoder().encode(img, fmt))

        assert decoded.size == (123, 45)
        assert decoded.format == fmt

    def test_transparent_to_jpeg(self):
        """透明图片转 JPEG 时合成到白色背景"""
        img = Image.new("RGBA", (10, 10), (0, 0, 0, 0))

        decoded = _decode(ImageEncoder().encode(img, "JPEG"))

        assert decoded.mode == "RGB"
        r, g, b = decoded.getpixel((5, 5))
        assert min(r, g, b) > 240

    def test_transparency_kept_for_png(self):
        """PNG 保留透明通道"""
        img = Image.new("RGBA", (10, 10), (255, 0, 0, 128))

        decoded = _decode(ImageEncoder().encode(img, "PNG"))

        assert decoded.mode == "RGBA"

    def test_lower_quality_is_smaller(self):
        """有损格式质量越低文件越小"""
        img = Image.effect_noise((200, 200), 64).convert("RGB")
        encoder = ImageEncoder()

        assert len(encoder.encode(img, "JPEG", quality=20)) < len(
            encoder.encode(img, "JPEG", quality=95)
        )

    def test_progressive_jpeg(self):
        """渐进式 JPEG"""
        img = Image.new("RGB", (64, 64), "orange")

        decoded = _decode(ImageEncoder().encode(img, "JPEG", progressive=True))

        assert decoded.info.get("progressive") or decoded.info.get("progression")

    def test_save_writes_file(self, temp_dir):
        """保存返回写入字节数，不留下临时文件"""
        destination = temp_dir / "out.png"

        written = ImageEncoder().save(Image.new("RGB", (20, 20)), destination, "PNG")

        assert written == destination.stat().st_size
        assert [p.name for p in temp_dir.iterdir()] == ["out.png"]

    def test_calculate_savings(self):
        """节省比例限制在 [0, 100]"""
        assert calculate_savings(1000, 1200) == 0
        assert calculate_savings(1000, 250) == 75.0
        assert calculate_savings(0, 10) == 0
        assert ImageEncoder.calculate_savings(1000, 0) == 100.0
