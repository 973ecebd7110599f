"""集成测试。

测试工具集接口、MCP 响应和程序入口的端到端行为。
"""

import sys

import pytest
from PIL import Image

from py_image_tool_mcp.exceptions import SourceNotFoundError, ValidationError
from py_image_tool_mcp.toolkit import ImageToolkit


class TestImageToolkit:
    """图像工具集测试"""

    @pytest.fixture
    def toolkit(self):
        return ImageToolkit(max_workers=2)

    def test_resize_generates_output_name(self, toolkit, sample_jpeg):
        """未指定输出时在输入旁生成文件名，已存在时追加后缀"""
        first = toolkit.resize(sample_jpeg, width=200)
        second = toolkit.resize(sample_jpeg, width=200)

        assert first.output_path == sample_jpeg.parent / "photo_resized.jpg"
        assert second.output_path == sample_jpeg.parent / "photo_resized_1.jpg"
        with Image.open(first.output_path) as img:
            assert img.size == (200, 150)

    def test_resize_to_nested_output(self, toolkit, sample_png, temp_dir):
        """输出目录不存在时自动创建"""
        destination = temp_dir / "a" / "b" / "small.png"

        stats = toolkit.resize(sample_png, destination, scale=0.25)

        assert destination.exists()
        assert (stats.width_after, stats.height_after) == (100, 75)

    def test_resize_stretch(self, toolkit, sample_png, temp_dir):
        """不保持宽高比"""
        stats = toolkit.resize(
            sample_png, temp_dir / "s.png", width=200, height=50, keep_aspect=False
        )

        assert (stats.width_after, stats.height_after) == (200, 50)

    def test_resize_stretch_single_axis(self, toolkit, sample_png, temp_dir):
        """不保持宽高比且只给出宽度时，高度保持原尺寸"""
        stats = toolkit.resize(sample_png, temp_dir / "w.png", width=200, keep_aspect=False)

        assert (stats.width_after, stats.height_after) == (200, 300)

    def test_resize_requires_dimensions(self, toolkit, sample_png):
        """缩放必须指定尺寸"""
        with pytest.raises(ValidationError):
            toolkit.resize(sample_png)

    def test_optimize_keeps_dimensions(self, toolkit, sample_jpeg):
        """优化不改变尺寸"""
        stats = toolkit.optimize(sample_jpeg, quality=40)

        assert stats.output_path.name == "photo_optimized.jpg"
        assert not stats.was_resized
        assert stats.output_size < stats.input_size

    def test_optimize_rejects_dimensions(self, toolkit, sample_jpeg):
        """优化不接受尺寸参数"""
        with pytest.raises(ValidationError, match="width"):
            toolkit.optimize(sample_jpeg, width=100)

    def test_convert(self, toolkit, sample_jpeg):
        """格式转换使用目标格式的扩展名"""
        stats = toolkit.convert(sample_jpeg, "png")

        assert stats.output_path.name == "photo_converted.png"
        assert stats.format_used == "PNG"
        with Image.open(stats.output_path) as img:
            assert img.format == "PNG"

    def test_convert_requires_format(self, toolkit, sample_jpeg):
        """格式转换必须指定格式"""
        with pytest.raises(ValidationError):
            toolkit.convert(sample_jpeg, "")

    def test_missing_input_propagates(self, toolkit, temp_dir):
        """单文件操作的错误原样传播"""
        with pytest.raises(SourceNotFoundError):
            toolkit.optimize(temp_dir / "missing.jpg")

    def test_batch_uses_default_width(self, toolkit, make_image, temp_dir):
        """批量处理未指定尺寸时使用默认宽度"""
        input_dir = temp_dir / "in"
        make_image("a.png", directory=input_dir)

        stats = toolkit.batch(input_dir, temp_dir / "out")

        assert stats.processed_count == 1
        with Image.open(temp_dir / "out" / "a.png") as img:
            assert img.width == 800

    def test_info(self, toolkit, jpeg_with_exif):
        """信息查询"""
        info = toolkit.info(jpeg_with_exif, include_exif=True)

        assert info.basic_info.format == "JPEG"
        assert info.metadata is not None
        assert info.metadata.camera_make == "TestCam"

    def test_invalid_toolkit_settings(self):
        """无效的并发设置"""
        with pytest.raises(ValidationError):
            ImageToolkit(max_workers=-1)
        with pytest.raises(ValidationError):
            ImageToolkit(executor_type="fiber")


class TestMCPServer:
    """MCP服务器功能测试"""

    def test_tools_registered(self):
        """服务器注册的工具"""
        import asyncio

        from fastmcp import Client

        from py_image_tool_mcp.mcp_server import mcp

        async def list_tool_names() -> set[str]:
            async with Client(mcp) as client:
                return {tool.name for tool in await client.list_tools()}

        assert asyncio.run(list_tool_names()) >= {
            "resize_image",
            "optimize_image",
            "convert_image",
            "batch_process",
            "get_image_info",
        }

    def test_stats_response(self, sample_jpeg):
        """单文件结果可 JSON 序列化"""
        import json

        from py_image_tool_mcp.mcp_server import MCPResponseBuilder

        stats = ImageToolkit().resize(sample_jpeg, width=100)
        response = MCPResponseBuilder.stats(stats, str(sample_jpeg))

        assert response["success"] is True
        assert response["width_after"] == 100
        assert response["output_path"].endswith("photo_resized.jpg")
        json.dumps(response)

    def test_batch_response_lists_errors(self, make_image, temp_dir):
        """批量结果逐个列出失败文件"""
        from py_image_tool_mcp.mcp_server import MCPResponseBuilder

        input_dir = temp_dir / "in"
        make_image("ok.png", directory=input_dir)
        (input_dir / "bad.png").write_bytes(b"bad")

        stats = ImageToolkit().batch(input_dir, temp_dir / "out", width=50)
        response = MCPResponseBuilder.batch(stats)

        assert response["processed_count"] == 1
        assert response["failed_count"] == 1
        assert response["errors"][0]["file"].endswith("bad.png")
        assert response["errors"][0]["kind"] == "decode"

    def test_info_response(self, jpeg_with_exif):
        """信息结果包含 EXIF"""
        import json

        from py_image_tool_mcp.mcp_server import MCPResponseBuilder

        info = ImageToolkit().info(jpeg_with_exif, include_exif=True)
        response = MCPResponseBuilder.info(info)

        assert response["width"] == 400
        assert response["exif"]["camera_model"] == "X100"
        json.dumps(response)

    def test_errors_become_responses(self, temp_dir):
        """异常转换为错误响应"""
        from py_image_tool_mcp.mcp_server import _run_tool

        def fail():
            raise SourceNotFoundError("文件不存在", temp_dir / "x.png")

        response = _run_tool("测试", "x.png", fail)

        assert response["success"] is False
        assert response["error_type"] == "invalid_parameter"
        assert response["details"]["file_path"].endswith("x.png")


class TestEntryPoint:
    """程序入口测试"""

    def test_version_flag(self, monkeypatch, capsys):
        """--version 输出版本号"""
        from py_image_tool_mcp import __main__, __version__

        monkeypatch.setattr(sys, "argv", ["py-image-tool-mcp", "--version"])
        __main__.main()

        assert __version__ in capsys.readouterr().out
