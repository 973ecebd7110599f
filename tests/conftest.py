"""测试配置文件。

提供测试所需的fixtures，测试图片在临时目录中即时生成。
"""

import tempfile
from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image, ImageDraw

from py_image_tool_mcp.config import reset_config


ImageFactory = Callable[..., Path]


def _draw_pattern(img: Image.Image) -> None:
    """绘制彩色块，避免纯色图片被压缩得过小"""
    draw = ImageDraw.Draw(img)
    width, height = img.size
    for i in range(20):
        x, y = (i * 37) % width, (i * 23) % height
        color = (i * 13 % 256, i * 7 % 256, i * 29 % 256)
        if img.mode == "RGBA":
            color = (*color, 100 + i * 7)
        draw.rectangle([x, y, x + width // 5, y + height // 5], fill=color)


def make_exif(**tags: object) -> Image.Exif:
    """构造 EXIF 数据，键为标签名"""
    from PIL.ExifTags import Base

    exif = Image.Exif()
    for name, value in tags.items():
        exif[Base[name]] = value
    return exif


@pytest.fixture
def temp_dir():
    """临时目录fixture"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def make_image(temp_dir: Path) -> ImageFactory:
    """生成测试图片的工厂函数"""

    def factory(
        name: str = "sample.png",
        size: tuple[int, int] = (400, 300),
        mode: str = "RGB",
        directory: Path | None = None,
        **save_params: object,
    ) -> Path:
        target_dir = directory or temp_dir
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / name

        img = Image.new(mode, size, color="white" if mode != "RGBA" else (0, 0, 0, 0))
        if mode in ("RGB", "RGBA"):
            _draw_pattern(img)
        img.save(path, **save_params)
        return path

    return factory


@pytest.fixture
def sample_jpeg(make_image: ImageFactory) -> Path:
    """400x300 的 JPEG 图片"""
    return make_image("photo.jpg", quality=95)


@pytest.fixture
def sample_png(make_image: ImageFactory) -> Path:
    """400x300 的 PNG 图片"""
    return make_image("graphic.png")


@pytest.fixture
def exif_bytes() -> bytes:
    """包含相机信息的 EXIF 数据"""
    exif = make_exif(Make="TestCam", Model="X100", Software="pytest", Orientation=1)
    return exif.tobytes()


@pytest.fixture
def jpeg_with_exif(make_image: ImageFactory, exif_bytes: bytes) -> Path:
    """带 EXIF 的 JPEG 图片"""
    return make_image("exif.jpg", exif=exif_bytes)


@pytest.fixture
def corrupt_file(temp_dir: Path) -> Path:
    """扩展名是图片但内容无法解码的文件"""
    path = temp_dir / "broken.jpg"
    path.write_bytes(b"\xff\xd8\xff\xe0 this is not really a jpeg")
    return path


@pytest.fixture(autouse=True)
def fresh_app_config():
    """每个测试结束后重置全局配置"""
    yield
    reset_config()
