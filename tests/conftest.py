"""测试配置文件。

提供测试所需的 fixtures，所有测试图片都在内存中生成。
"""

import io
import random
from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image, ImageDraw

from image_recompressor.config import reset_config
from image_recompressor.core import recompressor as recompressor_module


def _draw_scene(size: tuple[int, int], mode: str = "RGB") -> Image.Image:
    """带渐变和色块的测试图，接近照片的可压缩性"""
    width, height = size
    img = Image.new("RGB", size, color="white")
    draw = ImageDraw.Draw(img)
    for y in range(height):
        shade = int(255 * y / max(1, height - 1))
        draw.line([(0, y), (width, y)], fill=(shade, 128, 255 - shade))
    for i in range(40):
        x, y = (i * 37) % width, (i * 23) % height
        color = (i * 5 % 256, i * 7 % 256, i * 11 % 256)
        draw.ellipse([x, y, x + width // 8, y + height // 8], fill=color)
    return img.convert(mode) if mode != "RGB" else img


def _encode(img: Image.Image, fmt: str, **save_params) -> bytes:
    buffer = io.BytesIO()
    img.save(buffer, format=fmt, **save_params)
    return buffer.getvalue()


@pytest.fixture(autouse=True)
def fresh_config():
    """每个测试使用干净的配置和默认重新编码器"""
    reset_config()
    recompressor_module._default_recompressor = None
    yield
    reset_config()
    recompressor_module._default_recompressor = None


@pytest.fixture
def encode_image() -> Callable[..., bytes]:
    """把 PIL 图片编码为指定格式的字节"""
    return _encode


@pytest.fixture
def scene_image() -> Image.Image:
    return _draw_scene((320, 240))


@pytest.fixture
def jpeg_bytes(scene_image: Image.Image) -> bytes:
    return _encode(scene_image, "JPEG", quality=90)


@pytest.fixture
def png_bytes(scene_image: Image.Image) -> bytes:
    return _encode(scene_image, "PNG")


@pytest.fixture
def webp_bytes(scene_image: Image.Image) -> bytes:
    return _encode(scene_image, "WEBP", quality=90)


@pytest.fixture
def gif_bytes(scene_image: Image.Image) -> bytes:
    return _encode(scene_image.convert("P"), "GIF")


@pytest.fixture
def transparent_png_bytes() -> bytes:
    img = Image.new("RGBA", (64, 48), color=(0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    draw.rectangle([40, 30, 63, 47], fill=(255, 0, 0, 255))
    return _encode(img, "PNG")


@pytest.fixture
def large_jpeg_bytes() -> bytes:
    """800×600 的高质量噪声 JPEG，体积在数百 KB 级别"""
    rng = random.Random(0)
    noise = Image.frombytes("RGB", (800, 600), rng.randbytes(800 * 600 * 3))
    scene = _draw_scene((800, 600))
    return _encode(Image.blend(scene, noise, 0.5), "JPEG", quality=95)


@pytest.fixture
def image_file(tmp_path: Path) -> Callable[[str, bytes], Path]:
    """把字节写入临时目录中的文件"""

    def _write(name: str, data: bytes) -> Path:
        path = tmp_path / name
        path.write_bytes(data)
        return path

    return _write
