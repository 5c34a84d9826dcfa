#!/usr/bin/env python3
"""图像重新编码演示脚本。

展示 image_recompressor 库的核心功能，包括：
- 不同质量下的重新编码与大小对比
- 声明类型到输出格式的映射（GIF → JPEG）
- 会话工作流：加载、压缩、对比、保存
"""

import asyncio
import io
from pathlib import Path

from PIL import Image, ImageDraw

from image_recompressor import InputImage, recompress
from image_recompressor.workflow import (
    compress_session,
    download_name,
    load_image,
    save_result,
)


def create_sample_image() -> Image.Image:
    """生成一张带渐变和色块的演示图片"""
    img = Image.new("RGB", (800, 600), color="white")
    draw = ImageDraw.Draw(img)
    for y in range(600):
        shade = y * 255 // 599
        draw.line([(0, y), (800, y)], fill=(shade, 120, 255 - shade))
    for i in range(30):
        x, y = (i * 53) % 800, (i * 31) % 600
        draw.ellipse([x, y, x + 90, y + 70], fill=(i * 8 % 256, 200, i * 5 % 256))
    return img


def get_output_dir() -> Path:
    output_dir = Path(__file__).parent.parent / "tmp" / "demo_output"
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir


def encode(img: Image.Image, fmt: str) -> bytes:
    buffer = io.BytesIO()
    img.save(buffer, format=fmt, quality=95)
    return buffer.getvalue()


async def demo_quality_sweep(jpeg_bytes: bytes) -> None:
    print("\n🎯 质量对比 (JPEG 输入)")
    image = InputImage.from_bytes(jpeg_bytes, "image/jpeg", "sample.jpg")
    for quality in (0.1, 0.5, 0.9):
        result = await recompress(image, quality)
        print(
            f"  quality={quality:.1f}: {result.get_size_human():>10} "
            f"{result.width}×{result.height} {result.mime_type}"
        )


async def demo_codec_mapping(img: Image.Image) -> None:
    print("\n🔄 输出格式映射")
    samples = {
        "image/png": encode(img, "PNG"),
        "image/webp": encode(img, "WEBP"),
        "image/gif": encode(img.convert("P"), "GIF"),
    }
    for mime_type, data in samples.items():
        result = await recompress(InputImage.from_bytes(data, mime_type), 0.6)
        print(f"  {mime_type:<11} → {result.mime_type}")


async def demo_session(jpeg_bytes: bytes) -> None:
    print("\n📁 会话工作流")
    session = await load_image(
        InputImage.from_bytes(jpeg_bytes, "image/jpeg", "sample.jpg")
    )
    session = await compress_session(session, 40)
    comparison = session.comparison()
    print(f"  {comparison.get_summary()}")

    saved = await save_result(session, get_output_dir() / download_name(session))
    print(f"  已保存: {saved}")


async def main() -> None:
    img = create_sample_image()
    jpeg_bytes = encode(img, "JPEG")

    await demo_quality_sweep(jpeg_bytes)
    await demo_codec_mapping(img)
    await demo_session(jpeg_bytes)


if __name__ == "__main__":
    asyncio.run(main())
