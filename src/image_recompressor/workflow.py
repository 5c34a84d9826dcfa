"""压缩工作流模块。

加载 → 重新编码 → 对比 → 保存 → 重置。
状态由调用方以 CompressionSession 持有，每一步返回新的会话。
"""

import asyncio
from pathlib import Path

from .config import get_config
from .core.recompressor import get_recompressor, quality_from_percent, read_input
from .exceptions import InvalidInputError
from .models import CompressionSession, InputImage, is_image_mime_type
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter
from .utils.naming_helpers import NamingPolicy, download_filename


logger = get_logger()


def reset_session() -> CompressionSession:
    """创建空会话，质量恢复为默认值"""
    return CompressionSession(
        quality_percent=get_config().recompress.DEFAULT_QUALITY_PERCENT
    )


def _decoded_dimensions(data: bytes) -> tuple[int, int]:
    """按重新编码时的解码方式取尺寸，已应用 EXIF 方向"""
    with get_recompressor().decode(data) as img:
        return img.size


async def load_image(
    image: InputImage, session: CompressionSession | None = None
) -> CompressionSession:
    """加载原图到新会话

    Args:
        image: 输入图像
        session: 当前会话，用于保留质量设置

    Raises:
        InvalidInputError: 声明类型不是 image/*
        DecodeError: 无法读取或解码图像
    """
    if not is_image_mime_type(image.mime_type):
        raise InvalidInputError("not an image", mime_type=image.mime_type)

    data = await read_input(image)
    dimensions = await asyncio.to_thread(_decoded_dimensions, data)

    base = session or reset_session()
    logger.info(
        f"已加载 {image.filename or '<bytes>'} "
        f"[{image.mime_type}] {MessageFormatter.dimensions(*dimensions)}"
    )
    return CompressionSession(
        original_bytes=data,
        mime_type=image.mime_type,
        filename=image.filename,
        original_dimensions=dimensions,
        quality_percent=base.quality_percent,
    )


async def compress_session(
    session: CompressionSession, quality_percent: int | None = None
) -> CompressionSession:
    """以会话中的原图重新编码

    失败时异常向上传播，传入的会话保持不变。

    Args:
        session: 已加载原图的会话
        quality_percent: 质量百分比 1-100，None 使用会话中的值
    """
    if not session.is_loaded:
        raise InvalidInputError("no image loaded")

    percent = session.quality_percent if quality_percent is None else quality_percent
    quality = quality_from_percent(percent)

    result = await get_recompressor().recompress(session.input_image(), quality)
    return session.model_copy(update={"result": result, "quality_percent": percent})


def download_name(
    session: CompressionSession,
    policy: NamingPolicy = NamingPolicy.RESOLVED_CODEC,
) -> str:
    """结果的下载文件名"""
    if session.result is None:
        raise InvalidInputError("no result to name")
    return download_filename(session.filename, session.result.codec, policy)


async def save_result(session: CompressionSession, output_path: str | Path) -> Path:
    """把最近一次结果写入文件"""
    if session.result is None:
        raise InvalidInputError("no result to save")

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    await asyncio.to_thread(output_path.write_bytes, session.result.encoded_bytes)
    logger.info(f"已保存 {output_path} ({session.result.get_size_human()})")
    return output_path
