"""重新编码引擎模块。

解码任意图像、按声明类型选择编码器，并以给定质量重新编码。
"""

import asyncio
import io
import math
from numbers import Real

from PIL import Image, ImageOps

from ..config import RecompressDefaults, get_config
from ..exceptions import (
    DecodeError,
    EncodeError,
    InvalidInputError,
    handle_codec_errors,
)
from ..models.constants import OutputCodec, QualityLimits, is_image_mime_type
from ..models.input_image import InputImage
from ..models.recompression_result import RecompressionResult
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter
from .codecs import CodecProcessor, select_codec


logger = get_logger()


def validate_request(mime_type: str, quality: float) -> None:
    """在任何解码工作之前检查前置条件

    Raises:
        InvalidInputError: 声明类型不是 image/*，或质量不在 [0.01, 1.0]
    """
    if not is_image_mime_type(mime_type):
        raise InvalidInputError("not an image", mime_type=mime_type)

    # bool 是 int 的子类，不接受；NaN 的比较结果为假
    if (
        isinstance(quality, bool)
        or not isinstance(quality, Real)
        or math.isnan(quality)
        or not (QualityLimits.MIN_QUALITY <= quality <= QualityLimits.MAX_QUALITY)
    ):
        raise InvalidInputError("quality out of range", mime_type=mime_type)


def quality_from_percent(percent: int) -> float:
    """把 [1, 100] 的滑块值映射为 [0.01, 1.0] 的质量因子"""
    if (
        isinstance(percent, bool)
        or not isinstance(percent, int)
        or not (QualityLimits.MIN_PERCENT <= percent <= QualityLimits.MAX_PERCENT)
    ):
        raise InvalidInputError("quality out of range")
    return percent / QualityLimits.MAX_PERCENT


async def read_input(image: InputImage) -> bytes:
    """读取输入字节，读取失败按无法解码处理

    Raises:
        DecodeError: 来源不存在、无法读取或没有返回字节
    """
    try:
        return await image.read()
    except (OSError, TypeError, ValueError) as e:
        target = image.filename or "<stream>"
        logger.warning(MessageFormatter.operation_failed("读取图像", target, e))
        raise DecodeError(f"读取图像失败: {e}", mime_type=image.mime_type) from e


class Recompressor:
    """图像重新编码器

    只持有不可变配置，每次调用独立分配并释放自己的像素缓冲。
    """

    def __init__(self, defaults: RecompressDefaults | None = None) -> None:
        self.defaults = defaults or get_config().recompress
        self.codec_processor = CodecProcessor(self.defaults)

    async def recompress(
        self, image: InputImage, quality: float
    ) -> RecompressionResult:
        """重新编码一张图像

        Args:
            image: 输入图像
            quality: 质量因子，范围 [0.01, 1.0]

        Returns:
            RecompressionResult: 编码后的字节、输出类型和像素尺寸

        Raises:
            InvalidInputError: 前置条件不满足（不会读取或解码输入）
            DecodeError: 输入无法读取或无法解码
            EncodeError: 编码失败或输出为空
        """
        validate_request(image.mime_type, quality)

        data = await read_input(image)
        return await asyncio.to_thread(
            self.recompress_bytes, data, image.mime_type, quality
        )

    def recompress_sync(
        self, image: InputImage, quality: float
    ) -> RecompressionResult:
        """阻塞版本，供线程环境的调用方使用"""
        return asyncio.run(self.recompress(image, quality))

    def recompress_bytes(
        self, data: bytes, mime_type: str, quality: float
    ) -> RecompressionResult:
        """同步执行解码与编码"""
        validate_request(mime_type, quality)
        codec = select_codec(mime_type)

        with self.decode(data) as img:
            width, height = img.size
            encoded = self.encode(img, codec, quality)

        logger.debug(
            MessageFormatter.recompressed(
                codec.mime_type, width, height, len(data), len(encoded)
            )
        )
        return RecompressionResult(
            encoded_bytes=encoded,
            mime_type=codec.mime_type,
            width=width,
            height=height,
        )

    @handle_codec_errors(DecodeError, "图像解码")
    def decode(self, data: bytes) -> Image.Image:
        """把字节解码为像素，多帧图像只取第一帧"""
        if not data:
            raise DecodeError("输入为空")

        with Image.open(io.BytesIO(data)) as opened:
            opened.load()
            if self.defaults.APPLY_EXIF_ORIENTATION:
                img = ImageOps.exif_transpose(opened)
            else:
                img = opened.copy()

        if img.width < 1 or img.height < 1:
            img.close()
            raise DecodeError(f"图像面积为零: {img.width}×{img.height}")
        return img

    @handle_codec_errors(EncodeError, "图像编码")
    def encode(self, img: Image.Image, codec: OutputCodec, quality: float) -> bytes:
        """以目标编码器和质量编码完整分辨率的像素"""
        prepared = self.codec_processor.prepare_for_codec(img, codec)
        save_params = self.codec_processor.get_save_parameters(codec, quality)

        buffer = io.BytesIO()
        prepared.save(buffer, **save_params)
        encoded = buffer.getvalue()

        if not encoded:
            raise EncodeError(f"{codec.value} 编码结果为空")
        return encoded


_default_recompressor: Recompressor | None = None


def get_recompressor() -> Recompressor:
    """获取使用全局配置的默认重新编码器"""
    global _default_recompressor
    if _default_recompressor is None:
        _default_recompressor = Recompressor()
    return _default_recompressor


async def recompress(image: InputImage, quality: float) -> RecompressionResult:
    """便捷的重新编码函数

    Examples:
        >>> image = InputImage.from_path("photo.jpg")
        >>> result = await recompress(image, 0.5)
        >>> print(result.mime_type, result.width, result.height)
    """
    return await get_recompressor().recompress(image, quality)


def recompress_sync(image: InputImage, quality: float) -> RecompressionResult:
    """便捷的阻塞重新编码函数"""
    return get_recompressor().recompress_sync(image, quality)
