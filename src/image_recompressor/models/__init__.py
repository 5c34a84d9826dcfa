"""数据模型包。

定义重新编码相关的数据结构和常量。
"""

from .constants import (
    CODEC_BY_MIME_TYPE,
    DEFAULT_CODEC,
    ImageFormats,
    OutputCodec,
    QualityLimits,
    codec_for_mime_type,
    is_image_mime_type,
)
from .input_image import InputImage
from .recompression_result import Comparison, RecompressionResult, format_size
from .session import CompressionSession


__all__ = [
    "CODEC_BY_MIME_TYPE",
    "DEFAULT_CODEC",
    "Comparison",
    "CompressionSession",
    "ImageFormats",
    "InputImage",
    "OutputCodec",
    "QualityLimits",
    "RecompressionResult",
    "codec_for_mime_type",
    "format_size",
    "is_image_mime_type",
]
