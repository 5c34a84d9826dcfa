"""核心模块包。

图像重新编码的核心功能：编码器选择与重新编码引擎。
"""

from .codecs import CodecProcessor, select_codec, to_pillow_quality
from .recompressor import (
    Recompressor,
    get_recompressor,
    quality_from_percent,
    read_input,
    recompress,
    recompress_sync,
    validate_request,
)


__all__ = [
    "CodecProcessor",
    "Recompressor",
    "get_recompressor",
    "quality_from_percent",
    "read_input",
    "recompress",
    "recompress_sync",
    "select_codec",
    "to_pillow_quality",
    "validate_request",
]
